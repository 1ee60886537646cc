"""
Invoicing API Client Infrastructure
====================================

Async HTTP client for the upstream invoicing API.

All service objects (InvoiceService, WorkflowService) talk to the API through
this client so that authentication headers, logging and the mapping from
HTTP status codes to typed exceptions live in one place.

Lifecycle mirrors the other infrastructure singletons: call
init_api_client() during startup and close_api_client() during shutdown.
"""

import json
import time
from typing import Any, Optional

import httpx

from invoice_desk.config import settings
from invoice_desk.core import (
    ApiError,
    ApiTimeoutError,
    AuthenticationError,
    NotFoundError,
    ValidationError,
)
from invoice_desk.shared.infrastructure.logging import correlation_id_var, get_logger

logger = get_logger(__name__)

_BODY_LOG_LIMIT = 500


class ApiClient:
    """
    Thin async wrapper around httpx for the invoicing API.

    Every request forwards the caller's bearer token; the client never
    stores credentials of its own.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": f"{settings.app_name}/{settings.app_version}",
            },
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    # ========== Verb helpers ==========

    async def get(self, endpoint: str, token: Optional[str] = None, params: Optional[dict] = None) -> Any:
        return await self.request("GET", endpoint, token=token, params=params)

    async def post(self, endpoint: str, token: Optional[str] = None, body: Optional[dict] = None) -> Any:
        return await self.request("POST", endpoint, token=token, body=body if body is not None else {})

    async def put(self, endpoint: str, token: Optional[str] = None, body: Optional[dict] = None) -> Any:
        return await self.request("PUT", endpoint, token=token, body=body if body is not None else {})

    async def patch(self, endpoint: str, token: Optional[str] = None, body: Optional[dict] = None) -> Any:
        return await self.request("PATCH", endpoint, token=token, body=body if body is not None else {})

    async def delete(self, endpoint: str, token: Optional[str] = None) -> Any:
        return await self.request("DELETE", endpoint, token=token)

    # ========== Core request ==========

    async def request(
        self,
        method: str,
        endpoint: str,
        token: Optional[str] = None,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Send an authenticated request and decode the response.

        Args:
            method: HTTP method
            endpoint: Path relative to the API base URL
            token: Bearer token forwarded from the current user
            body: JSON body
            params: Query parameters

        Returns:
            Decoded JSON (dict or list), raw text for non-JSON bodies,
            or None for empty bodies.

        Raises:
            AuthenticationError: 401 from the API
            NotFoundError: 404 from the API
            ValidationError: 422 from the API
            ApiTimeoutError: The API did not answer in time
            ApiError: Any other failure
        """
        headers = self._build_headers(token)
        url = f"{self.base_url}{endpoint}"
        start = time.perf_counter()

        logger.info(
            "API request",
            extra={"method": method, "url": url, "has_body": body is not None}
        )

        try:
            response = await self._client.request(
                method,
                endpoint,
                headers=headers,
                json=body,
                params=params,
            )
        except httpx.TimeoutException as e:
            logger.error("API request timed out", extra={"method": method, "url": url, "error": str(e)})
            raise ApiTimeoutError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error("API request failed", extra={"method": method, "url": url, "error": str(e)})
            raise ApiError(f"Network error: {e}") from e

        logger.info(
            "API response",
            extra={
                "method": method,
                "url": url,
                "status_code": response.status_code,
                "latency_ms": round((time.perf_counter() - start) * 1000, 2),
                "body_preview": response.text[:_BODY_LOG_LIMIT],
            }
        )

        return self._handle_response(response)

    def _build_headers(self, token: Optional[str]) -> dict:
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        correlation_id = correlation_id_var.get()
        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id
        return headers

    def _handle_response(self, response: httpx.Response) -> Any:
        status_code = response.status_code

        if 200 <= status_code < 300:
            return self._parse_body(response)
        if status_code == 401:
            raise AuthenticationError("Authentication failed. Please login again.", status_code)
        if status_code == 403:
            raise ApiError("You do not have permission to perform this action.", status_code)
        if status_code == 404:
            raise NotFoundError("The requested resource was not found.", status_code)
        if status_code == 422:
            errors = self._parse_validation_errors(response)
            logger.info("API validation failed", extra={"errors": errors})
            raise ValidationError("Validation failed", errors)
        if status_code >= 500:
            raise ApiError("Server error. Please try again later.", status_code)
        raise ApiError(
            f"Unexpected response: {status_code} - {response.reason_phrase}",
            status_code
        )

    def _parse_body(self, response: httpx.Response) -> Any:
        if not response.content or not response.text.strip():
            return None
        try:
            return response.json()
        except json.JSONDecodeError as e:
            logger.error("Failed to parse response JSON", extra={"error": str(e)})
            return response.text

    def _parse_validation_errors(self, response: httpx.Response) -> Any:
        body = self._parse_body(response)
        if not isinstance(body, dict):
            return {}
        return body.get("errors") or body.get("error") or {}


# Global client
_api_client: ApiClient | None = None


def init_api_client(**kwargs: Any) -> ApiClient:
    """
    Create the shared API client.

    Should be called during application startup.
    """
    global _api_client
    _api_client = ApiClient(**kwargs)
    return _api_client


def get_api_client() -> ApiClient:
    """
    Get the shared API client.

    Raises:
        RuntimeError: If the client has not been initialized
    """
    if _api_client is None:
        raise RuntimeError("API client not initialized. Call init_api_client() first.")
    return _api_client


async def close_api_client() -> None:
    """Close the shared API client. Safe to call when not initialized."""
    global _api_client
    if _api_client is not None:
        await _api_client.close()
        _api_client = None
