"""Pytest fixtures for Invoice Desk tests."""

from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from invoice_desk.infrastructure.api_client import ApiClient
from invoice_desk.main import app
from invoice_desk.workflow.application import WorkflowApplicationService
from invoice_desk.workflow.infrastructure import InvoiceService, WorkflowService
from invoice_desk.workflow.interfaces.controllers import get_now, get_workflow_service

BASE_URL = "http://invoicing.test/api/v1"


@pytest.fixture
def base_url() -> str:
    """Return the upstream API base URL used by the tests."""
    return BASE_URL


@pytest.fixture
def api_token() -> str:
    """Return a test bearer token."""
    return "test_token_123"


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation instant: 2024-01-15 10:00 UTC."""
    return datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def workflow_with_sla() -> dict[str, Any]:
    """Entered 08:00, deadline 12:00 (2 hours left at 10:00)."""
    return {
        "entered_current_state_at": "2024-01-15 08:00:00 UTC",
        "sla_deadline": "2024-01-15 12:00:00 UTC",
        "is_overdue": False,
    }


@pytest.fixture
def overdue_workflow() -> dict[str, Any]:
    """Deadline one hour before now."""
    return {
        "entered_current_state_at": "2024-01-14T08:00:00Z",
        "sla_deadline": "2024-01-15T09:00:00Z",
        "is_overdue": True,
    }


@pytest.fixture
def warning_workflow() -> dict[str, Any]:
    """Deadline 30 minutes after now."""
    return {
        "entered_current_state_at": "2024-01-15T08:00:00Z",
        "sla_deadline": "2024-01-15T10:30:00Z",
        "is_overdue": False,
    }


@pytest.fixture
def workflow_without_sla() -> dict[str, Any]:
    """Workflow with no deadline."""
    return {"entered_current_state_at": "2024-01-15T08:00:00Z"}


@pytest.fixture
def mock_invoice() -> dict[str, Any]:
    """Invoice with a 6 hour SLA window, 4 hours left at 10:00."""
    return {
        "id": 1,
        "invoice_number": "INV-001",
        "status": "pending_review",
        "workflow": {
            "entered_current_state_at": "2024-01-15T08:00:00Z",
            "sla_deadline": "2024-01-15T14:00:00Z",
            "is_overdue": False,
        },
    }


@pytest.fixture
async def api_client(base_url: str):
    """Create an ApiClient pointed at the mocked upstream."""
    client = ApiClient(base_url=base_url, timeout=5.0)
    yield client
    await client.close()


@pytest.fixture
def http_client(base_url: str, now: datetime):
    """TestClient with a fixed clock and services bound to the mocked upstream."""

    async def override_workflow_service():
        async with ApiClient(base_url=base_url, timeout=5.0) as api:
            invoices = InvoiceService(api)
            yield WorkflowApplicationService(invoices, WorkflowService(api, invoices))

    app.dependency_overrides[get_now] = lambda: now
    app.dependency_overrides[get_workflow_service] = override_workflow_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(api_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_token}"}
