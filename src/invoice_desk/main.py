"""
Invoice Desk - Main Application
===============================

Invoicing back office acting as a thin client to the upstream invoicing API.

Modules:
- Workflow: invoice workflow state, SLA tracking and transitions

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and the SLA evaluator
- Infrastructure: Invoicing API client and gateways
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from invoice_desk import __version__
from invoice_desk.config import settings
from invoice_desk.core import ApplicationException
from invoice_desk.infrastructure.api_client import close_api_client, init_api_client
from invoice_desk.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from invoice_desk.shared.infrastructure.logging import get_logger, setup_logging
from invoice_desk.workflow.interfaces import workflow_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Create the shared invoicing API client

    SHUTDOWN:
    1. Close the API client
    """
    setup_logging(level=settings.log_level, environment=settings.environment)
    logger.info("Starting Invoice Desk", extra={
        "version": settings.app_version,
        "environment": settings.environment,
        "api_base_url": settings.api_base_url
    })

    init_api_client()
    app.state.settings = settings

    logger.info("Invoice Desk started successfully")

    yield  # Application runs here

    logger.info("Shutting down Invoice Desk")
    await close_api_client()
    logger.info("Invoice Desk shutdown complete")


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    application = FastAPI(
        title="Invoice Desk API",
        description="""
        ## Invoicing Back Office

        Thin client over the invoicing API with invoice workflow SLA tracking.

        **Endpoints:**
        - `GET /invoices` - Invoices with SLA badges
        - `GET /invoices/{id}/workflow` - Workflow, history, transitions and SLA status
        - `POST /invoices/{id}/workflow/transition` - Apply a transition
        - `POST /invoices/bulk_transition` - Transition several invoices

        **SLA warning window:** 2 hours before the deadline.
        """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # === CORS Middleware ===
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Added last so it runs first and the correlation id is set for logging
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(CorrelationIDMiddleware)
    application.add_exception_handler(ApplicationException, application_exception_handler)
    application.add_exception_handler(Exception, global_exception_handler)

    application.include_router(workflow_router)

    @application.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for load balancers and orchestrators."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": {
                "api_base_url": settings.api_base_url
            }
        }

    @application.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": "Invoice Desk",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "modules": {
                "workflow": {
                    "prefix": "/invoices",
                    "endpoints": [
                        "GET /invoices - List invoices with SLA status",
                        "GET /invoices/{id}/workflow - Get workflow page data",
                        "POST /invoices/{id}/workflow/transition - Apply transition",
                        "POST /invoices/bulk_transition - Bulk transition"
                    ]
                }
            }
        }

    return application


app = create_app()


# === Development Entry Point ===

def run() -> None:
    import uvicorn

    uvicorn.run(
        "invoice_desk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
