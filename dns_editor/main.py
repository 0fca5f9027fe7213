"""
FastAPI application entrypoint for the DNS editor.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dns_editor.api.routes import router as api_router
from dns_editor.core.config import get_settings
from dns_editor.core.errors import DnsEditorError, ValidationError
from dns_editor.core.logging import configure_logging

logger = logging.getLogger(__name__)


async def _handle_dns_editor_error(request: Request, exc: DnsEditorError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "errors": exc.to_errors()},
    )


async def _handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}")
    return await _handle_dns_editor_error(
        request, ValidationError("Invalid request: " + "; ".join(problems))
    )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="DNS Editor",
        version="0.1.0",
        description="Declarative DNS record management with delegated access tokens.",
    )
    app.add_exception_handler(DnsEditorError, _handle_dns_editor_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)

    @app.middleware("http")
    async def _catch_unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error serving %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=500,
                content={"success": False, "errors": [{"message": f"System error: {exc}"}]},
            )

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
