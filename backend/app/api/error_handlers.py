"""Error Handlers — global exception handlers for the Grammable API.

Invariants:
    - UnauthenticatedError → 302 redirect to the login path, no error body
    - GrammableError → structured JSON with code, message, severity, status
    - RequestValidationError → field-level error details (400)
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Starlette resolves handlers by exception MRO, so the UnauthenticatedError
      handler wins over the GrammableError one
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from app.api.responses import redirect
from app.config import get_settings
from app.core.errors import GrammableError, ErrorSeverity, UnauthenticatedError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_unauthenticated_handler(app)
    _register_grammable_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_unauthenticated_handler(app: FastAPI) -> None:

    @app.exception_handler(UnauthenticatedError)
    async def unauthenticated_handler(request: Request, exc: UnauthenticatedError):
        """Send anonymous users to the login page."""
        return redirect(get_settings().login_path)


def _register_grammable_error_handler(app: FastAPI) -> None:

    @app.exception_handler(GrammableError)
    async def grammable_error_handler(request: Request, exc: GrammableError):
        """Handle all Grammable domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            f"GrammableError: {exc.message}",
            extra={
                "error_code": exc.code, "path": request.url.path,
                "user_id": exc.context.user_id, "gram_id": exc.context.gram_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle malformed query/form parameters."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all. Never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
