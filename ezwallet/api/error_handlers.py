"""Error Handlers — global exception handlers for the EZWallet API.

Invariants:
    - EZWalletError → structured JSON with code, message, severity, status class
    - RequestValidationError → 400 with field-level details
    - Exception (catch-all) → 500, never leaks internal details
    - A token rotated before the failure is still returned (cookie + message)

Design Decisions:
    - Three-layer handler: domain (EZWalletError), validation (Pydantic), catch-all (Exception)
    - Client errors log at WARNING, infrastructure errors at ERROR
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from ezwallet.api.session_guard import REFRESHED_TOKEN_MESSAGE, set_rotated_cookie
from ezwallet.core.domain_types import StatusClass
from ezwallet.core.errors import EZWalletError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(EZWalletError)
    async def ezwallet_error_handler(request: Request, exc: EZWalletError):
        """Handle all EZWallet domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"EZWalletError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return _error_response(request, exc.http_status, exc.to_response())


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
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
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, {
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                    "status_class": StatusClass.SERVER_ERROR.value,
                },
            },
        )


def _error_response(request: Request, status_code: int, content: dict) -> JSONResponse:
    """Error body plus the access token rotated earlier in this request, if any."""
    token = getattr(request.state, "rotated_access_token", None)
    if token:
        content["refreshedTokenMessage"] = REFRESHED_TOKEN_MESSAGE
    response = JSONResponse(status_code=status_code, content=content)
    if token:
        set_rotated_cookie(response, token)
    return response


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.WARNING.value,
            "status_class": StatusClass.CLIENT_ERROR.value,
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
