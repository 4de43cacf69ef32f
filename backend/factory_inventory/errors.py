import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_AUTH_FAILURE = "Invalid username or password"


class InventoryError(Exception):
    """Base class for errors raised by the inventory store and session gate"""

    status_code = 400
    kind = "error"

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail


class ValidationError(InventoryError):
    status_code = 422
    kind = "validation_error"


class NotFound(InventoryError):
    status_code = 404
    kind = "not_found"


class AuthFailure(InventoryError):
    status_code = 401
    kind = "auth_failure"

    def __init__(self, detail: str = GENERIC_AUTH_FAILURE):
        super().__init__(detail)


class TransientBackendError(InventoryError):
    status_code = 503
    kind = "backend_unavailable"


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError):
        if isinstance(exc, TransientBackendError):
            logger.warning("Backend unavailable on %s %s: %s", request.method, request.url.path, exc.detail)

        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthFailure) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.kind, "detail": exc.detail},
            headers=headers,
        )
