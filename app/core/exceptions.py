"""Application-level exceptions and FastAPI exception handlers."""


import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class BadRequestError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=400, code="BAD_REQUEST")

class ConflictError(AppException):
    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message, status_code=409, code=code)

# ---------------------------------------------------------------------------
# Policy expiration monitor
# ---------------------------------------------------------------------------

class DataAccessError(AppException):
    """The database could not be read or written."""

    def __init__(self, message: str, operation: str = "unknown"):
        self.operation = operation
        super().__init__(message, status_code=503, code="DATA_ACCESS_ERROR")

class DuplicateRecordError(ConflictError):
    """Another writer already recorded this policy's expiration. Benign."""

    def __init__(self, policy_id: str):
        self.policy_id = policy_id
        super().__init__(
            f"Expiration of policy '{policy_id}' is already recorded",
            code="DUPLICATE_RECORD",
        )

class ReconciliationPassFailed(AppException):
    """One reconciliation pass aborted; nothing from it was committed."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(
            f"Policy expiration pass failed: {cause}",
            status_code=500,
            code="RECONCILIATION_PASS_FAILED",
        )

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
