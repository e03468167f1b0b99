from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from inventory_api.core import get_logger
from inventory_api.domain.errors import InventoryError, StoreUnavailable

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})

def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query"))
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))

async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    if isinstance(exc, StoreUnavailable):
        # Already logged with the store's exception; answer generically
        return _failure(exc.status_code, INTERNAL_ERROR_MESSAGE)
    return _failure(exc.status_code, exc.message)

async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(_describe(error) for error in exc.errors())
    logger.info(f"Rejected invalid request to {request.url.path}: {message}")
    return _failure(status.HTTP_400_BAD_REQUEST, message or "Invalid request")

async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return _failure(exc.status_code, "Route not found")
    return _failure(exc.status_code, str(exc.detail))

async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InventoryError, inventory_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
