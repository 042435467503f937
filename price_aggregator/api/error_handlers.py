from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from price_aggregator.core.exceptions import (
    APIException,
    ValidationException,
    VendorError,
)
from price_aggregator.core.logging import get_logger

logger = get_logger(__name__)


async def handle_api_exception(request: Request, exc: APIException) -> JSONResponse:
    """
    Handle APIException instances.

    Args:
        request: FastAPI request object
        exc: APIException instance

    Returns:
        JSONResponse: `{error, details}` body with the exception's status
    """
    logger.error(
        f"API Exception: {exc.detail}",
        extra={"data": {"status_code": exc.status_code, "error_code": exc.code}}
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_validation_exception(request: Request, exc: ValidationException) -> JSONResponse:
    """Handle missing or empty caller input."""
    logger.warning(
        f"Validation error: {exc.detail}",
        extra={"data": {"field": exc.context.get("field")}}
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_vendor_exception(request: Request, exc: VendorError) -> JSONResponse:
    """
    Handle vendor errors that escaped per-vendor isolation.

    Secrets never appear in the body; only the vendor and the message do.
    """
    logger.error(
        f"Vendor error: {exc.detail}",
        extra={"vendor": exc.vendor, "data": {"original_error": exc.context.get("original_error")}}
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle malformed query parameters."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request parameters", "details": details}
    )


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "An unexpected error occurred", "details": str(exc)}
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers, most specific first."""
    app.add_exception_handler(ValidationException, handle_validation_exception)
    app.add_exception_handler(VendorError, handle_vendor_exception)
    app.add_exception_handler(APIException, handle_api_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_exception)
