from fastapi import status
from typing import Any, Dict, Optional


class APIException(Exception):
    """
    Base exception for API errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        code: str = "internal_error",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.detail = detail
        self.code = code
        self.details = details
        self.context = context or {}
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the `{error, details}` response body."""
        return {
            "error": self.detail,
            "details": self.details or self.code,
        }


class ValidationException(APIException):
    """Exception raised when a required caller input is missing or empty."""

    def __init__(
        self,
        detail: str = "Validation error",
        code: str = "validation_error",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        merged_context = {"field": field} if field else {}
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            code=code,
            details=f"'{field}' is required" if field else None,
            context=merged_context
        )


class VendorError(APIException):
    """
    Base exception for vendor-side faults.

    Vendor errors are isolated per vendor: the aggregator (or, for best-effort
    vendors, the adapter itself) logs them and drops that vendor's records.
    """

    def __init__(
        self,
        vendor: str,
        detail: str = "Vendor integration error",
        code: str = "vendor_error",
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        merged_context = {"vendor": vendor}
        if context:
            merged_context.update(context)
        super().__init__(
            status_code=status_code,
            detail=detail,
            code=code,
            details=str(original_exception) if original_exception else None,
            context=merged_context
        )
        self.vendor = vendor
        self.original_exception = original_exception

        if original_exception:
            self.context["original_error"] = str(original_exception)


class AuthConfigError(VendorError):
    """Exception raised when a vendor's credentials are not configured."""

    def __init__(
        self,
        vendor: str,
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            vendor=vendor,
            detail=detail or f"Credentials for vendor '{vendor}' are not configured",
            code="auth_config_error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            context=context
        )


class AuthRequestError(VendorError):
    """Exception raised when a vendor rejects the client-credentials exchange."""

    def __init__(
        self,
        vendor: str,
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            vendor=vendor,
            detail=detail or f"Token request to vendor '{vendor}' failed",
            code="auth_request_error",
            context=context,
            original_exception=original_exception
        )


class VendorRequestError(VendorError):
    """Exception raised when an authenticated vendor call fails."""

    def __init__(
        self,
        vendor: str,
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            vendor=vendor,
            detail=detail or f"Request to vendor '{vendor}' failed",
            code="vendor_request_error",
            context=context,
            original_exception=original_exception
        )


class AdaptorNotFoundError(APIException):
    """Exception raised when no adaptor is registered for a vendor id."""

    def __init__(self, detail: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            code="adaptor_not_found",
            context=context
        )


class AdaptorConfigError(APIException):
    """Exception raised when an adaptor cannot be built from its configuration."""

    def __init__(self, detail: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            code="adaptor_config_error",
            context=context
        )
