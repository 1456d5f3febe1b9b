# 📄 File: plantscan/shared/core/exceptions.py
# 🧭 Purpose (Layman Explanation):
# This file defines the special error types our PlantScan app uses to describe
# what went wrong (storage broke, daily scan limit reached, AI call failed).
# 🧪 Purpose (Technical Summary):
# Custom exception hierarchy with error codes, structured details and
# dictionary serialization for callers that surface errors to the UI.
# 🔗 Dependencies:
# typing
# 🔄 Connected Modules / Calls From:
# Storage adapters, cache store, rate limiter, domain repositories, services

from typing import Any, Dict, Optional


class PlantScanException(Exception):
    """
    Base exception class for PlantScan.
    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__.upper()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# VALIDATION & AUTHENTICATION EXCEPTIONS
# =============================================================================

class ValidationError(PlantScanException):
    """
    Exception raised for data validation failures.
    Used when input data doesn't meet required format or constraints.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)

        super().__init__(
            message=message,
            details=details,
            error_code="VALIDATION_ERROR"
        )


class NotAuthenticatedError(PlantScanException):
    """
    Exception raised when an operation needs a signed-in user.
    Used by account operations that act on the signed-in user.
    """

    def __init__(
        self,
        message: str = "No authenticated user",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            details=details,
            error_code="NOT_AUTHENTICATED"
        )


# =============================================================================
# STORAGE & CACHE EXCEPTIONS
# =============================================================================

class StorageError(PlantScanException):
    """
    Exception raised for persistence adapter failures.
    Used for disk, Redis and other backend write/remove errors.
    """

    def __init__(
        self,
        message: str = "Storage error",
        operation: Optional[str] = None,
        key: Optional[str] = None,
        backend: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if key:
            details["key"] = key
        if backend:
            details["backend"] = backend

        super().__init__(
            message=message,
            details=details,
            error_code="STORAGE_ERROR"
        )


class SerializationError(StorageError):
    """Value could not be encoded as JSON."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            message=f"Cannot serialize value for {key}: {reason}",
            operation="serialize",
            key=key
        )
        self.error_code = "SERIALIZATION_ERROR"


class CacheError(PlantScanException):
    """
    Exception raised for cache operation failures.
    Reported to error hooks; the cache store itself never raises it to callers.
    """

    def __init__(
        self,
        message: str = "Cache error",
        operation: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if key:
            details["key"] = key

        super().__init__(
            message=message,
            details=details,
            error_code="CACHE_ERROR"
        )


# =============================================================================
# RATE LIMIT EXCEPTIONS
# =============================================================================

class RateLimitError(PlantScanException):
    """
    Exception raised when rate limits are exceeded.
    Used for the daily scan budget.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        limit: Optional[int] = None,
        window: Optional[str] = None,
        reset_time: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if limit:
            details["limit"] = limit
        if window:
            details["window"] = window
        if reset_time:
            details["reset_time"] = reset_time

        super().__init__(
            message=message,
            details=details,
            error_code="RATE_LIMIT_EXCEEDED"
        )
        self.limit = limit
        self.reset_time = reset_time


class ScanLimitExceededError(RateLimitError):
    """Raised when the daily scan budget is used up."""

    def __init__(self, limit: int, reset_time: str):
        super().__init__(
            message=(
                f"You've used all {limit} scans for today. "
                f"Your limit will reset in {reset_time}."
            ),
            limit=limit,
            window="day",
            reset_time=reset_time
        )
        self.error_code = "SCAN_LIMIT_EXCEEDED"


# =============================================================================
# EXTERNAL SERVICE EXCEPTIONS
# =============================================================================

class ExternalServiceError(PlantScanException):
    """
    Exception raised when external service calls fail.
    Used for the plant data API, location provider and AI analyzer.
    """

    def __init__(
        self,
        message: str = "External service error",
        service: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if service:
            details["service"] = service

        super().__init__(
            message=message,
            details=details,
            error_code="EXTERNAL_SERVICE_ERROR"
        )


class ScanAnalysisError(ExternalServiceError):
    """Raised when the AI analyzer fails for a scan."""

    def __init__(
        self,
        message: str = "Plant analysis failed",
        scan_id: Optional[str] = None,
        reason: Optional[str] = None
    ):
        details: Dict[str, Any] = {}
        if scan_id:
            details["scan_id"] = scan_id
        if reason:
            details["reason"] = reason

        super().__init__(message=message, service="disease_analyzer", details=details)
        self.error_code = "SCAN_ANALYSIS_FAILED"
        self.scan_id = scan_id
