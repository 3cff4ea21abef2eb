# =============================================================================
# dashh_core/errors/exceptions.py
# Custom Exception Hierarchy for Dashh
# =============================================================================

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Failure categories carried by exceptions and service results."""
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    LOCAL_STORE = "local_store"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class DashhError(Exception):
    """
    Base exception for all Dashh errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "AUTH_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "DASHH_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# DOMAIN EXCEPTIONS
# =============================================================================

class AuthenticationError(DashhError):
    """Raised when there is no session or the credentials are rejected"""

    kind = ErrorKind.AUTHENTICATION

    def __init__(
        self,
        message: str = "User not authenticated",
        email: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if email:
            details["email"] = email

        super().__init__(
            message=message,
            code="AUTH_001",
            details=details,
            **kwargs,
        )


class RecordNotFoundError(DashhError):
    """Raised when a record id does not resolve under the caller's owner id"""

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str = "File not found",
        record_id: Optional[str] = None,
        collection: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if record_id:
            details["record_id"] = record_id
        if collection:
            details["collection"] = collection

        super().__init__(
            message=message,
            code="DATA_404",
            details=details,
            **kwargs,
        )


class ValidationError(DashhError):
    """Raised when client-side input checks fail"""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field

        super().__init__(
            message=message,
            code="DATA_001",
            details=details,
            **kwargs,
        )


class FileEncodingError(DashhError):
    """Raised when a selected file cannot be read or converted to a data URI"""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        file_name: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if file_name:
            details["file_name"] = file_name

        super().__init__(
            message=message,
            code="UPLOAD_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# INFRASTRUCTURE EXCEPTIONS
# =============================================================================

class BackendUnavailableError(DashhError):
    """Raised when the hosted backend cannot be reached or refuses access"""

    kind = ErrorKind.BACKEND_UNAVAILABLE

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        collection: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        if collection:
            details["collection"] = collection

        super().__init__(
            message=message,
            code="BACKEND_001",
            details=details,
            **kwargs,
        )


class LocalStoreError(DashhError):
    """Raised when the device-local store cannot persist a value"""

    kind = ErrorKind.LOCAL_STORE

    def __init__(
        self,
        message: str = "Could not save to local storage",
        key: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if key:
            details["key"] = key

        super().__init__(
            message=message,
            code="LOCAL_001",
            details=details,
            **kwargs,
        )


class ConfigurationError(DashhError):
    """Raised when configuration is invalid or missing"""

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
