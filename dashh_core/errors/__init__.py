# =============================================================================
# dashh_core/errors/__init__.py
# Centralized Error Handling for Dashh
# =============================================================================

from .exceptions import (
    ErrorKind,
    DashhError,
    AuthenticationError,
    RecordNotFoundError,
    ValidationError,
    FileEncodingError,
    BackendUnavailableError,
    LocalStoreError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    safe_execute,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "ErrorKind",
    "DashhError",
    "AuthenticationError",
    "RecordNotFoundError",
    "ValidationError",
    "FileEncodingError",
    "BackendUnavailableError",
    "LocalStoreError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "safe_execute",
    "ErrorContext",
]
