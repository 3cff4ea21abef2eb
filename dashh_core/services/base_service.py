# =============================================================================
# dashh_core/services/base_service.py
# Base Service Class with Common Functionality
# =============================================================================

from __future__ import annotations
from abc import ABC
from typing import Optional, Dict, Any, Callable
from dataclasses import dataclass

from dashh_core.logging import get_logger, LogContext
from dashh_core.errors import DashhError, ErrorKind


@dataclass
class ServiceResult:
    """
    Standard result container for service operations.

    Either a success carrying `data`, or a failure carrying `error` and
    `kind`. Callers check `success` (or truthiness) before reading `data`.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    kind: Optional[ErrorKind] = None
    metadata: Optional[Dict[str, Any]] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, data: Any = None, metadata: Dict[str, Any] = None) -> ServiceResult:
        """Create a successful result"""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(
        cls,
        error: str,
        kind: ErrorKind = ErrorKind.INTERNAL,
        error_code: str = "UNKNOWN",
        metadata: Dict[str, Any] = None
    ) -> ServiceResult:
        """Create a failed result"""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            kind=kind,
            metadata=metadata,
        )

    @classmethod
    def from_exception(cls, e: Exception) -> ServiceResult:
        """Create a failed result from an exception"""
        if isinstance(e, DashhError):
            return cls(
                success=False,
                error=e.message,
                error_code=e.code,
                kind=e.kind,
                metadata=e.details,
            )
        return cls(
            success=False,
            error=str(e),
            error_code="EXCEPTION",
            kind=ErrorKind.INTERNAL,
        )

    @property
    def is_backend_failure(self) -> bool:
        return not self.success and self.kind == ErrorKind.BACKEND_UNAVAILABLE

    def meta(self, key: str, default: Any = None) -> Any:
        return (self.metadata or {}).get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Flat envelope: {"success": True, **data} or {"success": False, "error": ...}"""
        if not self.success:
            return {"success": False, "error": self.error}
        if isinstance(self.data, dict):
            return {"success": True, **self.data}
        return {"success": True, "data": self.data}


class BaseService(ABC):
    """
    Abstract base class for all services.

    Provides common functionality:
    - Logging
    - Error handling
    - Progress callbacks
    - Result standardization
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)
        self._progress_callback: Optional[Callable[[int, str], None]] = None

    def set_progress_callback(
        self,
        callback: Callable[[int, str], None]
    ) -> None:
        """
        Set a callback for progress updates.

        Args:
            callback: Function that takes (percentage: int, message: str)
        """
        self._progress_callback = callback

    def _update_progress(self, percentage: int, message: str = "") -> None:
        """Update progress via callback if set"""
        if self._progress_callback:
            self._progress_callback(percentage, message)

    def log_operation(self, operation: str) -> LogContext:
        """
        Create a logging context for an operation.

        Usage:
            with self.log_operation("Uploading report.pdf"):
                ...
        """
        return LogContext(self.logger, operation)

    def safe_execute(
        self,
        operation: str,
        func: Callable[..., Any],
        *args,
        **kwargs
    ) -> ServiceResult:
        """
        Execute a function with error handling and logging.

        `func` may return a ServiceResult (passed through) or a plain value
        (wrapped with ServiceResult.ok). Dashh errors become failures with
        their own kind; anything else is an INTERNAL failure.
        """
        try:
            result = func(*args, **kwargs)
        except DashhError as e:
            self.logger.warning(f"{operation} failed: {e}")
            return ServiceResult.from_exception(e)
        except Exception as e:
            self.logger.error(f"{operation} failed: {e}", exc_info=True)
            return ServiceResult.from_exception(e)
        if isinstance(result, ServiceResult):
            return result
        return ServiceResult.ok(result)
