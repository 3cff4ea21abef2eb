# =============================================================================
# dashh_core/errors/handlers.py
# Page-level error reporting for the Streamlit views
# =============================================================================

from __future__ import annotations
import traceback
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar
import streamlit as st

from dashh_core.logging import get_logger
from .exceptions import DashhError

logger = get_logger(__name__)

T = TypeVar("T")


def _describe(error: Exception, user_message: Optional[str]) -> Tuple[str, str, Dict[str, Any], bool]:
    """(message, code, details, recoverable) for any exception."""
    if isinstance(error, DashhError):
        return user_message or error.message, error.code, error.details, error.recoverable
    return user_message or str(error), "UNKNOWN", {"traceback": traceback.format_exc()}, True


def handle_error(
    error: Exception,
    show_user_message: bool = True,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> None:
    """
    Log an exception raised in a page and show it as an st.error banner.

    DashhError subclasses supply their own code and details; anything else
    is logged with its traceback. Non-recoverable errors (configuration)
    get the "Critical Error" banner. With debug_mode on, the details are
    shown in an expander under the banner.
    """
    message, code, details, recoverable = _describe(error, user_message)

    if log_error:
        logger.error(
            f"[{code}] {message}",
            extra={"details": details},
            exc_info=not isinstance(error, DashhError),
        )

    if not show_user_message:
        return

    if recoverable:
        st.error(f"Error: {message}")
    else:
        st.error(f"Critical Error: {message}. Please check the app configuration.")

    if details and st.session_state.get("debug_mode", False):
        with st.expander("Error Details", expanded=False):
            st.json(details)


def safe_execute(
    func: Callable[..., T],
    *args,
    default: Optional[T] = None,
    error_message: Optional[str] = None,
    reraise: bool = False,
    **kwargs,
) -> Optional[T]:
    """
    Call func for a page; on failure show error_message and return default.

        summary = safe_execute(storage_by_category, files,
                               error_message="Could not build the storage breakdown")
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        handle_error(e, user_message=error_message)
        if reraise:
            raise
        return default


class ErrorContext:
    """
    Report failures inside a `with` block as "Error during: <operation>".

    Used around single widgets (a file preview, a download) so one broken
    file does not take the page down. recoverable=False reports and then
    lets the exception through.
    """

    def __init__(self, operation: str, recoverable: bool = True):
        self.operation = operation
        self.recoverable = recoverable

    def __enter__(self) -> ErrorContext:
        logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            logger.debug(f"Completed: {self.operation}")
            return False

        if isinstance(exc_val, DashhError):
            handle_error(exc_val)
        else:
            handle_error(exc_val, user_message=f"Error during: {self.operation}")
        return self.recoverable
