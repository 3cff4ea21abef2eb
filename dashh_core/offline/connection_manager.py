# =============================================================================
# dashh_core/offline/connection_manager.py
# Backend Mode Tracking (remote vs. local fallback)
# =============================================================================
"""
ConnectionManager - tracks whether a session talks to the hosted backend or
has fallen back to local storage.

Features:
- Consecutive backend-failure counting with a configurable threshold
- Sticky fallback: once tripped, stays local until reset()
- Event callbacks for mode changes

Connectivity is learned from the outcome of real requests, not probed. One
instance belongs to one persistence facade (one browser session).
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from dashh_core.logging import get_logger

logger = get_logger(__name__)


class ConnectionStatus(Enum):
    """Backend mode of a session."""
    REMOTE = "remote"                   # Hosted backend in use
    LOCAL_FALLBACK = "local_fallback"   # Sticky local storage


@dataclass
class ConnectionState:
    """Current mode with failure bookkeeping."""
    status: ConnectionStatus = ConnectionStatus.REMOTE
    consecutive_failures: int = 0
    last_failure: Optional[datetime] = None
    last_success: Optional[datetime] = None
    fallback_since: Optional[datetime] = None
    error_message: Optional[str] = None


class ConnectionManager:
    """
    Per-session fallback state machine.

    Usage:
        manager = ConnectionManager(threshold=1)
        if manager.is_local:
            # use the local store
        else:
            # call the backend, then record_success() / record_failure(msg)
    """

    def __init__(self, threshold: int = 1):
        """
        Args:
            threshold: consecutive backend failures that trip the fallback
        """
        self.threshold = max(1, int(threshold))
        self._state = ConnectionState()
        self._callbacks: List[Callable[[ConnectionState], None]] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def is_remote(self) -> bool:
        return self._state.status == ConnectionStatus.REMOTE

    @property
    def is_local(self) -> bool:
        return self._state.status == ConnectionStatus.LOCAL_FALLBACK

    def record_success(self) -> None:
        """A backend call succeeded (or failed for a domain reason)."""
        self._state.consecutive_failures = 0
        self._state.last_success = datetime.now()

    def record_failure(self, error_message: Optional[str] = None) -> bool:
        """
        Count a backend failure.

        Returns:
            True if this failure tripped the fallback
        """
        self._state.consecutive_failures += 1
        self._state.last_failure = datetime.now()
        self._state.error_message = error_message

        if self.is_local:
            return False
        if self._state.consecutive_failures >= self.threshold:
            self._switch(ConnectionStatus.LOCAL_FALLBACK)
            return True
        logger.warning(
            f"Backend failure {self._state.consecutive_failures}/{self.threshold}: {error_message}"
        )
        return False

    def force_local(self, error_message: Optional[str] = None) -> None:
        """Trip the fallback immediately."""
        self._state.error_message = error_message
        if not self.is_local:
            self._switch(ConnectionStatus.LOCAL_FALLBACK)

    def reset(self) -> None:
        """Back to the hosted backend with a clean failure count."""
        old_status = self._state.status
        self._state = ConnectionState()
        if old_status != self._state.status:
            logger.info("Backend mode reset to remote")
            self._notify_callbacks()

    def _switch(self, status: ConnectionStatus) -> None:
        old_status = self._state.status
        self._state.status = status
        if status == ConnectionStatus.LOCAL_FALLBACK:
            self._state.fallback_since = datetime.now()
            logger.warning(
                f"Falling back to local storage for data persistence "
                f"({self._state.error_message})"
            )
        logger.info(f"Backend mode changed: {old_status.value} -> {status.value}")
        self._notify_callbacks()

    def register_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """
        Register a callback for mode changes.

        Args:
            callback: Function called with ConnectionState when the mode changes
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in self._callbacks:
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in connection callback: {e}")

    def get_status_display(self) -> dict:
        """Get status information for UI display."""
        return {
            "status": self._state.status.value,
            "is_remote": self.is_remote,
            "failures": self._state.consecutive_failures,
            "threshold": self.threshold,
            "fallback_since": (
                self._state.fallback_since.isoformat() if self._state.fallback_since else None
            ),
            "error": self._state.error_message,
        }
