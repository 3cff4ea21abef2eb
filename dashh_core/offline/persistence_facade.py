# =============================================================================
# dashh_core/offline/persistence_facade.py
# Persistence Facade - Single API for Remote/Local Operations
# =============================================================================
"""
PersistenceFacade - the API the pages use for every data operation.

Each call goes to the hosted backend first. A backend failure is retried
against the device-local store, and after `fallback_threshold` consecutive
backend failures the session stays local until initialize(), login(),
register() or logout().

Usage:
------
from dashh_core.offline import PersistenceFacade

facade = PersistenceFacade.from_settings(load_settings())
facade.initialize()

result = facade.login(email, password)
if result:
    files = facade.get_user_files().data

print(facade.is_local)       # True once fallen back
print(facade.get_status())   # dict for the sidebar badge
"""

from __future__ import annotations
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from dashh_core.config import AppSettings
from dashh_core.data.models import AuthUser, FilePayload
from dashh_core.data.remote_service import RemoteDataService
from dashh_core.data.supabase_client import SupabaseDocumentStore
from dashh_core.logging import get_logger
from dashh_core.offline.connection_manager import ConnectionManager, ConnectionState
from dashh_core.offline.local_database import LocalDatabase
from dashh_core.offline.local_service import LocalDataService
from dashh_core.offline.local_store import LocalPersistenceStore
from dashh_core.services.base_service import ServiceResult

logger = get_logger(__name__)


class PersistenceFacade:
    """
    Routes operations between RemoteDataService and LocalDataService.

    One instance per browser session; the fallback flag lives on this
    instance's ConnectionManager.
    """

    def __init__(
        self,
        remote: RemoteDataService,
        local: LocalDataService,
        fallback_threshold: int = 1,
    ):
        self.remote = remote
        self.local = local
        self.connection = ConnectionManager(threshold=fallback_threshold)
        self._counters_stale = False

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        store: Optional[Any] = None,
        database: Optional[LocalDatabase] = None,
    ) -> PersistenceFacade:
        """
        Wire the facade from configuration.

        Raises:
            ConfigurationError: if no store is given and Supabase is not configured
        """
        if store is None:
            store = SupabaseDocumentStore.from_settings(settings)
        if database is None:
            database = LocalDatabase(
                settings.local_db_path,
                prefix=settings.storage_prefix,
                quota_bytes=settings.local_quota_bytes,
            )
        remote = RemoteDataService(store, settings.users_table, settings.files_table)
        local = LocalDataService(LocalPersistenceStore(database))
        return cls(remote, local, fallback_threshold=settings.fallback_threshold)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self.remote.current_user

    @property
    def is_authenticated(self) -> bool:
        return self.remote.is_authenticated

    @property
    def is_local(self) -> bool:
        return self.connection.is_local

    @property
    def counters_stale(self) -> bool:
        return self._counters_stale

    def get_status(self) -> Dict[str, Any]:
        """Status information for UI display."""
        status = self.connection.get_status_display()
        status["authenticated"] = self.is_authenticated
        status["counters_stale"] = self._counters_stale
        return status

    def register_status_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """Register a callback for remote/local mode changes."""
        self.connection.register_callback(callback)

    # =========================================================================
    # ROUTING
    # =========================================================================

    def _run(
        self,
        operation: str,
        remote_call: Callable[[], ServiceResult],
        local_call: Callable[[], ServiceResult],
    ) -> ServiceResult:
        if self.connection.is_local:
            return local_call()

        result = remote_call()
        if not result.is_backend_failure:
            self.connection.record_success()
            return result

        self.connection.record_failure(result.error)
        logger.warning(f"{operation}: backend unavailable, using local storage ({result.error})")
        fallback = local_call()
        fallback.metadata = {**(fallback.metadata or {}), "fallback": True}
        return fallback

    def _track_counters(self, result: ServiceResult) -> ServiceResult:
        if result and result.meta("counters_updated") is False:
            self._counters_stale = True
            logger.warning("User counters not updated; will reconcile on next stats read")
        return result

    # =========================================================================
    # SESSION
    # =========================================================================

    def initialize(self) -> None:
        """Start a fresh session: remote mode, clean failure count."""
        self.connection.reset()
        self._counters_stale = False
        self.local.store.database.initialize()
        logger.info("PersistenceFacade initialized")

    def _after_login(self, result: ServiceResult, name: Optional[str] = None) -> ServiceResult:
        if result and result.meta("degraded"):
            self.connection.force_local(result.meta("reason"))
            ensured = self.local.ensure_profile(result.data, name=name)
            if not ensured:
                logger.error(f"Could not create local profile: {ensured.error}")
        return result

    def login(self, email: str, password: str) -> ServiceResult:
        """Authenticate remotely; auth failures are never retried locally."""
        self.connection.reset()
        self._counters_stale = False
        return self._after_login(self.remote.login(email, password))

    def register(self, email: str, password: str, name: Optional[str] = None) -> ServiceResult:
        self.connection.reset()
        self._counters_stale = False
        return self._after_login(self.remote.register(email, password, name=name), name=name)

    def logout(self) -> ServiceResult:
        result = self.remote.logout()
        self.connection.reset()
        self._counters_stale = False
        return result

    # =========================================================================
    # FILE OPERATIONS
    # =========================================================================

    def upload_file(self, payload: FilePayload) -> ServiceResult:
        return self._track_counters(self._run(
            "Upload",
            lambda: self.remote.upload_file(payload),
            lambda: self.local.upload_file(self.current_user, payload),
        ))

    def get_user_files(self) -> ServiceResult:
        return self._run(
            "Get files",
            self.remote.get_user_files,
            lambda: self.local.get_user_files(self.current_user),
        )

    def get_file_content(self, file_id: str) -> ServiceResult:
        return self._run(
            "Get file content",
            lambda: self.remote.get_file_content(file_id),
            lambda: self.local.get_file_content(self.current_user, file_id),
        )

    def delete_file(self, file_id: str) -> ServiceResult:
        return self._track_counters(self._run(
            "Delete file",
            lambda: self.remote.delete_file(file_id),
            lambda: self.local.delete_file(self.current_user, file_id),
        ))

    # =========================================================================
    # STATS & PROFILE
    # =========================================================================

    def get_user_stats(self, now: Optional[datetime] = None) -> ServiceResult:
        """Stats; stale counters are reconciled first while remote."""
        if self._counters_stale and self.connection.is_remote:
            reconciled = self.remote.reconcile_counters(now=now)
            if reconciled:
                self._counters_stale = False
            else:
                logger.warning(f"Counter reconciliation failed: {reconciled.error}")

        return self._run(
            "Get stats",
            lambda: self.remote.get_user_stats(now=now),
            lambda: self.local.get_user_stats(self.current_user, now=now),
        )

    def get_user_profile(self) -> ServiceResult:
        return self._run(
            "Get profile",
            self.remote.get_user_profile,
            lambda: self.local.get_user_profile(self.current_user),
        )

    def update_user_profile(self, patch: Dict[str, Any]) -> ServiceResult:
        return self._run(
            "Update profile",
            lambda: self.remote.update_user_profile(patch),
            lambda: self.local.update_user_profile(self.current_user, patch),
        )
