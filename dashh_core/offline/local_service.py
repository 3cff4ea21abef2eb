# =============================================================================
# dashh_core/offline/local_service.py
# Local Data Service - file and profile operations against the local store
# =============================================================================
"""
The same operations as RemoteDataService, served from LocalPersistenceStore.

Authentication always happens remotely, so every call takes the signed-in
AuthUser from the caller (the persistence facade).
"""

from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional

from dashh_core.data.models import AuthUser, FilePayload, FileRecord, UserProfile
from dashh_core.errors import AuthenticationError, LocalStoreError, RecordNotFoundError
from dashh_core.offline.local_store import LocalPersistenceStore
from dashh_core.services.base_service import BaseService, ServiceResult


class LocalDataService(BaseService):
    """
    Owner-scoped operations over the device-local store.

    Results carry metadata["source"] = "local"; stats are flagged as
    estimated.
    """

    def __init__(self, store: LocalPersistenceStore):
        super().__init__()
        self.store = store

    @staticmethod
    def _require_user(user: Optional[AuthUser]) -> AuthUser:
        if user is None:
            raise AuthenticationError("User not authenticated")
        return user

    def _save_files(self, user: AuthUser, files: List[FileRecord]) -> None:
        if not self.store.save_user_files(user.id, files):
            raise LocalStoreError(key=self.store.files_key(user.id))

    def _save_profile(self, user: AuthUser, profile: UserProfile) -> None:
        if not self.store.save_user_profile(user.id, profile):
            raise LocalStoreError(key=self.store.profile_key(user.id))

    def _with_counters(self, user: AuthUser, profile: UserProfile) -> UserProfile:
        """Fill the profile counters from the locally stored files."""
        stats = self.store.get_user_stats(user.id)
        profile.total_files = stats.total_files
        profile.storage_used_bytes = stats.storage_used_bytes
        return profile

    def _sync_counters(self, user: AuthUser) -> bool:
        """Rewrite the local profile counters; False when they could not be saved."""
        profile = self.store.get_user_profile(user.id) or UserProfile.new(user)
        if self.store.save_user_profile(user.id, self._with_counters(user, profile)):
            return True
        self.logger.warning(f"Could not update local user stats for {user.id}")
        return False

    def _find(self, user: AuthUser, file_id: str) -> FileRecord:
        for record in self.store.get_user_files(user.id):
            if record.id == file_id:
                return record
        raise RecordNotFoundError("File not found", record_id=file_id, collection="local")

    # =========================================================================
    # PROFILE
    # =========================================================================

    def ensure_profile(self, user: Optional[AuthUser], name: Optional[str] = None) -> ServiceResult:
        """Create the local profile if it does not exist yet."""
        def _ensure() -> ServiceResult:
            current = self._require_user(user)
            profile = self.store.get_user_profile(current.id)
            if profile is not None:
                return ServiceResult.ok(profile, metadata={"created": False})
            profile = self._with_counters(current, UserProfile.new(current, name=name))
            self._save_profile(current, profile)
            self.logger.info(f"Created local profile for {current.id}")
            return ServiceResult.ok(profile, metadata={"created": True})

        return self.safe_execute("Ensure local profile", _ensure)

    def get_user_profile(self, user: Optional[AuthUser]) -> ServiceResult:
        def _profile() -> ServiceResult:
            current = self._require_user(user)
            profile = self.store.get_user_profile(current.id)
            if profile is not None:
                return ServiceResult.ok(self._with_counters(current, profile),
                                        metadata={"source": "local"})
            profile = self._with_counters(current, UserProfile.new(current))
            persisted = self.store.save_user_profile(current.id, profile)
            return ServiceResult.ok(profile, metadata={"source": "local", "persisted": persisted})

        return self.safe_execute("Get local profile", _profile)

    def update_user_profile(self, user: Optional[AuthUser], patch: Dict[str, Any]) -> ServiceResult:
        def _update() -> ServiceResult:
            current = self._require_user(user)
            profile = self.store.get_user_profile(current.id) or UserProfile.new(current)
            profile.apply_update(patch)
            self._with_counters(current, profile)
            self._save_profile(current, profile)
            return ServiceResult.ok(profile, metadata={"source": "local"})

        return self.safe_execute("Update local profile", _update)

    # =========================================================================
    # FILES
    # =========================================================================

    def upload_file(self, user: Optional[AuthUser], payload: FilePayload) -> ServiceResult:
        def _upload() -> ServiceResult:
            current = self._require_user(user)
            record = FileRecord.create(current.id, payload)
            files = self.store.get_user_files(current.id)
            files.append(record)
            self._save_files(current, files)
            counters_updated = self._sync_counters(current)
            self.logger.info(f"Stored '{record.name}' locally as {record.id}")
            return ServiceResult.ok(
                record,
                metadata={"file_id": record.id, "source": "local",
                          "counters_updated": counters_updated},
            )

        return self.safe_execute("Local file upload", _upload)

    def get_user_files(self, user: Optional[AuthUser]) -> ServiceResult:
        def _files() -> ServiceResult:
            current = self._require_user(user)
            files = sorted(
                self.store.get_user_files(current.id),
                key=lambda f: f.uploaded_at.timestamp() if f.uploaded_at else 0.0,
            )
            return ServiceResult.ok(files, metadata={"source": "local"})

        return self.safe_execute("Get local files", _files)

    def get_file_content(self, user: Optional[AuthUser], file_id: str) -> ServiceResult:
        def _content() -> ServiceResult:
            record = self._find(self._require_user(user), file_id)
            return ServiceResult.ok(
                {"content": record.content, "file": record},
                metadata={"source": "local"},
            )

        return self.safe_execute("Get local file content", _content)

    def delete_file(self, user: Optional[AuthUser], file_id: str) -> ServiceResult:
        def _delete() -> ServiceResult:
            current = self._require_user(user)
            files = self.store.get_user_files(current.id)
            record = self._find(current, file_id)
            self._save_files(current, [f for f in files if f.id != file_id])
            counters_updated = self._sync_counters(current)
            self.logger.info(f"Deleted local file {file_id}")
            return ServiceResult.ok(
                {"message": f'File "{record.name}" deleted successfully', "file": record},
                metadata={"file_id": file_id, "source": "local",
                          "counters_updated": counters_updated},
            )

        return self.safe_execute("Delete local file", _delete)

    def get_user_stats(self, user: Optional[AuthUser], now: Optional[datetime] = None) -> ServiceResult:
        def _stats() -> ServiceResult:
            current = self._require_user(user)
            return ServiceResult.ok(
                self.store.get_user_stats(current.id, now=now),
                metadata={"source": "local"},
            )

        return self.safe_execute("Get local stats", _stats)
