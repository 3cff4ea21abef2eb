# =============================================================================
# dashh_core/data/remote_service.py
# Remote Data Service - auth, files and profiles on the hosted backend
# =============================================================================
"""
RemoteDataService talks to the hosted document store (Supabase tables
`users` and `files`) and Supabase Auth.

Every public method returns a ServiceResult and never raises. Failures of
the backend itself come back with kind BACKEND_UNAVAILABLE so the
persistence facade can fall back to local storage; not-found and
not-signed-in conditions come back as domain failures.

Counter updates after an insert/delete are separate calls. When one fails
the mutation is still reported as successful with
metadata["counters_updated"] = False.
"""

from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from dashh_core.data.models import AuthUser, FilePayload, FileRecord, Stats, UserProfile
from dashh_core.errors import (
    AuthenticationError,
    BackendUnavailableError,
    RecordNotFoundError,
    ValidationError,
)
from dashh_core.services.base_service import BaseService, ServiceResult
from dashh_core.services.stats_service import compute_stats, count_today_uploads

MIN_PASSWORD_LENGTH = 6

# Enough of each file row to aggregate stats without pulling content
STATS_COLUMNS = "id,size_bytes,uploaded_at"


def validate_credentials(email: str, password: str) -> str:
    """Advisory client-side checks; returns the normalized email."""
    email = (email or "").strip()
    if not email or "@" not in email:
        raise ValidationError("A valid email address is required", field="email")
    if not password:
        raise ValidationError("Password is required", field="password")
    return email


class RemoteDataService(BaseService):
    """
    Hosted-backend implementation of the Dashh operations.

    Args:
        store: object exposing `.auth` (sign_in/sign_up/sign_out) and
            `.collection(name)` (find/find_one/insert_one/update_one/delete_one),
            e.g. SupabaseDocumentStore
        users_table: profile collection name
        files_table: file collection name
    """

    def __init__(self, store, users_table: str = "users", files_table: str = "files"):
        super().__init__()
        self.store = store
        self.users = store.collection(users_table)
        self.files = store.collection(files_table)
        self._user: Optional[AuthUser] = None

    # =========================================================================
    # SESSION
    # =========================================================================

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def _require_user(self) -> AuthUser:
        if self._user is None:
            raise AuthenticationError("User not authenticated")
        return self._user

    def login(self, email: str, password: str, name: Optional[str] = None) -> ServiceResult:
        """
        Sign in and lazily create the user's profile.

        A backend failure while creating the profile does not fail the login;
        it is reported as metadata["degraded"] = True.
        """
        def _login() -> ServiceResult:
            normalized = validate_credentials(email, password)
            user = self.store.auth.sign_in(normalized, password)
            self._user = user

            metadata: Dict[str, Any] = {"degraded": False, "profile_created": False}
            try:
                _, created = self._ensure_profile(user, name=name)
                metadata["profile_created"] = created
            except BackendUnavailableError as e:
                self.logger.warning(f"Could not access user collection: {e.message}")
                metadata["degraded"] = True
                metadata["reason"] = e.message

            self.logger.info(f"User signed in: {user.id}")
            return ServiceResult.ok(user, metadata=metadata)

        return self.safe_execute("Login", _login)

    def register(self, email: str, password: str, name: Optional[str] = None) -> ServiceResult:
        """Create the credential, then sign in."""
        def _register() -> None:
            normalized = validate_credentials(email, password)
            if len(password) < MIN_PASSWORD_LENGTH:
                raise ValidationError(
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                    field="password",
                )
            self.store.auth.sign_up(normalized, password, name=(name or "").strip() or None)

        result = self.safe_execute("Registration", _register)
        if not result:
            return result
        return self.login(email, password, name=(name or "").strip() or None)

    def logout(self) -> ServiceResult:
        def _logout() -> None:
            try:
                self.store.auth.sign_out()
            finally:
                self._user = None

        return self.safe_execute("Logout", _logout)

    # =========================================================================
    # PROFILE HELPERS
    # =========================================================================

    def _ensure_profile(self, user: AuthUser, name: Optional[str] = None) -> Tuple[UserProfile, bool]:
        """Return (profile, created); raises BackendUnavailableError."""
        doc = self.users.find_one({"id": user.id})
        if doc:
            return UserProfile.from_document(doc), False
        profile = UserProfile.new(user, name=name)
        self.users.insert_one(profile.to_document())
        self.logger.info(f"Created profile for {user.id}")
        return profile, True

    def _adjust_counters(self, user: AuthUser, files_delta: int, bytes_delta: int) -> bool:
        """Read-modify-write the running counters; False when they were not updated."""
        try:
            doc = self.users.find_one({"id": user.id})
            if not doc:
                return False
            profile = UserProfile.from_document(doc)
            if not profile.counters_present:
                return False
            updated = self.users.update_one(
                {"id": user.id},
                {
                    "total_files": max(0, profile.total_files + files_delta),
                    "storage_used_bytes": max(0, profile.storage_used_bytes + bytes_delta),
                },
            )
            if not updated:
                self.logger.warning(f"User stats update matched no rows for {user.id}")
            return updated > 0
        except BackendUnavailableError as e:
            self.logger.warning(f"Could not update user stats: {e.message}")
            return False

    # =========================================================================
    # FILE OPERATIONS
    # =========================================================================

    def upload_file(self, payload: FilePayload) -> ServiceResult:
        def _upload() -> ServiceResult:
            user = self._require_user()
            record = FileRecord.create(user.id, payload)
            self.files.insert_one(record.to_document())
            counters_updated = self._adjust_counters(user, 1, record.size_bytes)
            self.logger.info(f"Uploaded '{record.name}' ({record.size_bytes} bytes) as {record.id}")
            return ServiceResult.ok(
                record,
                metadata={"file_id": record.id, "counters_updated": counters_updated},
            )

        return self.safe_execute("File upload", _upload)

    def get_user_files(self) -> ServiceResult:
        def _files() -> List[FileRecord]:
            user = self._require_user()
            docs = self.files.find({"owner_id": user.id}, order_by="uploaded_at")
            return [FileRecord.from_document(doc) for doc in docs]

        return self.safe_execute("Get files", _files)

    def _find_owned(self, user: AuthUser, file_id: str) -> FileRecord:
        doc = self.files.find_one({"id": file_id, "owner_id": user.id})
        if not doc:
            raise RecordNotFoundError("File not found", record_id=file_id,
                                      collection=self.files.table_name)
        return FileRecord.from_document(doc)

    def get_file_content(self, file_id: str) -> ServiceResult:
        def _content() -> Dict[str, Any]:
            record = self._find_owned(self._require_user(), file_id)
            return {"content": record.content, "file": record}

        return self.safe_execute("Get file content", _content)

    def delete_file(self, file_id: str) -> ServiceResult:
        def _delete() -> ServiceResult:
            user = self._require_user()
            record = self._find_owned(user, file_id)
            deleted = self.files.delete_one({"id": file_id, "owner_id": user.id})
            if not deleted:
                raise RecordNotFoundError("File not found", record_id=file_id,
                                          collection=self.files.table_name)
            counters_updated = self._adjust_counters(user, -1, -record.size_bytes)
            self.logger.info(f"Deleted file {file_id}")
            return ServiceResult.ok(
                {"message": f'File "{record.name}" deleted successfully', "file": record},
                metadata={"file_id": file_id, "counters_updated": counters_updated},
            )

        return self.safe_execute("Delete file", _delete)

    # =========================================================================
    # STATS & PROFILE
    # =========================================================================

    def get_user_stats(self, now: Optional[datetime] = None) -> ServiceResult:
        """
        Stats preferring the profile's running counters.

        Falls back to aggregating the file list when the profile is missing
        or a counter is absent. Today's uploads always come from the files.
        """
        def _stats() -> Stats:
            user = self._require_user()
            doc = self.users.find_one({"id": user.id})
            files = [
                FileRecord.from_document(d)
                for d in self.files.find({"owner_id": user.id}, columns=STATS_COLUMNS)
            ]

            profile = UserProfile.from_document(doc) if doc else None
            if profile is None or not profile.counters_present:
                return compute_stats(files, now=now)
            return Stats(
                total_files=profile.total_files,
                storage_used_bytes=profile.storage_used_bytes,
                today_uploads=count_today_uploads(files, now),
            )

        return self.safe_execute("Get stats", _stats)

    def reconcile_counters(self, now: Optional[datetime] = None) -> ServiceResult:
        """Recompute counters from the file list and rewrite them if they drifted."""
        def _reconcile() -> ServiceResult:
            user = self._require_user()
            files = [
                FileRecord.from_document(d)
                for d in self.files.find({"owner_id": user.id}, columns=STATS_COLUMNS)
            ]
            stats = compute_stats(files, now=now)
            doc = self.users.find_one({"id": user.id})
            if not doc:
                return ServiceResult.ok(stats, metadata={"corrected": False})

            profile = UserProfile.from_document(doc)
            drifted = (
                profile.total_files != stats.total_files
                or profile.storage_used_bytes != stats.storage_used_bytes
            )
            if drifted:
                self.users.update_one(
                    {"id": user.id},
                    {"total_files": stats.total_files,
                     "storage_used_bytes": stats.storage_used_bytes},
                )
                self.logger.info(
                    f"Reconciled counters for {user.id}: "
                    f"{profile.total_files}/{profile.storage_used_bytes} -> "
                    f"{stats.total_files}/{stats.storage_used_bytes}"
                )
            return ServiceResult.ok(stats, metadata={"corrected": drifted})

        return self.safe_execute("Reconcile counters", _reconcile)

    def get_user_profile(self) -> ServiceResult:
        """
        Fetch the profile, creating it if absent.

        If the lazy insert fails, a transient default profile is returned
        with metadata["persisted"] = False.
        """
        def _profile() -> ServiceResult:
            user = self._require_user()
            doc = self.users.find_one({"id": user.id})
            if doc:
                return ServiceResult.ok(UserProfile.from_document(doc))

            profile = UserProfile.new(user)
            try:
                self.users.insert_one(profile.to_document())
            except BackendUnavailableError as e:
                self.logger.warning(f"Could not create user document: {e.message}")
                return ServiceResult.ok(profile, metadata={"persisted": False})
            return ServiceResult.ok(profile, metadata={"created": True})

        return self.safe_execute("Get profile", _profile)

    def update_user_profile(self, patch: Dict[str, Any]) -> ServiceResult:
        def _update() -> UserProfile:
            user = self._require_user()
            doc = self.users.find_one({"id": user.id})
            profile = UserProfile.from_document(doc) if doc else UserProfile.new(user)
            changes = profile.apply_update(patch)
            if doc:
                self.users.update_one({"id": user.id}, changes)
            else:
                self.users.insert_one(profile.to_document())
            return profile

        return self.safe_execute("Update profile", _update)
