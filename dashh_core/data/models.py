# =============================================================================
# dashh_core/data/models.py
# Records stored by Dashh: files, user profiles and derived stats
# =============================================================================
"""
Canonical record types.

Stored documents may come from the Supabase tables (snake_case columns) or
from older local snapshots that used camelCase keys (`fileName`, `fileSize`,
`userId`, ...). `FileRecord.from_document` and `UserProfile.from_document`
are the only places that know about both spellings.
"""

from __future__ import annotations
import secrets
import string
import time
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from dashh_core.errors import ValidationError

_ID_ALPHABET = string.digits + string.ascii_lowercase

ARCHIVE_MARKERS = ("zip", "rar", "tar", "gzip", "7z", "bzip")
DOCUMENT_MARKERS = ("msword", "officedocument", "opendocument", "rtf", "json", "csv", "xml")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_file_id() -> str:
    """Time + random composite id: epoch millis followed by 9 base36 chars."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}{suffix}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp.

    Accepts datetimes, ISO-8601 strings (a trailing 'Z' is allowed) and
    epoch milliseconds as produced by browsers' File.lastModified.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def mime_category(mime_type: Optional[str]) -> str:
    """Coarse file category used for icons, filters and charts."""
    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return "image"
    if mime.startswith("video/"):
        return "video"
    if mime.startswith("audio/"):
        return "audio"
    if "pdf" in mime:
        return "pdf"
    if any(marker in mime for marker in ARCHIVE_MARKERS):
        return "archive"
    if mime.startswith("text/") or any(marker in mime for marker in DOCUMENT_MARKERS):
        return "document"
    return "other"


@dataclass
class AuthUser:
    """Identity of the signed-in user."""
    id: str
    email: str

    @property
    def display_name(self) -> str:
        return self.email.split("@")[0]


@dataclass
class FilePayload:
    """A selected file packaged for upload (content already data-URI encoded)."""
    name: str
    size_bytes: int
    mime_type: str
    content: Optional[str]
    last_modified_at: Optional[datetime] = None
    tags: List[str] = field(default_factory=list)
    description: str = ""


@dataclass
class FileRecord:
    """One stored file, owned by exactly one user."""
    id: str
    owner_id: str
    name: str
    size_bytes: int
    mime_type: str = ""
    content: Optional[str] = None
    last_modified_at: Optional[datetime] = None
    uploaded_at: Optional[datetime] = None
    tags: List[str] = field(default_factory=list)
    description: str = ""

    @classmethod
    def create(
        cls,
        owner_id: str,
        payload: FilePayload,
        now: Optional[datetime] = None,
    ) -> FileRecord:
        """Build a new record with a fresh id and upload timestamp."""
        return cls(
            id=generate_file_id(),
            owner_id=owner_id,
            name=payload.name,
            size_bytes=max(0, int(payload.size_bytes or 0)),
            mime_type=payload.mime_type or "",
            content=payload.content,
            last_modified_at=payload.last_modified_at,
            uploaded_at=now or utc_now(),
            tags=list(payload.tags or []),
            description=payload.description or "",
        )

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> FileRecord:
        """Normalize a stored document (canonical or legacy keys)."""
        def pick(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if doc.get(key) is not None:
                    return doc[key]
            return default

        tags = pick("tags", default=[])
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",") if t.strip()]

        return cls(
            id=str(pick("id", "_id", default="")),
            owner_id=str(pick("owner_id", "userId", "user_id", default="")),
            name=pick("name", "fileName", "file_name", default=""),
            size_bytes=int(pick("size_bytes", "fileSize", "size", default=0) or 0),
            mime_type=pick("mime_type", "fileType", "type", default="") or "",
            content=pick("content", "fileContent"),
            last_modified_at=parse_timestamp(pick("last_modified_at", "lastModified")),
            uploaded_at=parse_timestamp(pick("uploaded_at", "uploadedAt")),
            tags=list(tags),
            description=pick("description", default="") or "",
        )

    def to_document(self, include_content: bool = True) -> Dict[str, Any]:
        """Serialize with canonical column names and ISO timestamps."""
        doc = {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "size_bytes": self.size_bytes,
            "mime_type": self.mime_type,
            "content": self.content,
            "last_modified_at": format_timestamp(self.last_modified_at),
            "uploaded_at": format_timestamp(self.uploaded_at),
            "tags": list(self.tags),
            "description": self.description,
        }
        if not include_content:
            doc.pop("content")
        return doc

    @property
    def category(self) -> str:
        return mime_category(self.mime_type)

    @property
    def has_content(self) -> bool:
        return bool(self.content)


@dataclass
class UserProfile:
    """Per-user profile document with running storage counters."""
    id: str
    email: str
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    total_files: Optional[int] = 0
    storage_used_bytes: Optional[int] = 0
    is_first_login: bool = True
    profile_update_count: int = 0

    # Fields a profile update may change
    EDITABLE_FIELDS = ("name", "first_name", "last_name")

    @classmethod
    def new(cls, user: AuthUser, name: Optional[str] = None) -> UserProfile:
        """Default profile created on first login."""
        return cls(
            id=user.id,
            email=user.email,
            name=name or user.display_name,
            created_at=utc_now(),
            total_files=0,
            storage_used_bytes=0,
            is_first_login=True,
            profile_update_count=0,
        )

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> UserProfile:
        def pick(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if key in doc:
                    return doc[key]
            return default

        def as_count(value: Any) -> Optional[int]:
            return None if value is None else int(value)

        return cls(
            id=str(pick("id", "_id", default="")),
            email=pick("email", default="") or "",
            name=pick("name", default="") or "",
            first_name=pick("first_name", "firstName", default="") or "",
            last_name=pick("last_name", "lastName", default="") or "",
            created_at=parse_timestamp(pick("created_at", "createdAt")),
            updated_at=parse_timestamp(pick("updated_at", "updatedAt")),
            total_files=as_count(pick("total_files", "totalFiles")),
            storage_used_bytes=as_count(pick("storage_used_bytes", "storageUsed")),
            is_first_login=bool(pick("is_first_login", "isFirstLogin", default=False)),
            profile_update_count=int(pick("profile_update_count", "profileUpdateCount", default=0) or 0),
        )

    def to_document(self) -> Dict[str, Any]:
        doc = asdict(self)
        doc["created_at"] = format_timestamp(self.created_at)
        doc["updated_at"] = format_timestamp(self.updated_at)
        return doc

    @property
    def counters_present(self) -> bool:
        return self.total_files is not None and self.storage_used_bytes is not None

    def apply_update(self, patch: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Apply a profile edit in place and return the changed columns.

        Only name fields are editable; every update clears `is_first_login`
        and bumps `profile_update_count`.

        Raises:
            ValidationError: on empty or non-editable fields
        """
        if not patch:
            raise ValidationError("No profile changes given")
        rejected = sorted(set(patch) - set(self.EDITABLE_FIELDS))
        if rejected:
            raise ValidationError(
                f"Cannot update profile field(s): {', '.join(rejected)}",
                field=rejected[0],
            )

        changes: Dict[str, Any] = {
            key: ("" if value is None else str(value).strip())
            for key, value in patch.items()
        }
        self.updated_at = now or utc_now()
        self.is_first_login = False
        self.profile_update_count += 1
        for key, value in changes.items():
            setattr(self, key, value)

        changes.update(
            updated_at=format_timestamp(self.updated_at),
            is_first_login=False,
            profile_update_count=self.profile_update_count,
        )
        return changes


@dataclass(frozen=True)
class Stats:
    """Aggregate usage figures shown on the dashboard."""
    total_files: int = 0
    storage_used_bytes: int = 0
    today_uploads: int = 0
    estimated: bool = False

    def to_dict(self) -> Dict[str, Union[int, bool]]:
        return asdict(self)
