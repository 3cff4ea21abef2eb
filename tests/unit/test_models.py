# =============================================================================
# tests/unit/test_models.py
# Unit Tests for file/profile records
# =============================================================================

import re
from datetime import datetime, timezone

import pytest

from dashh_core.data.models import (
    AuthUser,
    FileRecord,
    UserProfile,
    generate_file_id,
    mime_category,
    parse_timestamp,
)
from dashh_core.errors import ValidationError

from fakes import make_payload


class TestFileRecord:
    """FileRecord creation and normalization"""

    def test_create_assigns_id_owner_and_upload_time(self):
        """New records get a fresh id and an aware upload timestamp"""
        record = FileRecord.create("user-1", make_payload(tags=["a"]))

        assert record.owner_id == "user-1"
        assert record.name == "notes.txt"
        assert record.size_bytes == len(b"hello dashh")
        assert record.uploaded_at.tzinfo is not None
        assert record.tags == ["a"]

    def test_generated_ids_are_unique(self):
        """Time + random ids do not collide within a batch"""
        ids = {generate_file_id() for _ in range(200)}
        assert len(ids) == 200
        assert all(re.fullmatch(r"\d{13}[0-9a-z]{9}", i) for i in ids)

    def test_from_legacy_document(self):
        """camelCase keys from old snapshots are normalized"""
        doc = {
            "_id": "1712345678901abcdefghi",
            "userId": "user-1",
            "fileName": "cat.gif",
            "fileSize": 321,
            "fileType": "image/gif",
            "fileContent": "data:image/gif;base64,R0lG",
            "lastModified": 1_700_000_000_000,
            "uploadedAt": "2024-05-10T08:00:00.000Z",
            "tags": "pets, funny",
        }
        record = FileRecord.from_document(doc)

        assert record.id == "1712345678901abcdefghi"
        assert record.owner_id == "user-1"
        assert record.name == "cat.gif"
        assert record.size_bytes == 321
        assert record.mime_type == "image/gif"
        assert record.content.startswith("data:image/gif")
        assert record.last_modified_at == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
        assert record.uploaded_at == datetime(2024, 5, 10, 8, 0, tzinfo=timezone.utc)
        assert record.tags == ["pets", "funny"]

    def test_to_document_uses_canonical_columns(self):
        """Serialization writes snake_case columns and ISO timestamps"""
        record = FileRecord.create("user-1", make_payload())
        doc = record.to_document()

        assert set(doc) == {"id", "owner_id", "name", "size_bytes", "mime_type", "content",
                            "last_modified_at", "uploaded_at", "tags", "description"}
        assert FileRecord.from_document(doc) == record

    def test_to_document_without_content(self):
        """Content can be left out for listings"""
        doc = FileRecord.create("user-1", make_payload()).to_document(include_content=False)
        assert "content" not in doc

    @pytest.mark.parametrize("mime,category", [
        ("image/png", "image"),
        ("video/mp4", "video"),
        ("audio/mpeg", "audio"),
        ("application/pdf", "pdf"),
        ("application/x-rar-compressed", "archive"),
        ("application/zip", "archive"),
        ("text/csv", "document"),
        ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "document"),
        ("", "other"),
        (None, "other"),
    ])
    def test_mime_category(self, mime, category):
        """MIME types map to coarse categories"""
        assert mime_category(mime) == category

    def test_parse_timestamp_rejects_garbage(self):
        """Unparseable timestamps become None"""
        assert parse_timestamp("yesterday-ish") is None
        assert parse_timestamp("") is None


class TestUserProfile:
    """Profile defaults and updates"""

    def test_new_profile_defaults(self):
        """Name defaults to the email local part, counters start at zero"""
        profile = UserProfile.new(AuthUser(id="u1", email="jane.doe@example.com"))

        assert profile.name == "jane.doe"
        assert profile.total_files == 0
        assert profile.storage_used_bytes == 0
        assert profile.is_first_login is True
        assert profile.profile_update_count == 0

    def test_new_profile_with_registration_name(self):
        """A name given at registration wins"""
        profile = UserProfile.new(AuthUser(id="u1", email="jd@example.com"), name="Jane Doe")
        assert profile.name == "Jane Doe"

    def test_missing_counters_read_as_none(self):
        """Absent counters are distinguishable from zero"""
        profile = UserProfile.from_document({"id": "u1", "email": "a@b.c"})
        assert profile.total_files is None
        assert not profile.counters_present

    def test_legacy_counter_names(self):
        """totalFiles/storageUsed are accepted"""
        profile = UserProfile.from_document(
            {"_id": "u1", "email": "a@b.c", "totalFiles": 3, "storageUsed": 900}
        )
        assert (profile.total_files, profile.storage_used_bytes) == (3, 900)

    def test_apply_update_changes_names_and_counters(self):
        """Updates clear first-login and bump the update count"""
        profile = UserProfile.new(AuthUser(id="u1", email="a@b.c"))
        changes = profile.apply_update({"first_name": "  Ada ", "last_name": "Lovelace"})

        assert profile.first_name == "Ada"
        assert profile.last_name == "Lovelace"
        assert profile.is_first_login is False
        assert profile.profile_update_count == 1
        assert changes["profile_update_count"] == 1
        assert changes["updated_at"] is not None

    def test_apply_update_rejects_email(self):
        """Email is immutable"""
        profile = UserProfile.new(AuthUser(id="u1", email="a@b.c"))
        with pytest.raises(ValidationError, match="email"):
            profile.apply_update({"email": "new@b.c"})
        assert profile.email == "a@b.c"
        assert profile.profile_update_count == 0

    def test_apply_update_rejects_empty_patch(self):
        """An empty patch is a validation error"""
        profile = UserProfile.new(AuthUser(id="u1", email="a@b.c"))
        with pytest.raises(ValidationError):
            profile.apply_update({})
