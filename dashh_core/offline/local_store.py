# =============================================================================
# dashh_core/offline/local_store.py
# Per-user file lists and profiles in the device-local store
# =============================================================================

from __future__ import annotations
from datetime import datetime
from typing import List, Optional, Sequence

from dashh_core.data.models import FileRecord, Stats, UserProfile
from dashh_core.logging import get_logger
from dashh_core.offline.local_database import LocalDatabase
from dashh_core.services.stats_service import compute_stats

logger = get_logger(__name__)


class LocalPersistenceStore:
    """
    Owner-scoped records on top of LocalDatabase.

    Layout: `files_<owner_id>` holds a JSON list of file documents and
    `profile_<owner_id>` one profile document.

    Reads return an empty list / None both when nothing was stored and when
    the store failed; writes return False when the value was not persisted.
    """

    def __init__(self, database: LocalDatabase):
        self.database = database

    @staticmethod
    def files_key(owner_id: str) -> str:
        return f"files_{owner_id}"

    @staticmethod
    def profile_key(owner_id: str) -> str:
        return f"profile_{owner_id}"

    def get_user_files(self, owner_id: str) -> List[FileRecord]:
        docs = self.database.get_item(self.files_key(owner_id)) or []
        files = []
        for doc in docs:
            try:
                record = FileRecord.from_document(doc)
            except (TypeError, ValueError, AttributeError) as e:
                logger.error(f"Skipping unreadable local file entry for {owner_id}: {e}")
                continue
            # foreign entries never leave this key
            if record.owner_id and record.owner_id != owner_id:
                continue
            files.append(record)
        return files

    def save_user_files(self, owner_id: str, files: Sequence[FileRecord]) -> bool:
        return self.database.set_item(
            self.files_key(owner_id),
            [f.to_document() for f in files],
        )

    def get_user_profile(self, owner_id: str) -> Optional[UserProfile]:
        doc = self.database.get_item(self.profile_key(owner_id))
        if not doc:
            return None
        try:
            return UserProfile.from_document(doc)
        except (TypeError, ValueError, AttributeError) as e:
            logger.error(f"Unreadable local profile for {owner_id}: {e}")
            return None

    def save_user_profile(self, owner_id: str, profile: UserProfile) -> bool:
        return self.database.set_item(self.profile_key(owner_id), profile.to_document())

    def get_user_stats(self, owner_id: str, now: Optional[datetime] = None) -> Stats:
        return compute_stats(self.get_user_files(owner_id), now=now, estimated=True)
