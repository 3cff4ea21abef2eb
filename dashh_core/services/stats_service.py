# =============================================================================
# dashh_core/services/stats_service.py
# Usage statistics derived from a user's file collection
# =============================================================================

from __future__ import annotations
from datetime import datetime
from typing import Iterable, Optional

from dashh_core.data.models import FileRecord, Stats


def local_midnight(now: Optional[datetime] = None) -> datetime:
    """
    Start of the current calendar day on the caller's clock.

    A naive `now` is interpreted as local time. The result is timezone-aware.
    """
    if now is None:
        now = datetime.now().astimezone()
    elif now.tzinfo is None:
        now = now.astimezone()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.astimezone()


def count_today_uploads(files: Iterable[FileRecord], now: Optional[datetime] = None) -> int:
    midnight = local_midnight(now)
    return sum(
        1 for f in files
        if f.uploaded_at is not None and _as_aware(f.uploaded_at) >= midnight
    )


def compute_stats(
    files: Iterable[FileRecord],
    now: Optional[datetime] = None,
    estimated: bool = False,
) -> Stats:
    """
    Aggregate file count, total bytes and uploads since local midnight.

    Pure function; pass `now` for deterministic results.
    """
    files = list(files)
    return Stats(
        total_files=len(files),
        storage_used_bytes=sum(max(0, f.size_bytes or 0) for f in files),
        today_uploads=count_today_uploads(files, now),
        estimated=estimated,
    )
