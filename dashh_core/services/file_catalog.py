# =============================================================================
# dashh_core/services/file_catalog.py
# File Catalog - search, filter, sort and display helpers for file lists
# =============================================================================

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from dashh_core.data.models import FileRecord
from dashh_core.errors import RecordNotFoundError, ValidationError
from .encoding import DEFAULT_MIME_TYPE, parse_data_uri

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]

SORT_KEYS = {
    "uploaded_at": lambda f: f.uploaded_at.timestamp() if f.uploaded_at else 0.0,
    "name": lambda f: f.name.lower(),
    "size_bytes": lambda f: f.size_bytes,
}

CATEGORIES = ["image", "video", "audio", "pdf", "archive", "document", "other"]

DATAFRAME_COLUMNS = ["id", "name", "type", "category", "size", "size_bytes", "uploaded", "tags"]


def format_file_size(size_bytes: Optional[int]) -> str:
    """
    Human readable size with base-1024 units.

    Examples:
        0 -> "0 Bytes", 1536 -> "1.5 KB", 1048576 -> "1 MB"
    """
    if not size_bytes or size_bytes <= 0:
        return "0 Bytes"
    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and size_bytes >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size_bytes / (1024 ** exponent), 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[exponent]}"


def preview_kind(mime_type: Optional[str]) -> Optional[str]:
    """Which inline preview a MIME type supports, or None."""
    mime = (mime_type or "").lower()
    for prefix in ("image", "video", "audio"):
        if mime.startswith(f"{prefix}/"):
            return prefix
    if "pdf" in mime:
        return "pdf"
    return None


def search_files(files: Iterable[FileRecord], query: Optional[str]) -> List[FileRecord]:
    """Case-insensitive match on name, description and tags."""
    files = list(files)
    needle = (query or "").strip().lower()
    if not needle:
        return files
    return [
        f for f in files
        if needle in f.name.lower()
        or needle in (f.description or "").lower()
        or any(needle in tag.lower() for tag in f.tags)
    ]


def filter_by_category(files: Iterable[FileRecord], category: Optional[str]) -> List[FileRecord]:
    """Keep files of one category; None or "all" keeps everything."""
    if not category or category == "all":
        return list(files)
    if category not in CATEGORIES:
        raise ValidationError(f"Unknown file category: {category}", field="category")
    return [f for f in files if f.category == category]


def sort_files(
    files: Iterable[FileRecord],
    key: str = "uploaded_at",
    descending: bool = True,
) -> List[FileRecord]:
    if key not in SORT_KEYS:
        raise ValidationError(f"Cannot sort files by '{key}'", field="sort")
    return sorted(files, key=SORT_KEYS[key], reverse=descending)


def files_to_dataframe(files: Sequence[FileRecord]) -> pd.DataFrame:
    """Tabular view of a file list for st.dataframe."""
    rows = [
        {
            "id": f.id,
            "name": f.name,
            "type": f.mime_type or DEFAULT_MIME_TYPE,
            "category": f.category,
            "size": format_file_size(f.size_bytes),
            "size_bytes": f.size_bytes,
            "uploaded": f.uploaded_at,
            "tags": ", ".join(f.tags),
        }
        for f in files
    ]
    df = pd.DataFrame(rows, columns=DATAFRAME_COLUMNS)
    df["uploaded"] = pd.to_datetime(df["uploaded"], utc=True)
    return df


def storage_by_category(files: Sequence[FileRecord]) -> pd.DataFrame:
    """
    File count and bytes per category, largest first.

    Columns: category, files, size_bytes, size
    """
    df = files_to_dataframe(files)
    if df.empty:
        return pd.DataFrame(columns=["category", "files", "size_bytes", "size"])
    summary = (
        df.groupby("category", as_index=False)
        .agg(files=("id", "count"), size_bytes=("size_bytes", "sum"))
        .sort_values(["size_bytes", "files"], ascending=False)
        .reset_index(drop=True)
    )
    summary["size"] = summary["size_bytes"].apply(format_file_size)
    return summary


def download_payload(record: FileRecord) -> Tuple[bytes, str]:
    """
    Decoded bytes and MIME type for a download button.

    Raises:
        RecordNotFoundError: if the record carries no content
        FileEncodingError: if the stored content is not a valid data URI
    """
    if not record.has_content:
        raise RecordNotFoundError("File content not found", record_id=record.id)
    mime, data = parse_data_uri(record.content)
    return data, record.mime_type or mime
