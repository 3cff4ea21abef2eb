# =============================================================================
# dashh_core/services/upload_pipeline.py
# Upload Pipeline - turns selected files into stored file records
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from dashh_core.data.models import FilePayload, FileRecord
from dashh_core.errors import FileEncodingError
from .base_service import BaseService, ServiceResult
from .encoding import encode_data_uri, guess_mime_type

BYTES_PER_MB = 1024 * 1024


class UploadStatus(str, Enum):
    PENDING = "pending"
    CONVERTING = "converting"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class SelectedFile:
    """
    An in-memory file selection.

    Mirrors the parts of Streamlit's UploadedFile the pipeline reads
    (`name`, `size`, `type`, `getvalue()`), so either can be passed in.
    """
    name: str
    data: bytes
    type: str = ""
    last_modified_at: Optional[datetime] = None

    @property
    def size(self) -> int:
        return len(self.data)

    def getvalue(self) -> bytes:
        return self.data


@dataclass
class UploadItem:
    """Progress of one file through the pipeline."""
    index: int
    name: str
    size_bytes: int
    mime_type: str
    status: UploadStatus = UploadStatus.PENDING
    progress: int = 0
    error: Optional[str] = None
    warning: Optional[str] = None
    payload: Optional[FilePayload] = None
    record: Optional[FileRecord] = None

    @property
    def failed(self) -> bool:
        return self.status == UploadStatus.ERROR


class UploadPipeline(BaseService):
    """
    Converts and uploads a batch of files, strictly one at a time.

    Every item goes CONVERTING -> UPLOADING -> COMPLETED, or ends in ERROR
    when reading, encoding or storing it fails. A failed item never stops
    the rest of the batch.

    Usage:
        pipeline = UploadPipeline(max_upload_mb=10)
        pipeline.set_progress_callback(lambda pct, msg: bar.progress(pct, msg))
        result = pipeline.run(st_uploaded_files, facade)
        stored = result.data   # FileRecords, input order, successes only
    """

    def __init__(
        self,
        max_upload_mb: Optional[float] = None,
        on_status: Optional[Callable[[UploadItem], None]] = None,
    ):
        super().__init__()
        self.max_upload_mb = max_upload_mb
        self._on_status = on_status

    def set_status_callback(self, callback: Callable[[UploadItem], None]) -> None:
        self._on_status = callback

    def _set_status(self, item: UploadItem, status: UploadStatus, progress: int,
                    error: Optional[str] = None) -> None:
        item.status = status
        item.progress = progress
        if error is not None:
            item.error = error
        if self._on_status:
            self._on_status(item)

    def _size_warning(self, size_bytes: int) -> Optional[str]:
        if self.max_upload_mb and size_bytes > self.max_upload_mb * BYTES_PER_MB:
            return (f"File is larger than {self.max_upload_mb:g} MB "
                    f"and may be slow to store")
        return None

    # =========================================================================
    # CONVERSION
    # =========================================================================

    def _convert(self, index: int, selected: Any, tags: Sequence[str],
                 description: str) -> UploadItem:
        name = getattr(selected, "name", "") or f"file-{index + 1}"
        mime_type = getattr(selected, "type", "") or guess_mime_type(name)
        item = UploadItem(
            index=index,
            name=name,
            size_bytes=int(getattr(selected, "size", 0) or 0),
            mime_type=mime_type,
        )
        self._set_status(item, UploadStatus.CONVERTING, 10)

        try:
            data = selected.getvalue()
        except Exception as e:
            self.logger.error(f"Could not read '{name}': {e}")
            self._set_status(item, UploadStatus.ERROR, 0, error=f"Could not read file: {e}")
            return item

        try:
            content = encode_data_uri(data, mime_type)
        except FileEncodingError as e:
            self.logger.error(f"Could not encode '{name}': {e.message}")
            self._set_status(item, UploadStatus.ERROR, 0, error=e.message)
            return item

        item.size_bytes = len(data)
        item.warning = self._size_warning(item.size_bytes)
        if item.warning:
            self.logger.warning(f"'{name}': {item.warning}")

        item.payload = FilePayload(
            name=name,
            size_bytes=item.size_bytes,
            mime_type=mime_type,
            content=content,
            last_modified_at=getattr(selected, "last_modified_at", None),
            tags=list(tags),
            description=description,
        )
        self._set_status(item, UploadStatus.UPLOADING, 50)
        return item

    def prepare(
        self,
        files: Sequence[Any],
        tags: Optional[Sequence[str]] = None,
        description: str = "",
    ) -> List[UploadItem]:
        """Read and encode every file; items ready to store end in UPLOADING."""
        items = []
        total = len(files)
        for index, selected in enumerate(files):
            self._update_progress(
                int(50 * index / total),
                f"Converting {getattr(selected, 'name', '')}...",
            )
            items.append(self._convert(index, selected, tags or [], description))
        return items

    # =========================================================================
    # STORAGE
    # =========================================================================

    def upload_all(self, items: Sequence[UploadItem], facade) -> List[FileRecord]:
        """
        Store every prepared item through `facade.upload_file`.

        Returns:
            Stored records, in input order, successes only
        """
        ready = [item for item in items if item.payload is not None and not item.failed]
        stored: List[FileRecord] = []
        for position, item in enumerate(ready):
            self._update_progress(
                50 + int(50 * position / len(ready)),
                f"Uploading {item.name}...",
            )
            result = facade.upload_file(item.payload)
            if not result:
                self.logger.error(f"Upload of '{item.name}' failed: {result.error}")
                self._set_status(item, UploadStatus.ERROR, 0, error=result.error)
                continue
            item.record = result.data
            stored.append(result.data)
            self._set_status(item, UploadStatus.COMPLETED, 100)
        return stored

    def run(
        self,
        files: Sequence[Any],
        facade,
        tags: Optional[Sequence[str]] = None,
        description: str = "",
    ) -> ServiceResult:
        """
        Convert and store a batch.

        Returns:
            ServiceResult whose data is the list of stored FileRecords;
            metadata["items"] holds every UploadItem, metadata["failed"]
            the number of items in ERROR.
        """
        def _run() -> ServiceResult:
            with self.log_operation(f"Uploading {len(files)} file(s)"):
                items = self.prepare(files, tags=tags, description=description)
                stored = self.upload_all(items, facade)
            self._update_progress(100, "Upload complete")

            failed = sum(1 for item in items if item.failed)
            self.logger.info(f"Upload batch done: {len(stored)} stored, {failed} failed")
            return ServiceResult.ok(stored, metadata={"items": items, "failed": failed})

        return self.safe_execute("Upload batch", _run)
