# =============================================================================
# tests/unit/test_upload_pipeline.py
# Unit Tests for the batch upload pipeline
# =============================================================================

import pytest

from dashh_core.services import ServiceResult, decode_data_uri
from dashh_core.services.upload_pipeline import (
    BYTES_PER_MB,
    SelectedFile,
    UploadPipeline,
    UploadStatus,
)


class UnreadableFile:
    """Upload whose bytes cannot be read"""
    name = "broken.bin"
    size = 10
    type = "application/octet-stream"

    def getvalue(self):
        raise OSError("device not ready")


class TextOnlyFile:
    """Upload that hands back text instead of bytes"""
    name = "weird.txt"
    size = 3
    type = "text/plain"

    def getvalue(self):
        return "abc"


class RejectingFacade:
    """Accepts every upload except the named files"""

    def __init__(self, rejected):
        self.rejected = set(rejected)
        self.uploaded = []

    def upload_file(self, payload):
        if payload.name in self.rejected:
            return ServiceResult.fail("Could not save to local storage")
        self.uploaded.append(payload)
        return ServiceResult.ok(payload)


@pytest.fixture
def statuses():
    """Collects (name, status) transitions"""
    seen = []

    def record(item):
        seen.append((item.name, item.status))

    record.seen = seen
    return record


class TestUploadPipeline:
    """Convert -> upload -> complete, one file at a time"""

    def test_status_sequence(self, signed_in_facade, statuses):
        """Each file passes CONVERTING, UPLOADING, COMPLETED in order"""
        pipeline = UploadPipeline(on_status=statuses)
        files = [SelectedFile("a.txt", b"aaa"), SelectedFile("b.txt", b"bb")]

        result = pipeline.run(files, signed_in_facade)

        assert result.success
        assert [r.name for r in result.data] == ["a.txt", "b.txt"]
        assert statuses.seen == [
            ("a.txt", UploadStatus.CONVERTING),
            ("a.txt", UploadStatus.UPLOADING),
            ("b.txt", UploadStatus.CONVERTING),
            ("b.txt", UploadStatus.UPLOADING),
            ("a.txt", UploadStatus.COMPLETED),
            ("b.txt", UploadStatus.COMPLETED),
        ]

    def test_read_failure_does_not_stop_batch(self, signed_in_facade):
        """An unreadable file ends in ERROR, the others are stored"""
        files = [SelectedFile("ok-1.txt", b"1"), UnreadableFile(), SelectedFile("ok-2.txt", b"2")]

        result = UploadPipeline().run(files, signed_in_facade)

        items = result.meta("items")
        assert [r.name for r in result.data] == ["ok-1.txt", "ok-2.txt"]
        assert result.meta("failed") == 1
        assert items[1].status == UploadStatus.ERROR
        assert items[1].error.startswith("Could not read file")
        assert len(signed_in_facade.get_user_files().data) == 2

    def test_encoding_failure_is_item_error(self, signed_in_facade):
        """Non-bytes content fails that item only"""
        result = UploadPipeline().run([TextOnlyFile()], signed_in_facade)

        assert result.success
        assert result.data == []
        assert result.meta("items")[0].failed

    def test_storage_failure_marks_item(self):
        """A rejected store call puts that item in ERROR"""
        facade = RejectingFacade(rejected={"b.txt"})
        files = [SelectedFile("a.txt", b"a"), SelectedFile("b.txt", b"b")]

        result = UploadPipeline().run(files, facade)

        items = result.meta("items")
        assert [i.status for i in items] == [UploadStatus.COMPLETED, UploadStatus.ERROR]
        assert items[1].error == "Could not save to local storage"
        assert [p.name for p in facade.uploaded] == ["a.txt"]

    def test_oversize_files_warn_but_upload(self):
        """Files above the configured size get a warning and are still stored"""
        facade = RejectingFacade(rejected=())
        big = SelectedFile("big.bin", b"x" * (BYTES_PER_MB + 1))

        result = UploadPipeline(max_upload_mb=1).run([big], facade)

        item = result.meta("items")[0]
        assert item.status == UploadStatus.COMPLETED
        assert item.warning == "File is larger than 1 MB and may be slow to store"

    def test_progress_reaches_100(self):
        """Progress is monotonic and ends at 100"""
        progress = []
        pipeline = UploadPipeline()
        pipeline.set_progress_callback(lambda pct, msg: progress.append(pct))

        pipeline.run([SelectedFile("a.txt", b"a"), SelectedFile("b.txt", b"b")],
                     RejectingFacade(rejected=()))

        assert progress == sorted(progress)
        assert progress[-1] == 100

    def test_mime_type_guessed_from_name(self):
        """Missing browser MIME types are guessed from the extension"""
        items = UploadPipeline().prepare([SelectedFile("photo.png", b"\x89PNG")])
        assert items[0].mime_type == "image/png"
        assert items[0].payload.content.startswith("data:image/png;base64,")

    def test_tags_and_description_are_applied(self):
        """Batch tags and description land on every payload"""
        items = UploadPipeline().prepare(
            [SelectedFile("a.txt", b"a"), SelectedFile("b.txt", b"b")],
            tags=["work"],
            description="batch",
        )
        assert all(i.payload.tags == ["work"] for i in items)
        assert all(i.payload.description == "batch" for i in items)

    def test_stored_content_decodes_to_original_bytes(self, signed_in_facade):
        """Bytes survive the upload unchanged"""
        original = bytes(range(256))
        record = UploadPipeline().run([SelectedFile("all.bin", original)], signed_in_facade).data[0]

        fetched = signed_in_facade.get_file_content(record.id).data["content"]
        assert decode_data_uri(fetched) == original
