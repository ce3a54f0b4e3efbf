import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi import UploadFile

from task_resolver.api.app import UploadTooLargeError, buffer_upload


def _upload(data: bytes, filename: str = "q.zip") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename)


class TestBufferUpload:
    def test_writes_upload_under_temp_root(self, temp_root: Path) -> None:
        uploaded = buffer_upload(_upload(b"payload"), temp_root, max_bytes=1024)
        assert uploaded.path.parent == temp_root
        assert uploaded.path.name.startswith("upload-")
        assert uploaded.path.suffix == ".zip"
        assert uploaded.filename == "q.zip"
        assert uploaded.read_bytes() == b"payload"

    def test_same_filename_never_collides(self, temp_root: Path) -> None:
        first = buffer_upload(_upload(b"one"), temp_root, max_bytes=1024)
        second = buffer_upload(_upload(b"two"), temp_root, max_bytes=1024)
        assert first.path != second.path
        assert first.read_bytes() == b"one"

    def test_oversized_upload_is_removed(self, temp_root: Path) -> None:
        with pytest.raises(UploadTooLargeError, match="exceeds 4 bytes"):
            buffer_upload(_upload(b"too large"), temp_root, max_bytes=4)
        assert list(temp_root.iterdir()) == []

    def test_read_failure_removes_partial_file(self, temp_root: Path) -> None:
        stream = MagicMock()
        stream.read.side_effect = OSError("disk gone")
        with pytest.raises(OSError, match="disk gone"):
            buffer_upload(UploadFile(file=stream, filename="q.zip"), temp_root, max_bytes=1024)
        assert list(temp_root.iterdir()) == []
