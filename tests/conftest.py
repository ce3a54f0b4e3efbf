import io
import json
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest
from openpyxl import Workbook

from task_resolver.resolution.models import UploadedFile


def _zip_bytes(members: dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return buf.getvalue()


@pytest.fixture()
def extract_zip_bytes() -> bytes:
    """Zip archive holding extract.csv whose first data row has answer=42."""
    return _zip_bytes({"extract.csv": "answer,other\n42,x\n7,y\n"})


@pytest.fixture()
def nested_zip_bytes() -> bytes:
    """Zip archive with the CSV inside a subdirectory and a custom column."""
    return _zip_bytes(
        {
            "data/readme.txt": "ignore me",
            "data/Extract.CSV": "id,Score\n1,99\n2,12\n",
        }
    )


@pytest.fixture()
def column_a_xlsx_bytes() -> bytes:
    """Workbook whose first sheet has 10, "x", 20 in column A and no header."""
    workbook = Workbook()
    sheet = workbook.active
    sheet["A1"] = 10
    sheet["A2"] = "x"
    sheet["A3"] = 20
    sheet["B1"] = 1000
    workbook.create_sheet("Other")["A1"] = 5000
    buf = io.BytesIO()
    workbook.save(buf)
    return buf.getvalue()


@pytest.fixture()
def header_xlsx_bytes() -> bytes:
    """Workbook with a header row and an Amount column of mixed values."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Item", "Amount"])
    sheet.append(["pen", 2.5])
    sheet.append(["cup", "n/a"])
    sheet.append(["ink", 4])
    sheet.append(["pad", None])
    buf = io.BytesIO()
    workbook.save(buf)
    return buf.getvalue()


@pytest.fixture()
def color_json_bytes() -> bytes:
    return json.dumps({"color": "blue", "size": 3, "tags": ["a", "b"]}).encode()


@pytest.fixture()
def temp_root(tmp_path: Path) -> Path:
    """Isolated temp root for uploads and artifacts of one test."""
    root = tmp_path / "resolver-tmp"
    root.mkdir()
    return root


@pytest.fixture()
def make_upload(tmp_path: Path) -> Callable[..., UploadedFile]:
    """Write bytes to a fresh file and wrap it as an UploadedFile."""
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    counter = {"n": 0}

    def _make(data: bytes, filename: str = "upload.bin") -> UploadedFile:
        counter["n"] += 1
        path = uploads / f"{counter['n']}-{filename}"
        path.write_bytes(data)
        return UploadedFile(path=path, filename=filename)

    return _make
