from pathlib import Path

import pytest

from task_resolver.resolution.exceptions import FormatError
from task_resolver.resolution.models import (
    ABSENT,
    ParameterSet,
    Resolution,
    TaskKind,
    UploadedFile,
)


class TestParameterSet:
    def test_declared_but_missing_name_reads_as_absent(self) -> None:
        params = ParameterSet({"url": "https://a.test", "selector": ABSENT})
        assert params["selector"] is ABSENT
        assert params.is_absent("selector")
        assert "selector" in params
        assert "url" in params

    def test_undeclared_name_follows_mapping_contract(self) -> None:
        params = ParameterSet({"url": "https://a.test"})
        with pytest.raises(KeyError):
            params["selector"]
        assert params.get("selector", "fallback") == "fallback"
        assert "selector" not in params
        assert params.is_absent("selector")

    def test_missing_lists_absent_required_names_in_order(self) -> None:
        params = ParameterSet({"a": "1", "b": ABSENT})
        assert params.missing(["a", "b", "c"]) == ["b", "c"]

    def test_text_of_absent_parameter_raises(self) -> None:
        params = ParameterSet({"key": ABSENT})
        with pytest.raises(KeyError, match="key"):
            params.text("key")

    def test_absent_marker_is_falsy_singleton(self) -> None:
        assert not ABSENT
        assert type(ABSENT)() is ABSENT
        assert repr(ABSENT) == "ABSENT"


class TestResolution:
    def test_succeeded_without_error(self) -> None:
        assert Resolution(answer="5", kind=TaskKind.WEEKDAY_COUNT).succeeded

    def test_failed_with_error(self) -> None:
        resolution = Resolution(
            answer="Error: bad", kind=TaskKind.JSON_KEY_LOOKUP, error=FormatError("bad")
        )
        assert not resolution.succeeded


class TestUploadedFile:
    def test_reads_bytes_from_path(self, tmp_path: Path) -> None:
        path = tmp_path / "blob.bin"
        path.write_bytes(b"\x00\x01")
        assert UploadedFile(path=path).read_bytes() == b"\x00\x01"
