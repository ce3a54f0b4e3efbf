from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from task_resolver.resolution.exceptions import TaskError


class TaskKind(str, Enum):
    """Closed set of question categories the engine can answer."""

    VERSION_QUERY = "version_query"
    HTTP_HEAD_STATUS = "http_head_status"
    RUN_COMMAND = "run_command"
    SPREADSHEET_SUM = "spreadsheet_sum"
    WEEKDAY_COUNT = "weekday_count"
    ARCHIVE_CSV_LOOKUP = "archive_csv_lookup"
    JSON_KEY_LOOKUP = "json_key_lookup"
    JSON_LIST_BUILD = "json_list_build"
    CSS_SELECTOR_COUNT = "css_selector_count"
    ENCODED_TEXT_DECODE = "encoded_text_decode"
    SQL_AGGREGATE = "sql_aggregate"
    DEVTOOLS_SIMULATION = "devtools_simulation"
    GITHUB_ACTION = "github_action"
    REPLACE_ACROSS_FILES = "replace_across_files"
    LIST_FILES = "list_files"
    RENAME_FILES = "rename_files"
    COMPARE_FILES = "compare_files"
    UNSUPPORTED = "unsupported"


class _Absent:
    """Marker for a parameter the question did not supply."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


class ParameterSet(Mapping[str, object]):
    """Immutable mapping of parameter name to extracted value or ``ABSENT``."""

    def __init__(self, values: Mapping[str, object] | None = None) -> None:
        self._values = dict(values or {})

    def __getitem__(self, name: str) -> object:
        """Value of a declared parameter, ``ABSENT`` when it was not captured.

        Raises:
            KeyError: if no capture declared ``name``.
        """
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ParameterSet({self._values!r})"

    def is_absent(self, name: str) -> bool:
        return self._values.get(name, ABSENT) is ABSENT

    def text(self, name: str) -> str:
        """Return a present parameter as text.

        Raises:
            KeyError: if the parameter is absent. The engine checks required
                names before invoking a handler, so this signals a handler bug.
        """
        value = self[name]
        if value is ABSENT:
            raise KeyError(f"parameter '{name}' is absent")
        return str(value)

    def missing(self, required: Iterable[str]) -> list[str]:
        return [name for name in required if self.is_absent(name)]


@dataclass(frozen=True)
class UploadedFile:
    """A request-scoped blob buffered on disk by the API layer."""

    path: Path
    filename: str = ""
    content_type: str = ""

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass(frozen=True)
class Resolution:
    """Outcome of one resolution request."""

    answer: str
    kind: TaskKind
    error: TaskError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
