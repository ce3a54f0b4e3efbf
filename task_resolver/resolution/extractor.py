"""Per-kind parameter capture schemas and the extractor that applies them."""

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from task_resolver.resolution.models import ABSENT, ParameterSet, TaskKind

_QUOTED = r"[`'\"‘’“”]([^`'\"‘’“”]+)[`'\"‘’“”]"
_URL = r"https?://[^\s'\"<>`]+"
_DATE = (
    r"\d{4}-\d{2}-\d{2}"
    r"|[A-Z][a-z]+\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}"
    r"|\d{1,2}(?:st|nd|rd|th)?\s+[A-Z][a-z]+\.?,?\s+\d{4}"
    r"|\d{1,2}/\d{1,2}/\d{4}"
)


def _strip_trailing_punctuation(value: str) -> str:
    return value.rstrip(".,;:!?)]}")


def _split_items(value: str) -> list[str]:
    items = [item.strip().strip("`'\"‘’“”").strip() for item in value.split(",")]
    return [item for item in items if item]


@dataclass(frozen=True)
class Capture:
    """One named value pulled out of question text.

    Patterns are tried in order; the first one that matches at least
    ``occurrence + 1`` times supplies group 1 of that match (or the whole
    match when the pattern has no groups).
    """

    name: str
    patterns: tuple[str, ...]
    required: bool = True
    occurrence: int = 0
    default: object = ABSENT
    transform: Callable[[str], object] | None = None
    flags: int = re.IGNORECASE

    def apply(self, question: str) -> object:
        for pattern in self.patterns:
            found = list(re.finditer(pattern, question, self.flags))
            if len(found) <= self.occurrence:
                continue
            match = found[self.occurrence]
            raw = match.group(1) if match.groups() else match.group(0)
            raw = raw.strip()
            if not raw:
                continue
            return self.transform(raw) if self.transform else raw
        return self.default


@dataclass(frozen=True)
class CaptureSchema:
    captures: tuple[Capture, ...] = field(default_factory=tuple)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(capture.name for capture in self.captures)

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(capture.name for capture in self.captures if capture.required)


_URL_CAPTURE = Capture("url", (_URL,), transform=_strip_trailing_punctuation)

DEFAULT_SCHEMAS: dict[TaskKind, CaptureSchema] = {
    TaskKind.HTTP_HEAD_STATUS: CaptureSchema((_URL_CAPTURE,)),
    TaskKind.RUN_COMMAND: CaptureSchema(
        (
            Capture(
                "command",
                (
                    r"`([^`]+)`",
                    r"(?:run|execute)\s+(?:the\s+)?command\s*[:]?\s*['\"]([^'\"]+)['\"]",
                ),
            ),
        )
    ),
    TaskKind.SPREADSHEET_SUM: CaptureSchema(
        (
            Capture(
                "column",
                (
                    r"(?i:column)\s+(?i:named\s+|called\s+)?" + _QUOTED,
                    _QUOTED + r"\s+(?i:column)",
                    r"(?i:column)\s+([A-Z]{1,3})\b",
                ),
                flags=0,
            ),
        )
    ),
    TaskKind.WEEKDAY_COUNT: CaptureSchema(
        (
            Capture("start_date", (_DATE,), occurrence=0, flags=0),
            Capture("end_date", (_DATE,), occurrence=1, flags=0),
        )
    ),
    TaskKind.ARCHIVE_CSV_LOOKUP: CaptureSchema(
        (
            Capture("csv_filename", (r"([\w.\-]+\.csv)\b",)),
            Capture(
                "column_name",
                (
                    r"column\s+(?:named\s+|called\s+)?" + _QUOTED,
                    _QUOTED + r"\s+column",
                ),
                required=False,
                default="answer",
            ),
        )
    ),
    TaskKind.JSON_KEY_LOOKUP: CaptureSchema(
        (
            Capture(
                "key",
                (
                    r"key\s+(?:named\s+|called\s+)?" + _QUOTED,
                    _QUOTED + r"\s+key",
                    r"\[\s*['\"]([^'\"]+)['\"]\s*\]",
                ),
            ),
        )
    ),
    TaskKind.JSON_LIST_BUILD: CaptureSchema(
        (
            Capture(
                "items",
                (
                    r"\[([^\[\]]*,[^\[\]]*)\]",
                    r"(?:list|array|items|values)\s*(?:of|:)?\s*[`'\"]([^`'\"]*,[^`'\"]*)[`'\"]",
                    r":\s*([^:\n?]*,[^:\n?]*)",
                ),
                transform=_split_items,
            ),
        )
    ),
    TaskKind.CSS_SELECTOR_COUNT: CaptureSchema(
        (
            _URL_CAPTURE,
            Capture(
                "selector",
                (
                    r"selector\s*[:]?\s*" + _QUOTED,
                    _QUOTED + r"\s+(?:css\s+)?selector",
                ),
            ),
        )
    ),
    TaskKind.ENCODED_TEXT_DECODE: CaptureSchema(
        (
            Capture(
                "encoding",
                (
                    r"encod(?:ed|ing)\s+(?:is\s+|in\s+|as\s+|with\s+|using\s+)?" + _QUOTED,
                    r"\b(utf-?8(?:-sig)?|utf-?16(?:-?[lb]e)?|utf-?32|cp\d{3,4}"
                    r"|windows-\d{3,4}|iso-?8859-\d{1,2}|latin-?1|ascii|shift_jis"
                    r"|euc-jp|big5|gbk|gb2312|koi8-r|mac-?roman)\b",
                    r"encod(?:ed|ing)\s+(?:is\s+|in\s+|as\s+|with\s+|using\s+)([\w\-]+)",
                ),
            ),
        )
    ),
    TaskKind.SQL_AGGREGATE: CaptureSchema(
        (
            Capture(
                "ticket_type",
                (
                    _QUOTED + r"\s+ticket",
                    r"\b(gold|silver|bronze)\b",
                ),
                required=False,
                default="Gold",
            ),
        )
    ),
}


class ParameterExtractor:
    """Applies the capture schema registered for a TaskKind to question text."""

    def __init__(self, schemas: Mapping[TaskKind, CaptureSchema] = DEFAULT_SCHEMAS) -> None:
        self._schemas = dict(schemas)

    def schema_for(self, kind: TaskKind) -> CaptureSchema:
        return self._schemas.get(kind, CaptureSchema())

    def required_for(self, kind: TaskKind) -> Sequence[str]:
        return self.schema_for(kind).required

    def extract(self, question: str, kind: TaskKind) -> ParameterSet:
        schema = self.schema_for(kind)
        return ParameterSet(
            {capture.name: capture.apply(question) for capture in schema.captures}
        )
