import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Context, Decimal, InvalidOperation, localcontext

from task_resolver.adapters.factory import Adapters
from task_resolver.adapters.tabular_adapter import column_letter_index
from task_resolver.logging.logger import Log
from task_resolver.resolution.exceptions import (
    ExecutionError,
    ExternalResourceError,
    FormatError,
    ParameterError,
)
from task_resolver.resolution.models import ParameterSet, TaskKind, UploadedFile
from task_resolver.resolution.scope import ArtifactScope

UNSUPPORTED_ANSWER = "Unsupported question type"

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %B, %Y",
    "%d %b %Y",
    "%d %b, %Y",
    "%m/%d/%Y",
)

_TICKETS_DDL = (
    "CREATE TABLE tickets (type TEXT NOT NULL, units INTEGER NOT NULL, price REAL NOT NULL);"
)
_TICKETS_INSERT = "INSERT INTO tickets (type, units, price) VALUES (?, ?, ?)"
_TICKETS_ROWS: tuple[tuple[str, int, float], ...] = (
    ("Gold", 10, 50.0),
    ("gold ", 4, 55.5),
    ("GOLD", 3, 60.0),
    ("Silver", 7, 30.0),
    ("silver", 2, 31.0),
    ("Bronze", 12, 12.5),
    ("Bronze ", 5, 13.0),
    ("Gold", 1, 52.25),
)
_TICKETS_SALES_QUERY = (
    "SELECT ROUND(COALESCE(SUM(units * price), 0), 2) FROM tickets "
    "WHERE LOWER(TRIM(type)) = LOWER(TRIM(?))"
)


@dataclass(slots=True)
class HandlerContext:
    params: ParameterSet
    adapters: Adapters
    scope: ArtifactScope
    file: UploadedFile | None = None
    request_id: str = ""

    def require_file(self) -> UploadedFile:
        if self.file is None:
            raise ValueError("HandlerContext.file must be set for file-based handlers")
        return self.file


class TaskHandler(ABC):
    kind: TaskKind
    requires_file: bool = False

    @abstractmethod
    def handle(self, context: HandlerContext) -> str:
        raise NotImplementedError


# Cells are summed exactly within this precision; magnitudes beyond
# _MAX_EXPONENT are rejected rather than expanded digit by digit.
_DECIMAL_CONTEXT = Context(prec=80)
_MAX_EXPONENT = 30


def format_number(value: Decimal) -> str:
    """Render a decimal without exponent and without a trailing ``.0``."""
    with localcontext(_DECIMAL_CONTEXT):
        if value == value.to_integral_value():
            return format(value.quantize(Decimal(1)), "f")
        return format(value.normalize(), "f")


def to_decimal(cell: object) -> Decimal:
    """Numeric value of a spreadsheet cell; anything non-numeric counts as zero.

    Raises:
        FormatError: if the number lies outside 1e-30 .. 1e30 in magnitude.
    """
    if cell is None or isinstance(cell, bool):
        return Decimal(0)
    try:
        value = Decimal(str(cell).strip())
    except InvalidOperation:
        return Decimal(0)
    if not value.is_finite() or value.is_zero():
        return Decimal(0)
    if abs(value.adjusted()) > _MAX_EXPONENT:
        raise FormatError(f"numeric value '{cell}' is out of the supported range")
    return value


def sum_decimals(values: Iterable[object]) -> Decimal:
    with localcontext(_DECIMAL_CONTEXT):
        return sum((to_decimal(value) for value in values), Decimal(0))


def parse_date(text: str) -> date:
    cleaned = re.sub(r"(\d)(st|nd|rd|th)\b", r"\1", text.strip())
    cleaned = re.sub(r"\s+", " ", cleaned.replace(".", ""))
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    raise ParameterError(f"cannot parse date '{text}'")


def count_weekdays(start: date, end: date) -> int:
    """Days in [start, end] falling on Monday to Friday."""
    days = (end - start).days + 1
    full_weeks, remainder = divmod(days, 7)
    first = start.weekday()
    return full_weeks * 5 + sum(1 for offset in range(remainder) if (first + offset) % 7 < 5)


class HttpHeadStatusHandler(TaskHandler):
    kind = TaskKind.HTTP_HEAD_STATUS

    def handle(self, context: HandlerContext) -> str:
        url = context.params.text("url")
        status = context.adapters.http.head(url)
        Log.info(f"HEAD {url} -> {status}", request_id=context.request_id)
        return str(status)


class RunCommandHandler(TaskHandler):
    kind = TaskKind.RUN_COMMAND

    def handle(self, context: HandlerContext) -> str:
        result = context.adapters.command.run(context.params.text("command"))
        if result.exit_code != 0:
            detail = result.stderr.strip() or result.stdout.strip()
            raise ExecutionError(f"command exited with status {result.exit_code}: {detail}")
        return result.stdout.strip()


class SpreadsheetSumHandler(TaskHandler):
    kind = TaskKind.SPREADSHEET_SUM
    requires_file = True

    def handle(self, context: HandlerContext) -> str:
        uploaded = context.require_file()
        sheet = context.adapters.tabular.read_first_sheet(
            uploaded.read_bytes(), uploaded.filename
        )
        if not sheet.rows:
            raise FormatError("spreadsheet has no rows")

        column = context.params.text("column")
        index = sheet.header_index(column)
        skip_header = True
        if index is None and re.fullmatch(r"[A-Za-z]{1,3}", column):
            index = column_letter_index(column)
            skip_header = False
        if index is None:
            raise FormatError(f"column '{column}' not found in spreadsheet")

        values = sheet.column_values(index, skip_header=skip_header)
        total = sum_decimals(values)
        Log.info(
            f"Summed {len(values)} cells of column '{column}'",
            request_id=context.request_id,
        )
        return format_number(total)


class WeekdayCountHandler(TaskHandler):
    kind = TaskKind.WEEKDAY_COUNT

    def handle(self, context: HandlerContext) -> str:
        start = parse_date(context.params.text("start_date"))
        end = parse_date(context.params.text("end_date"))
        if end < start:
            raise ParameterError(
                f"end date {end.isoformat()} precedes start date {start.isoformat()}"
            )
        return str(count_weekdays(start, end))


class ArchiveCsvLookupHandler(TaskHandler):
    kind = TaskKind.ARCHIVE_CSV_LOOKUP
    requires_file = True

    def handle(self, context: HandlerContext) -> str:
        uploaded = context.require_file()
        archive = context.adapters.archive
        listing = archive.open(uploaded.path)
        target_dir = context.scope.make_dir(prefix="archive-")
        member_path = archive.extract_member(
            listing, context.params.text("csv_filename"), target_dir
        )
        Log.debug(f"Extracted {member_path.name}", request_id=context.request_id)

        records = context.adapters.tabular.parse_delimited(member_path.read_bytes())
        if not records:
            raise FormatError(f"'{member_path.name}' has no data rows")
        first = records[0]
        column = self._resolve_column(first, context.params.text("column_name"))
        return (first[column] or "").strip()

    def _resolve_column(self, record: dict[str, str], name: str) -> str:
        if name in record:
            return name
        wanted = name.strip().lower()
        for column in record:
            if column is not None and column.strip().lower() == wanted:
                return column
        raise FormatError(f"CSV has no column '{name}'")


class JsonKeyLookupHandler(TaskHandler):
    kind = TaskKind.JSON_KEY_LOOKUP
    requires_file = True

    def handle(self, context: HandlerContext) -> str:
        document = context.adapters.json.parse(context.require_file().read_bytes())
        if not isinstance(document, dict):
            raise FormatError("JSON document is not an object")
        key = context.params.text("key")
        if key not in document:
            raise FormatError(f"JSON document has no key '{key}'")
        value = document[key]
        if isinstance(value, str):
            return value
        return context.adapters.json.dumps(value)


class JsonListBuildHandler(TaskHandler):
    kind = TaskKind.JSON_LIST_BUILD

    def handle(self, context: HandlerContext) -> str:
        items = context.params["items"]
        if not isinstance(items, list):
            items = [str(items)]
        return context.adapters.json.dumps(items)


class CssSelectorCountHandler(TaskHandler):
    kind = TaskKind.CSS_SELECTOR_COUNT

    def handle(self, context: HandlerContext) -> str:
        url = context.params.text("url")
        page = context.adapters.http.get(url)
        if not page.is_success:
            raise ExternalResourceError(f"fetching {url} returned HTTP {page.status_code}")
        document = context.adapters.html.parse(page.body)
        return str(document.count(context.params.text("selector")))


class EncodedTextDecodeHandler(TaskHandler):
    kind = TaskKind.ENCODED_TEXT_DECODE
    requires_file = True

    def handle(self, context: HandlerContext) -> str:
        return context.adapters.encoding.decode(
            context.require_file().read_bytes(),
            context.params.text("encoding"),
        )


class SqlAggregateHandler(TaskHandler):
    kind = TaskKind.SQL_AGGREGATE

    def handle(self, context: HandlerContext) -> str:
        ticket_type = context.params.text("ticket_type")
        total = context.adapters.sqlite.execute(
            _TICKETS_DDL,
            _TICKETS_INSERT,
            _TICKETS_ROWS,
            _TICKETS_SALES_QUERY,
            (ticket_type,),
        )
        return format_number(to_decimal(total))


class NotImplementedTaskHandler(TaskHandler):
    """Declared placeholder for task kinds without a real integration yet."""

    def __init__(self, kind: TaskKind, task_name: str) -> None:
        self.kind = kind
        self._task_name = task_name

    def handle(self, context: HandlerContext) -> str:
        return f"Not implemented: {self._task_name}"


class UnsupportedTaskHandler(TaskHandler):
    kind = TaskKind.UNSUPPORTED

    def handle(self, context: HandlerContext) -> str:
        return UNSUPPORTED_ANSWER


def default_handlers() -> dict[TaskKind, TaskHandler]:
    handlers: list[TaskHandler] = [
        HttpHeadStatusHandler(),
        RunCommandHandler(),
        SpreadsheetSumHandler(),
        WeekdayCountHandler(),
        ArchiveCsvLookupHandler(),
        JsonKeyLookupHandler(),
        JsonListBuildHandler(),
        CssSelectorCountHandler(),
        EncodedTextDecodeHandler(),
        SqlAggregateHandler(),
        NotImplementedTaskHandler(TaskKind.VERSION_QUERY, "editor version query"),
        NotImplementedTaskHandler(TaskKind.DEVTOOLS_SIMULATION, "browser devtools inspection"),
        NotImplementedTaskHandler(TaskKind.GITHUB_ACTION, "GitHub integration"),
        NotImplementedTaskHandler(TaskKind.REPLACE_ACROSS_FILES, "replace text across files"),
        NotImplementedTaskHandler(TaskKind.LIST_FILES, "list files"),
        NotImplementedTaskHandler(TaskKind.RENAME_FILES, "rename files"),
        NotImplementedTaskHandler(TaskKind.COMPARE_FILES, "compare files"),
        UnsupportedTaskHandler(),
    ]
    return {handler.kind: handler for handler in handlers}
