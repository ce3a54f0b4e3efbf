import csv
import io
import zipfile
from dataclasses import dataclass

from openpyxl import load_workbook
from openpyxl.utils import column_index_from_string
from openpyxl.utils.exceptions import InvalidFileException

from task_resolver.resolution.exceptions import FormatError

_XLSX_MAGIC = b"PK\x03\x04"


@dataclass(frozen=True)
class Sheet:
    """Cell values of one worksheet, row by row."""

    rows: tuple[tuple[object, ...], ...]

    @property
    def header(self) -> tuple[str, ...]:
        if not self.rows:
            return ()
        return tuple("" if cell is None else str(cell).strip() for cell in self.rows[0])

    def header_index(self, name: str) -> int | None:
        wanted = name.strip().lower()
        for index, cell in enumerate(self.header):
            if cell.lower() == wanted:
                return index
        return None

    def column_values(self, index: int, skip_header: bool = False) -> list[object]:
        body = self.rows[1:] if skip_header else self.rows
        return [row[index] if index < len(row) else None for row in body]

    def records(self) -> list[dict[str, object]]:
        header = self.header
        return [
            {name: (row[i] if i < len(row) else None) for i, name in enumerate(header)}
            for row in self.rows[1:]
        ]


def column_letter_index(reference: str) -> int | None:
    """Zero-based index of a spreadsheet column letter such as ``A`` or ``AB``."""
    try:
        return column_index_from_string(reference.strip().upper()) - 1
    except ValueError:
        return None


class TabularAdapter:
    """Reads the first sheet of an XLSX workbook or a CSV file."""

    def __init__(self, csv_encoding: str = "utf-8-sig") -> None:
        self._csv_encoding = csv_encoding

    def read_first_sheet(self, data: bytes, filename: str = "") -> Sheet:
        if data.startswith(_XLSX_MAGIC) or filename.lower().endswith((".xlsx", ".xlsm")):
            return self._read_xlsx(data)
        return self._read_csv(data)

    def parse_delimited(self, data: bytes, has_header: bool = True) -> list[dict[str, str]]:
        """Parse delimited text into records keyed by the header row."""
        text = self._decode(data)
        try:
            if has_header:
                return [dict(row) for row in csv.DictReader(io.StringIO(text))]
            return [
                {str(i): value for i, value in enumerate(row)}
                for row in csv.reader(io.StringIO(text))
            ]
        except csv.Error as exc:
            raise FormatError(f"malformed CSV: {exc}") from exc

    def _read_xlsx(self, data: bytes) -> Sheet:
        try:
            workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
            raise FormatError(f"unreadable spreadsheet: {exc}") from exc
        try:
            worksheet = workbook.worksheets[0]
            rows = tuple(tuple(row) for row in worksheet.iter_rows(values_only=True))
        finally:
            workbook.close()
        return Sheet(rows=rows)

    def _read_csv(self, data: bytes) -> Sheet:
        text = self._decode(data)
        try:
            rows = tuple(tuple(row) for row in csv.reader(io.StringIO(text)) if row)
        except csv.Error as exc:
            raise FormatError(f"malformed CSV: {exc}") from exc
        return Sheet(rows=rows)

    def _decode(self, data: bytes) -> str:
        try:
            return data.decode(self._csv_encoding)
        except UnicodeDecodeError as exc:
            raise FormatError(
                f"tabular file is not valid {self._csv_encoding} text: {exc}"
            ) from exc
