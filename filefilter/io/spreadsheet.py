"""Excel (.xlsx) source and sink built on openpyxl's streaming modes.

The source reads the first worksheet in read-only mode and the sink writes a
write-only workbook, so neither holds more than a row at a time regardless of
sheet size. Validation sees a string projection of each row; the sink copies
the original cells so numbers, booleans, dates and formulas keep their type.

Numbers are projected with ``str()``: an integer cell reads as ``"30"`` and a
float as ``"2.5"``, so a regex such as ``^[0-9]+$`` matches whole-number cells
only when they were stored as integers (``30.0`` reads as ``"30.0"``).

Rows with no populated cell are skipped; a record's ``line_number`` is its
row number on the sheet, so gaps show up as jumps in the numbering.
"""

from __future__ import annotations

import logging
import zipfile
from datetime import date, datetime, time, timedelta
from typing import IO, Any, Iterator, List, Optional, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.cell import WriteOnlyCell
from openpyxl.utils.exceptions import InvalidFileException

from filefilter.exceptions import ResourceError
from filefilter.formats import FileFormat
from filefilter.io.base import FILTERED, REJECTED, Record, RecordSink, RecordSource, register_format

logger = logging.getLogger(__name__)

SHEET_TITLES = {
    FILTERED: "FilteredData",
    REJECTED: "RejectedData",
}

_GENERAL_FORMAT = "General"


def format_date(value: Any) -> str:
    """ISO date, with the time part only when it is not midnight."""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def cell_as_string(cell: Any) -> str:
    """String projection of a cell used for validation only."""
    value = getattr(cell, "value", None)
    if value is None:
        return ""
    data_type = getattr(cell, "data_type", None)
    if data_type == "e":
        return ""
    if data_type == "f":
        text = str(getattr(value, "text", value) or "")
        return text[1:] if text.startswith("=") else text
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return format_date(value)
    if isinstance(value, timedelta):
        return str(value)
    return str(value)


def trim_trailing_blanks(cells: Sequence[Any]) -> Sequence[Any]:
    end = len(cells)
    while end and getattr(cells[end - 1], "value", None) is None:
        end -= 1
    return cells[:end]


class ExcelRecordSink(RecordSink):
    def _open(self) -> None:
        # Unwritable targets fail here, before any row is read
        self._handle: Optional[IO[bytes]] = open(self.path, "wb")
        self._workbook = Workbook(write_only=True)
        self._sheet = self._workbook.create_sheet(SHEET_TITLES.get(self.role, "Sheet1"))

    def _string_cell(self, value: str) -> Any:
        cell = WriteOnlyCell(self._sheet, value=value)
        cell.data_type = "s"
        return cell

    def _copy_cell(self, source: Any) -> Any:
        value = getattr(source, "value", None)
        if value is None:
            return None
        data_type = getattr(source, "data_type", None)
        if data_type == "e":
            return WriteOnlyCell(self._sheet, value=value)
        if isinstance(value, str) and data_type != "f":
            return self._string_cell(value)
        cell = WriteOnlyCell(self._sheet, value=value)
        number_format = getattr(source, "number_format", _GENERAL_FORMAT)
        if number_format and number_format != _GENERAL_FORMAT:
            cell.number_format = number_format
        return cell

    def _write(self, record: Record) -> None:
        if isinstance(record.origin, (tuple, list)):
            row: List[Any] = [self._copy_cell(cell) for cell in record.origin]
        else:
            row = [self._string_cell(value) for value in record.values]
        self._sheet.append(row)

    def _close(self) -> None:
        try:
            self._workbook.save(self._handle)
        finally:
            if self._handle is not None:
                self._handle.close()
                self._handle = None


@register_format(FileFormat.EXCEL, ExcelRecordSink)
class ExcelRecordSource(RecordSource):
    def _open(self) -> None:
        try:
            self._workbook = load_workbook(self.path, read_only=True, data_only=False)
        except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
            raise ResourceError(
                f"Not a readable Excel workbook: {self.path}",
                path=str(self.path),
                operation="open",
                original_error=exc,
            ) from exc
        if not self._workbook.worksheets:
            self._workbook.close()
            raise ResourceError(f"Workbook has no worksheets: {self.path}", path=str(self.path), operation="open")
        sheet = self._workbook.worksheets[0]
        logger.debug(f"Reading sheet '{sheet.title}' from {self.path}")
        self._rows = sheet.iter_rows()
        self._row_number = 0

    def records(self) -> Iterator[Record]:
        for row in self._rows:
            self._row_number += 1
            cells = tuple(trim_trailing_blanks(row))
            if not cells:
                # Rows absent from the sheet come back as blank padding
                continue
            values = tuple(cell_as_string(cell) for cell in cells)
            yield Record(values=values, origin=cells, line_number=self._row_number)

    def _close(self) -> None:
        self._workbook.close()
