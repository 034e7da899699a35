"""Comma-separated text source and sink.

Fields are split with the ``csv`` module using double quotes and doubled-quote
escaping only; a backslash is an ordinary character. Each record keeps the
exact text it was parsed from so the sink can reproduce it byte for byte.
"""

from __future__ import annotations

import csv
import logging
from typing import IO, Any, Iterator, List, Optional

from filefilter.formats import FileFormat
from filefilter.io.base import Record, RecordSink, RecordSource, register_format

logger = logging.getLogger(__name__)


class FilterCsvDialect(csv.Dialect):
    delimiter = ","
    quotechar = '"'
    escapechar = None
    doublequote = True
    skipinitialspace = False
    lineterminator = "\n"
    quoting = csv.QUOTE_MINIMAL
    strict = False


class _LineRecorder:
    """Iterator over physical lines that remembers what the csv reader consumed."""

    def __init__(self, handle: IO[str]):
        self._handle = handle
        self._consumed: List[str] = []

    def __iter__(self) -> "_LineRecorder":
        return self

    def __next__(self) -> str:
        line = next(self._handle)
        self._consumed.append(line)
        return line

    def take(self) -> str:
        raw = "".join(self._consumed)
        self._consumed.clear()
        return raw


class CsvRecordSink(RecordSink):
    def _open(self) -> None:
        self._handle: Optional[IO[str]] = open(
            self.path, "w", encoding=self.config.encoding, errors=self.config.encoding_errors, newline=""
        )
        self._writer = csv.writer(self._handle, dialect=FilterCsvDialect)

    def _write(self, record: Record) -> None:
        if isinstance(record.origin, str):
            self._handle.write(record.origin)
        else:
            self._writer.writerow(record.values)

    def _close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None


@register_format(FileFormat.CSV, CsvRecordSink)
class CsvRecordSource(RecordSource):
    def _open(self) -> None:
        self._handle: Optional[IO[str]] = open(
            self.path, "r", encoding=self.config.encoding, errors=self.config.encoding_errors, newline=""
        )
        self._lines = _LineRecorder(self._handle)
        self._reader: Any = csv.reader(self._lines, dialect=FilterCsvDialect)

    def records(self) -> Iterator[Record]:
        while True:
            first_line = self._reader.line_num + 1
            try:
                row = next(self._reader)
            except StopIteration:
                return
            yield Record(values=tuple(row), origin=self._lines.take(), line_number=first_line)

    def _close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
