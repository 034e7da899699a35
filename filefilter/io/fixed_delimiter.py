"""Delimited text with a configurable literal delimiter (``|``, ``/``, ``;;`` ...).

One record per physical line. The delimiter is matched literally and trailing
empty fields are kept, so ``"a,b,"`` splits into ``["a", "b", ""]``.
"""

from __future__ import annotations

import logging
from typing import IO, Iterator, List, Optional

from filefilter.formats import FileFormat
from filefilter.io.base import Record, RecordSink, RecordSource, register_format

logger = logging.getLogger(__name__)

_LINE_ENDINGS = "\r\n"


def split_line(line: str, delimiter: str) -> List[str]:
    """Split on the literal delimiter, preserving trailing empty fields."""
    return line.split(delimiter)


def strip_line_ending(line: str) -> str:
    return line.rstrip(_LINE_ENDINGS)


class TextRecordSink(RecordSink):
    def _open(self) -> None:
        self._handle: Optional[IO[str]] = open(
            self.path, "w", encoding=self.config.encoding, errors=self.config.encoding_errors, newline=""
        )

    def _write(self, record: Record) -> None:
        if isinstance(record.origin, str):
            self._handle.write(record.origin)
        else:
            self._handle.write(self.config.delimiter.join(record.values) + "\n")

    def _close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None


@register_format(FileFormat.TXT, TextRecordSink)
class TextRecordSource(RecordSource):
    def _open(self) -> None:
        # newline="" keeps each line's terminator so output can reproduce it
        self._handle: Optional[IO[str]] = open(
            self.path, "r", encoding=self.config.encoding, errors=self.config.encoding_errors, newline=""
        )
        self._line_number = 0

    def records(self) -> Iterator[Record]:
        delimiter = self.config.delimiter
        for raw in self._handle:
            self._line_number += 1
            values = split_line(strip_line_ending(raw), delimiter)
            yield Record(values=tuple(values), origin=raw, line_number=self._line_number)

    def _close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
