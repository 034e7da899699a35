"""Record source/sink interfaces and the per-format registry.

Each supported format registers one ``RecordSource`` and one ``RecordSink``
implementation. The runner looks them up by ``FileFormat`` and never needs to
know which format it is streaming.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Optional, Tuple, Type

from filefilter.exceptions import ResourceError, UnsupportedFormatError
from filefilter.formats import FileFormat

if TYPE_CHECKING:
    from filefilter.config import FilterConfig

logger = logging.getLogger(__name__)

FILTERED = "filtered"
REJECTED = "rejected"


@dataclass(frozen=True)
class Record:
    """One logical row.

    ``values`` is the string projection used for validation (0-based).
    ``origin`` is the format-native representation sinks copy to output:
    the raw text for text formats, the original cell tuple for spreadsheets.
    """

    values: Tuple[str, ...]
    origin: Any = None
    line_number: int = 0

    def __len__(self) -> int:
        return len(self.values)


class RecordSource(ABC):
    """Produces header records, then a lazy forward-only stream of body records."""

    def __init__(self, path: Path, config: "FilterConfig"):
        self.path = Path(path)
        self.config = config
        self._opened = False

    def __enter__(self) -> "RecordSource":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def open(self) -> None:
        if self._opened:
            return
        try:
            self._open()
        except OSError as exc:
            raise ResourceError(
                f"Cannot open input file {self.path}", path=str(self.path), operation="open", original_error=exc
            ) from exc
        self._opened = True
        logger.debug(f"Opened {type(self).__name__} on {self.path}")

    def close(self) -> None:
        if not self._opened:
            return
        self._opened = False
        self._close()

    def read_headers(self, count: int) -> List[Record]:
        """Consume up to ``count`` leading records for pass-through."""
        headers: List[Record] = []
        if count <= 0:
            return headers
        stream = self.records()
        for record in stream:
            headers.append(record)
            if len(headers) >= count:
                break
        return headers

    @abstractmethod
    def records(self) -> Iterator[Record]:
        """Yield the remaining records in file order.

        Successive calls continue where the previous iteration stopped.
        """

    @abstractmethod
    def _open(self) -> None:
        ...

    @abstractmethod
    def _close(self) -> None:
        ...


class RecordSink(ABC):
    """Consumes header records and accepted body records for one output file."""

    def __init__(self, path: Path, config: "FilterConfig", role: str = FILTERED):
        self.path = Path(path)
        self.config = config
        self.role = role
        self.records_written = 0
        self._opened = False

    def __enter__(self) -> "RecordSink":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def open(self) -> None:
        if self._opened:
            return
        try:
            self._open()
        except OSError as exc:
            raise ResourceError(
                f"Cannot open output file {self.path}", path=str(self.path), operation="create", original_error=exc
            ) from exc
        self._opened = True
        logger.debug(f"Opened {type(self).__name__} ({self.role}) on {self.path}")

    def close(self) -> None:
        if not self._opened:
            return
        self._opened = False
        self._close()
        logger.debug(f"Closed {self.role} output {self.path} ({self.records_written} records)")

    def write_header(self, record: Record) -> None:
        self._write(record)

    def write(self, record: Record) -> None:
        self._write(record)
        self.records_written += 1

    @abstractmethod
    def _write(self, record: Record) -> None:
        ...

    @abstractmethod
    def _open(self) -> None:
        ...

    @abstractmethod
    def _close(self) -> None:
        ...


@dataclass(frozen=True)
class FormatHandler:
    source_cls: Type[RecordSource]
    sink_cls: Type[RecordSink]

    def open_source(self, path: Path, config: "FilterConfig") -> RecordSource:
        source = self.source_cls(path, config)
        source.open()
        return source

    def open_sink(self, path: Path, config: "FilterConfig", role: str) -> RecordSink:
        sink = self.sink_cls(path, config, role)
        sink.open()
        return sink


FORMAT_REGISTRY: Dict[FileFormat, FormatHandler] = {}


def register_format(
    file_format: FileFormat, sink_cls: Type[RecordSink]
) -> Callable[[Type[RecordSource]], Type[RecordSource]]:
    """Class decorator registering a source (and its paired sink) for a format."""

    def decorator(source_cls: Type[RecordSource]) -> Type[RecordSource]:
        FORMAT_REGISTRY[file_format] = FormatHandler(source_cls=source_cls, sink_cls=sink_cls)
        return source_cls

    return decorator


def get_format_handler(file_format: Optional[FileFormat]) -> FormatHandler:
    handler = FORMAT_REGISTRY.get(file_format) if file_format is not None else None
    if handler is None:
        raise UnsupportedFormatError(
            getattr(file_format, "value", file_format), [fmt.value for fmt in FORMAT_REGISTRY]
        )
    return handler
