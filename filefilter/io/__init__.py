"""Format-specific record sources and sinks."""

from filefilter.io.base import (
    FILTERED,
    FORMAT_REGISTRY,
    REJECTED,
    FormatHandler,
    Record,
    RecordSink,
    RecordSource,
    get_format_handler,
    register_format,
)

import filefilter.io.delimited  # noqa: F401,E402 register built-in formats
import filefilter.io.fixed_delimiter  # noqa: F401,E402
import filefilter.io.spreadsheet  # noqa: F401,E402

__all__ = [
    "FILTERED",
    "FORMAT_REGISTRY",
    "REJECTED",
    "FormatHandler",
    "Record",
    "RecordSink",
    "RecordSource",
    "get_format_handler",
    "register_format",
]
