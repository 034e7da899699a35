"""Record filtering for tabular files.

Module layout:
    filefilter.config      - Typed configuration and YAML loading
    filefilter.formats     - Supported file type tags
    filefilter.validation  - Rule evaluation for one record
    filefilter.io          - Per-format record sources and sinks
    filefilter.runner      - Pipeline controller and result
"""

__version__ = "1.0.0"

from filefilter.exceptions import (
    FileFilterError,
    ConfigValidationError,
    UnsupportedFormatError,
    ResourceError,
    SourceNotFoundError,
    ProcessingError,
)
from filefilter.formats import FileFormat
from filefilter.config import FilterConfig, OutputConfig, ValidationRule, load_config
from filefilter.validation import ValidationEngine
from filefilter.io import Record, RecordSink, RecordSource, get_format_handler
from filefilter.runner import FilterJob, PipelineState, ProcessingResult, process_records, run_filter

__all__ = [
    "__version__",
    "FileFilterError",
    "ConfigValidationError",
    "UnsupportedFormatError",
    "ResourceError",
    "SourceNotFoundError",
    "ProcessingError",
    "FileFormat",
    "FilterConfig",
    "OutputConfig",
    "ValidationRule",
    "load_config",
    "ValidationEngine",
    "Record",
    "RecordSink",
    "RecordSource",
    "get_format_handler",
    "FilterJob",
    "PipelineState",
    "ProcessingResult",
    "process_records",
    "run_filter",
]
