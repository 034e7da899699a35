"""Input and output file locations derived from a filter configuration.

The input resolves against ``source_dir``. Outputs go to ``output.output_dir``
as ``<stem>_Filtered<ext>`` and ``<stem>_Rejected<ext>``, or under the explicit
names the output section gives, with the format extension appended.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from filefilter.config import FilterConfig

FILTERED_SUFFIX = "_Filtered"
REJECTED_SUFFIX = "_Rejected"


def split_file_name(file_name: str) -> tuple[str, str]:
    """Split ``"SampleData.csv"`` into ``("SampleData", ".csv")``.

    A leading dot is part of the name, not an extension (``".data"`` has none).
    """
    name = Path(file_name).name
    dot = name.rfind(".")
    if dot > 0:
        return name[:dot], name[dot:]
    return name, ""


def resolve_input_path(config: "FilterConfig") -> Path:
    path = Path(config.input_file)
    if config.source_dir and not path.is_absolute():
        path = Path(config.source_dir) / path
    return path


def _output_path(config: "FilterConfig", explicit: Optional[str], suffix: str) -> Path:
    out_dir = Path(config.output.output_dir)
    if explicit:
        return out_dir / f"{explicit}{config.file_type.extension}"
    stem, extension = split_file_name(config.input_file)
    return out_dir / f"{stem}{suffix}{extension or config.file_type.extension}"


def filtered_output_path(config: "FilterConfig") -> Path:
    """``output/SampleData_Filtered.csv`` or ``output/<filtered_file_name>.<ext>``."""
    return _output_path(config, config.output.filtered_file_name, FILTERED_SUFFIX)


def rejected_output_path(config: "FilterConfig") -> Path:
    """``output/SampleData_Rejected.csv`` or ``output/<rejected_file_name>.<ext>``."""
    return _output_path(config, config.output.rejected_file_name, REJECTED_SUFFIX)
