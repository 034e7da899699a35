"""Supported input/output file formats."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List

from filefilter.exceptions import UnsupportedFormatError


class FileFormat(str, Enum):
    """Closed set of file types a filter run can read and write."""

    CSV = "CSV"
    TXT = "TXT"
    EXCEL = "EXCEL"

    @classmethod
    def choices(cls) -> List[str]:
        """Every accepted tag, aliases included."""
        return [fmt.value for fmt in cls] + sorted(_ALIASES)

    @classmethod
    def normalize(cls, value: str | None) -> "FileFormat":
        if value is None or not str(value).strip():
            raise UnsupportedFormatError(value, cls.choices())
        candidate = str(value).strip().upper()
        candidate = _ALIASES.get(candidate, candidate)
        for fmt in cls:
            if fmt.value == candidate:
                return fmt
        raise UnsupportedFormatError(value, cls.choices())

    @property
    def extension(self) -> str:
        """File extension (with dot) used for generated output names."""
        extensions = {
            FileFormat.CSV: ".csv",
            FileFormat.TXT: ".txt",
            FileFormat.EXCEL: ".xlsx",
        }
        return extensions[self]

    @property
    def processor_name(self) -> str:
        """Name used to identify a run of this format in logs and errors."""
        names = {
            FileFormat.CSV: "csvParser",
            FileFormat.TXT: "txtParser",
            FileFormat.EXCEL: "excelParser",
        }
        return names[self]


_ALIASES: Dict[str, str] = {
    "XLSX": FileFormat.EXCEL.value,
    "XLS": FileFormat.EXCEL.value,
}
