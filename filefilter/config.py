"""Typed filter configuration and YAML loading.

The dataclasses below centralize validation so the runner can assume a
fully-populated, internally consistent configuration.
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

import yaml

from filefilter.exceptions import ConfigValidationError
from filefilter.formats import FileFormat

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "output"
VALID_ENCODING_ERRORS = ["strict", "replace", "ignore", "surrogateescape"]

# camelCase spellings accepted alongside the snake_case keys
_KEY_ALIASES: Dict[str, str] = {
    "inputFile": "input_file",
    "fileType": "file_type",
    "sourceDir": "source_dir",
    "encodingErrors": "encoding_errors",
    "skipHeaderLines": "skip_header_lines",
    "expectedTotalColumn": "expected_total_column",
    "notEmpty": "not_empty",
    "valueInList": "value_in_list",
    "needRejectedData": "need_rejected_data",
    "outputDir": "output_dir",
    "outputFileName": "filtered_file_name",
    "filteredFileName": "filtered_file_name",
    "rejectedFileName": "rejected_file_name",
}


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {_KEY_ALIASES.get(key, key): value for key, value in data.items()}


def _ensure_mapping(value: Any, message: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigValidationError(message)
    return _normalize_keys(value)


def _ensure_bool(value: Any, message: str, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigValidationError(message, key=key)
    return value


def _ensure_non_negative_int(value: Any, message: str, key: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigValidationError(message, key=key)
    return value


def _optional_str(value: Any, message: str, key: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigValidationError(message, key=key)
    return value or None


def _list_value_as_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigValidationError(
        f"value_in_list entries must be scalars, got {type(value).__name__}",
        key="value_in_list",
    )


@dataclass(frozen=True)
class ValidationRule:
    """Predicates applied to one 1-based column of a record."""

    column: int
    not_empty: bool = False
    value_in_list: FrozenSet[str] = frozenset()
    regex: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any, index: int = 0) -> "ValidationRule":
        prefix = f"validations[{index}]"
        data = _ensure_mapping(raw, f"{prefix} must be a dictionary")
        if "column" not in data:
            raise ConfigValidationError(f"{prefix} requires 'column'", key=f"{prefix}.column")
        column = data["column"]
        if isinstance(column, bool) or not isinstance(column, int):
            raise ConfigValidationError(
                f"{prefix}.column must be an integer (1-based)", key=f"{prefix}.column"
            )

        not_empty = data.get("not_empty")
        if not_empty is not None:
            _ensure_bool(not_empty, f"{prefix}.not_empty must be a boolean", f"{prefix}.not_empty")

        allowed = data.get("value_in_list")
        if allowed is None:
            allowed = []
        if not isinstance(allowed, list):
            raise ConfigValidationError(
                f"{prefix}.value_in_list must be a list", key=f"{prefix}.value_in_list"
            )

        regex = _optional_str(data.get("regex"), f"{prefix}.regex must be a string", f"{prefix}.regex")

        return cls(
            column=column,
            not_empty=bool(not_empty),
            value_in_list=frozenset(_list_value_as_str(v) for v in allowed),
            regex=regex,
        )

    def describe(self) -> str:
        checks = []
        if self.not_empty:
            checks.append("not_empty")
        if self.value_in_list:
            checks.append(f"value_in_list={sorted(self.value_in_list)}")
        if self.regex:
            checks.append(f"regex={self.regex!r}")
        return f"column {self.column}: {', '.join(checks) or 'no checks'}"


@dataclass
class OutputConfig:
    need_rejected_data: bool = True
    output_dir: str = DEFAULT_OUTPUT_DIR
    filtered_file_name: Optional[str] = None
    rejected_file_name: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "OutputConfig":
        data = _ensure_mapping(raw, "output must be a dictionary")
        need_rejected = data.get("need_rejected_data", True)
        _ensure_bool(need_rejected, "output.need_rejected_data must be a boolean", "output.need_rejected_data")
        output_dir = data.get("output_dir", DEFAULT_OUTPUT_DIR)
        if not isinstance(output_dir, str) or not output_dir.strip():
            raise ConfigValidationError("output.output_dir must be a non-empty string", key="output.output_dir")
        return cls(
            need_rejected_data=need_rejected,
            output_dir=output_dir,
            filtered_file_name=_optional_str(
                data.get("filtered_file_name"),
                "output.filtered_file_name must be a string",
                "output.filtered_file_name",
            ),
            rejected_file_name=_optional_str(
                data.get("rejected_file_name"),
                "output.rejected_file_name must be a string",
                "output.rejected_file_name",
            ),
        )


@dataclass
class FilterConfig:
    """Everything one filter run needs: input, format, rules and outputs."""

    input_file: str
    file_type: FileFormat
    delimiter: str = ","
    encoding: str = "UTF-8"
    encoding_errors: str = "strict"
    skip_header_lines: int = 0
    expected_total_column: Optional[int] = None
    source_dir: Optional[str] = None
    validations: List[ValidationRule] = field(default_factory=list)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, raw: Any, base_dir: Optional[Path] = None) -> "FilterConfig":
        """Build and validate a configuration from a parsed YAML mapping.

        Args:
            raw: Parsed configuration mapping
            base_dir: Directory a relative ``source_dir`` is resolved against
                (the config file's directory when loaded from disk)
        """
        data = _ensure_mapping(raw, "Config must be a YAML dictionary/object")

        input_file = data.get("input_file")
        if not isinstance(input_file, str) or not input_file.strip():
            raise ConfigValidationError("Input file is required in configuration", key="input_file")

        if data.get("file_type") in (None, ""):
            raise ConfigValidationError("File type is required in configuration", key="file_type")
        file_type = FileFormat.normalize(data["file_type"])

        delimiter = data.get("delimiter", ",")
        if not isinstance(delimiter, str) or delimiter == "":
            raise ConfigValidationError("delimiter must be a non-empty string", key="delimiter")

        encoding = data.get("encoding", "UTF-8")
        if not isinstance(encoding, str):
            raise ConfigValidationError("encoding must be a string", key="encoding")

        encoding_errors = data.get("encoding_errors", "strict")
        if encoding_errors not in VALID_ENCODING_ERRORS:
            raise ConfigValidationError(
                f"encoding_errors must be one of {VALID_ENCODING_ERRORS}", key="encoding_errors"
            )

        skip_header_lines = data.get("skip_header_lines")
        if skip_header_lines is None:
            skip_header_lines = 0
        _ensure_non_negative_int(
            skip_header_lines, "skip_header_lines must be a non-negative integer", "skip_header_lines"
        )

        expected = data.get("expected_total_column")
        if expected is not None:
            _ensure_non_negative_int(
                expected, "expected_total_column must be a non-negative integer", "expected_total_column"
            )

        source_dir = _optional_str(data.get("source_dir"), "source_dir must be a string", "source_dir")
        if source_dir and base_dir is not None and not Path(source_dir).is_absolute():
            source_dir = str(base_dir / source_dir)

        raw_rules = data.get("validations")
        if raw_rules is None:
            raw_rules = []
        if not isinstance(raw_rules, list):
            raise ConfigValidationError("validations must be a list of rules", key="validations")
        rules = [ValidationRule.from_dict(rule, idx) for idx, rule in enumerate(raw_rules)]

        if "output" not in data or data["output"] is None:
            raise ConfigValidationError("Output configuration is required", key="output")

        config = cls(
            input_file=input_file,
            file_type=file_type,
            delimiter=delimiter,
            encoding=encoding,
            encoding_errors=encoding_errors,
            skip_header_lines=skip_header_lines,
            expected_total_column=expected,
            source_dir=source_dir,
            validations=rules,
            output=OutputConfig.from_dict(data["output"]),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check cross-field invariants. Raises ConfigValidationError."""
        if not self.input_file or not self.input_file.strip():
            raise ConfigValidationError("Input file is required in configuration", key="input_file")
        if not isinstance(self.file_type, FileFormat):
            self.file_type = FileFormat.normalize(self.file_type)
        if self.skip_header_lines < 0:
            raise ConfigValidationError("skip_header_lines must be a non-negative integer", key="skip_header_lines")
        if self.file_type == FileFormat.TXT and not self.delimiter:
            raise ConfigValidationError("TXT files require a non-empty delimiter", key="delimiter")
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ConfigValidationError(f"Unknown encoding: {self.encoding}", key="encoding")

        # Output names are derived from the input name unless given explicitly,
        # so the rejected destination must not collide with the filtered one.
        from filefilter.paths import filtered_output_path, rejected_output_path

        if self.output.need_rejected_data:
            if rejected_output_path(self) == filtered_output_path(self):
                raise ConfigValidationError(
                    "Rejected file name must differ from the filtered file name when need_rejected_data is true",
                    key="output.rejected_file_name",
                )

    @property
    def processor_name(self) -> str:
        return self.file_type.processor_name


def _read_yaml(path: str) -> Dict[str, Any]:
    logger.info(f"Loading config from {path}")

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigValidationError(f"Config file not found: {path}", config_path=path)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in config file: {e}", config_path=path)

    if not isinstance(cfg, dict):
        raise ConfigValidationError("Config must be a YAML dictionary/object", config_path=path)

    return cfg


def load_config(path: str) -> FilterConfig:
    """Load and validate a YAML filter configuration file."""
    raw = _read_yaml(path)
    try:
        config = FilterConfig.from_dict(raw, base_dir=Path(path).resolve().parent)
    except ConfigValidationError as exc:
        exc.details.setdefault("config_path", path)
        raise
    logger.debug(
        f"Validated config: file_type={config.file_type.value}, rules={len(config.validations)}"
    )
    return config
