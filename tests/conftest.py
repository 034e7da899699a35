"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from filefilter.config import FilterConfig  # noqa: E402


@pytest.fixture
def base_config_dict(tmp_path: Path) -> Dict[str, Any]:
    """Minimal valid configuration reading SampleData.csv from tmp_path/source."""
    return {
        "input_file": "SampleData.csv",
        "file_type": "CSV",
        "source_dir": str(tmp_path / "source"),
        "encoding": "UTF-8",
        "skip_header_lines": 0,
        "validations": [],
        "output": {
            "need_rejected_data": True,
            "output_dir": str(tmp_path / "output"),
        },
    }


@pytest.fixture
def make_config(base_config_dict: Dict[str, Any]) -> Callable[..., FilterConfig]:
    """Build a FilterConfig from the base dict with top-level overrides."""

    def _make(**overrides: Any) -> FilterConfig:
        data = dict(base_config_dict)
        output = dict(data["output"])
        output.update(overrides.pop("output", {}))
        data.update(overrides)
        data["output"] = output
        return FilterConfig.from_dict(data)

    return _make


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def write_source(source_dir: Path) -> Callable[..., Path]:
    """Write raw text (exact bytes via newline='') into the source directory."""

    def _write(name: str, content: str, encoding: str = "utf-8") -> Path:
        path = source_dir / name
        with open(path, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
        return path

    return _write


@pytest.fixture
def people_rules() -> list:
    """Column 2 must be filled, column 3 must be numeric."""
    return [
        {"column": 2, "not_empty": True},
        {"column": 3, "regex": "^[0-9]+$"},
    ]
