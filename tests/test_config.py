"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from filefilter.config import FilterConfig, ValidationRule, load_config
from filefilter.exceptions import ConfigValidationError, UnsupportedFormatError
from filefilter.formats import FileFormat


def _write_yaml(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "filter-config.yaml"
    path.write_text(text.strip() + "\n", encoding="utf-8")
    return path


class TestLoadConfig:
    def test_loads_full_config(self, tmp_path):
        path = _write_yaml(
            tmp_path,
            """
input_file: SampleData.txt
file_type: txt
source_dir: sourcefile
delimiter: "|"
encoding: UTF-8
skip_header_lines: 1
expected_total_column: 3
validations:
  - column: 2
    not_empty: true
  - column: 3
    regex: "^[0-9]+$"
  - column: 1
    value_in_list: ["A", "B"]
output:
  need_rejected_data: false
  output_dir: out
""",
        )
        config = load_config(str(path))

        assert config.file_type == FileFormat.TXT
        assert config.delimiter == "|"
        assert config.skip_header_lines == 1
        assert config.expected_total_column == 3
        assert config.source_dir == str(tmp_path.resolve() / "sourcefile")
        assert [rule.column for rule in config.validations] == [2, 3, 1]
        assert config.validations[0].not_empty is True
        assert config.validations[1].regex == "^[0-9]+$"
        assert config.validations[2].value_in_list == frozenset({"A", "B"})
        assert config.output.need_rejected_data is False
        assert config.output.output_dir == "out"

    def test_accepts_camel_case_keys(self, tmp_path):
        path = _write_yaml(
            tmp_path,
            """
inputFile: SampleData.xlsx
fileType: EXCEL
skipHeaderLines: 2
expectedTotalColumn: 4
validations:
  - column: 1
    notEmpty: true
    valueInList: ["Y"]
output:
  needRejectedData: true
  rejectedFileName: bad
""",
        )
        config = load_config(str(path))

        assert config.input_file == "SampleData.xlsx"
        assert config.file_type == FileFormat.EXCEL
        assert config.skip_header_lines == 2
        assert config.expected_total_column == 4
        assert config.validations[0] == ValidationRule(column=1, not_empty=True, value_in_list=frozenset({"Y"}))
        assert config.output.rejected_file_name == "bad"

    def test_defaults(self, tmp_path):
        path = _write_yaml(
            tmp_path,
            """
input_file: data.csv
file_type: csv
output: {}
""",
        )
        config = load_config(str(path))

        assert config.delimiter == ","
        assert config.encoding == "UTF-8"
        assert config.encoding_errors == "strict"
        assert config.skip_header_lines == 0
        assert config.expected_total_column is None
        assert config.validations == []
        assert config.output.need_rejected_data is True
        assert config.output.output_dir == "output"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(str(tmp_path / "nope.yaml"))
        assert "not found" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = _write_yaml(tmp_path, "input_file: [unclosed")
        with pytest.raises(ConfigValidationError, match="Invalid YAML"):
            load_config(str(path))

    def test_non_mapping_document(self, tmp_path):
        path = _write_yaml(tmp_path, "- just\n- a list")
        with pytest.raises(ConfigValidationError, match="dictionary"):
            load_config(str(path))

    def test_field_errors_carry_config_path(self, tmp_path):
        path = _write_yaml(tmp_path, "file_type: csv\noutput: {}")
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(str(path))
        assert exc_info.value.details["config_path"] == str(path)
        assert exc_info.value.details["config_key"] == "input_file"


class TestFilterConfigValidation:
    def test_requires_input_file(self, base_config_dict):
        base_config_dict["input_file"] = ""
        with pytest.raises(ConfigValidationError, match="Input file is required"):
            FilterConfig.from_dict(base_config_dict)

    def test_requires_file_type(self, base_config_dict):
        del base_config_dict["file_type"]
        with pytest.raises(ConfigValidationError, match="File type is required"):
            FilterConfig.from_dict(base_config_dict)

    def test_rejects_unknown_file_type(self, base_config_dict):
        base_config_dict["file_type"] = "json"
        with pytest.raises(UnsupportedFormatError) as exc_info:
            FilterConfig.from_dict(base_config_dict)
        assert exc_info.value.error_code == "CFG002"

    def test_requires_output_section(self, base_config_dict):
        del base_config_dict["output"]
        with pytest.raises(ConfigValidationError, match="Output configuration is required"):
            FilterConfig.from_dict(base_config_dict)

    @pytest.mark.parametrize("value", [-1, "2", 1.5, True])
    def test_skip_header_lines_must_be_non_negative_int(self, base_config_dict, value):
        base_config_dict["skip_header_lines"] = value
        with pytest.raises(ConfigValidationError, match="skip_header_lines"):
            FilterConfig.from_dict(base_config_dict)

    def test_expected_total_column_must_be_int(self, base_config_dict):
        base_config_dict["expected_total_column"] = "three"
        with pytest.raises(ConfigValidationError, match="expected_total_column"):
            FilterConfig.from_dict(base_config_dict)

    def test_empty_delimiter_rejected(self, base_config_dict):
        base_config_dict["file_type"] = "TXT"
        base_config_dict["delimiter"] = ""
        with pytest.raises(ConfigValidationError, match="delimiter"):
            FilterConfig.from_dict(base_config_dict)

    def test_unknown_encoding_rejected(self, base_config_dict):
        base_config_dict["encoding"] = "not-a-codec"
        with pytest.raises(ConfigValidationError, match="Unknown encoding"):
            FilterConfig.from_dict(base_config_dict)

    def test_unknown_encoding_errors_mode_rejected(self, base_config_dict):
        base_config_dict["encoding_errors"] = "explode"
        with pytest.raises(ConfigValidationError, match="encoding_errors"):
            FilterConfig.from_dict(base_config_dict)

    def test_rule_requires_column(self, base_config_dict):
        base_config_dict["validations"] = [{"not_empty": True}]
        with pytest.raises(ConfigValidationError, match="requires 'column'"):
            FilterConfig.from_dict(base_config_dict)

    def test_rule_column_must_be_int(self, base_config_dict):
        base_config_dict["validations"] = [{"column": "2"}]
        with pytest.raises(ConfigValidationError, match="must be an integer"):
            FilterConfig.from_dict(base_config_dict)

    def test_rule_not_empty_must_be_bool(self, base_config_dict):
        base_config_dict["validations"] = [{"column": 1, "not_empty": "yes"}]
        with pytest.raises(ConfigValidationError, match="not_empty must be a boolean"):
            FilterConfig.from_dict(base_config_dict)

    def test_rule_value_in_list_must_be_list(self, base_config_dict):
        base_config_dict["validations"] = [{"column": 1, "value_in_list": "A"}]
        with pytest.raises(ConfigValidationError, match="value_in_list must be a list"):
            FilterConfig.from_dict(base_config_dict)

    def test_out_of_range_rule_column_is_accepted(self, base_config_dict):
        base_config_dict["validations"] = [{"column": 0}, {"column": 99}]
        config = FilterConfig.from_dict(base_config_dict)
        assert [rule.column for rule in config.validations] == [0, 99]

    def test_rejected_name_must_differ_from_filtered_name(self, base_config_dict):
        base_config_dict["output"]["filtered_file_name"] = "same"
        base_config_dict["output"]["rejected_file_name"] = "same"
        with pytest.raises(ConfigValidationError, match="Rejected file name"):
            FilterConfig.from_dict(base_config_dict)

    def test_same_names_allowed_when_rejected_disabled(self, base_config_dict):
        base_config_dict["output"].update(
            {"filtered_file_name": "same", "rejected_file_name": "same", "need_rejected_data": False}
        )
        config = FilterConfig.from_dict(base_config_dict)
        assert config.output.need_rejected_data is False

    def test_boolean_list_values_use_lowercase_text(self, base_config_dict):
        base_config_dict["validations"] = [{"column": 1, "value_in_list": [True, False]}]
        config = FilterConfig.from_dict(base_config_dict)
        assert config.validations[0].value_in_list == frozenset({"true", "false"})

    def test_processor_name_follows_format(self, make_config):
        assert make_config(file_type="csv").processor_name == "csvParser"
        assert make_config(file_type="txt").processor_name == "txtParser"
        assert make_config(file_type="xlsx").processor_name == "excelParser"


EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "docs" / "examples"


@pytest.mark.parametrize("name", ["filter-config.yaml", "filter-config-txt.yaml"])
def test_example_configs_are_valid(name):
    config = load_config(str(EXAMPLES_DIR / name))
    assert Path(config.source_dir, config.input_file).is_file()
