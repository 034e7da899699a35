"""Tests for the error taxonomy and its error codes."""

from filefilter.exceptions import (
    ConfigValidationError,
    FileFilterError,
    ProcessingError,
    ResourceError,
    SourceNotFoundError,
    UnsupportedFormatError,
)


def test_base_error_code():
    """Test that base exception has error code."""
    err = FileFilterError("Test error")
    assert err.error_code == "ERR000"
    assert str(err) == "[ERR000] Test error"


def test_error_code_override():
    err = FileFilterError("Custom", error_code="X42")
    assert "[X42]" in str(err)


def test_config_validation_error_code():
    """Test ConfigValidationError has correct error code."""
    err = ConfigValidationError("Invalid config", config_path="/path/to/config.yaml", key="file_type")
    assert err.error_code == "CFG001"
    assert "[CFG001]" in str(err)
    assert "config_path=/path/to/config.yaml" in str(err)
    assert "config_key=file_type" in str(err)


def test_unsupported_format_is_a_config_error():
    err = UnsupportedFormatError("JSON", ["CSV", "TXT", "EXCEL"])
    assert isinstance(err, ConfigValidationError)
    assert err.error_code == "CFG002"
    assert err.file_type == "JSON"
    assert "supported=CSV, TXT, EXCEL" in str(err)


def test_resource_error_code():
    """Test ResourceError has correct error code."""
    cause = PermissionError("denied")
    err = ResourceError("Cannot open", path="/out/x.csv", operation="create", original_error=cause)
    assert err.error_code == "RES001"
    assert err.original_error is cause
    assert err.details["error_type"] == "PermissionError"


def test_source_not_found_error_code():
    err = SourceNotFoundError("/in/missing.csv")
    assert isinstance(err, ResourceError)
    assert err.error_code == "RES002"
    assert "Input file not found: /in/missing.csv" in str(err)


def test_processing_error_carries_partial_counts():
    """Test ProcessingError records the stage and the counts reached."""
    cause = ValueError("bad byte")
    err = ProcessingError(
        "Processing failed",
        processor_name="txtParser",
        stage="streaming_body",
        total_records=5,
        success_records=3,
        reject_records=2,
        original_error=cause,
    )
    assert err.error_code == "PROC001"
    assert err.stage == "streaming_body"
    assert err.details["total_records"] == 5
    assert err.details["processor"] == "txtParser"
    assert "error_type=ValueError" in str(err)


def test_zero_counts_are_reported():
    err = ProcessingError("failed", total_records=0, success_records=0, reject_records=0)
    assert err.details == {"total_records": 0, "success_records": 0, "reject_records": 0}
