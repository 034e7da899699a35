"""Custom exception classes for file-filter.

This module provides specific exception types for better error handling and debugging.
"""

from typing import Optional, Dict, Any


class FileFilterError(Exception):
    """Base exception for all file-filter errors."""

    error_code: str = "ERR000"  # Override in subclasses

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, error_code: Optional[str] = None):
        """
        Initialize file-filter exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context
            error_code: Optional error code override
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def __str__(self) -> str:
        """Return string representation with error code and details."""
        parts = [f"[{self.error_code}] {self.message}"]
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)


class ConfigValidationError(FileFilterError):
    """Raised when configuration validation fails.

    Examples:
        - Missing required configuration keys
        - Invalid configuration values
        - Rejected output requested without a resolvable destination
    """

    error_code = "CFG001"

    def __init__(self, message: str, config_path: Optional[str] = None, key: Optional[str] = None):
        """
        Initialize configuration validation error.

        Args:
            message: Description of validation failure
            config_path: Path to config file that failed validation
            key: Specific configuration key that caused the error
        """
        details = {}
        if config_path:
            details['config_path'] = config_path
        if key:
            details['config_key'] = key
        super().__init__(message, details)


class UnsupportedFormatError(ConfigValidationError):
    """Raised when a file type tag is not one of the supported formats."""

    error_code = "CFG002"

    def __init__(self, file_type: Optional[str], supported: Optional[list] = None):
        super().__init__(f"Unsupported file type: {file_type!r}", key="file_type")
        self.file_type = file_type
        if supported:
            self.details['supported'] = ", ".join(supported)


class ResourceError(FileFilterError):
    """Raised when an input or output resource cannot be opened.

    Examples:
        - Input file unreadable
        - Output directory cannot be created
        - Output file not writable
    """

    error_code = "RES001"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize resource error.

        Args:
            message: Description of the failure
            path: File or directory involved
            operation: Operation that failed (open, create, write)
            original_error: Original exception that caused this error
        """
        details = {}
        if path:
            details['path'] = path
        if operation:
            details['operation'] = operation
        if original_error:
            details['original_error'] = str(original_error)
            details['error_type'] = type(original_error).__name__

        super().__init__(message, details)
        self.original_error = original_error


class SourceNotFoundError(ResourceError):
    """Raised when the configured input file does not exist."""

    error_code = "RES002"

    def __init__(self, path: str):
        super().__init__(f"Input file not found: {path}", path=path, operation="open")


class ProcessingError(FileFilterError):
    """Raised when a filter run fails after configuration was accepted.

    Carries the processor name, the pipeline stage that failed and the
    partial statistics gathered before the failure. The failed
    ``ProcessingResult`` is available on ``result``.
    """

    error_code = "PROC001"

    def __init__(
        self,
        message: str,
        processor_name: Optional[str] = None,
        stage: Optional[str] = None,
        total_records: Optional[int] = None,
        success_records: Optional[int] = None,
        reject_records: Optional[int] = None,
        original_error: Optional[Exception] = None,
        result: Any = None,
    ):
        details: Dict[str, Any] = {}
        if processor_name:
            details['processor'] = processor_name
        if stage:
            details['stage'] = stage
        if total_records is not None:
            details['total_records'] = total_records
        if success_records is not None:
            details['success_records'] = success_records
        if reject_records is not None:
            details['reject_records'] = reject_records
        if original_error:
            details['original_error'] = str(original_error)
            details['error_type'] = type(original_error).__name__

        super().__init__(message, details)
        self.processor_name = processor_name
        self.stage = stage
        self.original_error = original_error
        self.result = result
