"""Custom exception classes for report-datagen.

This module provides specific exception types so the CLI can tell fatal
schema/output problems apart from recoverable per-row failures.
"""

from typing import Optional, Dict, Any


class ReportGenError(Exception):
    """Base exception for all report-datagen errors."""
    
    error_code: str = "GEN000"  # Override in subclasses
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, error_code: Optional[str] = None):
        """
        Initialize report-datagen exception.
        
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


class ConfigValidationError(ReportGenError):
    """Raised when command-line options or the settings file are invalid.
    
    Examples:
        - Missing --ddl value
        - --order that does not parse as an integer
        - Settings YAML that is not a mapping
    """
    
    error_code = "CFG001"
    
    def __init__(self, message: str, config_path: Optional[str] = None, key: Optional[str] = None):
        details = {}
        if config_path:
            details['config_path'] = config_path
        if key:
            details['config_key'] = key
        super().__init__(message, details)


class SchemaFileError(ReportGenError):
    """Raised when the schema (ddl) file cannot be opened or read."""
    
    error_code = "SCH001"
    
    def __init__(self, message: str, path: Optional[str] = None, original_error: Optional[Exception] = None):
        details = {}
        if path:
            details['path'] = path
        if original_error:
            details['original_error'] = str(original_error)
            details['error_type'] = type(original_error).__name__
        super().__init__(message, details)
        self.original_error = original_error


class SchemaDecodeError(ReportGenError):
    """Raised when a decoded schema value does not have the report shape.
    
    Examples:
        - A top-level array or scalar instead of an object
        - A number where the report name should be a string
        - Input bytes that are not valid UTF-8
    """
    
    error_code = "SCH002"
    
    def __init__(self, message: str, index: Optional[int] = None, original_error: Optional[Exception] = None):
        details: Dict[str, Any] = {}
        if index is not None:
            details['report_index'] = index
        if original_error:
            details['error_type'] = type(original_error).__name__
        super().__init__(message, details)
        self.original_error = original_error


class SchemaSyntaxError(SchemaDecodeError):
    """Raised when the schema stream contains malformed JSON.
    
    ``offset`` is the byte offset into the input where decoding failed.
    """
    
    error_code = "SCH003"
    
    def __init__(self, message: str, offset: int, index: Optional[int] = None):
        super().__init__(message, index=index)
        self.offset = offset
        self.details['offset'] = offset


class OutputError(ReportGenError):
    """Raised when the output file cannot be created or written."""
    
    error_code = "OUT001"
    
    def __init__(self, message: str, path: Optional[str] = None, original_error: Optional[Exception] = None):
        details = {}
        if path:
            details['path'] = path
        if original_error:
            details['original_error'] = str(original_error)
            details['error_type'] = type(original_error).__name__
        super().__init__(message, details)
        self.original_error = original_error


class RowSerializationError(ReportGenError):
    """Raised when a single generated row cannot be rendered as JSON.
    
    Recoverable: the emitter logs it, skips the row and keeps going.
    """
    
    error_code = "ROW001"
    
    def __init__(
        self,
        message: str,
        report: Optional[str] = None,
        column: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if report:
            details['report'] = report
        if column:
            details['column'] = column
        if original_error:
            details['original_error'] = str(original_error)
            details['error_type'] = type(original_error).__name__
        super().__init__(message, details)
        self.original_error = original_error
