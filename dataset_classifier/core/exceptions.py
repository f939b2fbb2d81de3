"""
Exceptions raised by the classification pipeline.

Malformed records (too few fields to reach the NHS or target column) are
not an error: they are dropped silently and have no exception type here.
"""

from typing import Any, Dict, Optional, Sequence


class ClassifierError(Exception):
    """Base classifier exception."""
    
    def __init__(
        self,
        message: str,
        error_type: str = "classifier_error",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_type = error_type
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(ClassifierError):
    """Invalid or missing run configuration."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            error_type="configuration_error",
            details=details,
        )


class UnresolvedColumnError(ConfigurationError):
    """A configured column name does not exist in the schema."""

    def __init__(self, column: str, available: Sequence[str]):
        super().__init__(f"Column not found in schema: {column!r}", field=column)
        self.error_type = "unresolved_column"
        self.details["column"] = column
        self.details["available"] = list(available)


class FormattingIndexError(ClassifierError):
    """A record reached the formatter with fewer fields than the schema."""
    
    def __init__(self, line: str, field_count: int, schema_length: int):
        super().__init__(
            message=(
                f"Record has {field_count} fields but the schema defines "
                f"{schema_length}: {line[:80]!r}"
            ),
            error_type="formatting_index_error",
            details={
                "line": line,
                "field_count": field_count,
                "schema_length": schema_length,
            },
        )


class OutputExistsError(ClassifierError):
    """The output location already exists."""
    
    def __init__(self, location: str):
        super().__init__(
            message=f"Output directory already exists: {location}",
            error_type="output_exists",
            details={"location": location},
        )


class SubstrateError(ClassifierError):
    """Execution or storage failure outside the classification logic."""
    
    def __init__(self, operation: str, message: str):
        super().__init__(
            message=f"Job failed ({operation}): {message}",
            error_type="substrate_error",
            details={"operation": operation},
        )
