"""Custom exceptions for the metaloader application."""

from typing import Any, Optional


class MetaloaderError(Exception):
    """Base exception class for metaloader-specific errors."""

    pass


class ConfigurationError(MetaloaderError):
    """Raised when there are configuration-related errors."""

    pass


class ConfigurationMissing(ConfigurationError):
    """Raised when a load configuration is not found or is inactive."""

    def __init__(self, config_name: str) -> None:
        super().__init__(f"Configuration not found: {config_name}")
        self.config_name = config_name


class ProcessorNotConfiguredError(ConfigurationError):
    """Raised when a record reaches a processor with no FileConfig bound."""

    pass


class SourceOpenError(MetaloaderError):
    """Raised when the source file is missing or unreadable."""

    pass


class RecordParseError(MetaloaderError):
    """Raised when a source line does not split into the configured column count."""

    def __init__(self, line_number: int, expected: int, actual: int) -> None:
        super().__init__(
            f"Line {line_number}: expected {expected} fields but found {actual}"
        )
        self.line_number = line_number
        self.expected = expected
        self.actual = actual


class ValidationRejection(MetaloaderError):
    """Raised when a column value fails validation. Non-fatal: the record is skipped."""

    def __init__(self, column: str, value: Any, reason: Optional[str] = None) -> None:
        message = f"Validation failed for column {column} with value: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.column = column
        self.value = value


class UnknownDataType(MetaloaderError):
    """Raised at provisioning time for a data type tag with no storage mapping."""

    def __init__(self, data_type: str, column: str) -> None:
        super().__init__(f"Unknown data type '{data_type}' for column {column}")
        self.data_type = data_type
        self.column = column


class ChunkCommitFailure(MetaloaderError):
    """Raised when a chunk cannot be committed. Only that chunk is rolled back."""

    def __init__(self, chunk_number: int, message: str) -> None:
        super().__init__(f"Chunk {chunk_number} commit failed: {message}")
        self.chunk_number = chunk_number
