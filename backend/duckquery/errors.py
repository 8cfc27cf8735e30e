"""duckquery exception classes."""

from __future__ import annotations


class DuckqueryError(Exception):
    """Base exception for all duckquery errors."""

    pass


class InvalidRequestError(DuckqueryError):
    """Raised when a request envelope cannot be decoded."""

    pass


class DatasourceConnectionError(DuckqueryError):
    """Raised when the datasource cannot be opened or fails its health check."""

    def __init__(self, target: str, original_error: Exception) -> None:
        self.target = target
        self.original_error = original_error
        super().__init__(f"Error connecting to '{target}': {original_error}")


class UnsupportedFormatError(DuckqueryError):
    """Raised when a query asks for an output shape other than a table."""

    def __init__(self, format: str) -> None:
        self.format = format
        super().__init__(f"{format} not supported")


class SanitizationError(DuckqueryError):
    """Raised when raw SQL is rejected by macro interpolation or sanitization."""

    pass


class ExecutionError(DuckqueryError):
    """Raised when the driver fails to run a query.

    The message is the driver's own message so it can be shown to the user
    as-is.
    """

    def __init__(self, ref_id: str, original_error: Exception) -> None:
        self.ref_id = ref_id
        self.original_error = original_error
        super().__init__(str(original_error))


class RowFetchError(ExecutionError):
    """Raised when reading rows from an open cursor fails part way."""

    def __init__(self, ref_id: str, original_error: Exception, rows_read: int) -> None:
        self.rows_read = rows_read
        super().__init__(ref_id, original_error)
