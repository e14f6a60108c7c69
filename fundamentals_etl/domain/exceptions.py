"""Custom exceptions for the fundamentals ETL.

Most failures in a pipeline cycle are recoverable and are caught close to
where they happen. Only StorageUnavailableError is allowed to abort a cycle.
"""


class FundamentalsETLError(Exception):
    """Base exception for all fundamentals_etl errors."""

    pass


# ============================================================================
# Data errors
# ============================================================================


class DataError(FundamentalsETLError):
    """Base class for data-related errors."""

    pass


class DataValidationError(DataError):
    """Raised when input fails validation.

    Examples:
    - Unknown statement kind
    - Unknown revenue field policy
    """

    def __init__(self, message: str, field: str | None = None, value: object = None):
        super().__init__(message)
        self.field = field
        self.value = value


# ============================================================================
# Storage errors
# ============================================================================


class StorageError(FundamentalsETLError):
    """Base class for storage-related errors."""

    pass


class StorageUnavailableError(StorageError):
    """Raised when the store itself cannot be reached.

    This is the only error that aborts a pipeline cycle.
    """

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class StorageReadError(StorageError):
    """Raised when reading from storage fails."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class StorageWriteError(StorageError):
    """Raised when a single write to storage fails."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path
