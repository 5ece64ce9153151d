"""Domain-specific exceptions for the profit tracker core."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class RecordNotFoundError(LookupError):
    """Raised when a transaction or business cannot be located."""


class PersistenceError(IOError):
    """Raised when the document store encounters unrecoverable issues."""
