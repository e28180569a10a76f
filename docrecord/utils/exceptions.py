"""
Custom Exceptions Module.

All errors raised by the extraction engine. The pattern extractor and the
category classifier never raise; everything else surfaces one of these so
the invoking dispatcher can mark the document failed with the message.

Exception Hierarchy:
    DocRecordError (base)
    ├── ValidationError
    ├── ProviderError
    │   └── TimeoutError
    ├── NotFoundError
    └── StorageError
"""


class DocRecordError(Exception):
    """
    Base exception for all extraction engine errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(DocRecordError):
    """
    Raised for a malformed job, a missing credential in model-assisted
    mode, an unknown provider, or an unresolvable category.

    Example:
        >>> raise ValidationError("Provider is required", {"mode": "model-assisted"})
    """
    pass


class ProviderError(DocRecordError):
    """
    Raised when a model provider or the local extractor fails: non-2xx
    HTTP status, transport failure, missing or malformed JSON.
    """

    def __init__(self, message: str, provider: str = None, details: dict = None):
        details = dict(details or {})
        if provider:
            details.setdefault("provider", provider)
        self.provider = provider
        super().__init__(message, details)


class TimeoutError(ProviderError):
    """Raised when a provider call or child process exceeds its time budget."""

    def __init__(self, provider: str, timeout_seconds: float):
        message = f"{provider} did not respond within {timeout_seconds}s"
        super().__init__(message, provider, {"timeout_seconds": timeout_seconds})
        self.timeout_seconds = timeout_seconds


class NotFoundError(DocRecordError):
    """Raised when the referenced document or category is absent at persistence time."""

    def __init__(self, kind: str, identifier: str):
        message = f"{kind} not found: {identifier}"
        super().__init__(message, {"kind": kind, "id": identifier})


class StorageError(DocRecordError):
    """Raised when the category store fails."""

    def __init__(self, operation: str, reason: str = None):
        message = f"Storage operation failed: {operation}"
        super().__init__(message, {"operation": operation, "reason": reason})


__all__ = [
    'DocRecordError',
    'ValidationError',
    'ProviderError',
    'TimeoutError',
    'NotFoundError',
    'StorageError',
]
