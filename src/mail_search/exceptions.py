"""Custom exceptions for Mail Search."""


class MailSearchError(Exception):
    """Base exception for all Mail Search errors."""


class AuthenticationRequiredError(MailSearchError):
    """Exception raised when no owner identity could be resolved."""


class ThreadNotFoundError(MailSearchError):
    """Exception raised when a thread is missing or belongs to another owner."""


class StorageUnavailableError(MailSearchError):
    """Exception raised when the backing store is unreachable or errors.

    Callers should treat this as retryable.
    """


class InvalidFilterError(MailSearchError):
    """Exception raised for malformed search filters."""


class ConfigurationError(MailSearchError):
    """Exception raised for configuration related errors."""
