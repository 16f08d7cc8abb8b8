"""Domain error types."""


class CompletionFailedError(Exception):
    """Raised when the text completion service fails for any reason."""


class RateLimitedError(CompletionFailedError):
    """Raised when the text completion service rejects a call as overloaded (HTTP 429)."""


class SessionNotFoundError(Exception):
    """Raised when a stored session cannot be found."""
