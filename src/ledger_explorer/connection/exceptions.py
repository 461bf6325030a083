# src/ledger_explorer/connection/exceptions.py

class ExplorerAPIError(Exception):
    """Base exception for all explorer API related errors."""
    pass

class TransportError(ExplorerAPIError):
    """Raised when the API cannot be reached or returns an unusable response."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

class ServiceUnavailableError(TransportError):
    """Raised when the API is down, overloaded or in maintenance."""
    pass

class DomainError(ExplorerAPIError):
    """Raised when the API answers with a well-formed application error."""

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or f"API error: {code}")
        self.code = code

class RateLimitError(DomainError):
    """Raised when API rate limits are exceeded."""

    def __init__(self, message: str | None = None):
        super().__init__("rate-limited", message or "Rate limit exceeded")
