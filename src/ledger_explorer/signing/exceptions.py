# src/ledger_explorer/signing/exceptions.py


class SignSessionError(Exception):
    """Base exception for sign-session coordination errors."""

    pass


class InvalidCorrelationId(SignSessionError):
    """Raised when a correlation identifier is not a valid UUID."""

    def __init__(self, correlation_id: object):
        super().__init__(f"Invalid correlation id: {correlation_id!r}")
        self.correlation_id = correlation_id


class NoPendingSession(SignSessionError):
    """Raised when a resolution arrives for a session that is not pending."""

    def __init__(self, correlation_id: str):
        super().__init__(f"No pending sign session with correlation id {correlation_id}")
        self.correlation_id = correlation_id


class IdentityWriterClaimed(SignSessionError):
    """Raised when a second component tries to obtain write access to the active identity."""

    pass
