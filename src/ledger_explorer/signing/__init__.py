from .coordinator import SignSessionCoordinator, is_valid_uuid
from .exceptions import (
    IdentityWriterClaimed,
    InvalidCorrelationId,
    NoPendingSession,
    SignSessionError,
)
from .identity import IdentityStore, IdentityWriter
from .models import (
    AccountIdentity,
    SessionStatus,
    SignIntent,
    SignOutcome,
    SignRequest,
    SignResult,
    SignSession,
)

__all__ = [
    "SignSessionCoordinator",
    "is_valid_uuid",
    "IdentityStore",
    "IdentityWriter",
    "AccountIdentity",
    "SessionStatus",
    "SignIntent",
    "SignOutcome",
    "SignRequest",
    "SignResult",
    "SignSession",
    "SignSessionError",
    "InvalidCorrelationId",
    "NoPendingSession",
    "IdentityWriterClaimed",
]
