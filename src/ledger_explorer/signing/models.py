from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class SignIntent(Enum):
    ADOPT = "adopt"  # the signer becomes the active account
    ONE_OFF = "one-off"  # only the operation's outcome matters


class SessionStatus(Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class SignRequest:
    transaction: Optional[Dict[str, Any]] = None
    action: Optional[str] = None
    redirect: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    intent: Optional[SignIntent] = None

    @property
    def effective_intent(self) -> SignIntent:
        """A bare sign-in adopts the signer; a request carrying a transaction is one-off."""
        if self.intent is not None:
            return self.intent
        return SignIntent.ONE_OFF if self.transaction else SignIntent.ADOPT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transaction": self.transaction,
            "action": self.action,
            "redirect": self.redirect,
            "data": dict(self.data),
            "intent": self.effective_intent.value,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SignRequest":
        intent = payload.get("intent")
        return cls(
            transaction=payload.get("transaction"),
            action=payload.get("action"),
            redirect=payload.get("redirect"),
            data=payload.get("data") or {},
            intent=SignIntent(intent) if intent else None,
        )


@dataclass(frozen=True)
class SignResult:
    address: str
    wallet: str
    username: Optional[str] = None


@dataclass(frozen=True)
class AccountIdentity:
    address: Optional[str] = None
    username: Optional[str] = None
    wallet: Optional[str] = None

    @property
    def signed_in(self) -> bool:
        return bool(self.address)


@dataclass
class SignSession:
    correlation_id: str
    request: SignRequest
    status: SessionStatus = SessionStatus.PENDING
    result: Optional[SignResult] = None
    reason: Optional[str] = None

    @property
    def intent(self) -> SignIntent:
        return self.request.effective_intent


@dataclass(frozen=True)
class SignOutcome:
    """Terminal event for a session, delivered to coordinator subscribers."""

    session: SignSession
    identity_changed: bool = False
