# src/ledger_explorer/account/models.py

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


def _to_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    return int(value)


@dataclass(frozen=True)
class LedgerInfo:
    balance: int  # native minor units
    owner_count: int
    activated: bool = True
    blackholed: bool = False
    domain: Optional[str] = None
    did: Optional[Dict[str, Any]] = None
    reward_lgr_first: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "LedgerInfo":
        return cls(
            balance=_to_int(payload.get("balance")),
            owner_count=_to_int(payload.get("ownerCount")),
            activated=bool(payload.get("activated", True)),
            blackholed=bool(payload.get("blackholed", False)),
            domain=payload.get("domain") or None,
            did=payload.get("did") or None,
            reward_lgr_first=payload.get("rewardLgrFirst"),
        )


@dataclass(frozen=True)
class AccountSnapshot:
    address: str
    username: Optional[str] = None
    service: Optional[str] = None
    ledger_info: Optional[LedgerInfo] = None
    xaman_meta: Optional[Dict[str, Any]] = None
    inception: Optional[int] = None  # unix seconds
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AccountSnapshot":
        service = payload.get("service")
        ledger_info = payload.get("ledgerInfo")
        inception = payload.get("inception")
        return cls(
            address=payload["address"],
            username=payload.get("username"),
            service=service.get("name") if isinstance(service, dict) else service,
            ledger_info=LedgerInfo.from_payload(ledger_info) if isinstance(ledger_info, dict) else None,
            xaman_meta=payload.get("xamanMeta"),
            inception=_to_int(inception) if inception is not None else None,
            raw=payload,
        )


@dataclass(frozen=True)
class BalanceBuckets:
    total: int
    reserved: int
    available: int


@dataclass(frozen=True)
class DisplayIdentity:
    """Name shown for the viewed account, taken from the last applied snapshot."""

    address: Optional[str]
    username: Optional[str] = None
    service: Optional[str] = None
