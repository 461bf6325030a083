"""Spendable balance derivation."""

from __future__ import annotations

from typing import Optional

from ledger_explorer.account.models import AccountSnapshot, BalanceBuckets
from ledger_explorer.network import NetworkParameters


def reconcile(snapshot: AccountSnapshot, params: NetworkParameters) -> Optional[BalanceBuckets]:
    """Split the account balance into reserved and available parts.

    The reserve is ``reserve_base + owner_count * reserve_increment``, clamped
    to the total: an account never owes more than it holds. Returns ``None``
    when the snapshot carries no ledger state.
    """
    info = snapshot.ledger_info
    if info is None:
        return None

    total = info.balance
    reserved = params.reserve_base + info.owner_count * params.reserve_increment
    if reserved > total:
        reserved = total

    available = total - reserved
    if available < 0:
        available = 0

    return BalanceBuckets(total=total, reserved=reserved, available=available)


__all__ = ["reconcile"]
