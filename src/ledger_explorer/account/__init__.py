from .actions import AccountAction, actions_visible, available_actions
from .balances import reconcile
from .exceptions import (
    AccountFetchError,
    DomainFailure,
    FetchFailure,
    StaleResultDiscarded,
)
from .fetcher import AccountDataFetcher
from .models import AccountSnapshot, BalanceBuckets, DisplayIdentity, LedgerInfo

__all__ = [
    "AccountAction",
    "actions_visible",
    "available_actions",
    "AccountDataFetcher",
    "AccountSnapshot",
    "BalanceBuckets",
    "DisplayIdentity",
    "LedgerInfo",
    "reconcile",
    "AccountFetchError",
    "FetchFailure",
    "DomainFailure",
    "StaleResultDiscarded",
]
