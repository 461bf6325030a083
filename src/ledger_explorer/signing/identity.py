"""Process-wide active account identity."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Callable, List, Optional

from ledger_explorer.logging_config import structured_log_extra
from ledger_explorer.signing.exceptions import IdentityWriterClaimed
from ledger_explorer.signing.models import AccountIdentity
from ledger_explorer.state_store import ClientStateStore

logger = logging.getLogger(__name__)

IdentityListener = Callable[[AccountIdentity], None]


class IdentityStore:
    """Owns the active identity shared by every account view.

    Anyone may read or subscribe. Writing goes through the single
    :class:`IdentityWriter` handed out by :meth:`claim_writer`, which the
    sign-session coordinator takes at construction.
    """

    def __init__(self, state_store: Optional[ClientStateStore] = None):
        self._state_store = state_store
        self._listeners: List[IdentityListener] = []
        self._writer: Optional[IdentityWriter] = None
        self._generation = 0
        persisted = state_store.load_identity() if state_store else {}
        self._identity = AccountIdentity(
            address=persisted.get("address"),
            username=persisted.get("username"),
            wallet=persisted.get("wallet"),
        )

    @property
    def identity(self) -> AccountIdentity:
        return self._identity

    @property
    def generation(self) -> int:
        """Bumped on every write; lets a slow writer detect that it was overtaken."""
        return self._generation

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def claim_writer(self) -> "IdentityWriter":
        if self._writer is not None:
            raise IdentityWriterClaimed("Active identity already has a writer")
        self._writer = IdentityWriter(self)
        return self._writer

    def _store(self, identity: AccountIdentity) -> None:
        self._identity = identity
        self._generation += 1
        if self._state_store is not None:
            self._state_store.save_identity(asdict(identity))
        for listener in list(self._listeners):
            listener(identity)


class IdentityWriter:
    def __init__(self, store: IdentityStore):
        self._store = store

    def adopt(self, identity: AccountIdentity) -> None:
        logger.info(
            "Active identity adopted",
            extra=structured_log_extra(event="identity_adopted", address=identity.address),
        )
        self._store._store(identity)  # noqa: SLF001

    def clear(self) -> None:
        logger.info("Active identity cleared", extra=structured_log_extra(event="identity_cleared"))
        self._store._store(AccountIdentity())  # noqa: SLF001


__all__ = ["IdentityStore", "IdentityWriter"]
