"""Last-issued-wins bookkeeping for overlapping asynchronous requests."""

from __future__ import annotations

from ledger_explorer.account.exceptions import StaleResultDiscarded


class RequestSequencer:
    """Hands out monotonically increasing sequence numbers.

    Every triggering condition calls :meth:`issue`; a completion is applied
    only if its number is still the highest one issued. Earlier requests are
    not aborted at the transport level, their results are dropped.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, sequence: int) -> bool:
        return sequence == self._latest

    def ensure_current(self, sequence: int) -> None:
        """Raise :class:`StaleResultDiscarded` when a newer request was issued."""
        if sequence != self._latest:
            raise StaleResultDiscarded(self.name, sequence, self._latest)


__all__ = ["RequestSequencer"]
