"""Historical instant selection for an account view."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class ValidationFailure(ValueError):
    """Raised when a requested historical instant is outside the permitted range."""

    def __init__(self, message: str, instant: Optional[datetime] = None):
        super().__init__(message)
        self.instant = instant


@dataclass(frozen=True)
class TimeSelection:
    """Either live state (``instant is None``) or state as of ``instant``."""

    instant: Optional[datetime] = None

    @classmethod
    def live(cls) -> "TimeSelection":
        return cls()

    @classmethod
    def at(cls, instant: datetime) -> "TimeSelection":
        if instant.tzinfo is None:
            raise ValidationFailure("Historical instants must be timezone-aware", instant)
        return cls(instant.astimezone(timezone.utc))

    @property
    def is_live(self) -> bool:
        return self.instant is None

    def __str__(self) -> str:
        return "live" if self.instant is None else self.instant.isoformat()


def validate_instant(
    instant: datetime,
    inception: Optional[int] = None,
    now: Optional[datetime] = None,
) -> datetime:
    """Check that ``instant`` lies within ``[inception, now]`` and return it in UTC.

    ``inception`` is the account's creation time in unix seconds; when it is
    unknown only the upper bound is enforced.
    """
    if instant.tzinfo is None:
        raise ValidationFailure("Historical instants must be timezone-aware", instant)
    now = now or datetime.now(timezone.utc)
    if instant > now:
        raise ValidationFailure("Cannot view an account in the future", instant)
    if inception is not None and instant.timestamp() < inception:
        raise ValidationFailure("Instant is earlier than the account inception", instant)
    return instant.astimezone(timezone.utc)


class TimeMachineState(Enum):
    LIVE = "live"
    PINNED = "pinned"


class TimeMachineController:
    """Two-state machine: ``Live`` and ``Pinned(candidate, confirmed)``.

    Selecting a candidate has no effect on the exposed selection; only
    :meth:`confirm` does. Instants are assumed to be validated already.
    """

    def __init__(self, initial: Optional[datetime] = None) -> None:
        self._candidate: Optional[datetime] = initial
        self._confirmed: Optional[datetime] = initial

    @property
    def state(self) -> TimeMachineState:
        if self._confirmed is None:
            return TimeMachineState.LIVE
        return TimeMachineState.PINNED

    @property
    def candidate(self) -> Optional[datetime]:
        return self._candidate

    @property
    def confirmed(self) -> Optional[datetime]:
        return self._confirmed

    @property
    def selection(self) -> TimeSelection:
        if self._confirmed is None:
            return TimeSelection.live()
        return TimeSelection.at(self._confirmed)

    def select(self, instant: datetime) -> None:
        self._candidate = instant

    def confirm(self) -> TimeSelection:
        """Promote the candidate instant; confirming with no candidate goes back to live."""
        self._confirmed = self._candidate
        logger.info(
            "Time machine selection confirmed",
            extra={"event": "time_machine_confirmed", "selection": str(self.selection)},
        )
        return self.selection

    def reset(self) -> TimeSelection:
        self._candidate = None
        self._confirmed = None
        return self.selection


__all__ = [
    "TimeSelection",
    "TimeMachineController",
    "TimeMachineState",
    "ValidationFailure",
    "validate_instant",
]
