"""Explicit dependency tracking for values derived from several inputs."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)

_MISSING = object()


class DependencyGraph:
    """Holds named inputs and re-runs reactions whose dependency list names a changed input.

    A reaction runs once per :meth:`set`/:meth:`update` call even if several of
    its inputs changed together. Setting an input to an equal value runs
    nothing.
    """

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self._reactions: List[Tuple[str, frozenset, Callable[[], None]]] = []

    def declare(self, name: str, depends_on: Iterable[str], reaction: Callable[[], None]) -> None:
        self._reactions.append((name, frozenset(depends_on), reaction))

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def seed(self, key: str, value: Any) -> None:
        """Store an initial value without running any reaction."""
        self._values[key] = value

    def set(self, key: str, value: Any) -> bool:
        return self.update({key: value})

    def update(self, values: Dict[str, Any]) -> bool:
        changed = set()
        for key, value in values.items():
            if self._values.get(key, _MISSING) != value:
                self._values[key] = value
                changed.add(key)
        if not changed:
            return False

        for name, deps, reaction in self._reactions:
            if deps & changed:
                logger.debug(
                    "Re-running %s after change to %s",
                    name,
                    ", ".join(sorted(deps & changed)),
                    extra={"event": "reaction_triggered", "reaction": name},
                )
                reaction()
        return True

    def touch(self, key: str) -> None:
        """Run every reaction depending on ``key`` without changing its value."""
        for name, deps, reaction in self._reactions:
            if key in deps:
                reaction()


__all__ = ["DependencyGraph"]
