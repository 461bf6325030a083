"""Lightweight in-memory counters for orchestration visibility."""

from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
from threading import Lock
from typing import Deque, Dict


class ViewMetrics:
    """Thread-safe, low-overhead counters for fetch, rate and sign-session activity."""

    def __init__(self, max_errors: int = 50) -> None:
        self._lock = Lock()
        self._recent_errors: Deque[Dict[str, str]] = deque(maxlen=max_errors)
        self.fetches_issued = 0
        self.fetches_applied = 0
        self.stale_results_discarded = 0
        self.fetch_failures = 0
        self.rate_failures = 0
        self.sign_sessions_resolved = 0
        self.sign_sessions_abandoned = 0

    def record_fetch_issued(self) -> None:
        with self._lock:
            self.fetches_issued += 1

    def record_fetch_applied(self) -> None:
        with self._lock:
            self.fetches_applied += 1

    def record_stale_discarded(self) -> None:
        """Count an out-of-order completion that was suppressed."""

        with self._lock:
            self.stale_results_discarded += 1

    def record_fetch_failure(self, message: str) -> None:
        with self._lock:
            self.fetch_failures += 1
            self._recent_errors.appendleft(self._format_error(message))

    def record_rate_failure(self, message: str) -> None:
        with self._lock:
            self.rate_failures += 1
            self._recent_errors.appendleft(self._format_error(message))

    def record_sign_session(self, resolved: bool) -> None:
        with self._lock:
            if resolved:
                self.sign_sessions_resolved += 1
            else:
                self.sign_sessions_abandoned += 1

    def snapshot(self) -> Dict[str, object]:
        """Return a read-only snapshot of current counters."""

        with self._lock:
            return {
                "fetches_issued": self.fetches_issued,
                "fetches_applied": self.fetches_applied,
                "stale_results_discarded": self.stale_results_discarded,
                "fetch_failures": self.fetch_failures,
                "rate_failures": self.rate_failures,
                "sign_sessions_resolved": self.sign_sessions_resolved,
                "sign_sessions_abandoned": self.sign_sessions_abandoned,
                "recent_errors": list(self._recent_errors),
            }

    @staticmethod
    def _format_error(message: str) -> Dict[str, str]:
        return {
            "at": datetime.now(timezone.utc).isoformat(),
            "message": message,
        }


__all__ = ["ViewMetrics"]
