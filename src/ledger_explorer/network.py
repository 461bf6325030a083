"""Process-wide network reserve parameters."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ledger_explorer.connection.exceptions import ExplorerAPIError
from ledger_explorer.logging_config import structured_log_extra

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkParameters:
    reserve_base: int
    reserve_increment: int

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "NetworkParameters":
        return cls(
            reserve_base=int(payload["reserveBase"]),
            reserve_increment=int(payload["reserveIncrement"]),
        )


class NetworkParametersProvider:
    """
    Supplies the latest successfully fetched reserve parameters.

    The value is loaded lazily once per session start and can be refreshed at
    any time. While a refresh is in flight readers keep seeing the previous
    value; subscribers are notified whenever a new value is stored.
    """

    def __init__(self, client: Any):
        self._client = client
        self._current: Optional[NetworkParameters] = None
        self._listeners: List[Callable[[NetworkParameters], None]] = []
        self._loading: Optional[asyncio.Task] = None

    @property
    def current(self) -> Optional[NetworkParameters]:
        return self._current

    def subscribe(self, listener: Callable[[NetworkParameters], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, params: NetworkParameters) -> None:
        """Store a new value and notify subscribers."""
        if params == self._current:
            return
        self._current = params
        for listener in list(self._listeners):
            listener(params)

    async def ensure_loaded(self) -> Optional[NetworkParameters]:
        """Fetch the parameters once; concurrent callers share the same request.

        A caller being cancelled does not cancel the shared load.
        """
        if self._current is not None:
            return self._current
        if self._loading is None or self._loading.done():
            self._loading = asyncio.ensure_future(self.refresh())
        return await asyncio.shield(self._loading)

    async def refresh(self) -> Optional[NetworkParameters]:
        """Fetch fresh parameters; on failure the previous value is kept."""
        try:
            payload = await asyncio.to_thread(self._client.get_server_info)
            params = NetworkParameters.from_payload(payload)
        except ExplorerAPIError as exc:
            logger.warning(
                "Network parameters refresh failed: %s",
                exc,
                extra=structured_log_extra(event="network_params_refresh_failed"),
            )
            return self._current
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(
                "Network parameters payload is malformed: %s",
                exc,
                extra=structured_log_extra(event="network_params_malformed"),
            )
            return self._current

        logger.info(
            "Network parameters refreshed",
            extra=structured_log_extra(
                event="network_params_refreshed",
                reserve_base=params.reserve_base,
                reserve_increment=params.reserve_increment,
            ),
        )
        self.publish(params)
        return params


__all__ = ["NetworkParameters", "NetworkParametersProvider"]
