"""Fiat conversion rates for live and historical selections."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, Optional

from ledger_explorer.connection.exceptions import ExplorerAPIError
from ledger_explorer.logging_config import structured_log_extra
from ledger_explorer.time_machine import TimeSelection

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_NATIVE = 1_000_000

FiatRate = Optional[float]


def to_fiat(amount_minor: Optional[int], rate: FiatRate) -> Optional[float]:
    """Convert native minor units to a fiat amount; unavailable stays ``None``, never zero."""
    if amount_minor is None or rate is None:
        return None
    return amount_minor / MINOR_UNITS_PER_NATIVE * rate


def _extract_rate(payload: Dict[str, Any], currency: str) -> FiatRate:
    value = payload.get(currency)
    if value is None or isinstance(value, bool):
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


class FiatRateResolver:
    """Resolves the conversion rate for a currency at a time selection.

    Nearest-sample approximation for historical instants is the data source's
    job; the returned value is taken as authoritative. Any failure yields
    ``None`` ("unavailable").
    """

    def __init__(self, client: Any):
        self._client = client

    async def resolve_rate(self, currency: str, time: TimeSelection) -> FiatRate:
        currency = currency.lower()
        try:
            if time.is_live:
                payload = await asyncio.to_thread(self._client.get_current_rate, currency)
            else:
                payload = await asyncio.to_thread(
                    self._client.get_historical_rate, currency, time.instant
                )
        except ExplorerAPIError as exc:
            logger.warning(
                "Fiat rate unavailable for %s at %s: %s",
                currency,
                time,
                exc,
                extra=structured_log_extra(event="fiat_rate_failed", currency=currency),
            )
            return None

        rate = _extract_rate(payload, currency)
        if rate is None:
            logger.warning(
                "Fiat rate payload has no usable %s value",
                currency,
                extra=structured_log_extra(event="fiat_rate_missing", currency=currency),
            )
        return rate


__all__ = ["FiatRate", "FiatRateResolver", "MINOR_UNITS_PER_NATIVE", "to_fiat"]
