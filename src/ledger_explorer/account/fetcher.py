# src/ledger_explorer/account/fetcher.py

import asyncio
import logging
from typing import Any

from ledger_explorer.account.exceptions import DomainFailure, FetchFailure
from ledger_explorer.account.models import AccountSnapshot
from ledger_explorer.connection.exceptions import DomainError, TransportError
from ledger_explorer.logging_config import structured_log_extra
from ledger_explorer.time_machine import TimeSelection

logger = logging.getLogger(__name__)


class AccountDataFetcher:
    """
    Retrieves an account snapshot, live or as of a historical instant.

    The fetcher only talks to the data source. It never touches view state or
    the active identity; deciding whether a result is still wanted is up to
    the caller.
    """

    def __init__(self, client: Any):
        self._client = client

    async def fetch(
        self, address: str, time: TimeSelection, bypass_cache: bool = False
    ) -> AccountSnapshot:
        if not address:
            raise ValueError("address must be a non-empty string")

        logger.debug(
            "Fetching account %s at %s",
            address,
            time,
            extra=structured_log_extra(event="account_fetch_started", address=address),
        )
        try:
            payload = await asyncio.to_thread(
                self._client.get_address,
                address,
                ledger_timestamp=time.instant,
                bypass_cache=bypass_cache,
            )
        except DomainError as exc:
            raise DomainFailure(address, exc.code) from exc
        except TransportError as exc:
            raise FetchFailure(address, exc.reason) from exc

        if not payload.get("address"):
            raise DomainFailure(address, "not-found")

        try:
            return AccountSnapshot.from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchFailure(address, f"malformed account payload: {exc}") from exc
