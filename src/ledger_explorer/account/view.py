"""Page-level orchestration for one account viewing session."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Coroutine, Dict, List, Optional, Set, Union

from ledger_explorer.account.balances import reconcile
from ledger_explorer.account.exceptions import AccountFetchError, StaleResultDiscarded
from ledger_explorer.account.fetcher import AccountDataFetcher
from ledger_explorer.account.models import AccountSnapshot, BalanceBuckets, DisplayIdentity
from ledger_explorer.logging_config import structured_log_extra
from ledger_explorer.messages import message_for
from ledger_explorer.metrics import ViewMetrics
from ledger_explorer.network import NetworkParameters, NetworkParametersProvider
from ledger_explorer.rates import FiatRate, FiatRateResolver, to_fiat
from ledger_explorer.reactive import DependencyGraph
from ledger_explorer.sequencing import RequestSequencer
from ledger_explorer.signing.coordinator import SignSessionCoordinator
from ledger_explorer.signing.models import SignOutcome
from ledger_explorer.time_machine import TimeMachineController, TimeSelection, validate_instant

logger = logging.getLogger(__name__)

ViewListener = Callable[["AccountView"], None]


class AccountView:
    """
    Holds the state of one account page and keeps it consistent.

    Inputs (address, time selection, refresh token, currency, network
    parameters, snapshot) live in a :class:`DependencyGraph`; derived work is
    declared with explicit dependency lists:

    * balances <- snapshot, network_parameters (synchronous)
    * account fetch <- address, time_selection, refresh_token
    * page fiat rate <- currency, time_selection

    Fetches and rate resolutions run as tasks on the event loop. Only the
    most recently issued request of each kind may write its result; a failed
    request leaves previously displayed data untouched.
    """

    def __init__(
        self,
        fetcher: AccountDataFetcher,
        rate_resolver: FiatRateResolver,
        network_params: NetworkParametersProvider,
        *,
        address: Optional[str] = None,
        currency: str = "usd",
        initial_data: Optional[Dict[str, Any]] = None,
        initial_instant: Optional[datetime] = None,
        coordinator: Optional[SignSessionCoordinator] = None,
        metrics: Optional[ViewMetrics] = None,
    ):
        self._fetcher = fetcher
        self._rate_resolver = rate_resolver
        self._network_params = network_params
        self._coordinator = coordinator
        self.metrics = metrics or ViewMetrics()

        self.time_machine = TimeMachineController(initial_instant)
        self._fetch_sequencer = RequestSequencer("account")
        self._rate_sequencer = RequestSequencer("fiat_rate")
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[ViewListener] = []
        self._unsubscribers: List[Callable[[], None]] = []
        self._bypass_next_fetch = False
        self._started = False

        self._initial_address = address
        self._initial_currency = currency.lower()

        self.balances: Optional[BalanceBuckets] = None
        self.fiat_rate: FiatRate = None
        self.loading = False
        self.error: Optional[AccountFetchError] = None
        self.error_message: Optional[str] = None

        self._graph = DependencyGraph()
        self._graph.declare("balances", ("snapshot", "network_parameters"), self._recompute_balances)
        self._graph.declare(
            "account_fetch", ("address", "time_selection", "refresh_token"), self._schedule_fetch
        )
        self._graph.declare("fiat_rate", ("currency", "time_selection"), self._schedule_rate)

        # Server-provided first-render data is displayed without a fetch.
        self._seeded = False
        if initial_data and initial_data.get("address"):
            snapshot = AccountSnapshot.from_payload(initial_data)
            self._graph.set("snapshot", snapshot)
            self._seeded = True
        self.display_identity = DisplayIdentity(
            address=(initial_data or {}).get("address") or address,
            username=(initial_data or {}).get("username"),
            service=self.snapshot.service if self.snapshot else None,
        )

    # -- read side -------------------------------------------------------

    @property
    def address(self) -> Optional[str]:
        return self._graph.get("address", self._initial_address)

    @property
    def currency(self) -> str:
        return self._graph.get("currency", self._initial_currency)

    @property
    def time_selection(self) -> TimeSelection:
        return self.time_machine.selection

    @property
    def snapshot(self) -> Optional[AccountSnapshot]:
        return self._graph.get("snapshot")

    @property
    def network_parameters(self) -> Optional[NetworkParameters]:
        return self._graph.get("network_parameters")

    @property
    def fiat_balances(self) -> Dict[str, Optional[float]]:
        """Balances in the selected currency; ``None`` where the rate is unavailable."""
        if self.balances is None:
            return {"total": None, "reserved": None, "available": None}
        return {
            "total": to_fiat(self.balances.total, self.fiat_rate),
            "reserved": to_fiat(self.balances.reserved, self.fiat_rate),
            "available": to_fiat(self.balances.available, self.fiat_rate),
        }

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -- lifecycle -------------------------------------------------------

    def start(self) -> None:
        """Wire up inputs and issue the initial requests. Call from within the running loop."""
        if self._started:
            return
        self._started = True

        self._unsubscribers.append(self._network_params.subscribe(self._on_network_params))
        if self._coordinator is not None:
            self._unsubscribers.append(self._coordinator.subscribe(self._on_sign_outcome))

        if self._network_params.current is not None:
            self._graph.set("network_parameters", self._network_params.current)
        else:
            self._spawn(self._network_params.ensure_loaded())

        self._graph.seed("time_selection", self.time_machine.selection)
        self._graph.seed("refresh_token", 0)
        address = self._initial_address
        seeded_for_address = False
        if self._seeded:
            seeded_for_address = address is None or self.snapshot.address == address
            address = address or self.snapshot.address
        self._graph.seed("address", address)

        self._graph.set("currency", self._initial_currency)
        if not seeded_for_address:
            self._graph.touch("address")

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        for task in list(self._tasks):
            task.cancel()

    async def settle(self) -> None:
        """Wait until every outstanding request of this view has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # -- triggers --------------------------------------------------------

    def set_address(self, address: str) -> None:
        if not address:
            raise ValueError("address must be a non-empty string")
        if not self._started:
            self._initial_address = address
            return
        self._graph.set("address", address)

    def set_currency(self, currency: str) -> None:
        if not self._started:
            self._initial_currency = currency.lower()
            return
        self._graph.set("currency", currency.lower())

    def select_instant(self, instant: datetime, now: Optional[datetime] = None) -> None:
        """Store a candidate instant after range validation; nothing is fetched until confirmed."""
        inception = self.snapshot.inception if self.snapshot else None
        self.time_machine.select(validate_instant(instant, inception, now))

    def confirm_instant(self) -> None:
        selection = self.time_machine.confirm()
        if self._started:
            self._graph.set("time_selection", selection)

    def reset_time_machine(self) -> None:
        selection = self.time_machine.reset()
        if self._started:
            self._graph.set("time_selection", selection)

    def refresh(self, bypass_cache: bool = False) -> None:
        if not self._started:
            return
        self._bypass_next_fetch = self._bypass_next_fetch or bypass_cache
        self._graph.set("refresh_token", self._graph.get("refresh_token", 0) + 1)

    # -- reactions -------------------------------------------------------

    def _recompute_balances(self) -> None:
        snapshot = self.snapshot
        params = self.network_parameters
        if snapshot is None or params is None:
            self.balances = None
        else:
            self.balances = reconcile(snapshot, params)
        self._notify()

    def _schedule_fetch(self) -> None:
        address = self.address
        if not address:
            return
        bypass_cache = self._bypass_next_fetch
        self._bypass_next_fetch = False
        selection = self.time_machine.selection
        sequence = self._fetch_sequencer.issue()
        self.loading = True
        self.metrics.record_fetch_issued()
        logger.debug(
            "Account fetch #%s issued for %s at %s",
            sequence,
            address,
            selection,
            extra=structured_log_extra(
                event="account_fetch_issued", address=address, sequence=sequence
            ),
        )
        self._spawn(self._run_fetch(sequence, address, selection, bypass_cache))
        self._notify()

    async def _run_fetch(
        self, sequence: int, address: str, selection: TimeSelection, bypass_cache: bool
    ) -> None:
        outcome: Union[AccountSnapshot, AccountFetchError]
        try:
            outcome = await self._fetcher.fetch(address, selection, bypass_cache=bypass_cache)
        except AccountFetchError as exc:
            outcome = exc

        try:
            self._fetch_sequencer.ensure_current(sequence)
        except StaleResultDiscarded as exc:
            self.metrics.record_stale_discarded()
            logger.debug(
                "%s",
                exc,
                extra=structured_log_extra(
                    event="stale_result_discarded", address=address, sequence=sequence
                ),
            )
            return

        self.loading = False
        if isinstance(outcome, AccountFetchError):
            self.error = outcome
            self.error_message = message_for(outcome)
            self.metrics.record_fetch_failure(str(outcome))
            logger.warning(
                "Account fetch failed: %s",
                outcome,
                extra=structured_log_extra(
                    event="account_fetch_failed", address=address, sequence=sequence
                ),
            )
            self._notify()
            return

        self.error = None
        self.error_message = None
        self.display_identity = DisplayIdentity(
            address=outcome.address, username=outcome.username, service=outcome.service
        )
        self.metrics.record_fetch_applied()
        if not self._graph.set("snapshot", outcome):
            self._notify()

    def _schedule_rate(self) -> None:
        currency = self.currency
        if not currency:
            return
        selection = self.time_machine.selection
        sequence = self._rate_sequencer.issue()
        self._spawn(self._run_rate(sequence, currency, selection))

    async def _run_rate(self, sequence: int, currency: str, selection: TimeSelection) -> None:
        rate = await self._rate_resolver.resolve_rate(currency, selection)
        if not self._rate_sequencer.is_current(sequence):
            self.metrics.record_stale_discarded()
            logger.debug(
                "Discarding fiat rate #%s for %s at %s",
                sequence,
                currency,
                selection,
                extra=structured_log_extra(event="stale_result_discarded", sequence=sequence),
            )
            return
        if rate is None:
            self.metrics.record_rate_failure(f"Fiat rate unavailable for {currency} at {selection}")
        self.fiat_rate = rate
        self._notify()

    def _on_network_params(self, params: NetworkParameters) -> None:
        self._graph.set("network_parameters", params)

    def _on_sign_outcome(self, outcome: SignOutcome) -> None:
        if not outcome.identity_changed or self._coordinator is None:
            return
        signed_in = self._coordinator.identity.address
        self._bypass_next_fetch = True
        if not self.address and signed_in:
            self._graph.set("address", signed_in)
        else:
            self.refresh(bypass_cache=True)

    # -- plumbing --------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Account view task failed",
                exc_info=exc,
                extra=structured_log_extra(event="view_task_failed", address=self.address),
            )

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


__all__ = ["AccountView"]
