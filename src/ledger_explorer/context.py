"""Application context wiring shared services for account views."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ledger_explorer.account.fetcher import AccountDataFetcher
from ledger_explorer.account.view import AccountView
from ledger_explorer.config import ExplorerConfig, load_config
from ledger_explorer.connection.rest_client import ExplorerRESTClient
from ledger_explorer.metrics import ViewMetrics
from ledger_explorer.network import NetworkParametersProvider
from ledger_explorer.rates import FiatRateResolver
from ledger_explorer.signing.coordinator import SignSessionCoordinator
from ledger_explorer.signing.identity import IdentityStore
from ledger_explorer.state_store import ClientStateStore


@dataclass
class ExplorerContext:
    """Bundled process-wide services; account views are opened from here."""

    config: ExplorerConfig
    client: ExplorerRESTClient
    state_store: ClientStateStore
    network_params: NetworkParametersProvider
    fetcher: AccountDataFetcher
    rate_resolver: FiatRateResolver
    identity_store: IdentityStore
    coordinator: SignSessionCoordinator
    metrics: ViewMetrics

    def open_view(
        self,
        address: Optional[str] = None,
        *,
        currency: Optional[str] = None,
        initial_data: Optional[Dict[str, Any]] = None,
        initial_instant: Optional[datetime] = None,
    ) -> AccountView:
        return AccountView(
            self.fetcher,
            self.rate_resolver,
            self.network_params,
            address=address,
            currency=currency or self.state_store.selected_currency,
            initial_data=initial_data,
            initial_instant=initial_instant,
            coordinator=self.coordinator,
            metrics=self.metrics,
        )

    def select_currency(self, currency: str) -> str:
        self.state_store.selected_currency = currency
        return self.state_store.selected_currency


def build_context(
    config: Optional[ExplorerConfig] = None,
    state_store: Optional[ClientStateStore] = None,
    client: Optional[ExplorerRESTClient] = None,
) -> ExplorerContext:
    """Instantiate the services shared by every account view.

    Args:
        config: Explorer configuration; loaded from disk when omitted.
        state_store: Persisted client state; the default location is used when omitted.
        client: Transport client; built from ``config.api`` when omitted.

    Returns:
        A ready :class:`ExplorerContext`. Nothing is fetched until a view starts.
    """

    config = config or load_config()
    state_store = state_store or ClientStateStore(default_currency=config.display.default_currency)
    client = client or ExplorerRESTClient(
        server_url=config.api.server_url,
        api_token=config.api.api_token,
        request_timeout=config.api.request_timeout,
        development=config.api.development,
    )
    metrics = ViewMetrics()
    identity_store = IdentityStore(state_store)
    coordinator = SignSessionCoordinator(
        identity_store,
        client=client,
        state_store=state_store,
        timeout_seconds=config.signing.timeout_seconds,
        metrics=metrics,
        poll_interval=config.signing.poll_interval_seconds,
    )

    return ExplorerContext(
        config=config,
        client=client,
        state_store=state_store,
        network_params=NetworkParametersProvider(client),
        fetcher=AccountDataFetcher(client),
        rate_resolver=FiatRateResolver(client),
        identity_store=identity_store,
        coordinator=coordinator,
        metrics=metrics,
    )


__all__ = ["ExplorerContext", "build_context"]
