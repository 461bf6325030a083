import asyncio

import pytest

from fakes import T1, FakeClient
from ledger_explorer.connection.exceptions import DomainError, TransportError
from ledger_explorer.rates import FiatRateResolver, to_fiat
from ledger_explorer.time_machine import TimeSelection


def test_live_selection_requests_current_rate():
    client = FakeClient()
    client.rates = {"eur": 0.45}

    rate = asyncio.run(FiatRateResolver(client).resolve_rate("EUR", TimeSelection.live()))

    assert rate == pytest.approx(0.45)
    assert client.calls == [("rate", ("eur", None))]


def test_pinned_selection_requests_historical_rate():
    client = FakeClient()
    client.rates = {"usd": "0.52"}

    rate = asyncio.run(FiatRateResolver(client).resolve_rate("usd", TimeSelection.at(T1)))

    assert rate == pytest.approx(0.52)
    assert client.calls == [("rate", ("usd", T1))]


@pytest.mark.parametrize(
    "payload",
    [{}, {"usd": None}, {"usd": "n/a"}, {"usd": 0}, {"usd": -1.5}, {"usd": True}],
)
def test_unusable_rate_values_are_unavailable(payload):
    client = FakeClient()
    client.rates = payload

    assert asyncio.run(FiatRateResolver(client).resolve_rate("usd", TimeSelection.live())) is None


@pytest.mark.parametrize("error", [TransportError("Network Error"), DomainError("rate-limited")])
def test_failures_are_unavailable(error):
    client = FakeClient()
    client.rates = error

    assert asyncio.run(FiatRateResolver(client).resolve_rate("usd", TimeSelection.at(T1))) is None


def test_to_fiat_distinguishes_missing_rate_from_zero_amount():
    assert to_fiat(2_000_000, 0.5) == pytest.approx(1.0)
    assert to_fiat(0, 0.5) == 0
    assert to_fiat(2_000_000, None) is None
    assert to_fiat(None, 0.5) is None
