import asyncio

import pytest

from fakes import T1, FakeClient, make_payload
from ledger_explorer.account.exceptions import DomainFailure, FetchFailure
from ledger_explorer.account.fetcher import AccountDataFetcher
from ledger_explorer.connection.exceptions import (
    DomainError,
    RateLimitError,
    ServiceUnavailableError,
    TransportError,
)
from ledger_explorer.time_machine import TimeSelection


@pytest.fixture
def client():
    return FakeClient()


def test_live_fetch_builds_snapshot(client):
    client.addresses["rAlice"] = make_payload(
        "rAlice",
        username="alice",
        service={"name": "Alice Exchange"},
        xamanMeta={"kycApproved": True},
    )
    client.addresses["rAlice"]["ledgerInfo"].update({"domain": "alice.test", "rewardLgrFirst": 7})

    snapshot = asyncio.run(AccountDataFetcher(client).fetch("rAlice", TimeSelection.live()))

    assert snapshot.address == "rAlice"
    assert snapshot.username == "alice"
    assert snapshot.service == "Alice Exchange"
    assert snapshot.inception == 1_600_000_000
    assert snapshot.xaman_meta == {"kycApproved": True}
    assert snapshot.ledger_info.balance == 20_000_000
    assert snapshot.ledger_info.owner_count == 3
    assert snapshot.ledger_info.domain == "alice.test"
    assert snapshot.ledger_info.reward_lgr_first == 7
    assert client.calls == [("address", ("rAlice", None, False))]


def test_historical_fetch_targets_the_instant_and_bypasses_cache(client):
    client.addresses["rAlice"] = make_payload("rAlice")

    asyncio.run(
        AccountDataFetcher(client).fetch("rAlice", TimeSelection.at(T1), bypass_cache=True)
    )

    assert client.calls == [("address", ("rAlice", T1, True))]


def test_empty_address_is_rejected(client):
    with pytest.raises(ValueError):
        asyncio.run(AccountDataFetcher(client).fetch("", TimeSelection.live()))
    assert client.calls == []


@pytest.mark.parametrize(
    "error, expected_code",
    [
        (DomainError("not-found"), "not-found"),
        (RateLimitError(), "rate-limited"),
    ],
)
def test_domain_errors_keep_their_code(client, error, expected_code):
    client.addresses["rBob"] = error

    with pytest.raises(DomainFailure) as exc_info:
        asyncio.run(AccountDataFetcher(client).fetch("rBob", TimeSelection.live()))

    assert exc_info.value.code == expected_code
    assert exc_info.value.address == "rBob"


@pytest.mark.parametrize(
    "error",
    [TransportError("Network Error: refused"), ServiceUnavailableError("Explorer API Service Error: HTTP 502")],
)
def test_transport_errors_become_fetch_failures(client, error):
    client.addresses["rBob"] = error

    with pytest.raises(FetchFailure) as exc_info:
        asyncio.run(AccountDataFetcher(client).fetch("rBob", TimeSelection.live()))

    assert exc_info.value.reason == error.reason


def test_payload_without_address_is_not_found(client):
    client.addresses["rGhost"] = {"ledgerInfo": None}

    with pytest.raises(DomainFailure) as exc_info:
        asyncio.run(AccountDataFetcher(client).fetch("rGhost", TimeSelection.live()))

    assert exc_info.value.code == "not-found"


def test_malformed_ledger_info_is_a_fetch_failure(client):
    client.addresses["rOdd"] = make_payload("rOdd", balance="lots")

    with pytest.raises(FetchFailure, match="malformed"):
        asyncio.run(AccountDataFetcher(client).fetch("rOdd", TimeSelection.live()))
