"""Shared fixtures for the explorer test suite."""
from __future__ import annotations

import pytest

from fakes import DEFAULT_PARAMS, FakeClient
from ledger_explorer.network import NetworkParametersProvider
from ledger_explorer.state_store import ClientStateStore


@pytest.fixture
def state_store(tmp_path) -> ClientStateStore:
    return ClientStateStore(tmp_path / "client_state.yaml")


@pytest.fixture
def params_provider() -> NetworkParametersProvider:
    provider = NetworkParametersProvider(FakeClient())
    provider.publish(DEFAULT_PARAMS)
    return provider
