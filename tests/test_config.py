import logging

import pytest
import yaml

from ledger_explorer import config, config_loader
from ledger_explorer.config import ExplorerConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("LEDGER_EXPLORER_ENV", raising=False)
    monkeypatch.delenv("LEDGER_EXPLORER_API_TOKEN", raising=False)


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.yaml"


def _write(path, data):
    with open(path, "w") as f:
        yaml.safe_dump(data, f)


def test_get_config_dir_uses_appdirs(monkeypatch, tmp_path):
    monkeypatch.setattr(
        config_loader.appdirs, "user_config_dir", lambda name: str(tmp_path / name)
    )

    assert config.get_config_dir() == tmp_path / "ledger_explorer"


def test_missing_file_yields_defaults(config_path, caplog):
    with caplog.at_level(logging.INFO):
        cfg = load_config(config_path)

    assert cfg == ExplorerConfig()
    assert cfg.env == "live"
    assert cfg.api.development is False
    assert any(getattr(r, "event", None) == "config_missing_file" for r in caplog.records)


def test_loads_sections_from_file(config_path):
    _write(
        config_path,
        {
            "api": {"server_url": "https://explorer.test/", "request_timeout": 3},
            "network": {"name": "Xahau"},
            "signing": {"timeout_seconds": 60, "poll_interval_seconds": 0.5},
            "display": {"default_currency": "EUR"},
        },
    )

    cfg = load_config(config_path)

    assert cfg.api.server_url == "https://explorer.test"
    assert cfg.api.request_timeout == pytest.approx(3.0)
    assert cfg.network.name == "xahau"
    assert cfg.network.is_xahau
    assert cfg.signing.timeout_seconds == pytest.approx(60.0)
    assert cfg.signing.poll_interval_seconds == pytest.approx(0.5)
    assert cfg.display.default_currency == "eur"


def test_env_overlay_is_deep_merged(config_path, monkeypatch):
    _write(config_path, {"api": {"server_url": "https://explorer.test", "request_timeout": 5}})
    _write(config_path.parent / "config.dev.yaml", {"api": {"server_url": "https://dev.test"}})
    monkeypatch.setenv("LEDGER_EXPLORER_ENV", "dev")

    cfg = load_config(config_path)

    assert cfg.env == "dev"
    assert cfg.api.server_url == "https://dev.test"
    assert cfg.api.request_timeout == pytest.approx(5.0)
    assert cfg.api.development is True


def test_invalid_env_falls_back_to_live(config_path):
    cfg = load_config(config_path, env="production")

    assert cfg.env == "live"


def test_api_token_comes_from_environment(config_path, monkeypatch):
    _write(config_path, {"api": {"api_token": "from-file"}})
    monkeypatch.setenv("LEDGER_EXPLORER_API_TOKEN", "from-env")

    cfg = load_config(config_path)

    assert cfg.api.api_token == "from-env"


def test_invalid_values_use_defaults(config_path, caplog):
    _write(
        config_path,
        {
            "api": {"request_timeout": -1},
            "network": {"name": "moonnet"},
            "signing": "soon",
        },
    )

    with caplog.at_level(logging.WARNING):
        cfg = load_config(config_path)

    assert cfg.api.request_timeout == pytest.approx(10.0)
    assert cfg.network.name == "mainnet"
    assert cfg.signing.timeout_seconds == pytest.approx(300.0)
    events = {getattr(r, "event", None) for r in caplog.records}
    assert {"config_invalid_value", "config_invalid_network", "config_invalid_signing"} <= events


def test_non_mapping_file_is_ignored(config_path):
    config_path.write_text("- just\n- a list\n")

    assert load_config(config_path) == ExplorerConfig()


def test_corrupted_file_raises(config_path):
    config_path.write_text("this is not valid yaml: {")

    with pytest.raises(yaml.YAMLError):
        load_config(config_path)


def test_network_flags():
    assert config.NetworkConfig(name="devnet").is_devnet
    assert not config.NetworkConfig(name="devnet").is_xahau
    assert config.NetworkConfig(name="xahau-testnet").is_xahau
