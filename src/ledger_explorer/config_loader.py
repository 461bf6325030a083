from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import appdirs  # type: ignore[import-untyped]
import yaml  # type: ignore[import-untyped]

from ledger_explorer.config_models import (
    NETWORK_NAMES,
    ApiConfig,
    DisplayConfig,
    ExplorerConfig,
    NetworkConfig,
    SigningConfig,
)

APP_NAME = "ledger_explorer"
ALLOWED_ENVS = {"dev", "staging", "live"}

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """
    Returns the OS-specific configuration directory using appdirs.
    """
    return Path(appdirs.user_config_dir(APP_NAME))


def get_data_dir() -> Path:
    """Returns the OS-specific directory for persisted client state."""
    return Path(appdirs.user_data_dir(APP_NAME))


def _read_yaml_mapping(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning(
            "Configuration file is not a mapping; ignoring it",
            extra={"event": "config_invalid_format", "config_path": str(path)},
        )
        return {}
    return data


def _deep_merge_dicts(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    merged = base.copy()
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(raw_config: Dict[str, Any], name: str, config_path: Path) -> Dict[str, Any]:
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        logger.warning(
            "%s config is not a mapping; using defaults",
            name.capitalize(),
            extra={"event": f"config_invalid_{name}", "config_path": str(config_path)},
        )
        return {}
    return data


def _positive_float(value: Any, default: float, field_name: str, config_path: Path) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return float(value)

    logger.warning(
        "%s is invalid; using default",
        field_name,
        extra={"event": "config_invalid_value", "field": field_name, "config_path": str(config_path)},
    )
    return default


def load_config(config_path: Optional[Path] = None, env: Optional[str] = None) -> ExplorerConfig:
    """
    Loads the explorer configuration from the default location or a specified path.

    Missing files and malformed sections fall back to defaults; every fallback
    is logged with a structured ``event`` so misconfiguration stays visible.
    """
    if config_path is None:
        config_path = get_config_dir() / "config.yaml"
    config_path = config_path.expanduser()

    initial_env = env if env is not None else os.environ.get("LEDGER_EXPLORER_ENV")
    if initial_env is None:
        effective_env = "live"
    elif initial_env not in ALLOWED_ENVS:
        logger.warning(
            "Invalid environment '%s'; defaulting to 'live'",
            initial_env,
            extra={"event": "config_invalid_env", "config_path": str(config_path)},
        )
        effective_env = "live"
    else:
        effective_env = initial_env

    if not config_path.exists():
        logger.info(
            "Configuration file not found; using defaults",
            extra={"event": "config_missing_file", "config_path": str(config_path)},
        )
        raw_config: Dict[str, Any] = {}
    else:
        raw_config = _read_yaml_mapping(config_path)

    env_config_path = config_path.parent / f"config.{effective_env}.yaml"
    if env_config_path.exists():
        raw_config = _deep_merge_dicts(raw_config, _read_yaml_mapping(env_config_path))

    api_data = _section(raw_config, "api", config_path)
    network_data = _section(raw_config, "network", config_path)
    signing_data = _section(raw_config, "signing", config_path)
    display_data = _section(raw_config, "display", config_path)

    api_defaults = ApiConfig()
    api = ApiConfig(
        server_url=str(api_data.get("server_url", api_defaults.server_url)).rstrip("/"),
        api_token=api_data.get("api_token"),
        request_timeout=_positive_float(
            api_data.get("request_timeout", api_defaults.request_timeout),
            api_defaults.request_timeout,
            "api.request_timeout",
            config_path,
        ),
        development=bool(api_data.get("development", effective_env == "dev")),
    )
    token_override = os.environ.get("LEDGER_EXPLORER_API_TOKEN")
    if token_override:
        api.api_token = token_override

    network_name = str(network_data.get("name", "mainnet")).lower()
    if network_name not in NETWORK_NAMES:
        logger.warning(
            "Unknown network '%s'; defaulting to mainnet",
            network_name,
            extra={"event": "config_invalid_network", "config_path": str(config_path)},
        )
        network_name = "mainnet"
    network = NetworkConfig(name=network_name)
    if network_data.get("reward_issuer"):
        network.reward_issuer = str(network_data["reward_issuer"])

    signing_defaults = SigningConfig()
    signing = SigningConfig(
        timeout_seconds=_positive_float(
            signing_data.get("timeout_seconds", signing_defaults.timeout_seconds),
            signing_defaults.timeout_seconds,
            "signing.timeout_seconds",
            config_path,
        ),
        poll_interval_seconds=_positive_float(
            signing_data.get("poll_interval_seconds", signing_defaults.poll_interval_seconds),
            signing_defaults.poll_interval_seconds,
            "signing.poll_interval_seconds",
            config_path,
        ),
    )

    display = DisplayConfig(
        default_currency=str(display_data.get("default_currency", "usd")).lower(),
    )

    return ExplorerConfig(
        api=api,
        network=network,
        signing=signing,
        display=display,
        env=effective_env,
    )
