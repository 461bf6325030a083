from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_SERVER_URL = "https://bithomp.com"
DEFAULT_REWARD_ISSUER = "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh"
NETWORK_NAMES = ("mainnet", "testnet", "devnet", "xahau", "xahau-testnet")


@dataclass
class ApiConfig:
    server_url: str = DEFAULT_SERVER_URL
    api_token: Optional[str] = None
    request_timeout: float = 10.0
    # Development servers are reached directly with a token header instead of
    # through the CORS proxy path.
    development: bool = False


@dataclass
class NetworkConfig:
    name: str = "mainnet"
    reward_issuer: str = DEFAULT_REWARD_ISSUER

    @property
    def is_xahau(self) -> bool:
        return self.name.startswith("xahau")

    @property
    def is_devnet(self) -> bool:
        return self.name == "devnet"


@dataclass
class SigningConfig:
    timeout_seconds: float = 300.0
    poll_interval_seconds: float = 2.0


@dataclass
class DisplayConfig:
    default_currency: str = "usd"


@dataclass
class ExplorerConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    signing: SigningConfig = field(default_factory=SigningConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    env: str = "live"
