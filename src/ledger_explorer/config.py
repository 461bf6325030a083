from __future__ import annotations

# Re-export loader helpers
from .config_loader import (
    ALLOWED_ENVS,
    get_config_dir,
    get_data_dir,
    load_config,
)

# Re-export config models
from .config_models import (
    ApiConfig,
    DisplayConfig,
    ExplorerConfig,
    NetworkConfig,
    SigningConfig,
)

__all__ = [
    # models
    "ApiConfig",
    "NetworkConfig",
    "SigningConfig",
    "DisplayConfig",
    "ExplorerConfig",
    # loader
    "ALLOWED_ENVS",
    "get_config_dir",
    "get_data_dir",
    "load_config",
]
