"""Client-side state that survives restarts and external sign-in redirects."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # type: ignore[import-untyped]

from ledger_explorer.config_loader import get_data_dir

logger = logging.getLogger(__name__)

STATE_FILENAME = "client_state.yaml"
DEFAULT_CURRENCY = "usd"


class ClientStateStore:
    """Persists selected currency, active identity and pending sign-session bookkeeping to YAML."""

    def __init__(self, path: Path | None = None, default_currency: str = DEFAULT_CURRENCY):
        self._path = Path(path) if path else get_data_dir() / STATE_FILENAME
        self._default_currency = default_currency.lower()
        self._data: Dict[str, Any] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            logger.warning(
                "Client state file is unreadable; starting fresh: %s",
                exc,
                extra={"event": "client_state_corrupt", "state_path": str(self._path)},
            )
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                delete=False,
                dir=self._path.parent,
                prefix=self._path.name,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                yaml.safe_dump(self._data, f)
                f.flush()
                os.fsync(f.fileno())

            os.replace(tmp_path, self._path)
        finally:
            if tmp_path is not None and tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

    @property
    def selected_currency(self) -> str:
        return str(self._data.get("currency") or self._default_currency)

    @selected_currency.setter
    def selected_currency(self, currency: str) -> None:
        self._data["currency"] = currency.lower()
        self._write()

    def load_identity(self) -> Dict[str, Optional[str]]:
        identity = self._data.get("account") or {}
        return identity if isinstance(identity, dict) else {}

    def save_identity(self, identity: Dict[str, Optional[str]]) -> None:
        self._data["account"] = dict(identity)
        self._write()

    def load_pending_session(self) -> Optional[Dict[str, Any]]:
        pending = self._data.get("pending_session")
        return pending if isinstance(pending, dict) else None

    def save_pending_session(self, bookkeeping: Dict[str, Any]) -> None:
        self._data["pending_session"] = dict(bookkeeping)
        self._write()

    def clear_pending_session(self) -> None:
        if self._data.pop("pending_session", None) is not None:
            self._write()


__all__ = ["ClientStateStore", "DEFAULT_CURRENCY", "STATE_FILENAME"]
