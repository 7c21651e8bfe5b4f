"""Unified CLI configuration.

Merges, in order:
- defaults
- persisted config file at ~/.streamverse/config.json
- overrides passed in at construction
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_BACKEND = "http://localhost:8484"
CONFIG_KEYS = ("backend_url", "websocket_url", "default_media_kind", "use_ai")


def _derive_websocket_url(backend_url: str) -> str:
    if backend_url.startswith("https://"):
        return f"wss://{backend_url[len('https://'):]}/ws/playback"
    host = backend_url.replace("http://", "")
    return f"ws://{host}/ws/playback"


@dataclass(init=False)
class Config:
    backend_url: str
    websocket_url: str

    # Search
    default_media_kind: str
    use_ai: bool

    # Internal
    _config_dir: Path = field(default_factory=lambda: Path.home() / ".streamverse", repr=False)
    _config_file: Path = field(init=False, repr=False)

    def __init__(
        self,
        *,
        backend_url: str | None = None,
        websocket_url: str | None = None,
        default_media_kind: str | None = None,
        use_ai: bool | None = None,
        config_dir: Path | None = None,
    ) -> None:
        # Defaults
        self.backend_url = DEFAULT_BACKEND
        self.websocket_url = ""
        self.default_media_kind = "movie"
        self.use_ai = True

        self._config_dir = config_dir or Path.home() / ".streamverse"
        self._config_file = self._config_dir / "config.json"

        file_data = self.load_file()
        if file_data:
            self.backend_url = file_data.get("backend_url", self.backend_url)
            self.websocket_url = file_data.get("websocket_url", self.websocket_url)
            self.default_media_kind = file_data.get("default_media_kind", self.default_media_kind)
            self.use_ai = file_data.get("use_ai", self.use_ai)

        if backend_url is not None:
            self.backend_url = backend_url
        if websocket_url is not None:
            self.websocket_url = websocket_url
        if default_media_kind is not None:
            self.default_media_kind = default_media_kind
        if use_ai is not None:
            self.use_ai = use_ai

        # A stored websocket_url only survives if the backend was not overridden
        if websocket_url is None and (backend_url is not None or not self.websocket_url):
            self.websocket_url = _derive_websocket_url(self.backend_url)

    @property
    def api_base_url(self) -> str:
        return self.backend_url.rstrip("/")

    def load_file(self) -> dict[str, Any]:
        if not self._config_file.exists():
            return {}
        try:
            with self._config_file.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError):
            return {}

    def save_file(self) -> None:
        self._config_dir.mkdir(parents=True, exist_ok=True)
        with self._config_file.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        try:
            self._config_dir.chmod(0o700)
            self._config_file.chmod(0o600)
        except OSError:
            pass

    def to_dict(self) -> dict[str, Any]:
        """Return current config as a dict."""
        return {
            "backend_url": self.backend_url,
            "websocket_url": self.websocket_url,
            "default_media_kind": self.default_media_kind,
            "use_ai": self.use_ai,
        }

    def set_value(self, key: str, value: Any) -> None:
        """Set a supported config key and persist to disk.

        Raises:
            ValueError: On an unknown key or an invalid value.
        """
        if key == "backend_url":
            self.backend_url = str(value)
            self.websocket_url = _derive_websocket_url(self.backend_url)
        elif key == "websocket_url":
            self.websocket_url = str(value)
        elif key == "default_media_kind":
            if value not in ("movie", "tv"):
                raise ValueError("default_media_kind must be 'movie' or 'tv'")
            self.default_media_kind = value
        elif key == "use_ai":
            if isinstance(value, str):
                lowered = value.lower()
                if lowered in ("true", "1", "yes", "on"):
                    value = True
                elif lowered in ("false", "0", "no", "off"):
                    value = False
                else:
                    raise ValueError("use_ai must be true/false")
            self.use_ai = bool(value)
        else:
            raise ValueError(f"Unknown config key: {key}")

        self.save_file()
