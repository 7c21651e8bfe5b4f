"""WebSocket client for the playback channel.

Stands in for the embedded player: it asks the backend to select content and
reports load/error signals for the candidate currently shown.
"""

import asyncio
import json
import logging
from typing import Any

import websockets

from .config import Config

RESPONSE_TIMEOUT = 10.0


class PlayerClient:
    """Sends player signals and returns the controller state the backend replies with."""

    def __init__(self, cli_config: Config):
        self._config = cli_config
        self.websocket: Any | None = None
        self.is_connected = False
        self.session_id: str | None = None
        self.state: dict[str, Any] | None = None
        self._logger = logging.getLogger("streamverse.cli.player")

    async def connect(self) -> None:
        """Open the playback WebSocket.

        Raises:
            OSError or websockets.exceptions.WebSocketException: If the backend is unreachable.
        """
        self.websocket = await websockets.connect(self._config.websocket_url)
        self.is_connected = True

    async def _exchange(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one message and wait for the resulting state or error event."""
        if not self.websocket or not self.is_connected:
            raise ConnectionError("Not connected to backend")
        if self.session_id:
            payload["session_id"] = self.session_id

        await self.websocket.send(json.dumps(payload))
        self._logger.debug("Sent to WS: %s", payload)

        while True:
            try:
                raw = await asyncio.wait_for(self.websocket.recv(), timeout=RESPONSE_TIMEOUT)
            except websockets.exceptions.ConnectionClosed:
                self.is_connected = False
                raise ConnectionError("Connection to backend closed") from None
            data = json.loads(raw)
            self._logger.debug("WS event: %s", data)

            event_type = data.get("type")
            if event_type == "session_created":
                self.session_id = data.get("session_id")
            elif event_type == "state":
                self.state = data
                return data
            elif event_type == "error":
                return data

    async def select(
        self,
        tmdb_id: int,
        media_kind: str,
        season: int | None = None,
        episode: int | None = None,
    ) -> dict[str, Any]:
        return await self._exchange(
            {"type": "select", "tmdb_id": tmdb_id, "media_kind": media_kind, "season": season, "episode": episode}
        )

    def _current_index(self) -> int | None:
        return self.state.get("current_index") if self.state else None

    async def report_loaded(self) -> dict[str, Any]:
        return await self._exchange({"type": "loaded", "index": self._current_index()})

    async def report_error(self) -> dict[str, Any]:
        return await self._exchange({"type": "error", "index": self._current_index()})

    async def clear(self) -> dict[str, Any]:
        return await self._exchange({"type": "clear"})

    async def disconnect(self) -> None:
        if self.websocket:
            await self.websocket.close()
            self.websocket = None
            self.is_connected = False
