"""HTTP client for the StreamVerse backend REST endpoints.

This module contains no terminal output. It returns data to the caller so
the UI layer can render consistently. Failures come back as {"error": str}.
"""

from typing import Any

import httpx

from .config import Config


class ApiClient:
    """Thin async wrapper over the backend REST API."""

    def __init__(self, cli_config: Config, http_client: httpx.AsyncClient | None = None):
        self.config = cli_config
        self.http_client = http_client or httpx.AsyncClient(timeout=60.0)

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.config.api_base_url}{path}"
        try:
            response = await self.http_client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            return {"error": f"Request to {path} failed: {e}"}
        if response.status_code != 200:
            try:
                detail = response.json().get("detail", response.status_code)
            except ValueError:
                detail = response.status_code
            return {"error": f"{path} returned {response.status_code}: {detail}"}
        return response.json()

    async def search(self, query: str) -> dict[str, Any]:
        """Search the catalog. Returns a DiscoveryResult dict or {"error": str}."""
        params = {
            "q": query,
            "media_kind": self.config.default_media_kind,
            "ai": str(self.config.use_ai).lower(),
        }
        return await self._request("GET", "/search", params=params)

    async def suggestions(self) -> dict[str, Any]:
        return await self._request("GET", "/suggestions")

    async def extract(self, source_url: str, output_format: str | None = None) -> dict[str, Any]:
        return await self._request("POST", "/extract", json={"source_url": source_url, "format": output_format})

    async def list_sessions(self) -> dict[str, Any]:
        return await self._request("GET", "/playback/sessions")

    async def delete_session(self, session_id: str) -> tuple[bool, str]:
        """Delete a playback session. Returns (success, message)."""
        result = await self._request("DELETE", f"/playback/sessions/{session_id}")
        if "error" in result:
            return False, result["error"]
        return True, f"Deleted session: {session_id}"

    async def close(self) -> None:
        await self.http_client.aclose()
