"""Playback fallback controller and per-session controller storage.

The controller hands one candidate at a time to the embedded player and
advances on load errors reported by the player. Signals are level-triggered:
nothing here polls or times out.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from .embeds import is_direct_video_link
from .sources import ContentIdentity, ResolvedSource, SourceTemplate, generate_sources

logger = logging.getLogger("streamverse.playback")

EXHAUSTED_MESSAGE = "No playable source found."


class PlaybackStatus(str, Enum):
    """Status of a playback attempt."""

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    FAILED = "failed"
    EXHAUSTED = "exhausted"


@dataclass
class PlaybackAttemptState:
    """Mutable state of the current playback attempt."""

    candidates: list[ResolvedSource] = field(default_factory=lambda: list[ResolvedSource]())
    current_index: int = 0
    status: PlaybackStatus = PlaybackStatus.IDLE

    @property
    def current(self) -> ResolvedSource | None:
        if self.status in (PlaybackStatus.LOADING, PlaybackStatus.PLAYING):
            return self.candidates[self.current_index]
        return None


class PlaybackController:
    """Drives which resolved source the embedded player should load."""

    def __init__(self, templates: list[SourceTemplate] | None = None) -> None:
        self._templates = templates
        self.identity: ContentIdentity | None = None
        self.state = PlaybackAttemptState()
        self.transitions: list[PlaybackStatus] = []
        # Bumped on every entry into LOADING so the player reloads its frame
        self.load_token = 0

    @property
    def status(self) -> PlaybackStatus:
        return self.state.status

    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def current(self) -> ResolvedSource | None:
        return self.state.current

    def _enter(self, status: PlaybackStatus) -> None:
        self.state.status = status
        self.transitions.append(status)
        if status is PlaybackStatus.LOADING:
            self.load_token += 1

    def select(self, identity: ContentIdentity) -> PlaybackAttemptState:
        """Start a fresh attempt for `identity`, always from the first candidate."""
        self.identity = identity
        self.state = PlaybackAttemptState(candidates=generate_sources(identity, self._templates))
        self.transitions = []
        if not self.state.candidates:
            logger.warning("No embed providers available for %s %s", identity.media_kind.value, identity.tmdb_id)
            self._enter(PlaybackStatus.EXHAUSTED)
            return self.state
        self._enter(PlaybackStatus.LOADING)
        logger.info(
            "Loading %s for %s %s (1/%d)",
            self.state.candidates[0].provider_name,
            identity.media_kind.value,
            identity.tmdb_id,
            len(self.state.candidates),
        )
        return self.state

    def _is_stale(self, index: int | None, signal: str) -> bool:
        if self.state.status is not PlaybackStatus.LOADING:
            logger.debug("Ignoring %s signal in status %s", signal, self.state.status.value)
            return True
        if index is not None and index != self.state.current_index:
            logger.debug("Ignoring %s signal for index %d (current %d)", signal, index, self.state.current_index)
            return True
        return False

    def report_loaded(self, index: int | None = None) -> PlaybackAttemptState:
        """The player loaded the current candidate."""
        if self._is_stale(index, "loaded"):
            return self.state
        self._enter(PlaybackStatus.PLAYING)
        logger.info("Playing from %s", self.state.candidates[self.state.current_index].provider_name)
        return self.state

    def report_error(self, index: int | None = None) -> PlaybackAttemptState:
        """The player failed to load the current candidate; move to the next one."""
        if self._is_stale(index, "error"):
            return self.state
        failed = self.state.candidates[self.state.current_index]
        self._enter(PlaybackStatus.FAILED)
        logger.info("Source %s failed: %s", failed.provider_name, failed.url)

        if self.state.current_index + 1 < len(self.state.candidates):
            self.state.current_index += 1
            self._enter(PlaybackStatus.LOADING)
            logger.info(
                "Falling back to %s (%d/%d)",
                self.state.candidates[self.state.current_index].provider_name,
                self.state.current_index + 1,
                len(self.state.candidates),
            )
        else:
            self._enter(PlaybackStatus.EXHAUSTED)
            logger.warning("All %d source(s) failed", len(self.state.candidates))
        return self.state

    def clear(self) -> None:
        """Drop the current attempt (the user navigated away)."""
        self.identity = None
        self.state = PlaybackAttemptState()
        self.transitions = []

    def snapshot(self) -> dict[str, Any]:
        """JSON-serializable view of the attempt for the player UI."""
        current = self.state.current
        return {
            "status": self.state.status.value,
            "current_index": self.state.current_index,
            "load_token": self.load_token,
            "source": asdict(current) if current else None,
            "player": ("video" if is_direct_video_link(current.url) else "iframe") if current else None,
            "candidates": [asdict(c) for c in self.state.candidates],
            "message": EXHAUSTED_MESSAGE if self.state.status is PlaybackStatus.EXHAUSTED else None,
        }


class PlaybackStore(ABC):
    """Abstract base class for playback controller storage."""

    @abstractmethod
    def create_session(self, session_id: str) -> PlaybackController:
        """Create a controller for a new playback session."""
        pass

    @abstractmethod
    def get_session(self, session_id: str) -> PlaybackController | None:
        """Get an existing controller."""
        pass

    @abstractmethod
    def delete_session(self, session_id: str) -> None:
        """Delete a session."""
        pass

    @abstractmethod
    def list_sessions(self) -> list[str]:
        """List all active session IDs."""
        pass


class InMemoryPlaybackStore(PlaybackStore):
    """In-memory controller storage with TTL expiration and LRU eviction."""

    def __init__(
        self,
        max_sessions: int = 500,
        ttl_seconds: float = 3600,
        templates: list[SourceTemplate] | None = None,
    ) -> None:
        self.sessions: dict[str, PlaybackController] = {}
        self._timestamps: dict[str, float] = {}
        self._max_sessions = max_sessions
        self._ttl_seconds = ttl_seconds
        self._templates = templates

    def _evict_expired(self) -> None:
        """Remove sessions that have exceeded their TTL."""
        now = time.monotonic()
        expired = [sid for sid, ts in self._timestamps.items() if now - ts > self._ttl_seconds]
        for sid in expired:
            del self.sessions[sid]
            del self._timestamps[sid]

    def _evict_lru(self) -> None:
        """Remove the least-recently-used session if at capacity."""
        if self._timestamps and len(self.sessions) >= self._max_sessions:
            oldest = min(self._timestamps, key=lambda k: self._timestamps[k])
            del self.sessions[oldest]
            del self._timestamps[oldest]

    def create_session(self, session_id: str) -> PlaybackController:
        self._evict_expired()
        self._evict_lru()
        controller = PlaybackController(self._templates)
        self.sessions[session_id] = controller
        self._timestamps[session_id] = time.monotonic()
        return controller

    def get_session(self, session_id: str) -> PlaybackController | None:
        """Get an existing controller, touching its timestamp for LRU tracking."""
        self._evict_expired()
        controller = self.sessions.get(session_id)
        if controller is not None:
            self._timestamps[session_id] = time.monotonic()
        return controller

    def delete_session(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)
        self._timestamps.pop(session_id, None)

    def list_sessions(self) -> list[str]:
        """List all active (non-expired) session IDs."""
        self._evict_expired()
        return list(self.sessions.keys())
