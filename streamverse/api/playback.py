"""WebSocket channel between the embedded player and the fallback controller."""

import json
import logging
import uuid
from typing import Literal

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from ..core.config import settings
from ..core.playback import PlaybackController, PlaybackStore
from ..core.sources import ContentIdentity, MediaKind
from .deps import get_playback_store

logger = logging.getLogger("streamverse.playback.ws")

router = APIRouter()


class PlaybackMessage(BaseModel):
    """Message from the player.

    `select` starts a new attempt; `loaded` and `error` report on the frame
    currently shown (optionally tagged with the candidate index they refer
    to); `clear` drops the attempt.
    """

    type: Literal["select", "loaded", "error", "clear"]
    session_id: str | None = None
    tmdb_id: int | None = None
    media_kind: MediaKind | None = None
    season: int | None = None
    episode: int | None = None
    index: int | None = None


def apply_message(controller: PlaybackController, message: PlaybackMessage) -> None:
    """Feed one player message into the controller.

    Raises:
        ValueError: If a select message does not name valid content.
    """
    if message.type == "select":
        identity = ContentIdentity(
            tmdb_id=message.tmdb_id,  # type: ignore[arg-type]
            media_kind=message.media_kind,  # type: ignore[arg-type]
            season=message.season,
            episode=message.episode,
        )
        controller.select(identity)
    elif message.type == "loaded":
        controller.report_loaded(message.index)
    elif message.type == "error":
        controller.report_error(message.index)
    else:
        controller.clear()


@router.websocket("/ws/playback")
async def websocket_playback(websocket: WebSocket):
    """WebSocket endpoint the player reports load/error signals through."""
    # Validate origin if allowed_origins is configured (empty list = allow all)
    allowed = settings.app.allowed_origins
    if allowed:
        origin = websocket.headers.get("origin")
        if origin and origin not in allowed:
            await websocket.close(code=4003, reason="Origin not allowed")
            return

    await websocket.accept()
    logger.info("Playback WebSocket connected")

    store: PlaybackStore = websocket.app.state.playback_store

    try:
        while True:
            data = await websocket.receive_text()
            logger.debug("Received raw payload: %s", data)
            try:
                message = PlaybackMessage(**json.loads(data))
            except (ValueError, TypeError) as e:
                # json and pydantic validation errors are both ValueErrors
                await websocket.send_text(json.dumps({"type": "error", "message": f"Invalid message: {e}"}))
                continue

            session_id = message.session_id or str(uuid.uuid4())
            controller = store.get_session(session_id)
            if controller is None:
                controller = store.create_session(session_id)
                logger.info("Created new playback session: %s", session_id)
                await websocket.send_text(json.dumps({"type": "session_created", "session_id": session_id}))

            try:
                apply_message(controller, message)
            except ValueError as e:
                await websocket.send_text(json.dumps({"type": "error", "session_id": session_id, "message": str(e)}))
                continue

            await websocket.send_text(json.dumps({"type": "state", "session_id": session_id, **controller.snapshot()}))
            logger.debug("Emitted state %s for session=%s", controller.status.value, session_id)

    except WebSocketDisconnect:
        logger.info("Playback WebSocket disconnected")
    except Exception as e:
        logger.exception("Error in playback WebSocket: %s", e)
        try:
            await websocket.send_text(json.dumps({"type": "error", "message": str(e)}))
        except Exception:
            pass


@router.get("/playback/sessions")
async def list_sessions(store: PlaybackStore = Depends(get_playback_store)):
    """List all active playback sessions."""
    sessions = store.list_sessions()
    return {
        "sessions": sessions,
        "count": len(sessions),
    }


@router.get("/playback/sessions/{session_id}")
async def get_session_state(session_id: str, store: PlaybackStore = Depends(get_playback_store)):
    controller = store.get_session(session_id)
    if controller is None:
        return {"error": f"Session {session_id} not found"}
    return {"session_id": session_id, **controller.snapshot()}


@router.delete("/playback/sessions/{session_id}")
async def delete_session(session_id: str, store: PlaybackStore = Depends(get_playback_store)):
    """Delete a playback session."""
    store.delete_session(session_id)
    return {"message": f"Session {session_id} deleted"}


@router.post("/playback/sessions/{session_id}/reset")
async def reset_session(session_id: str, store: PlaybackStore = Depends(get_playback_store)):
    """Clear the current attempt of a playback session."""
    controller = store.get_session(session_id)
    if controller:
        controller.clear()
        return {"message": f"Session {session_id} reset"}
    else:
        return {"error": f"Session {session_id} not found"}
