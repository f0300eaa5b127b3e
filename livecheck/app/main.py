"""FastAPI entry-point for the livecheck service."""
from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .config import Settings, get_settings
from .engine import TickResult
from .logging_config import configure_logging
from .schemas import BoxPayload, SessionSnapshot, TickRequest, TickResponse
from .session_manager import SessionLimitError, SessionManager

logger = logging.getLogger(__name__)

settings: Settings = get_settings()
configure_logging(settings.log_level)
app = FastAPI(title="livecheck", version="0.1.0")
manager = SessionManager(settings=settings)


def _tick_response(session_id: str, result: TickResult) -> TickResponse:
    ctx = manager.get(session_id)
    return TickResponse(
        session_id=session_id,
        is_live=result.is_live,
        stillness_frames=ctx.engine.state.stillness_frames if ctx else 0,
        boxes=[BoxPayload.from_render_box(box) for box in result.render_boxes],
    )


@app.get("/healthz")
async def healthcheck() -> JSONResponse:
    return JSONResponse({"status": "ok", "sessions": len(manager)})


@app.post("/sessions/{session_id}/ticks", response_model=TickResponse)
async def post_tick(session_id: str, body: TickRequest) -> TickResponse:
    try:
        result = await manager.tick(session_id, body.to_faces())
    except SessionLimitError as exc:
        raise HTTPException(status_code=429, detail=str(exc)) from exc
    return _tick_response(session_id, result)


@app.get("/sessions/{session_id}", response_model=SessionSnapshot)
async def get_session(session_id: str) -> SessionSnapshot:
    ctx = manager.get(session_id)
    if ctx is None:
        raise HTTPException(status_code=404, detail="session_not_found")
    return SessionSnapshot.from_state(session_id, ctx.ticks, ctx.engine.state)


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> JSONResponse:
    if not manager.close_session(session_id):
        raise HTTPException(status_code=404, detail="session_not_found")
    return JSONResponse({"status": "closed", "session_id": session_id})


@app.websocket("/ws/liveness/{session_id}")
async def liveness_socket(ws: WebSocket, session_id: str) -> None:
    await ws.accept()
    try:
        ctx = manager.attach(session_id)
    except SessionLimitError as exc:
        logger.warning("Rejecting websocket session %s: %s", session_id, exc)
        await ws.send_json({"error": "session_limit"})
        await ws.close(code=1013)
        return
    try:
        while True:
            message = await ws.receive_text()
            try:
                body = TickRequest.model_validate_json(message)
            except ValidationError:
                logger.warning("Invalid tick payload on session %s", session_id)
                await ws.send_json({"error": "invalid_payload"})
                continue
            try:
                result = await manager.tick(session_id, body.to_faces())
            except SessionLimitError as exc:
                logger.warning("Dropping websocket session %s: %s", session_id, exc)
                await ws.send_json({"error": "session_limit"})
                await ws.close(code=1013)
                return
            await ws.send_json(_tick_response(session_id, result).model_dump(mode="json"))
    except WebSocketDisconnect:
        pass
    finally:
        manager.release(ctx)


@app.websocket("/ws/ui")
async def ui_socket(ws: WebSocket) -> None:
    await ws.accept()
    queue = manager.register_ui()
    try:
        while True:
            event = await queue.get()
            await ws.send_json(
                {
                    "type": event.type,
                    "session_id": event.session_id,
                    "is_live": event.is_live,
                    "data": event.data,
                }
            )
    except WebSocketDisconnect:
        pass
    finally:
        manager.unregister_ui(queue)
