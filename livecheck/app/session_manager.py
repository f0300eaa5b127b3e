"""Per-session liveness engines for the service."""
from __future__ import annotations

import asyncio
from asyncio import QueueEmpty
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .config import Settings, get_settings
from .detection import DetectedFace
from .engine import LivenessEngine, TickResult
from .state import EngineEvent, LivenessEvent

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SessionLimitError(RuntimeError):
    """Raised when a new session would exceed ``max_sessions``."""


@dataclass
class SessionEvent:
    """Event payload distributed to UI clients over the local WebSocket."""

    type: str
    session_id: str
    is_live: bool
    data: Dict[str, object] = field(default_factory=dict)


@dataclass
class SessionContext:
    session_id: str
    engine: LivenessEngine
    last_seen: float
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    ticks: int = 0
    connections: int = 0
    socket_owned: bool = False
    last_published: Optional[Tuple[bool, LivenessEvent]] = None


class SessionManager:
    """Owns one engine per session and serialises ticks for each of them.

    Sessions with no ticks for ``session_idle_seconds`` are evicted lazily
    when another session is opened, unless a websocket is still attached.
    """

    def __init__(self, *, settings: Optional[Settings] = None, clock: Clock = time.monotonic) -> None:
        self.settings = settings or get_settings()
        self._clock = clock
        self._sessions: Dict[str, SessionContext] = {}
        self._ui_subscribers: List[asyncio.Queue[SessionEvent]] = []

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> Optional[SessionContext]:
        return self._sessions.get(session_id)

    def open_session(self, session_id: str) -> SessionContext:
        ctx = self._sessions.get(session_id)
        if ctx is not None:
            return ctx
        self.evict_idle()
        if len(self._sessions) >= self.settings.max_sessions:
            raise SessionLimitError(f"session limit reached ({self.settings.max_sessions})")

        ctx = SessionContext(
            session_id=session_id,
            engine=LivenessEngine(self.settings.thresholds()),
            last_seen=self._clock(),
        )
        ctx.engine.register_callback(lambda event: self._on_engine_event(ctx, event))
        self._sessions[session_id] = ctx
        logger.info("Opened liveness session %s (active=%d)", session_id, len(self._sessions))
        return ctx

    def close_session(self, session_id: str) -> bool:
        ctx = self._sessions.pop(session_id, None)
        if ctx is None:
            return False
        logger.info("Closed liveness session %s after %d ticks", session_id, ctx.ticks)
        self._publish(SessionEvent(type="closed", session_id=session_id, is_live=False))
        return True

    def evict_idle(self) -> int:
        now = self._clock()
        idle = [
            ctx.session_id
            for ctx in self._sessions.values()
            if ctx.connections == 0 and now - ctx.last_seen > self.settings.session_idle_seconds
        ]
        for session_id in idle:
            logger.info("Evicting idle liveness session %s", session_id)
            self.close_session(session_id)
        return len(idle)

    def attach(self, session_id: str) -> SessionContext:
        """Open or join ``session_id`` on behalf of a websocket connection."""

        existed = session_id in self._sessions
        ctx = self.open_session(session_id)
        if not existed:
            ctx.socket_owned = True
        ctx.connections += 1
        return ctx

    def release(self, ctx: SessionContext) -> None:
        """Drop a websocket's hold; the session closes with its last owning socket."""

        ctx.connections = max(ctx.connections - 1, 0)
        if ctx.connections or not ctx.socket_owned:
            return
        if self._sessions.get(ctx.session_id) is ctx:
            self.close_session(ctx.session_id)

    async def tick(self, session_id: str, faces: Sequence[DetectedFace]) -> TickResult:
        ctx = self.open_session(session_id)
        async with ctx.lock:
            result = ctx.engine.update(faces)
            ctx.ticks += 1
            ctx.last_seen = self._clock()
        return result

    def register_ui(self) -> asyncio.Queue[SessionEvent]:
        queue: asyncio.Queue[SessionEvent] = asyncio.Queue(maxsize=16)
        self._ui_subscribers.append(queue)
        return queue

    def unregister_ui(self, queue: asyncio.Queue[SessionEvent]) -> None:
        if queue in self._ui_subscribers:
            self._ui_subscribers.remove(queue)

    def _on_engine_event(self, ctx: SessionContext, event: EngineEvent) -> None:
        if event.type != "transition" or event.event is None:
            return
        key = (event.is_live, event.event)
        if key == ctx.last_published:
            return
        ctx.last_published = key
        self._publish(
            SessionEvent(
                type="transition",
                session_id=ctx.session_id,
                is_live=event.is_live,
                data={"event": event.event.value, **event.data},
            )
        )

    def _publish(self, event: SessionEvent) -> None:
        logger.debug("Broadcasting event: %s", event)
        for queue in list(self._ui_subscribers):
            if queue.full():
                try:
                    queue.get_nowait()
                except QueueEmpty:
                    pass
            queue.put_nowait(event)


__all__ = ["SessionContext", "SessionEvent", "SessionLimitError", "SessionManager"]
