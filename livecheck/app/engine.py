"""Tick-driven liveness engine over face detections."""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .detection import DetectedFace
from .geometry import Box, distance, expand_box
from .state import EngineEvent, LivenessEvent, LivenessState

logger = logging.getLogger(__name__)

EventCallback = Callable[[EngineEvent], None]

LIVE_COLOR: Tuple[int, int, int] = (0, 230, 0)
NOT_LIVE_COLOR: Tuple[int, int, int] = (0, 0, 220)


@dataclass(frozen=True)
class LivenessThresholds:
    movement_threshold: float = 15.0
    stillness_threshold: int = 30
    blink_threshold: float = 0.5
    scale_factor: float = 1.2
    y_offset: float = 20.0


@dataclass(frozen=True)
class RenderBox:
    box: Box
    is_live: bool

    @property
    def color(self) -> Tuple[int, int, int]:
        """BGR drawing colour for the verdict."""

        return LIVE_COLOR if self.is_live else NOT_LIVE_COLOR


class TickResult(NamedTuple):
    is_live: bool
    render_boxes: List[RenderBox]


class LivenessEngine:
    """Keeps one stream's ``LivenessState`` and advances it once per tick.

    ``update`` is synchronous and not reentrant; callers must serialise ticks
    for the same engine and deliver them in frame order.
    """

    def __init__(
        self,
        thresholds: Optional[LivenessThresholds] = None,
        *,
        on_event: Optional[EventCallback] = None,
    ) -> None:
        self.thresholds = thresholds or LivenessThresholds()
        self._state = LivenessState.rest()
        self._callbacks: list[EventCallback] = []
        if on_event is not None:
            self._callbacks.append(on_event)

    @property
    def state(self) -> LivenessState:
        return dataclasses.replace(self._state)

    @property
    def is_live(self) -> bool:
        return self._state.is_live

    def register_callback(self, callback: EventCallback) -> None:
        self._callbacks.append(callback)

    def reset(self) -> None:
        self._fire(LivenessEvent.NO_FACE)

    def update(self, detections: Sequence[DetectedFace]) -> TickResult:
        if not detections:
            self.reset()
            return TickResult(False, [])
        self.track(detections[0])
        return TickResult(self._state.is_live, self.render(detections))

    def track(self, face: DetectedFace) -> List[LivenessEvent]:
        """Advance the state machine with the tracked face and return fired events."""

        fired: List[LivenessEvent] = []
        state = self._state
        th = self.thresholds
        position = face.top_left

        if state.previous_position is not None:
            moved = distance(position, state.previous_position)
            if moved > th.movement_threshold:
                fired.append(self._fire(LivenessEvent.MOVEMENT_ABOVE_THRESHOLD, moved=moved))
            else:
                state.stillness_frames += 1
                if state.stillness_frames > th.stillness_threshold:
                    fired.append(
                        self._fire(LivenessEvent.STILLNESS_EXCEEDED, stillness_frames=state.stillness_frames)
                    )
        state.previous_position = position

        eyes = face.eyes
        if eyes is not None:
            eye_distance = eyes.vertical_gap
            previous = state.previous_eye_distance
            self._emit(
                EngineEvent(
                    type="eye_distance",
                    data={"eye_distance": eye_distance, "previous_eye_distance": previous},
                    is_live=state.is_live,
                )
            )
            if previous > 0 and eye_distance < previous * th.blink_threshold:
                fired.append(
                    self._fire(LivenessEvent.BLINK_DETECTED, eye_distance=eye_distance, previous=previous)
                )
            state.previous_eye_distance = eye_distance
        return fired

    def render(self, detections: Sequence[DetectedFace]) -> List[RenderBox]:
        th = self.thresholds
        is_live = self._state.is_live
        return [
            RenderBox(box=expand_box(face.bounding_box, th.scale_factor, th.y_offset), is_live=is_live)
            for face in detections
        ]

    def _fire(self, event: LivenessEvent, **data) -> LivenessEvent:
        was_live = self._state.is_live
        is_live = self._state.apply(event)
        if was_live != is_live:
            logger.debug("Verdict changed live=%s event=%s data=%s", is_live, event.value, data)
        self._emit(EngineEvent(type="transition", data=data, is_live=is_live, event=event))
        return event

    def _emit(self, event: EngineEvent) -> None:
        for callback in self._callbacks:
            try:
                callback(event)
            except Exception:
                logger.exception("Liveness event callback failed")


__all__ = [
    "EventCallback",
    "LivenessEngine",
    "LivenessThresholds",
    "RenderBox",
    "TickResult",
]
