"""Liveness state machine: per-stream state, events and transitions."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .geometry import Point


class LivenessEvent(str, enum.Enum):
    MOVEMENT_ABOVE_THRESHOLD = "movement_above_threshold"
    STILLNESS_EXCEEDED = "stillness_exceeded"
    BLINK_DETECTED = "blink_detected"
    NO_FACE = "no_face"


# Verdict each event forces. Ticks without an event keep the previous verdict.
VERDICT_FOR_EVENT: Dict[LivenessEvent, bool] = {
    LivenessEvent.MOVEMENT_ABOVE_THRESHOLD: True,
    LivenessEvent.BLINK_DETECTED: True,
    LivenessEvent.STILLNESS_EXCEEDED: False,
    LivenessEvent.NO_FACE: False,
}


@dataclass
class LivenessState:
    """Mutable tracking state for a single stream.

    ``previous_eye_distance`` of ``0.0`` means no prior measurement.
    """

    previous_position: Optional[Point] = None
    is_live: bool = False
    stillness_frames: int = 0
    previous_eye_distance: float = 0.0

    @classmethod
    def rest(cls) -> "LivenessState":
        return cls()

    def apply(self, event: LivenessEvent) -> bool:
        """Apply ``event`` and return the resulting verdict."""

        if event is LivenessEvent.NO_FACE:
            self.previous_position = None
            self.stillness_frames = 0
            self.previous_eye_distance = 0.0
        elif event in (LivenessEvent.MOVEMENT_ABOVE_THRESHOLD, LivenessEvent.BLINK_DETECTED):
            self.stillness_frames = 0
        self.is_live = VERDICT_FOR_EVENT[event]
        return self.is_live

    def as_dict(self) -> Dict[str, Any]:
        return {
            "previous_position": list(self.previous_position) if self.previous_position else None,
            "is_live": self.is_live,
            "stillness_frames": self.stillness_frames,
            "previous_eye_distance": self.previous_eye_distance,
        }


@dataclass
class EngineEvent:
    """Diagnostic payload handed to engine callbacks."""

    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    is_live: bool = False
    event: Optional[LivenessEvent] = None


__all__ = ["EngineEvent", "LivenessEvent", "LivenessState", "VERDICT_FOR_EVENT"]
