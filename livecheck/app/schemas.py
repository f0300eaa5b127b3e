"""Wire models for the session service."""
from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from .detection import DetectedFace
from .engine import RenderBox
from .state import LivenessState

Coordinate = Tuple[float, float]


class FacePayload(BaseModel):
    top_left: Coordinate
    bottom_right: Coordinate
    landmarks: Optional[List[Coordinate]] = None

    def to_face(self) -> DetectedFace:
        return DetectedFace.from_corners(self.top_left, self.bottom_right, self.landmarks)


class TickRequest(BaseModel):
    faces: List[FacePayload] = Field(default_factory=list)

    def to_faces(self) -> List[DetectedFace]:
        return [face.to_face() for face in self.faces]


class BoxPayload(BaseModel):
    top_left: Coordinate
    bottom_right: Coordinate
    is_live: bool
    color: Tuple[int, int, int]

    @classmethod
    def from_render_box(cls, render_box: RenderBox) -> "BoxPayload":
        return cls(
            top_left=tuple(render_box.box.top_left),
            bottom_right=tuple(render_box.box.bottom_right),
            is_live=render_box.is_live,
            color=render_box.color,
        )


class TickResponse(BaseModel):
    session_id: str
    is_live: bool
    stillness_frames: int
    boxes: List[BoxPayload]


class SessionSnapshot(BaseModel):
    session_id: str
    ticks: int
    previous_position: Optional[Coordinate] = None
    is_live: bool
    stillness_frames: int
    previous_eye_distance: float

    @classmethod
    def from_state(cls, session_id: str, ticks: int, state: LivenessState) -> "SessionSnapshot":
        return cls(session_id=session_id, ticks=ticks, **state.as_dict())


__all__ = ["BoxPayload", "FacePayload", "SessionSnapshot", "TickRequest", "TickResponse"]
