"""Liveness engine and the session service that hosts it."""
from __future__ import annotations

from .detection import DetectedFace, EyeLandmarks
from .engine import LivenessEngine, LivenessThresholds, RenderBox, TickResult
from .geometry import Box, Point, expand_box
from .state import EngineEvent, LivenessEvent, LivenessState

__all__ = [
    "Box",
    "DetectedFace",
    "EngineEvent",
    "EyeLandmarks",
    "LivenessEngine",
    "LivenessEvent",
    "LivenessState",
    "LivenessThresholds",
    "Point",
    "RenderBox",
    "TickResult",
    "expand_box",
]
