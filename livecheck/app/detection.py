"""Detector output contract consumed by the liveness engine."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .geometry import Box, Point

logger = logging.getLogger(__name__)

# Detector keypoint order: index 0 is the right eye, index 2 the left eye.
RIGHT_EYE_INDEX = 0
LEFT_EYE_INDEX = 2


class EyeLandmarks(NamedTuple):
    """Typed view over the two eye points so callers never index raw landmarks."""

    right: Point
    left: Point

    @property
    def vertical_gap(self) -> float:
        return abs(self.right.y - self.left.y)

    @classmethod
    def from_points(cls, points: Optional[Sequence[Point]]) -> Optional["EyeLandmarks"]:
        if not points:
            return None
        if len(points) <= LEFT_EYE_INDEX:
            logger.debug("Landmark set too short for eye lookup: %d points", len(points))
            return None
        return cls(right=points[RIGHT_EYE_INDEX], left=points[LEFT_EYE_INDEX])


@dataclass(frozen=True)
class DetectedFace:
    bounding_box: Box
    landmarks: Optional[Tuple[Point, ...]] = None

    @classmethod
    def from_corners(
        cls,
        top_left: Sequence[float],
        bottom_right: Sequence[float],
        landmarks: Optional[Iterable[Sequence[float]]] = None,
    ) -> "DetectedFace":
        points = tuple(Point.coerce(p) for p in landmarks) if landmarks is not None else None
        return cls(
            bounding_box=Box(Point.coerce(top_left), Point.coerce(bottom_right)),
            landmarks=points,
        )

    @property
    def top_left(self) -> Point:
        return self.bounding_box.top_left

    @property
    def eyes(self) -> Optional[EyeLandmarks]:
        return EyeLandmarks.from_points(self.landmarks)


def face_from_mediapipe(detection, width: int, height: int) -> Optional[DetectedFace]:
    """Convert a mediapipe face-detection result into pixel-space ``DetectedFace``.

    Keypoints are passed through in the detector's own order. Returns ``None``
    for degenerate boxes.
    """

    location = detection.location_data
    bbox = location.relative_bounding_box
    if bbox.width <= 0 or bbox.height <= 0:
        return None
    x0 = bbox.xmin * width
    y0 = bbox.ymin * height
    x1 = (bbox.xmin + bbox.width) * width
    y1 = (bbox.ymin + bbox.height) * height
    keypoints = getattr(location, "relative_keypoints", None) or []
    landmarks = [(kp.x * width, kp.y * height) for kp in keypoints]
    return DetectedFace.from_corners((x0, y0), (x1, y1), landmarks or None)


def faces_from_mediapipe(detections, width: int, height: int) -> List[DetectedFace]:
    faces: List[DetectedFace] = []
    for det in detections or []:
        face = face_from_mediapipe(det, width, height)
        if face is not None:
            faces.append(face)
    return faces


__all__ = [
    "DetectedFace",
    "EyeLandmarks",
    "face_from_mediapipe",
    "faces_from_mediapipe",
]
