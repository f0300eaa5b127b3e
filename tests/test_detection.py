from types import SimpleNamespace

import pytest

from livecheck.app.detection import DetectedFace, EyeLandmarks, face_from_mediapipe, faces_from_mediapipe
from livecheck.app.geometry import Point


def _mp_detection(xmin, ymin, width, height, keypoints=()):
    return SimpleNamespace(
        location_data=SimpleNamespace(
            relative_bounding_box=SimpleNamespace(xmin=xmin, ymin=ymin, width=width, height=height),
            relative_keypoints=[SimpleNamespace(x=x, y=y) for x, y in keypoints],
        )
    )


def test_eye_landmarks_use_indices_zero_and_two() -> None:
    points = [Point(1, 10), Point(5, 99), Point(3, 16), Point(0, 0)]

    eyes = EyeLandmarks.from_points(points)

    assert eyes is not None
    assert eyes.right == Point(1, 10)
    assert eyes.left == Point(3, 16)
    assert eyes.vertical_gap == pytest.approx(6.0)


@pytest.mark.parametrize("points", [None, [], [Point(0, 0), Point(1, 1)]])
def test_eye_landmarks_missing_for_short_sets(points) -> None:
    assert EyeLandmarks.from_points(points) is None


def test_detected_face_from_corners_coerces_points() -> None:
    face = DetectedFace.from_corners([1, 2], (3, 4), [[0, 0], (1, 1), (2, 5)])

    assert face.top_left == Point(1.0, 2.0)
    assert face.bounding_box.bottom_right == Point(3.0, 4.0)
    assert face.landmarks == (Point(0.0, 0.0), Point(1.0, 1.0), Point(2.0, 5.0))
    assert face.eyes is not None
    assert face.eyes.vertical_gap == pytest.approx(5.0)


def test_face_from_mediapipe_scales_to_pixels() -> None:
    det = _mp_detection(0.25, 0.5, 0.5, 0.25, keypoints=[(0.4, 0.6), (0.6, 0.6), (0.5, 0.7)])

    face = face_from_mediapipe(det, width=640, height=480)

    assert face is not None
    assert face.bounding_box.top_left == pytest.approx((160.0, 240.0))
    assert face.bounding_box.bottom_right == pytest.approx((480.0, 360.0))
    assert face.landmarks is not None
    assert face.landmarks[2] == pytest.approx((320.0, 336.0))


def test_face_from_mediapipe_without_keypoints_has_no_landmarks() -> None:
    face = face_from_mediapipe(_mp_detection(0.1, 0.1, 0.2, 0.2), width=100, height=100)

    assert face is not None
    assert face.landmarks is None


def test_faces_from_mediapipe_drops_degenerate_boxes_and_keeps_order() -> None:
    detections = [
        _mp_detection(0.1, 0.1, 0.2, 0.2),
        _mp_detection(0.5, 0.5, 0.0, 0.2),
        _mp_detection(0.6, 0.6, 0.1, 0.1),
    ]

    faces = faces_from_mediapipe(detections, width=100, height=100)

    assert [face.top_left for face in faces] == [pytest.approx((10.0, 10.0)), pytest.approx((60.0, 60.0))]
    assert faces_from_mediapipe(None, 100, 100) == []
