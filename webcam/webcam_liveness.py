#!/usr/bin/env python3
"""Webcam liveness demo: mediapipe face detection driving the livecheck engine."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import cv2
import mediapipe as mp
import numpy as np

from livecheck.app.config import get_settings
from livecheck.app.detection import faces_from_mediapipe
from livecheck.app.engine import LIVE_COLOR, NOT_LIVE_COLOR, LivenessEngine, LivenessThresholds, RenderBox
from livecheck.app.state import EngineEvent

from webcam.capture_guard import CaptureFailureGuard, CaptureLostError


@dataclass
class WebcamConfig:
    camera_index: int = 0
    confidence: float = 0.5
    fps: float = 5.0
    record_seconds: int = 0
    display: bool = True
    log_path: Optional[Path] = None
    max_read_failures: int = 50
    retry_delay_s: float = 0.1


class WebcamLiveness:
    """Owns the capture device and detector; feeds one engine per run."""

    def __init__(self, config: WebcamConfig, thresholds: Optional[LivenessThresholds] = None) -> None:
        self.config = config
        self.engine = LivenessEngine(thresholds, on_event=self._log_event)
        self.face_detector = mp.solutions.face_detection.FaceDetection(
            model_selection=0,
            min_detection_confidence=config.confidence,
        )
        self.capture: Optional[cv2.VideoCapture] = None
        self._closed = False

    def start(self) -> None:
        if self._closed:
            raise RuntimeError("Cannot start a closed WebcamLiveness instance")
        if self.capture is not None:
            return
        capture = cv2.VideoCapture(self.config.camera_index)
        if not capture.isOpened():
            raise RuntimeError(f"Unable to open camera {self.config.camera_index}")
        self.capture = capture
        logging.info("Opened camera %s", self.config.camera_index)

    def close(self) -> None:
        if self._closed:
            return
        if self.capture is not None:
            self.capture.release()
            self.capture = None
        if self.face_detector:
            self.face_detector.close()
            self.face_detector = None
        self._closed = True

    def __enter__(self) -> "WebcamLiveness":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def process(self):
        """Read one frame and run a tick. Returns ``(frame, tick_result)`` or ``None``."""

        if self.capture is None:
            raise RuntimeError("WebcamLiveness capture not started")
        ok, frame = self.capture.read()
        if not ok:
            return None
        height, width = frame.shape[:2]
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        detection_result = self.face_detector.process(rgb)
        detections = detection_result.detections if detection_result and detection_result.detections else []
        faces = faces_from_mediapipe(detections, width, height)
        return frame, self.engine.update(faces)

    @staticmethod
    def _log_event(event: EngineEvent) -> None:
        if event.type == "eye_distance":
            logging.debug(
                "eye_distance=%.2f previous=%.2f",
                event.data["eye_distance"],
                event.data["previous_eye_distance"],
            )
        elif event.event is not None:
            logging.info("transition %s live=%s %s", event.event.value, event.is_live, event.data)


def draw_overlay(image: np.ndarray, boxes: List[RenderBox], is_live: bool, stillness_frames: int) -> None:
    for render_box in boxes:
        x0, y0, x1, y1 = render_box.box.as_int_tuple()
        cv2.rectangle(image, (x0, y0), (x1, y1), render_box.color, 2)

    color = LIVE_COLOR if is_live else NOT_LIVE_COLOR
    label = "LIVE" if is_live else "NOT LIVE"
    cv2.putText(
        image,
        f"{label} still={stillness_frames} faces={len(boxes)}",
        (10, 30),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.7,
        color,
        2,
        cv2.LINE_AA,
    )


def parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--camera", type=int, default=settings.camera_index, help="OpenCV capture device index")
    parser.add_argument(
        "--confidence", type=float, default=settings.detector_confidence, help="Mediapipe detection confidence"
    )
    parser.add_argument("--no-display", action="store_true", help="Disable OpenCV preview window")
    parser.add_argument("--fps", type=float, default=5.0, help="Status log frequency")
    parser.add_argument("--record", type=int, default=0, help="Optional run duration in seconds (0 = run until Ctrl+C)")
    parser.add_argument("--log-file", type=Path, default=None, help="Also append logs to this file")
    parser.add_argument(
        "--max-read-failures", type=int, default=50, help="Consecutive failed frame grabs before giving up"
    )
    return parser.parse_args()


def setup_logging(config: WebcamConfig, level: str = "INFO") -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_path:
        config.log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.log_path, mode="a"))
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=handlers,
    )


def main() -> None:
    args = parse_args()
    settings = get_settings()
    config = WebcamConfig(
        camera_index=args.camera,
        confidence=args.confidence,
        fps=args.fps,
        record_seconds=args.record,
        display=not args.no_display,
        log_path=args.log_file,
        max_read_failures=args.max_read_failures,
    )
    setup_logging(config, settings.log_level)

    signal.signal(signal.SIGINT, lambda *_: sys.exit(0))

    guard = CaptureFailureGuard(max_failures=config.max_read_failures, retry_delay_s=config.retry_delay_s)
    last_status = 0.0
    start_time = time.time()
    try:
        with WebcamLiveness(config, settings.thresholds()) as liveness:
            while True:
                if config.record_seconds and (time.time() - start_time) >= config.record_seconds:
                    break
                processed = liveness.process()
                if processed is None:
                    guard.record_failure()
                    continue
                guard.record_success()
                frame, result = processed

                now = time.time()
                if now - last_status >= (1.0 / max(config.fps, 1.0)):
                    state = liveness.engine.state
                    logging.info(
                        "status is_live=%s faces=%d stillness=%d eye_distance=%.2f",
                        result.is_live,
                        len(result.render_boxes),
                        state.stillness_frames,
                        state.previous_eye_distance,
                    )
                    last_status = now

                if config.display:
                    draw_overlay(frame, result.render_boxes, result.is_live, liveness.engine.state.stillness_frames)
                    cv2.imshow("livecheck", frame)
                    if cv2.waitKey(1) & 0xFF == 27:
                        break
    except CaptureLostError as err:
        logging.error("Camera %s lost: %s", config.camera_index, err)
        sys.exit(1)
    finally:
        if config.display:
            cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
