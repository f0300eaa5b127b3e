"""livecheck: frame-by-frame liveness verdicts from face detections."""
