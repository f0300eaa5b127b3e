"""Central configuration for the livecheck service."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .engine import LivenessThresholds

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = ROOT_DIR / ".env"


class Settings(BaseSettings):
    """Environment-driven settings for the engine, service and webcam loop."""

    movement_threshold: float = Field(15.0, description="Top-left shift in pixels that counts as movement")
    stillness_threshold: int = Field(30, description="Still frames tolerated before the verdict drops")
    blink_threshold: float = Field(0.5, description="Eye-distance ratio below which a tick counts as a blink")
    scale_factor: float = Field(1.2, description="Render box scale about its centre")
    y_offset: float = Field(20.0, description="Vertical shift applied to render boxes")

    controller_host: str = Field("0.0.0.0", description="Host interface for local FastAPI server")
    controller_port: int = Field(5000, description="Port for FastAPI server")
    max_sessions: int = Field(64, description="Concurrent liveness sessions kept by the service")
    session_idle_seconds: float = Field(120.0, description="Seconds without ticks before a session may be evicted")

    camera_index: int = Field(0, description="OpenCV capture device for the webcam loop")
    detector_confidence: float = Field(0.5, description="Minimum face detector confidence")

    log_level: str = Field("INFO", description="Logging level for the service")

    model_config = SettingsConfigDict(
        env_prefix="LIVECHECK_",
        env_file=str(DEFAULT_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def thresholds(self) -> LivenessThresholds:
        return LivenessThresholds(
            movement_threshold=self.movement_threshold,
            stillness_threshold=self.stillness_threshold,
            blink_threshold=self.blink_threshold,
            scale_factor=self.scale_factor,
            y_offset=self.y_offset,
        )


@lru_cache()
def get_settings(override_env_file: Optional[Path] = None) -> Settings:
    """Cached Settings instance; accepts optional env override for tests."""

    if override_env_file:
        return Settings(_env_file=str(override_env_file))
    return Settings()
