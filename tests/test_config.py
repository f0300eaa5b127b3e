from pathlib import Path

import pytest

from livecheck.app.config import Settings, get_settings
from livecheck.app.engine import LivenessThresholds


def test_defaults_match_reference_thresholds(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("MOVEMENT_THRESHOLD", "STILLNESS_THRESHOLD", "BLINK_THRESHOLD", "SCALE_FACTOR", "Y_OFFSET"):
        monkeypatch.delenv(f"LIVECHECK_{name}", raising=False)

    settings = Settings(_env_file=None)

    assert settings.thresholds() == LivenessThresholds()


def test_thresholds_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIVECHECK_MOVEMENT_THRESHOLD", "8.5")
    monkeypatch.setenv("livecheck_stillness_threshold", "12")
    monkeypatch.setenv("LIVECHECK_BLINK_THRESHOLD", "0.3")

    thresholds = Settings(_env_file=None).thresholds()

    assert thresholds.movement_threshold == 8.5
    assert thresholds.stillness_threshold == 12
    assert thresholds.blink_threshold == 0.3


def test_get_settings_accepts_env_file_override(tmp_path: Path) -> None:
    env_file = tmp_path / "livecheck.env"
    env_file.write_text("LIVECHECK_Y_OFFSET=35\nLIVECHECK_MAX_SESSIONS=3\n", encoding="utf-8")

    settings = get_settings(env_file)

    assert settings.y_offset == 35.0
    assert settings.max_sessions == 3
    assert get_settings(env_file) is settings
