import pytest

from microwave.config import DEFAULT_SETTINGS, MicrowaveSettings


def test_default_settings_are_consistent() -> None:
    assert DEFAULT_SETTINGS.default_duration_ms == 30_000
    assert DEFAULT_SETTINGS.default_duration_ms in DEFAULT_SETTINGS.preset_durations_ms
    assert DEFAULT_SETTINGS.frame_interval_ms > 0


def test_default_duration_must_be_a_preset() -> None:
    with pytest.raises(ValueError, match="default_duration_ms"):
        MicrowaveSettings(default_duration_ms=45_000)


def test_presets_must_be_positive_and_unique() -> None:
    with pytest.raises(ValueError, match="positive"):
        MicrowaveSettings(preset_durations_ms=(0, 30_000))
    with pytest.raises(ValueError, match="unique"):
        MicrowaveSettings(preset_durations_ms=(30_000, 30_000))
    with pytest.raises(ValueError, match="empty"):
        MicrowaveSettings(preset_durations_ms=())


def test_frame_interval_must_be_positive() -> None:
    with pytest.raises(ValueError, match="frame_interval_ms"):
        MicrowaveSettings(frame_interval_ms=0)
