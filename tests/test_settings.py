import json
import logging
from pathlib import Path

from novel.settings import Settings, load_settings, save_settings


def test_from_dict_clamps_and_coerces() -> None:
    settings = Settings.from_dict(
        {
            "text_speed": "9",
            "ui_scale": 0.1,
            "high_contrast": "yes",
            "caption_audio_cues": "off",
            "show_requirements": 1,
            "log_level": "debug",
        }
    )
    assert settings.text_speed == 5.0
    assert settings.ui_scale == 0.5
    assert settings.high_contrast is True
    assert settings.caption_audio_cues is False
    assert settings.show_requirements is True
    assert settings.log_level == "DEBUG"
    assert settings.log_level_value() == logging.DEBUG


def test_unknown_log_level_falls_back_to_warning() -> None:
    settings = Settings.from_dict({"log_level": "chatty"})
    assert settings.log_level == "WARNING"


def test_load_settings_defaults_for_missing_or_corrupt_file(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "missing.json") == Settings()
    corrupt = tmp_path / "settings.json"
    corrupt.write_text("{not json")
    assert load_settings(corrupt) == Settings()


def test_save_settings_writes_clamped_values(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    settings = Settings(text_speed=12.0, high_contrast=True)
    saved = save_settings(settings, path)
    assert saved.text_speed == 5.0
    assert settings.text_speed == 12.0
    assert json.loads(path.read_text())["text_speed"] == 5.0
    assert load_settings(path) == saved
    assert not list(path.parent.glob("*.tmp"))


def test_copy_is_independent() -> None:
    settings = Settings()
    clone = settings.copy()
    clone.ui_scale = 2.0
    assert settings.ui_scale == 1.0
