"""Player preferences stored as JSON next to the repo root.

Numeric fields are clamped into ``NUMERIC_BOUNDS``; unknown log levels fall
back to WARNING.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

SETTINGS_PATH = Path(__file__).resolve().parent.parent / "settings.json"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_LEVEL = "WARNING"
NUMERIC_BOUNDS: Dict[str, Tuple[float, float]] = {
    "text_speed": (0.0, 5.0),
    "ui_scale": (0.5, 2.0),
}
_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off"}


def _coerce_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        return default
    if value is None:
        return default
    return bool(value)


def _coerce_level(value: Any) -> str:
    level = str(value).strip().upper()
    return level if level in LOG_LEVELS else DEFAULT_LOG_LEVEL


@dataclass
class Settings:
    """Terminal player preferences.

    ``text_speed`` scales the typing effect (0 prints instantly), ``ui_scale``
    scales the line width, and ``show_requirements`` annotates every choice
    with its route target and requirements.
    """

    text_speed: float = 1.0
    ui_scale: float = 1.0
    high_contrast: bool = False
    caption_audio_cues: bool = False
    show_requirements: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    def clamp(self) -> "Settings":
        for name, (low, high) in NUMERIC_BOUNDS.items():
            value = _coerce_float(getattr(self, name), 1.0)
            setattr(self, name, max(low, min(high, value)))
        for name in ("high_contrast", "caption_audio_cues", "show_requirements"):
            setattr(self, name, bool(getattr(self, name)))
        self.log_level = _coerce_level(self.log_level)
        return self

    def copy(self) -> "Settings":
        return Settings.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def log_level_value(self) -> int:
        return getattr(logging, self.log_level, logging.WARNING)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Settings":
        settings = cls()
        if not isinstance(data, Mapping):
            return settings
        for spec in fields(cls):
            if spec.name not in data:
                continue
            default = getattr(settings, spec.name)
            raw = data[spec.name]
            if isinstance(default, bool):
                value: Any = _coerce_bool(raw, default)
            elif isinstance(default, float):
                value = _coerce_float(raw, default)
            else:
                value = raw
            setattr(settings, spec.name, value)
        return settings.clamp()


def load_settings(path: Path | str = SETTINGS_PATH) -> Settings:
    try:
        with Path(path).open("r", encoding="utf-8") as handle:
            return Settings.from_dict(json.load(handle))
    except (OSError, json.JSONDecodeError):
        return Settings()


def save_settings(settings: Settings, path: Path | str = SETTINGS_PATH) -> Settings:
    """Write sanitized settings atomically and return them."""
    target = Path(path)
    sanitized = settings.copy()
    target.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=target.parent, prefix=target.name, suffix=".tmp", encoding="utf-8"
        ) as handle:
            tmp_path = Path(handle.name)
            json.dump(sanitized.to_dict(), handle, indent=2)
            handle.write("\n")
        os.replace(tmp_path, target)
    except OSError as exc:
        print(f"[Settings] Failed to save {target}: {exc}", file=sys.stderr)
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
    return sanitized
