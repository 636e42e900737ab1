"""Machine-readable schema specs for visual novel story files."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple

POINT_NAMESPACES: Tuple[str, ...] = ("universal", "route", "prologue")
CHOICE_POINT_FIELDS: Dict[str, str] = {
    "universalPoints": "universal",
    "routePoints": "route",
    "prologuePoints": "prologue",
}
SFX_TRIGGERS: Tuple[str, ...] = ("onLoad", "onClick", "onChoice")


def path(*parts: object) -> str:
    path_str = ""
    for part in parts:
        if isinstance(part, int):
            path_str = f"{path_str}[{part}]"
            continue
        if not isinstance(part, str):
            part = str(part)
        if part.isidentifier():
            path_str = f"{path_str}.{part}" if path_str else part
        else:
            path_str = f'{path_str}[{json.dumps(part)}]'
    return path_str


def format_validation_message(path_str: str, context: str, message: str) -> str:
    if context:
        return f"{path_str}: {context}: {message}"
    return f"{path_str}: {message}"


def is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true/false must not pass as a point value.
    return isinstance(value, int) and not isinstance(value, bool)


def is_list(value: Any) -> bool:
    return isinstance(value, list)


def validate_point_map(value: Any, context: str, label: str) -> List[str]:
    """Check a ``{point_key: int}`` mapping used for awards and thresholds."""
    errors: List[str] = []
    if not isinstance(value, Mapping):
        errors.append(f"{context}: '{label}' must be an object mapping point keys to integers.")
        return errors
    for key, amount in value.items():
        if not is_non_empty_str(key):
            errors.append(f"{context}: '{label}' point keys must be non-empty strings.")
        elif not is_int(amount):
            errors.append(f"{context}: '{label}' value for '{key}' must be an integer.")
    return errors


def validate_requirements(value: Any, context: str) -> List[str]:
    errors: List[str] = []
    if value is None:
        return errors
    if not isinstance(value, Mapping):
        errors.append(f"{context}: 'requires' must be an object or null.")
        return errors
    for namespace, thresholds in value.items():
        if namespace not in POINT_NAMESPACES:
            errors.append(
                f"{context}: unsupported requirement namespace '{namespace}'"
                f" (expected one of {', '.join(POINT_NAMESPACES)})."
            )
            continue
        if thresholds is None:
            continue
        errors.extend(validate_point_map(thresholds, context, f"requires.{namespace}"))
    return errors


def _validate_bgm(value: Any, context: str) -> List[str]:
    errors: List[str] = []
    if not isinstance(value, Mapping):
        errors.append(f"{context}: 'bgm' must be an object.")
        return errors
    if not is_non_empty_str(value.get("src")):
        errors.append(f"{context}: 'bgm' requires a non-empty string 'src'.")
    volume = value.get("volume")
    if volume is not None and not isinstance(volume, (int, float)):
        errors.append(f"{context}: 'bgm.volume' must be a number if provided.")
    for fade in ("fadeIn", "fadeOut"):
        duration = value.get(fade)
        if duration is not None and not (is_int(duration) and duration >= 0):
            errors.append(f"{context}: 'bgm.{fade}' must be a non-negative integer (milliseconds).")
    return errors


def _validate_sfx(value: Any, context: str) -> List[str]:
    errors: List[str] = []
    if not is_list(value):
        errors.append(f"{context}: 'sfx' must be a list of sound effect objects.")
        return errors
    for idx, entry in enumerate(value, start=1):
        if not isinstance(entry, Mapping):
            errors.append(f"{context}: sfx entry {idx} must be an object.")
            continue
        if not is_non_empty_str(entry.get("src")):
            errors.append(f"{context}: sfx entry {idx} requires a non-empty string 'src'.")
        trigger = entry.get("trigger")
        if trigger is not None and trigger not in SFX_TRIGGERS:
            errors.append(
                f"{context}: sfx entry {idx} has unsupported trigger '{trigger}'"
                f" (expected one of {', '.join(SFX_TRIGGERS)})."
            )
    return errors


def validate_audio(value: Any, context: str) -> List[str]:
    errors: List[str] = []
    if value is None:
        return errors
    if not isinstance(value, Mapping):
        errors.append(f"{context}: 'audio' must be an object or null.")
        return errors
    if value.get("bgm") is not None:
        errors.extend(_validate_bgm(value["bgm"], context))
    if value.get("sfx") is not None:
        errors.extend(_validate_sfx(value["sfx"], context))
    return errors


@dataclass(frozen=True)
class FieldSpec:
    required: bool
    rule: str


SLIDE_FIELDS: Dict[str, FieldSpec] = {
    "id": FieldSpec(False, "optional non-empty string"),
    "speaker": FieldSpec(False, "optional speaker name; omit for narration"),
    "text": FieldSpec(False, "optional body text"),
    "choices": FieldSpec(False, "optional list of choice objects"),
    "requires": FieldSpec(False, "optional point requirements; unmet slides are skipped"),
    "background": FieldSpec(False, "presentation data, passed through untouched"),
    "sprites": FieldSpec(False, "presentation data, passed through untouched"),
    "audio": FieldSpec(False, "optional {bgm, stopPreviousBGM, sfx} descriptor"),
}

CHOICE_FIELDS: Dict[str, FieldSpec] = {
    "text": FieldSpec(True, "non-empty string"),
    "routeId": FieldSpec(False, "id of the route this choice enters"),
    "universalPoints": FieldSpec(False, "point awards applied in every phase"),
    "routePoints": FieldSpec(False, "point awards applied only during a route"),
    "prologuePoints": FieldSpec(False, "point awards applied only during the prologue"),
    "requires": FieldSpec(False, "optional point requirements; unmet choices are hidden"),
    "description": FieldSpec(False, "optional descriptive text"),
}

SCENE_FIELDS: Dict[str, FieldSpec] = {
    "id": FieldSpec(True, "non-empty string, unique within its scene list"),
    "title": FieldSpec(False, "optional display title"),
    "slides": FieldSpec(True, "list of slide objects"),
    "requires": FieldSpec(False, "optional point requirements; unmet scenes are skipped"),
    "characters": FieldSpec(False, "optional list of character names"),
}

ENDING_FIELDS: Dict[str, FieldSpec] = {
    "id": FieldSpec(True, "non-empty string, unique within its route"),
    "name": FieldSpec(False, "optional display name"),
    "scenes": FieldSpec(True, "list of scene objects"),
    "requires": FieldSpec(False, "optional point requirements for eligibility"),
    "priority": FieldSpec(False, "integer, higher wins among eligible endings"),
    "isSecretEnding": FieldSpec(False, "presentation flag"),
    "achievementName": FieldSpec(False, "presentation label"),
    "description": FieldSpec(False, "optional descriptive text"),
}

ROUTE_FIELDS: Dict[str, FieldSpec] = {
    "id": FieldSpec(True, "non-empty string matching the routes key"),
    "name": FieldSpec(False, "optional display name"),
    "scenes": FieldSpec(True, "list of scene objects"),
    "endings": FieldSpec(False, "list of ending objects"),
    "requires": FieldSpec(False, "optional point requirements for entry"),
    "description": FieldSpec(False, "optional descriptive text"),
}
