"""Load story JSON files, merging route modules and validating the result."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, NoReturn

from .schema import validate_story
from .story import GameStory

LOGGER = logging.getLogger(__name__)

DEFAULT_STORY_PATH = Path(__file__).resolve().parent.parent / "story" / "story.json"


def _raise_story_validation(errors: List[str]) -> NoReturn:
    raise ValueError("Invalid story file:\n- " + "\n- ".join(errors))


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def merge_story_modules(story: Dict[str, Any], story_path: Path | str) -> Dict[str, Any]:
    """Fold each file named in ``modules`` into the story's ``routes``."""
    modules = story.get("modules")
    if not modules:
        return story
    if not isinstance(modules, list):
        _raise_story_validation(["'modules' must be a list of module file paths."])

    base_routes = story.get("routes") or {}
    if not isinstance(base_routes, dict):
        _raise_story_validation(["'routes' must be an object mapping route IDs to routes."])
    combined_routes = dict(base_routes)
    base_dir = Path(story_path).resolve().parent

    for module_ref in modules:
        if not isinstance(module_ref, str) or not module_ref.strip():
            _raise_story_validation(["module entries must be non-empty strings."])
        module_path = (base_dir / module_ref).resolve()
        module = _read_json(module_path)
        if not isinstance(module, dict):
            _raise_story_validation([f"{module_path}: module data must be a JSON object."])
        module_routes = module.get("routes") or {}
        if not isinstance(module_routes, dict):
            _raise_story_validation([f"{module_path}: 'routes' must be an object."])
        overlap = set(combined_routes).intersection(module_routes)
        if overlap:
            _raise_story_validation(
                [f"{module_path}: route IDs already defined: {', '.join(sorted(overlap))}."]
            )
        combined_routes.update(module_routes)
        LOGGER.debug("Merged %d route(s) from %s.", len(module_routes), module_path)

    story["routes"] = combined_routes
    story.pop("modules", None)
    return story


def load_story_data(path: Path | str) -> Dict[str, Any]:
    """Read, merge and validate a story file, returning the raw mapping."""
    data = _read_json(Path(path))
    if not isinstance(data, dict):
        _raise_story_validation(["Story data must be a JSON object."])
    data = merge_story_modules(data, path)
    errors = validate_story(data)
    if errors:
        _raise_story_validation(errors)
    data.setdefault("routes", {})
    return data


def load_story_file(path: Path | str = DEFAULT_STORY_PATH) -> GameStory:
    story = GameStory.from_dict(load_story_data(path))
    LOGGER.info(
        "Loaded story '%s' from %s: %d prologue scene(s), %d route(s).",
        story.title or "untitled",
        path,
        len(story.prologue),
        len(story.routes),
    )
    return story
