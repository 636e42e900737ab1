"""Shared story validation utilities."""

from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, List, Mapping, Sequence

from .story_schema import (
    CHOICE_FIELDS,
    CHOICE_POINT_FIELDS,
    ENDING_FIELDS,
    ROUTE_FIELDS,
    SCENE_FIELDS,
    FieldSpec,
    format_validation_message,
    is_int,
    is_list,
    is_non_empty_str,
    path,
    validate_audio,
    validate_point_map,
    validate_requirements,
)


class ValidationContext:
    """Utility container for accumulating validation errors."""

    def __init__(self) -> None:
        self.errors: List[str] = []

    def add(self, context: str, path_str: str, message: str) -> None:
        self.errors.append(format_validation_message(path_str, context, message))

    def extend_with_path(self, messages: Iterable[str], path_str: str) -> None:
        for message in messages:
            self.errors.append(f"{path_str}: {message}")

    def ok(self) -> bool:
        return not self.errors


def require(condition: bool, context: str, path_str: str, message: str, ctx: ValidationContext) -> None:
    if not condition:
        ctx.add(context, path_str, message)


def require_fields(
    payload: Mapping[str, Any],
    specs: Mapping[str, FieldSpec],
    context: str,
    path_parts: Sequence[object],
    ctx: ValidationContext,
) -> None:
    for name, spec in specs.items():
        if spec.required and payload.get(name) is None:
            ctx.add(context, path(*path_parts, name), f"is missing required '{name}' ({spec.rule}).")


def validate_choice(
    choice: Any,
    context: str,
    route_ids: Sequence[str],
    path_parts: Sequence[object],
    ctx: ValidationContext,
) -> None:
    if not isinstance(choice, Mapping):
        ctx.add(context, path(*path_parts), "must be an object.")
        return
    require_fields(choice, CHOICE_FIELDS, context, path_parts, ctx)
    text = choice.get("text")
    if text is not None and not is_non_empty_str(text):
        ctx.add(context, path(*path_parts, "text"), "requires non-empty 'text'.")

    route_id = choice.get("routeId")
    if route_id is not None:
        if not is_non_empty_str(route_id):
            ctx.add(context, path(*path_parts, "routeId"), "must use a non-empty string 'routeId'.")
        elif route_id not in route_ids:
            ctx.add(context, path(*path_parts, "routeId"), f"targets unknown route '{route_id}'.")

    for field_name in CHOICE_POINT_FIELDS:
        awards = choice.get(field_name)
        if awards is None:
            continue
        ctx.extend_with_path(
            validate_point_map(awards, context, field_name), path(*path_parts, field_name)
        )
    ctx.extend_with_path(
        validate_requirements(choice.get("requires"), context), path(*path_parts, "requires")
    )


def validate_slide(
    slide: Any,
    context: str,
    route_ids: Sequence[str],
    path_parts: Sequence[object],
    ctx: ValidationContext,
) -> None:
    if not isinstance(slide, Mapping):
        ctx.add(context, path(*path_parts), "must be an object.")
        return
    for field_name in ("id", "speaker", "text"):
        value = slide.get(field_name)
        if value is not None and not isinstance(value, str):
            ctx.add(context, path(*path_parts, field_name), f"'{field_name}' must be a string.")
    ctx.extend_with_path(
        validate_requirements(slide.get("requires"), context), path(*path_parts, "requires")
    )
    ctx.extend_with_path(validate_audio(slide.get("audio"), context), path(*path_parts, "audio"))

    choices = slide.get("choices")
    if choices is None:
        return
    if not is_list(choices):
        ctx.add(context, path(*path_parts, "choices"), "choices must be provided as a list.")
        return
    for index, choice in enumerate(choices, start=1):
        validate_choice(
            choice,
            f"{context}, choice {index}",
            route_ids,
            (*path_parts, "choices", index - 1),
            ctx,
        )


def validate_scene_list(
    scenes: Any,
    context: str,
    route_ids: Sequence[str],
    path_parts: Sequence[object],
    ctx: ValidationContext,
) -> None:
    if not is_list(scenes):
        ctx.add(context, path(*path_parts), "scenes must be provided as a list.")
        return
    scene_ids: List[str] = []
    for index, scene in enumerate(scenes, start=1):
        scene_path = (*path_parts, index - 1)
        if not isinstance(scene, Mapping):
            ctx.add(f"{context} scene {index}", path(*scene_path), "must be an object.")
            continue
        scene_id = scene.get("id")
        scene_context = f"Scene '{scene_id}'" if is_non_empty_str(scene_id) else f"{context} scene {index}"
        require_fields(scene, SCENE_FIELDS, scene_context, scene_path, ctx)
        if scene_id is not None and not is_non_empty_str(scene_id):
            ctx.add(scene_context, path(*scene_path, "id"), "requires a non-empty string 'id'.")
        elif scene_id is not None:
            scene_ids.append(scene_id)
        characters = scene.get("characters")
        if characters is not None and not (
            is_list(characters) and all(isinstance(name, str) for name in characters)
        ):
            ctx.add(scene_context, path(*scene_path, "characters"), "must be a list of names.")
        ctx.extend_with_path(
            validate_requirements(scene.get("requires"), scene_context),
            path(*scene_path, "requires"),
        )
        slides = scene.get("slides")
        if slides is None:
            continue
        if not is_list(slides):
            ctx.add(scene_context, path(*scene_path, "slides"), "slides must be provided as a list.")
            continue
        for slide_index, slide in enumerate(slides, start=1):
            validate_slide(
                slide,
                f"{scene_context} slide {slide_index}",
                route_ids,
                (*scene_path, "slides", slide_index - 1),
                ctx,
            )

    duplicates = [scene_id for scene_id, count in Counter(scene_ids).items() if count > 1]
    if duplicates:
        ctx.add(context, path(*path_parts), f"duplicate scene IDs found: {', '.join(sorted(duplicates))}.")


def validate_ending(
    ending: Any,
    context: str,
    route_ids: Sequence[str],
    path_parts: Sequence[object],
    ctx: ValidationContext,
) -> None:
    if not isinstance(ending, Mapping):
        ctx.add(context, path(*path_parts), "must be an object.")
        return
    require_fields(ending, ENDING_FIELDS, context, path_parts, ctx)
    priority = ending.get("priority")
    if priority is not None and not is_int(priority):
        ctx.add(context, path(*path_parts, "priority"), "'priority' must be an integer.")
    ctx.extend_with_path(
        validate_requirements(ending.get("requires"), context), path(*path_parts, "requires")
    )
    if ending.get("scenes") is not None:
        validate_scene_list(ending["scenes"], context, route_ids, (*path_parts, "scenes"), ctx)


def validate_route(
    route_key: str,
    route: Any,
    route_ids: Sequence[str],
    ctx: ValidationContext,
) -> None:
    context = f"Route '{route_key}'"
    route_path = ("routes", route_key)
    if not isinstance(route, Mapping):
        ctx.add(context, path(*route_path), "must be an object.")
        return
    require_fields(route, ROUTE_FIELDS, context, route_path, ctx)
    declared_id = route.get("id")
    if declared_id is not None and declared_id != route_key:
        ctx.add(
            context,
            path(*route_path, "id"),
            f"id '{declared_id}' does not match its routes key '{route_key}'.",
        )
    ctx.extend_with_path(
        validate_requirements(route.get("requires"), context), path(*route_path, "requires")
    )
    if route.get("scenes") is not None:
        validate_scene_list(route["scenes"], context, route_ids, (*route_path, "scenes"), ctx)

    endings = route.get("endings")
    if endings is None:
        return
    if not is_list(endings):
        ctx.add(context, path(*route_path, "endings"), "endings must be provided as a list.")
        return
    ending_ids: List[str] = []
    for index, ending in enumerate(endings, start=1):
        ending_id = ending.get("id") if isinstance(ending, Mapping) else None
        if is_non_empty_str(ending_id):
            ending_ids.append(ending_id)
        validate_ending(
            ending,
            f"{context} ending '{ending_id or index}'",
            route_ids,
            (*route_path, "endings", index - 1),
            ctx,
        )
    duplicates = [ending_id for ending_id, count in Counter(ending_ids).items() if count > 1]
    if duplicates:
        ctx.add(
            context,
            path(*route_path, "endings"),
            f"duplicate ending IDs found: {', '.join(sorted(duplicates))}.",
        )


def validate_story(story: Mapping[str, Any]) -> List[str]:
    ctx = ValidationContext()

    title = story.get("title")
    require(
        title is None or is_non_empty_str(title),
        "Story data",
        path("title"),
        "'title' must be a non-empty string if present.",
        ctx,
    )
    require(
        "prologue" in story,
        "Story data",
        path("prologue"),
        "must include a 'prologue' scene list.",
        ctx,
    )

    routes = story.get("routes")
    if routes is None:
        routes = {}
    elif not isinstance(routes, Mapping):
        ctx.add(
            "Story data",
            path("routes"),
            "'routes' must be an object mapping route IDs to route definitions.",
        )
        routes = {}
    route_ids = [route_id for route_id in routes if is_non_empty_str(route_id)]

    point_types = story.get("pointTypes")
    if point_types is not None and not isinstance(point_types, Mapping):
        ctx.add("Story data", path("pointTypes"), "'pointTypes' must be an object if present.")

    if "prologue" in story:
        validate_scene_list(story.get("prologue"), "Prologue", route_ids, ("prologue",), ctx)

    for route_key, route in routes.items():
        if not is_non_empty_str(route_key):
            ctx.add("Routes", path("routes"), "route identifiers must be non-empty strings.")
            continue
        validate_route(route_key, route, route_ids, ctx)

    return ctx.errors
