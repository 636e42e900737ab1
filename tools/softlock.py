"""Soft-lock analysis helpers for story validation."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from novel.story_schema import CHOICE_POINT_FIELDS, POINT_NAMESPACES, path


def _is_gated(requires: Any) -> bool:
    if not isinstance(requires, Mapping):
        return False
    return any(isinstance(values, Mapping) and values for values in requires.values())


def _as_list(value: Any) -> Sequence[Any]:
    if isinstance(value, list):
        return value
    return []


def _iter_scene_lists(story: Mapping[str, Any]) -> Iterable[Tuple[Tuple[object, ...], Sequence[Any]]]:
    yield ("prologue",), _as_list(story.get("prologue"))
    routes = story.get("routes")
    if not isinstance(routes, Mapping):
        return
    for route_id, route in routes.items():
        if not isinstance(route, Mapping):
            continue
        yield ("routes", route_id, "scenes"), _as_list(route.get("scenes"))
        for index, ending in enumerate(_as_list(route.get("endings"))):
            if isinstance(ending, Mapping):
                yield ("routes", route_id, "endings", index, "scenes"), _as_list(ending.get("scenes"))


def _iter_choices(
    scenes: Sequence[Any], base: Tuple[object, ...]
) -> Iterable[Tuple[Mapping[str, Any], Tuple[object, ...]]]:
    for scene_index, scene in enumerate(scenes):
        if not isinstance(scene, Mapping):
            continue
        for slide_index, slide in enumerate(_as_list(scene.get("slides"))):
            if not isinstance(slide, Mapping):
                continue
            for choice_index, choice in enumerate(_as_list(slide.get("choices"))):
                if isinstance(choice, Mapping):
                    yield choice, (*base, scene_index, "slides", slide_index, "choices", choice_index)


def _unimplied_requirements(
    route_requires: Mapping[str, Any],
    choice: Mapping[str, Any],
    phase: str,
) -> List[str]:
    """Route thresholds a player could still miss after seeing and taking ``choice``."""
    choice_requires = choice.get("requires") if isinstance(choice.get("requires"), Mapping) else {}
    gaps: List[str] = []
    for namespace in POINT_NAMESPACES:
        thresholds = route_requires.get(namespace)
        if not isinstance(thresholds, Mapping):
            continue
        guaranteed = choice_requires.get(namespace) or {}
        awards: Dict[str, int] = {}
        for field_name, award_namespace in CHOICE_POINT_FIELDS.items():
            if award_namespace != namespace:
                continue
            if namespace == "universal" or namespace == phase:
                awards = choice.get(field_name) or {}
        for key, needed in thresholds.items():
            floor = guaranteed.get(key, 0) + awards.get(key, 0)
            if floor < needed:
                gaps.append(f"{namespace}.{key}>={needed}")
    return gaps


def analyze_softlocks(story: Mapping[str, Any]) -> List[str]:
    warnings: List[str] = []
    routes = story.get("routes")
    if not isinstance(routes, Mapping):
        routes = {}

    for route_id, route in routes.items():
        if isinstance(route, Mapping) and not _as_list(route.get("endings")):
            warnings.append(
                f"{path('routes', route_id, 'endings')}: route defines no endings;"
                " finishing it completes the story without an ending."
            )

    for base, scenes in _iter_scene_lists(story):
        for index, scene in enumerate(scenes):
            if not isinstance(scene, Mapping):
                continue
            slides = [slide for slide in _as_list(scene.get("slides")) if isinstance(slide, Mapping)]
            if not slides:
                warnings.append(f"{path(*base, index)}: scene has no slides and will always be skipped.")
            elif all(_is_gated(slide.get("requires")) for slide in slides):
                warnings.append(
                    f"{path(*base, index)}: every slide is gated; the scene is skipped"
                    " unless one requirement is met."
                )

    prologue = _as_list(story.get("prologue"))
    prologue_route_choices = [
        (choice, choice_path)
        for choice, choice_path in _iter_choices(prologue, ("prologue",))
        if choice.get("routeId")
    ]
    if not prologue_route_choices:
        warnings.append(
            f"{path('prologue')}: no choice selects a route; the prologue will stall at its end."
        )
    elif all(_is_gated(choice.get("requires")) for choice, _ in prologue_route_choices):
        choice_paths = ", ".join(path(*choice_path) for _, choice_path in prologue_route_choices)
        warnings.append(
            f"{path('prologue')}: every route-selecting choice is gated. Choices: {choice_paths}."
        )

    for base, scenes in _iter_scene_lists(story):
        phase = "prologue" if base == ("prologue",) else "route"
        for choice, choice_path in _iter_choices(scenes, base):
            route_id = choice.get("routeId")
            route = routes.get(route_id) if isinstance(route_id, str) else None
            if not isinstance(route, Mapping) or not isinstance(route.get("requires"), Mapping):
                continue
            gaps = _unimplied_requirements(route["requires"], choice, phase)
            if gaps:
                warnings.append(
                    f"{path(*choice_path)}: choice can be shown while route '{route_id}'"
                    f" still rejects entry ({', '.join(gaps)})."
                )

    return warnings
