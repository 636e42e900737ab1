"""Scene and slide traversal.

Position is tracked as ``(scene_index, slide_index)`` into the scene list of
the current phase: the prologue, the active route's scenes, or the active
ending's scenes. Gated scenes and slides are never surfaced; traversal skips
past them. When a phase runs out of scenes the phase-specific transition runs
once: the prologue stalls, a route resolves its ending and an ending marks
itself unlocked and completes the story.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

from .story import Choice, Route, RouteEnding, Scene, Slide

if TYPE_CHECKING:
    from .session import Session

LOGGER = logging.getLogger(__name__)

PHASE_PROLOGUE = "prologue"
PHASE_ROUTE = "route"
PHASE_ENDING = "ending"
PHASE_COMPLETE = "complete"
PHASES = (PHASE_PROLOGUE, PHASE_ROUTE, PHASE_ENDING, PHASE_COMPLETE)


def active_route(session: "Session") -> Optional[Route]:
    if session.story is None or not session.route_id:
        return None
    return session.story.routes.get(session.route_id)


def active_ending(session: "Session") -> Optional[RouteEnding]:
    route = active_route(session)
    if route is None or not session.ending_id:
        return None
    return route.find_ending(session.ending_id)


def active_scenes(session: "Session") -> Optional[Sequence[Scene]]:
    """Return the scene list for the current phase, or None if there is none."""
    story = session.story
    if story is None:
        return None
    if session.phase == PHASE_PROLOGUE:
        return story.prologue
    if session.phase == PHASE_ROUTE:
        route = active_route(session)
        return route.scenes if route else None
    if session.phase == PHASE_ENDING:
        ending = active_ending(session)
        return ending.scenes if ending else None
    return None


def scene_at(session: "Session", index: int) -> Optional[Scene]:
    scenes = active_scenes(session)
    if scenes is None or not 0 <= index < len(scenes):
        return None
    return scenes[index]


def current_scene(session: "Session") -> Optional[Scene]:
    scene = scene_at(session, session.scene_index)
    if scene is None:
        return None
    if not session.is_available(scene.requires):
        return None
    return scene


def current_slide(session: "Session") -> Optional[Slide]:
    scene = current_scene(session)
    if scene is None:
        return None
    if not 0 <= session.slide_index < len(scene.slides):
        return None
    slide = scene.slides[session.slide_index]
    if not session.is_available(slide.requires):
        return None
    return slide


def filtered_choices(session: "Session") -> List[Choice]:
    slide = current_slide(session)
    if slide is None:
        return []
    return [choice for choice in slide.choices if session.is_available(choice.requires)]


def first_reachable_slide(session: "Session", scene: Scene, start: int = 0) -> Optional[int]:
    for index in range(max(start, 0), len(scene.slides)):
        slide = scene.slides[index]
        if session.is_available(slide.requires):
            return index
        LOGGER.debug(
            "Skipping slide %d (%s) in scene '%s': requirements not met.",
            index,
            slide.id or "unnamed",
            scene.id,
        )
    return None


def _enter_scene(session: "Session", scenes: Sequence[Scene], index: int) -> bool:
    scene = scenes[index]
    if not session.is_available(scene.requires):
        LOGGER.debug("Skipping scene '%s': requirements not met.", scene.id)
        return False
    first = first_reachable_slide(session, scene)
    if first is None:
        LOGGER.debug("Skipping scene '%s': no reachable slides.", scene.id)
        return False
    session.scene_index = index
    session.slide_index = first
    return True


def _finish_scenes(session: "Session") -> None:
    if session.phase == PHASE_PROLOGUE:
        LOGGER.warning("Prologue exhausted without a route selection; the story cannot continue.")
    elif session.phase == PHASE_ROUTE:
        LOGGER.info("Route '%s' complete; resolving ending.", session.route_id)
        session.determine_ending()
    elif session.phase == PHASE_ENDING:
        session.unlock_ending(session.ending_id)
        session.phase = PHASE_COMPLETE
        LOGGER.info("Story complete with ending '%s'.", session.ending_id)


def advance_to_next_scene(session: "Session") -> None:
    """Move to the next scene with a reachable slide, or finish the phase."""
    scenes = active_scenes(session)
    if scenes is None:
        LOGGER.debug("advance_to_next_scene ignored in phase '%s'.", session.phase)
        return
    next_index = session.scene_index + 1
    while next_index < len(scenes):
        if _enter_scene(session, scenes, next_index):
            return
        next_index += 1
    _finish_scenes(session)


def enter_scenes(session: "Session") -> None:
    """Position the session at the start of the current phase's scene list."""
    session.scene_index = 0
    session.slide_index = 0
    scenes = active_scenes(session)
    if scenes is None:
        return
    if scenes and _enter_scene(session, scenes, 0):
        return
    advance_to_next_scene(session)


def advance_slide(session: "Session") -> None:
    scene = scene_at(session, session.scene_index)
    if scene is None:
        LOGGER.debug("advance_slide ignored; no current scene in phase '%s'.", session.phase)
        return
    if session.is_available(scene.requires):
        next_index = first_reachable_slide(session, scene, session.slide_index + 1)
        if next_index is not None:
            session.slide_index = next_index
            return
        LOGGER.debug("No more reachable slides in scene '%s'.", scene.id)
    else:
        LOGGER.debug("Scene '%s' is no longer reachable; moving on.", scene.id)
    advance_to_next_scene(session)
