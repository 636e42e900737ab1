"""Playthrough state and the public engine interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from . import navigation, routing
from .navigation import PHASE_PROLOGUE, PHASE_ROUTE
from .points import PointLedger
from .requirements import PointCheck, check_requirements
from .story import Choice, GameStory, PointRequirements, RouteEnding, Scene, Slide

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DebugInfo:
    """Read-only projection of a session for debug panels and summaries."""

    phase: str
    route: Optional[str]
    ending: Optional[str]
    scene_index: int
    slide_index: int
    total_scenes: int
    points: Dict[str, Dict[str, int]] = field(default_factory=dict)
    choices_made: int = 0
    endings_unlocked: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase,
            "route": self.route,
            "ending": self.ending,
            "sceneIndex": self.scene_index,
            "slideIndex": self.slide_index,
            "totalScenes": self.total_scenes,
            "points": {name: dict(values) for name, values in self.points.items()},
            "choicesMade": self.choices_made,
            "endingsUnlocked": list(self.endings_unlocked),
        }


class Session:
    """One playthrough of a ``GameStory``.

    The session owns all mutable state; the story itself is never modified.
    Callers drive it with ``advance_slide`` and ``make_choice`` and read
    ``current_slide``, ``filtered_choices`` and ``phase`` to render.
    """

    def __init__(
        self,
        story: Optional[GameStory] = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.story: Optional[GameStory] = None
        self.points = PointLedger()
        self._clock = clock
        self._clear_state()
        if story is not None:
            self.load_story(story)

    def _clear_state(self) -> None:
        self.phase = PHASE_PROLOGUE
        self.route_id: Optional[str] = None
        self.ending_id: Optional[str] = None
        self.scene_index = 0
        self.slide_index = 0
        self.points.clear()
        self.choices_made = 0
        self.endings_unlocked: List[str] = []
        self.started_at = self._clock()

    # ---------- Lifecycle ----------
    def load_story(self, story: GameStory) -> None:
        self.story = story
        self._clear_state()
        navigation.enter_scenes(self)
        LOGGER.info("Loaded story '%s'.", story.title or "untitled")

    def reset(self) -> None:
        if self.story is None:
            LOGGER.debug("reset ignored; no story loaded.")
            return
        self._clear_state()
        navigation.enter_scenes(self)
        LOGGER.info("Session reset.")

    @property
    def is_complete(self) -> bool:
        return self.phase == navigation.PHASE_COMPLETE

    def elapsed_seconds(self) -> float:
        return max((self._clock() - self.started_at).total_seconds(), 0.0)

    # ---------- Requirements & points ----------
    def check(self, requirements: Optional[PointRequirements]) -> PointCheck:
        return check_requirements(requirements, self.points, self.route_id)

    def is_available(self, requirements: Optional[PointRequirements]) -> bool:
        return requirements is None or self.check(requirements).satisfied

    def add_universal_points(self, points: Mapping[str, int]) -> None:
        self.points.add_universal_points(points)

    def add_route_points(self, points: Mapping[str, int]) -> None:
        self.points.add_route_points(self.route_id, points)

    def add_prologue_points(self, points: Mapping[str, int]) -> None:
        self.points.add_prologue_points(points)

    # ---------- Navigation ----------
    def current_scene(self) -> Optional[Scene]:
        return navigation.current_scene(self)

    def current_slide(self) -> Optional[Slide]:
        return navigation.current_slide(self)

    def filtered_choices(self) -> List[Choice]:
        return navigation.filtered_choices(self)

    def advance_slide(self) -> None:
        navigation.advance_slide(self)

    def advance_to_next_scene(self) -> None:
        navigation.advance_to_next_scene(self)

    def make_choice(self, index: int) -> None:
        choices = self.filtered_choices()
        if not 0 <= index < len(choices):
            LOGGER.debug("Choice %d ignored; %d choices available.", index, len(choices))
            return
        choice = choices[index]
        self.choices_made += 1

        if choice.universal_points:
            self.add_universal_points(choice.universal_points)
        if choice.route_points and self.phase == PHASE_ROUTE:
            self.add_route_points(choice.route_points)
        if choice.prologue_points and self.phase == PHASE_PROLOGUE:
            self.add_prologue_points(choice.prologue_points)

        if choice.route_id:
            self.select_route(choice.route_id)
            return
        self.advance_slide()

    # ---------- Routes & endings ----------
    def select_route(self, route_id: str) -> bool:
        return routing.select_route(self, route_id)

    def select_ending(self, ending_id: str) -> bool:
        return routing.select_ending(self, ending_id)

    def find_best_ending(self, endings: Sequence[RouteEnding]) -> Optional[RouteEnding]:
        return routing.find_best_ending(self, endings)

    def determine_ending(self) -> None:
        routing.determine_ending(self)

    def unlock_ending(self, ending_id: Optional[str]) -> None:
        if ending_id and ending_id not in self.endings_unlocked:
            self.endings_unlocked.append(ending_id)

    # ---------- Debug ----------
    def debug_snapshot(self) -> DebugInfo:
        scenes = navigation.active_scenes(self)
        return DebugInfo(
            phase=self.phase,
            route=self.route_id,
            ending=self.ending_id,
            scene_index=self.scene_index,
            slide_index=self.slide_index,
            total_scenes=len(scenes) if scenes is not None else 0,
            points=self.points.snapshot(self.route_id),
            choices_made=self.choices_made,
            endings_unlocked=tuple(self.endings_unlocked),
        )
