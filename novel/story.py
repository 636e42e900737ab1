"""Immutable content model for a branching visual novel.

A story is a prologue (an ordered list of scenes) followed by named routes.
Every route has its own scenes and a list of endings. Slides, choices, scenes,
routes and endings may declare ``requires`` thresholds over the three point
namespaces; see ``novel.requirements``.

The ``from_dict`` constructors accept the camelCase JSON layout used by story
files and assume the payload already passed ``novel.schema.validate_story``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .story_schema import POINT_NAMESPACES

DEFAULT_SFX_TRIGGER = "onLoad"


def _point_map(raw: Any) -> Dict[str, int]:
    if not isinstance(raw, Mapping):
        return {}
    return {str(key): int(value) for key, value in raw.items()}


def _optional_int(raw: Any) -> Optional[int]:
    return int(raw) if raw is not None else None


def _read_only(instance: Any, *names: str) -> None:
    for name in names:
        value = getattr(instance, name)
        if not isinstance(value, MappingProxyType):
            object.__setattr__(instance, name, MappingProxyType(dict(value)))


@dataclass(frozen=True)
class PointRequirements:
    """Minimum thresholds per namespace; an absent key imposes nothing."""

    universal: Mapping[str, int] = field(default_factory=dict)
    route: Mapping[str, int] = field(default_factory=dict)
    prologue: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _read_only(self, *POINT_NAMESPACES)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Optional["PointRequirements"]:
        if not isinstance(data, Mapping):
            return None
        return cls(
            universal=_point_map(data.get("universal")),
            route=_point_map(data.get("route")),
            prologue=_point_map(data.get("prologue")),
        )

    def namespaces(self) -> Tuple[Tuple[str, Mapping[str, int]], ...]:
        return tuple((name, getattr(self, name)) for name in POINT_NAMESPACES)

    def is_empty(self) -> bool:
        return not (self.universal or self.route or self.prologue)


@dataclass(frozen=True)
class BackgroundMusic:
    """Looping track; fades are durations in milliseconds."""

    src: str
    volume: float = 1.0
    loop: bool = True
    fade_in: Optional[int] = None
    fade_out: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BackgroundMusic":
        return cls(
            src=str(data["src"]),
            volume=float(data.get("volume", 1.0)),
            loop=bool(data.get("loop", True)),
            fade_in=_optional_int(data.get("fadeIn")),
            fade_out=_optional_int(data.get("fadeOut")),
        )


@dataclass(frozen=True)
class SoundEffect:
    src: str
    volume: float = 1.0
    trigger: str = DEFAULT_SFX_TRIGGER

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SoundEffect":
        return cls(
            src=str(data["src"]),
            volume=float(data.get("volume", 1.0)),
            trigger=data.get("trigger") or DEFAULT_SFX_TRIGGER,
        )


@dataclass(frozen=True)
class SlideAudio:
    """Audio cues an external audio layer reacts to when a slide appears."""

    bgm: Optional[BackgroundMusic] = None
    stop_previous_bgm: bool = False
    sfx: Tuple[SoundEffect, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Optional["SlideAudio"]:
        if not isinstance(data, Mapping):
            return None
        bgm = data.get("bgm")
        return cls(
            bgm=BackgroundMusic.from_dict(bgm) if isinstance(bgm, Mapping) else None,
            stop_previous_bgm=bool(data.get("stopPreviousBGM", False)),
            sfx=tuple(SoundEffect.from_dict(entry) for entry in data.get("sfx") or ()),
        )

    def effects_for(self, trigger: str) -> Tuple[SoundEffect, ...]:
        return tuple(effect for effect in self.sfx if effect.trigger == trigger)


@dataclass(frozen=True)
class Choice:
    text: str
    route_id: Optional[str] = None
    universal_points: Mapping[str, int] = field(default_factory=dict)
    route_points: Mapping[str, int] = field(default_factory=dict)
    prologue_points: Mapping[str, int] = field(default_factory=dict)
    requires: Optional[PointRequirements] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        _read_only(self, "universal_points", "route_points", "prologue_points")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Choice":
        return cls(
            text=str(data.get("text", "")),
            route_id=data.get("routeId"),
            universal_points=_point_map(data.get("universalPoints")),
            route_points=_point_map(data.get("routePoints")),
            prologue_points=_point_map(data.get("prologuePoints")),
            requires=PointRequirements.from_dict(data.get("requires")),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class Slide:
    id: Optional[str] = None
    speaker: Optional[str] = None
    text: str = ""
    choices: Tuple[Choice, ...] = ()
    requires: Optional[PointRequirements] = None
    background: Any = None
    sprites: Any = None
    audio: Optional[SlideAudio] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Slide":
        return cls(
            id=data.get("id"),
            speaker=data.get("speaker"),
            text=data.get("text") or "",
            choices=tuple(Choice.from_dict(entry) for entry in data.get("choices") or ()),
            requires=PointRequirements.from_dict(data.get("requires")),
            background=data.get("background"),
            sprites=data.get("sprites"),
            audio=SlideAudio.from_dict(data.get("audio")),
        )


@dataclass(frozen=True)
class Scene:
    id: str
    title: str = ""
    slides: Tuple[Slide, ...] = ()
    requires: Optional[PointRequirements] = None
    characters: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Scene":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            slides=tuple(Slide.from_dict(entry) for entry in data.get("slides") or ()),
            requires=PointRequirements.from_dict(data.get("requires")),
            characters=tuple(data.get("characters") or ()),
        )


def _scenes(raw: Any) -> Tuple[Scene, ...]:
    return tuple(Scene.from_dict(entry) for entry in raw or ())


@dataclass(frozen=True)
class RouteEnding:
    id: str
    name: str = ""
    scenes: Tuple[Scene, ...] = ()
    requires: Optional[PointRequirements] = None
    priority: int = 0
    description: Optional[str] = None
    is_secret: bool = False
    achievement_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RouteEnding":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name") or "",
            scenes=_scenes(data.get("scenes")),
            requires=PointRequirements.from_dict(data.get("requires")),
            priority=int(data.get("priority") or 0),
            description=data.get("description"),
            is_secret=bool(data.get("isSecretEnding", False)),
            achievement_name=data.get("achievementName"),
        )


@dataclass(frozen=True)
class Route:
    id: str
    name: str = ""
    scenes: Tuple[Scene, ...] = ()
    endings: Tuple[RouteEnding, ...] = ()
    requires: Optional[PointRequirements] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Route":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name") or "",
            scenes=_scenes(data.get("scenes")),
            endings=tuple(RouteEnding.from_dict(entry) for entry in data.get("endings") or ()),
            requires=PointRequirements.from_dict(data.get("requires")),
            description=data.get("description"),
        )

    def find_ending(self, ending_id: str) -> Optional[RouteEnding]:
        for ending in self.endings:
            if ending.id == ending_id:
                return ending
        return None


@dataclass(frozen=True)
class GameStory:
    prologue: Tuple[Scene, ...] = ()
    routes: Mapping[str, Route] = field(default_factory=dict)
    title: str = ""
    description: Optional[str] = None
    point_labels: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "point_labels",
            MappingProxyType({key: MappingProxyType(dict(value)) for key, value in self.point_labels.items()}),
        )
        _read_only(self, "routes")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameStory":
        routes: Dict[str, Route] = {}
        for route_id, payload in (data.get("routes") or {}).items():
            route = Route.from_dict({**payload, "id": route_id})
            routes[route_id] = route
        labels: Dict[str, Dict[str, str]] = {}
        raw_labels = data.get("pointTypes")
        if isinstance(raw_labels, Mapping):
            for namespace in POINT_NAMESPACES:
                entries = raw_labels.get(namespace)
                if isinstance(entries, Mapping):
                    labels[namespace] = {str(k): str(v) for k, v in entries.items()}
        return cls(
            prologue=_scenes(data.get("prologue")),
            routes=routes,
            title=data.get("title") or "",
            description=data.get("description"),
            point_labels=labels,
        )

    def point_label(self, namespace: str, key: str) -> str:
        return self.point_labels.get(namespace, {}).get(key) or key.replace("_", " ").title()
