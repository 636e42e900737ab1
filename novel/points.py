"""Point accumulation across the universal, prologue and per-route namespaces."""

from __future__ import annotations

import logging
from typing import Dict, Mapping, MutableMapping, Optional

LOGGER = logging.getLogger(__name__)

PointMap = Dict[str, int]


def _add_into(target: MutableMapping[str, int], deltas: Mapping[str, int]) -> None:
    for key, delta in deltas.items():
        target[key] = target.get(key, 0) + int(delta)


class PointLedger:
    """Accumulated points for one playthrough.

    Route points are partitioned by route id, so ``bond`` earned on one route
    never counts toward ``bond`` on another. Missing keys read as zero and
    values are never clamped; authored negative deltas can push them below.
    """

    def __init__(self) -> None:
        self.universal: PointMap = {}
        self.prologue: PointMap = {}
        self.routes: Dict[str, PointMap] = {}

    def clear(self) -> None:
        self.universal = {}
        self.prologue = {}
        self.routes = {}

    def add_universal_points(self, points: Mapping[str, int]) -> None:
        _add_into(self.universal, points)

    def add_prologue_points(self, points: Mapping[str, int]) -> None:
        _add_into(self.prologue, points)

    def add_route_points(self, route_id: Optional[str], points: Mapping[str, int]) -> None:
        if not route_id:
            LOGGER.debug("Route points %s ignored; no route is active.", dict(points))
            return
        _add_into(self.routes.setdefault(route_id, {}), points)

    def clear_route(self, route_id: str) -> None:
        self.routes.pop(route_id, None)

    def route_points(self, route_id: Optional[str]) -> PointMap:
        """Return a copy of the points earned on ``route_id`` (empty if none)."""
        if not route_id:
            return {}
        return dict(self.routes.get(route_id, {}))

    def value(self, namespace: str, key: str, route_id: Optional[str] = None) -> int:
        if namespace == "universal":
            return self.universal.get(key, 0)
        if namespace == "prologue":
            return self.prologue.get(key, 0)
        if namespace == "route":
            if not route_id:
                return 0
            return self.routes.get(route_id, {}).get(key, 0)
        raise KeyError(f"Unknown point namespace '{namespace}'.")

    def snapshot(self, route_id: Optional[str]) -> Dict[str, PointMap]:
        return {
            "universal": dict(self.universal),
            "route": self.route_points(route_id),
            "prologue": dict(self.prologue),
        }
