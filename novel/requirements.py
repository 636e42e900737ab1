"""Requirement evaluation: the single gating primitive for all story content."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .points import PointLedger
from .story import PointRequirements


def _empty_missing() -> Dict[str, Dict[str, int]]:
    return {"universal": {}, "route": {}, "prologue": {}}


@dataclass(frozen=True)
class PointCheck:
    """Outcome of comparing accumulated points against a requirement set."""

    satisfied: bool
    missing: Dict[str, Dict[str, int]] = field(default_factory=_empty_missing)
    total_deficit: int = 0


def check_requirements(
    requirements: Optional[PointRequirements],
    ledger: PointLedger,
    route_id: Optional[str],
) -> PointCheck:
    """Compare ``requirements`` against ``ledger`` for the active ``route_id``.

    Every key whose current value is below its threshold is reported with its
    exact deficit. Route thresholds cannot be met while no route is active;
    each one is reported with its full threshold as the deficit.
    """
    missing = _empty_missing()
    if requirements is None:
        return PointCheck(True, missing, 0)

    total = 0
    for namespace, thresholds in requirements.namespaces():
        for key, needed in thresholds.items():
            if namespace == "route" and not route_id:
                missing["route"][key] = needed
                total += needed
                continue
            current = ledger.value(namespace, key, route_id)
            if current < needed:
                deficit = needed - current
                missing[namespace][key] = deficit
                total += deficit

    satisfied = not any(missing.values())
    return PointCheck(satisfied, missing, total)


def is_satisfied(
    requirements: Optional[PointRequirements],
    ledger: PointLedger,
    route_id: Optional[str],
) -> bool:
    return check_requirements(requirements, ledger, route_id).satisfied
