"""Route entry and ending resolution."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from .navigation import PHASE_COMPLETE, PHASE_ENDING, PHASE_ROUTE, active_route, enter_scenes
from .story import RouteEnding

if TYPE_CHECKING:
    from .session import Session

LOGGER = logging.getLogger(__name__)


def select_route(session: "Session", route_id: str) -> bool:
    """Enter ``route_id`` if it exists and its requirements are met."""
    story = session.story
    if story is None:
        LOGGER.debug("select_route('%s') ignored; no story loaded.", route_id)
        return False
    route = story.routes.get(route_id)
    if route is None:
        LOGGER.error("Route '%s' not found.", route_id)
        return False
    check = session.check(route.requires)
    if not check.satisfied:
        LOGGER.error("Route '%s' requirements not met: %s", route_id, check.missing)
        return False

    session.points.clear_route(route_id)
    session.phase = PHASE_ROUTE
    session.route_id = route_id
    session.ending_id = None
    enter_scenes(session)
    LOGGER.info("Entered route '%s' (%s).", route_id, route.name or route_id)
    return True


def find_best_ending(session: "Session", endings: Sequence[RouteEnding]) -> Optional[RouteEnding]:
    """Pick the highest-priority eligible ending, first-authored on ties.

    When nothing qualifies the first authored ending is returned so a route
    always has somewhere to finish.
    """
    eligible = [ending for ending in endings if session.is_available(ending.requires)]
    if not eligible:
        if endings:
            LOGGER.warning(
                "No ending requirements met; falling back to first ending '%s'.", endings[0].id
            )
            return endings[0]
        return None
    # sorted() is stable, so equal priorities keep authoring order.
    return sorted(eligible, key=lambda ending: ending.priority, reverse=True)[0]


def determine_ending(session: "Session") -> None:
    route = active_route(session)
    if route is None:
        LOGGER.debug("determine_ending ignored; no active route.")
        return
    ending = find_best_ending(session, route.endings)
    if ending is None:
        LOGGER.warning("Route '%s' defines no endings; completing story.", route.id)
        session.phase = PHASE_COMPLETE
        return
    select_ending(session, ending.id)


def select_ending(session: "Session", ending_id: str) -> bool:
    route = active_route(session)
    if route is None:
        LOGGER.debug("select_ending('%s') ignored; no active route.", ending_id)
        return False
    ending = route.find_ending(ending_id)
    if ending is None:
        LOGGER.error("Ending '%s' not found in route '%s'.", ending_id, route.id)
        return False

    session.phase = PHASE_ENDING
    session.ending_id = ending_id
    enter_scenes(session)
    LOGGER.info("Entered ending '%s' (%s).", ending_id, ending.name or ending_id)
    return True
