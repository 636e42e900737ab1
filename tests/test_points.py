import pytest

from novel.points import PointLedger


def test_deltas_accumulate_and_can_go_negative() -> None:
    ledger = PointLedger()
    ledger.add_universal_points({"kindness": 2})
    ledger.add_universal_points({"kindness": -3, "magic": 1})
    assert ledger.universal == {"kindness": -1, "magic": 1}


def test_route_points_are_partitioned_by_route() -> None:
    ledger = PointLedger()
    ledger.add_route_points("alice", {"bond": 2})
    ledger.add_route_points("bob", {"bond": 5})
    assert ledger.value("route", "bond", "alice") == 2
    assert ledger.value("route", "bond", "bob") == 5
    assert ledger.route_points("unity") == {}


def test_route_points_without_route_are_ignored() -> None:
    ledger = PointLedger()
    ledger.add_route_points(None, {"bond": 2})
    assert ledger.routes == {}
    assert ledger.value("route", "bond", None) == 0


def test_route_points_returns_a_copy() -> None:
    ledger = PointLedger()
    ledger.add_route_points("alice", {"bond": 1})
    points = ledger.route_points("alice")
    points["bond"] = 99
    assert ledger.value("route", "bond", "alice") == 1


def test_clear_route_and_clear() -> None:
    ledger = PointLedger()
    ledger.add_universal_points({"courage": 1})
    ledger.add_prologue_points({"leadership": 1})
    ledger.add_route_points("alice", {"bond": 1})
    ledger.clear_route("alice")
    assert ledger.route_points("alice") == {}
    assert ledger.universal == {"courage": 1}

    ledger.clear()
    assert ledger.snapshot("alice") == {"universal": {}, "route": {}, "prologue": {}}


def test_snapshot_shows_active_route_only() -> None:
    ledger = PointLedger()
    ledger.add_route_points("alice", {"bond": 1})
    ledger.add_route_points("bob", {"trust": 2})
    assert ledger.snapshot("bob")["route"] == {"trust": 2}


def test_unknown_namespace_raises() -> None:
    with pytest.raises(KeyError):
        PointLedger().value("secret", "bond")
