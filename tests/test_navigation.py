import logging

from novel.session import Session
from novel.story import GameStory


def build_session(story: dict) -> Session:
    return Session(GameStory.from_dict(story))


def slides(*ids: str) -> list:
    return [{"id": slide_id, "text": slide_id} for slide_id in ids]


def test_single_slide_prologue_stalls_in_place(caplog) -> None:
    session = build_session({"prologue": [{"id": "only", "slides": slides("a")}]})
    with caplog.at_level(logging.WARNING):
        session.advance_slide()
    assert session.phase == "prologue"
    assert (session.scene_index, session.slide_index) == (0, 0)
    assert session.current_slide().id == "a"
    assert "Prologue exhausted" in caplog.text


def test_advance_skips_gated_slides() -> None:
    session = build_session(
        {
            "prologue": [
                {
                    "id": "intro",
                    "slides": [
                        {"id": "a"},
                        {"id": "locked", "requires": {"universal": {"courage": 1}}},
                        {"id": "b"},
                    ],
                }
            ]
        }
    )
    session.advance_slide()
    assert session.current_slide().id == "b"
    assert session.slide_index == 2


def test_gated_slide_becomes_visible_once_points_are_met() -> None:
    session = build_session(
        {
            "prologue": [
                {
                    "id": "intro",
                    "slides": [
                        {"id": "a"},
                        {"id": "brave", "requires": {"universal": {"courage": 1}}},
                    ],
                }
            ]
        }
    )
    session.add_universal_points({"courage": 1})
    session.advance_slide()
    assert session.current_slide().id == "brave"


def test_gated_and_empty_scenes_are_skipped() -> None:
    session = build_session(
        {
            "prologue": [
                {"id": "first", "slides": slides("a")},
                {"id": "gated", "requires": {"prologue": {"hero": 1}}, "slides": slides("b")},
                {"id": "empty", "slides": []},
                {"id": "all_gated", "slides": [{"id": "c", "requires": {"universal": {"x": 1}}}]},
                {"id": "last", "slides": slides("d")},
            ]
        }
    )
    session.advance_slide()
    assert session.current_scene().id == "last"
    assert session.scene_index == 4
    assert session.current_slide().id == "d"


def test_load_starts_at_first_reachable_position() -> None:
    session = build_session(
        {
            "prologue": [
                {"id": "gated", "requires": {"universal": {"x": 1}}, "slides": slides("a")},
                {
                    "id": "second",
                    "slides": [{"id": "hidden", "requires": {"universal": {"x": 1}}}, {"id": "b"}],
                },
            ]
        }
    )
    assert (session.scene_index, session.slide_index) == (1, 1)
    assert session.current_slide().id == "b"


def test_route_transition_fires_once_when_remaining_slides_are_gated(monkeypatch) -> None:
    session = build_session(
        {
            "prologue": [
                {"id": "intro", "slides": [{"id": "pick", "choices": [{"text": "Go", "routeId": "r"}]}]}
            ],
            "routes": {
                "r": {
                    "id": "r",
                    "scenes": [
                        {
                            "id": "s",
                            "slides": [
                                {"id": "a"},
                                {"id": "x", "requires": {"route": {"bond": 1}}},
                                {"id": "y", "requires": {"route": {"bond": 1}}},
                            ],
                        }
                    ],
                    "endings": [{"id": "e", "scenes": [{"id": "end", "slides": slides("fin")}]}],
                }
            },
        }
    )
    session.make_choice(0)
    calls = []
    original = session.determine_ending
    monkeypatch.setattr(session, "determine_ending", lambda: (calls.append(1), original()))
    session.advance_slide()
    assert len(calls) == 1
    assert session.phase == "ending"
    assert session.current_slide().id == "fin"


def test_current_slide_is_none_outside_scene_bounds() -> None:
    session = build_session({"prologue": [{"id": "intro", "slides": slides("a")}]})
    session.scene_index = 5
    assert session.current_scene() is None
    assert session.current_slide() is None
    assert session.filtered_choices() == []
    session.advance_slide()
    assert session.scene_index == 5


def test_advance_without_story_is_a_no_op() -> None:
    session = Session()
    session.advance_slide()
    session.advance_to_next_scene()
    assert session.phase == "prologue"
    assert session.current_slide() is None


def test_advance_to_next_scene_skips_rest_of_scene() -> None:
    session = build_session(
        {"prologue": [{"id": "one", "slides": slides("a", "b")}, {"id": "two", "slides": slides("c")}]}
    )
    session.advance_to_next_scene()
    assert session.current_scene().id == "two"
    assert session.slide_index == 0
