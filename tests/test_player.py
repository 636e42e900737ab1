import json
from pathlib import Path

from novel.player import (
    Player,
    apply_overrides,
    audio_captions,
    compute_line_width,
    main,
    parse_args,
    summarize_requirements,
)
from novel.session import Session
from novel.settings import Settings, load_settings
from novel.story import GameStory, PointRequirements, Slide


STORY = {
    "title": "Tiny Tale",
    "prologue": [
        {
            "id": "intro",
            "title": "Opening",
            "slides": [
                {
                    "id": "hello",
                    "speaker": "Guide",
                    "text": "Welcome, traveler.",
                    "audio": {
                        "bgm": {"src": "audio/theme.ogg"},
                        "sfx": [{"src": "audio/bell.ogg", "trigger": "onClick"}],
                    },
                },
                {
                    "id": "pick",
                    "text": "Where to?",
                    "choices": [
                        {"text": "Forest", "routeId": "forest"},
                        {"text": "Castle", "routeId": "castle"},
                    ],
                },
            ],
        }
    ],
    "routes": {
        "forest": {
            "id": "forest",
            "scenes": [{"id": "trees", "title": "Woods", "slides": [{"id": "walk", "text": "Leaves."}]}],
            "endings": [
                {
                    "id": "home",
                    "name": "Home Again",
                    "isSecretEnding": True,
                    "achievementName": "Homebody",
                    "scenes": [{"id": "end", "slides": [{"id": "fin", "text": "The end."}]}],
                }
            ],
        },
        "castle": {
            "id": "castle",
            "requires": {"universal": {"courage": 3}},
            "scenes": [{"id": "gate", "slides": [{"id": "door", "text": "A door."}]}],
        },
    },
}


def build_player(inputs: list, settings: Settings | None = None, story: dict = STORY, **kwargs):
    output: list = []
    feed = iter(inputs)
    player = Player(
        Session(GameStory.from_dict(story)),
        settings or Settings(text_speed=0),
        input_func=lambda prompt: next(feed),
        print_func=lambda *args, **_: output.append(" ".join(str(arg) for arg in args)),
        sleep=lambda _: None,
        **kwargs,
    )
    return player, output


def test_playthrough_to_completion() -> None:
    player, output = build_player(["", "1", "", "", "n"])
    assert player.run() == 0
    text = "\n".join(output)
    assert "Guide:" in text
    assert "  1. Forest" in text
    assert "Choices made: 1" in text
    assert "Ending unlocked: Home Again [Secret: Homebody]" in text
    assert player.session.is_complete


def test_play_again_resets_session() -> None:
    player, output = build_player(["", "1", "", "", "y", "q"])
    assert player.run() == 0
    assert player.session.phase == "prologue"
    assert player.session.choices_made == 0


def test_closed_route_reports_and_stays() -> None:
    player, output = build_player(["", "2", "q"])
    assert player.run() == 0
    assert "[!] That path is closed for now." in output
    assert player.session.phase == "prologue"


def test_stalled_prologue_exits_with_error() -> None:
    story = {"prologue": [{"id": "intro", "slides": [{"id": "only", "text": "Alone."}]}]}
    player, output = build_player([""], story=story)
    assert player.run() == 1
    assert "[!] The story cannot continue from here." in output


def test_stalled_prologue_through_choice_exits_with_error() -> None:
    story = {
        "prologue": [
            {"id": "intro", "slides": [{"id": "only", "text": "Alone.", "choices": [{"text": "Stay"}]}]}
        ]
    }
    player, output = build_player(["1", "1", "q"], story=story)
    assert player.run() == 1
    assert "[!] The story cannot continue from here." in output
    assert "[!] That path is closed for now." not in output
    assert player.session.choices_made == 1


def test_invalid_input_prompts_again() -> None:
    player, output = build_player(["", "x", "7", "q"])
    assert player.run() == 0
    assert "Pick a choice number or D/P/R/Q." in output
    assert "Pick a valid choice number." in output


def test_debug_and_points_commands() -> None:
    player, output = build_player(["d", "p", "q"])
    player.run()
    assert any(line.startswith("[Debug] phase=prologue route=- ending=-") for line in output)
    assert "Universal: -" in output


def test_requirements_shown_in_debug_mode() -> None:
    player, output = build_player(["", "q"], debug=True)
    player.run()
    assert "  1. Forest (Target: forest | Req: None)" in output


def test_audio_captions_when_enabled() -> None:
    settings = Settings(text_speed=0, caption_audio_cues=True)
    player, output = build_player(["", "q"], settings=settings)
    player.run()
    assert "[Music] audio/theme.ogg" in output
    assert "[Sound] audio/bell.ogg" in output


def test_audio_captions_by_trigger() -> None:
    slide = Slide.from_dict(
        {"audio": {"stopPreviousBGM": True, "sfx": [{"src": "a.ogg"}, {"src": "b.ogg", "trigger": "onChoice"}]}}
    )
    assert audio_captions(slide, "onLoad") == ["[Music] (fades out)", "[Sound] a.ogg"]
    assert audio_captions(slide, "onChoice") == ["[Sound] b.ogg"]
    assert audio_captions(Slide(), "onLoad") == []


def test_summarize_requirements() -> None:
    requirements = PointRequirements.from_dict(
        {"universal": {"wisdom": 2, "courage": 1}, "prologue": {"leadership": 1}}
    )
    assert summarize_requirements(requirements) == "Universal courage>=1, Universal wisdom>=2, Prologue leadership>=1"
    assert summarize_requirements(None) == "None"


def test_line_width_follows_ui_scale() -> None:
    assert compute_line_width(Settings(ui_scale=1.0)) == 80
    assert compute_line_width(Settings(ui_scale=0.5)) == 50
    assert compute_line_width(Settings(ui_scale=2.0)) == 120


def test_main_reports_invalid_story(tmp_path: Path, capsys) -> None:
    path = tmp_path / "story.json"
    path.write_text(json.dumps({"prologue": "nope"}))
    assert main([str(path), "--settings", str(tmp_path / "settings.json")]) == 1
    assert "Could not load story" in capsys.readouterr().out


def test_command_line_overrides_are_saved(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps({"ui_scale": 1.5, "text_speed": 2}))
    story_path = tmp_path / "story.json"
    story_path.write_text(json.dumps({"prologue": "nope"}))
    main([str(story_path), "--settings", str(settings_path), "--text-speed", "0", "--save-settings"])
    saved = load_settings(settings_path)
    assert saved.text_speed == 0.0
    assert saved.ui_scale == 1.5


def test_overrides_leave_unset_flags_alone() -> None:
    args = parse_args(["--captions"])
    settings = apply_overrides(Settings(text_speed=3.0, high_contrast=True), args)
    assert settings.caption_audio_cues is True
    assert settings.high_contrast is True
    assert settings.text_speed == 3.0
