#!/usr/bin/env python3
"""
Visual Novel Terminal Player
- Renders the current slide, lists only the choices whose requirements pass.
- Enter advances; numbers pick a choice.
- D shows the debug snapshot, P the point totals, R restarts, Q quits.
Usage: novel-play [story.json] [--debug] [--settings settings.json] [--text-speed N] [--save-settings]
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

if __package__ in (None, ""):
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
    from novel.loader import DEFAULT_STORY_PATH, load_story_file
    from novel.session import Session
    from novel.settings import SETTINGS_PATH, Settings, load_settings, save_settings
    from novel.story import Choice, PointRequirements, Slide
else:
    from .loader import DEFAULT_STORY_PATH, load_story_file
    from .session import Session
    from .settings import SETTINGS_PATH, Settings, load_settings, save_settings
    from .story import Choice, PointRequirements, Slide

LOGGER = logging.getLogger(__name__)

BASE_LINE_WIDTH = 80
MIN_LINE_WIDTH = 50
MAX_LINE_WIDTH = 120
BASE_TEXT_DELAY = 0.02

InputFunc = Callable[[str], str]
PrintFunc = Callable[..., None]
Position = Tuple[str, Optional[str], Optional[str], int, int]


def compute_line_width(settings: Settings) -> int:
    try:
        scale = float(getattr(settings, "ui_scale", 1.0))
    except (TypeError, ValueError):
        scale = 1.0
    width = int(round(BASE_LINE_WIDTH * scale))
    return max(MIN_LINE_WIDTH, min(MAX_LINE_WIDTH, width))


def compute_text_delay(settings: Settings) -> float:
    try:
        speed = float(getattr(settings, "text_speed", 1.0))
    except (TypeError, ValueError):
        speed = 1.0
    if speed <= 0:
        return 0.0
    return BASE_TEXT_DELAY / max(speed, 0.1)


def separator(width: int, settings: Settings, *, primary: bool) -> str:
    if getattr(settings, "high_contrast", False):
        char = "#" if primary else "="
    else:
        char = "=" if primary else "-"
    return char * width


def format_heading(text: str, settings: Settings) -> str:
    return text.upper() if getattr(settings, "high_contrast", False) else text


def summarize_requirements(requirements: Optional[PointRequirements]) -> str:
    if requirements is None or requirements.is_empty():
        return "None"
    parts = []
    for namespace, thresholds in requirements.namespaces():
        for key, needed in sorted(thresholds.items()):
            parts.append(f"{namespace.title()} {key}>={needed}")
    return ", ".join(parts)


def audio_captions(slide: Slide, trigger: str) -> List[str]:
    audio = slide.audio
    if audio is None:
        return []
    captions = []
    if trigger == "onLoad":
        if audio.bgm is not None:
            captions.append(f"[Music] {audio.bgm.src}")
        elif audio.stop_previous_bgm:
            captions.append("[Music] (fades out)")
    for effect in audio.effects_for(trigger):
        captions.append(f"[Sound] {effect.src}")
    return captions


class Player:
    """Terminal front end that reads session state and calls session operations."""

    def __init__(
        self,
        session: Session,
        settings: Optional[Settings] = None,
        *,
        debug: bool = False,
        input_func: InputFunc = input,
        print_func: PrintFunc = print,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.session = session
        self.settings = (settings or Settings()).copy()
        self.debug = debug
        self.input_func = input_func
        self.print_func = print_func
        self.sleep = sleep
        self.line_width = compute_line_width(self.settings)
        self._last_position: Optional[Position] = None

    def position(self) -> Position:
        s = self.session
        return (s.phase, s.route_id, s.ending_id, s.scene_index, s.slide_index)

    def emit_line(self, text: str, *, allow_delay: bool = True) -> None:
        delay = compute_text_delay(self.settings) if allow_delay else 0.0
        if delay <= 0:
            self.print_func(text)
            return
        for char in text:
            self.print_func(char, end="", flush=True)
            self.sleep(delay)
        self.print_func("")

    def emit_captions(self, slide: Slide, trigger: str) -> None:
        if not self.settings.caption_audio_cues:
            return
        for caption in audio_captions(slide, trigger):
            self.emit_line(caption, allow_delay=False)

    def render_slide(self, slide: Slide) -> List[Choice]:
        width = self.line_width
        settings = self.settings
        position = self.position()
        if position != self._last_position:
            self._last_position = position
            scene = self.session.current_scene()
            self.print_func("\n" + separator(width, settings, primary=True))
            heading = scene.title if scene and scene.title else self.session.story.title
            self.print_func(format_heading(heading or "", settings))
            self.print_func(separator(width, settings, primary=False))
            self.emit_captions(slide, "onLoad")
            if slide.speaker:
                self.emit_line(f"{slide.speaker}:", allow_delay=False)
            for paragraph in slide.text.split("\n"):
                if paragraph.strip():
                    for line in textwrap.wrap(paragraph, width=width):
                        self.emit_line(line)
                else:
                    self.print_func("")

        visible = self.session.filtered_choices()
        show_requirements = self.debug or settings.show_requirements
        for idx, choice in enumerate(visible, start=1):
            text = choice.text
            if choice.description:
                text = f"{text} ({choice.description})"
            if show_requirements:
                target = choice.route_id or "next"
                text = f"{text} (Target: {target} | Req: {summarize_requirements(choice.requires)})"
            if settings.high_contrast:
                self.print_func(f"  [{idx}] {text.upper()}")
            else:
                self.print_func(f"  {idx}. {text}")
        return visible

    def render_points(self) -> None:
        story = self.session.story
        snapshot = self.session.debug_snapshot()
        for namespace in ("universal", "route", "prologue"):
            values = snapshot.points.get(namespace, {})
            if values:
                rendered = ", ".join(
                    f"{story.point_label(namespace, key)} {value}"
                    for key, value in sorted(values.items())
                )
            else:
                rendered = "-"
            self.print_func(f"{namespace.title()}: {rendered}")

    def render_debug(self) -> None:
        info = self.session.debug_snapshot()
        self.print_func(
            f"[Debug] phase={info.phase} route={info.route or '-'} ending={info.ending or '-'} "
            f"scene={info.scene_index + 1}/{info.total_scenes} slide={info.slide_index} "
            f"choices={info.choices_made}"
        )
        self.render_points()

    def render_completion(self) -> None:
        session = self.session
        story = session.story
        width = self.line_width
        self.print_func("\n" + separator(width, self.settings, primary=True))
        self.print_func(format_heading("Story Complete!", self.settings))
        if story.title:
            self.print_func(f'Thank you for playing "{story.title}"!')
        self.print_func(f"Choices made: {session.choices_made}")
        route = story.routes.get(session.route_id or "")
        for ending_id in session.endings_unlocked:
            ending = route.find_ending(ending_id) if route else None
            label = ending.name if ending and ending.name else ending_id
            if ending and ending.is_secret:
                label = f"{label} [Secret: {ending.achievement_name or 'Hidden'}]"
            self.print_func(f"Ending unlocked: {label}")
        self.render_points()
        minutes, seconds = divmod(int(session.elapsed_seconds()), 60)
        self.print_func(f"Time played: {minutes}m {seconds:02d}s")
        self.print_func(separator(width, self.settings, primary=False))

    def run(self) -> int:
        session = self.session
        if session.story is None:
            self.print_func("[!] No story loaded.")
            return 1
        if session.story.title:
            self.print_func(f"\n=== {session.story.title} ===")

        while True:
            if session.is_complete:
                self.render_completion()
                again = self.input_func("Play again? (y/n): ").strip().lower()
                if again in {"y", "yes"}:
                    session.reset()
                    self._last_position = None
                    continue
                return 0

            slide = session.current_slide()
            if slide is None:
                self.print_func("[!] The story cannot continue from here.")
                return 1
            visible = self.render_slide(slide)

            raw = self.input_func("> ").strip()
            command = raw.lower()
            if command == "q":
                return 0
            if command == "d":
                self.render_debug()
                continue
            if command == "p":
                self.render_points()
                continue
            if command == "r":
                session.reset()
                self._last_position = None
                continue

            if visible:
                if not command.isdigit():
                    self.print_func("Pick a choice number or D/P/R/Q.")
                    continue
                idx = int(command)
                if not 1 <= idx <= len(visible):
                    self.print_func("Pick a valid choice number.")
                    continue
                choice = visible[idx - 1]
                self.emit_captions(slide, "onChoice")
                before = self.position()
                session.make_choice(idx - 1)
                if self.position() == before and not session.is_complete:
                    if choice.route_id is None:
                        self.print_func("[!] The story cannot continue from here.")
                        return 1
                    self.print_func("[!] That path is closed for now.")
                continue

            if command not in {"", "n", "next"}:
                self.print_func("Press Enter to continue or D/P/R/Q.")
                continue
            self.emit_captions(slide, "onClick")
            before = self.position()
            session.advance_slide()
            if self.position() == before and not session.is_complete:
                self.print_func("[!] The story cannot continue from here.")
                return 1


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play a branching visual novel in the terminal.")
    parser.add_argument("story", nargs="?", default=str(DEFAULT_STORY_PATH))
    parser.add_argument("--debug", action="store_true", help="Show requirements and debug logs.")
    parser.add_argument(
        "--settings",
        default=str(SETTINGS_PATH),
        help="Path to the player settings JSON file.",
    )
    parser.add_argument("--text-speed", type=float, help="Typing speed; 0 prints instantly.")
    parser.add_argument("--high-contrast", action="store_true", default=None)
    parser.add_argument("--captions", action="store_true", default=None, help="Caption audio cues.")
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist the command-line overrides to the settings file.",
    )
    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {
        "text_speed": args.text_speed,
        "high_contrast": args.high_contrast,
        "caption_audio_cues": args.captions,
    }
    updated = settings.to_dict()
    updated.update({key: value for key, value in overrides.items() if value is not None})
    return Settings.from_dict(updated)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = apply_overrides(load_settings(args.settings), args)
    if args.save_settings:
        settings = save_settings(settings, args.settings)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else settings.log_level_value(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        story = load_story_file(args.story)
    except (OSError, ValueError) as exc:
        print(f"[!] Could not load story {args.story}: {exc}")
        return 1
    player = Player(Session(story), settings, debug=args.debug)
    return player.run()


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n[Interrupted] Bye.")
