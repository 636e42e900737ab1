#!/usr/bin/env python3
"""Check a story file for schema errors and soft-lock risks.

Exit status is 1 when the story fails validation, or when ``--strict`` is set
and the soft-lock analysis reports anything.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Sequence, Tuple

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_STORY = REPO_ROOT / "story" / "story.json"

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from novel.loader import merge_story_modules
from novel.schema import validate_story
from tools.softlock import analyze_softlocks


def collect_findings(story_path: Path) -> Tuple[List[str], List[str]]:
    """Return ``(errors, warnings)`` for the story at ``story_path``."""
    try:
        with story_path.open("r", encoding="utf-8") as handle:
            story = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        return [f"{story_path}: could not read story JSON: {exc}"], []
    if not isinstance(story, dict):
        return [f"{story_path}: story file must contain a JSON object."], []

    try:
        story = merge_story_modules(story, story_path)
    except (OSError, json.JSONDecodeError, ValueError) as exc:
        return [f"modules: {exc}"], []

    errors = validate_story(story)
    if errors:
        return errors, []
    return [], analyze_softlocks(story)


def _print_section(title: str, lines: Sequence[str]) -> None:
    print(f"{title} (path: message):")
    for line in lines:
        print(f" - {line}")


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate visual novel story content.")
    parser.add_argument("story_path", nargs="?", default=str(DEFAULT_STORY))
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat soft-lock warnings as failures.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str]) -> int:
    args = parse_args(argv)
    story_path = Path(args.story_path).resolve()
    errors, warnings = collect_findings(story_path)
    if errors:
        _print_section("Validation failed", errors)
        return 1
    if warnings:
        _print_section("Soft-lock warnings", warnings)
        if args.strict:
            return 1
    print(f"Validation passed for {story_path}.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
