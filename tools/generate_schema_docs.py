"""Update the README block that lists story file fields."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Mapping

REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from novel import story_schema
from novel.story_schema import FieldSpec

MARKER_START = "<!-- schema-docs:start -->"
MARKER_END = "<!-- schema-docs:end -->"

FIELD_TABLES = (
    ("Route fields", story_schema.ROUTE_FIELDS),
    ("Ending fields", story_schema.ENDING_FIELDS),
    ("Scene fields", story_schema.SCENE_FIELDS),
    ("Slide fields", story_schema.SLIDE_FIELDS),
    ("Choice fields", story_schema.CHOICE_FIELDS),
)


def _format_names(names: list[str]) -> str:
    return ", ".join(f"`{name}`" for name in names)


def _format_fields(specs: Mapping[str, FieldSpec]) -> str:
    return ", ".join(
        f"`{name}`*" if spec.required else f"`{name}`" for name, spec in specs.items()
    )


def render_block() -> str:
    lines = [f"- **{label}:** {_format_fields(specs)}" for label, specs in FIELD_TABLES]
    lines.extend(
        [
            f"- **Point namespaces:** {_format_names(list(story_schema.POINT_NAMESPACES))}",
            f"- **Sound effect triggers:** {_format_names(list(story_schema.SFX_TRIGGERS))}",
            "- _Fields marked * are required. Regenerate docs with"
            " `python tools/generate_schema_docs.py` when the field tables change._",
        ]
    )
    return "\n".join(lines)


def replace_block(content: str, new_block: str) -> str:
    if MARKER_START not in content or MARKER_END not in content:
        raise RuntimeError("Schema docs markers not found.")
    before, rest = content.split(MARKER_START, 1)
    _, after = rest.split(MARKER_END, 1)
    return f"{before}{MARKER_START}\n{new_block}\n{MARKER_END}{after}"


def main() -> None:
    readme_path = REPO_ROOT / "README.md"
    readme_path.write_text(replace_block(readme_path.read_text(), render_block()))
    print("Updated schema docs. Regenerate docs with: python tools/generate_schema_docs.py")


if __name__ == "__main__":
    main()
