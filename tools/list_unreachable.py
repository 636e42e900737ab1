import json
import sys
from pathlib import Path

DEFAULT_STORY_PATH = Path("story/story.json")
PROLOGUE = "<prologue>"


def load_story(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        story = json.load(f)
    base_dir = path.resolve().parent
    routes = dict(story.get("routes") or {})
    for module_ref in story.get("modules") or []:
        with (base_dir / module_ref).open("r", encoding="utf-8") as f:
            routes.update(json.load(f).get("routes") or {})
    story["routes"] = routes
    return story


def _route_targets(scenes: list) -> list:
    targets = []
    for scene in scenes or []:
        for slide in scene.get("slides", []) or []:
            for choice in slide.get("choices", []) or []:
                route_id = choice.get("routeId")
                if isinstance(route_id, str) and route_id not in targets:
                    targets.append(route_id)
    return targets


def build_graph(story: dict) -> tuple:
    routes = story.get("routes", {}) or {}
    graph = {PROLOGUE: _route_targets(story.get("prologue"))}
    for route_id, route in routes.items():
        targets = _route_targets(route.get("scenes"))
        for ending in route.get("endings", []) or []:
            for target in _route_targets(ending.get("scenes")):
                if target not in targets:
                    targets.append(target)
        graph[route_id] = targets

    missing_targets = []
    for origin, targets in graph.items():
        for target in targets:
            if target not in routes:
                missing_targets.append(f"{origin} selects missing route {target}")
    return graph, missing_targets


def traverse_from(start: str, graph: dict) -> set:
    if start not in graph:
        return set()
    visited = set()
    stack = [start]
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        stack.extend(target for target in graph.get(current, []) if target in graph)
    return visited


def main() -> None:
    story_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_STORY_PATH
    story = load_story(story_path)
    graph, missing_targets = build_graph(story)

    reached = traverse_from(PROLOGUE, graph) - {PROLOGUE}
    routes = set(graph.keys()) - {PROLOGUE}
    unreachable = sorted(routes - reached)

    print(f"Story file: {story_path}")
    print(f"Total routes: {len(routes)}")
    print(f"Reachable routes: {len(reached)}")
    for message in missing_targets:
        print(f"  ! {message}")
    if unreachable:
        print("Unreachable routes:")
        for route_id in unreachable:
            print(f"  - {route_id}")
    else:
        print("All routes reachable from the prologue.")


if __name__ == "__main__":
    main()
