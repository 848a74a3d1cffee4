import argparse
import sys
from collections import deque
from pathlib import Path
from typing import Dict, List, Optional

# Allow running from repo root or tools/ dir
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from game_context import DATA_ROOT  # noqa: E402
from script.characters import load_characters  # noqa: E402
from script.effects import EffectRegistry  # noqa: E402
from script.scene_loader import SceneLoader, SceneNode  # noqa: E402


def validate(data_root: Path) -> List[str]:
    """
    Returns a list of problems; empty means the scene data is consistent.
    """
    problems: List[str] = []
    characters = load_characters(data_root / "characters.json")
    loader = SceneLoader(data_root, characters)
    effects = EffectRegistry()

    try:
        script = loader.load_script()
    except (FileNotFoundError, ValueError) as e:
        return [str(e)]

    nodes: Dict[str, SceneNode] = {}
    for sid in loader.scene_ids():
        try:
            nodes[sid] = loader.load_scene(sid)
        except (FileNotFoundError, KeyError, ValueError) as e:
            problems.append(f"{sid}: {e}")

    referenced = [script["intro_start"]]
    referenced += list(script.get("interludes", {}).values())
    referenced += list(script.get("episode_clear", {}).values())
    for sid in referenced:
        if sid not in nodes:
            problems.append(f"script references missing scene {sid}")

    for node in nodes.values():
        for target in node.next.targets():
            if target not in nodes:
                problems.append(f"{node.id}: transition to unknown scene {target}")
        all_effects = list(node.effects)
        for opt in node.next.options:
            all_effects.extend(opt.effects)
        for eff in all_effects:
            if eff.get("type") not in effects:
                problems.append(f"{node.id}: unknown effect type {eff.get('type')}")

    reachable = _reachable(nodes, referenced)
    for sid in sorted(set(nodes) - reachable):
        problems.append(f"{sid}: unreachable from the intro or any interlude")

    return problems


def _reachable(nodes: Dict[str, SceneNode], roots: List[str]) -> set:
    seen = set()
    queue = deque(r for r in roots if r in nodes)
    while queue:
        sid = queue.popleft()
        if sid in seen:
            continue
        seen.add(sid)
        for target in nodes[sid].next.targets():
            if target in nodes and target not in seen:
                queue.append(target)
    return seen


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate scene data.")
    parser.add_argument("--data-root", type=Path, default=DATA_ROOT)
    args = parser.parse_args(argv)

    problems = validate(args.data_root)
    for p in problems:
        print(f"[PROBLEM] {p}")
    if not problems:
        print("Scene data OK")
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())
