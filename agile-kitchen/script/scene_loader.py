from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
import json
from pathlib import Path

from script.characters import CharacterRegistry, default_characters
from script.dialogue import DialogueLine


TRANSITION_TYPES = {"scene", "choice", "return"}


@dataclass
class ChoiceOption:
    id: str
    label: str
    target: str
    effects: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label}


@dataclass
class SceneTransition:
    type: str
    target: Optional[str] = None
    options: List[ChoiceOption] = field(default_factory=list)

    def targets(self) -> List[str]:
        if self.type == "scene":
            return [self.target]
        if self.type == "choice":
            return [o.target for o in self.options]
        return []


@dataclass
class SceneNode:
    id: str
    title: Optional[str]
    background: Optional[str]
    variant: str
    lines: List[DialogueLine]
    next: SceneTransition
    show: List[str] = field(default_factory=list)
    hide: List[str] = field(default_factory=list)
    stagger_show: List[str] = field(default_factory=list)
    stagger_ms: Optional[int] = None
    effects: List[Dict[str, Any]] = field(default_factory=list)


class SceneLoader:
    """
    Resolves scene definitions into SceneNode data:
    - stage setup (background, characters shown / hidden / staggered in)
    - dialogue queue
    - on-enter effects
    - the outgoing transition

    No game logic here. Pure data wiring.
    """

    def __init__(self, data_root: str | Path, characters: Optional[CharacterRegistry] = None):
        self.data_root = Path(data_root)
        self.characters = characters or default_characters()

        self._cache: Dict[str, Any] = {}

    # ──────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────

    def load_script(self) -> Dict[str, Any]:
        key = "script"
        if key in self._cache:
            return self._cache[key]

        path = self.data_root / "script.json"
        if not path.exists():
            raise FileNotFoundError(f"Missing script file: {path}")

        with open(path, "r", encoding="utf-8") as f:
            script = json.load(f)

        if not script.get("intro_start"):
            raise ValueError(f"Script has no intro_start: {path}")

        self._cache[key] = script
        return script

    def scene_ids(self) -> List[str]:
        return [ref["$ref"] for ref in self.load_script().get("scenes", [])]

    def load_scene(self, scene_id: str) -> SceneNode:
        """
        Returns a fully resolved SceneNode. Speakers and staged characters
        must exist in the character registry.
        """
        key = f"node:{scene_id}"
        if key in self._cache:
            return self._cache[key]

        scene_def = self._load_json("scenes", scene_id.lower())
        if scene_def.get("id") != scene_id:
            raise ValueError(f"Scene file for {scene_id} declares id {scene_def.get('id')}")

        node = self.build_node(scene_def)
        self._cache[key] = node
        return node

    def load_all(self) -> Dict[str, SceneNode]:
        return {sid: self.load_scene(sid) for sid in self.scene_ids()}

    def build_node(self, scene_def: Dict[str, Any]) -> SceneNode:
        stage = scene_def.get("characters", {})
        stagger = stage.get("stagger", {})
        node = SceneNode(
            id=scene_def["id"],
            title=scene_def.get("title"),
            background=scene_def.get("background"),
            variant=scene_def.get("variant", "event"),
            lines=[DialogueLine.from_dict(d) for d in scene_def.get("dialogue", [])],
            next=self._load_transition(scene_def),
            show=list(stage.get("show", [])),
            hide=list(stage.get("hide", [])),
            stagger_show=list(stagger.get("show", [])),
            stagger_ms=stagger.get("delay_ms"),
            effects=list(scene_def.get("effects", [])),
        )
        self._check_characters(node)
        return node

    # ──────────────────────────────────────────────
    # Transitions
    # ──────────────────────────────────────────────

    def _load_transition(self, scene_def: Dict[str, Any]) -> SceneTransition:
        nxt = scene_def.get("next") or {"type": "return"}
        ttype = nxt.get("type")
        if ttype not in TRANSITION_TYPES:
            raise ValueError(f"Scene {scene_def.get('id')} has unknown transition type: {ttype}")

        if ttype == "scene":
            if not nxt.get("target"):
                raise ValueError(f"Scene {scene_def.get('id')} transition missing 'target'")
            return SceneTransition("scene", target=nxt["target"])

        if ttype == "choice":
            options = [
                ChoiceOption(
                    id=o["id"],
                    label=o.get("label", o["id"]),
                    target=o["target"],
                    effects=list(o.get("effects", [])),
                )
                for o in nxt.get("options", [])
            ]
            if not options:
                raise ValueError(f"Scene {scene_def.get('id')} choice has no options")
            return SceneTransition("choice", options=options)

        return SceneTransition("return")

    def _check_characters(self, node: SceneNode) -> None:
        for cid in [*node.show, *node.hide, *node.stagger_show]:
            self.characters.get(cid)
        for line in node.lines:
            self.characters.get(line.speaker)

    # ──────────────────────────────────────────────
    # JSON loading + caching
    # ──────────────────────────────────────────────

    def _load_json(self, folder: str, item_id: str) -> Dict[str, Any]:
        """
        item_id maps directly to filename: <id>.json
        """
        key = f"{folder}:{item_id}"
        if key in self._cache:
            return self._cache[key]

        path = self.data_root / folder / f"{item_id}.json"
        if not path.exists():
            raise FileNotFoundError(f"Missing data file: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        self._cache[key] = data
        return data
