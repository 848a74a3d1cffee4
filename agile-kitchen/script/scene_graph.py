import logging
from typing import Any, Callable, Dict, List, Optional

from engine.scheduler import Scheduler
from script.characters import CharacterRegistry, default_characters
from script.dialogue import DialogueSequencer
from script.effects import EffectRegistry
from script.scene_loader import SceneNode
from ui.events import (
    build_background_changed,
    build_character_event,
    build_choice_presented,
    build_choice_selected,
    build_scene_changed,
    emit_event,
)

logger = logging.getLogger(__name__)


class SceneGraph:
    """
    Narrative controller over a table of SceneNodes.

    Entering a node stages it (title, background, characters), runs its
    effects and starts its dialogue; the dialogue's completion follows the
    node's transition:
      - scene:  enter the target node
      - choice: suspend until select_choice()
      - return: hand control back to whoever called play()
    """

    def __init__(
        self,
        nodes: Dict[str, SceneNode],
        sequencer: DialogueSequencer,
        scheduler: Scheduler,
        effect_executor: Optional[Callable[[Dict[str, Any], Dict[str, Any]], None]] = None,
        state=None,
        emit: Optional[Callable[[Dict[str, Any]], None]] = None,
        characters: Optional[CharacterRegistry] = None,
        stagger_ms: int = 400,
    ):
        """
        nodes: scene_id -> SceneNode
        effect_executor: callable(effect, context); defaults to an EffectRegistry
        state: MeterState that effects act on
        stagger_ms: delay for staggered entrances when a node does not set one
        """
        self.nodes = nodes
        self.sequencer = sequencer
        self.scheduler = scheduler
        self.effect_executor = effect_executor or EffectRegistry().execute
        self.state = state
        self.emit = emit
        self.characters = characters or default_characters()
        self.stagger_ms = stagger_ms

        # progression state
        self.current_scene_id: Optional[str] = None
        self.awaiting_choice = False
        self.history: List[str] = []

        self._on_return: Optional[Callable[[], None]] = None

    # ──────────────────────────────────────────────
    # Queries
    # ──────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self.current_scene_id is not None

    @property
    def current_node(self) -> Optional[SceneNode]:
        if self.current_scene_id is None:
            return None
        return self.nodes[self.current_scene_id]

    # ──────────────────────────────────────────────
    # Playback
    # ──────────────────────────────────────────────

    def play(self, scene_id: str, on_return: Optional[Callable[[], None]] = None) -> None:
        """
        Enter `scene_id` and follow transitions until a node returns.
        Playing while another run is in flight replaces it.
        """
        if scene_id not in self.nodes:
            raise KeyError(f"Unknown scene: {scene_id}")
        if self.is_running:
            logger.debug("Scene run %s replaced by %s", self.current_scene_id, scene_id)
        self.awaiting_choice = False
        self._on_return = on_return
        self.enter_scene(scene_id)

    def play_sequence(self, scene_ids: List[str], on_return: Optional[Callable[[], None]] = None) -> None:
        """
        Play non-branching interludes back to back, then call on_return once.
        """
        remaining = [sid for sid in scene_ids if sid in self.nodes]
        for missing in set(scene_ids) - set(remaining):
            logger.warning("Skipping unknown interlude scene: %s", missing)

        if not remaining:
            if on_return:
                on_return()
            return

        head, rest = remaining[0], remaining[1:]
        self.play(head, on_return=lambda: self.play_sequence(rest, on_return))

    def enter_scene(self, scene_id: str) -> None:
        node = self.nodes[scene_id]
        self.current_scene_id = scene_id
        self.history.append(scene_id)
        logger.debug("Entering scene %s", scene_id)

        self._stage(node)
        self._apply_effects(node.effects)
        self.sequencer.start(node.lines, node.variant, on_complete=lambda: self._follow(node))

    def select_choice(self, option_id: str) -> bool:
        """
        Resume a suspended choice node. Returns False if no choice is pending
        or the option is not offered.
        """
        node = self.current_node
        if not self.awaiting_choice or node is None:
            logger.warning("select_choice(%s) with no pending choice", option_id)
            return False

        option = next((o for o in node.next.options if o.id == option_id), None)
        if option is None:
            logger.warning("Unknown choice option %s in scene %s", option_id, node.id)
            return False

        self.awaiting_choice = False
        emit_event(self.emit, build_choice_selected(option.id))
        self._apply_effects(option.effects)
        self.enter_scene(option.target)
        return True

    def pending_options(self) -> List[Dict[str, Any]]:
        node = self.current_node
        if not self.awaiting_choice or node is None:
            return []
        return [o.to_dict() for o in node.next.options]

    def stop(self) -> None:
        self.current_scene_id = None
        self.awaiting_choice = False
        self._on_return = None

    # ──────────────────────────────────────────────
    # Transitions
    # ──────────────────────────────────────────────

    def _follow(self, node: SceneNode) -> None:
        nxt = node.next
        if nxt.type == "scene":
            self.enter_scene(nxt.target)
        elif nxt.type == "choice":
            self.awaiting_choice = True
            emit_event(self.emit, build_choice_presented([o.to_dict() for o in nxt.options]))
        else:
            self._return()

    def _return(self) -> None:
        callback = self._on_return
        self._on_return = None
        self.current_scene_id = None
        if callback:
            callback()

    # ──────────────────────────────────────────────
    # Staging / effects
    # ──────────────────────────────────────────────

    def _stage(self, node: SceneNode) -> None:
        if node.title:
            emit_event(self.emit, build_scene_changed(node.id, node.title))
        if node.background:
            emit_event(self.emit, build_background_changed(node.background))
        for cid in node.hide:
            emit_event(self.emit, build_character_event("hidden", self.characters.get(cid)))
        for cid in node.show:
            emit_event(self.emit, build_character_event("shown", self.characters.get(cid)))
        if node.stagger_show:
            delay = node.stagger_ms if node.stagger_ms is not None else self.stagger_ms
            self.scheduler.call_later(
                delay,
                lambda ids=list(node.stagger_show): self._show_later(ids),
                label="scene.stagger",
            )

    def _show_later(self, character_ids: List[str]) -> None:
        for cid in character_ids:
            emit_event(self.emit, build_character_event("shown", self.characters.get(cid)))

    def _apply_effects(self, effects: List[Dict[str, Any]]) -> None:
        for eff in effects:
            self.effect_executor(eff, self._build_context())

    def _build_context(self) -> Dict[str, Any]:
        return {
            "scene_id": self.current_scene_id,
            "state": self.state,
            "emit": self.emit,
            "graph": self,
        }
