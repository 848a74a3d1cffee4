import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from engine.action_resolution import ActionReport, ActionResolver
from engine.actions import parse_action
from engine.advisor import advisor_tip, agile_tip, daily_challenge
from engine.balance import Balance, load_balance
from engine.dice import Dice
from engine.episodes import EpisodeController, EpisodePhase, load_goals
from engine.meters import MeterState
from engine.scheduler import Scheduler
from game_context import DATA_ROOT
from script.characters import load_characters
from script.dialogue import AdvanceResult, DialogueSequencer
from script.effects import EffectRegistry
from script.scene_graph import SceneGraph
from script.scene_loader import SceneLoader
from ui.events import (
    build_action_resolved,
    build_game_stalled,
    build_meter_state,
    build_random_event,
    build_text_event,
    build_transition,
    emit_event,
)

logger = logging.getLogger(__name__)


class GameSession:
    """
    The one running game. Owns the meters, the scheduler, every engine and
    script component, and the outgoing event list.

    Input signals (advance, skip, select_choice, perform_action,
    continue_episode) are gated: while dialogue plays, a choice is pending,
    a deferred beat is queued or an action is resolving, they are ignored.
    """

    def __init__(
        self,
        game=None,
        *,
        data_root: Optional[Path] = None,
        balance: Optional[Balance] = None,
        dice: Optional[Dice] = None,
        flavor_dice: Optional[Dice] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        game: optional step adapter (game_runner.Game); created on demand by step()
        dice: drives the simulation (success and random-event draws)
        flavor_dice: drives tips and daily challenges, kept apart so flavour
                     text never shifts the simulation's draw sequence
        """
        self.game = game
        self.events: List[Dict[str, Any]] = []

        self.data_root = Path(data_root) if data_root else DATA_ROOT
        self.balance = balance or load_balance(self.data_root / "balance.json")
        self.dice = dice or Dice()
        self.flavor_dice = flavor_dice or Dice()
        self.scheduler = scheduler or Scheduler()

        self.characters = load_characters(self.data_root / "characters.json")
        self.loader = SceneLoader(self.data_root, self.characters)
        self.script = self.loader.load_script()
        self.nodes = self.loader.load_all()
        self.effects = EffectRegistry()

        self.sequencer = DialogueSequencer(
            self.scheduler,
            emit=self.emit,
            characters=self.characters,
            typing_speed_ms=self.balance.typing_speed_ms,
        )

        self.auto_mode = False
        self._auto_timer = None
        self._new_run()

    def _new_run(self) -> None:
        self.state = MeterState.initial(self.balance)
        self.episodes = EpisodeController(
            self.state,
            self.balance,
            goals=load_goals(self.data_root / "episodes.json", self.balance),
        )
        self.resolver = ActionResolver(self.state, self.dice, self.balance, episodes=self.episodes)
        self.graph = SceneGraph(
            self.nodes,
            self.sequencer,
            self.scheduler,
            effect_executor=self.effects.execute,
            state=self.state,
            emit=self.emit,
            characters=self.characters,
            stagger_ms=self.balance.character_stagger_ms,
        )
        self.started = False
        self._resolving = False

    # ──────────────────────────────────────────────
    # Event sink
    # ──────────────────────────────────────────────

    def emit(self, event: Dict[str, Any]):
        self.events.append(event)

    def drain_events(self) -> List[Dict[str, Any]]:
        evs = self.events[:]
        self.events = []
        return evs

    def step(self, player_input: Dict[str, Any]):
        self.events = []
        if self.game is None:
            # Import lazily to avoid circular imports
            from game_runner import Game
            self.game = Game(self)
        self.game.handle_input(player_input, self)
        return self.events

    # ──────────────────────────────────────────────
    # Queries
    # ──────────────────────────────────────────────

    @property
    def busy(self) -> bool:
        return (
            self._resolving
            or self.sequencer.is_active
            or self.graph.is_running
            or self.graph.awaiting_choice
            or self.scheduler.pending(include_background=False) > 0
        )

    @property
    def accepts_actions(self) -> bool:
        return (
            self.state.intro_complete
            and not self.busy
            and self.episodes.accepts_actions
            and not self.resolver.is_terminal()
        )

    def snapshot(self) -> Dict[str, Any]:
        line = self.sequencer.current_line
        return {
            "state": self.state.snapshot(),
            "phase": self.episodes.phase.value,
            "episode_title": self.episodes.current_goal.title,
            "goal": self.episodes.goal_progress(),
            "busy": self.busy,
            "accepts_actions": self.accepts_actions,
            "auto_mode": self.auto_mode,
            "scene_id": self.graph.current_scene_id,
            "choices": self.graph.pending_options(),
            "dialogue": {
                "state": self.sequencer.state.value,
                "speaker": line.speaker if line else None,
                "text": self.sequencer.revealed_text,
                "progress": self.sequencer.progress(),
            },
            "now_ms": self.scheduler.now_ms,
        }

    # ──────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────

    def start(self, skip_intro: bool = False) -> bool:
        if self.started:
            logger.warning("start() ignored: session already started")
            return False
        self.started = True
        logger.info("Session started (skip_intro=%s)", skip_intro)
        self._emit_meters()
        if skip_intro:
            self._on_intro_complete()
        else:
            self.graph.play(self.script["intro_start"], on_return=self._on_intro_complete)
        return True

    def restart(self, skip_intro: bool = False) -> bool:
        logger.info("Session restart")
        self.scheduler.clear()
        self.sequencer.reset()
        self.graph.stop()
        self._auto_timer = None
        self._new_run()
        if self.auto_mode:
            self._arm_auto_timer()
        return self.start(skip_intro=skip_intro)

    def _on_intro_complete(self) -> None:
        self.state.intro_complete = True
        emit_event(self.emit, {"type": "intro_completed", "player_choice": self.state.player_choice})
        self._emit_episode_started()
        self._emit_meters()
        self._emit_daily_challenge()

    # ──────────────────────────────────────────────
    # Dialogue / choice signals
    # ──────────────────────────────────────────────

    def advance(self) -> bool:
        if self.graph.awaiting_choice:
            logger.warning("advance ignored: waiting for a choice")
            return False
        if (
            not self.sequencer.is_active
            and self.episodes.phase == EpisodePhase.EPISODE_1_CLEAR
            and not self.busy
        ):
            return self.continue_episode()
        return self.sequencer.advance() != AdvanceResult.IGNORED

    def skip(self) -> bool:
        return self.sequencer.skip()

    def select_choice(self, option_id: str) -> bool:
        if self.sequencer.is_active:
            logger.warning("select_choice ignored: dialogue still playing")
            return False
        return self.graph.select_choice(option_id)

    # ──────────────────────────────────────────────
    # Gameplay signals
    # ──────────────────────────────────────────────

    def perform_action(self, action) -> Optional[ActionReport]:
        act = parse_action(action)
        if act is None:
            logger.warning("perform_action ignored: unknown action %r", action)
            return None
        if not self.state.intro_complete:
            logger.warning("perform_action ignored: intro not finished")
            return None
        if self.busy:
            logger.warning("perform_action(%s) ignored: busy", act.value)
            return None
        if not self.episodes.accepts_actions:
            logger.warning("perform_action(%s) ignored in phase %s", act.value, self.episodes.phase.value)
            return None

        self._resolving = True
        try:
            report = self.resolver.resolve(act)
        finally:
            self._resolving = False

        if report is None:
            return None

        emit_event(self.emit, build_action_resolved(report.to_dict()))
        if report.perfect_cycle:
            emit_event(self.emit, {"type": "perfect_cycle", "count": report.cycle_count})
        for ev in report.events:
            emit_event(self.emit, build_random_event(ev.to_dict()))
        self._emit_meters()

        for t in report.transitions:
            emit_event(self.emit, build_transition(t.to_dict(), report.state))
            if t.kind == "episode_cleared" and self.state.current_episode != t.episode and self.episodes.accepts_actions:
                self._emit_episode_started()

        if self.episodes.accepts_actions:
            if self.resolver.is_terminal():
                self._emit_stalled()
            else:
                self._emit_daily_challenge()
        self._schedule_beats(report)
        return report

    def continue_episode(self) -> bool:
        if self.busy:
            logger.warning("continue_episode ignored: busy")
            return False
        if not self.episodes.continue_episode():
            return False
        self._emit_episode_started()
        self._emit_meters()
        if self.resolver.is_terminal():
            self._emit_stalled()
        else:
            self._emit_daily_challenge()
        return True

    def request_tip(self) -> str:
        text = advisor_tip(self.state, self.flavor_dice)
        emit_event(self.emit, build_text_event("advisor_tip", text))
        return text

    def toggle_auto_mode(self) -> bool:
        self.auto_mode = not self.auto_mode
        if self.auto_mode:
            self._arm_auto_timer()
        elif self._auto_timer is not None:
            self._auto_timer.cancel()
            self._auto_timer = None
        emit_event(self.emit, {"type": "auto_mode_changed", "enabled": self.auto_mode})
        return self.auto_mode

    # ──────────────────────────────────────────────
    # Time
    # ──────────────────────────────────────────────

    def tick(self, elapsed_ms: int) -> int:
        return self.scheduler.advance(elapsed_ms)

    def run_until_idle(self) -> int:
        return self.scheduler.run_until_idle()

    # ──────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────

    def _schedule_beats(self, report: ActionReport) -> None:
        """
        Interludes and the agile maxim play one beat after the meters update.
        """
        mapping = self.script.get("interludes", {})
        scenes = [mapping[k] for k in report.interludes if k in mapping]
        clears = self.script.get("episode_clear", {})
        for t in report.transitions:
            if t.kind == "episode_cleared" and str(t.episode) in clears:
                scenes.append(clears[str(t.episode)])

        delay = self.balance.celebration_delay_ms
        if report.perfect_cycle:
            self.scheduler.call_later(delay, self._show_agile_tip, label="agile_tip")
        if scenes:
            self.scheduler.call_later(
                delay,
                lambda: self.graph.play_sequence(scenes, on_return=self._on_interludes_done),
                label="interlude",
            )

    def _on_interludes_done(self) -> None:
        logger.debug("Interludes finished; control back to gameplay")

    def _show_agile_tip(self) -> None:
        emit_event(self.emit, build_text_event("agile_tip", agile_tip(self.flavor_dice)))

    def _arm_auto_timer(self) -> None:
        self._auto_timer = self.scheduler.call_every(
            self.balance.auto_advance_ms,
            self._auto_tick,
            label="auto_advance",
            background=True,
        )

    def _auto_tick(self) -> None:
        if self.sequencer.is_active and not self.sequencer.is_typing:
            self.sequencer.advance()

    def _emit_meters(self) -> None:
        emit_event(self.emit, build_meter_state(self.state.snapshot()))

    def _emit_episode_started(self) -> None:
        goal = self.episodes.current_goal
        emit_event(self.emit, {
            "type": "episode_started",
            "episode": goal.episode,
            "title": goal.title,
            "goal": goal.description,
        })

    def _emit_stalled(self) -> None:
        logger.info("Growth capped in episode %s before the goal; play has stopped", self.state.current_episode)
        emit_event(self.emit, build_game_stalled(self.state.current_episode, self.state.snapshot()))

    def _emit_daily_challenge(self) -> None:
        emit_event(self.emit, build_text_event("daily_challenge", daily_challenge(self.state, self.flavor_dice)))
