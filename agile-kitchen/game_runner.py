"""
game_runner.py
--------------
Step-based adapter: translates one input dict into GameSession signals.
Shared by the web step endpoint and the terminal front end.

Input shape:
    { "action": "start" | "advance" | "skip" | "choose" | "act" | "continue"
                | "tip" | "auto" | "restart" | "wait" | "state",
      "choice": "obedient",          # for "choose"
      "kitchen_action": "feedback",  # for "act" (id, name or 1-3)
      "skip_intro": false,           # for "start" / "restart"
      "elapsed_ms": 120 }            # optional, advances time after the signal
"""

import logging
from typing import Any, Dict

from engine.actions import parse_action
from ui.events import build_text_event, emit_event

logger = logging.getLogger(__name__)


class Game:
    def __init__(self, session=None):
        self.session = session

    def step(self, player_input: dict):
        """
        Advance the game by one logical step.
        Non-blocking. Safe for web.
        """
        session = self.session
        action = (player_input.get("action") or "").strip().lower()
        handler = getattr(self, f"_do_{action}", None)
        if handler is None:
            self._error(f"Unknown step action: {action or '<none>'}")
        else:
            handler(player_input)

        elapsed = player_input.get("elapsed_ms")
        if elapsed:
            session.tick(int(elapsed))

    def handle_input(self, player_input: dict, session=None):
        """
        Adapter for GameSession; forwards to step().
        """
        if session is not None:
            self.session = session
        return self.step(player_input)

    # ──────────────────────────────────────────────
    # Handlers
    # ──────────────────────────────────────────────

    def _do_start(self, inp: Dict[str, Any]):
        if not self.session.start(skip_intro=bool(inp.get("skip_intro"))):
            self._error("Game already started")

    def _do_restart(self, inp: Dict[str, Any]):
        self.session.restart(skip_intro=bool(inp.get("skip_intro")))

    def _do_advance(self, inp: Dict[str, Any]):
        self.session.advance()

    def _do_skip(self, inp: Dict[str, Any]):
        self.session.skip()

    def _do_choose(self, inp: Dict[str, Any]):
        choice = inp.get("choice")
        if not choice:
            self._error("Missing choice")
            return
        if not self.session.select_choice(str(choice)):
            self._error(f"Invalid choice: {choice}")

    def _do_act(self, inp: Dict[str, Any]):
        raw = inp.get("kitchen_action")
        if parse_action(raw) is None:
            self._error(f"Invalid kitchen action: {raw}")
            return
        if self.session.perform_action(raw) is None:
            self._error("Action not accepted right now")

    def _do_continue(self, inp: Dict[str, Any]):
        if not self.session.continue_episode():
            self._error("Nothing to continue")

    def _do_tip(self, inp: Dict[str, Any]):
        self.session.request_tip()

    def _do_auto(self, inp: Dict[str, Any]):
        self.session.toggle_auto_mode()

    def _do_wait(self, inp: Dict[str, Any]):
        self.session.run_until_idle()

    def _do_state(self, inp: Dict[str, Any]):
        emit_event(self.session.emit, {"type": "session_state", **self.session.snapshot()})

    def _error(self, text: str):
        logger.warning(text)
        emit_event(self.session.emit, build_text_event("error", text))
