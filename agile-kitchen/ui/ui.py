from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from engine.actions import ACTION_ORDER, ActionId
from ui.provider import UIProvider

logger = logging.getLogger(__name__)


class UI:
    """
    The game talks to UI, not to a specific provider.
    `render()` turns session events into provider calls.
    """

    def __init__(self, provider: UIProvider):
        self.provider = provider

    def scene(self, text: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.provider.scene(text, data)

    def dialogue(self, speaker: str, text: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.provider.dialogue(speaker, text, data)

    def meters(self, snapshot: Dict[str, Any], data: Optional[Dict[str, Any]] = None) -> None:
        self.provider.meters(snapshot, data)

    def system(self, text: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.provider.system(text, data)

    def error(self, text: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.provider.error(text, data)

    def choice(self, prompt: str, options: List[str], data: Optional[Dict[str, Any]] = None) -> int:
        return self.provider.choice(prompt, options, data)

    def text_input(self, prompt: str, data: Optional[Dict[str, Any]] = None) -> str:
        return self.provider.text_input(prompt, data)

    # ──────────────────────────────────────────────
    # Event rendering
    # ──────────────────────────────────────────────

    def render(self, events: Iterable[Dict[str, Any]]) -> None:
        for ev in events:
            self.render_event(ev)

    def render_event(self, ev: Dict[str, Any]) -> None:
        t = ev.get("type")

        if t == "scene_changed" and ev.get("title"):
            self.scene(f"== {ev['title']} ==", ev)
        elif t == "dialogue_line_shown":
            # Only finished lines; partial reveals are for animated front ends.
            if ev.get("is_complete"):
                self.dialogue(ev.get("speaker_name") or "", ev.get("full_text", ""), ev)
        elif t == "dialogue_skipped":
            self.system("(skipped)", ev)
        elif t == "meter_state_changed":
            self.meters(ev.get("state", {}), ev)
        elif t == "action_resolved":
            for line in ev.get("report", {}).get("messages", []):
                self.system(line, ev)
        elif t == "episode_started":
            self.scene(f"{ev.get('title')}\n{ev.get('goal')}", ev)
        elif t == "episode_cleared":
            self.scene(f"*** Episode {ev.get('episode')} clear! ***", ev)
        elif t == "game_over":
            self.scene("GAME OVER. The kitchen sank back into routine.", ev)
        elif t == "victory":
            self.scene("VICTORY! The Old Master has accepted agile cooking!", ev)
        elif t == "game_stalled":
            self.scene("The menu is full, but the goal is out of reach. Start a new run.", ev)
        elif t == "advisor_tip":
            self.system(f"Mina: {ev.get('text')}", ev)
        elif t == "agile_tip":
            self.system(f"Agile maxim: {ev.get('text')}", ev)
        elif t == "daily_challenge":
            self.system(f"Today's sprint goal: {ev.get('text')}", ev)
        elif t == "auto_mode_changed":
            self.system(f"Auto mode {'on' if ev.get('enabled') else 'off'}", ev)
        elif t == "error":
            self.error(ev.get("text", ""), ev)
        else:
            logger.debug("Not rendered: %s", t)

    def choose_action(self, hint: Optional[str] = None) -> str:
        """
        Returns an action id, or one of "tip", "auto", "restart", "quit".
        """
        labels = [f"{a.icon} {a.display_name}" for a in ACTION_ORDER]
        labels += ["Ask Mina for a tip", "Toggle auto mode", "Restart", "Quit"]
        extras = ["tip", "auto", "restart", "quit"]
        idx = self.choice(hint or "What will you do today?", labels)
        if idx < len(ACTION_ORDER):
            action: ActionId = ACTION_ORDER[idx]
            return action.value
        return extras[idx - len(ACTION_ORDER)]
