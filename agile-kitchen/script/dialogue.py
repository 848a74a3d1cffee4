"""
Dialogue sequencer
------------------
Plays a queue of lines front to back with a typewriter reveal.

    IDLE ──start──▶ TYPING ──reveal done / advance──▶ AWAITING_ADVANCE
    AWAITING_ADVANCE ──advance──▶ TYPING (next line) | IDLE (queue done)
    TYPING / AWAITING_ADVANCE ──skip──▶ SKIPPED

The reveal is driven by one repeating scheduler timer. Every path that
leaves TYPING cancels it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from engine.scheduler import Scheduler, TimerHandle
from script.characters import CharacterRegistry, default_characters
from ui.events import (
    build_character_event,
    build_dialogue_completed,
    build_dialogue_line_shown,
    build_dialogue_skipped,
    build_dialogue_started,
    emit_event,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DialogueLine:
    speaker: str
    text: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DialogueLine":
        return cls(speaker=data.get("speaker", "narrator"), text=data.get("text", ""))


class DialogueState(str, Enum):
    IDLE = "idle"
    TYPING = "typing"
    AWAITING_ADVANCE = "awaiting_advance"
    SKIPPED = "skipped"


class AdvanceResult(str, Enum):
    REVEALED = "revealed"      # finished typing the current line
    NEXT_LINE = "next_line"    # moved to the next line
    COMPLETED = "completed"    # queue exhausted
    IGNORED = "ignored"        # nothing active


class DialogueSequencer:
    def __init__(
        self,
        scheduler: Scheduler,
        emit: Optional[Callable[[Dict[str, Any]], None]] = None,
        characters: Optional[CharacterRegistry] = None,
        typing_speed_ms: int = 30,
    ):
        self.scheduler = scheduler
        self.emit = emit
        self.characters = characters or default_characters()
        self.typing_speed_ms = typing_speed_ms

        self.state = DialogueState.IDLE
        self.variant: Optional[str] = None
        self._lines: List[DialogueLine] = []
        self._index = 0
        self._revealed = 0
        self._timer: Optional[TimerHandle] = None
        self._on_complete: Optional[Callable[[], None]] = None

    # ──────────────────────────────────────────────
    # Introspection
    # ──────────────────────────────────────────────

    @property
    def is_active(self) -> bool:
        return self.state in (DialogueState.TYPING, DialogueState.AWAITING_ADVANCE)

    @property
    def is_typing(self) -> bool:
        return self.state == DialogueState.TYPING

    @property
    def current_line(self) -> Optional[DialogueLine]:
        if not self.is_active:
            return None
        return self._lines[self._index]

    @property
    def revealed_text(self) -> str:
        line = self.current_line
        if line is None:
            return ""
        return line.text[:self._revealed]

    def progress(self) -> Dict[str, int]:
        total = len(self._lines)
        current = self._index + 1 if self.is_active else 0
        pct = round(current / total * 100) if total else 0
        return {"current": current, "total": total, "percentage": pct}

    # ──────────────────────────────────────────────
    # Signals
    # ──────────────────────────────────────────────

    def start(
        self,
        lines: Sequence[DialogueLine],
        variant: str = "default",
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        """
        Start a new sequence, replacing any active one.
        An empty queue completes at once: on_complete runs, nothing is shown.
        """
        if self.is_active:
            logger.debug("Dialogue %s replaced by %s", self.variant, variant)
        self._cancel_timer()
        self._reset()

        if not lines:
            if on_complete:
                on_complete()
            return

        self._lines = list(lines)
        self.variant = variant
        self._on_complete = on_complete
        emit_event(self.emit, build_dialogue_started(variant, len(self._lines)))
        self._show_line(0)

    def advance(self) -> AdvanceResult:
        if self.state == DialogueState.TYPING:
            self._finish_reveal()
            return AdvanceResult.REVEALED

        if self.state == DialogueState.AWAITING_ADVANCE:
            if self._index + 1 < len(self._lines):
                self._show_line(self._index + 1)
                return AdvanceResult.NEXT_LINE
            self._complete(skipped=False)
            return AdvanceResult.COMPLETED

        return AdvanceResult.IGNORED

    def skip(self) -> bool:
        """
        Jump to the end of the whole sequence. Returns False when idle.
        """
        if not self.is_active:
            return False
        self._complete(skipped=True)
        return True

    def reset(self) -> None:
        """Drop the active sequence without completing it. No callback, no events."""
        self._cancel_timer()
        self._reset()

    # ──────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────

    def _show_line(self, index: int) -> None:
        self._cancel_timer()
        self._index = index
        self._revealed = 0
        self.state = DialogueState.TYPING
        line = self._lines[index]

        speaker = self._speaker(line.speaker)
        if speaker is not None and speaker.has_sprite:
            emit_event(self.emit, build_character_event("speaking", speaker))
        self._emit_line(is_complete=False)

        if self.typing_speed_ms <= 0 or not line.text:
            self._finish_reveal()
            return
        self._timer = self.scheduler.call_every(self.typing_speed_ms, self._tick, label="dialogue.typing")

    def _tick(self) -> None:
        if self.state != DialogueState.TYPING:
            self._cancel_timer()
            return
        self._revealed += 1
        if self._revealed >= len(self._lines[self._index].text):
            self._finish_reveal()

    def _finish_reveal(self) -> None:
        self._cancel_timer()
        self._revealed = len(self._lines[self._index].text)
        self.state = DialogueState.AWAITING_ADVANCE
        self._emit_line(is_complete=True)

    def _complete(self, *, skipped: bool) -> None:
        self._cancel_timer()
        variant = self.variant or "default"
        callback = self._on_complete
        self._reset()
        if skipped:
            self.state = DialogueState.SKIPPED
            emit_event(self.emit, build_dialogue_skipped(variant))
        emit_event(self.emit, build_dialogue_completed(variant))
        logger.debug("Dialogue %s %s", variant, "skipped" if skipped else "completed")
        if callback:
            callback()

    def _reset(self) -> None:
        self.state = DialogueState.IDLE
        self.variant = None
        self._lines = []
        self._index = 0
        self._revealed = 0
        self._on_complete = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _speaker(self, speaker_id: str):
        if speaker_id in self.characters:
            return self.characters.get(speaker_id)
        return None

    def _emit_line(self, *, is_complete: bool) -> None:
        line = self._lines[self._index]
        speaker = self._speaker(line.speaker)
        emit_event(self.emit, build_dialogue_line_shown(
            speaker=line.speaker,
            speaker_name=speaker.display_name if speaker is not None else line.speaker,
            text=line.text[:self._revealed],
            full_text=line.text,
            index=self._index,
            total=len(self._lines),
            is_complete=is_complete,
        ))
