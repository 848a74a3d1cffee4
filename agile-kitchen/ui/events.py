"""
Shared UI event builders and the emit hook.

Every component emits plain dicts with a snake_case "type" to a callable
sink, usually GameSession.emit.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def emit_event(sink, payload: Dict[str, Any]) -> None:
    """
    Best-effort emit of structured events.
    A failing sink is logged and never breaks the game loop.
    """
    if sink is None:
        return
    try:
        sink(payload)
    except Exception:
        logger.exception("Event sink failed for %s", payload.get("type"))


# ──────────────────────────────────────────────
# Dialogue
# ──────────────────────────────────────────────

def build_dialogue_started(variant: str, total_lines: int) -> Dict[str, Any]:
    return {"type": "dialogue_started", "variant": variant, "total_lines": total_lines}


def build_dialogue_line_shown(
    *,
    speaker: str,
    speaker_name: str,
    text: str,
    full_text: str,
    index: int,
    total: int,
    is_complete: bool,
) -> Dict[str, Any]:
    return {
        "type": "dialogue_line_shown",
        "speaker": speaker,
        "speaker_name": speaker_name,
        "text": text,
        "full_text": full_text,
        "index": index,
        "total": total,
        "is_complete": is_complete,
    }


def build_dialogue_completed(variant: str) -> Dict[str, Any]:
    return {"type": "dialogue_completed", "variant": variant}


def build_dialogue_skipped(variant: str) -> Dict[str, Any]:
    return {"type": "dialogue_skipped", "variant": variant}


# ──────────────────────────────────────────────
# Scenes / characters
# ──────────────────────────────────────────────

def build_scene_changed(scene_id: str, title: Optional[str]) -> Dict[str, Any]:
    return {"type": "scene_changed", "scene_id": scene_id, "title": title}


def build_background_changed(scene_key: str) -> Dict[str, Any]:
    return {"type": "background_changed", "scene_key": scene_key}


def build_character_event(kind: str, character) -> Dict[str, Any]:
    """
    kind: "shown" | "hidden" | "speaking"
    """
    position = character.position.value if character.has_sprite else None
    return {"type": f"character_{kind}", "id": character.id, "position": position}


def build_choice_presented(options: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "type": "choice_presented",
        "options": [{"id": o["id"], "label": o["label"]} for o in options],
    }


def build_choice_selected(option: str) -> Dict[str, Any]:
    return {"type": "choice_selected", "option": option}


# ──────────────────────────────────────────────
# Simulation
# ──────────────────────────────────────────────

def build_meter_state(snapshot: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "meter_state_changed", "state": snapshot}


def build_action_resolved(report: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "action_resolved", "report": report}


def build_random_event(event: Dict[str, Any]) -> Dict[str, Any]:
    kind = event.get("kind")
    if kind == "requirement_changed":
        return {"type": "requirement_changed", "customer": event.get("customer"),
                "requirement": event.get("requirement"), "text": event.get("text")}
    if kind == "special_customer_arrived":
        return {"type": "special_customer_arrived", "customer": event.get("customer"),
                "text": event.get("text")}
    return {"type": "random_event", "kind": kind, "text": event.get("text")}


def build_transition(transition: Dict[str, Any], snapshot: Dict[str, Any]) -> Dict[str, Any]:
    kind = transition.get("kind")
    if kind == "episode_cleared":
        return {"type": "episode_cleared", "episode": transition.get("episode")}
    if kind == "victory":
        return {"type": "victory", "state": snapshot}
    return {"type": "game_over", "state": snapshot}


def build_game_stalled(episode: int, snapshot: Dict[str, Any]) -> Dict[str, Any]:
    """
    Growth hit its cap before the episode goal was met; no further
    action will resolve.
    """
    return {"type": "game_stalled", "episode": episode, "reason": "growth_at_cap", "state": snapshot}


def build_text_event(event_type: str, text: str) -> Dict[str, Any]:
    """
    advisor_tip, agile_tip, daily_challenge, error
    """
    return {"type": event_type, "text": text}
