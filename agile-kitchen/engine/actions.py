from __future__ import annotations

from enum import Enum
from typing import Optional


class ActionId(str, Enum):
    """
    The three kitchen actions a player can take each day.
    Values are the wire ids used by the step API and the CLI.
    """

    TASTE_ITERATION = "taste_iteration"
    MAINTENANCE = "maintenance"
    FEEDBACK = "feedback"

    @property
    def display_name(self) -> str:
        return ACTION_NAMES[self]

    @property
    def icon(self) -> str:
        return ACTION_ICONS[self]


ACTION_NAMES = {
    ActionId.TASTE_ITERATION: "Iteration Tasting",
    ActionId.MAINTENANCE: "CI/CD Maintenance",
    ActionId.FEEDBACK: "User Feedback",
}

ACTION_ICONS = {
    ActionId.TASTE_ITERATION: "🍳",
    ActionId.MAINTENANCE: "🔧",
    ActionId.FEEDBACK: "👥",
}

# Menu order; also accepted as numeric shortcuts "1".."3".
ACTION_ORDER = [ActionId.TASTE_ITERATION, ActionId.MAINTENANCE, ActionId.FEEDBACK]


def parse_action(raw) -> Optional[ActionId]:
    """
    Accepts an ActionId, its value, its enum name, or a 1-based menu number.
    Returns None for anything else.
    """
    if isinstance(raw, ActionId):
        return raw
    if raw is None:
        return None
    token = str(raw).strip().lower()
    if token.isdigit():
        idx = int(token) - 1
        if 0 <= idx < len(ACTION_ORDER):
            return ACTION_ORDER[idx]
        return None
    for action in ActionId:
        if token in {action.value, action.name.lower()}:
            return action
    return None
