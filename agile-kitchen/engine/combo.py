from __future__ import annotations

from typing import List, Sequence

from engine.actions import ACTION_ORDER, ActionId


CYCLE_LENGTH = 3


class ComboTracker:
    """
    Detects the "perfect cycle": the three most recent actions are all different.
    """

    @staticmethod
    def is_perfect_cycle(history: Sequence[ActionId]) -> bool:
        if len(history) < CYCLE_LENGTH:
            return False
        return len(set(history[-CYCLE_LENGTH:])) == CYCLE_LENGTH

    @staticmethod
    def missing_actions(history: Sequence[ActionId]) -> List[ActionId]:
        """
        Actions absent from the trailing two entries, in menu order.
        Only used for hints.
        """
        recent = set(history[-(CYCLE_LENGTH - 1):])
        return [a for a in ACTION_ORDER if a not in recent]
