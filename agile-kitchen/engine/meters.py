from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from engine.actions import ActionId
from engine.balance import Balance


HISTORY_LIMIT = 3

# (min, max); None means unbounded on that side. "growth" max comes from max_growth.
METER_BOUNDS: Dict[str, Tuple[Optional[int], Optional[int]]] = {
    "day": (1, None),
    "stagnation": (0, 100),
    "growth": (0, None),
    "old_man_mood": (0, 100),
    "ingredient_quality": (0, 100),
    "current_ingredients": (0, 5),
    "technical_debt": (0, None),
    "tradition_score": (0, 100),
    "special_challenge_success": (0, None),
    "perfect_cycle_count": (0, None),
}


def clamp(value: int, lo: Optional[int], hi: Optional[int]) -> int:
    if lo is not None and value < lo:
        return lo
    if hi is not None and value > hi:
        return hi
    return value


@dataclass
class SpecialCustomer:
    name: str
    requirement: str
    bonus: int
    can_change_requirement: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "requirement": self.requirement,
            "bonus": self.bonus,
            "can_change_requirement": self.can_change_requirement,
        }


@dataclass
class MeterState:
    """
    Every number the game tracks for one session.

    Bounded meters are clamped on assignment, so `state.stagnation += 40`
    can never leave the declared range.
    """

    max_growth: int = 50
    day: int = 1
    stagnation: int = 50
    growth: int = 0
    old_man_mood: int = 70
    ingredient_quality: int = 50
    current_ingredients: int = 3
    technical_debt: int = 0
    tradition_score: int = 50

    last_action: Optional[ActionId] = None
    action_history: List[ActionId] = field(default_factory=list)

    current_episode: int = 1
    special_challenge_success: int = 0
    special_customer: Optional[SpecialCustomer] = None
    requirement_change_active: bool = False
    perfect_cycle_count: int = 0

    # story flags
    hybrid_moment_triggered: bool = False
    has_chef_knife: bool = False
    intro_complete: bool = False
    player_choice: Optional[str] = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in METER_BOUNDS:
            lo, hi = METER_BOUNDS[name]
            if name == "growth":
                hi = self.__dict__.get("max_growth", hi)
            value = clamp(int(value), lo, hi)
        object.__setattr__(self, name, value)

    @classmethod
    def initial(cls, balance: Optional[Balance] = None) -> "MeterState":
        b = balance or Balance()
        return cls(
            max_growth=b.max_growth,
            stagnation=b.initial_stagnation,
            growth=b.initial_growth,
            old_man_mood=b.initial_mood,
            ingredient_quality=b.initial_quality,
            current_ingredients=b.initial_ingredients,
            technical_debt=b.initial_debt,
            tradition_score=b.initial_tradition,
        )

    def adjust(self, meter: str, delta: int) -> int:
        if meter not in METER_BOUNDS:
            raise KeyError(f"Unknown meter: {meter}")
        setattr(self, meter, getattr(self, meter) + int(delta))
        return getattr(self, meter)

    def record_action(self, action: ActionId) -> None:
        history = list(self.action_history)
        history.append(action)
        self.action_history = history[-HISTORY_LIMIT:]

    def snapshot(self) -> Dict[str, Any]:
        return {
            "day": self.day,
            "stagnation": self.stagnation,
            "growth": self.growth,
            "max_growth": self.max_growth,
            "old_man_mood": self.old_man_mood,
            "ingredient_quality": self.ingredient_quality,
            "current_ingredients": self.current_ingredients,
            "technical_debt": self.technical_debt,
            "tradition_score": self.tradition_score,
            "last_action": self.last_action.value if self.last_action else None,
            "action_history": [a.value for a in self.action_history],
            "current_episode": self.current_episode,
            "special_challenge_success": self.special_challenge_success,
            "special_customer": self.special_customer.to_dict() if self.special_customer else None,
            "requirement_change_active": self.requirement_change_active,
            "perfect_cycle_count": self.perfect_cycle_count,
            "hybrid_moment_triggered": self.hybrid_moment_triggered,
            "has_chef_knife": self.has_chef_knife,
            "intro_complete": self.intro_complete,
            "player_choice": self.player_choice,
        }
