"""
Tuning constants for the kitchen simulation.

Every number the resolver, the random-event roll, the episode controller and
the dialogue timing depend on lives here. Defaults are the shipped values;
`game-data/balance.json` may override any of them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Balance:
    # growth cap
    max_growth: int = 50

    # starting meters
    initial_stagnation: int = 50
    initial_growth: int = 0
    initial_mood: int = 70
    initial_quality: int = 50
    initial_ingredients: int = 3
    initial_tradition: int = 50
    initial_debt: int = 0

    # defeat thresholds
    defeat_stagnation: int = 90

    # tradition drift per action (episode 1 only)
    tradition_deltas: Dict[str, int] = field(default_factory=lambda: {
        "taste_iteration": -8,
        "maintenance": 3,
        "feedback": -5,
    })
    tradition_balanced_min: int = 35
    tradition_balanced_max: int = 65
    hybrid_moment_day: int = 6

    # technical debt drag: stagnation += debt // debt_drag_divisor
    debt_drag_divisor: int = 5

    # repetition penalty / variety reward
    repeat_stagnation: int = 12
    repeat_mood: int = -5
    repeat_debt: int = 2
    repeat_tradition: int = 5
    variety_stagnation: int = -7

    # perfect cycle
    cycle_growth: int = 10
    cycle_streak_growth: int = 5
    cycle_stagnation: int = 15
    cycle_streak_stagnation: int = 5
    cycle_mood: int = 5
    cycle_debt_relief: int = 3

    # success rate
    base_success: float = 0.45
    low_quality_threshold: int = 30
    low_quality_penalty: float = 0.30
    low_mood_threshold: int = 30
    low_mood_penalty: float = 0.15
    no_ingredients_penalty: float = 0.20
    high_debt_threshold: int = 10
    high_debt_penalty: float = 0.10

    # outcome table
    taste_growth: int = 15
    taste_stagnation: int = -15
    taste_mood: int = 10
    taste_fail_mood: int = -15
    taste_fail_debt: int = 1
    maintenance_quality: int = 30
    maintenance_stagnation: int = -5
    maintenance_ingredients: int = 2
    maintenance_debt: int = -2
    maintenance_fail_quality: int = -10
    feedback_growth: int = 20
    feedback_mood: int = 5

    # end of turn
    quality_decay: int = -5

    # random events
    requirement_change_chance: float = 0.30
    requirement_change_debt: int = 5
    negative_event_chance: float = 0.35
    customer_arrival_chance: float = 0.25

    # episode goals
    episode1_growth_goal: int = 20
    episode2_success_goal: int = 2
    episode3_mood_goal: int = 80

    # timing (milliseconds of scheduler time)
    typing_speed_ms: int = 30
    celebration_delay_ms: int = 500
    character_stagger_ms: int = 400
    auto_advance_ms: int = 2500

    def with_overrides(self, **overrides: Any) -> "Balance":
        _check_keys(overrides)
        return replace(self, **overrides)


def _check_keys(data: Dict[str, Any]) -> None:
    known = {f.name for f in fields(Balance)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown balance keys: {', '.join(unknown)}")


def load_balance(path: Optional[Path] = None) -> Balance:
    """
    Load balance overrides from JSON. A missing file yields the defaults.
    """
    if path is None or not Path(path).exists():
        return Balance()
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Balance file must hold an object: {path}")
    _check_keys(data)
    return Balance(**data)
