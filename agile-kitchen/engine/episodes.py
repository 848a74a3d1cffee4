"""
Episode progression.

    EPISODE_1 ──goal──▶ EPISODE_1_CLEAR ──continue_episode()──▶ EPISODE_2
    EPISODE_2 ──goal──▶ EPISODE_3 ──goal──▶ VICTORY
    any episode ──defeat──▶ DEFEAT

Goals and the defeat check are condition dicts evaluated by ConditionRegistry,
so episode data can describe them without code.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from engine.balance import Balance
from engine.meters import MeterState
from script.conditions import ConditionRegistry

logger = logging.getLogger(__name__)


class EpisodePhase(str, Enum):
    EPISODE_1 = "episode_1"
    EPISODE_1_CLEAR = "episode_1_clear"
    EPISODE_2 = "episode_2"
    EPISODE_3 = "episode_3"
    VICTORY = "victory"
    DEFEAT = "defeat"

    @property
    def terminal(self) -> bool:
        return self in (EpisodePhase.VICTORY, EpisodePhase.DEFEAT)


PLAYING_PHASES = {
    1: EpisodePhase.EPISODE_1,
    2: EpisodePhase.EPISODE_2,
    3: EpisodePhase.EPISODE_3,
}


@dataclass
class EpisodeGoal:
    episode: int
    title: str
    description: str
    condition: Dict[str, Any]


@dataclass
class Transition:
    kind: str  # "episode_cleared" | "victory" | "defeat"
    episode: Optional[int] = None
    phase: Optional[EpisodePhase] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "episode": self.episode,
            "phase": self.phase.value if self.phase else None,
            **self.data,
        }


def default_goals(balance: Optional[Balance] = None) -> Dict[int, EpisodeGoal]:
    b = balance or Balance()
    return {
        1: EpisodeGoal(
            1,
            "Episode 1: Break the Waterfall",
            f"Reach growth {b.episode1_growth_goal} while keeping tradition between "
            f"{b.tradition_balanced_min} and {b.tradition_balanced_max}",
            {"all": [
                {"type": "meter", "meter": "growth", "op": ">=", "value": b.episode1_growth_goal},
                {"type": "meter_between", "meter": "tradition_score",
                 "min": b.tradition_balanced_min, "max": b.tradition_balanced_max},
            ]},
        ),
        2: EpisodeGoal(
            2,
            "Episode 2: Impossible Orders",
            f"Satisfy {b.episode2_success_goal} special customers",
            {"type": "meter", "meter": "special_challenge_success", "op": ">=", "value": b.episode2_success_goal},
        ),
        3: EpisodeGoal(
            3,
            "Final Episode: Win Over the Old Master",
            f"Max out growth with the Old Master's mood at {b.episode3_mood_goal} or more",
            {"all": [
                {"type": "growth_at_cap"},
                {"type": "meter", "meter": "old_man_mood", "op": ">=", "value": b.episode3_mood_goal},
            ]},
        ),
    }


def defeat_condition(balance: Optional[Balance] = None) -> Dict[str, Any]:
    b = balance or Balance()
    return {"any": [
        {"type": "meter", "meter": "stagnation", "op": ">=", "value": b.defeat_stagnation},
        {"type": "meter", "meter": "ingredient_quality", "op": "<=", "value": 0},
        {"type": "meter", "meter": "old_man_mood", "op": "<=", "value": 0},
    ]}


def load_goals(path: Optional[Path], balance: Optional[Balance] = None) -> Dict[int, EpisodeGoal]:
    """
    Start from the built-in goals and apply titles, descriptions and
    (optionally) conditions from an episodes.json file.
    """
    goals = default_goals(balance)
    if path is None or not Path(path).exists():
        return goals

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    for entry in data.get("episodes", []):
        ep = int(entry["episode"])
        if ep not in goals:
            raise KeyError(f"Unknown episode in {path}: {ep}")
        goal = goals[ep]
        goal.title = entry.get("title", goal.title)
        goal.description = entry.get("description", goal.description)
        if "condition" in entry:
            goal.condition = entry["condition"]
    return goals


class EpisodeController:
    def __init__(
        self,
        state: MeterState,
        balance: Optional[Balance] = None,
        goals: Optional[Dict[int, EpisodeGoal]] = None,
        conditions: Optional[ConditionRegistry] = None,
    ):
        self.state = state
        self.balance = balance or Balance()
        self.goals = goals or default_goals(self.balance)
        self.conditions = conditions or ConditionRegistry()
        self.defeat = defeat_condition(self.balance)
        self.phase = PLAYING_PHASES[state.current_episode]

    # ──────────────────────────────────────────────
    # Queries
    # ──────────────────────────────────────────────

    @property
    def accepts_actions(self) -> bool:
        return self.phase in PLAYING_PHASES.values()

    @property
    def current_goal(self) -> EpisodeGoal:
        return self.goals[self.state.current_episode]

    def goal_met(self, episode: Optional[int] = None) -> bool:
        goal = self.goals[episode or self.state.current_episode]
        return self.conditions.evaluate(goal.condition, self._context())

    def is_defeated(self) -> bool:
        return self.conditions.evaluate(self.defeat, self._context())

    def goal_progress(self) -> str:
        s = self.state
        b = self.balance
        ep = s.current_episode
        if ep == 1:
            return (
                f"Goal: growth {s.growth}/{b.episode1_growth_goal}, "
                f"tradition {s.tradition_score} (keep {b.tradition_balanced_min}-{b.tradition_balanced_max})"
            )
        if ep == 2:
            return f"Goal: special customers {s.special_challenge_success}/{b.episode2_success_goal}"
        return f"Goal: growth {s.growth}/{s.max_growth} & mood {s.old_man_mood}/{b.episode3_mood_goal}+"

    # ──────────────────────────────────────────────
    # Transitions
    # ──────────────────────────────────────────────

    def evaluate(self) -> List[Transition]:
        """
        Called after every resolved action. Defeat wins over progress.
        Episode 2 -> 3 and the episode 3 victory check can both fire in one call.
        """
        if not self.accepts_actions:
            return []

        if self.is_defeated():
            self.phase = EpisodePhase.DEFEAT
            logger.info("Defeat on day %s", self.state.day)
            return [Transition("defeat", self.state.current_episode, self.phase)]

        out: List[Transition] = []

        if self.phase == EpisodePhase.EPISODE_1 and self.goal_met(1):
            self.phase = EpisodePhase.EPISODE_1_CLEAR
            self.state.has_chef_knife = True
            out.append(Transition("episode_cleared", 1, self.phase))
            logger.info("Episode 1 cleared on day %s", self.state.day)

        elif self.phase == EpisodePhase.EPISODE_2 and self.goal_met(2):
            self.state.current_episode = 3
            self.phase = EpisodePhase.EPISODE_3
            out.append(Transition("episode_cleared", 2, self.phase))
            logger.info("Episode 2 cleared on day %s", self.state.day)

        if self.phase == EpisodePhase.EPISODE_3 and self.goal_met(3):
            self.phase = EpisodePhase.VICTORY
            out.append(Transition("victory", 3, self.phase))
            logger.info("Victory on day %s", self.state.day)

        return out

    def continue_episode(self) -> bool:
        """
        Leave the episode 1 clear screen and start episode 2.
        Returns False when there is nothing to continue.
        """
        if self.phase != EpisodePhase.EPISODE_1_CLEAR:
            logger.warning("continue_episode ignored in phase %s", self.phase.value)
            return False

        s = self.state
        s.current_episode = 2
        s.tradition_score = self.balance.initial_tradition
        s.special_challenge_success = 0
        s.hybrid_moment_triggered = False
        self.phase = EpisodePhase.EPISODE_2
        logger.info("Episode 2 started")
        return True

    def _context(self) -> Dict[str, Any]:
        return {"state": self.state, "phase": self.phase}
