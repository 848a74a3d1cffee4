"""
Resolves one player action against the session's MeterState.

The order of operations is fixed; every step reads the meters as the previous
step left them:

  1. advance the day, record the action, clear the requirement-change flag
  2. technical-debt drag on stagnation
  3. tradition drift (episode 1) and the one-time hybrid moment
  4. repetition penalty or variety reward
  5. perfect-cycle bonus
  6. remember the action
  7. success probability and the single success draw
  8. outcome table, quality decay, random events
  9. growth cap
 10. episode evaluation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from engine.actions import ActionId, parse_action
from engine.balance import Balance
from engine.combo import ComboTracker
from engine.dice import Dice
from engine.meters import MeterState
from engine.random_events import RandomEvent, trigger_events

logger = logging.getLogger(__name__)


# Interlude keys, in the order they play after a resolution.
# script.json maps each key to a scene id.
HYBRID_MOMENT = "hybrid_moment"
STAGNATION_CRISIS = "stagnation_crisis"
PERFECT_CYCLE = "perfect_cycle"


@dataclass
class ActionReport:
    action: ActionId
    day: int
    success: bool
    success_rate: float
    repeated: bool = False
    perfect_cycle: bool = False
    cycle_count: int = 0
    bonus: Dict[str, int] = field(default_factory=dict)
    messages: List[str] = field(default_factory=list)
    events: List[RandomEvent] = field(default_factory=list)
    interludes: List[str] = field(default_factory=list)
    transitions: List[Any] = field(default_factory=list)
    state: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "action_name": self.action.display_name,
            "day": self.day,
            "success": self.success,
            "success_rate": self.success_rate,
            "repeated": self.repeated,
            "perfect_cycle": self.perfect_cycle,
            "cycle_count": self.cycle_count,
            "bonus": dict(self.bonus),
            "messages": list(self.messages),
            "events": [e.to_dict() for e in self.events],
            "interludes": list(self.interludes),
            "transitions": [t.to_dict() for t in self.transitions],
            "state": dict(self.state),
        }


def is_defeated(state: MeterState, balance: Optional[Balance] = None) -> bool:
    b = balance or Balance()
    return (
        state.stagnation >= b.defeat_stagnation
        or state.ingredient_quality <= 0
        or state.old_man_mood <= 0
    )


def is_terminal(state: MeterState, balance: Optional[Balance] = None) -> bool:
    return state.growth >= state.max_growth or is_defeated(state, balance)


def success_rate(state: MeterState, action: ActionId, balance: Optional[Balance] = None) -> float:
    """
    Base rate minus stacked penalties. Not floored: a rate at or below zero
    simply never succeeds.
    """
    b = balance or Balance()
    rate = b.base_success
    if state.ingredient_quality < b.low_quality_threshold:
        rate -= b.low_quality_penalty
    if state.old_man_mood < b.low_mood_threshold:
        rate -= b.low_mood_penalty
    if state.current_ingredients == 0 and action != ActionId.MAINTENANCE:
        rate -= b.no_ingredients_penalty
    if state.technical_debt > b.high_debt_threshold:
        rate -= b.high_debt_penalty
    return round(rate, 4)


class ActionResolver:
    def __init__(
        self,
        state: MeterState,
        dice: Optional[Dice] = None,
        balance: Optional[Balance] = None,
        episodes=None,
    ):
        """
        episodes: optional EpisodeController; when present its evaluate()
        runs last and its transitions are attached to the report.
        """
        self.state = state
        self.dice = dice or Dice()
        self.balance = balance or Balance()
        self.episodes = episodes

    def is_terminal(self) -> bool:
        return is_terminal(self.state, self.balance)

    def resolve(self, action) -> Optional[ActionReport]:
        """
        Apply one action. Returns None (and changes nothing) when the action
        id is unknown or a terminal condition already holds.
        """
        act = parse_action(action)
        if act is None:
            logger.warning("Ignoring unknown action: %r", action)
            return None
        if self.is_terminal():
            logger.warning("Ignoring %s: game already over", act.value)
            return None

        s = self.state
        b = self.balance

        # 1. new day
        report_day = s.day
        s.day += 1
        s.record_action(act)
        s.requirement_change_active = False
        messages = [f"DAY {report_day} retrospective"]
        interludes: List[str] = []

        # 2. technical debt drag
        if s.technical_debt > 0:
            s.adjust("stagnation", s.technical_debt // b.debt_drag_divisor)

        # 3. tradition drift
        if s.current_episode == 1:
            s.adjust("tradition_score", b.tradition_deltas.get(act.value, 0))
            if s.day == b.hybrid_moment_day and not s.hybrid_moment_triggered:
                s.hybrid_moment_triggered = True
                interludes.append(HYBRID_MOMENT)

        # 4. repetition
        repeated = act == s.last_action
        if repeated:
            s.adjust("stagnation", b.repeat_stagnation)
            s.adjust("old_man_mood", b.repeat_mood)
            s.adjust("technical_debt", b.repeat_debt)
            s.adjust("tradition_score", b.repeat_tradition)
            s.perfect_cycle_count = 0
            interludes.append(STAGNATION_CRISIS)
            messages.append(
                f"Same action again! Stagnation up, trust down. Technical debt +{b.repeat_debt}"
            )
        else:
            s.adjust("stagnation", b.variety_stagnation)
            messages.append("A fresh approach! The routine cracks.")

        # 5. perfect cycle
        bonus: Dict[str, int] = {}
        perfect = ComboTracker.is_perfect_cycle(s.action_history)
        if perfect:
            s.perfect_cycle_count += 1
            streak = s.perfect_cycle_count > 1
            bonus = {
                "growth": b.cycle_growth + (b.cycle_streak_growth if streak else 0),
                "stagnation": b.cycle_stagnation + (b.cycle_streak_stagnation if streak else 0),
                "mood": b.cycle_mood,
                "debt": min(s.technical_debt, b.cycle_debt_relief),
            }
            s.adjust("growth", bonus["growth"])
            s.adjust("stagnation", -bonus["stagnation"])
            s.adjust("old_man_mood", bonus["mood"])
            s.adjust("technical_debt", -bonus["debt"])
            interludes.append(PERFECT_CYCLE)
            messages.append(
                f"Perfect cycle! Growth +{bonus['growth']}, stagnation -{bonus['stagnation']}, debt -{bonus['debt']}"
            )
            if streak:
                messages.append(f"{s.perfect_cycle_count}x streak bonus!")
        else:
            s.perfect_cycle_count = 0

        # 6.
        s.last_action = act

        # 7. success draw
        rate = success_rate(s, act, b)
        success = self.dice.chance(rate)

        # 8. outcome, decay, random events
        messages.append(self._apply_outcome(act, success))
        s.adjust("ingredient_quality", b.quality_decay)
        events = trigger_events(s, self.dice, b)
        messages.extend(e.text for e in events)

        # 9. growth cap
        if s.growth > s.max_growth:
            s.growth = s.max_growth

        report = ActionReport(
            action=act,
            day=report_day,
            success=success,
            success_rate=rate,
            repeated=repeated,
            perfect_cycle=perfect,
            cycle_count=s.perfect_cycle_count,
            bonus=bonus,
            messages=messages,
            events=events,
            interludes=interludes,
        )

        # 10. episode evaluation
        if self.episodes is not None:
            report.transitions = self.episodes.evaluate()

        report.state = s.snapshot()
        logger.debug(
            "Day %s: %s success=%s rate=%.2f perfect=%s",
            report_day, act.value, success, rate, perfect,
        )
        return report

    # ──────────────────────────────────────────────
    # Outcome table
    # ──────────────────────────────────────────────

    def _apply_outcome(self, act: ActionId, success: bool) -> str:
        s = self.state
        b = self.balance

        if act == ActionId.TASTE_ITERATION:
            s.adjust("current_ingredients", -1)
            customer = s.special_customer
            if customer is not None and success:
                s.adjust("growth", customer.bonus)
                s.special_challenge_success += 1
                s.special_customer = None
                return f"Iteration tasting: {customer.name}'s order delivered! Growth +{customer.bonus}"
            if success:
                s.adjust("growth", b.taste_growth)
                s.adjust("stagnation", b.taste_stagnation)
                s.adjust("old_man_mood", b.taste_mood)
                return f"Iteration tasting: a new flavour combination works! Growth +{b.taste_growth}"
            s.adjust("old_man_mood", b.taste_fail_mood)
            s.adjust("technical_debt", b.taste_fail_debt)
            return f"Iteration tasting: failed! The Old Master is displeased. Technical debt +{b.taste_fail_debt}"

        if act == ActionId.MAINTENANCE:
            if success:
                s.adjust("ingredient_quality", b.maintenance_quality)
                s.adjust("stagnation", b.maintenance_stagnation)
                s.adjust("current_ingredients", b.maintenance_ingredients)
                s.adjust("technical_debt", b.maintenance_debt)
                return (
                    f"CI/CD maintenance: kitchen optimised! Quality +{b.maintenance_quality}, "
                    f"ingredients +{b.maintenance_ingredients}, debt {b.maintenance_debt}"
                )
            s.adjust("ingredient_quality", b.maintenance_fail_quality)
            return "CI/CD maintenance: the automation broke. Quality drops."

        if success:
            s.adjust("growth", b.feedback_growth)
            s.adjust("old_man_mood", b.feedback_mood)
            return f"User feedback: customers share a valuable insight! Growth +{b.feedback_growth}"
        return "User feedback: the customers order \"the usual\". Nothing learned."
