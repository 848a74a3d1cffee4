"""
Flavour text that reacts to the meters: Mina's advice, the agile maxim shown
after a perfect cycle, and the sprint goal line shown each day.

Nothing here mutates state.
"""

from __future__ import annotations

from typing import List

from engine.combo import ComboTracker
from engine.dice import Dice
from engine.meters import MeterState


AGILE_TIPS = [
    "Small batches reduce risk. Deliver value a little at a time!",
    "Feedback loops are essential. Listen to your customers!",
    "Continuous improvement beats a perfect plan.",
    "Welcome change. It is your competitive edge!",
    "Working software is the primary measure of progress.",
    "The best architectures emerge from self-organising teams.",
    "Simplicity is the art of maximising the work not done.",
    "Reflect regularly and adjust your behaviour.",
    "A sustainable pace keeps the team healthy.",
    "Face-to-face conversation is the most efficient way to communicate.",
]

DAILY_CHALLENGES = [
    "A busy day. Fast turnaround (CI/CD) matters!",
    "The Old Master is watching. Go easy on big changes (iteration tasting).",
    "Supply trouble. Save your resources!",
    "Lots of vague orders. A perfect chance to hear the customers!",
    "Watch out for the old equipment (technical debt). A day for CI/CD.",
]

GOOD_RHYTHM_TIP = "Nice rhythm! Keep mixing up your actions!"


def advisor_candidates(state: MeterState) -> List[str]:
    tips: List[str] = []
    if state.stagnation >= 70:
        tips.append("Stagnation is high! Try a different action!")
    if state.ingredient_quality < 30:
        tips.append("Quality is slipping... CI/CD maintenance will fix it!")
    if state.old_man_mood < 40:
        tips.append("Dad looks grumpy... stack up some wins!")
    if state.technical_debt > 5:
        tips.append("Technical debt is piling up. Pay it down with CI/CD!")
    if state.current_ingredients == 0:
        tips.append("We're out of ingredients! Restock with CI/CD maintenance!")

    missing = ComboTracker.missing_actions(state.action_history)
    if len(state.action_history) >= 2 and len(missing) == 1:
        tips.append(f"Next, \"{missing[0].display_name}\" for a perfect cycle!")

    if not tips:
        tips.append(GOOD_RHYTHM_TIP)
    return tips


def advisor_tip(state: MeterState, dice: Dice) -> str:
    return dice.pick(advisor_candidates(state))


def agile_tip(dice: Dice) -> str:
    return dice.pick(AGILE_TIPS)


def daily_challenge(state: MeterState, dice: Dice) -> str:
    if state.special_customer is not None:
        return f"URGENT: handle {state.special_customer.name}'s order!"
    if state.requirement_change_active:
        return "Scope change: the customer changed their order!"
    return dice.pick(DAILY_CHALLENGES)
