"""
End-of-turn random events.

Three independent rolls, in order:
  1. requirement change   (a present, changeable special customer swaps its order)
  2. negative event       (one of four kitchen mishaps)
  3. customer arrival     (episode 2 only, when nobody is waiting)

A roll whose precondition does not hold draws nothing, so a scripted Dice
sees exactly the draws that matter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from engine.balance import Balance
from engine.dice import Dice
from engine.meters import MeterState, SpecialCustomer

logger = logging.getLogger(__name__)


REQUIREMENT_CHANGES = [
    "Actually, make it crunchy!",
    "Wait, I want it cold!",
    "Can you add some sparkle?",
]

SPECIAL_CUSTOMERS = [
    {"name": "Slime", "requirement": "An extra-wobbly gel", "bonus": 15, "can_change_requirement": True},
    {"name": "Dragon", "requirement": "A fire-breathing spice blend", "bonus": 25, "can_change_requirement": False},
]


@dataclass
class NegativeEvent:
    kind: str
    text: str
    apply: Callable[[MeterState], None]


NEGATIVE_EVENTS: List[NegativeEvent] = [
    NegativeEvent(
        "quality_drop",
        "Equipment breakdown! Ingredient quality plummets.",
        lambda s: s.adjust("ingredient_quality", -20),
    ),
    NegativeEvent(
        "oldman_anger",
        "The Old Master fumes: \"Why won't you follow the recipe!\"",
        lambda s: s.adjust("old_man_mood", -20),
    ),
    NegativeEvent(
        "slow_day",
        "A quiet day. Nobody asks for anything new. Stagnation rises.",
        lambda s: s.adjust("stagnation", 10),
    ),
    NegativeEvent(
        "tech_debt",
        "Legacy code! Old kitchen habits drag everyone down.",
        lambda s: s.adjust("technical_debt", 3),
    ),
]


@dataclass
class RandomEvent:
    kind: str
    text: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "text": self.text, **self.data}


def trigger_events(state: MeterState, dice: Dice, balance: Optional[Balance] = None) -> List[RandomEvent]:
    b = balance or Balance()
    fired: List[RandomEvent] = []

    customer = state.special_customer
    episode = state.current_episode

    # 1. requirement change
    if customer is not None and customer.can_change_requirement and dice.chance(b.requirement_change_chance):
        new_req = dice.pick(REQUIREMENT_CHANGES)
        customer.requirement = new_req
        state.requirement_change_active = True
        state.adjust("technical_debt", b.requirement_change_debt)
        fired.append(RandomEvent(
            "requirement_changed",
            f"Scope change! {customer.name}: \"{new_req}\" (technical debt +{b.requirement_change_debt})",
            {"customer": customer.name, "requirement": new_req},
        ))

    # 2. negative event
    if dice.chance(b.negative_event_chance):
        event = dice.pick(NEGATIVE_EVENTS)
        event.apply(state)
        fired.append(RandomEvent(event.kind, event.text))

    # 3. special customer arrival
    if episode == 2 and customer is None and dice.chance(b.customer_arrival_chance):
        entry = dice.pick(SPECIAL_CUSTOMERS)
        arrived = SpecialCustomer(**entry)
        state.special_customer = arrived
        fired.append(RandomEvent(
            "special_customer_arrived",
            f"New customer: {arrived.name} orders \"{arrived.requirement}\"!",
            {"customer": arrived.to_dict()},
        ))

    for ev in fired:
        logger.debug("Random event: %s", ev.kind)
    return fired
