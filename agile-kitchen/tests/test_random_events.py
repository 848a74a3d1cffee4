import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.dice import Dice  # noqa: E402
from engine.meters import MeterState, SpecialCustomer  # noqa: E402
from engine.random_events import REQUIREMENT_CHANGES, trigger_events  # noqa: E402


class ScriptedDice(Dice):
    """Replays fixed draws; 0.99 afterwards so every roll fails."""

    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)
        self.draws = 0

    def sample(self):
        self.draws += 1
        return self.values.pop(0) if self.values else 0.99


def slime():
    return SpecialCustomer("Slime", "An extra-wobbly gel", 15, True)


def dragon():
    return SpecialCustomer("Dragon", "A fire-breathing spice blend", 25, False)


class TestTriggerEvents(unittest.TestCase):
    def test_nothing_fires_on_high_draws(self):
        s = MeterState()
        dice = ScriptedDice([])
        self.assertEqual(trigger_events(s, dice), [])
        # episode 1, no customer: only the negative-event roll draws
        self.assertEqual(dice.draws, 1)

    def test_requirement_change_adds_debt(self):
        s = MeterState(current_episode=2)
        s.special_customer = slime()
        dice = ScriptedDice([0.1, 0.0])
        events = trigger_events(s, dice)
        self.assertEqual([e.kind for e in events], ["requirement_changed"])
        self.assertEqual(s.special_customer.requirement, REQUIREMENT_CHANGES[0])
        self.assertTrue(s.requirement_change_active)
        self.assertEqual(s.technical_debt, 5)
        # change roll, pick, negative roll; no arrival while a customer waits
        self.assertEqual(dice.draws, 3)

    def test_fixed_customer_never_changes(self):
        s = MeterState(current_episode=2)
        s.special_customer = dragon()
        dice = ScriptedDice([0.0, 0.0])
        events = trigger_events(s, dice)
        # first draw goes to the negative roll, second picks "quality_drop"
        self.assertEqual([e.kind for e in events], ["quality_drop"])
        self.assertEqual(s.ingredient_quality, 30)
        self.assertFalse(s.requirement_change_active)

    def test_negative_events_apply(self):
        cases = {
            0.3: ("oldman_anger", "old_man_mood", 50),
            0.6: ("slow_day", "stagnation", 60),
            0.8: ("tech_debt", "technical_debt", 3),
        }
        for pick, (kind, meter, expected) in cases.items():
            s = MeterState()
            events = trigger_events(s, ScriptedDice([0.0, pick]))
            self.assertEqual(events[0].kind, kind)
            self.assertEqual(getattr(s, meter), expected)

    def test_customer_arrives_in_episode_two(self):
        s = MeterState(current_episode=2)
        events = trigger_events(s, ScriptedDice([0.99, 0.1, 0.6]))
        self.assertEqual([e.kind for e in events], ["special_customer_arrived"])
        self.assertEqual(s.special_customer.name, "Dragon")
        self.assertEqual(events[0].to_dict()["customer"]["bonus"], 25)

    def test_no_arrival_outside_episode_two(self):
        for episode in (1, 3):
            s = MeterState(current_episode=episode)
            dice = ScriptedDice([0.99, 0.0, 0.0])
            trigger_events(s, dice)
            self.assertIsNone(s.special_customer)
            self.assertEqual(dice.draws, 1)


if __name__ == "__main__":
    unittest.main()
