import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.actions import ActionId  # noqa: E402
from engine.advisor import (  # noqa: E402
    AGILE_TIPS,
    DAILY_CHALLENGES,
    GOOD_RHYTHM_TIP,
    advisor_candidates,
    advisor_tip,
    agile_tip,
    daily_challenge,
)
from engine.dice import Dice  # noqa: E402
from engine.meters import MeterState, SpecialCustomer  # noqa: E402


class TestAdvisor(unittest.TestCase):
    def test_calm_kitchen_gets_rhythm_tip(self):
        self.assertEqual(advisor_candidates(MeterState()), [GOOD_RHYTHM_TIP])

    def test_warnings_follow_meters(self):
        s = MeterState(stagnation=75, ingredient_quality=10, current_ingredients=0)
        tips = advisor_candidates(s)
        self.assertEqual(len(tips), 3)
        self.assertNotIn(GOOD_RHYTHM_TIP, tips)

    def test_combo_hint_names_missing_action(self):
        s = MeterState()
        s.record_action(ActionId.TASTE_ITERATION)
        s.record_action(ActionId.FEEDBACK)
        self.assertIn("CI/CD Maintenance", advisor_candidates(s)[-1])

    def test_tip_is_one_of_the_candidates(self):
        s = MeterState(old_man_mood=20, technical_debt=8)
        self.assertIn(advisor_tip(s, Dice(3)), advisor_candidates(s))
        self.assertIn(agile_tip(Dice(3)), AGILE_TIPS)

    def test_daily_challenge_priorities(self):
        s = MeterState()
        self.assertIn(daily_challenge(s, Dice(1)), DAILY_CHALLENGES)
        s.requirement_change_active = True
        self.assertIn("changed their order", daily_challenge(s, Dice(1)))
        s.special_customer = SpecialCustomer("Slime", "gel", 15, True)
        self.assertIn("Slime", daily_challenge(s, Dice(1)))


if __name__ == "__main__":
    unittest.main()
