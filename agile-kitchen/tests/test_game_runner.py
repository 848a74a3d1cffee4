import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.balance import Balance  # noqa: E402
from engine.dice import Dice  # noqa: E402
from game_session import GameSession  # noqa: E402


class ScriptedDice(Dice):
    """Every draw fails."""

    def sample(self):
        return 0.99


def make_session():
    return GameSession(
        balance=Balance().with_overrides(typing_speed_ms=0),
        dice=ScriptedDice(),
        flavor_dice=Dice(12),
    )


def types(events):
    return [e["type"] for e in events]


class TestGameStep(unittest.TestCase):
    def setUp(self):
        self.session = make_session()

    def test_start_with_skip_intro(self):
        evs = self.session.step({"action": "start", "skip_intro": True})
        self.assertIn("intro_completed", types(evs))
        evs = self.session.step({"action": "start"})
        self.assertEqual(types(evs), ["error"])

    def test_act(self):
        self.session.step({"action": "start", "skip_intro": True})
        evs = self.session.step({"action": "act", "kitchen_action": "3"})
        self.assertEqual(evs[0]["type"], "action_resolved")
        self.assertEqual(evs[0]["report"]["action"], "feedback")
        self.assertEqual(self.session.state.day, 2)

    def test_invalid_inputs_report_errors(self):
        self.session.step({"action": "start", "skip_intro": True})
        for inp in (
            {"action": "act", "kitchen_action": "bake"},
            {"action": "dance"},
            {},
            {"action": "choose"},
            {"action": "choose", "choice": "agile"},
            {"action": "continue"},
        ):
            evs = self.session.step(inp)
            self.assertEqual(types(evs), ["error"], inp)

    def test_action_rejected_during_intro(self):
        self.session.step({"action": "start"})
        evs = self.session.step({"action": "act", "kitchen_action": "feedback"})
        self.assertEqual(evs[-1]["text"], "Action not accepted right now")

    def test_dialogue_and_choice_steps(self):
        self.session.step({"action": "start"})
        while self.session.sequencer.is_active:
            self.session.step({"action": "skip"})
        evs = self.session.step({"action": "choose", "choice": "obedient"})
        self.assertIn("choice_selected", types(evs))
        evs = self.session.step({"action": "advance"})
        self.assertIn("dialogue_line_shown", types(evs))

    def test_elapsed_time_runs_timers(self):
        self.session.step({"action": "start", "skip_intro": True})
        for a in ("taste_iteration", "maintenance", "feedback"):
            self.session.step({"action": "act", "kitchen_action": a})
        evs = self.session.step({"action": "tip", "elapsed_ms": 500})
        self.assertEqual(evs[0]["type"], "advisor_tip")
        self.assertIn("agile_tip", types(evs))
        self.assertEqual(self.session.graph.current_scene_id, "PERFECT_CYCLE")

    def test_wait_and_state(self):
        self.session.step({"action": "start", "skip_intro": True})
        self.session.step({"action": "act", "kitchen_action": "maintenance"})
        self.session.step({"action": "act", "kitchen_action": "maintenance"})
        self.session.step({"action": "wait"})
        self.assertEqual(self.session.graph.current_scene_id, "STAGNATION_CRISIS")
        evs = self.session.step({"action": "state"})
        self.assertEqual(evs[0]["type"], "session_state")
        self.assertEqual(evs[0]["scene_id"], "STAGNATION_CRISIS")

    def test_auto_and_restart(self):
        self.session.step({"action": "start", "skip_intro": True})
        evs = self.session.step({"action": "auto"})
        self.assertEqual(evs, [{"type": "auto_mode_changed", "enabled": True}])
        evs = self.session.step({"action": "restart", "skip_intro": True})
        self.assertIn("intro_completed", types(evs))
        self.assertTrue(self.session.auto_mode)


if __name__ == "__main__":
    unittest.main()
