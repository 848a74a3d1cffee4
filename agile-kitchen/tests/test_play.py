import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.actions import ActionId  # noqa: E402
from engine.balance import Balance  # noqa: E402
from engine.dice import Dice  # noqa: E402
from game_session import GameSession  # noqa: E402
from play import build_parser, combo_hint, game_step  # noqa: E402
from ui.provider import UIProvider  # noqa: E402
from ui.ui import UI  # noqa: E402


class DummyProvider(UIProvider):
    def __init__(self, inputs):
        self.inputs = list(inputs)
        self.out = []

    def _pop(self):
        return self.inputs.pop(0) if self.inputs else ""

    def scene(self, text, data=None):
        self.out.append(("scene", text))

    def dialogue(self, speaker, text, data=None):
        self.out.append(("dialogue", speaker, text))

    def meters(self, snapshot, data=None):
        self.out.append(("meters", snapshot.get("day")))

    def system(self, text, data=None):
        self.out.append(("system", text))

    def error(self, text, data=None):
        self.out.append(("error", text))

    def choice(self, prompt, options, data=None):
        self.out.append(("choice", prompt, options))
        return int(self._pop() or 0)

    def text_input(self, prompt, data=None):
        return self._pop()


class FailingDice(Dice):
    def sample(self):
        return 0.99


def make_session():
    return GameSession(
        balance=Balance().with_overrides(typing_speed_ms=0),
        dice=FailingDice(),
        flavor_dice=Dice(4),
    )


class TestGameStep(unittest.TestCase):
    def test_action_menu(self):
        session = make_session()
        session.start(skip_intro=True)
        provider = DummyProvider(["2", "6"])
        ui = UI(provider)
        self.assertTrue(game_step(session, ui))
        self.assertEqual(session.state.day, 2)
        self.assertEqual(session.state.last_action, ActionId.FEEDBACK)
        self.assertIn(("meters", 1), provider.out)
        self.assertFalse(game_step(session, ui))

    def test_dialogue_prompt_and_choice(self):
        session = make_session()
        session.start()
        provider = DummyProvider(["", "s", "s", "s", "1"])
        ui = UI(provider)
        game_step(session, ui)
        self.assertEqual(session.sequencer.progress()["current"], 2)
        for _ in range(3):
            game_step(session, ui)
        self.assertTrue(session.graph.awaiting_choice)
        game_step(session, ui)
        self.assertEqual(session.state.player_choice, "agile")
        spoken = [o for o in provider.out if o[0] == "dialogue"]
        self.assertEqual(spoken[0][1], "")

    def test_quit_after_game_over(self):
        session = make_session()
        session.start(skip_intro=True)
        session.state.stagnation = 95
        self.assertFalse(game_step(session, UI(DummyProvider(["n"]))))

    def test_combo_hint(self):
        session = make_session()
        self.assertIsNone(combo_hint(session))
        session.state.record_action(ActionId.TASTE_ITERATION)
        session.state.record_action(ActionId.MAINTENANCE)
        self.assertIn("User Feedback", combo_hint(session))

    def test_parser(self):
        args = build_parser().parse_args(["--seed", "9", "--skip-intro", "--typing-speed", "0"])
        self.assertEqual(args.seed, 9)
        self.assertTrue(args.skip_intro)
        self.assertEqual(args.typing_speed, 0)
        self.assertFalse(args.auto)


if __name__ == "__main__":
    unittest.main()
