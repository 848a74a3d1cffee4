import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.meters import MeterState  # noqa: E402
from script.conditions import ConditionRegistry, compare  # noqa: E402


def ctx(**meters):
    return {"state": MeterState(**meters)}


class TestConditionRegistry(unittest.TestCase):
    def setUp(self):
        self.reg = ConditionRegistry()

    def test_meter_condition(self):
        cond = {"type": "meter", "meter": "growth", "op": ">=", "value": 20}
        self.assertTrue(self.reg.evaluate(cond, ctx(growth=20)))
        self.assertFalse(self.reg.evaluate(cond, ctx(growth=19)))

    def test_meter_between_is_inclusive(self):
        cond = {"type": "meter_between", "meter": "tradition_score", "min": 35, "max": 65}
        self.assertTrue(self.reg.evaluate(cond, ctx(tradition_score=35)))
        self.assertTrue(self.reg.evaluate(cond, ctx(tradition_score=65)))
        self.assertFalse(self.reg.evaluate(cond, ctx(tradition_score=66)))

    def test_growth_at_cap(self):
        cond = {"type": "growth_at_cap"}
        self.assertTrue(self.reg.evaluate(cond, ctx(max_growth=30, growth=30)))
        self.assertFalse(self.reg.evaluate(cond, ctx(growth=49)))

    def test_nested_all_any_not(self):
        cond = {
            "all": [
                {"type": "meter", "meter": "growth", "op": ">=", "value": 10},
                {"any": [
                    {"type": "growth_at_cap"},
                    {"type": "meter_between", "meter": "tradition_score", "min": 35, "max": 65},
                ]},
                {"not": {"type": "meter", "meter": "stagnation", "op": ">=", "value": 90}},
            ]
        }
        self.assertTrue(self.reg.evaluate(cond, ctx(growth=10)))
        self.assertFalse(self.reg.evaluate(cond, ctx(growth=10, stagnation=95)))
        self.assertFalse(self.reg.evaluate(cond, ctx(growth=10, tradition_score=80)))

    def test_unknown_and_missing_type(self):
        with self.assertRaises(KeyError):
            self.reg.evaluate({"type": "moon_phase"}, ctx())
        with self.assertRaises(ValueError):
            self.reg.evaluate({"meter": "growth"}, ctx())

    def test_duplicate_registration(self):
        with self.assertRaises(ValueError):
            self.reg.register("meter", lambda c, x: True)
        self.reg.register("custom", lambda c, x: True)
        self.assertIn("custom", self.reg)

    def test_compare_rejects_unknown_operator(self):
        self.assertTrue(compare(3, "!=", 4))
        with self.assertRaises(ValueError):
            compare(1, "~", 1)


if __name__ == "__main__":
    unittest.main()
