import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.scheduler import Scheduler  # noqa: E402


class TestScheduler(unittest.TestCase):
    def test_call_later_runs_when_due(self):
        sched = Scheduler()
        calls = []
        sched.call_later(100, lambda: calls.append("a"))
        sched.advance(99)
        self.assertEqual(calls, [])
        sched.advance(1)
        self.assertEqual(calls, ["a"])
        self.assertEqual(sched.now_ms, 100)

    def test_due_order_then_insertion_order(self):
        sched = Scheduler()
        calls = []
        sched.call_later(50, lambda: calls.append("late"))
        sched.call_later(10, lambda: calls.append("first"))
        sched.call_later(10, lambda: calls.append("second"))
        ran = sched.advance(60)
        self.assertEqual(ran, 3)
        self.assertEqual(calls, ["first", "second", "late"])

    def test_cancelled_timer_never_runs(self):
        sched = Scheduler()
        calls = []
        handle = sched.call_later(10, lambda: calls.append("x"))
        sched.cancel(handle)
        sched.advance(100)
        self.assertEqual(calls, [])
        self.assertEqual(sched.pending(), 0)

    def test_call_every_repeats_until_cancelled(self):
        sched = Scheduler()
        calls = []
        handle = sched.call_every(30, lambda: calls.append(sched.now_ms))
        sched.advance(95)
        self.assertEqual(calls, [30, 60, 90])
        handle.cancel()
        sched.advance(100)
        self.assertEqual(len(calls), 3)

    def test_callback_can_schedule_more_work(self):
        sched = Scheduler()
        calls = []
        sched.call_later(10, lambda: sched.call_later(5, lambda: calls.append("chained")))
        sched.advance(15)
        self.assertEqual(calls, ["chained"])

    def test_pending_by_label_and_background(self):
        sched = Scheduler()
        sched.call_later(10, lambda: None, label="a")
        sched.call_every(10, lambda: None, label="auto", background=True)
        self.assertEqual(sched.pending(), 2)
        self.assertEqual(sched.pending("a"), 1)
        self.assertEqual(sched.pending(include_background=False), 1)
        self.assertFalse(sched.idle)

    def test_run_until_idle_ignores_background_timers(self):
        sched = Scheduler()
        calls = []
        sched.call_every(1000, lambda: calls.append("bg"), background=True)
        sched.call_later(300, lambda: calls.append("fg"))
        sched.run_until_idle()
        self.assertEqual(calls, ["fg"])
        self.assertTrue(sched.idle)
        self.assertEqual(sched.now_ms, 300)

    def test_clear_drops_everything(self):
        sched = Scheduler()
        calls = []
        sched.call_later(10, lambda: calls.append("x"))
        sched.clear()
        sched.advance(50)
        self.assertEqual(calls, [])


if __name__ == "__main__":
    unittest.main()
