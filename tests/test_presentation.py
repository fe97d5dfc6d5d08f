from __future__ import annotations

import unittest

from phonedraw.draw import DrawEngine, Participant, Prize
from phonedraw.presentation import SpinAnimation, spin_target


class FakeHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Collects callbacks so tests can fire frames one by one."""

    def __init__(self) -> None:
        self.pending: list[tuple[float, object, FakeHandle]] = []

    def __call__(self, delay, callback):
        handle = FakeHandle()
        self.pending.append((delay, callback, handle))
        return handle

    def fire(self) -> bool:
        while self.pending:
            _, callback, handle = self.pending.pop(0)
            if not handle.cancelled:
                callback()
                return True
        return False

    def run(self) -> int:
        fired = 0
        while self.fire():
            fired += 1
        return fired


def _engine() -> DrawEngine:
    people = [
        Participant(id=i, name=f"P{i}", phone_raw=phone, phone_key=phone, tier="T1")
        for i, phone in enumerate(["0911111111", "0912222222", "0913333333"], start=1)
    ]
    return DrawEngine(4, people, [Prize(id="G-1", label="Grand Prize 1")])


class SpinAnimationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = _engine()
        self.scheduler = FakeScheduler()
        self.frames: list[str] = []
        self.done: list[bool] = []
        self.spin = SpinAnimation(
            self.engine,
            self.frames.append,
            lambda: self.done.append(True),
            scheduler=self.scheduler,
            interval=0.1,
            duration=0.5,
        )

    def _start(self) -> None:
        outcome = self.engine.draw(hold=True)
        self.assertTrue(self.engine.reveal.in_flight)
        self.spin.start(outcome.prize_id, outcome.step, self.engine.reveal.pairs)

    def test_frames_then_guard_release(self) -> None:
        self._start()
        self.assertEqual(self.scheduler.run(), 5)
        self.assertEqual(len(self.frames), 4)
        self.assertTrue(all(len(f) == 2 and f.isdigit() for f in self.frames))
        self.assertEqual(self.done, [True])
        self.assertFalse(self.spin.running)
        self.assertFalse(self.engine.reveal.in_flight)

    def test_draws_are_ignored_while_spinning(self) -> None:
        self._start()
        self.scheduler.fire()
        self.assertIsNone(self.engine.draw())
        self.scheduler.run()
        self.assertIsNotNone(self.engine.draw())

    def test_cancel_releases_guard_without_finishing(self) -> None:
        self._start()
        self.scheduler.fire()
        self.spin.cancel()
        self.assertFalse(self.engine.reveal.in_flight)
        self.assertFalse(self.spin.running)
        self.assertEqual(self.scheduler.run(), 0)
        self.assertEqual(len(self.frames), 1)
        self.assertEqual(self.done, [])

    def test_frames_are_reproducible(self) -> None:
        self._start()
        self.scheduler.run()
        first = list(self.frames)

        replay = _engine()
        frames: list[str] = []
        scheduler = FakeScheduler()
        spin = SpinAnimation(replay, frames.append, scheduler=scheduler, interval=0.1, duration=0.5)
        outcome = replay.draw(hold=True)
        spin.start(outcome.prize_id, outcome.step, replay.reveal.pairs)
        scheduler.run()
        self.assertEqual(frames, first)


class SpinTargetTests(unittest.TestCase):
    def test_sequential_target_follows_the_reveal(self) -> None:
        engine = _engine()
        self.assertEqual(spin_target(engine), ("G-1", 1, ["--"] * 5))
        engine.draw()
        self.assertEqual(spin_target(engine), ("G-1", 2, ["09", "--", "--", "--", "--"]))

    def test_group_target_advances_with_each_tick(self) -> None:
        engine = _engine()
        engine.set_group_mode(True)
        first = spin_target(engine)
        self.assertEqual(first, ("GROUP:General", 1, []))
        engine.draw_group()
        second = spin_target(engine)
        self.assertEqual(second[1], 2)
        self.assertNotEqual(first, second)

    def test_no_prizes(self) -> None:
        self.assertIsNone(spin_target(DrawEngine(1)))


if __name__ == "__main__":
    unittest.main()
