from __future__ import annotations

import unittest
from unittest.mock import patch

from phonedraw.draw import DrawEngine, GroupBoard, Participant, Prize


def _participant(pid: int, phone: str, tier: str = "T1") -> Participant:
    return Participant(id=pid, name=f"P{pid}", phone_raw=phone, phone_key=phone, tier=tier)


def _prize(prize_id: str, group: str, *tiers: str) -> Prize:
    return Prize(id=prize_id, label=prize_id, group=group, eligible_tiers=tiers or ("T1", "T2", "T3"))


def _tick_until_done(engine: DrawEngine, limit: int = 10) -> list:
    results = []
    for _ in range(limit):
        result = engine.draw_group()
        if result is None:
            break
        results.append(result)
    return results


class GroupBoardTests(unittest.TestCase):
    def test_sync_creates_and_drops_cards_in_prize_order(self) -> None:
        prizes = [_prize("G-2", "Grand"), _prize("M-1", "Major"), _prize("G-1", "Grand")]
        board = GroupBoard("Grand")
        board.sync(prizes)
        self.assertEqual(list(board.cards), ["G-2", "G-1"])

        board.cards["G-1"].reveal.push("09")
        board.sync([_prize("G-1", "Grand"), _prize("G-3", "Grand")])
        self.assertEqual(list(board.cards), ["G-1", "G-3"])
        self.assertEqual(board.cards["G-1"].reveal.step, 1)
        self.assertEqual(board.cards["G-3"].reveal.step, 0)


class GroupDrawTests(unittest.TestCase):
    def setUp(self) -> None:
        self.prizes = [
            _prize("G-1", "Grand"),
            _prize("G-2", "Grand"),
            _prize("M-1", "Major"),
        ]

    def test_groups_follow_first_appearance(self) -> None:
        engine = DrawEngine(1, [], self.prizes)
        self.assertEqual(engine.groups, ["Grand", "Major"])
        engine.set_group_mode(True)
        self.assertEqual(engine.board.group, "Grand")
        engine.next_group()
        engine.next_group()
        self.assertEqual(engine.board.group, "Major")
        engine.prev_group()
        engine.prev_group()
        self.assertEqual(engine.board.group, "Grand")
        with self.assertRaises(ValueError):
            engine.select_group("Nope")
        engine.set_group_mode(False)
        self.assertIsNone(engine.board)

    def test_tick_advances_every_card_by_one_pair(self) -> None:
        people = [
            _participant(1, "0911111111"),
            _participant(2, "0912222222"),
            _participant(3, "0913333333"),
            _participant(4, "0914444444"),
        ]
        engine = DrawEngine(8, people, self.prizes)
        engine.set_group_mode(True)
        result = engine.draw_group()
        self.assertEqual([a.prize_id for a in result.advances], ["G-1", "G-2"])
        for card in engine.board.cards.values():
            self.assertEqual(card.reveal.pairs[0], "09")
            self.assertEqual(card.reveal.step, 1)
        # the sequential prize is untouched
        self.assertEqual(engine.reveal.step, 0)

    def test_tick_exclusivity_when_cards_converge(self) -> None:
        a = _participant(1, "0911111111")
        b = _participant(2, "0911111122")
        engine = DrawEngine(5, [a, b], self.prizes[:2])
        engine.set_group_mode(True)

        results = _tick_until_done(engine)
        self.assertEqual(len(results), 5)
        for result in results[:4]:
            self.assertEqual(result.winners, {})

        final = results[-1]
        first, second = final.advances
        self.assertEqual(first.prize_id, "G-1")
        self.assertIsNotNone(first.winner_id)
        self.assertEqual(second.prize_id, "G-2")
        self.assertTrue(second.auto_finished)
        self.assertNotEqual(first.winner_id, second.winner_id)
        self.assertEqual(set(engine.winners.values()), {1, 2})
        self.assertEqual(
            engine.board.cards["G-2"].reveal.pairs,
            engine.participant(engine.winners["G-2"]).pairs,
        )

    def test_claimed_participant_is_not_resolved_twice(self) -> None:
        only = _participant(1, "0911111111")
        engine = DrawEngine(5, [only], self.prizes[:2])
        # a single candidate is committed as soon as the prize is on stage
        self.assertEqual(engine.winners, {"G-1": 1})

        engine.set_group_mode(True)
        engine.undo_group()
        # released, then claimed again by the first card of the group
        self.assertEqual(engine.winners, {"G-1": 1})
        self.assertEqual(engine.board.cards["G-2"].reveal.step, 0)
        with self.assertLogs("phonedraw.draw.group", level="WARNING"):
            results = _tick_until_done(engine)
        self.assertEqual(len(results), 5)
        self.assertTrue(all(a.random_fallback for r in results for a in r.advances))
        self.assertEqual(engine.board.cards["G-2"].reveal.step, 5)
        self.assertEqual(engine.winners, {"G-1": 1})
        self.assertIsNone(engine.draw_group())

    def test_winners_outside_the_group_are_excluded(self) -> None:
        people = [_participant(1, "0911111111"), _participant(2, "0922222222")]
        prizes = [_prize("M-1", "Major"), _prize("G-1", "Grand"), _prize("G-2", "Grand")]
        engine = DrawEngine(2, people, prizes)
        while not engine.is_done():
            engine.draw()
        taken = engine.winners["M-1"]

        engine.set_group_mode(True)
        engine.select_group("Grand")
        # one candidate left: the first card takes it immediately
        self.assertNotEqual(engine.winners["G-1"], taken)
        self.assertNotIn("G-2", engine.winners)

    def test_reset_and_undo_apply_to_the_whole_group(self) -> None:
        people = [
            _participant(1, "0911111111"),
            _participant(2, "0912222222"),
            _participant(3, "0913333333"),
            _participant(4, "0914444444"),
            _participant(5, "0915555555"),
        ]
        engine = DrawEngine(13, people, self.prizes)
        engine.apply("toggle_group_mode")
        _tick_until_done(engine)
        self.assertEqual(set(engine.winners), {"G-1", "G-2"})
        winners = engine.winners

        engine.apply("reset_round")
        for card in engine.board.cards.values():
            self.assertEqual(card.reveal.step, 0)
        self.assertEqual(engine.winners, winners)
        self.assertIsNone(engine.apply("draw"))

        engine.apply("undo_last_prize")
        self.assertEqual(engine.winners, {})
        self.assertIsNotNone(engine.apply("draw"))

    def test_group_undo_reopens_the_sequential_reveal(self) -> None:
        people = [
            _participant(1, "0911111111"),
            _participant(2, "0912222222"),
            _participant(3, "0913333333"),
            _participant(4, "0914444444"),
        ]
        engine = DrawEngine(6, people, self.prizes)
        while not engine.is_done():
            engine.draw()
        self.assertEqual(engine.reveal.step, 5)

        engine.apply("toggle_group_mode")
        engine.apply("undo_last_prize")
        engine.apply("toggle_group_mode")
        self.assertEqual(engine.winners, {})
        self.assertEqual(engine.reveal.step, 0)
        self.assertFalse(engine.is_done())
        self.assertIsNotNone(engine.draw())

    def test_late_auto_finish_is_merged_into_the_card_advance(self) -> None:
        x = _participant(1, "0911111111", tier="T2")
        y = _participant(2, "0911111122", tier="T1")
        z = _participant(3, "0922222222", tier="T2")
        prizes = [_prize("G-1", "Grand", "T1", "T2"), _prize("G-2", "Grand", "T2")]
        engine = DrawEngine(9, [x, y, z], prizes)
        engine.set_group_mode(True)

        with patch(
            "phonedraw.draw.group.pick_weighted_pair",
            side_effect=["09", "09", "11", "11"],
        ):
            engine.draw_group()
            result = engine.draw_group()

        self.assertEqual([a.prize_id for a in result.advances], ["G-1", "G-2"])
        first, second = result.advances
        self.assertEqual(second.winner_id, x.id)
        self.assertEqual(first.pair, "11")
        self.assertEqual(first.winner_id, y.id)
        self.assertTrue(first.auto_finished)
        self.assertEqual(first.step, 5)
        self.assertEqual(engine.winners, {"G-1": y.id, "G-2": x.id})

    def test_in_flight_group_ticks_are_ignored(self) -> None:
        people = [_participant(i, f"09{i}{i}{i}{i}{i}{i}{i}{i}") for i in range(1, 6)]
        engine = DrawEngine(3, people, self.prizes)
        engine.set_group_mode(True)
        self.assertIsNotNone(engine.draw_group(hold=True))
        self.assertIsNone(engine.draw_group())
        engine.complete_display()
        self.assertIsNotNone(engine.draw_group())

    def test_group_replay_is_deterministic(self) -> None:
        people = [_participant(i, f"09{i:02d}{(i * 7919) % 1000000:06d}") for i in range(1, 40)]
        commands = ["toggle_group_mode"] + ["draw"] * 6 + ["next_group"] + ["draw"] * 6

        def run() -> dict[str, int]:
            engine = DrawEngine(44, people, self.prizes)
            for command in commands:
                engine.apply(command)
            return engine.winners

        self.assertEqual(run(), run())
        self.assertEqual(set(run()), {"G-1", "G-2", "M-1"})


if __name__ == "__main__":
    unittest.main()
