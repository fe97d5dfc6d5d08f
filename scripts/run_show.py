"""Console presenter for a live draw.

Commands (press Enter after each): space or ``d`` draw, ``n`` next prize or
group, ``u`` undo, ``r`` reset, ``g`` toggle group mode, ``[``/``]``
previous/next group, ``e`` export results, ``q`` quit.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path

from phonedraw.db.engine import create_schema, get_sessionmaker, make_engine
from phonedraw.draw import DrawEngine, NoEligibleCandidatesError, mask_phone
from phonedraw.presentation import SpinAnimation, spin_target
from phonedraw.workflows import export_results, start_show

KEYS = {
    " ": "draw",
    "d": "draw",
    "n": "next_prize",
    "u": "undo_last_prize",
    "r": "reset_round",
    "g": "toggle_group_mode",
    "[": "prev_group",
    "]": "next_group",
}


def _phone(engine_phone: str, masked: bool) -> str:
    return mask_phone(engine_phone) if masked else engine_phone


def render(engine: DrawEngine, masked: bool) -> None:
    done, total = engine.progress()
    if engine.board is not None:
        print(f"\n== Group {engine.board.group}  ({done}/{total} prizes assigned)")
        for card in engine.board.cards.values():
            winner = engine.winner_of(card.prize_id)
            tail = f"  -> {winner.name} {_phone(winner.phone_key, masked)}" if winner else ""
            print(f"  {card.prize.label:<24} {' '.join(card.reveal.pairs)}{tail}")
        return
    prize = engine.current_prize
    if prize is None:
        print("No prizes loaded")
        return
    print(f"\n== Prize {done + 1} of {total}: {prize.label}  {prize.subtitle}".rstrip())
    print(f"   eligible {', '.join(prize.eligible_tiers)}  pool {engine.eligible_count()}"
          f"  remaining {len(engine.remaining())}")
    print(f"   {' '.join(engine.reveal.pairs)}")
    winner = engine.winner_of(prize.id)
    if winner is not None:
        print(f"   WINNER: {winner.name} {_phone(winner.phone_key, masked)} ({winner.tier})")


def draw_with_spin(engine: DrawEngine) -> None:
    target = spin_target(engine)
    if target is None or engine.apply("draw", hold=True) is None:
        return
    finished = threading.Event()
    spin = SpinAnimation(
        engine,
        on_frame=lambda pair: print(f"\r   {pair}", end="", flush=True),
        on_done=finished.set,
    )
    spin.start(*target)
    finished.wait()
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a phone-number prize draw")
    parser.add_argument("participants", type=Path)
    parser.add_argument("prizes", type=Path)
    parser.add_argument("--export", type=Path, default=Path("lottery-results.json"))
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    db = make_engine()
    create_schema(db)
    Session = get_sessionmaker(db)

    with Session.begin() as session:
        engine, settings = start_show(session, args.participants, args.prizes)
    masked = settings.mask_winner_phone

    render(engine, masked)
    for line in sys.stdin:
        key = line.rstrip("\n")[:1] or " "
        key = key if key == " " else key.lower()
        if key == "q":
            break
        if key == "e":
            with Session.begin() as session:
                export = export_results(session, engine, path=args.export)
                print(f"Exported {export.winner_count} winners to {args.export}")
            continue
        command = KEYS.get(key)
        if command is None:
            print(__doc__)
            continue
        try:
            if command == "draw":
                draw_with_spin(engine)
            else:
                engine.apply(command)
        except NoEligibleCandidatesError as exc:
            print(f"   {exc}. Check the list and prize eligibility.")
        render(engine, masked)


if __name__ == "__main__":
    main()
