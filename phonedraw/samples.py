"""Sample rosters and prize lists for rehearsals."""

from __future__ import annotations

import random
from typing import Optional

from .draw.records import Participant, Prize


def generate_sample_participants(
    count: int = 5000, rng: Optional[random.Random] = None
) -> list[Participant]:
    """Generate ``count`` participants with ``09xxxxxxxx`` numbers.

    Roughly the first 24% are ``T1``, the next 42% ``T2`` and the rest
    ``T3``. Numbers are random, so duplicates are possible; they are
    removed when the roster is loaded into an engine.
    """

    rng = rng or random.Random()
    t1_limit = int(count * 0.24)
    t2_limit = int(count * 0.66)
    participants = []
    for index in range(count):
        participant_id = index + 1
        phone = "09" + f"{rng.randrange(100_000_000):08d}"
        if index < t1_limit:
            tier = "T1"
        elif index < t2_limit:
            tier = "T2"
        else:
            tier = "T3"
        participants.append(
            Participant(
                id=participant_id,
                name=f"Participant {participant_id:04d}",
                phone_raw=phone,
                phone_key=phone,
                tier=tier,
            )
        )
    return participants


def build_default_prizes() -> list[Prize]:
    """10 grand (T1), 40 major (T1/T2) and 50 general (all tiers) prizes."""
    prizes = [
        Prize(id=f"G-{i}", label=f"Grand Prize {i}", group="Grand", eligible_tiers=("T1",))
        for i in range(1, 11)
    ]
    prizes += [
        Prize(
            id=f"M-{i}",
            label=f"Major Prize {i}",
            subtitle="Smart Watch Series X",
            group="Major",
            eligible_tiers=("T1", "T2"),
        )
        for i in range(1, 41)
    ]
    prizes += [
        Prize(id=f"GN-{i}", label=f"General Prize {i}", group="General")
        for i in range(1, 51)
    ]
    return prizes


__all__ = ["build_default_prizes", "generate_sample_participants"]
