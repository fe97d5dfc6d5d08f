"""Weighted selection of the next revealed digit pair."""

from __future__ import annotations

from typing import Iterable, Sequence

from .prf import RandomStream
from .records import Participant


class NoEligibleCandidatesError(LookupError):
    """Raised when a draw is requested for an empty candidate pool."""

    def __init__(self, prize_id: str, step: int) -> None:
        super().__init__(
            f"No eligible candidates for prize {prize_id!r} at step {step} "
            "under the current prefix"
        )
        self.prize_id = prize_id
        self.step = step


def matches_prefix(participant: Participant, prefix: Sequence[str], step: int) -> bool:
    """Return ``True`` when the first ``step`` pairs equal ``prefix``."""
    pairs = participant.pairs
    for index in range(step):
        if pairs[index] != prefix[index]:
            return False
    return True


def count_pairs(pool: Iterable[Participant], step: int) -> dict[str, int]:
    """Count candidates per pair value at ``step``, in pool order."""
    counts: dict[str, int] = {}
    for participant in pool:
        pair = participant.pairs[step]
        counts[pair] = counts.get(pair, 0) + 1
    return counts


def pick_weighted_pair(
    pool: Sequence[Participant],
    step: int,
    rng: RandomStream,
    *,
    prize_id: str = "",
) -> str:
    """Pick the pair revealed at ``step`` proportionally to candidate counts.

    Parameters
    ----------
    pool : Sequence[Participant]
        Live candidates under the current prefix, in canonical order.
    step : int
        Index of the pair being revealed (0-4).
    rng : RandomStream
        Stream derived for ``step + 1``; exactly one value is consumed.
    prize_id : str, optional
        Used only to describe the failure.

    Returns
    -------
    str
        The chosen two-digit pair.

    Raises
    ------
    NoEligibleCandidatesError
        If ``pool`` is empty.

    Notes
    -----
    Pair values are scanned in first-seen order and the first value whose
    running total reaches the sample wins, so ties are broken by pool
    order rather than by numeric value.
    """

    counts = count_pairs(pool, step)
    if not counts:
        raise NoEligibleCandidatesError(prize_id, step)
    total = sum(counts.values())
    sample = rng() * total
    running = 0
    for pair, count in counts.items():
        running += count
        if running >= sample:
            return pair
    # Only reachable through floating point error.
    return pair


__all__ = [
    "NoEligibleCandidatesError",
    "count_pairs",
    "matches_prefix",
    "pick_weighted_pair",
]
