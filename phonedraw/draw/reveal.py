"""Reveal progress for a single prize."""

from __future__ import annotations

from dataclasses import dataclass, field

PLACEHOLDER = "--"
PAIR_COUNT = 5


def _empty_prefix() -> list[str]:
    return [PLACEHOLDER] * PAIR_COUNT


@dataclass
class RevealState:
    """Digit prefix and reveal step of the prize currently on stage.

    Attributes
    ----------
    pairs : list[str]
        Exactly five entries, each :data:`PLACEHOLDER` or a revealed pair.
        Revealed entries always form a left-aligned prefix.
    step : int
        Number of revealed entries, ``0`` to ``5``.
    in_flight : bool
        ``True`` while the presentation layer is still animating the last
        committed pair; draws are ignored until it is cleared.
    """

    pairs: list[str] = field(default_factory=_empty_prefix)
    step: int = 0
    in_flight: bool = False

    @property
    def complete(self) -> bool:
        return self.step >= PAIR_COUNT

    @property
    def revealed(self) -> list[str]:
        """The revealed pairs only."""
        return self.pairs[: self.step]

    def push(self, pair: str) -> None:
        """Reveal ``pair`` at the current step."""
        if self.complete:
            raise ValueError("all pairs are already revealed")
        if len(pair) != 2 or not pair.isdigit():
            raise ValueError(f"pair must be two digits, got {pair!r}")
        self.pairs[self.step] = pair
        self.step += 1

    def fill(self, pairs: list[str]) -> None:
        """Reveal every remaining pair from a full five-pair key."""
        if len(pairs) != PAIR_COUNT:
            raise ValueError("fill requires all five pairs")
        self.pairs = list(pairs)
        self.step = PAIR_COUNT

    def reset(self) -> None:
        self.pairs = _empty_prefix()
        self.step = 0
        self.in_flight = False


__all__ = ["PAIR_COUNT", "PLACEHOLDER", "RevealState"]
