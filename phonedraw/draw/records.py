"""Typed records consumed by the draw engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from .phone import phone_to_pairs

TIERS: tuple[str, ...] = ("T1", "T2", "T3")
"""Participant eligibility classes, in canonical order."""

DEFAULT_TIER = "T3"


@dataclass(frozen=True)
class Participant:
    """A roster entry that survived phone validation.

    Attributes
    ----------
    id : int
        Sequential identifier assigned in file order, before deduplication.
    name : str
        Display name.
    phone_raw : str
        Phone number exactly as supplied by the roster.
    phone_key : str
        Canonical 10-digit phone number (see :func:`normalize_phone`).
    tier : str
        One of :data:`TIERS`.
    """

    id: int
    name: str
    phone_raw: str
    phone_key: str
    tier: str = DEFAULT_TIER

    def __post_init__(self) -> None:
        if len(self.phone_key) != 10 or not self.phone_key.isdigit():
            raise ValueError(f"phone_key must be 10 digits, got {self.phone_key!r}")
        if self.tier not in TIERS:
            raise ValueError(f"Unknown tier {self.tier!r}")

    @property
    def pairs(self) -> list[str]:
        """The five two-digit pairs of :attr:`phone_key`."""
        return phone_to_pairs(self.phone_key)


@dataclass(frozen=True)
class Prize:
    """A prize slot in the show, in configured order."""

    id: str
    label: str
    subtitle: str = ""
    group: str = "General"
    eligible_tiers: tuple[str, ...] = field(default=TIERS)

    def __post_init__(self) -> None:
        tiers = tuple(t for t in TIERS if t in self.eligible_tiers)
        # Frozen dataclass, so go through object.__setattr__.
        object.__setattr__(self, "eligible_tiers", tiers or TIERS)

    def accepts(self, participant: Participant) -> bool:
        """Return ``True`` when ``participant``'s tier is eligible."""
        return participant.tier in self.eligible_tiers


def dedupe_participants(participants: list[Participant]) -> list[Participant]:
    """Drop later participants that share a ``phone_key`` with an earlier one."""

    seen: set[str] = set()
    kept: list[Participant] = []
    for participant in participants:
        if participant.phone_key in seen:
            continue
        seen.add(participant.phone_key)
        kept.append(participant)
    return kept


__all__ = [
    "DEFAULT_TIER",
    "Participant",
    "Prize",
    "TIERS",
    "dedupe_participants",
]
