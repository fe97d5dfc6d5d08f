"""Environment-driven defaults for a show."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_SEED = 1
DEFAULT_EVENT_TITLE = "New Year Draw 2025"


def parse_seed(value) -> int:
    """Return ``value`` as an integer seed.

    Raises
    ------
    ValueError
        If ``value`` is not an integer (strings must hold decimal digits).
    """
    if isinstance(value, bool):
        raise ValueError("seed must be an integer")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError as exc:
        raise ValueError(f"seed must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class ShowConfig:
    seed: int = DEFAULT_SEED
    event_title: str = DEFAULT_EVENT_TITLE
    mask_winner_phone: bool = True


def load_config() -> ShowConfig:
    """Read ``DRAW_SEED``, ``EVENT_TITLE`` and ``MASK_WINNER_PHONE``."""
    load_dotenv()
    mask = os.getenv("MASK_WINNER_PHONE", "true").strip().lower()
    return ShowConfig(
        seed=parse_seed(os.getenv("DRAW_SEED", str(DEFAULT_SEED))),
        event_title=os.getenv("EVENT_TITLE", DEFAULT_EVENT_TITLE),
        mask_winner_phone=mask not in {"0", "false", "no", "off"},
    )
