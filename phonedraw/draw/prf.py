"""Seed-derived pseudo-random streams for reproducible draws."""

from __future__ import annotations

import struct
from typing import Callable, Sequence

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
_MASK32 = 0xFFFFFFFF
_TWO_POW_32 = 4294967296

RandomStream = Callable[[], float]
"""A zero-argument callable returning floats in ``[0, 1)``."""


def _utf16_units(text: str) -> tuple[int, ...]:
    """Return the UTF-16 code units of ``text``.

    ASCII keys hash identically to their byte values; other characters hash
    as UTF-16 code units so that keys built from non-ASCII prize ids stay
    stable across implementations of the show.
    """
    payload = text.encode("utf-16-le")
    return struct.unpack(f"<{len(payload) // 2}H", payload)


def fnv1a_32(text: str) -> int:
    """Hash ``text`` with 32-bit FNV-1a and return an unsigned integer."""
    h = FNV_OFFSET_BASIS
    for unit in _utf16_units(text):
        h ^= unit
        h = (h * FNV_PRIME) & _MASK32
    return h


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def mulberry32(seed: int) -> RandomStream:
    """Create a mulberry32 generator seeded with a 32-bit integer.

    Parameters
    ----------
    seed : int
        Generator seed; only the low 32 bits are used.

    Returns
    -------
    RandomStream
        Callable producing a deterministic sequence of floats in ``[0, 1)``.
    """

    state = seed & _MASK32

    def next_random() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & _MASK32
        t = _imul(state ^ (state >> 15), 1 | state)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / _TWO_POW_32

    return next_random


def derive_prf_key(
    seed: int,
    scope: str,
    step: int,
    prefix: Sequence[str],
    salt: str = "",
) -> str:
    """Build the key string for a ``(seed, scope, step, prefix, salt)`` tuple.

    ``prefix`` is the full five-entry prefix, placeholders included.
    """
    return f"{seed}|{scope}|step:{step}|prefix:{''.join(prefix)}|{salt}"


def prf_stream(
    seed: int,
    scope: str,
    step: int,
    prefix: Sequence[str],
    salt: str = "",
) -> RandomStream:
    """Return the reproducible random stream for a draw position.

    Identical arguments always produce an identical stream; changing any of
    them yields an independent one.
    """
    return mulberry32(fnv1a_32(derive_prf_key(seed, scope, step, prefix, salt)))


def rng_int_unbiased(rng: RandomStream, n: int) -> int:
    """Draw an integer in ``[0, n)`` from ``rng`` without modulo bias."""
    if n <= 0:
        return 0
    limit = _MASK32 - ((_MASK32 + 1) % n)
    while True:
        u = int(rng() * _TWO_POW_32)
        if u <= limit:
            return u % n


def group_scope(group: str) -> str:
    """Scope string used for every card of a group draw."""
    return f"GROUP:{group}"


__all__ = [
    "FNV_OFFSET_BASIS",
    "FNV_PRIME",
    "RandomStream",
    "derive_prf_key",
    "fnv1a_32",
    "group_scope",
    "mulberry32",
    "prf_stream",
    "rng_int_unbiased",
]
