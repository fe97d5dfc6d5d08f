"""Helpers for turning raw phone numbers into canonical draw keys."""

from __future__ import annotations

import re
from typing import Union

_NON_DIGITS = re.compile(r"\D+")

COUNTRY_PREFIX = "251"
PAIR_OFFSETS = (0, 2, 4, 6, 8)


def normalize_phone(raw: Union[str, int, None]) -> str:
    """Canonicalize a raw phone value to a 10-digit key.

    Parameters
    ----------
    raw : str or int
        Phone number as it appears in the roster. Any non-digit characters
        (spaces, ``+``, dashes) are ignored.

    Returns
    -------
    str
        The 10-digit phone key, e.g. ``"0912345678"``.

    Raises
    ------
    ValueError
        If ``raw`` is empty or does not reduce to exactly ten digits.

    Notes
    -----
    Numbers carrying the ``251`` country prefix are rewritten to their
    local ``0`` + 9-digit form; anything longer than ten digits keeps only
    the trailing ten.
    """

    if raw is None:
        raise ValueError("phone must not be None")
    digits = _NON_DIGITS.sub("", str(raw))
    if not digits:
        raise ValueError("phone must contain digits")
    if digits.startswith(COUNTRY_PREFIX) and len(digits) >= 12:
        digits = "0" + digits[-9:]
    if len(digits) > 10:
        digits = digits[-10:]
    if len(digits) != 10:
        raise ValueError(f"phone {raw!r} does not normalize to 10 digits")
    return digits


def phone_to_pairs(phone_key: str) -> list[str]:
    """Split a 10-digit phone key into its five two-digit pairs."""
    if len(phone_key) != 10:
        raise ValueError("phone_key must have exactly 10 digits")
    return [phone_key[i : i + 2] for i in PAIR_OFFSETS]


def mask_phone(phone_key: str) -> str:
    """Hide all but the last three digits for on-stage display."""
    return f"09•••••{phone_key[-3:]}"


__all__ = ["mask_phone", "normalize_phone", "phone_to_pairs"]
