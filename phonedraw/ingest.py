"""Parse participant and prize CSV files into validated records."""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, Optional, TypeVar, Union

from .draw.phone import normalize_phone
from .draw.records import DEFAULT_TIER, TIERS, Participant, Prize

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TIER_SPLIT = re.compile(r"[|,\s]+")
DEFAULT_GROUP = "General"


@dataclass
class IngestReport(Generic[T]):
    """Records kept from a CSV source plus aggregate counts."""

    records: list[T] = field(default_factory=list)
    total_rows: int = 0

    @property
    def kept(self) -> int:
        return len(self.records)

    @property
    def dropped(self) -> int:
        return self.total_rows - self.kept


def _read_rows(text: str, required: tuple[str, ...]) -> list[dict[str, str]]:
    """Return non-blank data rows keyed by lower-cased header names."""
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []
    reader = csv.reader(io.StringIO("\n".join(lines)))
    header = [h.strip().lower() for h in next(reader)]
    missing = [name for name in required if name not in header]
    if missing:
        raise ValueError(f"CSV header is missing required columns: {', '.join(missing)}")
    rows = []
    for values in reader:
        rows.append(
            {name: (values[i].strip() if i < len(values) else "") for i, name in enumerate(header)}
        )
    return rows


def _source_text(source: Union[str, Path]) -> str:
    if isinstance(source, Path):
        return source.read_text(encoding="utf-8-sig")
    return source


def parse_tier(raw: Optional[str]) -> str:
    """Return the tier token in ``raw`` or :data:`DEFAULT_TIER`."""
    token = (raw or "").strip().upper()
    return token if token in TIERS else DEFAULT_TIER


def parse_eligible(raw: Optional[str]) -> tuple[str, ...]:
    """Parse a comma, pipe or whitespace separated list of tiers.

    Unknown tokens are ignored; an empty result means every tier.
    """
    tokens = {t.upper() for t in _TIER_SPLIT.split((raw or "").strip()) if t}
    tiers = tuple(t for t in TIERS if t in tokens)
    return tiers or TIERS


def parse_participants_csv(source: Union[str, Path]) -> IngestReport[Participant]:
    """Parse a ``name,phone,tier`` roster.

    Rows missing a name or carrying a phone number that does not normalize
    are dropped. Kept rows receive sequential ids in file order; phone
    duplicates are *not* removed here (see :func:`dedupe_participants`).

    Parameters
    ----------
    source : str or Path
        CSV text, or a path to a UTF-8 file.

    Raises
    ------
    ValueError
        If the header lacks the ``name`` or ``phone`` column.
    """

    rows = _read_rows(_source_text(source), ("name", "phone"))
    report: IngestReport[Participant] = IngestReport(total_rows=len(rows))
    for row in rows:
        name = row.get("name", "")
        phone_raw = row.get("phone", "")
        if not name:
            continue
        try:
            phone_key = normalize_phone(phone_raw)
        except ValueError:
            continue
        report.records.append(
            Participant(
                id=len(report.records) + 1,
                name=name,
                phone_raw=phone_raw,
                phone_key=phone_key,
                tier=parse_tier(row.get("tier")),
            )
        )
    logger.info(f"Participants: kept {report.kept} of {report.total_rows} rows")
    return report


def parse_prizes_csv(source: Union[str, Path]) -> IngestReport[Prize]:
    """Parse a ``label,eligible,group,subtitle,id`` prize list.

    ``label`` is required per row. Missing ids become ``P-<row>``; an id
    already taken by an earlier row is suffixed with ``-<row>`` (then
    ``-<row>-2``, ``-<row>-3``, ... until it is unique).

    Raises
    ------
    ValueError
        If the header lacks the ``label`` column.
    """

    rows = _read_rows(_source_text(source), ("label",))
    report: IngestReport[Prize] = IngestReport(total_rows=len(rows))
    taken: set[str] = set()
    for row_number, row in enumerate(rows, start=1):
        label = row.get("label", "")
        if not label:
            continue
        prize_id = row.get("id") or f"P-{row_number}"
        if prize_id in taken:
            base = f"{prize_id}-{row_number}"
            prize_id, suffix = base, 2
            while prize_id in taken:
                prize_id = f"{base}-{suffix}"
                suffix += 1
        taken.add(prize_id)
        report.records.append(
            Prize(
                id=prize_id,
                label=label,
                subtitle=row.get("subtitle", ""),
                group=row.get("group") or DEFAULT_GROUP,
                eligible_tiers=parse_eligible(row.get("eligible")),
            )
        )
    logger.info(f"Prizes: kept {report.kept} of {report.total_rows} rows")
    return report


def participants_to_csv(participants: list[Participant]) -> str:
    """Render participants back to the roster CSV format."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["name", "phone", "tier"])
    for p in participants:
        writer.writerow([p.name, p.phone_raw, p.tier])
    return buffer.getvalue()


def prizes_to_csv(prizes: list[Prize]) -> str:
    """Render prizes back to the prize CSV format."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["label", "eligible", "group", "subtitle", "id"])
    for prize in prizes:
        writer.writerow(
            [prize.label, "|".join(prize.eligible_tiers), prize.group, prize.subtitle, prize.id]
        )
    return buffer.getvalue()


__all__ = [
    "IngestReport",
    "parse_eligible",
    "parse_participants_csv",
    "parse_prizes_csv",
    "parse_tier",
    "participants_to_csv",
    "prizes_to_csv",
]
