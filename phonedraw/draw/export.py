"""Structured result documents for external writers."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from .engine import DrawEngine


def build_results_document(
    engine: DrawEngine,
    event_title: str,
    *,
    timestamp: Optional[datetime] = None,
) -> dict[str, Any]:
    """Summarize a round as a JSON-serializable document.

    Parameters
    ----------
    engine : DrawEngine
        Engine holding the round to export.
    event_title : str
        Title shown on stage.
    timestamp : Optional[datetime], default: None
        Export time; defaults to now (UTC).

    Returns
    -------
    dict
        ``{eventTitle, seed, participantCount, timestamp, results}`` with one
        result per prize in configured order.
    """

    when = timestamp or datetime.now(timezone.utc)
    results = []
    for order, prize in enumerate(engine.prizes, start=1):
        winner = engine.winner_of(prize.id)
        results.append(
            {
                "order": order,
                "prizeId": prize.id,
                "prizeLabel": prize.label,
                "group": prize.group,
                "eligible": list(prize.eligible_tiers),
                "winner": (
                    {"name": winner.name, "phone": winner.phone_key, "tier": winner.tier}
                    if winner is not None
                    else None
                ),
            }
        )
    return {
        "eventTitle": event_title,
        "seed": engine.seed,
        "participantCount": len(engine.participants),
        "timestamp": when.astimezone(timezone.utc).isoformat(),
        "results": results,
    }


def write_results_json(document: dict[str, Any], path: Union[str, Path]) -> Path:
    """Write ``document`` as indented JSON and return the path written."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    return target


__all__ = ["build_results_document", "write_results_json"]
