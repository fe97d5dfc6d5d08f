"""Archive of exported result documents."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from phonedraw.db.utils import dt_iso

from .base import Base


class ResultExport(Base):
    """A result document handed to an external writer, kept for auditing."""

    __tablename__ = "result_exports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    """Primary key."""

    event_title: Mapped[str] = mapped_column(String(255), nullable=False)
    seed: Mapped[int] = mapped_column(Integer, nullable=False)
    participant_count: Mapped[int] = mapped_column(Integer, nullable=False)
    winner_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    document: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    """The exported document exactly as produced by the engine."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "ResultExport":
        """Build an archive row from a :func:`build_results_document` result."""
        results = document.get("results", [])
        return cls(
            event_title=document["eventTitle"],
            seed=document["seed"],
            participant_count=document["participantCount"],
            winner_count=sum(1 for r in results if r.get("winner") is not None),
            document=document,
        )

    @classmethod
    def latest(cls, session: Session) -> Optional["ResultExport"]:
        """Return the most recently archived export."""
        stmt = select(cls).order_by(cls.created_at.desc(), cls.id.desc())
        return session.scalars(stmt).first()

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "event_title": self.event_title,
            "seed": self.seed,
            "participant_count": self.participant_count,
            "winner_count": self.winner_count,
            "document": self.document,
            "created_at": dt_iso(self.created_at),
        }

    def to_json_str(self) -> str:
        return json.dumps(self.to_json(), ensure_ascii=False)


__all__ = ["ResultExport"]
