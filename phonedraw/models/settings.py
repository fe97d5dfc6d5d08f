"""Persisted show settings."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, select, text
from sqlalchemy.orm import Mapped, Session, mapped_column, validates

from phonedraw.config import DEFAULT_EVENT_TITLE, ShowConfig, load_config, parse_seed

from .base import Base

SETTINGS_ROW_ID = 1


class DrawSettings(Base):
    """Single-row store for the values that must survive between sessions.

    The seed is the only value replay depends on; the event title and the
    masking toggle are presentation preferences kept alongside it.
    """

    __tablename__ = "draw_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    """Always :data:`SETTINGS_ROW_ID`."""

    seed: Mapped[int] = mapped_column(Integer, nullable=False)
    """Round seed, conventionally 1-100."""

    event_title: Mapped[str] = mapped_column(
        String(255), nullable=False, default=DEFAULT_EVENT_TITLE
    )
    """Title shown on stage and written into exports."""

    mask_winner_phone: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    """Whether winner phone numbers are masked on stage."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @validates("seed")
    def _validate_seed(self, _key: str, value) -> int:
        return parse_seed(value)

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<DrawSettings(seed={self.seed}, event_title={self.event_title!r})>"

    def to_config(self) -> ShowConfig:
        return ShowConfig(
            seed=self.seed,
            event_title=self.event_title,
            mask_winner_phone=self.mask_winner_phone,
        )

    @classmethod
    def get(cls, session: Session) -> Optional["DrawSettings"]:
        """Return the stored settings row, if any."""
        return session.scalar(select(cls).where(cls.id == SETTINGS_ROW_ID))

    @classmethod
    def load(cls, session: Session, defaults: Optional[ShowConfig] = None) -> "DrawSettings":
        """Return the settings row, creating it from ``defaults`` when missing.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        defaults : Optional[ShowConfig], default: None
            Values for a fresh row. When omitted they are read from the
            environment (see :func:`phonedraw.config.load_config`).
        """

        settings = cls.get(session)
        if settings is not None:
            return settings
        config = defaults or load_config()
        settings = cls(
            id=SETTINGS_ROW_ID,
            seed=config.seed,
            event_title=config.event_title,
            mask_winner_phone=config.mask_winner_phone,
        )
        session.add(settings)
        session.flush()
        return settings

    @classmethod
    def save_seed(cls, session: Session, seed) -> "DrawSettings":
        """Persist a new seed and return the settings row."""
        settings = cls.load(session)
        settings.seed = seed
        session.flush()
        return settings


__all__ = ["DrawSettings", "SETTINGS_ROW_ID"]
