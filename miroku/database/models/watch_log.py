# miroku/database/models/watch_log.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, TYPE_CHECKING
from uuid import UUID as UUID_t

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Text, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from miroku.database.core.main import Base
from miroku.database.core.service_object import ServiceObject
from miroku.domain.enums import WatchMethod, WatchScore

if TYPE_CHECKING:
    from .movie import Movie


class WatchLog(ServiceObject, Base):
    """One viewing of a movie: when, how, and optionally how it went."""
    __tablename__ = "watch_log"
    __table_args__ = (
        Index("ix_watch_log_owner_watched_at", "owner_id", "watched_at"),
        Index("ix_watch_log_movie_id", "movie_id"),
    )

    owner_id: Mapped[UUID_t] = mapped_column(Uuid(as_uuid=True), nullable=False)
    movie_id: Mapped[UUID_t] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("movie.id", ondelete="CASCADE"),
        nullable=False,
    )
    watched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    watch_method: Mapped[WatchMethod] = mapped_column(
        SAEnum(WatchMethod, name="watch_method"),
        nullable=False,
        default=WatchMethod.other,
    )
    score: Mapped[Optional[WatchScore]] = mapped_column(SAEnum(WatchScore, name="watch_score"))
    memo: Mapped[Optional[str]] = mapped_column(Text)

    movie: Mapped["Movie"] = relationship(back_populates="watch_logs")
