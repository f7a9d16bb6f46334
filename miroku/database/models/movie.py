# miroku/database/models/movie.py
from __future__ import annotations

from typing import Optional, List, TYPE_CHECKING
from uuid import UUID as UUID_t

from sqlalchemy import Integer, String, Text, Uuid, UniqueConstraint, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from miroku.database.core.main import Base
from miroku.database.core.service_object import JSONType, ServiceObject
from miroku.domain.entities.movie_snapshot import effective_value

if TYPE_CHECKING:
    from .person import Credit
    from .taxonomy import Tag
    from .watch_log import WatchLog


def _t(name: str):
    """Return Table object from metadata, honoring schema on Base.metadata."""
    schema = Base.metadata.schema
    key = f"{schema}.{name}" if schema else name
    return Base.metadata.tables[key]


class Movie(ServiceObject, Base):
    """
    A movie in one owner's collection.

    snapshot_* columns cache what the external catalog said at import/refresh;
    override_* columns are user edits and shadow the snapshot when set.
    """
    __tablename__ = "movie"
    __table_args__ = (
        UniqueConstraint("owner_id", "external_ref", name="uq_movie_owner_external_ref"),
        Index("ix_movie_owner_created", "owner_id", "date_created"),
    )

    owner_id: Mapped[UUID_t] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    external_ref: Mapped[Optional[int]] = mapped_column(Integer)

    # catalog snapshot
    snapshot_title: Mapped[Optional[str]] = mapped_column(Text)
    snapshot_poster_ref: Mapped[Optional[str]] = mapped_column(Text)
    snapshot_release_date: Mapped[Optional[str]] = mapped_column(String(10))  # YYYY-MM-DD as the catalog sends it
    snapshot_countries: Mapped[Optional[list]] = mapped_column(JSONType)

    # user overrides
    override_title: Mapped[Optional[str]] = mapped_column(Text)
    override_poster_ref: Mapped[Optional[str]] = mapped_column(Text)
    override_release_date: Mapped[Optional[str]] = mapped_column(String(10))
    override_countries: Mapped[Optional[list]] = mapped_column(JSONType)

    watch_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))

    credits: Mapped[List["Credit"]] = relationship(
        back_populates="movie", cascade="all, delete-orphan", passive_deletes=True
    )
    tags: Mapped[List["Tag"]] = relationship(
        "Tag",
        secondary=lambda: _t("movie_tag"),
        back_populates="movies",
    )
    watch_logs: Mapped[List["WatchLog"]] = relationship(
        back_populates="movie", cascade="all, delete-orphan", passive_deletes=True
    )

    # ---- effective (displayed) values ----
    @property
    def title(self) -> Optional[str]:
        return effective_value(self.override_title, self.snapshot_title)

    @property
    def poster_ref(self) -> Optional[str]:
        return effective_value(self.override_poster_ref, self.snapshot_poster_ref)

    @property
    def release_date(self) -> Optional[str]:
        return effective_value(self.override_release_date, self.snapshot_release_date)

    @property
    def production_countries(self) -> List[str]:
        return list(effective_value(self.override_countries, self.snapshot_countries) or [])

    def __repr__(self) -> str:
        return f"<Movie id={self.id} title={self.title!r} external_ref={self.external_ref}>"
