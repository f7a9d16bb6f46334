# miroku/database/models/taxonomy.py
from __future__ import annotations

from typing import Optional, List, TYPE_CHECKING
from uuid import UUID as UUID_t

from sqlalchemy import ForeignKey, String, Uuid, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from miroku.database.core.main import Base
from miroku.database.core.service_object import ServiceObject

if TYPE_CHECKING:
    from .movie import Movie


def _t(name: str):
    """Return Table object from metadata, honoring schema on Base.metadata."""
    schema = Base.metadata.schema  # e.g. "miroku"
    key = f"{schema}.{name}" if schema else name
    return Base.metadata.tables[key]


# =======================
# Tags
# =======================
class Tag(ServiceObject, Base):
    __tablename__ = "tag"
    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_tag_owner_name"),
    )

    owner_id: Mapped[UUID_t] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    color: Mapped[Optional[str]] = mapped_column(String(16))  # "#rrggbb"

    # Many-to-many to movies through association table
    movies: Mapped[List["Movie"]] = relationship(
        "Movie",
        secondary=lambda: _t("movie_tag"),
        back_populates="tags",
    )


class MovieTag(Base):
    __tablename__ = "movie_tag"
    __table_args__ = (
        UniqueConstraint("movie_id", "tag_id", name="uq_movie_tag_movie_tag"),
        Index("ix_movie_tag_tag_id", "tag_id"),
    )

    movie_id: Mapped[UUID_t] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("movie.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_id: Mapped[UUID_t] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tag.id", ondelete="CASCADE"),
        primary_key=True,
    )
