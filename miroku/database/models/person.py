# miroku/database/models/person.py
from __future__ import annotations

from typing import Optional, List, TYPE_CHECKING
from uuid import UUID as UUID_t

from sqlalchemy import (
    ForeignKey, Integer, String, Uuid, UniqueConstraint, Enum as SAEnum, Index, text
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from miroku.database.core.main import Base
from miroku.database.core.service_object import ServiceObject
from miroku.domain.enums import CreditRole

if TYPE_CHECKING:
    from .movie import Movie


# =======================
# People
# =======================
class Person(ServiceObject, Base):
    """
    A director, writer or cast member, scoped to one owner.

      - external_id: person id in the external catalog (not unique; duplicates
        are cleaned up explicitly, see MergeService.dedupe_by_external_id)
      - merged_into_id: non-null marks a tombstone. Tombstones are hidden from
        listings and can never receive new credits.
    """
    __tablename__ = "people"
    __table_args__ = (
        Index("ix_people_owner_external", "owner_id", "external_id"),
        Index("ix_people_owner_display_name", "owner_id", "display_name"),
        Index("ix_people_merged_into_id", "merged_into_id"),
    )

    owner_id: Mapped[UUID_t] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    external_id: Mapped[Optional[int]] = mapped_column(Integer)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    merged_into_id: Mapped[Optional[UUID_t]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("people.id"),
        nullable=True,
    )

    credits: Mapped[List["Credit"]] = relationship(
        back_populates="person",
        passive_deletes=True,
    )

    @property
    def is_tombstone(self) -> bool:
        return self.merged_into_id is not None

    def __repr__(self) -> str:
        return f"<Person id={self.id} name={self.display_name!r} merged_into={self.merged_into_id}>"


class Credit(ServiceObject, Base):
    """
    Movie <-> Person association with a role.
    At most one row per (movie_id, role, person_id); cast_order only for cast.
    """
    __tablename__ = "credit"
    __table_args__ = (
        UniqueConstraint("movie_id", "role", "person_id", name="uq_credit_movie_role_person"),
        Index("ix_credit_movie_role", "movie_id", "role"),
        Index("ix_credit_person_id", "person_id"),
    )

    movie_id: Mapped[UUID_t] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("movie.id", ondelete="CASCADE"),
        nullable=False,
    )
    person_id: Mapped[UUID_t] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("people.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[CreditRole] = mapped_column(SAEnum(CreditRole, name="credit_role"), nullable=False)
    cast_order: Mapped[Optional[int]] = mapped_column(Integer)
    # insertion sequence within the movie; stable tie-break for equal cast_order
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))

    person: Mapped[Person] = relationship(back_populates="credits", lazy="joined")
    movie: Mapped["Movie"] = relationship(back_populates="credits")

    def __repr__(self) -> str:
        return f"<Credit movie={self.movie_id} role={self.role} person={self.person_id} order={self.cast_order}>"
