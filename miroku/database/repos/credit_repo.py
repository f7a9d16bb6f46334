from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, List
from uuid import UUID

from sqlalchemy import select, and_, func, delete
from sqlalchemy.orm import Session

from miroku.database.models.movie import Movie as DBMovie
from miroku.database.models.person import (
    Person as DBPerson,
    Credit as DBCredit,
)
from miroku.domain.enums import CreditRole
from miroku.domain.errors import Conflict, InvalidArgument, NotFound


@dataclass
class CreditGroups:
    directors: List[DBCredit] = field(default_factory=list)
    writers: List[DBCredit] = field(default_factory=list)
    cast: List[DBCredit] = field(default_factory=list)

    def for_role(self, role: CreditRole) -> List[DBCredit]:
        return {
            CreditRole.director: self.directors,
            CreditRole.writer: self.writers,
            CreditRole.cast: self.cast,
        }[role]

    def is_empty(self) -> bool:
        return not (self.directors or self.writers or self.cast)


class SqlAlchemyCreditRepo:
    """
    Movie <-> Person links.

    (movie_id, role, person_id) is a natural key: link() refuses duplicates
    with Conflict and relink() refuses moves that would create one.
    """

    def __init__(self, session: Session) -> None:
        self.db = session

    # -------- reads --------

    def get(self, credit_id: UUID) -> Optional[DBCredit]:
        return self.db.get(DBCredit, credit_id)

    def list_for_movie(self, movie_id: UUID) -> CreditGroups:
        stmt = (
            select(DBCredit)
            .where(DBCredit.movie_id == movie_id)
            .order_by(
                DBCredit.cast_order.is_(None),
                DBCredit.cast_order.asc(),
                DBCredit.seq.asc(),
            )
        )
        out = CreditGroups()
        for c in self.db.execute(stmt).scalars().all():
            out.for_role(c.role).append(c)
        # directors/writers display in insertion order
        out.directors.sort(key=lambda c: c.seq)
        out.writers.sort(key=lambda c: c.seq)
        return out

    def list_for_person(self, person_id: UUID) -> List[DBCredit]:
        stmt = (
            select(DBCredit)
            .where(DBCredit.person_id == person_id)
            .order_by(DBCredit.movie_id.asc(), DBCredit.role.asc())
        )
        return self.db.execute(stmt).scalars().all()

    def count_for_movie(self, movie_id: UUID, role: Optional[CreditRole] = None) -> int:
        stmt = select(func.count()).select_from(DBCredit).where(DBCredit.movie_id == movie_id)
        if role is not None:
            stmt = stmt.where(DBCredit.role == role)
        return int(self.db.execute(stmt).scalar_one())

    def exists(self, movie_id: UUID, role: CreditRole, person_id: UUID) -> bool:
        stmt = select(DBCredit.id).where(
            and_(
                DBCredit.movie_id == movie_id,
                DBCredit.role == role,
                DBCredit.person_id == person_id,
            )
        ).limit(1)
        return self.db.execute(stmt).first() is not None

    # -------- mutations --------

    def _next_seq(self, movie_id: UUID) -> int:
        stmt = select(func.coalesce(func.max(DBCredit.seq), 0)).where(DBCredit.movie_id == movie_id)
        return int(self.db.execute(stmt).scalar_one()) + 1

    def link(
        self,
        *,
        movie_id: UUID,
        person_id: UUID,
        role: CreditRole,
        cast_order: Optional[int] = None,
    ) -> DBCredit:
        movie = self.db.get(DBMovie, movie_id)
        if movie is None:
            raise NotFound(f"Movie {movie_id} not found")
        person = self.db.get(DBPerson, person_id)
        if person is None or person.owner_id != movie.owner_id:
            raise NotFound(f"Person {person_id} not found")
        if person.is_tombstone:
            raise InvalidArgument(f"Person {person_id} has been merged and cannot receive credits")
        if self.exists(movie_id, role, person_id):
            raise Conflict(f"{person.display_name} is already credited as {role} on this movie")

        obj = DBCredit(
            movie_id=movie_id,
            person_id=person_id,
            role=role,
            cast_order=cast_order if role is CreditRole.cast else None,
            seq=self._next_seq(movie_id),
        )
        self.db.add(obj)
        self.db.flush()
        return obj

    def unlink(self, credit_id: UUID, *, movie_id: Optional[UUID] = None) -> None:
        obj = self.get(credit_id)
        if obj is None or (movie_id is not None and obj.movie_id != movie_id):
            raise NotFound(f"Credit {credit_id} not found")
        self.db.delete(obj)
        self.db.flush()

    def unlink_all(self, movie_id: UUID, role: Optional[CreditRole] = None) -> int:
        stmt = delete(DBCredit).where(DBCredit.movie_id == movie_id)
        if role is not None:
            stmt = stmt.where(DBCredit.role == role)
        res = self.db.execute(stmt.execution_options(synchronize_session="fetch"))
        return res.rowcount or 0

    def relink(self, credit_id: UUID, new_person_id: UUID) -> DBCredit:
        obj = self.get(credit_id)
        if obj is None:
            raise NotFound(f"Credit {credit_id} not found")
        if obj.person_id == new_person_id:
            return obj
        if self.exists(obj.movie_id, obj.role, new_person_id):
            raise Conflict(f"Person {new_person_id} already holds {obj.role} on movie {obj.movie_id}")
        obj.person_id = new_person_id
        self.db.flush()
        # person relationship is joined-loaded; drop the stale reference
        self.db.expire(obj, ["person"])
        return obj
