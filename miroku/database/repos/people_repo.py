from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Set
from uuid import UUID

from sqlalchemy import select, and_, func, delete, exists
from sqlalchemy.orm import Session, aliased

from miroku.common.strings.splitters import normalize_name
from miroku.database.models.person import (
    Person as DBPerson,
    Credit as DBCredit,
)
from miroku.domain.enums import CreditRole
from miroku.domain.errors import InvalidArgument, NotFound


@dataclass
class PersonUsage:
    person: DBPerson
    credit_count: int = 0
    movie_count: int = 0
    roles: Set[CreditRole] = field(default_factory=set)


class SqlAlchemyPeopleRepo:
    """
    Owner-scoped store of Person identities.

    Every read that feeds a listing or a lookup used for new credits filters
    out tombstones (merged_into_id IS NOT NULL).
    """

    def __init__(self, session: Session) -> None:
        self.db = session

    def _active(self, owner_id: UUID):
        return select(DBPerson).where(
            and_(DBPerson.owner_id == owner_id, DBPerson.merged_into_id.is_(None))
        )

    # -------- lookups --------

    def get(self, owner_id: UUID, person_id: UUID) -> Optional[DBPerson]:
        obj = self.db.get(DBPerson, person_id)
        if obj is None or obj.owner_id != owner_id:
            return None
        return obj

    def get_or_raise(self, owner_id: UUID, person_id: UUID) -> DBPerson:
        obj = self.get(owner_id, person_id)
        if obj is None:
            raise NotFound(f"Person {person_id} not found")
        return obj

    def find_by_external_id(self, owner_id: UUID, external_id: int) -> Optional[DBPerson]:
        """Oldest active person carrying this catalog id; the name is not part of the key."""
        stmt = (
            self._active(owner_id)
            .where(DBPerson.external_id == external_id)
            .order_by(DBPerson.date_created.asc(), DBPerson.id.asc())
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def resolve_external_id(self, owner_id: UUID, external_id: int) -> Optional[DBPerson]:
        """
        Active person for a catalog id, following merges.

        When only tombstones carry the id, the oldest one is followed along
        merged_into_id to its active target. A target without a catalog id
        adopts this one, so the next lookup finds it directly.
        """
        found = self.find_by_external_id(owner_id, external_id)
        if found is not None:
            return found
        stmt = (
            select(DBPerson)
            .where(
                DBPerson.owner_id == owner_id,
                DBPerson.external_id == external_id,
                DBPerson.merged_into_id.is_not(None),
            )
            .order_by(DBPerson.date_created.asc(), DBPerson.id.asc())
            .limit(1)
        )
        person = self.db.execute(stmt).scalars().first()
        seen: Set[UUID] = set()
        while person is not None and person.is_tombstone:
            if person.id in seen:
                return None
            seen.add(person.id)
            person = self.get(owner_id, person.merged_into_id)
        if person is None:
            return None
        if person.external_id is None:
            person.external_id = external_id
            self.db.flush()
        return person

    def find_by_display_name(self, owner_id: UUID, display_name: str) -> Optional[DBPerson]:
        name = normalize_name(display_name)
        if not name:
            return None
        stmt = (
            self._active(owner_id)
            .where(DBPerson.display_name == name)
            .order_by(DBPerson.date_created.asc(), DBPerson.id.asc())
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    # -------- mutations --------

    def create(self, owner_id: UUID, *, display_name: str, external_id: Optional[int] = None) -> DBPerson:
        name = normalize_name(display_name)
        if not name:
            raise InvalidArgument("display_name must not be empty")
        obj = DBPerson(owner_id=owner_id, display_name=name, external_id=external_id)
        self.db.add(obj)
        self.db.flush()
        return obj

    def rename(self, owner_id: UUID, person_id: UUID, display_name: str) -> DBPerson:
        obj = self.get_or_raise(owner_id, person_id)
        name = normalize_name(display_name)
        if not name:
            raise InvalidArgument("display_name must not be empty")
        obj.display_name = name
        self.db.flush()
        return obj

    def find_or_create_external(
        self,
        owner_id: UUID,
        *,
        external_id: Optional[int],
        display_name: str,
        refresh_name: bool = False,
    ) -> DBPerson:
        """
        Resolve a catalog person to an active Person, creating one if needed.
        With refresh_name the fetched name overwrites a differing stored one.
        """
        if external_id is None:
            found = self.find_by_display_name(owner_id, display_name)
        else:
            found = self.resolve_external_id(owner_id, external_id)
        if found is None:
            return self.create(owner_id, display_name=display_name, external_id=external_id)
        name = normalize_name(display_name)
        if refresh_name and name and found.display_name != name:
            found.display_name = name
            self.db.flush()
        return found

    def mark_merged(self, source: DBPerson, target: DBPerson) -> None:
        source.merged_into_id = target.id
        self.db.flush()

    def clear_merged(self, source: DBPerson) -> None:
        source.merged_into_id = None
        self.db.flush()

    # -------- listings --------

    def list_active(self, owner_id: UUID, q: Optional[str] = None) -> List[PersonUsage]:
        stmt = self._active(owner_id)
        q = (q or "").strip().lower()
        if q:
            stmt = stmt.where(func.lower(DBPerson.display_name).contains(q, autoescape=True))
        stmt = stmt.order_by(DBPerson.display_name.asc(), DBPerson.date_created.asc())
        people = self.db.execute(stmt).scalars().all()
        if not people:
            return []

        usage: Dict[UUID, PersonUsage] = {p.id: PersonUsage(person=p) for p in people}
        movies: Dict[UUID, Set[UUID]] = {p.id: set() for p in people}
        rows = self.db.execute(
            select(DBCredit.person_id, DBCredit.movie_id, DBCredit.role)
            .where(DBCredit.person_id.in_(usage.keys()))
        ).all()
        for person_id, movie_id, role in rows:
            u = usage[person_id]
            u.credit_count += 1
            u.roles.add(role)
            movies[person_id].add(movie_id)
        for pid, mids in movies.items():
            usage[pid].movie_count = len(mids)
        return [usage[p.id] for p in people]

    def list_merge_candidates(self, owner_id: UUID, source_id: UUID) -> List[PersonUsage]:
        self.get_or_raise(owner_id, source_id)
        return [u for u in self.list_active(owner_id) if u.person.id != source_id]

    def list_merged_into(self, owner_id: UUID, target_id: UUID) -> List[DBPerson]:
        self.get_or_raise(owner_id, target_id)
        stmt = (
            select(DBPerson)
            .where(and_(DBPerson.owner_id == owner_id, DBPerson.merged_into_id == target_id))
            .order_by(DBPerson.display_name.asc())
        )
        return self.db.execute(stmt).scalars().all()

    def delete_unused(self, owner_id: UUID) -> int:
        """
        Hard-delete active persons with zero credits. Tombstones are never
        touched, and neither is any person a tombstone still points at.
        """
        tomb = aliased(DBPerson)
        ids = self.db.execute(
            select(DBPerson.id).where(
                DBPerson.owner_id == owner_id,
                DBPerson.merged_into_id.is_(None),
                ~exists().where(DBCredit.person_id == DBPerson.id),
                ~exists().where(tomb.merged_into_id == DBPerson.id),
            )
        ).scalars().all()
        if not ids:
            return 0
        self.db.execute(
            delete(DBPerson).where(DBPerson.id.in_(ids)).execution_options(synchronize_session="fetch")
        )
        return len(ids)
