# miroku/services/people/merge.py
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Set, Tuple
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from miroku.common.logging import get_logger
from miroku.database.core.transaction import atomic
from miroku.database.models.person import Person as DBPerson, Credit as DBCredit
from miroku.database.repos.credit_repo import SqlAlchemyCreditRepo
from miroku.database.repos.people_repo import SqlAlchemyPeopleRepo
from miroku.domain.dataclasses.reports import DedupeReport
from miroku.domain.enums import CreditRole
from miroku.domain.errors import InvalidArgument

logger = get_logger(__name__)


@dataclass(frozen=True)
class MergeResult:
    deleted: int    # source credits dropped because target already held (movie, role)
    relinked: int   # source credits moved onto target


class MergeService:
    """
    Consolidates two Person rows for the same real-world individual.

    Source credits whose (movie, role) the target already holds are deleted;
    the rest are re-pointed at the target; the source becomes a tombstone.
    All of it runs in one savepoint.

    Merge is not fully reversible: unmerge() only clears the tombstone and
    never restores deleted or relinked credits.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.people = SqlAlchemyPeopleRepo(db)
        self.credits = SqlAlchemyCreditRepo(db)

    def _check(self, owner_id: UUID, source_id: UUID, target_id: UUID) -> Tuple[DBPerson, DBPerson]:
        if source_id == target_id:
            raise InvalidArgument("Cannot merge a person into itself")
        source = self.people.get_or_raise(owner_id, source_id)
        target = self.people.get_or_raise(owner_id, target_id)
        if source.is_tombstone:
            raise InvalidArgument(f"{source.display_name} has already been merged")
        if target.is_tombstone:
            raise InvalidArgument(f"{target.display_name} has been merged and cannot be a merge target")
        return source, target

    def _merge_rows(self, source: DBPerson, target: DBPerson) -> MergeResult:
        occupied: Set[Tuple[UUID, CreditRole]] = {
            (c.movie_id, c.role) for c in self.credits.list_for_person(target.id)
        }
        colliding: List[UUID] = []
        transferable: List[UUID] = []
        for c in self.credits.list_for_person(source.id):
            (colliding if (c.movie_id, c.role) in occupied else transferable).append(c.id)

        if colliding:
            self.db.execute(
                delete(DBCredit)
                .where(DBCredit.id.in_(colliding))
                .execution_options(synchronize_session="fetch")
            )
        for credit_id in transferable:
            self.credits.relink(credit_id, target.id)

        self.people.mark_merged(source, target)
        return MergeResult(deleted=len(colliding), relinked=len(transferable))

    def merge(self, owner_id: UUID, source_id: UUID, target_id: UUID) -> MergeResult:
        source, target = self._check(owner_id, source_id, target_id)
        with atomic(self.db):
            result = self._merge_rows(source, target)
        logger.info(
            "merged person %s into %s (relinked=%d deleted=%d)",
            source.id, target.id, result.relinked, result.deleted,
        )
        return result

    def unmerge(self, owner_id: UUID, person_id: UUID) -> DBPerson:
        """Clear the tombstone; idempotent on an active person."""
        person = self.people.get_or_raise(owner_id, person_id)
        if person.is_tombstone:
            self.people.clear_merged(person)
            logger.info("unmerged person %s", person.id)
        return person

    def dedupe_by_external_id(self, owner_id: UUID) -> DedupeReport:
        """
        Fold active persons sharing a catalog id into the oldest one.
        Duplicates are tombstoned through the same merge path.
        """
        rep = DedupeReport()
        rep.start()
        stmt = (
            select(DBPerson)
            .where(
                DBPerson.owner_id == owner_id,
                DBPerson.merged_into_id.is_(None),
                DBPerson.external_id.is_not(None),
            )
            .order_by(DBPerson.external_id.asc(), DBPerson.date_created.asc(), DBPerson.id.asc())
        )
        groups: Dict[int, List[DBPerson]] = defaultdict(list)
        for p in self.db.execute(stmt).scalars().all():
            groups[p.external_id].append(p)

        with atomic(self.db):
            for external_id, people in groups.items():
                if len(people) < 2:
                    continue
                rep.groups += 1
                primary, *duplicates = people
                for dup in duplicates:
                    res = self._merge_rows(dup, primary)
                    rep.merged += 1
                    rep.deleted_links += res.deleted
                    rep.relinked += res.relinked
        rep.stop()
        logger.info(
            "dedupe owner=%s groups=%d merged=%d relinked=%d deleted=%d",
            owner_id, rep.groups, rep.merged, rep.relinked, rep.deleted_links,
        )
        return rep
