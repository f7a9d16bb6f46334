from datetime import datetime, timedelta, timezone

import pytest

from miroku.database.models.person import Person
from miroku.database.repos.credit_repo import SqlAlchemyCreditRepo
from miroku.database.repos.movie_repo import SqlAlchemyMovieRepo
from miroku.database.repos.people_repo import SqlAlchemyPeopleRepo
from miroku.domain.enums import CreditRole, RefreshField
from miroku.domain.errors import InvalidArgument, NotFound
from miroku.services.people.merge import MergeService


def _movie(db, owner_id, title):
    return SqlAlchemyMovieRepo(db).create(owner_id, snapshot={RefreshField.title: title})


def _person(db, owner_id, name, external_id=None, minutes=0):
    p = Person(
        owner_id=owner_id,
        display_name=name,
        external_id=external_id,
        date_created=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
    )
    db.add(p)
    db.flush()
    return p


def _roles(db, person_id):
    return sorted((c.movie_id, c.role.value) for c in SqlAlchemyCreditRepo(db).list_for_person(person_id))


def test_merge_moves_credits_and_drops_collisions(db, owner_id):
    credits = SqlAlchemyCreditRepo(db)
    m1, m2 = _movie(db, owner_id, "Early Summer"), _movie(db, owner_id, "Floating Weeds")
    src = _person(db, owner_id, "Ozu Y.")
    dst = _person(db, owner_id, "Ozu")

    credits.link(movie_id=m1.id, person_id=src.id, role=CreditRole.director)   # collides
    credits.link(movie_id=m1.id, person_id=src.id, role=CreditRole.writer)     # moves
    credits.link(movie_id=m2.id, person_id=src.id, role=CreditRole.director)   # moves
    credits.link(movie_id=m1.id, person_id=dst.id, role=CreditRole.director)

    res = MergeService(db).merge(owner_id, src.id, dst.id)

    assert (res.deleted, res.relinked) == (1, 2)
    assert src.merged_into_id == dst.id
    assert _roles(db, src.id) == []
    assert _roles(db, dst.id) == sorted(
        [(m1.id, "director"), (m1.id, "writer"), (m2.id, "director")]
    )
    # no duplicate (movie, role, person) anywhere
    assert credits.count_for_movie(m1.id, CreditRole.director) == 1


def test_merge_hides_source_from_listings(db, owner_id):
    src = _person(db, owner_id, "A")
    dst = _person(db, owner_id, "B")
    MergeService(db).merge(owner_id, src.id, dst.id)
    people = SqlAlchemyPeopleRepo(db)
    assert [u.person.id for u in people.list_active(owner_id)] == [dst.id]
    assert people.list_merged_into(owner_id, dst.id) == [src]


def test_merge_rejects_bad_pairs(db, owner_id):
    svc = MergeService(db)
    a = _person(db, owner_id, "A")
    b = _person(db, owner_id, "B")
    c = _person(db, owner_id, "C")

    with pytest.raises(InvalidArgument):
        svc.merge(owner_id, a.id, a.id)

    svc.merge(owner_id, a.id, b.id)
    with pytest.raises(InvalidArgument):
        svc.merge(owner_id, a.id, c.id)      # source already merged
    with pytest.raises(InvalidArgument):
        svc.merge(owner_id, c.id, a.id)      # target is a tombstone

    import uuid
    with pytest.raises(NotFound):
        svc.merge(owner_id, c.id, uuid.uuid4())


def test_unmerge_is_lossy_and_idempotent(db, owner_id):
    credits = SqlAlchemyCreditRepo(db)
    m = _movie(db, owner_id, "Good Morning")
    src = _person(db, owner_id, "Src")
    dst = _person(db, owner_id, "Dst")
    credits.link(movie_id=m.id, person_id=src.id, role=CreditRole.cast, cast_order=0)

    svc = MergeService(db)
    svc.merge(owner_id, src.id, dst.id)
    restored = svc.unmerge(owner_id, src.id)

    assert restored.merged_into_id is None
    # credits stay with the target
    assert _roles(db, src.id) == []
    assert _roles(db, dst.id) == [(m.id, "cast")]

    again = svc.unmerge(owner_id, src.id)
    assert again.merged_into_id is None


def test_dedupe_folds_into_oldest(db, owner_id):
    credits = SqlAlchemyCreditRepo(db)
    m = _movie(db, owner_id, "Tokyo Twilight")
    oldest = _person(db, owner_id, "Hara", external_id=42, minutes=0)
    dup_a = _person(db, owner_id, "原節子", external_id=42, minutes=1)
    dup_b = _person(db, owner_id, "Setsuko", external_id=42, minutes=2)
    single = _person(db, owner_id, "Ryu", external_id=7)

    credits.link(movie_id=m.id, person_id=oldest.id, role=CreditRole.cast, cast_order=0)
    credits.link(movie_id=m.id, person_id=dup_a.id, role=CreditRole.cast, cast_order=1)    # collides
    credits.link(movie_id=m.id, person_id=dup_b.id, role=CreditRole.writer)                # moves

    rep = MergeService(db).dedupe_by_external_id(owner_id)

    assert (rep.groups, rep.merged, rep.deleted_links, rep.relinked) == (1, 2, 1, 1)
    assert dup_a.merged_into_id == oldest.id
    assert dup_b.merged_into_id == oldest.id
    assert single.merged_into_id is None
    assert SqlAlchemyPeopleRepo(db).find_by_external_id(owner_id, 42) is oldest
    assert _roles(db, oldest.id) == sorted([(m.id, "cast"), (m.id, "writer")])


def test_dedupe_with_nothing_to_do(db, owner_id):
    _person(db, owner_id, "Solo", external_id=1)
    rep = MergeService(db).dedupe_by_external_id(owner_id)
    assert rep.groups == 0 and rep.merged == 0
