from datetime import datetime, timezone

import pytest

from miroku.database.repos.movie_repo import SqlAlchemyMovieRepo
from miroku.database.repos.tag_repo import TagRepo
from miroku.database.repos.watch_log_repo import WatchLogRepo
from miroku.domain.enums import RefreshField, WatchMethod, WatchScore
from miroku.domain.errors import Conflict, InvalidArgument, NotFound


def _movie(db, owner_id, title):
    return SqlAlchemyMovieRepo(db).create(owner_id, snapshot={RefreshField.title: title})


def test_tag_crud_and_counts(db, owner_id):
    repo = TagRepo(db)
    m1, m2 = _movie(db, owner_id, "One"), _movie(db, owner_id, "Two")
    classic = repo.create_tag(owner_id, name=" classic ", color="#aa0000")
    rewatch = repo.create_tag(owner_id, name="rewatch")

    with pytest.raises(Conflict):
        repo.create_tag(owner_id, name="classic")
    with pytest.raises(InvalidArgument):
        repo.create_tag(owner_id, name="  ")

    repo.add_tag_to_movie(owner_id, m1.id, classic.id)
    repo.add_tag_to_movie(owner_id, m1.id, classic.id)   # idempotent
    repo.add_tag_to_movie(owner_id, m2.id, classic.id)
    repo.add_tag_to_movie(owner_id, m1.id, rewatch.id)

    assert [(t.name, n) for t, n in repo.list_tags(owner_id)] == [("classic", 2), ("rewatch", 1)]
    assert [t.name for t in repo.list_for_movie(m1.id)] == ["classic", "rewatch"]
    batch = repo.batch_tags_for_movies([m1.id, m2.id])
    assert [t.name for t in batch[m2.id]] == ["classic"]

    repo.remove_tag_from_movie(m1.id, rewatch.id)
    assert [t.name for t in repo.list_for_movie(m1.id)] == ["classic"]

    with pytest.raises(Conflict):
        repo.update_tag(owner_id, rewatch.id, name="classic")
    repo.update_tag(owner_id, rewatch.id, name="again", color="#00ff00")
    assert repo.get_by_name(owner_id, "again").color == "#00ff00"

    repo.delete_tag(owner_id, classic.id)
    assert repo.list_for_movie(m2.id) == []


def test_watch_log_keeps_movie_count(db, owner_id):
    movie = _movie(db, owner_id, "Floating Weeds")
    repo = WatchLogRepo(db)
    first = repo.create(
        owner_id,
        movie_id=movie.id,
        watched_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        watch_method=WatchMethod.theater,
        score=WatchScore.good,
    )
    repo.create(owner_id, movie_id=movie.id, watched_at=datetime(2024, 2, 1, tzinfo=timezone.utc))
    assert movie.watch_count == 2

    logs = repo.list(owner_id, movie_id=movie.id)
    assert logs[-1].id == first.id

    updated = repo.update(owner_id, first.id, memo="again soon", score=None)
    assert updated.memo == "again soon" and updated.score is None
    assert updated.watch_method is WatchMethod.theater

    repo.delete(owner_id, first.id)
    assert movie.watch_count == 1
    with pytest.raises(NotFound):
        repo.get_or_raise(owner_id, first.id)


def test_watch_log_requires_owned_movie(db, owner_id):
    import uuid

    movie = _movie(db, owner_id, "Mine")
    with pytest.raises(NotFound):
        WatchLogRepo(db).create(uuid.uuid4(), movie_id=movie.id, watched_at=datetime.now(timezone.utc))
