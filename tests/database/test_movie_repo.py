from datetime import datetime, timezone
import uuid

from miroku.database.repos.analytics_repo import SqlAlchemyAnalyticsRepo
from miroku.database.repos.credit_repo import SqlAlchemyCreditRepo
from miroku.database.repos.movie_repo import SqlAlchemyMovieRepo
from miroku.database.repos.people_repo import SqlAlchemyPeopleRepo
from miroku.database.repos.tag_repo import TagRepo
from miroku.database.repos.watch_log_repo import WatchLogRepo
from miroku.domain.enums import CreditRole, RefreshField, WatchScore


def _movie(db, owner_id, title, snapshot_release_date=None, **overrides):
    return SqlAlchemyMovieRepo(db).create(
        owner_id,
        snapshot={RefreshField.title: title, RefreshField.release_date: snapshot_release_date},
        overrides=overrides or None,
    )


def _titles(rows):
    return {m.title for m in rows}


def test_list_title_search_escapes_wildcards(db, owner_id):
    repo = SqlAlchemyMovieRepo(db)
    for title in ("100% Wolf", "1000 Wolves", "A_Z", "ABZ"):
        _movie(db, owner_id, title)

    assert _titles(repo.list(owner_id, q="100%")) == {"100% Wolf"}
    assert _titles(repo.list(owner_id, q="a_z")) == {"A_Z"}
    assert _titles(repo.list(owner_id, q="wol")) == {"100% Wolf", "1000 Wolves"}


def test_list_year_bounds_use_effective_release_date(db, owner_id):
    repo = SqlAlchemyMovieRepo(db)
    _movie(db, owner_id, "Tokyo Story", "1953-11-03")
    _movie(db, owner_id, "Late Spring", "1949-09-13", release_date="1960-01-01")
    _movie(db, owner_id, "Undated")

    assert _titles(repo.list(owner_id, year_from=1950)) == {"Tokyo Story", "Late Spring"}
    assert _titles(repo.list(owner_id, year_to=1955)) == {"Tokyo Story"}
    assert _titles(repo.list(owner_id, year_from=1953, year_to=1953)) == {"Tokyo Story"}
    assert _titles(repo.list(owner_id)) == {"Tokyo Story", "Late Spring", "Undated"}


def test_list_by_tags_and_person(db, owner_id):
    repo = SqlAlchemyMovieRepo(db)
    tags = TagRepo(db)
    a, b, c = (_movie(db, owner_id, t) for t in ("A", "B", "C"))
    red = tags.create_tag(owner_id, name="red")
    blue = tags.create_tag(owner_id, name="blue")
    tags.add_tag_to_movie(owner_id, a.id, red.id)
    tags.add_tag_to_movie(owner_id, b.id, blue.id)
    ozu = SqlAlchemyPeopleRepo(db).create(owner_id, display_name="Ozu")
    SqlAlchemyCreditRepo(db).link(movie_id=b.id, person_id=ozu.id, role=CreditRole.writer)
    SqlAlchemyCreditRepo(db).link(movie_id=c.id, person_id=ozu.id, role=CreditRole.director)

    assert _titles(repo.list(owner_id, tag_ids=[red.id])) == {"A"}
    assert _titles(repo.list(owner_id, tag_ids=[red.id, blue.id])) == {"A", "B"}
    assert _titles(repo.list(owner_id, person_id=ozu.id)) == {"B", "C"}
    assert _titles(repo.list(owner_id, tag_ids=[blue.id], person_id=ozu.id)) == {"B"}


def test_filmography_and_list_by_ids_stay_in_owner_scope(db, owner_id):
    repo = SqlAlchemyMovieRepo(db)
    mine = _movie(db, owner_id, "Mine")
    other = _movie(db, uuid.uuid4(), "Theirs")
    ozu = SqlAlchemyPeopleRepo(db).create(owner_id, display_name="Ozu")
    SqlAlchemyCreditRepo(db).link(movie_id=mine.id, person_id=ozu.id, role=CreditRole.director)
    SqlAlchemyCreditRepo(db).link(movie_id=mine.id, person_id=ozu.id, role=CreditRole.writer)

    assert [m.id for m in repo.list_by_ids(owner_id, [mine.id, other.id])] == [mine.id]
    assert repo.list_by_ids(owner_id, []) == []

    films = repo.filmography(owner_id, ozu.id)
    assert [m.id for m in films[CreditRole.director]] == [mine.id]
    assert [m.id for m in films[CreditRole.writer]] == [mine.id]
    assert films[CreditRole.cast] == []


def test_analytics_repo_loads_owner_records(db, owner_id):
    movie = _movie(db, owner_id, "Equinox Flower", production_countries=["Japan"])
    _movie(db, uuid.uuid4(), "Someone Else's")
    ozu = SqlAlchemyPeopleRepo(db).create(owner_id, display_name="Ozu")
    SqlAlchemyCreditRepo(db).link(movie_id=movie.id, person_id=ozu.id, role=CreditRole.director)
    tag = TagRepo(db).create_tag(owner_id, name="color")
    TagRepo(db).add_tag_to_movie(owner_id, movie.id, tag.id)
    WatchLogRepo(db).create(
        owner_id, movie_id=movie.id, watched_at=datetime(2024, 5, 1, tzinfo=timezone.utc), score=WatchScore.good
    )

    repo = SqlAlchemyAnalyticsRepo(db)
    [log] = repo.watch_records(owner_id)
    assert log.movie_id == movie.id and log.score is WatchScore.good
    assert [(m.movie_id, m.countries) for m in repo.movie_records(owner_id)] == [(movie.id, ("Japan",))]
    [credit] = repo.credit_records(owner_id)
    assert (credit.name, credit.role) == ("Ozu", CreditRole.director)
    assert [(t.tag_id, t.name) for t in repo.tag_records(owner_id)] == [(tag.id, "color")]
