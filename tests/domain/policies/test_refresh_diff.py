from miroku.domain.entities.movie_snapshot import ExternalPersonCredit as P, MovieSnapshot
from miroku.domain.enums import RefreshField
from miroku.domain.policies.refresh_diff import cast_changed, diff_snapshots, names_changed


def _people(*names):
    return [P(name=n) for n in names]


def test_directors_compare_as_name_sets():
    assert not names_changed(_people("A", "B"), _people("B", "A"))
    assert not names_changed(_people("A", "A", "B"), _people("A", "B"))
    assert names_changed(_people("A"), _people("A", "C"))


def test_cast_reorder_alone_is_a_change():
    assert cast_changed(_people("A", "B"), _people("B", "A"))
    assert not cast_changed(_people("A", "B"), _people("A", "B"))
    assert cast_changed(_people("A"), _people("A", "B"))


def test_countries_are_order_sensitive():
    cur = MovieSnapshot(production_countries=["Japan", "France"])
    new = MovieSnapshot(production_countries=["France", "Japan"])
    diff = diff_snapshots(cur, new)
    assert diff[RefreshField.production_countries].changed


def test_scalars_compare_literally():
    cur = MovieSnapshot(title="Tokyo Story", poster_ref="/a.jpg", release_date="1953-11-03")
    new = MovieSnapshot(title="Tokyo Story", poster_ref="/b.jpg", release_date=None)
    diff = diff_snapshots(cur, new)
    assert not diff[RefreshField.title].changed
    assert diff[RefreshField.poster_ref].changed
    assert diff[RefreshField.release_date].changed
    assert diff.changed_fields == [RefreshField.poster_ref, RefreshField.release_date]


def test_diff_lists_every_field_and_shows_names():
    cur = MovieSnapshot(title="X", directors=_people("Ozu"), cast=_people("Hara", "Ryu"))
    new = MovieSnapshot(title="X", directors=_people("Ozu"), cast=_people("Ryu", "Hara"))
    diff = diff_snapshots(cur, new)

    assert set(diff.changes) == set(RefreshField)
    assert diff[RefreshField.cast].current == ["Hara", "Ryu"]
    assert diff[RefreshField.cast].incoming == ["Ryu", "Hara"]
    assert diff.changed_fields == [RefreshField.cast]
    assert diff.has_changes


def test_identical_snapshots_have_no_changes():
    snap = MovieSnapshot(title="X", production_countries=["Japan"], writers=_people("Noda"))
    assert not diff_snapshots(snap, snap).has_changes


def test_names_differing_only_in_spacing_are_equal():
    assert not names_changed(_people("Yasujiro Ozu"), _people("Yasujiro  Ozu "))
    assert not cast_changed(_people("Setsuko Hara", "Ryu"), _people(" Setsuko Hara", "Ryu"))
