# tests/services/test_browse_api.py
import uuid
from http import HTTPStatus

API = "/api"


def _movie(client, title, *, countries="", release_date=None, director=None):
    r = client.post(
        f"{API}/movies",
        json={"title": title, "production_countries": countries, "release_date": release_date, "director": director},
    )
    assert r.status_code == HTTPStatus.CREATED, r.text
    return r.json()


def _tag(client, name):
    r = client.post(f"{API}/tags", json={"name": name})
    assert r.status_code == HTTPStatus.CREATED, r.text
    return r.json()


def _watch(client, movie_id, when, score=None):
    r = client.post(f"{API}/watch-logs", json={"movie_id": movie_id, "watched_at": when, "score": score})
    assert r.status_code == HTTPStatus.CREATED, r.text


def _ids(r):
    assert r.status_code == HTTPStatus.OK, r.text
    return {m["id"] for m in r.json()}


def test_movie_list_filters_combine(api_client):
    story = _movie(api_client, "Tokyo Story", release_date="1953-11-03", director="Ozu")
    clouds = _movie(api_client, "Floating Clouds", release_date="1955-01-15", director="Naruse")
    home = _movie(api_client, "100% Home Video")
    classic = _tag(api_client, "classic")
    api_client.put(f"{API}/movies/{story['id']}/tags/{classic['id']}")
    api_client.put(f"{API}/movies/{clouds['id']}/tags/{classic['id']}")
    ozu = api_client.get(f"{API}/people", params={"q": "ozu"}).json()[0]["person"]

    def listing(**params):
        return _ids(api_client.get(f"{API}/movies", params=params))

    assert listing(tag_id=classic["id"]) == {story["id"], clouds["id"]}
    assert listing(person_id=ozu["id"]) == {story["id"]}
    assert listing(year_from=1954) == {clouds["id"]}
    assert listing(year_to=1954) == {story["id"]}
    assert listing(tag_id=classic["id"], year_from=1950, year_to=1953) == {story["id"]}
    assert listing(q="100%") == {home["id"]}
    assert listing(q="%") == {home["id"]}


def test_browse_by_month_country_score_and_tag(api_client):
    one = _movie(api_client, "One", countries="Japan")
    two = _movie(api_client, "Two", countries="Japan, France")
    _movie(api_client, "Unwatched", countries="Italy")
    _watch(api_client, one["id"], "2024-01-05T20:00:00Z", "neutral")
    _watch(api_client, one["id"], "2024-02-05T20:00:00Z", "good")
    _watch(api_client, two["id"], "2024-02-10T20:00:00Z", "bad")

    assert _ids(api_client.get(f"{API}/browse/months/2024-01")) == {one["id"]}
    assert _ids(api_client.get(f"{API}/browse/months/2024-02")) == {one["id"], two["id"]}
    assert _ids(api_client.get(f"{API}/browse/months/2023-12")) == set()
    assert api_client.get(f"{API}/browse/months/2024-13").status_code == HTTPStatus.BAD_REQUEST

    assert _ids(api_client.get(f"{API}/browse/countries/France")) == {two["id"]}
    assert _ids(api_client.get(f"{API}/browse/countries/Japan")) == {one["id"], two["id"]}

    assert _ids(api_client.get(f"{API}/browse/scores/good")) == {one["id"]}
    assert _ids(api_client.get(f"{API}/browse/scores/neutral")) == set()
    assert _ids(api_client.get(f"{API}/browse/scores/bad")) == {two["id"]}
    assert api_client.get(f"{API}/browse/scores/great").status_code == HTTPStatus.UNPROCESSABLE_ENTITY

    tag = _tag(api_client, "rewatch")
    api_client.put(f"{API}/movies/{one['id']}/tags/{tag['id']}")
    assert _ids(api_client.get(f"{API}/browse/tags/{tag['id']}")) == {one["id"]}
    assert api_client.get(f"{API}/browse/tags/{uuid.uuid4()}").status_code == HTTPStatus.NOT_FOUND
