# tests/services/test_people_api.py
from http import HTTPStatus

API = "/api"


def _manual_movie(client, title, director=None):
    r = client.post(f"{API}/movies", json={"title": title, "director": director})
    assert r.status_code == HTTPStatus.CREATED, r.text
    return r.json()


def _credit(client, movie_id, role, name):
    r = client.post(f"{API}/movies/{movie_id}/credits", json={"role": role, "name": name})
    assert r.status_code == HTTPStatus.CREATED, r.text
    return r.json()


def test_people_listing_rename_and_merge_flow(api_client):
    m1 = _manual_movie(api_client, "Early Summer", director="Ozu")
    m2 = _manual_movie(api_client, "Tokyo Story")
    dup = _credit(api_client, m2["id"], "director", "Ozu Yasujiro")["person"]
    _credit(api_client, m1["id"], "writer", "Ozu Yasujiro")

    r = api_client.get(f"{API}/people", params={"q": "ozu"})
    assert r.status_code == HTTPStatus.OK
    rows = {row["person"]["display_name"]: row for row in r.json()}
    assert set(rows) == {"Ozu", "Ozu Yasujiro"}
    assert rows["Ozu Yasujiro"]["credit_count"] == 2
    assert sorted(rows["Ozu Yasujiro"]["roles"]) == ["director", "writer"]
    ozu = rows["Ozu"]["person"]

    # candidates exclude the person itself
    r = api_client.get(f"{API}/people/{dup['id']}/merge-candidates")
    assert [row["person"]["id"] for row in r.json()] == [ozu["id"]]

    r = api_client.post(f"{API}/people/{dup['id']}/merge", json={"target_id": ozu["id"]})
    assert r.status_code == HTTPStatus.OK, r.text
    assert r.json() == {"deleted": 0, "relinked": 2}

    r = api_client.get(f"{API}/people")
    assert [row["person"]["id"] for row in r.json()] == [ozu["id"]]
    assert r.json()[0]["movie_count"] == 2

    r = api_client.get(f"{API}/people/{ozu['id']}/merged")
    assert [p["id"] for p in r.json()] == [dup["id"]]

    # a tombstone cannot be merged again, nor take credits
    r = api_client.post(f"{API}/people/{dup['id']}/merge", json={"target_id": ozu["id"]})
    assert r.status_code == HTTPStatus.BAD_REQUEST
    r = api_client.post(f"{API}/movies/{m1['id']}/credits", json={"role": "cast", "person_id": dup["id"]})
    assert r.status_code == HTTPStatus.BAD_REQUEST

    r = api_client.post(f"{API}/people/{dup['id']}/unmerge")
    assert r.status_code == HTTPStatus.OK
    assert r.json()["merged_into_id"] is None

    r = api_client.patch(f"{API}/people/{ozu['id']}", json={"display_name": "小津安二郎"})
    assert r.json()["display_name"] == "小津安二郎"


def test_self_merge_and_missing_person(api_client):
    m = _manual_movie(api_client, "Good Morning", director="Ozu")
    pid = api_client.get(f"{API}/movies/{m['id']}/credits").json()["directors"][0]["person"]["id"]

    r = api_client.post(f"{API}/people/{pid}/merge", json={"target_id": pid})
    assert r.status_code == HTTPStatus.BAD_REQUEST
    assert "itself" in r.json()["detail"]

    r = api_client.get(f"{API}/people/00000000-0000-0000-0000-000000000000")
    assert r.status_code == HTTPStatus.NOT_FOUND


def test_delete_unused_and_dedupe(api_client, fake_catalog):
    fake_catalog.add(1, "Late Spring", cast=[(20, "Hara")])
    r = api_client.post(f"{API}/movies/import", json={"external_id": 1})
    assert r.status_code == HTTPStatus.CREATED, r.text
    movie = r.json()

    # an orphan left behind after removing its only credit
    c = _credit(api_client, movie["id"], "cast", "Extra")
    api_client.delete(f"{API}/movies/{movie['id']}/credits/{c['id']}")

    r = api_client.delete(f"{API}/people/unused")
    assert r.json() == {"deleted": 1}

    r = api_client.post(f"{API}/people/dedupe")
    assert r.status_code == HTTPStatus.OK
    assert r.json()["groups"] == 0


def test_owner_header_is_required(api_client):
    r = api_client.get(f"{API}/people", headers={"X-Owner-Id": ""})
    assert r.status_code == HTTPStatus.UNAUTHORIZED
    r = api_client.get(f"{API}/people", headers={"X-Owner-Id": "not-a-uuid"})
    assert r.status_code == HTTPStatus.UNAUTHORIZED


def test_owners_are_isolated(api_client):
    import uuid

    m = _manual_movie(api_client, "Private")
    r = api_client.get(f"{API}/movies/{m['id']}", headers={"X-Owner-Id": str(uuid.uuid4())})
    assert r.status_code == HTTPStatus.NOT_FOUND


def test_person_filmography_groups_movies_by_role(api_client):
    late = _manual_movie(api_client, "Late Spring", director="Ozu")
    _manual_movie(api_client, "Tokyo Story", director="Ozu")
    _manual_movie(api_client, "Floating Clouds", director="Naruse")
    ozu = api_client.get(f"{API}/people", params={"q": "ozu"}).json()[0]["person"]
    r = api_client.post(f"{API}/movies/{late['id']}/credits", json={"role": "writer", "person_id": ozu["id"]})
    assert r.status_code == HTTPStatus.CREATED, r.text

    r = api_client.get(f"{API}/people/{ozu['id']}/filmography")
    assert r.status_code == HTTPStatus.OK, r.text
    body = r.json()
    assert body["person"]["id"] == ozu["id"]
    assert {m["title"] for m in body["directed"]} == {"Late Spring", "Tokyo Story"}
    assert [m["title"] for m in body["written"]] == ["Late Spring"]
    assert body["cast"] == []

    import uuid
    assert api_client.get(f"{API}/people/{uuid.uuid4()}/filmography").status_code == HTTPStatus.NOT_FOUND
