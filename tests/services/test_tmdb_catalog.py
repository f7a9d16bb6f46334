import httpx
import pytest

from miroku.common.settings import CatalogConfig
from miroku.domain.errors import UpstreamUnavailable
from miroku.services.catalog.tmdb import TmdbCatalog

BASE = "https://catalog.test/3"

MOVIE = {
    "id": 18148,
    "title": "東京物語",
    "original_title": "東京物語",
    "poster_path": "/tokyo.jpg",
    "release_date": "1953-11-03",
    "production_countries": [{"iso_3166_1": "JP", "name": "Japan"}],
    "runtime": 136,
}
CREDITS = {
    "id": 18148,
    "cast": [
        {"id": 20, "name": "Chishu Ryu", "order": 0, "character": "Shukichi"},
        {"id": 21, "name": "Setsuko Hara", "order": 1},
    ],
    "crew": [
        {"id": 10, "name": "Yasujiro Ozu", "job": "Director", "department": "Directing"},
        {"id": 11, "name": "Kogo Noda", "job": "Screenplay", "department": "Writing"},
    ],
}
PEOPLE = {
    20: {"id": 20, "name": "Chishu Ryu", "also_known_as": ["Ryu Chishu", "笠智衆"]},
    21: {"id": 21, "name": "Setsuko Hara", "also_known_as": []},
    10: {"id": 10, "name": "Yasujiro Ozu", "also_known_as": ["小津安二郎"]},
}


def _catalog(handler, api_key="abc123"):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return TmdbCatalog(CatalogConfig(base_url=BASE, api_key=api_key), client=client)


def _routes(request: httpx.Request) -> httpx.Response:
    path = request.url.path.removeprefix("/3/")
    if path == "movie/18148":
        return httpx.Response(200, json=MOVIE)
    if path == "movie/18148/credits":
        return httpx.Response(200, json=CREDITS)
    if path.startswith("person/"):
        pid = int(path.split("/")[1])
        if pid in PEOPLE:
            return httpx.Response(200, json=PEOPLE[pid])
        return httpx.Response(500, json={"status_message": "boom"})
    if path == "search/movie":
        return httpx.Response(
            200,
            json={"page": 1, "total_pages": 1, "total_results": 1, "results": [MOVIE]},
        )
    return httpx.Response(404, json={})


def test_v3_key_goes_in_query_string():
    seen = []

    def handler(request):
        seen.append(request)
        return _routes(request)

    with _catalog(handler, api_key="0123abcd") as cat:
        cat.movie_details(18148)

    req = seen[0]
    assert req.url.params["api_key"] == "0123abcd"
    assert req.url.params["language"] == "ja-JP"
    assert "authorization" not in req.headers


def test_v4_token_goes_in_bearer_header():
    seen = []

    def handler(request):
        seen.append(request)
        return _routes(request)

    with _catalog(handler, api_key="eyJtoken") as cat:
        cat.search("tokyo")

    req = seen[0]
    assert req.headers["authorization"] == "Bearer eyJtoken"
    assert "api_key" not in req.url.params
    assert req.url.params["query"] == "tokyo"


def test_parses_details_search_and_credits():
    with _catalog(_routes) as cat:
        details = cat.movie_details(18148)
        page = cat.search("tokyo")
        credits = cat.movie_credits(18148)

    assert details.title == "東京物語"
    assert details.country_names() == ["Japan"]
    assert page.total_results == 1 and page.results[0].external_id == 18148
    assert [c.name for c in credits.cast] == ["Chishu Ryu", "Setsuko Hara"]
    assert [c.job for c in credits.crew] == ["Director", "Screenplay"]


def test_http_error_is_upstream_unavailable():
    with _catalog(lambda r: httpx.Response(500, json={})) as cat:
        with pytest.raises(UpstreamUnavailable, match="500"):
            cat.movie_details(1)


def test_transport_error_is_upstream_unavailable():
    def handler(request):
        raise httpx.ConnectError("no route", request=request)

    with _catalog(handler) as cat:
        with pytest.raises(UpstreamUnavailable):
            cat.movie_credits(1)


def test_malformed_payload_is_upstream_unavailable():
    with _catalog(lambda r: httpx.Response(200, json={"title": "no id"})) as cat:
        with pytest.raises(UpstreamUnavailable):
            cat.movie_details(1)
    with _catalog(lambda r: httpx.Response(200, json=[1, 2])) as cat:
        with pytest.raises(UpstreamUnavailable):
            cat.movie_details(1)
    with _catalog(lambda r: httpx.Response(200, content=b"<html>")) as cat:
        with pytest.raises(UpstreamUnavailable):
            cat.movie_details(1)


def test_display_names_fall_back_on_failed_lookup():
    # person 11 answers 500, so Noda keeps the catalog name
    with _catalog(_routes) as cat:
        details, credits = cat.movie_with_display_names(18148)

    assert details.external_id == 18148
    assert [c.shown_name for c in credits.cast] == ["笠智衆", "Setsuko Hara"]
    assert [c.shown_name for c in credits.crew] == ["小津安二郎", "Kogo Noda"]
