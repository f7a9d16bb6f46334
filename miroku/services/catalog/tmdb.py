# miroku/services/catalog/tmdb.py
"""
Thin synchronous client for the TMDB v3 REST API.

Auth: a v4 read-access token (JWT, starts with "eyJ") is sent as a Bearer
header; anything else is treated as a v3 key and sent as `api_key`.
Every failure (network, non-2xx, malformed JSON/shape) surfaces as
UpstreamUnavailable.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from miroku.common.iter import chunked
from miroku.common.logging import get_logger
from miroku.common.settings import CatalogConfig, get_settings
from miroku.domain.entities.catalog import (
    CatalogCastMember,
    CatalogCountry,
    CatalogCredits,
    CatalogCrewMember,
    CatalogMovie,
    CatalogMovieDetails,
    CatalogPerson,
    CatalogSearchPage,
)
from miroku.domain.errors import UpstreamUnavailable
from miroku.domain.policies.credit_selection import localized_name

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# payload parsing
# ---------------------------------------------------------------------------
def _opt_str(v: Any) -> Optional[str]:
    return v if isinstance(v, str) and v else None


def parse_movie(p: Mapping[str, Any]) -> CatalogMovie:
    return CatalogMovie(
        external_id=int(p["id"]),
        title=p.get("title") or p.get("original_title") or "",
        original_title=_opt_str(p.get("original_title")),
        overview=_opt_str(p.get("overview")),
        poster_ref=_opt_str(p.get("poster_path")),
        release_date=_opt_str(p.get("release_date")),
        vote_average=p.get("vote_average"),
    )


def parse_search_page(p: Mapping[str, Any]) -> CatalogSearchPage:
    return CatalogSearchPage(
        results=tuple(parse_movie(r) for r in p.get("results") or []),
        page=int(p.get("page") or 1),
        total_pages=int(p.get("total_pages") or 0),
        total_results=int(p.get("total_results") or 0),
    )


def parse_details(p: Mapping[str, Any]) -> CatalogMovieDetails:
    return CatalogMovieDetails(
        external_id=int(p["id"]),
        title=p.get("title") or p.get("original_title") or "",
        poster_ref=_opt_str(p.get("poster_path")),
        release_date=_opt_str(p.get("release_date")),
        production_countries=tuple(
            CatalogCountry(code=c.get("iso_3166_1") or "", name=c["name"])
            for c in p.get("production_countries") or []
        ),
        runtime=p.get("runtime"),
        overview=_opt_str(p.get("overview")),
    )


def parse_credits(p: Mapping[str, Any]) -> CatalogCredits:
    cast = tuple(
        CatalogCastMember(
            external_person_id=int(c["id"]),
            name=c["name"],
            order=int(c.get("order", i)),
            character=_opt_str(c.get("character")),
            profile_ref=_opt_str(c.get("profile_path")),
        )
        for i, c in enumerate(p.get("cast") or [])
    )
    crew = tuple(
        CatalogCrewMember(
            external_person_id=int(c["id"]),
            name=c["name"],
            job=c.get("job") or "",
            department=_opt_str(c.get("department")),
            profile_ref=_opt_str(c.get("profile_path")),
        )
        for c in p.get("crew") or []
    )
    return CatalogCredits(external_id=int(p.get("id") or 0), cast=cast, crew=crew)


def parse_person(p: Mapping[str, Any]) -> CatalogPerson:
    return CatalogPerson(
        external_id=int(p["id"]),
        name=p["name"],
        also_known_as=tuple(a for a in p.get("also_known_as") or [] if isinstance(a, str)),
        profile_ref=_opt_str(p.get("profile_path")),
    )


# ---------------------------------------------------------------------------
# client
# ---------------------------------------------------------------------------
class TmdbCatalog:
    def __init__(self, config: Optional[CatalogConfig] = None, client: Optional[httpx.Client] = None) -> None:
        self.config = config or get_settings().catalog
        self._client = client or httpx.Client(timeout=self.config.timeout_sec)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TmdbCatalog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---- transport ----
    def _auth(self) -> Tuple[Dict[str, str], Dict[str, str]]:
        headers = {"Content-Type": "application/json"}
        params = {"language": self.config.language}
        if self.config.uses_bearer_token:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        else:
            params["api_key"] = self.config.api_key
        return headers, params

    def _get(self, path: str, **params: Any) -> Dict[str, Any]:
        headers, base = self._auth()
        url = f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"
        logger.debug("catalog GET %s %s", path, params)
        try:
            response = self._client.get(url, params={**base, **params}, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                f"Catalog error {e.response.status_code} for {path}: {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Catalog request failed for {path}: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailable(f"Catalog returned invalid JSON for {path}") from e
        if not isinstance(payload, dict):
            raise UpstreamUnavailable(f"Unexpected catalog payload for {path}")
        return payload

    def _parse(self, fn, payload: Dict[str, Any], what: str):
        try:
            return fn(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamUnavailable(f"Malformed catalog {what} payload: {e}") from e

    # ---- CatalogPort ----
    def search(self, query: str, page: int = 1) -> CatalogSearchPage:
        return self._parse(parse_search_page, self._get("search/movie", query=query, page=page), "search")

    def movie_details(self, external_movie_id: int) -> CatalogMovieDetails:
        return self._parse(parse_details, self._get(f"movie/{external_movie_id}"), "movie")

    def movie_credits(self, external_movie_id: int) -> CatalogCredits:
        return self._parse(parse_credits, self._get(f"movie/{external_movie_id}/credits"), "credits")

    def person_details(self, external_person_id: int) -> CatalogPerson:
        return self._parse(parse_person, self._get(f"person/{external_person_id}"), "person")

    def localized_name(self, person: CatalogPerson) -> str:
        return localized_name(person, self.config.localized_name_pattern)

    def display_names(self, person_ids: List[int]) -> Dict[int, str]:
        """
        Localized names for many people, looked up in parallel chunks.
        A failed lookup is left out; callers fall back to the catalog name.
        """
        out: Dict[int, str] = {}
        size = self.config.person_lookup_chunk
        for chunk in chunked(person_ids, size):
            with ThreadPoolExecutor(max_workers=size) as pool:
                futures = {pid: pool.submit(self.person_details, pid) for pid in chunk}
                for pid, fut in futures.items():
                    try:
                        out[pid] = self.localized_name(fut.result())
                    except UpstreamUnavailable as e:
                        logger.warning("person %s lookup failed, keeping catalog name: %s", pid, e)
        return out

    def movie_with_display_names(self, external_movie_id: int) -> Tuple[CatalogMovieDetails, CatalogCredits]:
        details = self.movie_details(external_movie_id)
        credits = self.movie_credits(external_movie_id)
        names = self.display_names(credits.person_ids())
        return details, credits.with_display_names(names)
