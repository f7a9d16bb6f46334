from __future__ import annotations

from typing import Protocol, Tuple

from miroku.domain.entities.catalog import (
    CatalogCredits,
    CatalogMovieDetails,
    CatalogPerson,
    CatalogSearchPage,
)


class CatalogPort(Protocol):
    """Read-only access to the external movie catalog. Failures raise UpstreamUnavailable."""

    def search(self, query: str, page: int = 1) -> CatalogSearchPage: ...

    def movie_details(self, external_movie_id: int) -> CatalogMovieDetails: ...

    def movie_credits(self, external_movie_id: int) -> CatalogCredits: ...

    def person_details(self, external_person_id: int) -> CatalogPerson: ...

    def movie_with_display_names(self, external_movie_id: int) -> Tuple[CatalogMovieDetails, CatalogCredits]: ...
