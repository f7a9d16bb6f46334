# miroku/domain/entities/catalog.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class CatalogMovie:
    """A search hit from the external catalog."""
    external_id: int
    title: str
    original_title: Optional[str] = None
    overview: Optional[str] = None
    poster_ref: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: Optional[float] = None


@dataclass(frozen=True)
class CatalogSearchPage:
    results: Tuple[CatalogMovie, ...]
    page: int
    total_pages: int
    total_results: int


@dataclass(frozen=True)
class CatalogCountry:
    code: str
    name: str


@dataclass(frozen=True)
class CatalogMovieDetails:
    external_id: int
    title: str
    poster_ref: Optional[str] = None
    release_date: Optional[str] = None
    production_countries: Tuple[CatalogCountry, ...] = ()
    runtime: Optional[int] = None
    overview: Optional[str] = None

    def country_names(self) -> List[str]:
        return [c.name for c in self.production_countries]


@dataclass(frozen=True)
class CatalogCastMember:
    external_person_id: int
    name: str
    order: int
    character: Optional[str] = None
    profile_ref: Optional[str] = None
    display_name: Optional[str] = None  # localized, when resolved

    @property
    def shown_name(self) -> str:
        return self.display_name or self.name


@dataclass(frozen=True)
class CatalogCrewMember:
    external_person_id: int
    name: str
    job: str
    department: Optional[str] = None
    profile_ref: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def shown_name(self) -> str:
        return self.display_name or self.name


@dataclass(frozen=True)
class CatalogCredits:
    external_id: int
    cast: Tuple[CatalogCastMember, ...] = ()
    crew: Tuple[CatalogCrewMember, ...] = ()

    def person_ids(self) -> List[int]:
        """Distinct person ids across cast and crew, first-seen order."""
        seen: dict[int, None] = {}
        for m in (*self.cast, *self.crew):
            seen.setdefault(m.external_person_id, None)
        return list(seen)

    def with_display_names(self, names: dict[int, str]) -> "CatalogCredits":
        return replace(
            self,
            cast=tuple(replace(c, display_name=names.get(c.external_person_id)) for c in self.cast),
            crew=tuple(replace(c, display_name=names.get(c.external_person_id)) for c in self.crew),
        )


@dataclass(frozen=True)
class CatalogPerson:
    external_id: int
    name: str
    also_known_as: Tuple[str, ...] = field(default_factory=tuple)
    profile_ref: Optional[str] = None
