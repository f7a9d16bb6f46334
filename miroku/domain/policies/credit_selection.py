# miroku/domain/policies/credit_selection.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from miroku.common.strings.splitters import normalize_name
from miroku.domain.entities.catalog import CatalogCredits, CatalogMovieDetails, CatalogPerson
from miroku.domain.entities.movie_snapshot import ExternalPersonCredit, MovieSnapshot
from miroku.domain.enums import CreditRole

DIRECTOR_JOBS = frozenset({"Director"})
WRITER_JOBS = frozenset({"Writer", "Screenplay"})


def role_for_job(job: str) -> Optional[CreditRole]:
    if job in DIRECTOR_JOBS:
        return CreditRole.director
    if job in WRITER_JOBS:
        return CreditRole.writer
    return None


@dataclass(frozen=True)
class SelectedCredits:
    directors: List[ExternalPersonCredit] = field(default_factory=list)
    writers: List[ExternalPersonCredit] = field(default_factory=list)
    cast: List[ExternalPersonCredit] = field(default_factory=list)

    def for_role(self, role: CreditRole) -> List[ExternalPersonCredit]:
        return {
            CreditRole.director: self.directors,
            CreditRole.writer: self.writers,
            CreditRole.cast: self.cast,
        }[role]

    def is_empty(self) -> bool:
        return not (self.directors or self.writers or self.cast)


def select_credits(credits: CatalogCredits, *, writer_limit: int = 5, cast_limit: int = 5) -> SelectedCredits:
    """
    Map catalog credits onto our three roles.
    Writers and cast are capped to the first N entries in catalog order;
    directors are not capped.
    """
    directors: List[ExternalPersonCredit] = []
    writers: List[ExternalPersonCredit] = []
    for c in credits.crew:
        role = role_for_job(c.job)
        person = ExternalPersonCredit(name=normalize_name(c.shown_name), external_id=c.external_person_id)
        if role is CreditRole.director:
            directors.append(person)
        elif role is CreditRole.writer:
            writers.append(person)

    cast = [
        ExternalPersonCredit(name=normalize_name(c.shown_name), external_id=c.external_person_id, order=c.order)
        for c in credits.cast[:cast_limit]
    ]
    return SelectedCredits(directors=directors, writers=writers[:writer_limit], cast=cast)


def snapshot_from_catalog(
    details: CatalogMovieDetails,
    credits: CatalogCredits,
    *,
    writer_limit: int = 5,
    cast_limit: int = 5,
) -> MovieSnapshot:
    sel = select_credits(credits, writer_limit=writer_limit, cast_limit=cast_limit)
    return MovieSnapshot(
        title=details.title,
        poster_ref=details.poster_ref,
        release_date=details.release_date or None,
        production_countries=details.country_names(),
        directors=sel.directors,
        writers=sel.writers,
        cast=sel.cast,
    )


def localized_name(person: CatalogPerson, pattern: str) -> str:
    """First alias containing the target script, else the catalog name."""
    rx = re.compile(pattern)
    for alias in person.also_known_as:
        if alias and rx.search(alias):
            return alias
    return person.name
