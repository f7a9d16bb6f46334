# miroku/domain/entities/movie_snapshot.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ExternalPersonCredit:
    """
    One person in a credit list as the reconciler compares it.
    `external_id` is None for manually added people; `order` only matters for cast.
    """
    name: str
    external_id: Optional[int] = None
    order: Optional[int] = None


@dataclass(frozen=True)
class MovieSnapshot:
    """
    Comparable view of a movie's catalog-sourced data: either what is stored
    (snapshot columns + current credits) or what the catalog returns now.
    """
    title: Optional[str] = None
    poster_ref: Optional[str] = None
    release_date: Optional[str] = None
    production_countries: List[str] = field(default_factory=list)
    directors: List[ExternalPersonCredit] = field(default_factory=list)
    writers: List[ExternalPersonCredit] = field(default_factory=list)
    cast: List[ExternalPersonCredit] = field(default_factory=list)


def effective_value(override: Optional[T], snapshot: Optional[T]) -> Optional[T]:
    """Override shadows the snapshot; None means "unknown" to the caller."""
    if override is not None:
        return override
    return snapshot
