# miroku/services/schemas/movies.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from miroku.common.strings.splitters import csv_to_list
from miroku.domain.enums import CreditRole
from miroku.services.schemas.people import PersonRead


# ---------- Movie ----------

class MovieRead(BaseModel):
    """Effective values (override, else snapshot) plus both raw layers."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    external_ref: Optional[int] = None
    title: Optional[str] = None
    poster_ref: Optional[str] = None
    release_date: Optional[str] = None
    production_countries: List[str] = []
    watch_count: int = 0

    snapshot_title: Optional[str] = None
    snapshot_poster_ref: Optional[str] = None
    snapshot_release_date: Optional[str] = None
    snapshot_countries: Optional[List[str]] = None
    override_title: Optional[str] = None
    override_poster_ref: Optional[str] = None
    override_release_date: Optional[str] = None
    override_countries: Optional[List[str]] = None


class MovieImport(BaseModel):
    external_id: int = Field(..., ge=1)


class MovieCreateManual(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    release_date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    poster_ref: Optional[str] = None
    production_countries: List[str] = []
    director: Optional[str] = Field(default=None, max_length=255)

    @field_validator("production_countries", mode="before")
    @classmethod
    def _split_countries(cls, v):
        return csv_to_list(v)


class MovieOverridesPatch(BaseModel):
    """Only the keys present in the request are written; null clears an override."""
    title: Optional[str] = None
    poster_ref: Optional[str] = None
    release_date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    production_countries: Optional[List[str]] = None


# ---------- Credits ----------

class CreditRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    movie_id: UUID
    role: CreditRole
    cast_order: Optional[int] = None
    person: PersonRead


class CreditGroupsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    directors: List[CreditRead] = []
    writers: List[CreditRead] = []
    cast: List[CreditRead] = []


class CreditCreate(BaseModel):
    """Add a credit for an existing person (person_id) or by typed name."""
    role: CreditRole
    person_id: Optional[UUID] = None
    name: Optional[str] = Field(default=None, max_length=255)


class FetchCreditsResult(BaseModel):
    status: str  # "exists" | "empty" | "fetched"


class FilmographyRead(BaseModel):
    """A person's movies, one list per role."""
    person: PersonRead
    directed: List[MovieRead] = []
    written: List[MovieRead] = []
    cast: List[MovieRead] = []
