# miroku/services/schemas/catalog.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class CatalogMovieRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    external_id: int
    title: str
    original_title: Optional[str] = None
    overview: Optional[str] = None
    poster_ref: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: Optional[float] = None


class CatalogSearchRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    results: List[CatalogMovieRead]
    page: int
    total_pages: int
    total_results: int


class CatalogCountryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    name: str


class CatalogDetailsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    external_id: int
    title: str
    poster_ref: Optional[str] = None
    release_date: Optional[str] = None
    production_countries: List[CatalogCountryRead] = []
    runtime: Optional[int] = None
    overview: Optional[str] = None


class CatalogCastRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    external_person_id: int
    name: str
    display_name: Optional[str] = None
    order: int
    character: Optional[str] = None
    profile_ref: Optional[str] = None


class CatalogCrewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    external_person_id: int
    name: str
    display_name: Optional[str] = None
    job: str
    department: Optional[str] = None
    profile_ref: Optional[str] = None


class CatalogCreditsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cast: List[CatalogCastRead] = []
    crew: List[CatalogCrewRead] = []


class CatalogMovieFull(BaseModel):
    details: CatalogDetailsRead
    credits: CatalogCreditsRead
