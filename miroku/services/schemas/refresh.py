# miroku/services/schemas/refresh.py
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from miroku.domain.enums import RefreshField


class ExternalPersonCreditSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    external_id: Optional[int] = None
    order: Optional[int] = None


class MovieSnapshotSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: Optional[str] = None
    poster_ref: Optional[str] = None
    release_date: Optional[str] = None
    production_countries: List[str] = []
    directors: List[ExternalPersonCreditSchema] = []
    writers: List[ExternalPersonCreditSchema] = []
    cast: List[ExternalPersonCreditSchema] = []


class FieldChangeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    field: RefreshField
    current: Any = None
    incoming: Any = None
    changed: bool


class RefreshPreview(BaseModel):
    incoming: MovieSnapshotSchema
    changes: List[FieldChangeRead]
    changed_fields: List[RefreshField]


class RefreshApplyRequest(BaseModel):
    """
    Apply `fields` of `incoming`. When `incoming` is omitted the catalog is
    fetched again server-side.
    """
    fields: List[str] = Field(..., min_length=1)
    incoming: Optional[MovieSnapshotSchema] = None


class RefreshApplyReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    applied: List[str] = []
    failed: List[str] = []
    persons_created: int = 0
    persons_renamed: int = 0
    credits_linked: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


class BulkRefreshReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    refreshed: int
    errors: List[str] = []
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
