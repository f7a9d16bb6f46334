# miroku/services/schemas/people.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from miroku.domain.enums import CreditRole


# ---------- Person ----------

class PersonRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    display_name: str
    external_id: Optional[int] = None
    merged_into_id: Optional[UUID] = None


class PersonUpdate(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=255)


class PersonUsageRead(BaseModel):
    """A person row for listings, with how much it is used."""
    person: PersonRead
    credit_count: int
    movie_count: int
    roles: List[CreditRole] = []


# ---------- Merge ----------

class MergeRequest(BaseModel):
    target_id: UUID


class MergeResultRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    deleted: int
    relinked: int


class DeleteUnusedResult(BaseModel):
    deleted: int


class DedupeReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    groups: int
    merged: int
    deleted_links: int
    relinked: int
