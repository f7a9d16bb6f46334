# miroku/services/schemas/watch_logs.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from miroku.domain.enums import WatchMethod, WatchScore


class WatchLogCreate(BaseModel):
    movie_id: UUID
    watched_at: datetime
    watch_method: WatchMethod = WatchMethod.other
    score: Optional[WatchScore] = None
    memo: Optional[str] = Field(default=None, max_length=5000)


class WatchLogUpdate(BaseModel):
    watched_at: Optional[datetime] = None
    watch_method: Optional[WatchMethod] = None
    score: Optional[WatchScore] = None
    memo: Optional[str] = Field(default=None, max_length=5000)


class WatchLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    movie_id: UUID
    watched_at: datetime
    watch_method: WatchMethod
    score: Optional[WatchScore] = None
    memo: Optional[str] = None
