# miroku/services/schemas/analytics.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class NamedCountRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    count: int
    key: Optional[str] = None


class AnalyticsSummary(BaseModel):
    total_movies: int
    watched_movies: int
    watch_logs: int
    monthly: List[NamedCountRead]
    yearly: List[NamedCountRead]
    scores: List[NamedCountRead]
    countries: List[NamedCountRead]
    tags: List[NamedCountRead]
    directors: List[NamedCountRead]
    cast: List[NamedCountRead]
