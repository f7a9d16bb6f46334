from __future__ import annotations
from enum import StrEnum


class WatchMethod(StrEnum):
    theater = "theater"
    tv = "tv"
    streaming = "streaming"
    bluray_dvd = "bluray_dvd"
    other = "other"


class WatchScore(StrEnum):
    bad = "bad"
    neutral = "neutral"
    good = "good"

    @property
    def rank(self) -> int:
        return {"bad": 0, "neutral": 1, "good": 2}[self.value]
