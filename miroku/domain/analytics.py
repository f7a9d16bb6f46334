# miroku/domain/analytics.py
"""
Aggregation views for the analytics and browse pages.

Everything here is a pure function over plain records; callers load the
owner's full dataset once and pass an explicit AnalyticsFilter.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple
from uuid import UUID

from miroku.domain.enums import CreditRole, WatchScore
from miroku.domain.errors import InvalidArgument


@dataclass(frozen=True)
class WatchRecord:
    movie_id: UUID
    watched_at: datetime
    score: Optional[WatchScore] = None


@dataclass(frozen=True)
class MovieRecord:
    movie_id: UUID
    countries: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CreditRecord:
    movie_id: UUID
    person_id: UUID
    name: str
    role: CreditRole


@dataclass(frozen=True)
class TagRecord:
    movie_id: UUID
    tag_id: UUID
    name: str


@dataclass(frozen=True)
class NamedCount:
    name: str
    count: int
    key: Optional[str] = None


@dataclass(frozen=True)
class AnalyticsFilter:
    year: Optional[int] = None
    month: Optional[int] = None

    def accepts(self, ts: datetime) -> bool:
        if self.year is not None and ts.year != self.year:
            return False
        if self.month is not None and ts.month != self.month:
            return False
        return True


def filter_logs(logs: Iterable[WatchRecord], flt: Optional[AnalyticsFilter]) -> List[WatchRecord]:
    if flt is None:
        return list(logs)
    return [lg for lg in logs if flt.accepts(lg.watched_at)]


def watched_movie_ids(logs: Iterable[WatchRecord]) -> Set[UUID]:
    return {lg.movie_id for lg in logs}


def month_key(ts: datetime) -> str:
    return f"{ts.year}/{ts.month:02d}"


def monthly_watch_counts(logs: Iterable[WatchRecord]) -> List[NamedCount]:
    """Distinct movies watched per YYYY/MM, oldest month first."""
    buckets: Dict[str, Set[UUID]] = defaultdict(set)
    for lg in logs:
        buckets[month_key(lg.watched_at)].add(lg.movie_id)
    return [NamedCount(name=k, count=len(v)) for k, v in sorted(buckets.items())]


def yearly_watch_counts(logs: Iterable[WatchRecord]) -> List[NamedCount]:
    buckets: Dict[int, Set[UUID]] = defaultdict(set)
    for lg in logs:
        buckets[lg.watched_at.year].add(lg.movie_id)
    return [NamedCount(name=str(y), count=len(v)) for y, v in sorted(buckets.items())]


def best_scores(logs: Iterable[WatchRecord]) -> Dict[UUID, WatchScore]:
    """Best score any log gave each movie; unscored logs are ignored."""
    best: Dict[UUID, WatchScore] = {}
    for lg in logs:
        if lg.score is None:
            continue
        cur = best.get(lg.movie_id)
        if cur is None or lg.score.rank > cur.rank:
            best[lg.movie_id] = lg.score
    return best


def score_distribution(logs: Iterable[WatchRecord]) -> List[NamedCount]:
    counts = Counter(best_scores(logs).values())
    return [NamedCount(name=s.value, count=counts.get(s, 0)) for s in WatchScore]


def country_counts(movies: Iterable[MovieRecord], only: Optional[Set[UUID]] = None, limit: Optional[int] = None) -> List[NamedCount]:
    counts: Counter = Counter()
    for m in movies:
        if only is not None and m.movie_id not in only:
            continue
        for c in set(m.countries):
            counts[c] += 1
    rows = [NamedCount(name=n, count=c) for n, c in counts.most_common()]
    return rows[:limit] if limit else rows


def tag_counts(tags: Iterable[TagRecord]) -> List[NamedCount]:
    movies: Dict[UUID, Set[UUID]] = defaultdict(set)
    names: Dict[UUID, str] = {}
    for t in tags:
        movies[t.tag_id].add(t.movie_id)
        names[t.tag_id] = t.name
    rows = [NamedCount(name=names[k], count=len(v), key=str(k)) for k, v in movies.items()]
    return sorted(rows, key=lambda r: (-r.count, r.name))


def top_people(
    credits: Iterable[CreditRecord],
    role: CreditRole,
    *,
    only: Optional[Set[UUID]] = None,
    limit: int = 10,
) -> List[NamedCount]:
    """People in `role` ranked by distinct movies (optionally restricted to `only`)."""
    movies: Dict[UUID, Set[UUID]] = defaultdict(set)
    names: Dict[UUID, str] = {}
    for c in credits:
        if c.role != role:
            continue
        if only is not None and c.movie_id not in only:
            continue
        movies[c.person_id].add(c.movie_id)
        names[c.person_id] = c.name
    rows = [NamedCount(name=names[pid], count=len(mids), key=str(pid)) for pid, mids in movies.items()]
    rows.sort(key=lambda r: (-r.count, r.name))
    return rows[:limit]


# ---- drill-downs ----

def parse_month(value: str) -> AnalyticsFilter:
    """
    "YYYY-MM" (or the chart label "YYYY/MM") to a filter for that month.
    """
    raw = (value or "").strip().replace("/", "-")
    parts = raw.split("-")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise InvalidArgument(f"Invalid month: {value!r}")
    year, month = int(parts[0]), int(parts[1])
    if not 1 <= month <= 12:
        raise InvalidArgument(f"Invalid month: {value!r}")
    return AnalyticsFilter(year=year, month=month)


def movies_with_best_score(logs: Iterable[WatchRecord], score: WatchScore) -> Set[UUID]:
    return {mid for mid, best in best_scores(logs).items() if best == score}


def movies_in_country(movies: Iterable[MovieRecord], country: str) -> Set[UUID]:
    return {m.movie_id for m in movies if country in m.countries}
