# miroku/domain/policies/refresh_diff.py
"""
Field-by-field comparison between stored movie data and a fresh catalog fetch.

Comparability rules:
  - title, poster_ref, release_date: literal inequality
  - production_countries: ordered list inequality (reordering is a change)
  - directors, writers: sorted, de-duplicated name sets (reordering is not a change)
  - cast: sorted names OR original name order (reordering alone IS a change,
    because cast order carries display rank)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence

from miroku.common.strings.splitters import normalize_name
from miroku.domain.entities.movie_snapshot import ExternalPersonCredit, MovieSnapshot
from miroku.domain.enums import RefreshField


@dataclass(frozen=True)
class FieldChange:
    field: RefreshField
    current: Any
    incoming: Any
    changed: bool


@dataclass
class RefreshDiff:
    changes: Dict[RefreshField, FieldChange] = field(default_factory=dict)

    @property
    def changed_fields(self) -> List[RefreshField]:
        return [f for f in RefreshField if f in self.changes and self.changes[f].changed]

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_fields)

    def __getitem__(self, f: RefreshField) -> FieldChange:
        return self.changes[f]


def _names(people: Iterable[ExternalPersonCredit]) -> List[str]:
    return [normalize_name(p.name) for p in people]


def _name_set(people: Iterable[ExternalPersonCredit]) -> List[str]:
    return sorted(set(_names(people)))


def names_changed(current: Sequence[ExternalPersonCredit], incoming: Sequence[ExternalPersonCredit]) -> bool:
    return _name_set(current) != _name_set(incoming)


def cast_changed(current: Sequence[ExternalPersonCredit], incoming: Sequence[ExternalPersonCredit]) -> bool:
    set_diff = sorted(_names(current)) != sorted(_names(incoming))
    order_diff = _names(current) != _names(incoming)
    return set_diff or order_diff


def field_changed(f: RefreshField, current: MovieSnapshot, incoming: MovieSnapshot) -> bool:
    if f is RefreshField.production_countries:
        return list(current.production_countries) != list(incoming.production_countries)
    if f in (RefreshField.directors, RefreshField.writers):
        return names_changed(getattr(current, f.value), getattr(incoming, f.value))
    if f is RefreshField.cast:
        return cast_changed(current.cast, incoming.cast)
    return getattr(current, f.value) != getattr(incoming, f.value)


def _shown(f: RefreshField, snap: MovieSnapshot) -> Any:
    value = getattr(snap, f.value)
    if f.is_credit_field:
        return _names(value)
    if isinstance(value, list):
        return list(value)
    return value


def diff_snapshots(current: MovieSnapshot, incoming: MovieSnapshot) -> RefreshDiff:
    """Compare every refreshable field; unchanged fields are kept with changed=False."""
    out = RefreshDiff()
    for f in RefreshField:
        out.changes[f] = FieldChange(
            field=f,
            current=_shown(f, current),
            incoming=_shown(f, incoming),
            changed=field_changed(f, current, incoming),
        )
    return out
