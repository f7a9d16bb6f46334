from __future__ import annotations
from enum import StrEnum

from miroku.domain.enums.credit_role import CreditRole


class RefreshField(StrEnum):
    title = "title"
    poster_ref = "poster_ref"
    release_date = "release_date"
    production_countries = "production_countries"
    directors = "directors"
    writers = "writers"
    cast = "cast"

    @property
    def credit_role(self) -> CreditRole | None:
        """Role whose credits this field replaces, or None for snapshot fields."""
        return _CREDIT_FIELDS.get(self)

    @property
    def is_credit_field(self) -> bool:
        return self in _CREDIT_FIELDS


_CREDIT_FIELDS = {
    RefreshField.directors: CreditRole.director,
    RefreshField.writers: CreditRole.writer,
    RefreshField.cast: CreditRole.cast,
}
