from __future__ import annotations
from enum import StrEnum


class CreditRole(StrEnum):
    director = "director"
    writer = "writer"
    cast = "cast"
