from miroku.domain.enums.credit_role import CreditRole
from miroku.domain.enums.refresh_field import RefreshField
from miroku.domain.enums.watch import WatchMethod, WatchScore

__all__ = [
    "CreditRole",
    "RefreshField",
    "WatchMethod",
    "WatchScore",
]
