from miroku.services.schemas.movies import (
    MovieRead,
    MovieImport,
    MovieCreateManual,
    MovieOverridesPatch,
    CreditRead,
    CreditGroupsRead,
    CreditCreate,
)
from miroku.services.schemas.people import (
    PersonRead,
    PersonUpdate,
    PersonUsageRead,
    MergeRequest,
)
from miroku.services.schemas.tags import (
    TagRead,
    TagCreate,
    TagUpdate,
    TagWithCount,
)
from miroku.services.schemas.watch_logs import (
    WatchLogRead,
    WatchLogCreate,
    WatchLogUpdate,
)
__all__ = [
    "MovieRead",
    "MovieImport",
    "MovieCreateManual",
    "MovieOverridesPatch",
    "CreditRead",
    "CreditGroupsRead",
    "CreditCreate",
    "PersonRead",
    "PersonUpdate",
    "PersonUsageRead",
    "MergeRequest",
    "TagRead",
    "TagCreate",
    "TagUpdate",
    "TagWithCount",
    "WatchLogRead",
    "WatchLogCreate",
    "WatchLogUpdate",
]
