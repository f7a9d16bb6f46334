# miroku/database/models/__init__.py

from miroku.database.models.movie import (
    Base,
    Movie,
)
from miroku.database.models.taxonomy import (
    Tag,
    MovieTag,
)
from miroku.database.models.person import (
    Person,
    Credit,
)
from miroku.database.models.watch_log import WatchLog

__all__ = [
    "Base",
    "Movie",
    "Tag",
    "MovieTag",
    "Person",
    "Credit",
    "WatchLog",
]
