"""Error taxonomy shared by repositories, services and the HTTP layer."""
from __future__ import annotations

from typing import List, Sequence, Tuple


class MirokuError(Exception):
    """Base class for expected, user-actionable failures."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.__class__.__name__


class NotFound(MirokuError):
    """Referenced entity does not resolve for the caller's owner scope."""


class Conflict(MirokuError):
    """The write would duplicate an existing natural key (e.g. a credit)."""


class InvalidArgument(MirokuError):
    """Self-merge, unknown refresh field, tombstoned target and similar."""


class UpstreamUnavailable(MirokuError):
    """External catalog failure: network, non-2xx or malformed payload."""


class PartialFailure(MirokuError):
    """A multi-item operation finished with some items failing."""

    def __init__(self, message: str, errors: Sequence[Tuple[str, str]]) -> None:
        super().__init__(message)
        self.errors: List[Tuple[str, str]] = list(errors)
