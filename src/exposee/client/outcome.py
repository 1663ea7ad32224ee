"""Result types of :meth:`~exposee.client.ExposeeServiceClient.fetch`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from exposee.exceptions import SyncError, SyncErrorKind
from exposee.models import ExposedBatch


@dataclass(frozen=True)
class Success:
    """A completed fetch.

    ``batch`` is a two-level value and the levels mean different things:

    - ``None``: the backend's validator matches the one cached for this
      request, so nothing changed since the last fetch and no decode ran.
    - a list (possibly empty): freshly decoded records. ``[]`` means the
      batch was published with zero records.
    """

    batch: Optional[ExposedBatch]

    @property
    def unchanged(self) -> bool:
        return self.batch is None


@dataclass(frozen=True)
class Failure:
    """A fetch that ended in exactly one :class:`~exposee.exceptions.SyncError`."""

    error: SyncError

    @property
    def kind(self) -> SyncErrorKind:
        return self.error.kind


SyncOutcome = Union[Success, Failure]
