"""Error taxonomy and explicit result types for store access."""

from dataclasses import dataclass, field
from typing import Optional, Tuple


class FleetError(Exception):
    """Base class for fleet core errors."""


class FetchFailure(FleetError):
    """A page request against the record store failed. Retryable by the caller."""

    def __init__(self, collection: str, skip: int, cause: Optional[BaseException] = None):
        self.collection = collection
        self.skip = skip
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to load '{collection}' at skip={skip}{detail}")


class NotFound(FleetError):
    """A single-record lookup found nothing."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No record '{record_id}' in '{collection}'")


class MalformedRecord(FleetError):
    """A store value could not be parsed into the expected type.

    Never raised out of the parser; used to describe what was dropped.
    """

    def __init__(self, collection: str, record_id: str, field_name: str, value):
        self.collection = collection
        self.record_id = record_id
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"Unparseable {field_name}={value!r} on {collection}/{record_id}"
        )


@dataclass(frozen=True)
class PageResult:
    """Outcome of one loader request."""

    ok: bool
    added: Tuple[str, ...] = field(default_factory=tuple)  # ids appended
    error: Optional[FetchFailure] = None
    stale: bool = False  # response discarded (superseded, cancelled or disposed)
    skipped: bool = False  # request not issued (no more pages or one in flight)
