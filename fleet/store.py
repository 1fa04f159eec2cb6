"""Record store contract and a YAML-file implementation.

The core only consumes ``get_all`` and ``get_by_id``. Anything that provides
those two coroutines (an HTTP client, a CMS SDK, a test fake) can back the
loaders.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

import structlog
import yaml

from .errors import FetchFailure, NotFound
from .parsing import parse_record

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Page:
    """One slice of a collection plus the cursor for the next slice."""

    items: List[Dict[str, Any]] = field(default_factory=list)
    has_next: bool = False
    next_skip: int = 0


class EntityStore(Protocol):
    async def get_all(
        self, collection_id: str, filters: Sequence[Any] = (), options: Optional[dict] = None
    ) -> Page:
        ...

    async def get_by_id(self, collection_id: str, record_id: str) -> Optional[Dict[str, Any]]:
        ...


class YamlEntityStore:
    """
    Serve collections from a YAML document.

    The document maps collection ids to lists of records, e.g.::

        vehicles:
          - _id: v1
            name: Hauler 1
            status: On Trip
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = data or {}

    @classmethod
    def from_file(cls, filename: Union[str, Path]) -> "YamlEntityStore":
        with open(filename, "rb") as fp:
            return cls(yaml.load(fp, Loader=yaml.SafeLoader))

    def _collection(self, collection_id: str) -> List[Dict[str, Any]]:
        return self.data.get(collection_id) or []

    async def get_all(
        self, collection_id: str, filters: Sequence[Any] = (), options: Optional[dict] = None
    ) -> Page:
        """Return a page; ``filters`` is accepted for contract parity and ignored."""
        items = self._collection(collection_id)
        options = options or {}
        skip = int(options.get("skip", 0))
        limit = options.get("limit")
        end = len(items) if limit is None else skip + int(limit)
        page = items[skip:end]
        return Page(
            items=list(page),
            has_next=end < len(items),
            next_skip=skip + len(page),
        )

    async def get_by_id(self, collection_id: str, record_id: str) -> Optional[Dict[str, Any]]:
        for item in self._collection(collection_id):
            if isinstance(item, dict) and str(item.get("_id")) == record_id:
                return item
        return None


async def fetch_record(store: EntityStore, collection: str, record_id: str):
    """
    Look up one record by id.

    Returns None when the record does not exist (an absent state, not an
    error). Raises FetchFailure when the store itself fails.
    """
    try:
        raw = await store.get_by_id(collection, record_id)
    except Exception as e:
        logger.error("fetch_failed", collection=collection, record_id=record_id, error=str(e))
        raise FetchFailure(collection, 0, e) from e
    if raw is None:
        logger.debug("record_not_found", detail=str(NotFound(collection, record_id)))
        return None
    return parse_record(collection, raw)
