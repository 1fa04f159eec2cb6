"""Paginated collection loader.

A CollectionLoader owns the accumulated records of one collection for one
screen. Screens create their own loaders and call ``reset()`` when they are
entered; loaders are never shared between screens.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import structlog

from . import config
from .errors import FetchFailure, PageResult
from .parsing import parse_records
from .store import EntityStore

logger = structlog.get_logger(__name__)


class LoadState(Enum):
    EMPTY = "empty"
    LOADING = "loading"
    LOADING_MORE = "loading_more"
    LOADED = "loaded"
    FAILED = "failed"
    DISPOSED = "disposed"


class CancelToken:
    """Caller-owned flag used to abandon a superseded request."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(frozen=True)
class LoadedCollection:
    """Immutable view of a loader's current contents."""

    collection: str
    items: Tuple[Any, ...]
    has_more: bool
    error: Optional[FetchFailure] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class CollectionLoader:
    """
    Incrementally load one collection, page by page.

    State machine::

        EMPTY -> LOADING -> LOADED(has_more)
        LOADED(has_more=True) -> LOADING_MORE -> LOADED(...)
        LOADING / LOADING_MORE -> FAILED (prior items kept)
        any -> DISPOSED

    Only one page request is outstanding at a time. Responses that arrive
    after ``reset()``, ``dispose()`` or cancellation of their token are
    discarded.
    """

    def __init__(
        self,
        store: EntityStore,
        collection: str,
        page_size: Optional[int] = None,
        parse: Callable[[str, Iterable[Dict[str, Any]]], List[Any]] = parse_records,
    ):
        self.store = store
        self.collection = collection
        self.page_size = page_size or config.PAGE_SIZE
        self.parse = parse
        self._items: List[Any] = []
        self._ids = set()
        self._cursor = 0
        self._has_more = False
        self._pending = False
        self._generation = 0
        self._state = LoadState.EMPTY
        self._last_error: Optional[FetchFailure] = None

    @property
    def items(self) -> Tuple[Any, ...]:
        return tuple(self._items)

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def last_error(self) -> Optional[FetchFailure]:
        return self._last_error

    @property
    def is_loading(self) -> bool:
        return self._pending

    def snapshot(self) -> LoadedCollection:
        return LoadedCollection(
            collection=self.collection,
            items=self.items,
            has_more=self._has_more,
            error=self._last_error,
        )

    async def reset(
        self, collection: Optional[str] = None, cancel: Optional[CancelToken] = None
    ) -> PageResult:
        """
        Discard accumulated items and request the first page.

        Any request still in flight is superseded and its response dropped.

        Args:
            collection: switch this loader to another collection id
            cancel: token that, once cancelled, discards this request's response
        """
        if self._state is LoadState.DISPOSED:
            return PageResult(ok=False, skipped=True)
        if collection is not None:
            self.collection = collection
        self._generation += 1
        self._items = []
        self._ids = set()
        self._cursor = 0
        self._has_more = False
        self._last_error = None
        self._pending = True
        self._state = LoadState.LOADING
        return await self._fetch(self._generation, 0, cancel)

    async def load_more(self, cancel: Optional[CancelToken] = None) -> PageResult:
        """
        Append the next page to the loaded items.

        No-op (``skipped=True``) when there are no more pages, a request is
        already outstanding, or the loader is disposed.
        """
        if self._state is LoadState.DISPOSED or self._pending or not self._has_more:
            return PageResult(ok=self._state is not LoadState.DISPOSED, skipped=True)
        self._pending = True
        self._state = LoadState.LOADING_MORE
        return await self._fetch(self._generation, self._cursor, cancel)

    async def load_all(self, cancel: Optional[CancelToken] = None) -> PageResult:
        """
        Page through the whole collection, starting over if nothing is loaded yet.

        Skipped when another request is already outstanding; the caller has
        not seen the whole collection in that case.
        """
        if self._pending:
            return PageResult(ok=True, skipped=True)
        if self._state in (LoadState.EMPTY, LoadState.FAILED) and not self._items:
            result = await self.reset(cancel=cancel)
        else:
            result = PageResult(ok=True)
        while result.ok and not result.skipped and self._has_more:
            result = await self.load_more(cancel)
        return result

    def dispose(self) -> None:
        """Detach the loader from its screen; late responses are ignored."""
        self._generation += 1
        self._pending = False
        self._state = LoadState.DISPOSED

    def _is_stale(self, generation: int, cancel: Optional[CancelToken]) -> bool:
        if generation != self._generation or self._state is LoadState.DISPOSED:
            return True
        return cancel is not None and cancel.cancelled

    def _abandon(self, generation: int) -> PageResult:
        logger.debug("stale_response_discarded", collection=self.collection)
        if generation == self._generation and self._state is not LoadState.DISPOSED:
            # Cancelled by its token or its task: release the slot for the next request
            self._pending = False
            self._state = LoadState.LOADED if self._items else LoadState.EMPTY
        return PageResult(ok=False, stale=True)

    async def _fetch(
        self, generation: int, skip: int, cancel: Optional[CancelToken]
    ) -> PageResult:
        options = {"limit": self.page_size, "skip": skip}
        try:
            page = await self.store.get_all(self.collection, [], options)
            records = self.parse(self.collection, page.items)
        except asyncio.CancelledError:
            self._abandon(generation)
            raise
        except Exception as e:
            if self._is_stale(generation, cancel):
                return self._abandon(generation)
            failure = FetchFailure(self.collection, skip, e)
            logger.error("page_load_failed", collection=self.collection, skip=skip, error=str(e))
            self._pending = False
            self._last_error = failure
            self._state = LoadState.FAILED
            return PageResult(ok=False, error=failure)

        if self._is_stale(generation, cancel):
            return self._abandon(generation)

        added = self._merge(records)
        next_skip = page.next_skip or skip + len(page.items)
        if page.has_next and next_skip <= skip:
            logger.warning("cursor_not_advancing", collection=self.collection, skip=skip)
            self._has_more = False
        else:
            self._has_more = bool(page.has_next)
        self._cursor = next_skip
        self._pending = False
        self._last_error = None
        self._state = LoadState.LOADED
        logger.debug(
            "page_loaded",
            collection=self.collection,
            skip=skip,
            added=len(added),
            total=len(self._items),
            has_more=self._has_more,
        )
        return PageResult(ok=True, added=tuple(added))

    def _merge(self, records: Iterable[Any]) -> List[str]:
        """Append unseen records in order; a record already loaded is kept as first seen."""
        added = []
        for record in records:
            if record.id in self._ids:
                continue
            self._ids.add(record.id)
            self._items.append(record)
            added.append(record.id)
        return added
