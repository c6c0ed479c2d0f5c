"""Dictionary: main entry point for the wikdict library."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from concurrent.futures import Executor
from pathlib import Path
from typing import Any, TypeVar

from wikdict.coalesce import coalesce
from wikdict.config import Settings
from wikdict.exceptions import WikdictError
from wikdict.history import HistoryStore, PreferenceStore
from wikdict.models import CoalescedEntry, LoadResult, RawEntry, SearchStrategy
from wikdict.resources import ResourceResolver
from wikdict.session import SearchSession
from wikdict.store import EntryStore

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class Dictionary:
    """Offline dictionary: load, search, and recently-viewed history."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        resolver: ResourceResolver | None = None,
        history: HistoryStore | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.settings = settings or Settings()
        s = self.settings
        self.resolver = resolver or ResourceResolver(
            s.data_dir,
            s.resource_dirs,
            database_name=s.database_name,
            archive_name=s.archive_name,
            buffer_multiplier=s.buffer_multiplier,
        )
        self.history = history or HistoryStore(
            PreferenceStore(s.resolved_preferences_path),
            max_size=s.history_size,
        )
        self._executor = executor
        self._history_lock = asyncio.Lock()
        self.entries: tuple[RawEntry, ...] = ()
        self.coalesced_entries: tuple[CoalescedEntry, ...] = ()

    # ------------------------------------------------------------------
    # Resolution and loading
    # ------------------------------------------------------------------

    def resolve_database_path(self) -> Path:
        """Path to a usable store, materialising it from the archive if needed.

        Raises:
            ResourceNotFoundError, DecompressFailedError, WriteFailedError
        """
        return self.resolver.resolve()

    def _store(self, path: Path) -> EntryStore:
        return EntryStore(
            path,
            load_limit=self.settings.load_limit,
            search_limit=self.settings.search_limit,
        )

    def load_dictionary(self) -> LoadResult:
        """Load the initial entry list and its coalesced form.

        Nothing is kept from a failed attempt; the caller may retry.

        Raises:
            ResourceNotFoundError, DecompressFailedError, WriteFailedError,
            OpenFailedError, QueryFailedError
        """
        path = self.resolve_database_path()
        fetched = self._store(path).load_all()
        coalesced = tuple(coalesce(fetched.entries))
        if fetched.skipped:
            logger.debug(f"{len(fetched.skipped)} rows skipped while loading {path}")
        self.entries = fetched.entries
        self.coalesced_entries = coalesced
        return LoadResult(
            path=path,
            entries=fetched.entries,
            coalesced=coalesced,
            skipped=fetched.skipped,
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_entries(
        self,
        query: str,
        strategy: SearchStrategy = SearchStrategy.PREFIX,
    ) -> list[CoalescedEntry]:
        """Search and coalesce, raising on failure.

        Raises:
            WikdictError: if the store is unavailable or the query fails.
        """
        if not query:
            return []
        path = self.resolve_database_path()
        return coalesce(self._store(path).search(query, strategy))

    def search_dictionary(
        self,
        query: str,
        strategy: SearchStrategy = SearchStrategy.PREFIX,
    ) -> list[CoalescedEntry]:
        """Search and coalesce; any failure yields an empty list."""
        try:
            return self.search_entries(query, strategy)
        except WikdictError as e:
            logger.warning(f"Search for {query!r} failed: {e}")
            return []

    def lookup(self, word: str) -> CoalescedEntry | None:
        """Full entry whose headword is exactly ``word``, if any.

        Used to re-hydrate a history entry, which only carries display
        strings.
        """
        for entry in self.search_dictionary(word, SearchStrategy.PREFIX):
            if entry.word == word:
                return entry
        return None

    def search_session(self, *, debounce: float | None = None) -> SearchSession:
        """New :class:`SearchSession` backed by this dictionary."""
        return SearchSession(
            self.search_entries,
            executor=self._executor,
            debounce=self.settings.debounce if debounce is None else debounce,
        )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def record_view(self, entry: CoalescedEntry) -> None:
        self.history.record_view(entry)

    def load_history(self) -> list[CoalescedEntry]:
        return self.history.load()

    # ------------------------------------------------------------------
    # Awaitable variants (blocking work runs in the executor)
    # ------------------------------------------------------------------

    async def _run(self, func: Callable[..., _T], *args: Any) -> _T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, functools.partial(func, *args)
        )

    async def aresolve_database_path(self) -> Path:
        return await self._run(self.resolver.resolve)

    async def aload_dictionary(self) -> LoadResult:
        path = await self.aresolve_database_path()
        fetched = await self._run(self._store(path).load_all)
        coalesced = tuple(coalesce(fetched.entries))
        # Applied on the loop thread
        self.entries = fetched.entries
        self.coalesced_entries = coalesced
        return LoadResult(
            path=path,
            entries=fetched.entries,
            coalesced=coalesced,
            skipped=fetched.skipped,
        )

    async def asearch_dictionary(
        self,
        query: str,
        strategy: SearchStrategy = SearchStrategy.PREFIX,
    ) -> list[CoalescedEntry]:
        return await self._run(self.search_dictionary, query, strategy)

    async def arecord_view(self, entry: CoalescedEntry) -> None:
        # Serialised so each write starts from the previous one's list
        async with self._history_lock:
            updated = self.history.with_view(entry)
            await self._run(self.history.write, updated)
            self.history.replace(updated)

    async def aload_history(self) -> list[CoalescedEntry]:
        async with self._history_lock:
            self.history.replace(await self._run(self.history.read))
        return self.history.entries
