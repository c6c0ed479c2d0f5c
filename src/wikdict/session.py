"""Generation-fenced search session.

A :class:`SearchSession` lives on an asyncio event loop, which is the only
place its state changes. Each search runs in an executor thread and may
finish in any order; a result is applied only if no newer search was
issued in the meantime. Stale results are computed and then dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Executor

from wikdict.exceptions import WikdictError
from wikdict.models import CoalescedEntry, SearchState, SearchStrategy

logger = logging.getLogger(__name__)

SearchFunc = Callable[[str, SearchStrategy], Sequence[CoalescedEntry]]
Listener = Callable[[SearchState], None]

# Elided articles/prepositions ("the", "of"), straight and typographic
_ELISIONS = ("l'", "d'", "l’", "d’")


def normalize_query(text: str) -> str:
    """Strip a leading elision so ``l'heure`` searches for ``heure``.

    Queries of two characters or fewer are left alone.
    """
    if len(text) > 2 and text.lower().startswith(_ELISIONS):
        return text[2:]
    return text


class SearchSession:
    """Coordinates searches for one logical "current query"."""

    def __init__(
        self,
        search: SearchFunc,
        *,
        strategy: SearchStrategy = SearchStrategy.PREFIX,
        executor: Executor | None = None,
        debounce: float = 0.0,
    ) -> None:
        self._search = search
        self._executor = executor
        self.debounce = debounce
        self.generation = 0
        self.query = ""
        self.strategy = SearchStrategy(strategy)
        self.results: tuple[CoalescedEntry, ...] = ()
        self.error: Exception | None = None
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def state(self) -> SearchState:
        return SearchState(
            query=self.query,
            strategy=self.strategy,
            generation=self.generation,
            results=self.results,
            error=self.error,
        )

    @property
    def displayed_entries(self) -> list[CoalescedEntry]:
        """Results with shorter words first; equal lengths keep rank order."""
        return sorted(self.results, key=lambda e: len(e.word))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh :class:`SearchState` on each change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        state = self.state
        for listener in list(self._listeners):
            listener(state)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def set_query(self, text: str) -> bool:
        """Make ``text`` the current query and search for it.

        Returns True if this call's results were applied, False if they
        were superseded by a newer search (or there was nothing to search).
        """
        self.query = text
        if not text:
            self.clear()
            return False
        return await self._dispatch()

    async def set_strategy(self, strategy: SearchStrategy) -> bool:
        """Switch index strategy, re-running the current query if any."""
        self.strategy = SearchStrategy(strategy)
        if not self.query:
            return False
        return await self._dispatch()

    def clear(self) -> None:
        """Drop results without a store call; the generation is unchanged."""
        self.query = ""
        self.results = ()
        self.error = None
        self._notify()

    async def _dispatch(self) -> bool:
        self.generation += 1
        token = self.generation
        text = normalize_query(self.query)
        strategy = self.strategy

        if self.debounce > 0:
            await asyncio.sleep(self.debounce)
            if token != self.generation:
                logger.debug(f"Search {token} superseded before dispatch")
                return False

        loop = asyncio.get_running_loop()
        error: Exception | None = None
        try:
            results = await loop.run_in_executor(
                self._executor, self._search, text, strategy,
            )
        except WikdictError as e:
            logger.warning(f"Search for {text!r} failed: {e}")
            results, error = (), e

        if token != self.generation:
            logger.debug(
                f"Discarding stale search {token} (current {self.generation})"
            )
            return False
        # Cleared while in flight; clearing does not bump the generation
        if not self.query:
            return False

        self.results = tuple(results)
        self.error = error
        self._notify()
        return True
