from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from movie_catalog.application.catalog.watchlist_state import WatchlistState
from movie_catalog.application.ports.catalog_port import CatalogPort
from movie_catalog.config.settings import LOAD_ON_SEARCH_COMMIT, SEARCH_DEBOUNCE_MS
from movie_catalog.domain.catalog import (
    FilterSelection,
    Genre,
    Movie,
    NetworkError,
    PageResult,
    QueryKey,
)
from movie_catalog.infrastructure.cache.query_cache import QueryCache
from movie_catalog.infrastructure.utils.debounce import Debouncer

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Please check your API key and try again"

# idle | loading | ready | stale | error
STATUS_IDLE = "idle"
STATUS_LOADING = "loading"
STATUS_READY = "ready"
STATUS_STALE = "stale"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class ViewSnapshot:
    """Everything the presentation layer renders, captured at one instant."""

    search_query: str
    search_input: str
    current_page: int
    total_pages: int
    can_go_previous: bool
    can_go_next: bool
    is_fetching: bool
    status: str
    error_message: Optional[str]
    displayed_page: Optional[int]
    genres: tuple[Genre, ...] = ()
    selected_genres: frozenset[int] = field(default_factory=frozenset)
    movies: tuple[Movie, ...] = ()
    watchlist: tuple[Movie, ...] = ()
    watchlist_ids: frozenset[int] = field(default_factory=frozenset)


class ViewStateController:
    """UI state of the catalog view: search, genre filters, page and watchlist.

    Mutations are plain methods that run to completion on the event loop.
    Fetches go through the query cache; the last successfully loaded page
    stays displayed while a different key loads, and also when that load
    fails (stale data beats an error banner once something was shown).
    """

    def __init__(
        self,
        *,
        catalog: CatalogPort,
        cache: QueryCache,
        watchlist: WatchlistState,
        debounce_ms: int = SEARCH_DEBOUNCE_MS,
        load_on_search_commit: bool = LOAD_ON_SEARCH_COMMIT,
    ) -> None:
        self._catalog = catalog
        self._cache = cache
        self._watchlist = watchlist
        self._load_on_search_commit = load_on_search_commit
        self._debouncer: Debouncer[str] = Debouncer(debounce_ms / 1000.0, self._commit_search)

        self._search_query = ""
        self._search_input = ""
        self._current_page = 1
        self._filters = FilterSelection()

        self._page_result: Optional[PageResult] = None
        self._displayed_key: Optional[QueryKey] = None
        self._genres: tuple[Genre, ...] = ()
        self._error: Optional[NetworkError] = None

        self._fetching = 0
        self._generation = 0
        self._applied_generation = 0

    # ---- read-only state ----

    @property
    def search_query(self) -> str:
        return self._search_query

    @property
    def search_input(self) -> str:
        return self._search_input

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def total_pages(self) -> int:
        return self._page_result.total_pages if self._page_result is not None else 1

    @property
    def selected_genres(self) -> frozenset[int]:
        return self._filters.genre_ids

    @property
    def is_fetching(self) -> bool:
        return self._fetching > 0

    @property
    def error(self) -> Optional[NetworkError]:
        return self._error

    @property
    def page_result(self) -> Optional[PageResult]:
        return self._page_result

    @property
    def genres(self) -> tuple[Genre, ...]:
        return self._genres

    @property
    def watchlist(self) -> WatchlistState:
        return self._watchlist

    @property
    def can_go_previous(self) -> bool:
        return self._current_page > 1 and not self.is_fetching

    @property
    def can_go_next(self) -> bool:
        return self._current_page < self.total_pages and not self.is_fetching

    def current_key(self) -> QueryKey:
        if self._search_query:
            return QueryKey.search(self._search_query, self._current_page)
        return QueryKey.popular(self._current_page)

    # ---- search ----

    def set_search_query(self, text: str) -> None:
        """Commit a search term; whitespace-only means the popular listing.

        Drops any pending debounced input so it cannot overwrite this term later.
        """
        self._debouncer.cancel()
        self._apply_query(text)

    def _apply_query(self, text: str) -> None:
        self._search_input = text or ""
        self._search_query = (text or "").strip()
        # Search results paginate independently of the popular listing.
        self._current_page = 1

    def input_search(self, text: str) -> None:
        """Record raw input and commit it once typing pauses."""
        self._search_input = text or ""
        self._debouncer.trigger(self._search_input)

    async def flush_search(self) -> bool:
        return await self._debouncer.flush()

    async def wait_for_search(self) -> None:
        await self._debouncer.wait()

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    async def _commit_search(self, text: str) -> None:
        self._apply_query(text)
        logger.debug("search committed query=%r", self._search_query)
        if self._load_on_search_commit:
            await self.load()

    # ---- pagination ----

    def set_page(self, page: int) -> bool:
        """Move to a page clamped to [1, total_pages]. No-op while fetching."""
        if self.is_fetching:
            return False
        target = min(max(int(page), 1), self.total_pages)
        if target == self._current_page:
            return False
        self._current_page = target
        return True

    def next_page(self) -> bool:
        if not self.can_go_next:
            return False
        return self.set_page(self._current_page + 1)

    def previous_page(self) -> bool:
        if not self.can_go_previous:
            return False
        return self.set_page(self._current_page - 1)

    # ---- filters ----

    def toggle_genre(self, genre_id: int) -> bool:
        """Add the genre to the filter if absent, remove it if present. Returns True when selected."""
        self._filters = self._filters.toggle(genre_id)
        return int(genre_id) in self._filters

    def visible_movies(self) -> List[Movie]:
        if self._page_result is None:
            return []
        return self._filters.apply(self._page_result.results)

    # ---- watchlist ----

    def toggle_watchlist(self, movie: Movie) -> bool:
        return self._watchlist.toggle(movie)

    def is_in_watchlist(self, movie_id: int) -> bool:
        return self._watchlist.contains(movie_id)

    def find_movie(self, movie_id: int) -> Optional[Movie]:
        """Look a movie up in the displayed page, then in the watchlist."""
        if self._page_result is not None:
            for movie in self._page_result.results:
                if movie.id == movie_id:
                    return movie
        return self._watchlist.watchlist.get(movie_id)

    # ---- fetching ----

    def _loader_for(self, key: QueryKey) -> Callable[[], Awaitable[PageResult]]:
        if key.kind == "search":
            return lambda: self._catalog.fetch_search(key.query, key.page)
        return lambda: self._catalog.fetch_popular(key.page)

    async def load(self) -> Optional[PageResult]:
        """Fetch the page for the current search/page; None when it failed."""
        key = self.current_key()
        self._generation += 1
        generation = self._generation
        self._fetching += 1
        try:
            result = await self._cache.fetch(key, self._loader_for(key))
        except NetworkError as exc:
            if generation > self._applied_generation:
                self._error = exc
            if self._page_result is not None:
                logger.warning("load failed, keeping page %s on screen key=%s error=%s",
                               self._page_result.page, key, exc)
            else:
                logger.warning("load failed with nothing to show key=%s error=%s", key, exc)
            return None
        finally:
            self._fetching -= 1

        if generation < self._applied_generation:
            logger.debug("ignoring superseded result key=%s", key)
            return result
        self._applied_generation = generation
        self._page_result = result
        self._displayed_key = key
        self._error = None
        return result

    async def load_genres(self) -> tuple[Genre, ...]:
        try:
            genres = await self._cache.fetch(QueryKey.genres(), self._catalog.fetch_genres)
        except NetworkError as exc:
            logger.warning("genre list unavailable: %s", exc)
            return self._genres
        self._genres = tuple(genres)
        return self._genres

    # ---- presentation ----

    def status(self) -> str:
        if self._page_result is None:
            if self._error is not None:
                return STATUS_ERROR
            return STATUS_LOADING if self.is_fetching else STATUS_IDLE
        if self._error is not None:
            return STATUS_STALE
        return STATUS_READY

    def error_message(self) -> Optional[str]:
        if self._error is None:
            return None
        return self._error.message or DEFAULT_ERROR_MESSAGE

    def snapshot(self) -> ViewSnapshot:
        watchlist = tuple(self._watchlist.items())
        return ViewSnapshot(
            search_query=self._search_query,
            search_input=self._search_input,
            current_page=self._current_page,
            total_pages=self.total_pages,
            can_go_previous=self.can_go_previous,
            can_go_next=self.can_go_next,
            is_fetching=self.is_fetching,
            status=self.status(),
            error_message=self.error_message(),
            displayed_page=self._page_result.page if self._page_result is not None else None,
            genres=self._genres,
            selected_genres=self._filters.genre_ids,
            movies=tuple(self.visible_movies()),
            watchlist=watchlist,
            watchlist_ids=frozenset(m.id for m in watchlist),
        )

    async def aclose(self) -> None:
        await self._debouncer.aclose()
