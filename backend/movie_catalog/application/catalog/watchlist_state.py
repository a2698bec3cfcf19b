from __future__ import annotations

import logging
from typing import Callable, List, Optional

from movie_catalog.application.ports.key_value_storage_port import KeyValueStoragePort
from movie_catalog.domain.catalog import Movie, PersistenceError, Watchlist

logger = logging.getLogger(__name__)

PersistHook = Callable[[Watchlist], None]


class WatchlistState:
    """Owns the in-memory watchlist and mirrors it to key/value storage.

    Storage failures are logged and never undo an in-memory change. The
    optional `on_change` hook runs after every mutation, once persistence
    has been attempted.
    """

    def __init__(
        self,
        *,
        storage: KeyValueStoragePort,
        storage_key: str = "watchlist",
        on_change: Optional[PersistHook] = None,
    ) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._on_change = on_change
        self._watchlist = Watchlist()
        self._restored = False

    @property
    def watchlist(self) -> Watchlist:
        return self._watchlist

    def restore(self) -> Watchlist:
        """Load the stored watchlist once; any failure yields an empty list."""
        if self._restored:
            return self._watchlist
        self._restored = True
        try:
            raw = self._storage.get_item(self._storage_key)
        except PersistenceError as exc:
            logger.warning("watchlist read failed key=%s error=%s", self._storage_key, exc)
            return self._watchlist
        if not raw:
            return self._watchlist
        try:
            self._watchlist = Watchlist.from_json(raw)
        except ValueError as exc:
            logger.warning("stored watchlist is invalid, starting empty: %s", exc)
            self._watchlist = Watchlist()
        logger.info("watchlist restored count=%s", len(self._watchlist))
        return self._watchlist

    def contains(self, movie_id: int) -> bool:
        return movie_id in self._watchlist

    def items(self) -> List[Movie]:
        return list(self._watchlist)

    def toggle(self, movie: Movie) -> bool:
        """Add or remove a movie and persist the full list. Returns True when added."""
        added = self._watchlist.toggle(movie)
        self._persist()
        if self._on_change is not None:
            self._on_change(self._watchlist)
        return added

    def _persist(self) -> None:
        try:
            self._storage.set_item(self._storage_key, self._watchlist.to_json())
        except PersistenceError as exc:
            logger.warning("watchlist write failed key=%s error=%s", self._storage_key, exc)
