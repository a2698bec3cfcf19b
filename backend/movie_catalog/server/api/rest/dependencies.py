from __future__ import annotations

import logging
from functools import lru_cache

from movie_catalog.application.catalog.view_state import ViewStateController
from movie_catalog.application.catalog.watchlist_state import WatchlistState
from movie_catalog.config.settings import WATCHLIST_STORAGE_KEY
from movie_catalog.infrastructure.cache import QueryCache
from movie_catalog.infrastructure.storage import build_key_value_storage
from movie_catalog.infrastructure.tmdb import TMDBCatalogClient

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _build_catalog_client() -> TMDBCatalogClient:
    client = TMDBCatalogClient()
    if not client.configured:
        logger.warning("TMDB credentials missing; catalog requests will fail (set TMDB_API_KEY or TMDB_API_TOKEN)")
    return client


@lru_cache(maxsize=1)
def _build_watchlist_state() -> WatchlistState:
    state = WatchlistState(storage=build_key_value_storage(), storage_key=WATCHLIST_STORAGE_KEY)
    state.restore()
    return state


@lru_cache(maxsize=1)
def _build_view_controller() -> ViewStateController:
    # Single client per process: one view, one cache, one watchlist.
    return ViewStateController(
        catalog=_build_catalog_client(),
        cache=QueryCache(),
        watchlist=_build_watchlist_state(),
    )


def get_view_controller() -> ViewStateController:
    return _build_view_controller()


async def shutdown_dependencies() -> None:
    """Best-effort shutdown hooks for long-lived adapters (HTTP sessions, timers)."""
    if _build_view_controller.cache_info().currsize:
        await _build_view_controller().aclose()
    if _build_catalog_client.cache_info().currsize:
        await _build_catalog_client().close()
