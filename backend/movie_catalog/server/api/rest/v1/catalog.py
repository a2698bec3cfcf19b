from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from movie_catalog.application.catalog.view_state import ViewStateController
from movie_catalog.server.api.rest.dependencies import get_view_controller
from movie_catalog.server.models.schemas import (
    CatalogView,
    GenreToggle,
    MovieCard,
    PageRequest,
    SearchRequest,
    WatchlistSection,
    WatchlistToggleResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/catalog", tags=["catalog-v1"])


async def _render(controller: ViewStateController) -> CatalogView:
    """Make sure genres and the current page are loaded, then render the view."""
    if not controller.genres:
        await controller.load_genres()
    # Fetch failures are reflected in the snapshot status, never raised here.
    await controller.load()
    return CatalogView.from_snapshot(controller.snapshot())


def _watchlist_section(controller: ViewStateController) -> WatchlistSection:
    items = controller.watchlist.items()
    return WatchlistSection(
        count=len(items),
        items=[MovieCard.from_movie(m, in_watchlist=True) for m in items],
    )


@router.get("/view", response_model=CatalogView)
async def get_view(controller: ViewStateController = Depends(get_view_controller)) -> CatalogView:
    return await _render(controller)


@router.post("/search", response_model=CatalogView)
async def search(
    req: SearchRequest,
    controller: ViewStateController = Depends(get_view_controller),
) -> CatalogView:
    """Search box input. Debounced input commits in the background."""
    if req.debounce:
        controller.input_search(req.query)
        return CatalogView.from_snapshot(controller.snapshot())
    controller.set_search_query(req.query)
    return await _render(controller)


@router.post("/page", response_model=CatalogView)
async def set_page(
    req: PageRequest,
    controller: ViewStateController = Depends(get_view_controller),
) -> CatalogView:
    controller.set_page(req.page)
    return await _render(controller)


@router.post("/page/next", response_model=CatalogView)
async def next_page(controller: ViewStateController = Depends(get_view_controller)) -> CatalogView:
    controller.next_page()
    return await _render(controller)


@router.post("/page/previous", response_model=CatalogView)
async def previous_page(controller: ViewStateController = Depends(get_view_controller)) -> CatalogView:
    controller.previous_page()
    return await _render(controller)


@router.get("/genres", response_model=List[GenreToggle])
async def list_genres(controller: ViewStateController = Depends(get_view_controller)) -> List[GenreToggle]:
    genres = await controller.load_genres()
    selected = controller.selected_genres
    return [GenreToggle.from_genre(g, selected=g.id in selected) for g in genres]


@router.post("/genres/{genre_id}/toggle", response_model=CatalogView)
async def toggle_genre(
    genre_id: int,
    controller: ViewStateController = Depends(get_view_controller),
) -> CatalogView:
    controller.toggle_genre(genre_id)
    return CatalogView.from_snapshot(controller.snapshot())


@router.get("/watchlist", response_model=WatchlistSection)
async def list_watchlist(controller: ViewStateController = Depends(get_view_controller)) -> WatchlistSection:
    return _watchlist_section(controller)


@router.post("/watchlist/{movie_id}/toggle", response_model=WatchlistToggleResponse)
async def toggle_watchlist(
    movie_id: int,
    controller: ViewStateController = Depends(get_view_controller),
) -> WatchlistToggleResponse:
    movie = controller.find_movie(movie_id)
    if movie is None:
        raise HTTPException(status_code=404, detail="movie not on the current page or in the watchlist")
    added = controller.toggle_watchlist(movie)
    logger.info("watchlist toggled movie_id=%s added=%s", movie_id, added)
    return WatchlistToggleResponse(
        movie_id=movie_id,
        in_watchlist=added,
        watchlist=_watchlist_section(controller),
    )


@router.get("/health")
async def health(controller: ViewStateController = Depends(get_view_controller)) -> Dict[str, Any]:
    return {
        "status": "ok",
        "is_fetching": controller.is_fetching,
        "search_pending": controller.search_pending,
        "watchlist_count": len(controller.watchlist.items()),
    }
