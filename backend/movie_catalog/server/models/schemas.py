from typing import List, Optional

from pydantic import BaseModel, Field

from movie_catalog.application.catalog.view_state import STATUS_READY, STATUS_STALE, ViewSnapshot
from movie_catalog.config.settings import (
    OVERVIEW_SNIPPET_CHARS,
    POSTER_PLACEHOLDER_URL,
    TMDB_IMAGE_BASE_URL,
)
from movie_catalog.domain.catalog import Genre, Movie


def poster_url(poster_path: Optional[str]) -> str:
    p = str(poster_path or "").strip()
    if not p:
        return POSTER_PLACEHOLDER_URL
    if not p.startswith("/"):
        p = "/" + p
    return f"{TMDB_IMAGE_BASE_URL.rstrip('/')}{p}"


def overview_snippet(overview: str, limit: int = OVERVIEW_SNIPPET_CHARS) -> str:
    text = " ".join((overview or "").split())
    if limit <= 0 or len(text) <= limit:
        return text
    cut = text[:limit].rstrip()
    # Prefer ending on a word boundary.
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut + "…"


class SearchRequest(BaseModel):
    """Search box input."""
    query: str = ""
    debounce: bool = True


class PageRequest(BaseModel):
    page: int


class MovieCard(BaseModel):
    id: int
    title: str = ""
    overview: str = ""
    poster_url: str
    rating: float = 0.0
    genre_ids: List[int] = Field(default_factory=list)
    in_watchlist: bool = False

    @classmethod
    def from_movie(cls, movie: Movie, *, in_watchlist: bool) -> "MovieCard":
        return cls(
            id=movie.id,
            title=movie.title,
            overview=overview_snippet(movie.overview),
            poster_url=poster_url(movie.poster_path),
            rating=round(float(movie.vote_average or 0.0), 1),
            genre_ids=list(movie.genre_ids),
            in_watchlist=in_watchlist,
        )


class GenreToggle(BaseModel):
    id: int
    name: str
    selected: bool = False

    @classmethod
    def from_genre(cls, genre: Genre, *, selected: bool) -> "GenreToggle":
        return cls(id=genre.id, name=genre.name, selected=selected)


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    label: str
    previous_disabled: bool
    next_disabled: bool


class WatchlistSection(BaseModel):
    count: int = 0
    items: List[MovieCard] = Field(default_factory=list)


class CatalogView(BaseModel):
    """Rendered catalog page: search box, genre toggles, grid, pagination, watchlist."""
    search_query: str = ""
    search_input: str = ""
    status: str
    error_message: Optional[str] = None
    empty_message: Optional[str] = None
    is_fetching: bool = False
    displayed_page: Optional[int] = None
    genres: List[GenreToggle] = Field(default_factory=list)
    movies: List[MovieCard] = Field(default_factory=list)
    pagination: Pagination
    watchlist: WatchlistSection

    @classmethod
    def from_snapshot(cls, snap: ViewSnapshot) -> "CatalogView":
        movies = [MovieCard.from_movie(m, in_watchlist=m.id in snap.watchlist_ids) for m in snap.movies]
        empty_message = None
        if snap.status in {STATUS_READY, STATUS_STALE} and not movies:
            empty_message = "No movies found"
        return cls(
            search_query=snap.search_query,
            search_input=snap.search_input,
            status=snap.status,
            error_message=snap.error_message,
            empty_message=empty_message,
            is_fetching=snap.is_fetching,
            displayed_page=snap.displayed_page,
            genres=[GenreToggle.from_genre(g, selected=g.id in snap.selected_genres) for g in snap.genres],
            movies=movies,
            pagination=Pagination(
                current_page=snap.current_page,
                total_pages=snap.total_pages,
                label=f"Page {snap.current_page} of {snap.total_pages}",
                previous_disabled=not snap.can_go_previous,
                next_disabled=not snap.can_go_next,
            ),
            watchlist=WatchlistSection(
                count=len(snap.watchlist),
                items=[MovieCard.from_movie(m, in_watchlist=True) for m in snap.watchlist],
            ),
        )


class WatchlistToggleResponse(BaseModel):
    movie_id: int
    in_watchlist: bool
    watchlist: WatchlistSection
