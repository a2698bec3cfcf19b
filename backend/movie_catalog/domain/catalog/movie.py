from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True)
class Movie:
    """A catalog entry as returned by the listing/search endpoints."""

    id: int
    title: str
    overview: str = ""
    poster_path: Optional[str] = None
    vote_average: float = 0.0
    genre_ids: tuple[int, ...] = ()

    @classmethod
    def from_payload(cls, raw: Any) -> Optional["Movie"]:
        """Build a movie from an API/storage dict; None when it has no usable id."""
        if not isinstance(raw, dict):
            return None
        movie_id = _as_int(raw.get("id"))
        if movie_id is None:
            return None
        genre_ids_raw = raw.get("genre_ids")
        genre_ids: tuple[int, ...] = ()
        if isinstance(genre_ids_raw, (list, tuple)):
            genre_ids = tuple(g for g in (_as_int(x) for x in genre_ids_raw) if g is not None)
        poster_path = raw.get("poster_path")
        return cls(
            id=movie_id,
            title=str(raw.get("title") or ""),
            overview=str(raw.get("overview") or ""),
            poster_path=str(poster_path) if poster_path else None,
            vote_average=_as_float(raw.get("vote_average")),
            genre_ids=genre_ids,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "overview": self.overview,
            "poster_path": self.poster_path,
            "vote_average": self.vote_average,
            "genre_ids": list(self.genre_ids),
        }


@dataclass(frozen=True)
class Genre:
    id: int
    name: str

    @classmethod
    def from_payload(cls, raw: Any) -> Optional["Genre"]:
        if not isinstance(raw, dict):
            return None
        genre_id = _as_int(raw.get("id"))
        if genre_id is None:
            return None
        return cls(id=genre_id, name=str(raw.get("name") or ""))


@dataclass(frozen=True)
class PageResult:
    """One page of a paginated listing. total_pages is never below 1."""

    results: tuple[Movie, ...] = ()
    total_pages: int = 1
    page: int = 1

    def __post_init__(self) -> None:
        if self.total_pages < 1:
            object.__setattr__(self, "total_pages", 1)

    @classmethod
    def from_payload(cls, raw: Any, *, page: int = 1) -> "PageResult":
        if not isinstance(raw, dict):
            return cls(page=page)
        results_raw = raw.get("results") or []
        movies: list[Movie] = []
        if isinstance(results_raw, list):
            for item in results_raw:
                movie = Movie.from_payload(item)
                if movie is not None:
                    movies.append(movie)
        total_pages = _as_int(raw.get("total_pages")) or 1
        return cls(results=tuple(movies), total_pages=total_pages, page=page)


@dataclass(frozen=True)
class QueryKey:
    """Cache identity of one fetch: (operation kind, search term, page)."""

    kind: str
    query: str = ""
    page: int = 0

    @classmethod
    def popular(cls, page: int) -> "QueryKey":
        return cls(kind="popular", page=int(page))

    @classmethod
    def search(cls, query: str, page: int) -> "QueryKey":
        return cls(kind="search", query=query, page=int(page))

    @classmethod
    def genres(cls) -> "QueryKey":
        return cls(kind="genres")


@dataclass(frozen=True)
class FilterSelection:
    """Selected genre ids; an empty selection shows everything."""

    genre_ids: frozenset[int] = field(default_factory=frozenset)

    def toggle(self, genre_id: int) -> "FilterSelection":
        return FilterSelection(self.genre_ids ^ {int(genre_id)})

    def __contains__(self, genre_id: object) -> bool:
        return genre_id in self.genre_ids

    def __len__(self) -> int:
        return len(self.genre_ids)

    def matches(self, movie: Movie) -> bool:
        if not self.genre_ids:
            return True
        return any(g in self.genre_ids for g in movie.genre_ids)

    def apply(self, movies: tuple[Movie, ...] | list[Movie]) -> list[Movie]:
        """Return a new list of the movies passing the filter, order kept."""
        return [m for m in movies if self.matches(m)]
