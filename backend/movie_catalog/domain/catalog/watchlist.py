from __future__ import annotations

import json
from typing import Any, Iterable, Iterator, Optional

from movie_catalog.domain.catalog.movie import Movie


class Watchlist:
    """Ordered set of saved movies keyed by id (insertion order kept)."""

    def __init__(self, movies: Optional[Iterable[Movie]] = None) -> None:
        self._items: dict[int, Movie] = {}
        for movie in movies or ():
            # First occurrence wins; later duplicates are dropped.
            self._items.setdefault(movie.id, movie)

    def __contains__(self, movie_id: object) -> bool:
        return movie_id in self._items

    def __iter__(self) -> Iterator[Movie]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def ids(self) -> list[int]:
        return list(self._items.keys())

    def get(self, movie_id: int) -> Optional[Movie]:
        return self._items.get(movie_id)

    def toggle(self, movie: Movie) -> bool:
        """Add the movie if absent, remove it if present. Returns True when added."""
        if movie.id in self._items:
            del self._items[movie.id]
            return False
        self._items[movie.id] = movie
        return True

    def to_json(self) -> str:
        return json.dumps([m.to_payload() for m in self._items.values()], ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "Watchlist":
        """Parse a serialized watchlist.

        Raises ValueError when the payload is not a JSON array. Entries that
        are not valid movies are skipped.
        """
        try:
            data: Any = json.loads(text)
        except RecursionError as exc:
            raise ValueError("watchlist payload is nested too deeply") from exc
        if not isinstance(data, list):
            raise ValueError(f"watchlist payload must be a JSON array, got {type(data).__name__}")
        movies = [m for m in (Movie.from_payload(raw) for raw in data) if m is not None]
        return cls(movies)
