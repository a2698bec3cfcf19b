from movie_catalog.domain.catalog.errors import CatalogError, NetworkError, PersistenceError
from movie_catalog.domain.catalog.movie import FilterSelection, Genre, Movie, PageResult, QueryKey
from movie_catalog.domain.catalog.watchlist import Watchlist

__all__ = [
    "CatalogError",
    "FilterSelection",
    "Genre",
    "Movie",
    "NetworkError",
    "PageResult",
    "PersistenceError",
    "QueryKey",
    "Watchlist",
]
