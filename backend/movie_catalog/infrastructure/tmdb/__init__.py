from movie_catalog.infrastructure.tmdb.tmdb_client import TMDBCatalogClient

__all__ = ["TMDBCatalogClient"]
