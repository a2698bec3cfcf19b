from movie_catalog.infrastructure.cache.query_cache import QueryCache

__all__ = ["QueryCache"]
