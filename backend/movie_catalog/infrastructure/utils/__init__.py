from movie_catalog.infrastructure.utils.debounce import Debouncer

__all__ = ["Debouncer"]
