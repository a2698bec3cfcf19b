from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    """Base class for catalog failures that the view recovers from."""


class NetworkError(CatalogError):
    """Transport failure, timeout or non-2xx answer from the catalog API."""

    def __init__(self, message: str, *, status: Optional[int] = None, url: Optional[str] = None) -> None:
        self.message = message
        self.status = status
        self.url = url
        super().__init__(message)


class PersistenceError(CatalogError):
    """Key/value storage read or write failure."""

    def __init__(self, message: str, *, key: Optional[str] = None) -> None:
        self.message = message
        self.key = key
        super().__init__(message)
