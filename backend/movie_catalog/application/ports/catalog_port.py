from __future__ import annotations

from typing import List, Protocol

from movie_catalog.domain.catalog import Genre, PageResult


class CatalogPort(Protocol):
    async def fetch_popular(self, page: int) -> PageResult:
        ...

    async def fetch_search(self, query: str, page: int) -> PageResult:
        ...

    async def fetch_genres(self) -> List[Genre]:
        ...

    async def close(self) -> None:
        ...
