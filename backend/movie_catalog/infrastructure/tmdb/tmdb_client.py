"""
TMDB API HTTP client for the catalog listings.

Three read operations back the view: popular movies by page, text search by
page and the genre list. Every failure on the wire is raised as NetworkError
so callers never see raw aiohttp exceptions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from movie_catalog.config.settings import (
    TMDB_API_KEY,
    TMDB_API_TOKEN,
    TMDB_BASE_URL,
    TMDB_LANGUAGE,
    TMDB_TIMEOUT_S,
)
from movie_catalog.domain.catalog import Genre, NetworkError, PageResult

logger = logging.getLogger(__name__)


class TMDBCatalogClient:
    """Async HTTP client for the TMDB v3 catalog endpoints.

    Attributes:
        _base_url: TMDB API base URL (including the `/3` prefix)
        _api_token: v4 bearer token; preferred when present
        _api_key: v3 api key, sent as a query parameter without a token
        _timeout_s: total request timeout in seconds
        _session: aiohttp ClientSession (lazily initialized)
        _lock: guards session creation
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_token: str | None = None,
        api_key: str | None = None,
        timeout_s: float | None = None,
        language: str | None = None,
    ) -> None:
        self._base_url = (base_url or TMDB_BASE_URL or "").rstrip("/")
        self._api_token = (TMDB_API_TOKEN if api_token is None else api_token).strip()
        self._api_key = (TMDB_API_KEY if api_key is None else api_key).strip()
        self._timeout_s = float(timeout_s or TMDB_TIMEOUT_S or 10.0)
        self._language = (TMDB_LANGUAGE if language is None else language).strip()
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self._base_url and (self._api_token or self._api_key))

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    def _auth_params(self) -> dict[str, str]:
        """v3 auth via api_key query param (used when bearer token is absent)."""
        if self._api_token:
            return {}
        if self._api_key:
            return {"api_key": self._api_key}
        return {}

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None and not self._session.closed:
            return self._session

        async with self._lock:
            # Another coroutine may have created the session while we waited
            if self._session is not None and not self._session.closed:
                return self._session

            timeout = aiohttp.ClientTimeout(total=self._timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            return self._session

    async def _get_json(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self.configured:
            raise NetworkError("TMDB client not configured (missing base_url or credentials)")

        # Direct concatenation keeps the `/3` prefix that urljoin would drop.
        url = f"{self._base_url}{endpoint}"
        query = dict(params)
        if self._language:
            query.setdefault("language", self._language)
        query.update(self._auth_params())

        logger.debug("TMDB request endpoint=%s params=%s", endpoint, params)

        try:
            session = await self._get_session()
            async with session.get(url, params=query, headers=self._headers()) as resp:
                if resp.status >= 400:
                    error_text = await resp.text()
                    raise NetworkError(
                        f"TMDB request failed ({resp.status}): {error_text[:200]}",
                        status=resp.status,
                        url=url,
                    )
                data = await resp.json(content_type=None)
        except NetworkError:
            raise
        except asyncio.TimeoutError as exc:
            raise NetworkError(f"TMDB request timed out after {self._timeout_s}s", url=url) from exc
        except aiohttp.ClientError as exc:
            raise NetworkError(f"TMDB request failed: {exc}", url=url) from exc
        except ValueError as exc:
            # Undecodable body.
            raise NetworkError(f"TMDB returned an invalid JSON body: {exc}", url=url) from exc

        if not isinstance(data, dict):
            raise NetworkError("TMDB returned an unexpected payload shape", url=url)
        return data

    async def fetch_popular(self, page: int) -> PageResult:
        """Fetch one page of the popular-movies listing."""
        page = _check_page(page)
        data = await self._get_json("/movie/popular", {"page": page})
        return PageResult.from_payload(data, page=page)

    async def fetch_search(self, query: str, page: int) -> PageResult:
        """Fetch one page of movies matching a free-text query."""
        term = (query or "").strip()
        if not term:
            raise ValueError("search query must not be empty")
        page = _check_page(page)
        data = await self._get_json("/search/movie", {"query": term, "page": page})
        return PageResult.from_payload(data, page=page)

    async def fetch_genres(self) -> list[Genre]:
        """Fetch the static movie genre list."""
        data = await self._get_json("/genre/movie/list", {})
        raw = data.get("genres") or []
        if not isinstance(raw, list):
            return []
        return [g for g in (Genre.from_payload(item) for item in raw) if g is not None]

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


def _check_page(page: int) -> int:
    page = int(page)
    if page < 1:
        raise ValueError(f"page numbers are 1-indexed, got {page}")
    return page
