import sys
import time
import unittest
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from fastapi.testclient import TestClient

from movie_catalog.application.catalog.view_state import ViewStateController
from movie_catalog.application.catalog.watchlist_state import WatchlistState
from movie_catalog.config.settings import POSTER_PLACEHOLDER_URL
from movie_catalog.domain.catalog import Genre, Movie, NetworkError, PageResult
from movie_catalog.infrastructure.cache import QueryCache
from movie_catalog.infrastructure.storage import InMemoryKeyValueStorage
from movie_catalog.server.api.rest.dependencies import get_view_controller
from movie_catalog.server.main import app


class _StubCatalog:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, int]] = []
        self.fail_pages: set[int] = set()

    async def fetch_popular(self, page: int) -> PageResult:
        self.calls.append(("popular", "", page))
        if page in self.fail_pages:
            raise NetworkError(f"popular page {page} unavailable", status=503)
        movies = (
            Movie(id=page * 10 + 1, title=f"Popular {page}", overview="word " * 80, poster_path="/a.jpg",
                  vote_average=7.26, genre_ids=(28,)),
            Movie(id=page * 10 + 2, title=f"Quiet {page}", poster_path=None, genre_ids=(18,)),
        )
        return PageResult(results=movies, total_pages=3, page=page)

    async def fetch_search(self, query: str, page: int) -> PageResult:
        self.calls.append(("search", query, page))
        if query == "zzzz":
            return PageResult(results=(), total_pages=1, page=page)
        return PageResult(results=(Movie(id=900 + page, title=f"{query.title()} {page}"),), total_pages=2, page=page)

    async def fetch_genres(self) -> list[Genre]:
        self.calls.append(("genres", "", 0))
        return [Genre(28, "Action"), Genre(18, "Drama")]

    async def close(self) -> None:
        return None


class TestCatalogApi(unittest.TestCase):
    def setUp(self) -> None:
        self.catalog = _StubCatalog()
        self.storage = InMemoryKeyValueStorage()
        self.controller = ViewStateController(
            catalog=self.catalog,
            cache=QueryCache(retries=2, retry_delay_s=0),
            watchlist=WatchlistState(storage=self.storage),
            debounce_ms=10,
        )
        app.dependency_overrides[get_view_controller] = lambda: self.controller
        # One portal loop for the whole test so debounce timers survive between requests.
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)
        app.dependency_overrides.clear()

    def test_initial_view_lists_popular_page_one(self) -> None:
        resp = self.client.get("/api/v1/catalog/view")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "ready")
        self.assertEqual([m["id"] for m in body["movies"]], [11, 12])
        self.assertEqual(body["pagination"]["label"], "Page 1 of 3")
        self.assertTrue(body["pagination"]["previous_disabled"])
        self.assertFalse(body["pagination"]["next_disabled"])
        self.assertEqual([g["name"] for g in body["genres"]], ["Action", "Drama"])

    def test_movie_cards_are_rendered_for_display(self) -> None:
        body = self.client.get("/api/v1/catalog/view").json()
        first, second = body["movies"]
        self.assertTrue(first["poster_url"].endswith("/a.jpg"))
        self.assertEqual(first["rating"], 7.3)
        self.assertTrue(first["overview"].endswith("…"))
        self.assertEqual(second["poster_url"], POSTER_PLACEHOLDER_URL)

    def test_search_without_debounce_resets_page(self) -> None:
        self.client.get("/api/v1/catalog/view")
        self.client.post("/api/v1/catalog/page/next")
        resp = self.client.post("/api/v1/catalog/search", json={"query": " batman ", "debounce": False})
        body = resp.json()
        self.assertEqual(body["search_query"], "batman")
        self.assertEqual(body["pagination"]["current_page"], 1)
        self.assertEqual(body["movies"][0]["title"], "Batman 1")

        body = self.client.post("/api/v1/catalog/page", json={"page": 2}).json()
        self.assertEqual(body["movies"][0]["title"], "Batman 2")
        self.assertIn(("search", "batman", 2), self.catalog.calls)

    def test_debounced_search_commits_in_background(self) -> None:
        self.client.get("/api/v1/catalog/view")
        for text in ("a", "al", "alien"):
            body = self.client.post("/api/v1/catalog/search", json={"query": text}).json()
        self.assertEqual(body["search_input"], "alien")
        self.assertEqual(body["search_query"], "")

        deadline = time.monotonic() + 2.0
        while time.monotonic() < deadline:
            if self.client.get("/api/v1/catalog/health").json()["search_pending"] is False and (
                "search", "alien", 1
            ) in self.catalog.calls:
                break
            time.sleep(0.02)

        body = self.client.get("/api/v1/catalog/view").json()
        self.assertEqual(body["search_query"], "alien")
        searches = [c for c in self.catalog.calls if c[0] == "search"]
        self.assertEqual(searches, [("search", "alien", 1)])

    def test_empty_results_show_message(self) -> None:
        body = self.client.post("/api/v1/catalog/search", json={"query": "zzzz", "debounce": False}).json()
        self.assertEqual(body["movies"], [])
        self.assertEqual(body["empty_message"], "No movies found")

    def test_page_clamped_to_range(self) -> None:
        self.client.get("/api/v1/catalog/view")
        body = self.client.post("/api/v1/catalog/page", json={"page": 99}).json()
        self.assertEqual(body["pagination"]["current_page"], 3)
        self.assertTrue(body["pagination"]["next_disabled"])

    def test_failed_page_keeps_previous_movies(self) -> None:
        self.catalog.fail_pages.add(2)
        self.client.get("/api/v1/catalog/view")
        body = self.client.post("/api/v1/catalog/page/next").json()
        self.assertEqual(body["status"], "stale")
        self.assertEqual(body["displayed_page"], 1)
        self.assertEqual([m["id"] for m in body["movies"]], [11, 12])
        self.assertIn("unavailable", body["error_message"])

    def test_first_failure_shows_error(self) -> None:
        self.catalog.fail_pages.add(1)
        body = self.client.get("/api/v1/catalog/view").json()
        self.assertEqual(body["status"], "error")
        self.assertEqual(body["movies"], [])
        self.assertIsNone(body["empty_message"])

    def test_genre_toggle_filters_current_page(self) -> None:
        self.client.get("/api/v1/catalog/view")
        body = self.client.post("/api/v1/catalog/genres/28/toggle").json()
        self.assertEqual([m["id"] for m in body["movies"]], [11])
        self.assertEqual([g["selected"] for g in body["genres"]], [True, False])

        genres = self.client.get("/api/v1/catalog/genres").json()
        self.assertEqual(genres[0], {"id": 28, "name": "Action", "selected": True})

        body = self.client.post("/api/v1/catalog/genres/28/toggle").json()
        self.assertEqual(len(body["movies"]), 2)

    def test_watchlist_toggle_round_trip(self) -> None:
        self.client.get("/api/v1/catalog/view")
        resp = self.client.post("/api/v1/catalog/watchlist/11/toggle")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["in_watchlist"])
        self.assertEqual(body["watchlist"]["count"], 1)
        self.assertIn('"id": 11', self.storage.get_item("watchlist"))

        view = self.client.get("/api/v1/catalog/view").json()
        self.assertTrue(view["movies"][0]["in_watchlist"])
        self.assertEqual(view["watchlist"]["items"][0]["id"], 11)

        body = self.client.post("/api/v1/catalog/watchlist/11/toggle").json()
        self.assertFalse(body["in_watchlist"])
        self.assertEqual(self.client.get("/api/v1/catalog/watchlist").json()["count"], 0)

    def test_watchlist_toggle_unknown_movie_404(self) -> None:
        self.client.get("/api/v1/catalog/view")
        resp = self.client.post("/api/v1/catalog/watchlist/424242/toggle")
        self.assertEqual(resp.status_code, 404)

    def test_health(self) -> None:
        body = self.client.get("/api/v1/catalog/health").json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["watchlist_count"], 0)


if __name__ == "__main__":
    unittest.main()
