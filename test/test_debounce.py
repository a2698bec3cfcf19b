import asyncio
import sys
import unittest
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from movie_catalog.infrastructure.utils import Debouncer


class TestDebouncer(unittest.IsolatedAsyncioTestCase):
    async def test_burst_commits_only_the_last_value(self) -> None:
        committed: list[str] = []
        debouncer = Debouncer(0.05, committed.append)

        for text in ("b", "ba", "bat", "batm", "batman"):
            debouncer.trigger(text)
            await asyncio.sleep(0.001)

        self.assertTrue(debouncer.pending)
        self.assertEqual(debouncer.pending_value, "batman")
        await debouncer.wait()
        self.assertEqual(committed, ["batman"])
        self.assertFalse(debouncer.pending)

    async def test_nothing_commits_before_the_quiet_period(self) -> None:
        committed: list[str] = []
        debouncer = Debouncer(0.05, committed.append)
        debouncer.trigger("alien")
        await asyncio.sleep(0.01)
        self.assertEqual(committed, [])
        await debouncer.wait()
        self.assertEqual(committed, ["alien"])

    async def test_cancel_drops_pending_commit(self) -> None:
        committed: list[str] = []
        debouncer = Debouncer(0.01, committed.append)
        debouncer.trigger("heat")
        self.assertTrue(debouncer.cancel())
        await asyncio.sleep(0.03)
        self.assertEqual(committed, [])
        self.assertFalse(debouncer.cancel())

    async def test_flush_commits_immediately(self) -> None:
        committed: list[str] = []

        async def commit(value: str) -> None:
            committed.append(value)

        debouncer = Debouncer(10.0, commit)
        debouncer.trigger("ronin")
        self.assertTrue(await debouncer.flush())
        self.assertEqual(committed, ["ronin"])
        self.assertFalse(await debouncer.flush())

    async def test_aclose_cancels_a_running_commit(self) -> None:
        started = asyncio.Event()
        finished: list[str] = []

        async def commit(value: str) -> None:
            started.set()
            await asyncio.sleep(10)
            finished.append(value)

        debouncer = Debouncer(0.0, commit)
        debouncer.trigger("up")
        await asyncio.wait_for(started.wait(), timeout=1)
        await debouncer.aclose()
        self.assertEqual(finished, [])
        self.assertFalse(debouncer.pending)

    async def test_commit_errors_are_logged_not_raised(self) -> None:
        def commit(_value: str) -> None:
            raise RuntimeError("boom")

        debouncer = Debouncer(0.0, commit)
        with self.assertLogs("movie_catalog.infrastructure.utils.debounce", level="ERROR"):
            debouncer.trigger("x")
            await debouncer.wait()


if __name__ == "__main__":
    unittest.main()
