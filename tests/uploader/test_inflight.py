"""Tests for InFlightSet."""

from __future__ import annotations

import threading
from pathlib import Path

from gdrive_sync.uploader.inflight import InFlightSet


class TestInFlightSet:
    def test_claim_once(self) -> None:
        inflight = InFlightSet()
        path = Path("/in/a.pdf")

        assert inflight.try_claim(path) is True
        assert inflight.try_claim(path) is False
        assert inflight.is_claimed(path) is True

    def test_release_allows_reclaim(self) -> None:
        inflight = InFlightSet()
        path = Path("/in/a.pdf")
        inflight.try_claim(path)

        inflight.release(path)

        assert inflight.is_claimed(path) is False
        assert inflight.try_claim(path) is True

    def test_release_unclaimed_is_noop(self) -> None:
        inflight = InFlightSet()
        inflight.release(Path("/in/never.pdf"))
        assert inflight.is_claimed(Path("/in/never.pdf")) is False

    def test_paths_independent(self) -> None:
        inflight = InFlightSet()

        assert inflight.try_claim(Path("/in/a.pdf")) is True
        assert inflight.try_claim(Path("/in/b.pdf")) is True
        assert inflight.is_claimed(Path("/in/a.pdf")) is True
        assert inflight.is_claimed(Path("/in/b.pdf")) is True

    def test_concurrent_claims_single_winner(self) -> None:
        inflight = InFlightSet()
        path = Path("/in/a.pdf")
        barrier = threading.Barrier(16)
        wins: list[bool] = []
        lock = threading.Lock()

        def claim() -> None:
            barrier.wait()
            result = inflight.try_claim(path)
            with lock:
                wins.append(result)

        threads = [threading.Thread(target=claim) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert wins.count(True) == 1
