from datetime import datetime, timezone

import pytest

from daybook.store import MemoryStore


class FakeClock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, milliseconds: int) -> int:
        self.now += milliseconds
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    start = datetime(2026, 1, 23, 12, 0, 0, tzinfo=timezone.utc)
    return FakeClock(int(start.timestamp()) * 1000)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()
