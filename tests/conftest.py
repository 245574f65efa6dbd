import asyncio
from datetime import date

import pytest

from gametrack_cli.api import DetailResult, Entry, GameStatus, Platform, SearchResult


class FakeCatalog:
    """
    In-memory catalog.

    With ``hold=True`` every call parks on a future that the test resolves
    explicitly, so response arrival order is under the test's control.
    Otherwise calls answer immediately from ``searches`` / ``details``;
    an Exception value is raised instead of returned.
    """

    def __init__(self, searches=None, details=None, hold=False):
        self.searches = searches or {}
        self.details = details or {}
        self.hold = hold
        self.search_calls: list[tuple[str, asyncio.Future]] = []
        self.detail_calls: list[tuple[object, asyncio.Future]] = []

    async def lookup_search(self, query):
        if self.hold:
            fut = asyncio.get_running_loop().create_future()
            self.search_calls.append((query, fut))
            return await fut
        self.search_calls.append((query, None))
        return self._answer(self.searches.get(query, []))

    async def lookup_detail(self, catalog_id):
        if self.hold:
            fut = asyncio.get_running_loop().create_future()
            self.detail_calls.append((catalog_id, fut))
            return await fut
        self.detail_calls.append((catalog_id, None))
        return self._answer(self.details.get(catalog_id, LookupError(catalog_id)))

    @property
    def queries(self) -> list[str]:
        return [q for q, _ in self.search_calls]

    @staticmethod
    def _answer(value):
        if isinstance(value, Exception):
            raise value
        return value


class FakeStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.created = []
        self.updated = []
        self.gate: asyncio.Event | None = None

    def _entry(self, entry_id, payload):
        return Entry(
            id=entry_id,
            title=payload.title,
            release_date=payload.release_date,
            platforms=frozenset(Platform(p) for p in payload.platforms),
            status=GameStatus.UPCOMING,
            tba=payload.tba,
            catalog_id=payload.catalog_id,
        )

    async def create_game(self, payload):
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("backend unavailable")
        self.created.append(payload)
        return self._entry("new-1", payload)

    async def update_game(self, entry_id, payload):
        if self.fail:
            raise RuntimeError("backend unavailable")
        self.updated.append((entry_id, payload))
        return self._entry(entry_id, payload)


async def settle(rounds: int = 5) -> None:
    """Let woken tasks run to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


ELDEN = SearchResult(
    catalog_id=119133,
    title="Elden Ring",
    release_date=date(2022, 2, 25),
    image_url="https://images.example/elden-search.jpg",
    platforms=frozenset({Platform.PC, Platform.PS5}),
)

NIGHTREIGN = SearchResult(
    catalog_id=325591,
    title="Elden Ring Nightreign",
    release_date=None,
    image_url="https://images.example/nightreign-search.jpg",
    platforms=frozenset({Platform.PC}),
)

NIGHTREIGN_DETAIL = DetailResult(
    title="ELDEN RING NIGHTREIGN",
    release_date=None,
    image_url="https://images.example/nightreign.jpg",
    platforms=frozenset({Platform.PC, Platform.PS5, Platform.XBOX}),
    description="A standalone co-op adventure.",
    developer="FromSoftware",
    publisher=None,
)

ELDEN_DETAIL = DetailResult(
    title="Elden Ring",
    release_date=date(2022, 2, 25),
    image_url="https://images.example/elden.jpg",
    platforms=frozenset({Platform.PC, Platform.PS5, Platform.XBOX}),
    description="Rise, Tarnished.",
    developer="FromSoftware",
    publisher="Bandai Namco",
)


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog(
        searches={"Elden": [ELDEN, NIGHTREIGN]},
        details={ELDEN.catalog_id: ELDEN_DETAIL, NIGHTREIGN.catalog_id: NIGHTREIGN_DETAIL},
    )


@pytest.fixture
def held_catalog() -> FakeCatalog:
    return FakeCatalog(hold=True)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
