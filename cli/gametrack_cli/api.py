"""API client for the release tracker backend and its game catalog lookup."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional, Union

import httpx
import structlog

from gametrack_cli.schemas import GamePayload

logger = structlog.get_logger(__name__)

CatalogId = Union[int, str]


class Platform(str, Enum):
    """Platforms an entry can be released on."""

    PC = "PC"
    PS5 = "PS5"
    XBOX = "XBOX"
    SWITCH = "SWITCH"

    @property
    def label(self) -> str:
        return PLATFORM_LABELS[self]


PLATFORM_LABELS = {
    Platform.PC: "PC",
    Platform.PS5: "PS5",
    Platform.XBOX: "Xbox",
    Platform.SWITCH: "Switch",
}


class GameStatus(str, Enum):
    """Lifecycle of a tracked entry. Only UPCOMING entries can move on."""

    UPCOMING = "UPCOMING"
    RELEASED = "RELEASED"
    CANCELLED = "CANCELLED"

    def can_transition_to(self, other: "GameStatus") -> bool:
        return other in STATUS_TRANSITIONS[self]


STATUS_TRANSITIONS = {
    GameStatus.UPCOMING: frozenset({GameStatus.RELEASED, GameStatus.CANCELLED}),
    GameStatus.RELEASED: frozenset(),
    GameStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class SearchResult:
    """A single catalog match for a title query."""
    catalog_id: CatalogId
    title: str
    release_date: Optional[date] = None
    image_url: Optional[str] = None
    platforms: frozenset[Platform] = field(default_factory=frozenset)


@dataclass(frozen=True)
class DetailResult:
    """Full catalog record for one catalog id."""
    title: Optional[str] = None
    release_date: Optional[date] = None
    image_url: Optional[str] = None
    platforms: frozenset[Platform] = field(default_factory=frozenset)
    description: Optional[str] = None
    developer: Optional[str] = None
    publisher: Optional[str] = None


@dataclass(frozen=True)
class Entry:
    """A persisted catalog entry."""
    id: str
    title: str
    release_date: Optional[date]
    platforms: frozenset[Platform]
    status: GameStatus
    tba: bool = False
    description: Optional[str] = None
    shop_url: Optional[str] = None
    image_url: Optional[str] = None
    developer: Optional[str] = None
    publisher: Optional[str] = None
    catalog_id: Optional[CatalogId] = None


@dataclass(frozen=True)
class EntryPage:
    """One page of a filtered entry listing."""
    entries: list[Entry]
    total: int
    page: int
    pages: int


def _parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.debug("Ignoring unparseable date", value=value)
        return None


def _parse_platforms(values: Any) -> frozenset[Platform]:
    platforms = set()
    for value in values or []:
        try:
            platforms.add(Platform(str(value).upper()))
        except ValueError:
            logger.debug("Skipping unknown platform tag", platform=value)
    return frozenset(platforms)


def _parse_entry(data: dict) -> Entry:
    return Entry(
        id=str(data["id"]),
        title=data.get("title", ""),
        release_date=_parse_date(data.get("releaseDate")),
        platforms=_parse_platforms(data.get("platforms")),
        status=GameStatus(data.get("status", GameStatus.UPCOMING.value)),
        tba=bool(data.get("tba", False)),
        description=data.get("description"),
        shop_url=data.get("shopUrl"),
        image_url=data.get("imageUrl"),
        developer=data.get("developer"),
        publisher=data.get("publisher"),
        catalog_id=data.get("igdbId"),
    )


class ApiClient:
    """Async API client for the release tracker backend."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080/api",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self.open()
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    def open(self) -> None:
        """Create the underlying HTTP client if it is not open yet."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("ApiClient must be opened before use")
        return self._client

    async def health_check(self) -> bool:
        """Check if the backend is reachable."""
        try:
            response = await self.client.get("/games", params={"size": 1}, timeout=2.0)
            return response.status_code < 500
        except httpx.HTTPError:
            return False

    # ------------------------------------------------------------------
    # Catalog lookup
    # ------------------------------------------------------------------

    async def lookup_search(self, query: str) -> list[SearchResult]:
        """Fuzzy title search against the game catalog."""
        response = await self.client.get("/games/lookup", params={"q": query})
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, list):
            raise ValueError("Catalog search returned a non-list payload")

        return [
            SearchResult(
                catalog_id=r["igdbId"],
                title=r.get("title", ""),
                release_date=_parse_date(r.get("releaseDate")),
                image_url=r.get("imageUrl"),
                platforms=_parse_platforms(r.get("platforms")),
            )
            for r in data
        ]

    async def lookup_detail(self, catalog_id: CatalogId) -> DetailResult:
        """Fetch the full catalog record for one catalog id."""
        response = await self.client.get(f"/games/lookup/{catalog_id}")
        response.raise_for_status()
        data = response.json()

        return DetailResult(
            title=data.get("title") or None,
            release_date=_parse_date(data.get("releaseDate")),
            image_url=data.get("imageUrl") or None,
            platforms=_parse_platforms(data.get("platforms")),
            description=data.get("description") or None,
            developer=data.get("developer") or None,
            publisher=data.get("publisher") or None,
        )

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    async def get_game(self, entry_id: str) -> Entry:
        response = await self.client.get(f"/games/{entry_id}")
        response.raise_for_status()
        return _parse_entry(response.json())

    async def create_game(self, payload: GamePayload) -> Entry:
        """Create a new entry from a normalized payload."""
        response = await self.client.post("/games", json=payload.to_wire())
        response.raise_for_status()
        return _parse_entry(response.json())

    async def update_game(self, entry_id: str, payload: GamePayload) -> Entry:
        """Replace an existing entry with a normalized payload."""
        response = await self.client.put(f"/games/{entry_id}", json=payload.to_wire())
        response.raise_for_status()
        return _parse_entry(response.json())

    async def list_games(
        self,
        status: Optional[GameStatus] = None,
        platform: Optional[Platform] = None,
        page: int = 0,
        size: int = 50,
    ) -> EntryPage:
        """List entries by release date, optionally filtered by status and platform."""
        params: dict[str, Any] = {"page": page, "size": size, "sort": "releaseDate,asc"}
        if status is not None:
            params["status"] = status.value
        if platform is not None:
            params["platform"] = platform.value

        response = await self.client.get("/games", params=params)
        response.raise_for_status()
        data = response.json()

        return EntryPage(
            entries=[_parse_entry(e) for e in data.get("content", [])],
            total=data.get("totalElements", 0),
            page=data.get("number", page),
            pages=data.get("totalPages", 0),
        )

    async def update_status(self, entry_id: str, status: GameStatus) -> Entry:
        """Move an entry along its lifecycle; the backend rejects illegal moves with 422."""
        response = await self.client.patch(
            f"/games/{entry_id}/status",
            json={"status": status.value},
        )
        response.raise_for_status()
        return _parse_entry(response.json())

    async def delete_game(self, entry_id: str) -> None:
        response = await self.client.delete(f"/games/{entry_id}")
        response.raise_for_status()

    async def subscribe(self, entry_id: str, email: str) -> None:
        """Subscribe an email address to release notifications for an entry."""
        response = await self.client.post(f"/games/{entry_id}/subscribe", json={"email": email})
        response.raise_for_status()
