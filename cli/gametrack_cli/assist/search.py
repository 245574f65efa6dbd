"""Search session: one outstanding catalog search at a time, newest wins."""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Union

import structlog

from gametrack_cli.api import CatalogId, DetailResult, SearchResult
from gametrack_cli.assist.tasks import BackgroundTasks

logger = structlog.get_logger(__name__)


class Catalog(Protocol):
    """The two read operations consumed from the game catalog."""

    async def lookup_search(self, query: str) -> list[SearchResult]: ...

    async def lookup_detail(self, catalog_id: CatalogId) -> DetailResult: ...


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Pending:
    query: str
    token: int


@dataclass(frozen=True)
class Settled:
    query: str
    token: int
    results: tuple[SearchResult, ...]


SessionState = Union[Idle, Pending, Settled]


class SearchSession:
    """
    Owns the lifecycle of the catalog search behind the title field.

    Each call to :meth:`search` mints a new request token. A response is
    applied only if its token is still the live one, so responses that
    arrive after a newer search, a dismissal or a reset are dropped no
    matter in which order the network delivers them.
    """

    def __init__(
        self,
        catalog: Catalog,
        on_change: Optional[Callable[[SessionState], None]] = None,
    ) -> None:
        self._catalog = catalog
        self._on_change = on_change
        self._token = 0
        self._state: SessionState = Idle()
        self._tasks = BackgroundTasks()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def token(self) -> int:
        return self._token

    @property
    def results(self) -> tuple[SearchResult, ...]:
        """Currently visible results (empty unless settled)."""
        if isinstance(self._state, Settled):
            return self._state.results
        return ()

    def search(self, query: str) -> SessionState:
        """Issue a catalog search for *query* and return the pending state."""
        self._token += 1
        token = self._token
        self._set_state(Pending(query, token))
        logger.info("Catalog search issued", query=query, token=token)
        self._tasks.spawn(self._run(query, token))
        return self._state

    def dismiss(self) -> None:
        """Close the dropdown and invalidate any outstanding response."""
        self._token += 1
        if not isinstance(self._state, Idle):
            self._set_state(Idle())

    def close(self) -> None:
        """Dismiss and stop waiting for outstanding searches."""
        self.dismiss()
        self._tasks.cancel_all()

    async def drain(self) -> None:
        await self._tasks.drain()

    async def _run(self, query: str, token: int) -> None:
        try:
            results = await self._catalog.lookup_search(query)
        except Exception as e:
            if token != self._token:
                return
            # Searches are a best-effort assist; failures stay silent
            logger.warning("Catalog search failed", query=query, token=token, error=str(e))
            self._set_state(Idle())
            return

        if token != self._token:
            logger.debug("Discarding stale search response", query=query, token=token, live=self._token)
            return

        self._set_state(Settled(query, token, tuple(results)))
        logger.info("Catalog search settled", query=query, token=token, count=len(results))

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        if self._on_change:
            self._on_change(state)
