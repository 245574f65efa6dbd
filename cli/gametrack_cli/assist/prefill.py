"""Prefill merger: fetch a selected candidate's detail record and merge it into the draft."""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import structlog

from gametrack_cli.api import CatalogId, DetailResult, SearchResult
from gametrack_cli.assist.draft import Draft, ExactRelease
from gametrack_cli.assist.search import Catalog
from gametrack_cli.assist.suppressor import QuerySuppressor
from gametrack_cli.assist.tasks import BackgroundTasks

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NotStarted:
    pass


@dataclass(frozen=True)
class Fetching:
    catalog_id: CatalogId


@dataclass(frozen=True)
class Succeeded:
    catalog_id: CatalogId


@dataclass(frozen=True)
class FailedFallback:
    catalog_id: CatalogId


PrefillState = Union[NotStarted, Fetching, Succeeded, FailedFallback]


class PrefillMerger:
    """
    Resolves a selected search result into draft field values.

    The merge is additive: a field is written only when the detail record
    (or, on fallback, the search result) carries a value for it. Only the
    most recent :meth:`resolve` may touch the draft; earlier detail fetches
    that complete afterwards are discarded.
    """

    def __init__(
        self,
        catalog: Catalog,
        draft: Draft,
        suppressor: QuerySuppressor,
        close_results: Callable[[], None],
        on_change: Optional[Callable[[PrefillState], None]] = None,
    ) -> None:
        self._catalog = catalog
        self._draft = draft
        self._suppressor = suppressor
        self._close_results = close_results
        self._on_change = on_change
        self._token = 0
        self._state: PrefillState = NotStarted()
        self._tasks = BackgroundTasks()

    @property
    def state(self) -> PrefillState:
        return self._state

    @property
    def is_prefilled(self) -> bool:
        return isinstance(self._state, (Succeeded, FailedFallback))

    def resolve(self, selected: SearchResult) -> None:
        """Start prefilling the draft from *selected*."""
        self._close_results()
        self._token += 1
        token = self._token
        self._set_state(Fetching(selected.catalog_id))
        self._draft.apply(catalog_id=selected.catalog_id)

        logger.info("Prefill started", catalog_id=selected.catalog_id, token=token)
        self._tasks.spawn(self._run(selected, token))

    def cancel(self) -> None:
        """Drop any outstanding detail fetch."""
        self._token += 1
        if isinstance(self._state, Fetching):
            self._set_state(NotStarted())

    def clear_indicator(self) -> None:
        """Forget a finished prefill (the title no longer matches the record)."""
        if self.is_prefilled:
            self._set_state(NotStarted())

    def close(self) -> None:
        self.cancel()
        self._tasks.cancel_all()

    async def drain(self) -> None:
        await self._tasks.drain()

    async def _run(self, selected: SearchResult, token: int) -> None:
        try:
            detail = await self._catalog.lookup_detail(selected.catalog_id)
        except Exception as e:
            if token != self._token:
                return
            logger.warning(
                "Detail fetch failed, using search result",
                catalog_id=selected.catalog_id,
                error=str(e),
            )
            self._write(self._fallback_values(selected))
            self._set_state(FailedFallback(selected.catalog_id))
            return

        if token != self._token:
            logger.debug("Discarding stale detail response", catalog_id=selected.catalog_id, token=token)
            return

        self._write(self._detail_values(selected, detail))
        self._set_state(Succeeded(selected.catalog_id))
        logger.info("Prefill succeeded", catalog_id=selected.catalog_id)

    def _detail_values(self, selected: SearchResult, detail: DetailResult) -> dict[str, Any]:
        values = self._base_values(detail.title or selected.title, detail.release_date)
        if detail.platforms:
            values["platforms"] = detail.platforms
        if detail.image_url:
            values["image_url"] = detail.image_url
        if detail.description:
            values["description"] = detail.description
        if detail.developer:
            values["developer"] = detail.developer
        if detail.publisher:
            values["publisher"] = detail.publisher
        return values

    def _fallback_values(self, selected: SearchResult) -> dict[str, Any]:
        values = self._base_values(selected.title, selected.release_date)
        if selected.platforms:
            values["platforms"] = selected.platforms
        if selected.image_url:
            values["image_url"] = selected.image_url
        return values

    def _base_values(self, title, release_date) -> dict[str, Any]:
        values: dict[str, Any] = {}
        if title:
            values["title"] = title
        if release_date is not None:
            values["release"] = ExactRelease(release_date.isoformat())
        else:
            # Unknown date: switch to TBA and leave the year to the user
            values["release"] = self._draft.with_tba(True)
        return values

    def _write(self, values: dict[str, Any]) -> None:
        title = values.get("title")
        if title is not None and title != self._draft.title:
            self._suppressor.mark_programmatic()
        self._draft.apply(**values)

    def _set_state(self, state: PrefillState) -> None:
        self._state = state
        if self._on_change:
            self._on_change(state)
