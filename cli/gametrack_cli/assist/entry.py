"""Assisted entry coordinator for one open instance of the entry form."""

from typing import Callable, Optional, Protocol

import structlog

from gametrack_cli.api import Entry, Platform, SearchResult
from gametrack_cli.assist.debounce import DebounceGate
from gametrack_cli.assist.draft import Draft, DraftListener, ExactRelease, TbaRelease, normalize, validate
from gametrack_cli.assist.prefill import PrefillMerger, PrefillState
from gametrack_cli.assist.search import Catalog, SearchSession, SessionState
from gametrack_cli.assist.suppressor import QuerySuppressor, TitleWriteOrigin
from gametrack_cli.schemas import GamePayload

logger = structlog.get_logger(__name__)

SUBMIT_ERROR = "Could not save the game. Please try again."


class EntryStore(Protocol):
    """Persistence operations used on submission."""

    async def create_game(self, payload: GamePayload) -> Entry: ...

    async def update_game(self, entry_id: str, payload: GamePayload) -> Entry: ...


class AssistedEntry:
    """
    Wires the draft, debounce gate, query suppressor, search session and
    prefill merger of a single form instance together.

    The UI forwards every title change to :meth:`on_title_changed`, picks
    candidates with :meth:`select` and submits with :meth:`submit`. The
    ``on_results``, ``on_prefill`` and ``on_draft`` listeners tell it what
    to re-render.
    """

    def __init__(
        self,
        catalog: Catalog,
        store: EntryStore,
        entry: Optional[Entry] = None,
        debounce_seconds: Optional[float] = None,
        min_query_length: Optional[int] = None,
        on_results: Optional[Callable[[SessionState], None]] = None,
        on_prefill: Optional[Callable[[PrefillState], None]] = None,
        on_draft: Optional[DraftListener] = None,
    ) -> None:
        self.entry = entry
        self._store = store

        self.draft = Draft.from_entry(entry) if entry else Draft()
        if on_draft:
            self.draft.subscribe(on_draft)

        self.suppressor = QuerySuppressor()
        self.session = SearchSession(catalog, on_change=on_results)
        self.gate = DebounceGate(
            on_trigger=self._on_search_trigger,
            on_clear=self.session.dismiss,
            suppressor=self.suppressor,
            delay=debounce_seconds,
            min_length=min_query_length,
        )
        self.prefill = PrefillMerger(
            catalog,
            self.draft,
            self.suppressor,
            close_results=self.dismiss_results,
            on_change=on_prefill,
        )

        self.errors: dict[str, str] = {}
        self.form_error: Optional[str] = None
        self.submitting = False
        self.closed = False
        self.saved: Optional[Entry] = None

    @property
    def is_edit(self) -> bool:
        return self.entry is not None

    # ------------------------------------------------------------------
    # Title & search
    # ------------------------------------------------------------------

    def on_title_changed(self, text: str) -> None:
        """Handle a change notification from the title input."""
        if self.closed:
            return
        if text == self.draft.title and self.suppressor.origin is TitleWriteOrigin.USER:
            # No edit happened, e.g. the input announcing its initial value
            return
        if not self.gate.on_text_changed(text):
            return

        self.draft.apply(title=text)
        self.errors.pop("title", None)
        # The title no longer matches whatever record was picked
        self.prefill.cancel()
        self.prefill.clear_indicator()

    def select(self, result: SearchResult) -> None:
        """Prefill the draft from a candidate picked in the dropdown."""
        if self.closed:
            return
        self.prefill.resolve(result)

    def dismiss_results(self) -> None:
        """Close the dropdown (selection, Escape or focus leaving the search area)."""
        self.gate.reset()
        self.session.dismiss()

    def _on_search_trigger(self, text: str) -> None:
        self.session.search(text.strip())

    # ------------------------------------------------------------------
    # Other fields
    # ------------------------------------------------------------------

    def update_field(self, **values) -> None:
        """Store user edits of fields other than the title."""
        if "title" in values:
            raise ValueError("Title edits must go through on_title_changed")
        self.draft.apply(**values)
        for name in values:
            self.errors.pop(name, None)

    def set_tba(self, flag: bool) -> None:
        self.draft.apply(release=self.draft.with_tba(flag))
        self.errors.pop("release_date", None)

    def set_release_text(self, text: str) -> None:
        """Store the date text, or the year text while the release is TBA."""
        release = TbaRelease(text) if self.draft.tba else ExactRelease(text)
        self.draft.apply(release=release)
        self.errors.pop("release_date", None)

    def toggle_platform(self, platform: Platform) -> None:
        self.draft.apply(platforms=self.draft.platforms ^ {platform})
        self.errors.pop("platforms", None)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self) -> Optional[Entry]:
        """
        Validate and persist the draft.

        Returns the saved entry, or None when validation blocks the
        submission, a submission is already in flight, or the backend
        call fails (``form_error`` is set and the draft is kept).
        """
        if self.submitting or self.closed:
            return None

        self.errors = validate(self.draft)
        if self.errors:
            logger.info("Submission blocked by validation", fields=sorted(self.errors))
            return None

        payload = normalize(self.draft)
        self.submitting = True
        self.form_error = None
        try:
            if self.entry is not None:
                saved = await self._store.update_game(self.entry.id, payload)
            else:
                saved = await self._store.create_game(payload)
        except Exception as e:
            logger.error("Submission failed", error=str(e), edit=self.is_edit)
            self.form_error = SUBMIT_ERROR
            return None
        finally:
            self.submitting = False

        logger.info("Entry saved", entry_id=saved.id, edit=self.is_edit)
        self.saved = saved
        self.close()
        return saved

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Discard all search and prefill activity of this form instance."""
        self.closed = True
        self.gate.reset()
        self.session.close()
        self.prefill.close()
        self.suppressor.reset()

    async def drain(self) -> None:
        """Wait for outstanding searches and detail fetches to finish."""
        await self.session.drain()
        await self.prefill.drain()
