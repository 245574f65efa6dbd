"""GameTrack CLI - Entry form Textual application."""

import asyncio
from pathlib import Path
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Checkbox, Footer, Header, Input, Label, Static

from gametrack_cli.api import ApiClient, Entry, Platform
from gametrack_cli.assist import AssistedEntry, Pending, PrefillState, SessionState, Settled, TbaRelease
from gametrack_cli.components import CandidateList, StatusBar, TitleInput, prefill_badge
from gametrack_cli.config import Settings, get_settings
from gametrack_cli.logging_setup import configure_logging

TEXT_FIELDS = ("description", "developer", "publisher", "shop_url", "image_url")
ERROR_FIELDS = ("title", "release_date", "platforms")
SEARCH_AREA = ("title", "candidates")


class EntryApp(App[Optional[Entry]]):
    """Add or edit a single catalog entry with catalog-assisted prefill."""

    TITLE = "GameTrack"
    CSS_PATH = Path(__file__).parent / "styles" / "app.tcss"

    BINDINGS = [
        Binding("ctrl+s", "submit", "Save"),
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(
        self,
        api: ApiClient,
        entry: Optional[Entry] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__()
        self.api = api
        settings = settings or get_settings()
        self.assist = AssistedEntry(
            catalog=api,
            store=api,
            entry=entry,
            debounce_seconds=settings.debounce_seconds,
            min_query_length=settings.min_query_length,
            on_results=self._on_results,
            on_prefill=self._on_prefill,
            on_draft=self._on_draft,
        )

    def compose(self) -> ComposeResult:
        draft = self.assist.draft
        yield Header()

        with VerticalScroll(id="form"):
            # Title with catalog dropdown
            yield Label("Title *")
            yield TitleInput(value=draft.title, id="title")
            yield CandidateList(id="candidates")
            yield Static("", id="title-error", classes="error")

            yield Label("Description")
            yield Input(value=draft.description, placeholder="Short description", id="description")

            # Release: exact date or TBA year
            yield Label("Release *")
            with Horizontal(id="release-row"):
                yield Input(
                    value=self._release_text(),
                    placeholder=self._release_placeholder(),
                    id="release",
                )
                yield Checkbox("TBA", value=draft.tba, id="tba")
            yield Static("", id="release_date-error", classes="error")

            yield Label("Platforms *")
            with Horizontal(id="platform-row"):
                for platform in Platform:
                    yield Checkbox(
                        platform.label,
                        value=platform in draft.platforms,
                        id=f"platform-{platform.value}",
                    )
            yield Static("", id="platforms-error", classes="error")

            with Horizontal(id="studio-row"):
                yield Input(value=draft.developer, placeholder="Developer", id="developer")
                yield Input(value=draft.publisher, placeholder="Publisher", id="publisher")

            yield Input(value=draft.shop_url, placeholder="Shop URL (https://...)", id="shop_url")
            yield Input(value=draft.image_url, placeholder="Image URL (https://...)", id="image_url")

            yield Static("", id="form-error", classes="error")
            with Horizontal(id="buttons"):
                yield Button("Cancel", id="cancel")
                yield Button(
                    "Save changes" if self.assist.is_edit else "Add game",
                    id="submit",
                    variant="primary",
                )

        yield StatusBar(id="status-bar")
        yield Footer()

    async def on_mount(self) -> None:
        """Initialize on mount."""
        entry = self.assist.entry
        self.sub_title = f"Edit game ({entry.status.value.lower()})" if entry else "Add game"
        self.query_one("#title", TitleInput).focus()

        status_bar = self.query_one("#status-bar", StatusBar)
        status_bar.is_online = await self.api.health_check()

    def on_unmount(self) -> None:
        self.assist.close()

    # ------------------------------------------------------------------
    # Widget events -> coordinator
    # ------------------------------------------------------------------

    def on_input_changed(self, event: Input.Changed) -> None:
        """Forward field edits to the coordinator."""
        input_id = event.input.id
        if input_id == "title":
            self.assist.on_title_changed(event.value)
        elif input_id == "release":
            self.assist.set_release_text(event.value)
        elif input_id in TEXT_FIELDS:
            self.assist.update_field(**{input_id: event.value})

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        checkbox_id = event.checkbox.id or ""
        if checkbox_id == "tba":
            self.assist.set_tba(event.value)
        elif checkbox_id.startswith("platform-"):
            platform = Platform(checkbox_id.removeprefix("platform-"))
            if (platform in self.assist.draft.platforms) != event.value:
                self.assist.toggle_platform(platform)

    def on_candidate_list_result_selected(self, event: CandidateList.ResultSelected) -> None:
        self.assist.select(event.result)
        self.query_one("#title", TitleInput).focus()

    def on_descendant_blur(self, event) -> None:
        """Close the dropdown once focus leaves the search area."""
        self.call_after_refresh(self._dismiss_if_focus_left)

    def _dismiss_if_focus_left(self) -> None:
        focused = self.focused
        if focused is None or focused.id not in SEARCH_AREA:
            self.assist.dismiss_results()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "submit":
            self.action_submit()
        elif event.button.id == "cancel":
            self._close_form()

    # ------------------------------------------------------------------
    # Coordinator listeners -> widgets
    # ------------------------------------------------------------------

    def _on_results(self, state: SessionState) -> None:
        if self.assist.closed:
            return
        candidates = self.query_one("#candidates", CandidateList)
        candidates.results = list(state.results) if isinstance(state, Settled) else []

        status_bar = self.query_one("#status-bar", StatusBar)
        status_bar.is_searching = isinstance(state, Pending)

    def _on_prefill(self, state: PrefillState) -> None:
        if self.assist.closed:
            return
        self.query_one("#status-bar", StatusBar).prefill = prefill_badge(state)

    def _on_draft(self, changed: frozenset[str]) -> None:
        """Push draft values written by the coordinator back into the widgets."""
        draft = self.assist.draft
        for name in changed:
            if name == "title":
                self._set_input("title", draft.title)
            elif name in TEXT_FIELDS:
                self._set_input(name, getattr(draft, name))
            elif name == "release":
                release_input = self.query_one("#release", Input)
                release_input.placeholder = self._release_placeholder()
                self._set_input("release", self._release_text())
                self.query_one("#tba", Checkbox).value = draft.tba
            elif name == "platforms":
                for platform in Platform:
                    checkbox = self.query_one(f"#platform-{platform.value}", Checkbox)
                    checkbox.value = platform in draft.platforms

    def _set_input(self, input_id: str, value: str) -> None:
        widget = self.query_one(f"#{input_id}", Input)
        if widget.value != value:
            widget.value = value

    def _release_text(self) -> str:
        release = self.assist.draft.release
        return release.year if isinstance(release, TbaRelease) else release.date

    def _release_placeholder(self) -> str:
        return "Year (2000-2099)" if self.assist.draft.tba else "Release date (YYYY-MM-DD)"

    def _render_errors(self) -> None:
        for name in ERROR_FIELDS:
            self.query_one(f"#{name}-error", Static).update(self.assist.errors.get(name, ""))
        self.query_one("#form-error", Static).update(self.assist.form_error or "")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_submit(self) -> None:
        """Submit the draft in the background."""
        if not self.assist.submitting:
            self.run_worker(self._submit(), exclusive=True)

    async def _submit(self) -> None:
        submit_button = self.query_one("#submit", Button)
        submit_button.disabled = True
        try:
            saved = await self.assist.submit()
        finally:
            submit_button.disabled = False

        self._render_errors()
        if saved is not None:
            self.exit(saved)
        elif self.assist.form_error:
            self.query_one("#status-bar", StatusBar).set_message("Save failed")

    def action_cancel(self) -> None:
        """Close the dropdown, or the form when the dropdown is already closed."""
        if self.query_one("#candidates", CandidateList).display:
            self.assist.dismiss_results()
        else:
            self._close_form()

    def _close_form(self) -> None:
        self.assist.close()
        self.exit(None)


async def run_entry_form(entry_id: Optional[str] = None) -> Optional[Entry]:
    """Open the entry form; returns the saved entry or None when cancelled."""
    settings = get_settings()
    configure_logging(settings, to_file=True)

    async with ApiClient(settings.api_base_url, timeout=settings.request_timeout) as api:
        entry = await api.get_game(entry_id) if entry_id else None
        app = EntryApp(api, entry=entry, settings=settings)
        return await app.run_async()


def run_app(entry_id: Optional[str] = None) -> Optional[Entry]:
    """Run the GameTrack entry form."""
    return asyncio.run(run_entry_form(entry_id))


if __name__ == "__main__":
    run_app()
