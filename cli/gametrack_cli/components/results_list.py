"""Candidate list component."""

from textual.widgets import Static, ListItem, ListView
from textual.reactive import reactive
from textual.message import Message
from rich.text import Text

from gametrack_cli.api import Platform, SearchResult


def format_platforms(platforms) -> str:
    return ", ".join(p.label for p in Platform if p in platforms)


class CandidateItem(ListItem):
    """Single catalog match."""

    def __init__(self, result: SearchResult, index: int) -> None:
        super().__init__()
        self.result = result
        self.index = index

    def compose(self):
        title_text = Text()
        title_text.append(f"[{self.index}] ", style="dim")
        title_text.append(self.result.title, style="bold")
        if self.result.release_date:
            title_text.append(f"  {self.result.release_date.year}", style="cyan")
        else:
            title_text.append("  TBA", style="dim cyan")

        yield Static(title_text, classes="candidate-title")

        platforms = format_platforms(self.result.platforms)
        if platforms:
            yield Static(f"    {platforms}", classes="candidate-meta")


class CandidateList(ListView):
    """Dropdown of catalog matches for the typed title."""

    results: reactive[list[SearchResult]] = reactive([], always_update=True)

    class ResultSelected(Message):
        """Emitted when a candidate is picked."""

        def __init__(self, result: SearchResult) -> None:
            self.result = result
            super().__init__()

    def on_mount(self) -> None:
        """Hidden until there are results."""
        self.display = False

    def watch_results(self, results: list[SearchResult]) -> None:
        """Update list when results change."""
        self.clear()
        for i, result in enumerate(results, 1):
            self.append(CandidateItem(result, i))
        self.display = bool(results)

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        """Handle candidate selection."""
        if isinstance(event.item, CandidateItem):
            event.stop()
            self.post_message(self.ResultSelected(event.item.result))
