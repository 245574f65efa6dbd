"""Status bar component."""

from textual.widgets import Static
from textual.reactive import reactive

from gametrack_cli.assist import FailedFallback, Fetching, PrefillState, Succeeded


def prefill_badge(state: PrefillState) -> str:
    """Badge text for a prefill state (empty when nothing to show)."""
    if isinstance(state, Fetching):
        return "[yellow]⟳ Fetching details...[/]"
    if isinstance(state, Succeeded):
        return "[green]✓ Prefilled from catalog[/]"
    if isinstance(state, FailedFallback):
        return "[green]✓ Prefilled[/] [dim](partial)[/]"
    return ""


class StatusBar(Static):
    """Status bar showing server connection, search and prefill state."""

    is_online: reactive[bool] = reactive(False)
    is_searching: reactive[bool] = reactive(False)
    prefill: reactive[str] = reactive("")
    message: reactive[str] = reactive("")

    def render(self) -> str:
        parts = []

        # Connection status
        if self.is_online:
            parts.append("[green]● Online[/]")
        else:
            parts.append("[red]● Offline[/]")

        if self.is_searching:
            parts.append("[yellow]⟳ Searching...[/]")

        if self.prefill:
            parts.append(self.prefill)

        # Custom message
        if self.message:
            parts.append(f"[cyan]{self.message}[/]")

        return " │ ".join(parts)

    def set_message(self, message: str, duration: float = 3.0) -> None:
        """Show a temporary message."""
        self.message = message
        if duration > 0:
            self.set_timer(duration, lambda: self._clear_message())

    def _clear_message(self) -> None:
        self.message = ""
