"""Title input component."""

from textual.widgets import Input


class TitleInput(Input):
    """
    Title field of the entry form.

    Change events are forwarded to the coordinator by the app, which owns
    debouncing and search; this widget only carries the search hint.
    """

    def __init__(
        self,
        value: str = "",
        placeholder: str = "Type a title to search the catalog (min 2 chars)...",
        id: str | None = None,
    ) -> None:
        super().__init__(value=value, placeholder=placeholder, id=id)
