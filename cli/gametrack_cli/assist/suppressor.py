"""Tells user title edits apart from the coordinator's own title writes."""

from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class TitleWriteOrigin(str, Enum):
    """Who performed the most recent, not yet echoed, title write."""

    USER = "user"
    PROGRAMMATIC = "programmatic"


class QuerySuppressor:
    """
    Single-writer register shared by the prefill merger and the title
    change handler.

    The merger marks the register right before it overwrites the title.
    The change handler consumes it on the next change notification, which
    is the echo of that write, and must not start a search.
    """

    def __init__(self) -> None:
        self._origin = TitleWriteOrigin.USER

    @property
    def origin(self) -> TitleWriteOrigin:
        return self._origin

    def mark_programmatic(self) -> None:
        """Record that the next title change is caused by the coordinator."""
        self._origin = TitleWriteOrigin.PROGRAMMATIC

    def consume_suppression(self) -> bool:
        """Return True (once) if the current change should be ignored."""
        if self._origin is TitleWriteOrigin.PROGRAMMATIC:
            self._origin = TitleWriteOrigin.USER
            logger.debug("Suppressed title change echo")
            return True
        return False

    def reset(self) -> None:
        self._origin = TitleWriteOrigin.USER
