"""Debounce gate for title keystrokes."""

import asyncio
from typing import Callable, Optional

import structlog

from gametrack_cli.assist.suppressor import QuerySuppressor

logger = structlog.get_logger(__name__)


class DebounceGate:
    """
    Turns a burst of title changes into a single trailing search trigger.

    Every accepted change restarts the quiet-period timer. When the timer
    elapses, ``on_trigger`` receives the last text seen. Text shorter than
    ``min_length`` (after trimming) cancels the timer and calls
    ``on_clear`` right away.
    """

    DEBOUNCE_SECONDS: float = 0.4
    MIN_LENGTH: int = 2

    def __init__(
        self,
        on_trigger: Callable[[str], None],
        on_clear: Callable[[], None],
        suppressor: Optional[QuerySuppressor] = None,
        delay: Optional[float] = None,
        min_length: Optional[int] = None,
    ) -> None:
        self._on_trigger = on_trigger
        self._on_clear = on_clear
        self._suppressor = suppressor
        self.delay = self.DEBOUNCE_SECONDS if delay is None else delay
        self.min_length = self.MIN_LENGTH if min_length is None else min_length
        self._timer: Optional[asyncio.TimerHandle] = None
        self._last_text = ""

    @property
    def is_pending(self) -> bool:
        return self._timer is not None

    def on_text_changed(self, text: str) -> bool:
        """
        Handle one title change.

        Returns False when the change was a suppressed programmatic echo,
        True otherwise.
        """
        if self._suppressor is not None and self._suppressor.consume_suppression():
            return False

        # Cancel existing timer
        self._cancel_timer()

        if len(text.strip()) < self.min_length:
            self._on_clear()
            return True

        self._last_text = text
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire)
        return True

    def reset(self) -> None:
        """Cancel any pending trigger without emitting."""
        self._cancel_timer()

    def _fire(self) -> None:
        self._timer = None
        logger.debug("Debounce elapsed", text=self._last_text)
        self._on_trigger(self._last_text)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
