"""Assisted entry: catalog search and prefill for the entry form."""

from gametrack_cli.assist.debounce import DebounceGate
from gametrack_cli.assist.draft import (
    Draft,
    ExactRelease,
    TbaRelease,
    normalize,
    validate,
)
from gametrack_cli.assist.entry import SUBMIT_ERROR, AssistedEntry, EntryStore
from gametrack_cli.assist.prefill import (
    FailedFallback,
    Fetching,
    NotStarted,
    PrefillMerger,
    PrefillState,
    Succeeded,
)
from gametrack_cli.assist.search import (
    Catalog,
    Idle,
    Pending,
    SearchSession,
    SessionState,
    Settled,
)
from gametrack_cli.assist.suppressor import QuerySuppressor, TitleWriteOrigin

__all__ = [
    "AssistedEntry",
    "Catalog",
    "DebounceGate",
    "Draft",
    "EntryStore",
    "ExactRelease",
    "FailedFallback",
    "Fetching",
    "Idle",
    "NotStarted",
    "Pending",
    "PrefillMerger",
    "PrefillState",
    "QuerySuppressor",
    "SUBMIT_ERROR",
    "SearchSession",
    "SessionState",
    "Settled",
    "Succeeded",
    "TbaRelease",
    "TitleWriteOrigin",
    "normalize",
    "validate",
]
