"""CLI components."""

from .title_input import TitleInput
from .results_list import CandidateList, CandidateItem, format_platforms
from .status_bar import StatusBar, prefill_badge

__all__ = [
    "TitleInput",
    "CandidateList",
    "CandidateItem",
    "format_platforms",
    "StatusBar",
    "prefill_badge",
]
