"""Draft state of the entry form: field values, validation and normalization."""

from dataclasses import dataclass, field, fields
from datetime import date
from typing import Callable, Optional, Union

from gametrack_cli.api import CatalogId, Entry, Platform
from gametrack_cli.schemas import GamePayload

TBA_YEAR_MIN = 2000
TBA_YEAR_MAX = 2099


@dataclass(frozen=True)
class ExactRelease:
    """Release known to the day; ``date`` is the raw ISO text of the input."""
    date: str = ""


@dataclass(frozen=True)
class TbaRelease:
    """Release to be announced; only a year is tracked."""
    year: str = ""


Release = Union[ExactRelease, TbaRelease]

DraftListener = Callable[[frozenset[str]], None]


@dataclass
class Draft:
    """In-progress, unsaved values of one entry form."""

    title: str = ""
    description: str = ""
    release: Release = field(default_factory=ExactRelease)
    platforms: frozenset[Platform] = frozenset()
    shop_url: str = ""
    image_url: str = ""
    developer: str = ""
    publisher: str = ""
    catalog_id: Optional[CatalogId] = None
    _listeners: list[DraftListener] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def from_entry(cls, entry: Entry) -> "Draft":
        """Start a draft from an existing entry (edit mode)."""
        if entry.tba:
            year = str(entry.release_date.year) if entry.release_date else ""
            release: Release = TbaRelease(year)
        else:
            release = ExactRelease(entry.release_date.isoformat() if entry.release_date else "")
        return cls(
            title=entry.title,
            description=entry.description or "",
            release=release,
            platforms=entry.platforms,
            shop_url=entry.shop_url or "",
            image_url=entry.image_url or "",
            developer=entry.developer or "",
            publisher=entry.publisher or "",
            catalog_id=entry.catalog_id,
        )

    @property
    def tba(self) -> bool:
        return isinstance(self.release, TbaRelease)

    def subscribe(self, listener: DraftListener) -> None:
        self._listeners.append(listener)

    def apply(self, **values) -> frozenset[str]:
        """Set fields and notify listeners of the ones that actually changed."""
        changed = set()
        for name, value in values.items():
            if name.startswith("_") or name not in _FIELD_NAMES:
                raise AttributeError(f"Unknown draft field: {name}")
            if getattr(self, name) != value:
                setattr(self, name, value)
                changed.add(name)

        result = frozenset(changed)
        if result:
            for listener in self._listeners:
                listener(result)
        return result

    def with_tba(self, flag: bool) -> Release:
        """Release value after switching between exact date and TBA year."""
        if flag and not self.tba:
            return TbaRelease()
        if not flag and self.tba:
            return ExactRelease()
        return self.release


_FIELD_NAMES = frozenset(f.name for f in fields(Draft) if not f.name.startswith("_"))


# =============================================================================
# Validation
# =============================================================================


def _parse_year(text: str) -> Optional[int]:
    text = text.strip()
    if not text.isdecimal():
        return None
    year = int(text)
    if TBA_YEAR_MIN <= year <= TBA_YEAR_MAX:
        return year
    return None


def _parse_iso_date(text: str) -> Optional[date]:
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        return None


def validate(draft: Draft) -> dict[str, str]:
    """Return per-field error messages; an empty dict means the draft is valid."""
    errors: dict[str, str] = {}

    if not draft.title.strip():
        errors["title"] = "Title is required"

    release = draft.release
    if isinstance(release, TbaRelease):
        if _parse_year(release.year) is None:
            errors["release_date"] = (
                f"Release year must be between {TBA_YEAR_MIN} and {TBA_YEAR_MAX}"
            )
    elif not release.date.strip():
        errors["release_date"] = "Release date is required"
    elif _parse_iso_date(release.date) is None:
        errors["release_date"] = "Release date must be a valid date (YYYY-MM-DD)"

    if not draft.platforms:
        errors["platforms"] = "Select at least one platform"

    return errors


def _optional(text: str) -> Optional[str]:
    text = text.strip()
    return text or None


def normalize(draft: Draft) -> GamePayload:
    """
    Build the payload handed to the persistence collaborator.

    TBA entries get a sentinel release date of December 31 of their year.
    Raises ValueError if the draft does not validate.
    """
    errors = validate(draft)
    if errors:
        raise ValueError(f"Draft is not valid: {errors}")

    release = draft.release
    if isinstance(release, TbaRelease):
        release_date = date(_parse_year(release.year), 12, 31)
    else:
        release_date = _parse_iso_date(release.date)

    return GamePayload(
        title=draft.title.strip(),
        description=_optional(draft.description),
        release_date=release_date,
        platforms=[p.value for p in Platform if p in draft.platforms],
        shop_url=_optional(draft.shop_url),
        image_url=_optional(draft.image_url),
        developer=_optional(draft.developer),
        publisher=_optional(draft.publisher),
        catalog_id=draft.catalog_id,
        tba=draft.tba,
    )
