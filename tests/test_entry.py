"""End-to-end tests of the assisted entry coordinator."""

import asyncio
from datetime import date

import pytest

from conftest import ELDEN, NIGHTREIGN, NIGHTREIGN_DETAIL, FakeStore, settle
from gametrack_cli.api import Entry, GameStatus, Platform
from gametrack_cli.assist import (
    SUBMIT_ERROR,
    AssistedEntry,
    ExactRelease,
    Fetching,
    Idle,
    NotStarted,
    Settled,
    Succeeded,
    TbaRelease,
)

DELAY = 0.02


async def quiet() -> None:
    """Wait out the debounce window."""
    await asyncio.sleep(DELAY * 3)


def make_entry(catalog, store, **kwargs) -> AssistedEntry:
    return AssistedEntry(catalog, store, debounce_seconds=DELAY, **kwargs)


def type_title(entry: AssistedEntry, text: str) -> None:
    """Simulate keystrokes: one change notification per typed prefix."""
    for i in range(1, len(text) + 1):
        entry.on_title_changed(text[:i])


@pytest.mark.asyncio
async def test_select_and_prefill_scenario(catalog, store):
    prefill_states = []
    entry = make_entry(catalog, store, on_prefill=prefill_states.append)

    type_title(entry, "E")
    await quiet()
    assert catalog.queries == []

    type_title(entry, "Elden")
    await quiet()
    await entry.drain()

    assert catalog.queries == ["Elden"]
    assert isinstance(entry.session.state, Settled)
    assert entry.session.results == (ELDEN, NIGHTREIGN)

    entry.select(NIGHTREIGN)
    assert entry.session.state == Idle()
    assert entry.prefill.state == Fetching(NIGHTREIGN.catalog_id)
    await entry.drain()

    draft = entry.draft
    assert entry.prefill.state == Succeeded(NIGHTREIGN.catalog_id)
    assert draft.tba
    assert draft.title == NIGHTREIGN_DETAIL.title
    assert draft.platforms == NIGHTREIGN_DETAIL.platforms
    assert draft.image_url == NIGHTREIGN_DETAIL.image_url

    # The input echoes the programmatic write; no search follows
    entry.on_title_changed(draft.title)
    await quiet()
    assert catalog.queries == ["Elden"]
    assert entry.prefill.state == Succeeded(NIGHTREIGN.catalog_id)

    # A genuine edit clears the badge and searches again
    entry.on_title_changed(draft.title + " Deluxe")
    assert entry.prefill.state == NotStarted()
    await quiet()
    await entry.drain()
    assert catalog.queries == ["Elden", "ELDEN RING NIGHTREIGN Deluxe"]
    assert draft.catalog_id == NIGHTREIGN.catalog_id
    assert prefill_states == [
        Fetching(NIGHTREIGN.catalog_id),
        Succeeded(NIGHTREIGN.catalog_id),
        NotStarted(),
    ]


@pytest.mark.asyncio
async def test_short_title_closes_open_results(catalog, store):
    entry = make_entry(catalog, store)

    type_title(entry, "Elden")
    await quiet()
    await entry.drain()
    assert entry.session.results

    entry.on_title_changed("E")
    assert entry.session.state == Idle()
    entry.close()


@pytest.mark.asyncio
async def test_dismiss_cancels_pending_search_trigger(catalog, store):
    entry = make_entry(catalog, store)

    type_title(entry, "Elden")
    entry.dismiss_results()
    await quiet()

    assert catalog.queries == []


@pytest.mark.asyncio
async def test_user_edit_during_fetch_drops_late_detail(held_catalog, store):
    entry = make_entry(held_catalog, store)
    entry.on_title_changed("Elden")

    entry.select(ELDEN)
    await settle()
    entry.on_title_changed("Elden Ring: my notes")
    assert entry.prefill.state == NotStarted()

    held_catalog.detail_calls[0][1].set_result(NIGHTREIGN_DETAIL)
    await entry.prefill.drain()

    assert entry.draft.title == "Elden Ring: my notes"
    assert entry.draft.catalog_id == ELDEN.catalog_id
    entry.close()
    await settle()


@pytest.mark.asyncio
async def test_field_helpers_update_draft(catalog, store):
    entry = make_entry(catalog, store)

    entry.set_release_text("2031-05-01")
    assert entry.draft.release == ExactRelease("2031-05-01")

    entry.set_tba(True)
    entry.set_release_text("2031")
    assert entry.draft.release == TbaRelease("2031")

    entry.toggle_platform(Platform.PS5)
    entry.toggle_platform(Platform.PC)
    entry.toggle_platform(Platform.PS5)
    assert entry.draft.platforms == frozenset({Platform.PC})

    entry.update_field(developer="Team Cherry")
    assert entry.draft.developer == "Team Cherry"

    with pytest.raises(ValueError):
        entry.update_field(title="nope")


# =============================================================================
# Submission
# =============================================================================


def fill_valid(entry: AssistedEntry) -> None:
    entry.on_title_changed("Hollow Knight: Silksong")
    entry.set_tba(True)
    entry.set_release_text("2030")
    entry.toggle_platform(Platform.PC)


@pytest.mark.asyncio
async def test_validation_blocks_submission(catalog, store):
    entry = make_entry(catalog, store)

    result = await entry.submit()

    assert result is None
    assert set(entry.errors) == {"title", "release_date", "platforms"}
    assert store.created == []
    assert not entry.closed


@pytest.mark.asyncio
async def test_fixing_a_field_clears_its_error(catalog, store):
    entry = make_entry(catalog, store)
    await entry.submit()

    entry.toggle_platform(Platform.XBOX)

    assert "platforms" not in entry.errors
    assert "title" in entry.errors
    entry.close()


@pytest.mark.asyncio
async def test_successful_create_closes_form(catalog, store):
    entry = make_entry(catalog, store)
    fill_valid(entry)

    saved = await entry.submit()

    assert saved is not None
    assert saved.id == "new-1"
    assert entry.closed
    assert entry.saved == saved
    (payload,) = store.created
    assert payload.release_date == date(2030, 12, 31)
    assert payload.tba is True
    assert payload.title == "Hollow Knight: Silksong"


@pytest.mark.asyncio
async def test_failed_submission_keeps_draft(catalog):
    store = FakeStore(fail=True)
    entry = make_entry(catalog, store)
    fill_valid(entry)

    result = await entry.submit()

    assert result is None
    assert entry.form_error == SUBMIT_ERROR
    assert not entry.closed
    assert not entry.submitting
    assert entry.draft.title == "Hollow Knight: Silksong"

    # Retry succeeds once the backend recovers
    store.fail = False
    assert await entry.submit() is not None
    assert entry.form_error is None
    entry.close()


@pytest.mark.asyncio
async def test_submit_is_disabled_while_in_flight(catalog, store):
    store.gate = asyncio.Event()
    entry = make_entry(catalog, store)
    fill_valid(entry)

    first = asyncio.ensure_future(entry.submit())
    await settle()
    assert entry.submitting
    assert await entry.submit() is None

    store.gate.set()
    assert (await first) is not None
    assert len(store.created) == 1


@pytest.mark.asyncio
async def test_edit_mode_updates_existing_entry(catalog, store):
    existing = Entry(
        id="g-7",
        title="Hades II",
        release_date=date(2030, 9, 25),
        platforms=frozenset({Platform.PC, Platform.SWITCH}),
        status=GameStatus.UPCOMING,
        developer="Supergiant",
    )
    entry = make_entry(catalog, store, entry=existing)
    assert entry.is_edit
    assert entry.draft.release == ExactRelease("2030-09-25")

    entry.update_field(publisher="Supergiant")
    saved = await entry.submit()

    assert saved.id == "g-7"
    assert store.created == []
    ((entry_id, payload),) = store.updated
    assert entry_id == "g-7"
    assert payload.publisher == "Supergiant"
    assert payload.platforms == ["PC", "SWITCH"]


@pytest.mark.asyncio
async def test_closed_form_ignores_input(catalog, store):
    entry = make_entry(catalog, store)
    entry.close()

    type_title(entry, "Elden")
    entry.select(ELDEN)
    await quiet()

    assert catalog.queries == []
    assert catalog.detail_calls == []
    assert await entry.submit() is None


@pytest.mark.asyncio
async def test_unchanged_title_notification_does_not_search(catalog, store):
    existing = Entry(
        id="g-1",
        title="Elden",
        release_date=date(2022, 2, 25),
        platforms=frozenset({Platform.PC}),
        status=GameStatus.RELEASED,
    )
    entry = make_entry(catalog, store, entry=existing)

    # The input announces the title it was filled with
    entry.on_title_changed("Elden")
    await quiet()

    assert catalog.queries == []
    assert entry.session.state == Idle()

    # The next real keystroke searches as usual
    entry.on_title_changed("Elden ")
    await quiet()
    await entry.drain()
    assert catalog.queries == ["Elden"]
    entry.close()
