import asyncio
from datetime import time

from daygrid.day_view import COLUMN_GAP, COLUMN_WIDTH, TIME_LABEL_WIDTH, DayScheduleView, Notification
from daygrid.drag import DragPhase
from daygrid.timegrid import TimeGrid


def _view(store, day) -> DayScheduleView:
    return DayScheduleView(store, day=day, grid=TimeGrid(), header_height=60)


def test_enter_loads_and_renders_columns(store, day):
    view = _view(store, day)
    assert asyncio.run(view.enter())

    text = view.render()
    assert text.splitlines()[0] == "Day 2026-03-10 (08:00-20:00)"
    assert "Anna [#FFA000]" in text
    assert "Ben [#1E88E5]" in text
    assert "- 09:00-10:00 | Kunde A | Haarschnitt (60m) | y=120 h=120" in text
    assert "- 10:30-12:00 | Kunde B | Farbe (90m) | y=300 h=180" in text
    assert view.pop_notifications() == []


def test_failed_first_load_shows_empty_grid_and_error(store, day):
    store.fail = {"fetch_resources"}
    view = _view(store, day)

    assert not asyncio.run(view.enter())
    assert view.state.resources == []
    assert "No stylists." in view.render()
    assert view.pop_notifications() == [Notification("error", "Could not load the schedule.")]
    assert not view.loading


def test_failed_reload_keeps_stale_state(store, day):
    async def scenario():
        view = _view(store, day)
        await view.enter()
        before = view.state
        store.fail = {"fetch_bookings_for_date"}
        assert not await view.reload()
        assert view.state is before
        assert len(view.state.bookings) == 3

    asyncio.run(scenario())


def test_drop_at_screen_position_finds_column_and_slot(store, day):
    async def scenario():
        view = _view(store, day)
        await view.enter()
        store.calls.clear()

        view.begin_drag(3)
        x = TIME_LABEL_WIDTH + (COLUMN_WIDTH + COLUMN_GAP) + 10
        result = view.drop_at(x, 185)
        await result.persistence.wait()

        booking = view.state.booking_by_id(3)
        assert booking.resource_index == 1
        assert booking.start_time == time(9, 0)
        assert store.call_names() == ["update_booking_resource_and_time"]

    asyncio.run(scenario())


def test_drop_between_columns_cancels_the_drag(store, day):
    async def scenario():
        view = _view(store, day)
        await view.enter()
        store.calls.clear()

        view.begin_drag(1)
        assert view.drop_at(TIME_LABEL_WIDTH + COLUMN_WIDTH + 1, 185) is None
        assert view.drag.phase is DragPhase.IDLE
        assert view.state.booking_by_id(1).resource_index == 0
        assert store.calls == []

    asyncio.run(scenario())


def test_drag_uses_the_reloaded_state(store, day):
    async def scenario():
        view = _view(store, day)
        await view.enter()
        await view.reload()
        assert view.drag.state is view.state

    asyncio.run(scenario())


def test_save_dialog_creates_booking_and_reloads(store, day):
    async def scenario():
        view = _view(store, day)
        await view.enter()
        draft = view.open_booking_dialog()
        draft.customer_name = "Anna Muster"
        draft.start_time = time(14, 0)
        draft.duration_min = 45

        created = await view.save_booking_dialog()

        assert created is not None
        assert view.draft is None
        assert view.pop_notifications() == [Notification("info", "Booking created.")]
        assert "- 14:00-14:45 | Anna Muster | Haarschnitt (45m) | y=720 h=90" in view.render()

    asyncio.run(scenario())


def test_incomplete_dialog_stays_open_with_warning(store, day):
    async def scenario():
        view = _view(store, day)
        await view.enter()
        view.open_booking_dialog()

        assert await view.save_booking_dialog() is None
        assert view.draft is not None
        [note] = view.pop_notifications()
        assert note.level == "warning"

    asyncio.run(scenario())


def test_creation_failure_closes_dialog_with_error(store, day):
    async def scenario():
        view = _view(store, day)
        await view.enter()
        store.fail = {"create_booking"}
        draft = view.open_booking_dialog()
        draft.customer_name = "Anna Muster"
        draft.start_time = time(14, 0)

        assert await view.save_booking_dialog() is None
        assert view.draft is None
        assert view.pop_notifications() == [Notification("error", "Could not create the booking.")]
        assert len(view.state.bookings) == 3

    asyncio.run(scenario())


def test_close_does_not_wait_for_pending_writes(store, day):
    async def scenario():
        view = _view(store, day)
        await view.enter()
        store.move_gate = asyncio.Event()

        view.begin_drag(1)
        result = view.drop_at(TIME_LABEL_WIDTH + 10, 185)
        await asyncio.sleep(0)
        view.close()

        assert view.closed
        assert not result.persistence.done
        store.move_gate.set()
        outcome = await result.persistence.wait()
        assert outcome.ok

    asyncio.run(scenario())


def test_dialog_offers_grid_times_durations_and_loaded_options(store, day):
    view = _view(store, day)
    asyncio.run(view.enter())

    choices = view.dialog_choices()
    assert choices["times"][0] == time(8, 0)
    assert choices["times"][-1] == time(19, 30)
    assert choices["durations"] == [30, 45, 60, 90, 120]
    assert choices["resources"] == ["Anna", "Ben", "Caro"]
    assert choices["services"] == ["Haarschnitt", "Farbe"]
    assert view.open_booking_dialog().duration_min == 30


def test_drop_without_running_loop_leaves_booking_and_drag_usable(store, day):
    view = _view(store, day)
    asyncio.run(view.enter())
    store.calls.clear()

    view.begin_drag(1)
    assert view.drop_at(TIME_LABEL_WIDTH + 10, 300) is None

    booking = view.state.booking_by_id(1)
    assert booking.start_time == time(9, 0)
    assert booking.resource_index == 0
    assert view.drag.phase is DragPhase.IDLE
    assert view.drag.pending == set()
    assert store.calls == []
    assert view.begin_drag(2) is view.state.booking_by_id(2)


def test_rejected_drag_start_is_ignored(store, day):
    view = _view(store, day)
    asyncio.run(view.enter())

    assert view.begin_drag(404) is None
    assert view.drag.phase is DragPhase.IDLE

    assert view.begin_drag(1) is view.state.booking_by_id(1)
    assert view.begin_drag(2) is None
    assert view.drag.dragging_booking_id == 1


def test_pending_writes_belong_to_their_view(make_store, day):
    async def scenario():
        gated = make_store()
        gated.move_gate = asyncio.Event()
        busy = _view(gated, day)
        idle = _view(make_store(), day)
        await busy.enter()
        await idle.enter()

        busy.begin_drag(1)
        result = busy.drop_at(TIME_LABEL_WIDTH + 10, 185)
        await asyncio.sleep(0)

        assert len(busy.drag.pending) == 1
        assert idle.drag.pending == set()

        gated.move_gate.set()
        await result.persistence.wait()
        assert busy.drag.pending == set()

    asyncio.run(scenario())
