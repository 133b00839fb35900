"""Tests for track selection and calendar-day filtering."""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from fleetwatch.modules.location_store import StoreError
from fleetwatch.modules.track_filter import (
    TrackFilter,
    TrackState,
    available_dates,
    calendar_day,
    clear_filter,
    date_range,
    filter_by_date,
    resolve_day_timezone,
    select_boat,
)
from fleetwatch.schemas.boat import BoatIdentity

from factories import FakeStore, make_point


UTC = timezone.utc
BOAT = BoatIdentity(boat_id="boat-7", boat_name="Seven", registration_number="REG-7")

LOGS = [
    make_point(datetime(2024, 1, 1, 6, 0, tzinfo=UTC), 14.00, 120.50),
    make_point(datetime(2024, 1, 1, 18, 0, tzinfo=UTC), 14.01, 120.51),
    make_point(datetime(2024, 1, 2, 6, 0, tzinfo=UTC), 14.02, 120.52),
]


def _state(logs=LOGS):
    return select_boat(TrackState(), BOAT, lambda _boat_id: logs)


class TestSelectBoat:
    def test_loads_full_log_unfiltered(self):
        state = _state()
        assert state.boat == BOAT
        assert state.logs == tuple(LOGS)
        assert state.filtered == state.logs
        assert state.selected_date == ""

    def test_store_error_leaves_empty_track(self):
        def failing(_boat_id):
            raise StoreError("fetch_logs_for_boat", Exception("timeout"))

        state = select_boat(TrackState(), BOAT, failing)
        assert state.logs == ()
        assert state.filtered == ()
        assert "timeout" in state.error

    def test_no_logs_is_empty_not_error(self):
        state = _state(logs=[])
        assert state.logs == ()
        assert state.error is None

    def test_selecting_new_boat_discards_previous_filter(self):
        store = FakeStore(logs={"boat-7": LOGS, "boat-8": LOGS[:1]})
        track = TrackFilter(store, tz=UTC)
        track.select_boat(BOAT)
        track.filter_by_date("2024-01-02")
        track.select_boat(BoatIdentity(boat_id="boat-8"))
        assert track.state.selected_date == ""
        assert len(track.filtered) == 1
        assert store.log_calls == ["boat-7", "boat-8"]

    def test_does_not_resort_store_order(self):
        shuffled = [LOGS[2], LOGS[0], LOGS[1]]
        state = _state(logs=shuffled)
        assert list(state.logs) == shuffled


class TestFilterByDate:
    def test_two_of_three_points_on_first_day(self):
        state = filter_by_date(_state(), "2024-01-01", UTC)
        assert len(state.filtered) == 2
        assert state.selected_date == "2024-01-01"

    def test_clear_restores_all_points(self):
        state = clear_filter(filter_by_date(_state(), "2024-01-01", UTC))
        assert len(state.filtered) == 3
        assert state.selected_date == ""

    def test_empty_date_shows_everything(self):
        state = filter_by_date(filter_by_date(_state(), "2024-01-01", UTC), "", UTC)
        assert state.filtered == state.logs

    def test_day_without_points(self):
        assert filter_by_date(_state(), "2023-12-31", UTC).filtered == ()

    def test_idempotent(self):
        once = filter_by_date(_state(), "2024-01-01", UTC)
        twice = filter_by_date(once, "2024-01-01", UTC)
        assert once.filtered == twice.filtered

    def test_refilter_uses_full_log_not_previous_subset(self):
        state = filter_by_date(_state(), "2024-01-01", UTC)
        state = filter_by_date(state, "2024-01-02", UTC)
        assert len(state.filtered) == 1

    @pytest.mark.parametrize("day", ["2024-01-01", "2024-01-02", "2024-01-03"])
    def test_partition(self, day):
        state = filter_by_date(_state(), day, UTC)
        assert all(calendar_day(p.recorded_at, UTC) == day for p in state.filtered)
        rest = [p for p in state.logs if calendar_day(p.recorded_at, UTC) != day]
        assert len(state.filtered) + len(rest) == len(state.logs)

    def test_filtered_keeps_log_order(self):
        state = filter_by_date(_state(), "2024-01-01", UTC)
        assert list(state.filtered) == [p for p in LOGS if p in state.filtered]

    def test_round_trip_after_any_sequence(self):
        state = _state()
        for day in ["2024-01-02", "", "2024-01-01", "1999-01-01"]:
            state = filter_by_date(state, day, UTC)
        state = clear_filter(state)
        assert state.filtered == tuple(LOGS)


class TestCalendarDays:
    def test_day_depends_on_zone(self):
        late_utc = datetime(2024, 1, 1, 20, 0, tzinfo=UTC)
        assert calendar_day(late_utc, UTC) == "2024-01-01"
        assert calendar_day(late_utc, ZoneInfo("Asia/Manila")) == "2024-01-02"

    def test_naive_timestamp_treated_as_utc(self):
        assert calendar_day(datetime(2024, 1, 1, 23, 0), UTC) == "2024-01-01"

    def test_filter_in_manila_time(self):
        state = filter_by_date(_state(), "2024-01-02", ZoneInfo("Asia/Manila"))
        # 18:00 UTC on Jan 1 is 02:00 on Jan 2 in Manila
        assert len(state.filtered) == 2

    def test_available_dates_sorted_unique(self):
        assert available_dates(list(reversed(LOGS)), UTC) == ["2024-01-01", "2024-01-02"]

    def test_date_range(self):
        rng = date_range(LOGS, UTC)
        assert rng.min == date(2024, 1, 1)
        assert rng.max == date(2024, 1, 2)

    def test_date_range_empty(self):
        assert date_range([], UTC) is None

    def test_many_days(self):
        start = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
        logs = [make_point(start + timedelta(days=i)) for i in range(10)]
        assert len(available_dates(logs, UTC)) == 10


class TestResolveDayTimezone:
    def test_local(self):
        assert resolve_day_timezone("local") is None

    def test_utc(self):
        assert resolve_day_timezone("UTC") is timezone.utc

    def test_iana_name(self):
        assert resolve_day_timezone("Asia/Manila") == ZoneInfo("Asia/Manila")

    def test_unknown_zone(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            resolve_day_timezone("Mars/Olympus_Mons")

    def test_track_filter_uses_named_zone(self):
        track = TrackFilter(FakeStore(), tz_name="UTC")
        assert track.tz is timezone.utc


class TestTrackFilterWithStore:
    def test_scenario_against_seeded_store(self, seeded_store):
        track = TrackFilter(seeded_store, tz=UTC)
        track.select_boat(BoatIdentity(boat_id="B1", boat_name="Alpha"))
        assert len(track.logs) == 3
        track.filter_by_date("2025-03-01")
        assert len(track.filtered) == 2
        track.clear_filter()
        assert len(track.filtered) == 3
        assert track.available_dates() == ["2025-03-01", "2025-03-02"]

    def test_store_failure(self):
        store = FakeStore(error=StoreError("fetch_logs_for_boat", Exception("down")))
        track = TrackFilter(store, tz=UTC)
        state = track.select_boat(BOAT)
        assert state.filtered == ()
        assert track.date_range() is None
