"""Tests for the dashboard and track view projections."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from fleetwatch.modules.dashboard_view import (
    BANNER_TEXT,
    EMPTY_PLACEHOLDER,
    LOADING_PLACEHOLDER,
    build_boat_table,
    build_dashboard_view,
    build_live_map,
    build_track_view,
    load_map_config,
)
from fleetwatch.modules.distress_monitor import distress_overlays
from fleetwatch.modules.poller import PollState, apply_result
from fleetwatch.modules.track_filter import TrackState, filter_by_date
from fleetwatch.schemas.boat import BoatIdentity
from fleetwatch.schemas.weather import WeatherSnapshot

from factories import make_point, make_summary


UTC = timezone.utc
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
CALM = make_summary(id=1, boat_id="B1", registration_number="REG-1")
DISTRESSED = make_summary(id=2, boat_id="B2", registration_number="REG-2",
                          latitude=14.2, longitude=120.7, is_distress=True)


def _loaded(rows):
    state, _ = apply_result(PollState(), 1, rows)
    return state


class TestMapConfig:
    def test_repo_config_loads(self):
        cfg = load_map_config()
        assert cfg["live_map"]["center"] == [14.085616, 120.627538]
        assert cfg["distress_circle"]["weight"] == 30

    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        cfg = load_map_config(str(tmp_path / "nope.yaml"))
        assert cfg["live_map"]["zoom"] == 12
        assert cfg["track_polyline"]["dash_array"] == "8, 6"

    def test_partial_file_merges_over_defaults(self, tmp_path):
        path = tmp_path / "map.yaml"
        path.write_text("live_map:\n  zoom: 9\n")
        cfg = load_map_config(str(path))
        assert cfg["live_map"]["zoom"] == 9
        assert cfg["live_map"]["center"] == [14.085616, 120.627538]


class TestBoatTable:
    def test_loading_placeholder_before_first_poll(self):
        table = build_boat_table(PollState())
        assert table.placeholder == LOADING_PLACEHOLDER
        assert table.rows == []

    def test_empty_placeholder_after_empty_or_failed_poll(self):
        assert build_boat_table(_loaded([])).placeholder == EMPTY_PLACEHOLDER
        failed, _ = apply_result(PollState(), 1, None, error="down")
        assert build_boat_table(failed).placeholder == EMPTY_PLACEHOLDER

    def test_rows_follow_snapshot_order(self):
        table = build_boat_table(_loaded([DISTRESSED, CALM]))
        assert [r.registration_number for r in table.rows] == ["REG-2", "REG-1"]
        assert [r.status for r in table.rows] == ["EMERGENCY", "NORMAL"]
        assert table.rows[0].location == "Lat: 14.2, Lng: 120.7"
        assert table.placeholder is None


class TestLiveMap:
    def test_marker_per_boat_and_circle_per_distressed(self):
        snapshot = [CALM, DISTRESSED]
        view = build_live_map(snapshot, distress_overlays(snapshot, 1000))
        assert len(view.markers) == 2
        assert len(view.circles) == 1
        circle = view.circles[0]
        assert (circle.latitude, circle.longitude, circle.radius_m) == (14.2, 120.7, 1000)
        assert circle.color == "red"
        assert circle.fill_opacity == 0.8

    def test_default_centre(self):
        view = build_live_map([])
        assert view.center == (14.085616, 120.627538)
        assert view.zoom == 12


class TestDashboardView:
    def test_banner_only_when_distressed(self):
        calm = build_dashboard_view(_loaded([CALM]), [], registered_boats=3, now=NOW)
        assert calm.banner is None
        assert calm.distressed is False

        alarmed = build_dashboard_view(
            _loaded([CALM, DISTRESSED]), distress_overlays([DISTRESSED]), registered_boats=3, now=NOW
        )
        assert alarmed.banner.text == BANNER_TEXT
        assert alarmed.distressed is True

    def test_cards(self):
        weather = WeatherSnapshot(temperature=30.1, windspeed=5.0, weathercode=0, time="2025-03-01T12:00")
        view = build_dashboard_view(_loaded([CALM]), [], registered_boats=7, now=NOW, weather=weather)
        assert view.cards.registered_boats == 7
        assert view.cards.now == NOW
        assert view.cards.weather.temperature == 30.1

    def test_no_weather_card_without_weather(self):
        view = build_dashboard_view(_loaded([CALM]), [], registered_boats=0, now=NOW)
        assert view.cards.weather is None
        assert len(view.table.rows) == 1


class TestTrackView:
    BOAT = BoatIdentity(boat_id="B1", boat_name="Alpha", registration_number="REG-1")
    LOGS = (
        make_point(datetime(2025, 3, 1, 8, 0, tzinfo=UTC), 14.00, 120.50),
        make_point(datetime(2025, 3, 1, 9, 0, tzinfo=UTC), 14.05, 120.40),
        make_point(datetime(2025, 3, 2, 8, 0, tzinfo=UTC), 14.10, 120.55),
    )

    def _state(self):
        return TrackState(boat=self.BOAT, logs=self.LOGS, filtered=self.LOGS)

    def test_polyline_markers_and_bounds(self):
        view = build_track_view(self._state(), UTC)
        assert len(view.map.markers) == 3
        assert view.map.markers[0].label == "Alpha"
        assert view.map.markers[0].detail == "2025-03-01T08:00:00+00:00"
        assert view.map.polyline.positions[0] == (14.00, 120.50)
        assert view.map.polyline.dash_array == "8, 6"
        bounds = view.map.bounds
        assert (bounds.south, bounds.north) == (14.00, 14.10)
        assert (bounds.west, bounds.east) == (120.40, 120.55)
        assert bounds.padding_px == 50

    def test_single_point_has_no_polyline(self):
        state = filter_by_date(self._state(), "2025-03-02", UTC)
        view = build_track_view(state, UTC)
        assert view.map.polyline is None
        assert view.map.bounds is not None
        assert view.total_points == 3
        assert view.selected_date == "2025-03-02"

    def test_empty_track(self):
        view = build_track_view(TrackState(boat=self.BOAT), UTC)
        assert view.points == []
        assert view.map.bounds is None
        assert view.map.center == (13.7563, 121.0583)
        assert view.date_range is None

    def test_dates(self):
        view = build_track_view(self._state(), UTC)
        assert view.available_dates == ["2025-03-01", "2025-03-02"]
        assert view.date_range.min.isoformat() == "2025-03-01"
        assert view.date_range.max.isoformat() == "2025-03-02"


def test_repo_map_config_exists():
    root = Path(__file__).resolve().parents[2]
    assert (root / "config" / "map.yaml").exists()
