"""Dashboard runtime - wires the live activities onto one event loop.

Activities:
  - boat-summary poller (POLL_INTERVAL_SECONDS, default 5s)
  - distress monitor subscribed to the poller
  - wall-clock display timer (CLOCK_INTERVAL_SECONDS, default 1s)
  - one-shot registered-boat count
  - one-shot geolocation + weather lookup

The store is blocking (SQLAlchemy), so its calls run via asyncio.to_thread;
their results are applied back on the loop thread, which is the only place
shared state is mutated.

Usage:
    runtime = DashboardRuntime()
    await runtime.start()
    view = runtime.view()
    await runtime.stop()
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from fleetwatch.config import settings
from fleetwatch.modules.alert_sinks import AlertBoard, AlertSink, CompositeAlertSink
from fleetwatch.modules.dashboard_view import build_dashboard_view
from fleetwatch.modules.distress_monitor import DistressMonitor
from fleetwatch.modules.geolocation import ConfiguredGeolocation, GeolocationProvider
from fleetwatch.modules.location_store import LocationStore, StoreError
from fleetwatch.modules.poller import Poller
from fleetwatch.modules.weather_client import load_viewer_weather
from fleetwatch.schemas.dashboard import DashboardView
from fleetwatch.schemas.weather import WeatherSnapshot

logger = logging.getLogger(__name__)


class DashboardRuntime:
    def __init__(
        self,
        store: LocationStore | None = None,
        alert_sink: AlertSink | None = None,
        geolocation: GeolocationProvider | None = None,
        poll_interval: float | None = None,
        clock_interval: float | None = None,
    ):
        self.store = store or LocationStore()
        # The alert board always sees every side effect so the API can serve it
        if isinstance(alert_sink, AlertBoard):
            self.alert_board = alert_sink
        else:
            self.alert_board = AlertBoard()
            if alert_sink is not None:
                alert_sink = CompositeAlertSink(self.alert_board, alert_sink)
        alert_sink = alert_sink or self.alert_board
        self.geolocation = geolocation or ConfiguredGeolocation()
        self.clock_interval = settings.CLOCK_INTERVAL_SECONDS if clock_interval is None else clock_interval

        self.poller = Poller(self._fetch_current_locations, interval=poll_interval)
        self.monitor = DistressMonitor(alert_sink)
        self.poller.subscribe(self.monitor)

        self.registered_boats = 0
        self.weather: WeatherSnapshot | None = None
        self.now = datetime.now(timezone.utc)
        self._tasks: list[asyncio.Task] = []

    async def _fetch_current_locations(self):
        return await asyncio.to_thread(self.store.fetch_current_locations)

    async def start(self) -> None:
        loop = asyncio.get_running_loop()
        self.poller.start()
        self._tasks = [
            loop.create_task(self._clock_loop()),
            loop.create_task(self.load_registered_count()),
            loop.create_task(self.load_weather()),
        ]

    async def stop(self) -> None:
        self.poller.stop()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    async def load_registered_count(self) -> int:
        try:
            self.registered_boats = await asyncio.to_thread(self.store.fetch_boat_count)
        except StoreError as exc:
            logger.error("Error fetching registered boats: %s", exc)
            self.registered_boats = 0
        return self.registered_boats

    async def load_weather(self) -> WeatherSnapshot | None:
        self.weather = await load_viewer_weather(self.geolocation)
        return self.weather

    async def _clock_loop(self) -> None:
        while True:
            self.now = datetime.now(timezone.utc)
            await asyncio.sleep(self.clock_interval)

    def view(self) -> DashboardView:
        return build_dashboard_view(
            self.poller.state,
            self.monitor.state.overlays,
            registered_boats=self.registered_boats,
            now=self.now,
            weather=self.weather,
        )
