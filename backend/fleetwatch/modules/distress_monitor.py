"""Distress monitor - turns boat-state snapshots into alert side effects.

Distress is a pure function of the current snapshot: a fleet is distressed
when any boat's flag is set. The monitor keeps only the previous boolean so it
can act on transitions:

  false -> true   start looping alarm, notify once (first distressed boat in
                  snapshot order), show banner, draw overlays
  true  -> true   refresh overlays; notify again only when ``renotify`` is on
  true  -> false  stop and rewind alarm, hide banner, clear overlays

There is no acknowledgement path: the alert clears only when every flag does.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from fleetwatch.config import settings
from fleetwatch.modules.alert_sinks import AlarmUnavailable, AlertSink
from fleetwatch.schemas.alerts import DistressNotification, DistressOverlay
from fleetwatch.schemas.boat import BoatSummary

logger = logging.getLogger(__name__)


def distressed_boats(snapshot: Sequence[BoatSummary]) -> list[BoatSummary]:
    """Distressed rows in snapshot order (not sorted, not ranked)."""
    return [row for row in snapshot if row.is_distress]


def is_distressed(snapshot: Sequence[BoatSummary]) -> bool:
    return any(row.is_distress for row in snapshot)


def distress_overlays(
    snapshot: Sequence[BoatSummary],
    radius_m: float | None = None,
) -> list[DistressOverlay]:
    radius = settings.DISTRESS_RADIUS_METERS if radius_m is None else radius_m
    return [
        DistressOverlay(
            boat_id=row.boat_id,
            registration_number=row.registration_number,
            latitude=row.latitude,
            longitude=row.longitude,
            radius_m=radius,
        )
        for row in distressed_boats(snapshot)
    ]


def format_distress_message(boat: BoatSummary) -> str:
    return (
        f"EMERGENCY!\nBoat {boat.registration_number} reported distress "
        f"at ({boat.latitude}, {boat.longitude})"
    )


def build_notification(boat: BoatSummary) -> DistressNotification:
    return DistressNotification(
        boat_id=boat.boat_id,
        registration_number=boat.registration_number,
        latitude=boat.latitude,
        longitude=boat.longitude,
        message=format_distress_message(boat),
        issued_at=datetime.now(timezone.utc),
    )


@dataclass(frozen=True)
class DistressState:
    distressed: bool = False
    boats: tuple[BoatSummary, ...] = ()
    overlays: tuple[DistressOverlay, ...] = ()
    notifications_sent: int = 0


class DistressMonitor:
    """Snapshot observer; subscribe an instance to a ``Poller``."""

    def __init__(
        self,
        sink: AlertSink,
        renotify: bool | None = None,
        radius_m: float | None = None,
    ):
        self.sink = sink
        self.renotify = settings.DISTRESS_RENOTIFY_EVERY_UPDATE if renotify is None else renotify
        self.radius_m = settings.DISTRESS_RADIUS_METERS if radius_m is None else radius_m
        self.state = DistressState()

    def __call__(self, snapshot: Sequence[BoatSummary]) -> None:
        self.update(snapshot)

    def update(self, snapshot: Sequence[BoatSummary]) -> DistressState:
        was_distressed = self.state.distressed
        boats = distressed_boats(snapshot)
        overlays = distress_overlays(snapshot, self.radius_m)
        entered = bool(boats) and not was_distressed
        notify = entered or (bool(boats) and self.renotify)

        # Committed before any sink call so a failing sink cannot re-fire the edge
        self.state = DistressState(
            distressed=bool(boats),
            boats=tuple(boats),
            overlays=tuple(overlays),
            notifications_sent=self.state.notifications_sent + int(notify),
        )

        if entered:
            logger.warning("Fleet entered distress: %d boat(s) flagged", len(boats))
            self._start_alarm()
            self.sink.notify(build_notification(boats[0]))
            self.sink.show_banner()
            self.sink.show_overlays(overlays)
        elif boats:
            self.sink.show_overlays(overlays)
            if notify:
                self.sink.notify(build_notification(boats[0]))
        elif was_distressed:
            logger.info("Fleet distress cleared")
            self.sink.stop_alarm()
            self.sink.hide_banner()
            self.sink.clear_overlays()
        return self.state

    def _start_alarm(self) -> None:
        try:
            self.sink.start_alarm()
        except AlarmUnavailable as exc:
            logger.warning("Alarm could not be started, continuing without sound: %s", exc)
