"""Alert side-effect sinks driven by the distress monitor.

A sink turns distress transitions into something a human notices: a looping
alarm, a one-time notification, a persistent banner, and highlight overlays on
the live map. The monitor only ever talks to the ``AlertSink`` interface.

Provides:
  - AlertSink          - abstract interface
  - AlarmUnavailable   - raised by start_alarm() when no audio output can be used
  - LoggingAlertSink   - writes every side effect to the ``fleetwatch.alerts`` logger
  - AlertBoard         - in-memory state served by the HTTP API
  - CompositeAlertSink - fan-out to several sinks
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Sequence

from fleetwatch.config import settings
from fleetwatch.schemas.alerts import AlertBoardRead, DistressNotification, DistressOverlay

alert_logger = logging.getLogger("fleetwatch.alerts")


class AlarmUnavailable(Exception):
    """The alarm could not be started (e.g. audio output blocked)."""


class AlertSink(ABC):

    @abstractmethod
    def start_alarm(self) -> None:
        """Start a looping audible alarm."""
        ...

    @abstractmethod
    def stop_alarm(self) -> None:
        """Stop the alarm and rewind it to the beginning."""
        ...

    @abstractmethod
    def notify(self, notification: DistressNotification) -> None:
        ...

    @abstractmethod
    def show_banner(self) -> None:
        ...

    @abstractmethod
    def hide_banner(self) -> None:
        ...

    @abstractmethod
    def show_overlays(self, overlays: Sequence[DistressOverlay]) -> None:
        ...

    @abstractmethod
    def clear_overlays(self) -> None:
        ...


class LoggingAlertSink(AlertSink):

    def start_alarm(self) -> None:
        alert_logger.warning("Distress alarm started")

    def stop_alarm(self) -> None:
        alert_logger.info("Distress alarm stopped")

    def notify(self, notification: DistressNotification) -> None:
        alert_logger.critical(notification.message.replace("\n", " "))

    def show_banner(self) -> None:
        alert_logger.warning("Emergency banner shown")

    def hide_banner(self) -> None:
        alert_logger.info("Emergency banner cleared")

    def show_overlays(self, overlays: Sequence[DistressOverlay]) -> None:
        alert_logger.debug("Distress overlays: %s", [o.boat_id for o in overlays])

    def clear_overlays(self) -> None:
        alert_logger.debug("Distress overlays cleared")


class AlertBoard(LoggingAlertSink):
    """Keeps the current alert state in memory so the API can serve it."""

    def __init__(self, history_size: int | None = None):
        self.alarm_active = False
        self.banner_visible = False
        self.overlays: list[DistressOverlay] = []
        self.notifications: deque[DistressNotification] = deque(
            maxlen=settings.ALERT_HISTORY_SIZE if history_size is None else history_size
        )

    def start_alarm(self) -> None:
        super().start_alarm()
        self.alarm_active = True

    def stop_alarm(self) -> None:
        super().stop_alarm()
        self.alarm_active = False

    def notify(self, notification: DistressNotification) -> None:
        super().notify(notification)
        self.notifications.append(notification)

    def show_banner(self) -> None:
        super().show_banner()
        self.banner_visible = True

    def hide_banner(self) -> None:
        super().hide_banner()
        self.banner_visible = False

    def show_overlays(self, overlays: Sequence[DistressOverlay]) -> None:
        super().show_overlays(overlays)
        self.overlays = list(overlays)

    def clear_overlays(self) -> None:
        super().clear_overlays()
        self.overlays = []

    def read(self) -> AlertBoardRead:
        notifications = list(self.notifications)
        return AlertBoardRead(
            alarm_active=self.alarm_active,
            banner_visible=self.banner_visible,
            overlays=list(self.overlays),
            notifications=notifications,
            last_notification=notifications[-1] if notifications else None,
        )


class CompositeAlertSink(AlertSink):
    """Forwards every call to each child sink in order.

    ``start_alarm`` is attempted on every child; if any of them raised
    ``AlarmUnavailable`` the first such error is re-raised afterwards.
    """

    def __init__(self, *sinks: AlertSink):
        self.sinks = list(sinks)

    def start_alarm(self) -> None:
        failure: AlarmUnavailable | None = None
        for sink in self.sinks:
            try:
                sink.start_alarm()
            except AlarmUnavailable as exc:
                failure = failure or exc
        if failure is not None:
            raise failure

    def stop_alarm(self) -> None:
        for sink in self.sinks:
            sink.stop_alarm()

    def notify(self, notification: DistressNotification) -> None:
        for sink in self.sinks:
            sink.notify(notification)

    def show_banner(self) -> None:
        for sink in self.sinks:
            sink.show_banner()

    def hide_banner(self) -> None:
        for sink in self.sinks:
            sink.hide_banner()

    def show_overlays(self, overlays: Sequence[DistressOverlay]) -> None:
        for sink in self.sinks:
            sink.show_overlays(overlays)

    def clear_overlays(self) -> None:
        for sink in self.sinks:
            sink.clear_overlays()
