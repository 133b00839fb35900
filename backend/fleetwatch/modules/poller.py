"""Fixed-interval poller that keeps one current boat-state snapshot fresh.

Each tick spawns an independent fetch task, so a slow store never delays the
next tick (ticks are wall-clock fixed-interval, not chained on completion).
Fetches are tagged with a monotonically increasing sequence number at issue
time. When ``discard_stale`` is on, a completion that is older than the last
applied one is dropped; otherwise the snapshot reflects whichever fetch
completed last.

A successful fetch replaces the snapshot wholesale; a failed fetch replaces it
with an empty snapshot and logs the error. There is no retry: the next tick is
the recovery path.

Usage:
    poller = Poller(lambda: asyncio.to_thread(store.fetch_current_locations))
    poller.subscribe(monitor)
    poller.start()
    ...
    poller.stop()
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Awaitable, Callable, Sequence

from fleetwatch.config import settings
from fleetwatch.schemas.boat import BoatSummary

logger = logging.getLogger(__name__)

Snapshot = tuple[BoatSummary, ...]
SnapshotObserver = Callable[[Snapshot], None]


@dataclass(frozen=True)
class PollState:
    snapshot: Snapshot = ()
    issued_seq: int = 0
    applied_seq: int = 0
    # True until the first fetch (successful or not) has been applied
    loading: bool = True
    last_error: str | None = None
    refreshed_at: datetime | None = None


def issue_fetch(state: PollState) -> tuple[PollState, int]:
    """Reserve the next sequence number for a fetch about to be issued."""
    seq = state.issued_seq + 1
    return replace(state, issued_seq=seq), seq


def apply_result(
    state: PollState,
    seq: int,
    rows: Sequence[BoatSummary] | None,
    error: Exception | str | None = None,
    discard_stale: bool = True,
) -> tuple[PollState, bool]:
    """Fold one completed fetch into *state*.

    Returns ``(new_state, applied)``. When the completion is stale and
    *discard_stale* is set, the original state is returned unchanged with
    ``applied=False``.
    """
    if discard_stale and seq <= state.applied_seq:
        return state, False

    now = datetime.now(timezone.utc)
    if error is not None:
        new_state = replace(
            state,
            snapshot=(),
            applied_seq=max(seq, state.applied_seq),
            loading=False,
            last_error=str(error),
            refreshed_at=now,
        )
    else:
        new_state = replace(
            state,
            snapshot=tuple(rows or ()),
            applied_seq=max(seq, state.applied_seq),
            loading=False,
            last_error=None,
            refreshed_at=now,
        )
    return new_state, True


class Poller:
    def __init__(
        self,
        fetch: Callable[[], Awaitable[Sequence[BoatSummary]]],
        interval: float | None = None,
        discard_stale: bool | None = None,
    ):
        self._fetch = fetch
        self.interval = interval if interval is not None else settings.POLL_INTERVAL_SECONDS
        self.discard_stale = settings.POLL_DISCARD_STALE if discard_stale is None else discard_stale
        self.state = PollState()
        self._observers: list[SnapshotObserver] = []
        self._tick_task: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._stopped = False
        # Bumped on every stop so fetches from an earlier run are never applied
        self._run = 0

    @property
    def snapshot(self) -> Snapshot:
        return self.state.snapshot

    @property
    def running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def subscribe(self, observer: SnapshotObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: SnapshotObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def start(self, interval: float | None = None) -> asyncio.Task:
        """Begin polling: one fetch now, then one every *interval* seconds.

        Must be called from inside a running event loop.
        """
        if self.running:
            raise RuntimeError("Poller already running")
        if interval is not None:
            self.interval = interval
        if self.interval <= 0:
            raise ValueError("Poll interval must be positive")
        self._stopped = False
        self._tick_task = asyncio.get_running_loop().create_task(self._tick_loop())
        logger.info("Polling boat locations every %.1fs", self.interval)
        return self._tick_task

    def stop(self) -> None:
        """Cancel the tick loop. In-flight fetches finish but are ignored."""
        self._stopped = True
        self._run += 1
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

    def poll_once(self) -> asyncio.Task:
        """Issue a single fetch now and return its task."""
        self.state, seq = issue_fetch(self.state)
        task = asyncio.get_running_loop().create_task(self._fetch_and_apply(seq, self._run))
        # Hold a reference so the task is not garbage-collected mid-flight
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def apply(
        self,
        seq: int,
        rows: Sequence[BoatSummary] | None,
        error: Exception | str | None = None,
    ) -> bool:
        """Apply a completed fetch and notify observers if it replaced the snapshot."""
        self.state, applied = apply_result(
            self.state, seq, rows, error=error, discard_stale=self.discard_stale
        )
        if not applied:
            logger.debug(
                "Discarding stale poll result #%d (already applied #%d)",
                seq, self.state.applied_seq,
            )
            return False
        self._notify()
        return True

    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            self.poll_once()
            next_tick += self.interval
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

    async def _fetch_and_apply(self, seq: int, run: int) -> None:
        try:
            rows = await self._fetch()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("Error fetching boat locations (poll #%d): %s", seq, exc)
            if self._is_current(run):
                self.apply(seq, None, error=exc)
            return

        if not self._is_current(run):
            logger.debug("Poller stopped - dropping result of poll #%d", seq)
            return
        self.apply(seq, rows)

    def _is_current(self, run: int) -> bool:
        return not self._stopped and run == self._run

    def _notify(self) -> None:
        snapshot = self.state.snapshot
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception as exc:
                logger.error("Snapshot observer %r failed: %s", observer, exc)
