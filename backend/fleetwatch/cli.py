"""FleetWatch CLI - live fleet monitoring from the terminal.

Commands:
  init-db       - create the store tables (local/demo databases)
  seed-demo     - insert demo boats, positions and tracks
  set-distress  - raise or clear a boat's distress flag
  status        - fleet summary from the store
  watch         - live dashboard with distress alarm
  track         - one boat's historical track, optionally for one day
  weather       - current weather at a position
  open          - serve the HTTP API
"""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Optional, Sequence

import typer
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from fleetwatch.config import settings
from fleetwatch.modules.alert_sinks import AlarmUnavailable, AlertSink
from fleetwatch.schemas.alerts import DistressNotification, DistressOverlay
from fleetwatch.schemas.dashboard import DashboardView


app = typer.Typer(
    name="fleetwatch",
    help="Live fleet monitoring: positions, distress alerts, tracks and weather.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()


@app.callback()
def main():
    logging.basicConfig(level=settings.LOG_LEVEL)


# ---------------------------------------------------------------------------
# Terminal alert sink
# ---------------------------------------------------------------------------


class ConsoleAlertSink(AlertSink):
    """Rings the terminal bell while distressed and prints notifications.

    The alarm needs an interactive terminal; anywhere else ``start_alarm``
    raises ``AlarmUnavailable`` and the rest of the alert still shows.
    """

    def __init__(self, con: Console | None = None):
        self.console = con or console
        self.alarm_active = False
        self.banner_visible = False
        self.overlays: list[DistressOverlay] = []

    def start_alarm(self) -> None:
        if not self.console.is_terminal:
            raise AlarmUnavailable("Console is not a terminal; no bell available")
        self.alarm_active = True
        self.console.bell()

    def stop_alarm(self) -> None:
        self.alarm_active = False

    def ring(self) -> None:
        """Called on every refresh; keeps the alarm looping."""
        if self.alarm_active:
            self.console.bell()

    def notify(self, notification: DistressNotification) -> None:
        self.console.print(Panel(notification.message, title="EMERGENCY", style="bold red"))

    def show_banner(self) -> None:
        self.banner_visible = True

    def hide_banner(self) -> None:
        self.banner_visible = False

    def show_overlays(self, overlays: Sequence[DistressOverlay]) -> None:
        self.overlays = list(overlays)

    def clear_overlays(self) -> None:
        self.overlays = []


def render_dashboard(view: DashboardView) -> Group:
    cards = view.cards
    header = f"[bold]Registered boats:[/bold] {cards.registered_boats}    [bold]Time:[/bold] {cards.now:%Y-%m-%d %H:%M:%S %Z}"
    if cards.weather is not None:
        w = cards.weather
        header += f"    [bold]Weather:[/bold] {w.temperature}°C, wind {w.windspeed} km/h (code {w.weathercode})"

    parts = [header]
    if view.banner is not None:
        parts.append(Panel(view.banner.text, style="bold white on red"))

    if view.table.placeholder:
        parts.append(f"[dim]{view.table.placeholder}[/dim]")
    else:
        table = Table(title="Boats")
        table.add_column("Registration", style="cyan")
        table.add_column("Last Updated")
        table.add_column("Location")
        table.add_column("Status")
        for row in view.table.rows:
            color = "red" if row.status == "EMERGENCY" else "green"
            table.add_row(
                row.registration_number,
                f"{row.last_updated:%Y-%m-%d %H:%M:%S}",
                row.location,
                f"[{color}]{row.status}[/{color}]",
            )
        parts.append(table)
    return Group(*parts)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("init-db")
def init_db_command():
    """Create the store tables."""
    from fleetwatch.database import init_db

    try:
        with console.status("[bold]Creating database..."):
            init_db()
    except Exception as e:
        console.print(f"[red]Database setup failed: {e}[/red]")
        raise typer.Exit(1)
    console.print("[green]Database ready.[/green]")


@app.command("seed-demo")
def seed_demo(
    distress: bool = typer.Option(False, "--distress", help="Seed one boat already in distress"),
):
    """Insert demo boats, current positions and three days of tracks."""
    from fleetwatch.database import SessionLocal, init_db
    from fleetwatch.modules.demo_seed import seed_demo_data

    try:
        with console.status("[bold]Loading demo fleet..."):
            init_db()
            db = SessionLocal()
            try:
                counts = seed_demo_data(db, distress=distress)
            finally:
                db.close()
    except Exception as e:
        console.print(f"[red]Seeding failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]Seeded {counts['boats']} boats, {counts['locations']} positions, "
        f"{counts['logs']} track points.[/green]"
    )


@app.command("set-distress")
def set_distress_command(
    boat_id: str = typer.Argument(..., help="Boat ID"),
    clear: bool = typer.Option(False, "--clear", help="Clear the distress flag instead"),
):
    """Raise (or clear) the distress flag on a boat's current position."""
    from fleetwatch.database import SessionLocal
    from fleetwatch.modules.demo_seed import set_distress

    db = SessionLocal()
    try:
        found = set_distress(db, boat_id, not clear)
    finally:
        db.close()
    if not found:
        console.print(f"[red]No current position for boat {boat_id}[/red]")
        raise typer.Exit(1)
    state = "cleared" if clear else "[red]raised[/red]"
    console.print(f"Distress {state} for {boat_id}")


@app.command("status")
def status():
    """Show registered boats, live positions and distress count."""
    from fleetwatch.modules.location_store import LocationStore, StoreError

    store = LocationStore()
    try:
        registered = store.fetch_boat_count()
        current = store.fetch_current_locations()
    except StoreError as e:
        console.print(f"  Database: [red]{e}[/red]")
        raise typer.Exit(1)

    distressed = [b for b in current if b.is_distress]
    console.print("[bold]Fleet[/bold]")
    console.print("  Database: [green]OK[/green]")
    console.print(f"  Registered boats: {registered:,}")
    console.print(f"  Reporting positions: {len(current):,}")
    if distressed:
        regs = ", ".join(b.registration_number or b.boat_id for b in distressed)
        console.print(f"  Distress: [bold red]{len(distressed)} boat(s) - {regs}[/bold red]")
    else:
        console.print("  Distress: [green]none[/green]")
    if current:
        console.print(f"  Latest update: {current[0].last_updated.isoformat()}")
    else:
        console.print("  Latest update: [dim]no positions yet[/dim]")


@app.command("watch")
def watch(
    interval: Optional[float] = typer.Option(None, "--interval", help="Poll interval in seconds"),
):
    """Live dashboard; rings the bell while any boat is in distress."""
    from fleetwatch.modules.runtime import DashboardRuntime

    if interval is not None and interval <= 0:
        raise typer.BadParameter("must be positive", param_hint="--interval")

    sink = ConsoleAlertSink(console)
    runtime = DashboardRuntime(alert_sink=sink, poll_interval=interval)
    try:
        asyncio.run(_watch(runtime, sink))
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")


async def _watch(runtime, sink: ConsoleAlertSink) -> None:
    from rich.live import Live

    await runtime.start()
    try:
        with Live(render_dashboard(runtime.view()), console=console, refresh_per_second=4) as live:
            while True:
                await asyncio.sleep(runtime.clock_interval)
                sink.ring()
                live.update(render_dashboard(runtime.view()))
    finally:
        await runtime.stop()


@app.command("track")
def track(
    boat_id: str = typer.Argument(..., help="Boat ID"),
    day: Optional[str] = typer.Option(None, "--date", help="Only this calendar day (YYYY-MM-DD)"),
    tz: Optional[str] = typer.Option(None, "--tz", help="Zone for calendar days: local, UTC or IANA name"),
):
    """Print a boat's historical track, its available dates and date range."""
    from fleetwatch.modules.location_store import LocationStore, StoreError
    from fleetwatch.modules.track_filter import TrackFilter
    from fleetwatch.schemas.boat import BoatIdentity

    if day:
        try:
            date.fromisoformat(day)
        except ValueError:
            raise typer.BadParameter(f"not a date: {day}", param_hint="--date")

    store = LocationStore()
    try:
        track_filter = TrackFilter(store, tz_name=tz)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--tz")

    try:
        boat = next((b for b in store.fetch_boat_registry() if b.boat_id == boat_id), None)
    except StoreError as e:
        console.print(f"[yellow]Boat registry unavailable: {e}[/yellow]")
        boat = BoatIdentity(boat_id=boat_id)
    if boat is None:
        console.print(f"[red]Unknown boat: {boat_id}[/red]")
        raise typer.Exit(1)

    state = track_filter.select_boat(boat)
    if state.error:
        console.print(f"[red]Could not load track: {state.error}[/red]")
        raise typer.Exit(1)
    if day:
        state = track_filter.filter_by_date(day)

    title = f"{boat.boat_name or boat.boat_id} ({boat.registration_number or 'unregistered'})"
    if not state.filtered:
        console.print(f"[bold]{title}[/bold]: [dim]no track points[/dim]")
    else:
        table = Table(title=title)
        table.add_column("Recorded At", style="cyan")
        table.add_column("Latitude")
        table.add_column("Longitude")
        for p in state.filtered:
            table.add_row(p.recorded_at.isoformat(), str(p.latitude), str(p.longitude))
        console.print(table)

    console.print(f"  Points shown: {len(state.filtered)} of {len(state.logs)}")
    dates = track_filter.available_dates()
    if dates:
        console.print(f"  Available dates: {', '.join(dates)}")
        rng = track_filter.date_range()
        console.print(f"  Date range: {rng.min.isoformat()} → {rng.max.isoformat()}")


@app.command("weather")
def weather(
    lat: Optional[float] = typer.Option(None, "--lat", help="Latitude (defaults to VIEWER_LATITUDE)"),
    lon: Optional[float] = typer.Option(None, "--lon", help="Longitude (defaults to VIEWER_LONGITUDE)"),
):
    """Current weather at a position."""
    from fleetwatch.modules.geolocation import ConfiguredGeolocation, FixedGeolocation
    from fleetwatch.modules.weather_client import load_viewer_weather

    if lat is not None and lon is not None:
        try:
            geolocation = FixedGeolocation(lat, lon)
        except ValueError as e:
            raise typer.BadParameter(str(e))
    else:
        geolocation = ConfiguredGeolocation()

    result = asyncio.run(load_viewer_weather(geolocation))
    if result is None:
        console.print("[yellow]Weather unavailable[/yellow]")
        raise typer.Exit(1)
    console.print(
        f"Temperature: {result.temperature}°C  Wind: {result.windspeed} km/h  "
        f"Code: {result.weathercode}  ({result.time})"
    )


@app.command("open")
def open_dashboard(
    no_browser: bool = typer.Option(False, "--no-browser", help="Don't open browser automatically"),
    host: str = typer.Option("127.0.0.1", "--host", hidden=True),
    port: int = typer.Option(8000, "--port", hidden=True),
):
    """Serve the dashboard API."""
    import threading
    import time
    import webbrowser
    import uvicorn

    url = f"http://{host}:{port}"

    if not no_browser:
        def _open_browser():
            time.sleep(1.5)
            webbrowser.open(f"{url}/docs")
        threading.Thread(target=_open_browser, daemon=True).start()

    console.print(f"Dashboard API running at [cyan]{url}[/cyan] - press Ctrl+C to stop")
    uvicorn.run("fleetwatch.main:app", host=host, port=port)
