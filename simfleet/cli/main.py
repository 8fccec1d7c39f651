"""simfleet CLI — run the generator, inspect the fleet, dump samples.

`simfleet run` is the long-running generator. Everything else is for
looking at what it would produce without touching a real sink.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from simfleet.cli.context import (
    build_sink,
    configure_logging,
    resolve_settings,
    run_async,
)
from simfleet.config import settings
from simfleet.emission.scheduler import EmissionScheduler
from simfleet.evolution.engine import MetricEvolutionEngine
from simfleet.exceptions import SimfleetError, SinkClientError
from simfleet.fleet.registry import ServerRegistry
from simfleet.sink.base import BaseSink
from simfleet.sink.stream import JsonLinesSink
from simfleet.types import utcnow

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="simfleet",
    help="simfleet -- synthetic CPU/memory/disk telemetry for a fake server fleet.",
    no_args_is_help=True,
)


def _resolve(**overrides):
    try:
        return resolve_settings(settings, **overrides)
    except SimfleetError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(2)


async def _run(scheduler: EmissionScheduler, sink: BaseSink) -> None:
    async with sink:
        await scheduler.run_forever()


@app.command("run")
def run(
    servers: int = typer.Option(None, "--servers", "-n", help="Number of simulated servers"),
    interval: float = typer.Option(None, "--interval", "-i", help="Seconds between cycles"),
    cycles: int = typer.Option(0, "--cycles", "-c", min=0, help="Stop after N cycles (0 = forever)"),
    index: str = typer.Option(None, "--index", help="Target index name"),
    seed: int = typer.Option(None, "--seed", help="Seed for a reproducible fleet and walk"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print documents instead of indexing them"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Generate metrics for the fleet every interval until stopped."""
    cfg = _resolve(
        server_count=servers, interval_seconds=interval, es_index=index, seed=seed,
    )
    configure_logging("DEBUG" if verbose else cfg.log_level)

    try:
        sink = build_sink(cfg, dry_run=dry_run)
    except SinkClientError as e:
        err_console.print(f"[red]Error creating sink client: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    rng = random.Random(cfg.seed)
    registry = ServerRegistry.generate(cfg.server_count, rng)
    engine = MetricEvolutionEngine(rng=rng)
    scheduler = EmissionScheduler(
        registry,
        engine,
        sink,
        interval_seconds=cfg.interval_seconds,
        max_cycles=cycles,
    )

    target = "stdout" if dry_run else f"{cfg.es_server}/{cfg.es_index}"
    err_console.print(
        f"[dim]simulating {len(registry)} servers -> {target}, "
        f"every {cfg.interval_seconds:g}s[/dim]"
    )
    try:
        run_async(_run(scheduler, sink))
    except KeyboardInterrupt:
        err_console.print("[dim]interrupted[/dim]")

    err_console.print(
        f"[dim]{scheduler.cycle_count} cycles, "
        f"{sink.published} published, {sink.failed} dropped[/dim]"
    )


@app.command("fleet")
def fleet(
    servers: int = typer.Option(None, "--servers", "-n", help="Number of simulated servers"),
    seed: int = typer.Option(None, "--seed", help="Seed for a reproducible fleet"),
):
    """Show the simulated servers."""
    cfg = _resolve(server_count=servers, seed=seed)
    registry = ServerRegistry.generate(cfg.server_count, random.Random(cfg.seed))

    table = Table(title=f"Fleet ({len(registry)} servers)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Hostname")
    table.add_column("IP")
    table.add_column("Location")
    table.add_column("Lat", justify="right")
    table.add_column("Lon", justify="right")

    for server in registry:
        loc = server.location
        table.add_row(
            server.id,
            server.hostname,
            server.ip_address,
            f"{loc.city}, {loc.country}",
            f"{loc.latitude:.4f}",
            f"{loc.longitude:.4f}",
        )
    console.print(table)


@app.command("sample")
def sample(
    servers: int = typer.Option(None, "--servers", "-n", help="Number of simulated servers"),
    cycles: int = typer.Option(1, "--cycles", "-c", min=1, help="Cycles to generate"),
    seed: int = typer.Option(None, "--seed", help="Seed for a reproducible fleet and walk"),
    start: float = typer.Option(None, "--start", help="Simulated start time, epoch seconds (default: now)"),
):
    """Print generated documents as JSON lines, with no sink and no waiting.

    Simulated time advances by the configured interval between cycles.
    """
    cfg = _resolve(server_count=servers, seed=seed)

    rng = random.Random(cfg.seed)
    registry = ServerRegistry.generate(cfg.server_count, rng)
    engine = MetricEvolutionEngine(rng=rng)
    sink = JsonLinesSink()
    step = timedelta(seconds=cfg.interval_seconds)
    begin = utcnow() if start is None else datetime.fromtimestamp(start, tz=timezone.utc)

    async def _generate() -> None:
        async with sink:
            for cycle in range(cycles):
                now = begin + step * cycle
                for server in registry:
                    await sink.publish(await engine.advance(server, now=now))

    run_async(_generate())


@app.command("config")
def config_cmd():
    """Show the effective configuration."""
    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in settings.masked().items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)


@app.command("version")
def version_cmd():
    """Show simfleet version."""
    from simfleet import __version__
    console.print(f"simfleet v{__version__}")


if __name__ == "__main__":
    app()
