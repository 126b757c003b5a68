# fleettop/cli.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from fleettop.config import get_config, load_config, set_config
from fleettop.errors import FleetTopError
from fleettop.logging import configure as configure_logging

# Root app
app = typer.Typer(add_completion=False, help="fleettop CLI")


@app.callback()
def main(config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to fleettop.yaml")):
    """Capture host metrics on agents and rank processes on an aggregator."""
    if config is not None:
        set_config(load_config(config))
    cfg = get_config()
    configure_logging(cfg.logging.level, cfg.logging.json_output)

# --------------------------- Services ---------------------------

@app.command()
def agent(
    host: Optional[str] = None,
    port: Optional[int] = None,
    capture: bool = typer.Option(False, "--capture", help="Start capturing as soon as the agent boots"),
):
    """Launch the capture agent HTTP service."""
    cfg = get_config()
    if capture:
        cfg.agent.capture_on_start = True
    import uvicorn
    uvicorn.run("fleettop.api.agent:app", host=host or cfg.agent.host, port=port or cfg.agent.port, reload=False)


@app.command()
def aggregator(host: Optional[str] = None, port: Optional[int] = None):
    """Launch the aggregation server."""
    cfg = get_config()
    import uvicorn
    uvicorn.run(
        "fleettop.api.aggregator:app",
        host=host or cfg.aggregator.host,
        port=port or cfg.aggregator.port,
        reload=False,
    )

# --------------------------- Local reads ---------------------------

@app.command()
def view(duration: str = typer.Option("2h", help="Window of past metrics to show (e.g. 1h, 30m)")):
    """Print locally captured snapshots from the trailing window."""
    from fleettop.agent import get_capture_log
    from fleettop.durations import parse_duration
    from fleettop.models import utcnow

    try:
        span = parse_duration(duration)
        snaps = get_capture_log().query(since=utcnow() - span)
    except FleetTopError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Snapshots in the last {duration}")
    table.add_column("Timestamp")
    table.add_column("CPU %")
    table.add_column("Memory used %", justify="right")
    table.add_column("Disk used %", justify="right")
    table.add_column("Processes", justify="right")
    for s in snaps:
        table.add_row(
            s.timestamp.isoformat(),
            " ".join(f"{c:.0f}" for c in s.cpu_percentages),
            f"{s.memory.used_percent:.1f}",
            f"{s.disk.used_percent:.1f}",
            str(len(s.processes)),
        )
    Console().print(table)


@app.command()
def poll():
    """Run one aggregator polling cycle now."""
    from fleettop.aggregator import get_aggregator
    from fleettop.db import init_db

    init_db()
    rprint(get_aggregator().poll_once())


@app.command()
def top(
    type: str = typer.Option("cpu", "--type", help="cpu or memory"),
    duration: str = typer.Option("5m"),
    server_id: int = typer.Option(..., "--server-id"),
    limit: Optional[int] = typer.Option(None),
):
    """Show the top processes for one server."""
    from fleettop.aggregator import get_ranking
    from fleettop.db import init_db

    init_db()
    try:
        rows = get_ranking().top(type, duration, server_id, limit=limit)
    except FleetTopError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Top by {type} over {duration} (server {server_id})")
    table.add_column("PID", justify="right")
    table.add_column("Name")
    table.add_column("CPU %", justify="right")
    table.add_column("Memory %", justify="right")
    for r in rows:
        table.add_row(str(r.pid), r.name, f"{r.cpu:.1f}", f"{r.memory:.1f}")
    Console().print(table)

# --------------------------- Sub-apps ---------------------------

servers_app = typer.Typer(help="Registered agents.")


@servers_app.command("add")
def servers_add(name: str, url: str):
    from fleettop.aggregator import get_registry
    from fleettop.db import init_db

    init_db()
    try:
        rec = get_registry().add(name, url)
    except FleetTopError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)
    rprint(rec.model_dump())


@servers_app.command("list")
def servers_list():
    from fleettop.aggregator import get_registry
    from fleettop.db import init_db

    init_db()
    rprint([r.model_dump() for r in get_registry().list()])


app.add_typer(servers_app, name="servers")


if __name__ == "__main__":
    app()
