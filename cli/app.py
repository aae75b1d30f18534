from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ChartFeed
from cli.config import CLIConfig, load_config
from cli.render import render_chart, render_options
from logging_config import configure_logging
from services.projection import default_selection, list_environments, list_time_windows


@dataclass
class CLIState:
    config: CLIConfig
    feed: ChartFeed


app = typer.Typer(
    help="Chart temperature readings from the sensor API.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Sensor API base URL (defaults to API_BASE_URL env or http://localhost:3000).",
    ),
    token: Optional[str] = typer.Option(
        None,
        "--token",
        "-t",
        help="Bearer token passed to the sensor API (defaults to API_TOKEN env).",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL."),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level.upper() if log_level else None)
    config = load_config(base_url=base_url, token=token)
    feed = ChartFeed(config)
    ctx.obj = CLIState(config=config, feed=feed)
    ctx.call_on_close(feed.close)


@app.command("chart")
def chart_command(
    ctx: typer.Context,
    environment: Optional[str] = typer.Option(None, "--environment", "-e", help="Environment id."),
    window: Optional[str] = typer.Option(None, "--window", "-w", help="Time-window tag."),
    chart_type: Optional[str] = typer.Option(None, "--chart-type", "-c", help="line or bar."),
) -> None:
    """Load a snapshot and print one environment's series."""
    state = _get_state(ctx)
    if not state.feed.load():
        typer.secho("Could not load the sensor snapshot; showing nothing.", fg=typer.colors.YELLOW, err=True)
    render_chart(state.feed.render(default_selection(environment, window, chart_type)))


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    environment: Optional[str] = typer.Option(None, "--environment", "-e", help="Environment id."),
    window: Optional[str] = typer.Option(None, "--window", "-w", help="Time-window tag."),
    chart_type: Optional[str] = typer.Option(None, "--chart-type", "-c", help="line or bar."),
    poll_interval: Optional[float] = typer.Option(
        None, "--poll-interval", help="Seconds between re-renders."
    ),
    duration: Optional[float] = typer.Option(None, "--duration", help="Seconds to keep watching."),
    refresh: bool = typer.Option(
        False, "--refresh/--no-refresh", help="Reload the full snapshot on every re-render."
    ),
) -> None:
    """Subscribe to pushed readings and re-render periodically."""
    state = _get_state(ctx)
    selection = default_selection(environment, window, chart_type)
    interval = poll_interval if poll_interval is not None else state.config.poll_interval
    watch_for = duration if duration is not None else state.config.duration

    state.feed.load()
    if not state.feed.subscribe():
        typer.secho("Push channel unavailable; showing snapshot only.", fg=typer.colors.YELLOW, err=True)

    def _on_update(document) -> None:
        typer.echo()
        render_chart(document)

    try:
        state.feed.watch(selection, _on_update, interval=interval, duration=watch_for, refresh=refresh)
    except KeyboardInterrupt:
        typer.echo("Stopped.")


@app.command("environments")
def environments_command() -> None:
    """List environment ids and time-window tags."""
    render_options(list_environments())
    typer.echo()
    render_options(list_time_windows())
