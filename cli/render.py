from __future__ import annotations

from typing import Iterable

import typer

from app.schemas import ChartDocument, PickerOption


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def render_chart(document: ChartDocument) -> None:
    echo_heading(document.title)
    typer.echo(f"chart_type: {document.chart_type.value}")
    labels = document.data.labels
    values = document.data.datasets[0].data if document.data.datasets else []
    if not labels:
        typer.echo("No readings for this selection.")
        return
    typer.echo(f"{'time':<10} temperature")
    for label, value in zip(labels, values):
        typer.echo(f"{label:<10} {value:.2f}")


def render_options(options: Iterable[PickerOption]) -> None:
    for option in options:
        typer.echo(f"{option.value}: {option.label}")
