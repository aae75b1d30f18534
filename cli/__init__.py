"""Command-line surface for the sensor chart feed.

The Typer application lives in ``cli.app``; run it with ``python -m cli``.
"""
