"""Human-readable status output.

All status lines go to stderr so stdout stays clean for piping.
"""

from __future__ import annotations

import click

__all__ = [
    "success",
    "error",
    "warning",
    "info",
    "header",
    "section",
    "rule",
    "blank",
]

RULE = "=" * 49
SECTION_RULE = "-" * 40


def success(message: str) -> None:
    click.echo(f"{click.style('✓', fg='green')} {message}", err=True)


def error(message: str) -> None:
    click.echo(f"{click.style('✗', fg='red')} {message}", err=True)


def warning(message: str) -> None:
    click.echo(f"{click.style('⚠', fg='yellow')} {message}", err=True)


def info(message: str) -> None:
    click.echo(f"ℹ️  {message}", err=True)


def header(title: str) -> None:
    click.echo(err=True)
    click.echo(click.style(title, fg="blue", bold=True), err=True)
    click.echo(RULE, err=True)


def section(title: str) -> None:
    click.echo(err=True)
    click.echo(click.style(title, fg="blue"), err=True)
    click.echo(SECTION_RULE, err=True)


def rule() -> None:
    click.echo(RULE, err=True)


def blank() -> None:
    click.echo(err=True)
