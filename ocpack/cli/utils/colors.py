"""
ocpack CLI - styled output primitives built on Click.

    success(), error(), info(), dim()
    kv()     - key-value pair, aligned
    table()  - minimal aligned table

click.style handles NO_COLOR / TERM=dumb and non-tty output.
"""

from __future__ import annotations

from typing import Optional, Sequence

import click

_ARROW = "\u2192"   # arrow
_CHECK = "\u2713"   # check
_CROSS = "\u2717"   # cross
_L_H = "\u2500"     # light horizontal


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    """Print error message in red (to stderr)."""
    click.echo(click.style(message, fg="red"), err=True)


def info(message: str) -> None:
    """Print info message in cyan."""
    click.echo(click.style(message, fg="cyan"))


def dim(message: str) -> None:
    click.echo(click.style(message, dim=True))


def kv(
    key: str,
    value: str,
    *,
    key_width: int = 20,
    indent: int = 2,
) -> None:
    """
    Print an aligned key-value pair.

        Template hash:      3f1c0a…
        Static dirs:        img, css
    """
    prefix = " " * indent
    k = click.style(f"{key}:", fg="white")
    v = click.style(str(value), fg="cyan")
    padding = " " * max(1, key_width - len(key) - 1)
    click.echo(f"{prefix}{k}{padding}{v}")


def table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    col_widths: Optional[Sequence[int]] = None,
    indent: int = 2,
) -> None:
    """
    Print a minimal aligned table.

        Name            Version   Template
        ─────────────── ───────── ────────
        hello-world     1.0.0     jade
    """
    prefix = " " * indent

    if col_widths is None:
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row[:len(headers)]):
                widths[i] = max(widths[i], len(str(cell)))
        widths = [w + 2 for w in widths]
    else:
        widths = list(col_widths)

    hdr = "".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    click.echo(f"{prefix}{click.style(hdr, fg='cyan', bold=True)}")
    click.echo(f"{prefix}{click.style(''.join(_L_H * w for w in widths), dim=True)}")

    for row in rows:
        line = "".join(
            str(cell).ljust(widths[i]) if i < len(widths) else str(cell)
            for i, cell in enumerate(row)
        )
        click.echo(f"{prefix}{line}")
