"""Hypercomplex Verify - Container integrity report CLI."""
from __future__ import annotations

import json
from pathlib import Path

import click

from .logic import verify_container


@click.group()
def main() -> None:
    """Check hypercomplex containers without writing any output."""


@main.command("container")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def container_cmd(path: Path) -> None:
    """Print a JSON report for the container at PATH; exit 1 unless it passes."""
    result = verify_container(path)
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    if result["status"] != "PASS":
        raise SystemExit(1)


if __name__ == "__main__":
    main()
