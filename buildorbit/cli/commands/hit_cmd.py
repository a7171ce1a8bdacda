"""``buildorbit hit X Y`` — name the component drawn at a point.

Replays the layout for the given animation time, so the answer matches
the frame ``buildorbit show --time`` draws.
"""

from __future__ import annotations

from pathlib import Path

import typer

from buildorbit.cli.commands._common import console, load_tree, make_session
from buildorbit.config import config
from buildorbit.models.drawing import Point
from buildorbit.models.tree import DuplicatePolicy


def hit_cmd(
    x: float = typer.Argument(..., help="World-space X coordinate."),
    y: float = typer.Argument(..., help="World-space Y coordinate."),
    input_path: Path = typer.Option(
        None,
        "--input",
        "-i",
        exists=True,
        dir_okay=False,
        help="Saved depth-prefixed listing. Runs the listing command if omitted.",
    ),
    manifest_dir: Path = typer.Option(
        Path("."),
        "--manifest-dir",
        "-m",
        file_okay=False,
        help="Directory to run the listing command in.",
    ),
    root: str = typer.Option(None, "--root", "-R", help="Subtree being displayed."),
    elapsed: float = typer.Option(0.0, "--time", "-t", help="Animation time in seconds."),
    policy: DuplicatePolicy = typer.Option(
        config.duplicate_policy,
        "--duplicates",
        help="How repeated siblings are folded.",
    ),
) -> None:
    """Print the component whose circle contains (X, Y)."""
    tree = load_tree(input_path, manifest_dir, policy)
    session = make_session(tree, root)

    name = session.click(Point(x, y), elapsed)
    if name is None:
        console.print(f"[dim]No component at ({x}, {y})[/dim]")
        raise typer.Exit(code=1)
    console.print(f"[cyan]{name}[/cyan]")
