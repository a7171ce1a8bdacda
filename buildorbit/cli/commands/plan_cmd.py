"""``buildorbit plan`` — dump the draw plan as JSON for an external renderer."""

from __future__ import annotations

from pathlib import Path

import typer

from buildorbit.cli.commands._common import load_tree, make_session
from buildorbit.config import config
from buildorbit.models.tree import DuplicatePolicy


def plan_cmd(
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
    root: str = typer.Option(None, "--root", "-R", help="Subtree to lay out."),
    elapsed: float = typer.Option(0.0, "--time", "-t", help="Animation time in seconds."),
    policy: DuplicatePolicy = typer.Option(
        config.duplicate_policy,
        "--duplicates",
        help="How repeated siblings are folded.",
    ),
    indent: int = typer.Option(2, "--indent", help="JSON indentation."),
) -> None:
    """Print circles and lines of one layout pass as JSON."""
    tree = load_tree(input_path, manifest_dir, policy)
    session = make_session(tree, root)
    typer.echo(session.frame(elapsed).model_dump_json(indent=indent or None))
