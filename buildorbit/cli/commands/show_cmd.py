"""``buildorbit show`` — print one frame of the dependency orbit.

Reads a saved ``cargo tree --prefix depth`` listing, or runs the listing
command in the manifest directory, and renders the radial diagram at a
fixed point of the animation.
"""

from __future__ import annotations

from pathlib import Path

import typer

from buildorbit.cli.commands._common import console, load_tree, make_session
from buildorbit.config import config
from buildorbit.models.tree import DuplicatePolicy
from buildorbit.monitor.renderer import OrbitRenderer


def show_cmd(
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
    root: str = typer.Option(
        None,
        "--root",
        "-R",
        help="Draw only the subtree of this component (e.g. 'serde 1.0.130').",
    ),
    elapsed: float = typer.Option(
        0.0,
        "--time",
        "-t",
        help="Animation time in seconds.",
    ),
    policy: DuplicatePolicy = typer.Option(
        config.duplicate_policy,
        "--duplicates",
        help="How repeated siblings are folded.",
    ),
    width: int = typer.Option(config.canvas_width, "--width", help="Canvas width in cells."),
    height: int = typer.Option(config.canvas_height, "--height", help="Canvas height in cells."),
) -> None:
    """Render a single static frame of the dependency tree."""
    tree = load_tree(input_path, manifest_dir, policy)
    session = make_session(tree, root)

    renderer = OrbitRenderer(console=console, width=width, height=height)
    renderer.print_frame(session.frame(elapsed), root_name=session.current_root.name)
