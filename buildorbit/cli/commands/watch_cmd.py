"""``buildorbit watch [-- BUILD_ARGS...]`` — animate the tree during a build.

Launches the configured build command (extra arguments are appended),
follows its output and recolors components as they start and finish
compiling.  If the build cannot be launched the static tree is shown
instead.
"""

from __future__ import annotations

import queue
from pathlib import Path

import typer
from rich.markup import escape

from buildorbit.cli.commands._common import console, load_tree, make_session
from buildorbit.config import config
from buildorbit.core.build_tracker import BuildTracker, SubprocessSpawnError
from buildorbit.models.tree import DuplicatePolicy
from buildorbit.monitor.renderer import OrbitRenderer


def watch_cmd(
    build_args: list[str] = typer.Argument(
        None,
        help="Extra arguments appended to the build command.",
    ),
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
        help="Directory to run the listing and build commands in.",
    ),
    root: str = typer.Option(None, "--root", "-R", help="Start drilled into this component."),
    refresh_hz: float = typer.Option(
        config.refresh_hz,
        "--refresh",
        "-r",
        help="Redraw rate in Hz.",
    ),
    echo: bool = typer.Option(
        config.echo_build_output,
        "--echo/--no-echo",
        help="Print build diagnostics above the live frame.",
    ),
    policy: DuplicatePolicy = typer.Option(
        config.duplicate_policy,
        "--duplicates",
        help="How repeated siblings are folded.",
    ),
    width: int = typer.Option(config.canvas_width, "--width", help="Canvas width in cells."),
    height: int = typer.Option(config.canvas_height, "--height", help="Canvas height in cells."),
) -> None:
    """Run the build and animate its progress over the dependency tree."""
    tree = load_tree(input_path, manifest_dir, policy)

    command = [*config.build_command, *(build_args or [])]
    tracker = BuildTracker(
        prefix=config.compile_prefix,
        artifact_reason=config.artifact_reason,
        echo=console if echo else None,
    )
    # The channel is owned here and handed to the reader threads via start().
    events: queue.Queue = queue.Queue()

    handle = None
    try:
        handle = tracker.start(command, cwd=manifest_dir, events=events)
    except SubprocessSpawnError as exc:
        console.print(f"[bold yellow]Live build overlay unavailable:[/bold yellow] {escape(str(exc))}")

    session = make_session(tree, root, handle)
    renderer = OrbitRenderer(console=console, width=width, height=height)

    if handle is None:
        renderer.print_frame(session.frame(), root_name=session.current_root.name)
        return

    console.print(
        f"[dim]Watching {' '.join(command)} at {refresh_hz} Hz. Press Ctrl+C to stop.[/dim]"
    )
    returncode = renderer.render_live(
        session,
        refresh_hz=refresh_hz,
        events_per_frame=config.events_per_frame,
    )

    if returncode:
        console.print(f"[bold red]Build exited with status {returncode}[/bold red]")
        raise typer.Exit(code=1)
    console.print(
        f"[green]Build finished:[/green] {len(session.sets.completed)} components compiled."
    )
