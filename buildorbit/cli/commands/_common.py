"""Helpers shared by the CLI commands: tree loading and session setup."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from buildorbit.config import config
from buildorbit.core.build_tracker import BuildHandle
from buildorbit.core.dependency_tree import (
    DependencyListingError,
    DependencyTree,
    read_cargo_tree,
)
from buildorbit.core.tree_parser import ParseError
from buildorbit.models.tree import DuplicatePolicy
from buildorbit.monitor.session import OrbitSession

console = Console()


def load_tree(
    input_path: Path | None,
    manifest_dir: Path,
    policy: DuplicatePolicy,
) -> DependencyTree:
    """Parse a saved listing, or run the listing command in *manifest_dir*.

    Exits with status 1 when no tree can be produced.
    """
    try:
        if input_path is not None:
            text = input_path.read_text(encoding="utf-8")
        else:
            text = read_cargo_tree(manifest_dir, config.tree_command)
        return DependencyTree.from_listing(text, policy)
    except DependencyListingError as exc:
        console.print(f"[bold red]Dependency listing failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    except ParseError as exc:
        console.print(f"[bold red]Could not parse dependency listing:[/bold red] {exc}")
        raise typer.Exit(code=1)
    except OSError as exc:
        console.print(f"[bold red]Could not read listing:[/bold red] {exc}")
        raise typer.Exit(code=1)


def make_session(
    tree: DependencyTree,
    root: str | None,
    handle: BuildHandle | None = None,
) -> OrbitSession:
    """Build an ``OrbitSession`` from config, drilled into *root* if given."""
    session = OrbitSession(
        tree,
        handle,
        radius=config.root_radius,
        incoming_angle=config.root_angle,
        phase_amplitude=config.phase_amplitude,
    )
    if root is not None and not session.drill_down(root):
        console.print(f"[bold red]Not in dependency tree:[/bold red] {root}")
        names = tree.names()
        if names:
            console.print("\n[bold]Known components:[/bold]")
            for name in names[:10]:
                console.print(f"  [cyan]{name}[/cyan]")
            if len(names) > 10:
                console.print(f"  [dim]... and {len(names) - 10} more[/dim]")
        session.shutdown()
        raise typer.Exit(code=1)
    return session
