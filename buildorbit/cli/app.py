"""Main Typer application — imports and registers all CLI commands.

Entry point: ``buildorbit`` (configured via pyproject.toml console_scripts).

Commands: show, plan, hit, watch.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from buildorbit.cli.commands.hit_cmd import hit_cmd
from buildorbit.cli.commands.plan_cmd import plan_cmd
from buildorbit.cli.commands.show_cmd import show_cmd
from buildorbit.cli.commands.watch_cmd import watch_cmd
from buildorbit.config import config

app = typer.Typer(
    name="buildorbit",
    help="buildorbit: radial dependency tree with live build progress.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="show", help="Render one frame of the dependency tree.")(show_cmd)
app.command(name="plan", help="Print the draw plan as JSON.")(plan_cmd)
app.command(name="hit", help="Name the component drawn at a point.")(hit_cmd)
app.command(name="watch", help="Run the build and animate its progress.")(watch_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        config.log_level,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    ),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
