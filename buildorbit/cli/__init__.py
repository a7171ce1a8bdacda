"""buildorbit CLI — Typer-based command-line interface.

Provides the ``buildorbit`` command with subcommands for rendering the
dependency tree, exporting draw plans, hit-testing points and watching
a live build.

All output uses Rich for formatted terminal display.
"""
