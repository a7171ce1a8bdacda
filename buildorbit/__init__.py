"""buildorbit: radial dependency-tree visualizer with live build progress.

v0.1.0:
  - Depth-prefixed ``cargo tree`` listings folded into an immutable tree
  - Content-addressed node colors (same component, same hue, every run)
  - Radial layout with zig-zag sibling fans and non-overlapping radii
  - Build tracking over stderr progress lines and JSON artifact messages
  - Hit-testing and drill-down by replaying the layout
  - Rich terminal rendering and a Typer CLI
"""

__version__ = "0.1.0"
__description__ = "Radial dependency tree with live build progress overlay"

from buildorbit.core.build_tracker import BuildTracker
from buildorbit.core.dependency_tree import DependencyTree
from buildorbit.core.hit_test import hit_test
from buildorbit.core.layout import layout
from buildorbit.core.tree_parser import parse_tree
from buildorbit.cli.app import app as cli

__all__ = [
    "BuildTracker",
    "DependencyTree",
    "hit_test",
    "layout",
    "parse_tree",
    "cli",
    "__version__",
]
