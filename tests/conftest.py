"""Shared test fixtures for buildorbit."""

from __future__ import annotations

import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from buildorbit.core.dependency_tree import DependencyTree
from buildorbit.core.hasher import name_color
from buildorbit.core.tree_parser import parse_tree
from buildorbit.models.tree import TreeNode

SMALL_LISTING = "0 root v1\n1 left v1\n1 right v1\n2 leaf v1"

CARGO_LISTING = """\
0my-app v0.1.0 (/home/me/my-app)
1anyhow v1.0.44
1serde v1.0.130
2serde_derive v1.0.130 (proc-macro)
3proc-macro2 v1.0.29
4unicode-xid v0.2.2
3quote v1.0.9
4proc-macro2 v1.0.29
5unicode-xid v0.2.2
3syn v1.0.76
4proc-macro2 v1.0.29
5unicode-xid v0.2.2
4quote v1.0.9
5proc-macro2 v1.0.29
6unicode-xid v0.2.2
4unicode-xid v0.2.2
1serde_json v1.0.68
2itoa v0.4.8
2ryu v1.0.5
2serde v1.0.130
"""


@pytest.fixture
def small_listing() -> str:
    """The four-node listing: root -> {left, right}, right -> {leaf}."""
    return SMALL_LISTING


@pytest.fixture
def small_tree(small_listing: str) -> TreeNode:
    return parse_tree(small_listing)


@pytest.fixture
def cargo_listing() -> str:
    """A realistic ``cargo tree --prefix depth --no-dedupe`` listing."""
    return CARGO_LISTING


@pytest.fixture
def cargo_tree(cargo_listing: str) -> DependencyTree:
    return DependencyTree.from_listing(cargo_listing)


@pytest.fixture
def listing_file(tmp_path: Path, small_listing: str) -> Path:
    """The small listing saved to disk, as ``--input`` for CLI tests."""
    path = tmp_path / "tree.txt"
    path.write_text(small_listing, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def make_node(name: str, children: tuple[TreeNode, ...] = ()) -> TreeNode:
    """Build a TreeNode by hand, children kept in the given order."""
    return TreeNode(
        name=name,
        color=name_color(name),
        children=children,
        descendant_count=sum(c.descendant_count + 1 for c in children),
    )


@pytest.fixture
def node_factory() -> Callable[..., TreeNode]:
    return make_node


@pytest.fixture
def fake_build(tmp_path: Path) -> Callable[[str], list[str]]:
    """Factory fixture: write a Python script standing in for the build.

    Returns the command that runs it with the current interpreter.
    """

    def _factory(body: str) -> list[str]:
        script = tmp_path / "fake_build.py"
        script.write_text(
            "import json, sys, time\n" + textwrap.dedent(body),
            encoding="utf-8",
        )
        return [sys.executable, str(script)]

    return _factory
