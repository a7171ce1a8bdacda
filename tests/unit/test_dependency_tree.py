"""Unit tests for DependencyTree — name lookup, traversal, listing command."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from buildorbit.core.dependency_tree import (
    DependencyListingError,
    DependencyTree,
    read_cargo_tree,
    tree_fingerprint,
    walk,
)


# ---------------------------------------------------------------------------
# Test: Lookup
# ---------------------------------------------------------------------------


class TestDependencyTreeLookup:
    """Drilling down only ever looks up an existing node."""

    def test_root(self, cargo_tree: DependencyTree):
        assert cargo_tree.root.name == "my-app 0.1.0"

    def test_get_existing(self, cargo_tree: DependencyTree):
        node = cargo_tree.get("syn 1.0.76")
        assert node is not None
        assert [c.name for c in node.children] == [
            "unicode-xid 0.2.2",
            "proc-macro2 1.0.29",
            "quote 1.0.9",
        ]

    def test_get_returns_shared_node(self, cargo_tree: DependencyTree):
        """The looked-up node is the one in the tree, not a copy."""
        serde = cargo_tree.get("serde 1.0.130")
        assert any(child is serde for child in cargo_tree.root.children)

    def test_get_prefers_most_complete_occurrence(self, cargo_tree: DependencyTree):
        """serde appears as a bare leaf under serde_json and in full under the root."""
        serde = cargo_tree.get("serde 1.0.130")
        assert serde.descendant_count == 13

    def test_get_missing(self, cargo_tree: DependencyTree):
        assert cargo_tree.get("tokio 1.0.0") is None
        assert "tokio 1.0.0" not in cargo_tree

    def test_contains(self, cargo_tree: DependencyTree):
        assert "quote 1.0.9" in cargo_tree
        assert 42 not in cargo_tree

    def test_len_counts_every_occurrence(self, cargo_tree: DependencyTree):
        assert len(cargo_tree) == 20

    def test_names_are_distinct(self, cargo_tree: DependencyTree):
        names = cargo_tree.names()
        assert len(names) == len(set(names))
        assert names[0] == "my-app 0.1.0"
        assert "unicode-xid 0.2.2" in names


# ---------------------------------------------------------------------------
# Test: Traversal
# ---------------------------------------------------------------------------


class TestWalk:
    def test_preorder(self, small_tree):
        assert [(d, n.name) for d, n in walk(small_tree)] == [
            (0, "root 1"),
            (1, "left 1"),
            (1, "right 1"),
            (2, "leaf 1"),
        ]

    def test_tree_walk_matches_module_walk(self, cargo_tree: DependencyTree):
        assert list(cargo_tree.walk()) == list(walk(cargo_tree.root))

    def test_max_depth(self, cargo_tree: DependencyTree):
        assert max(d for d, _ in cargo_tree.walk()) == 6

    def test_fingerprint_matches_function(self, cargo_tree: DependencyTree):
        assert cargo_tree.fingerprint() == tree_fingerprint(cargo_tree.root)
        assert len(cargo_tree.fingerprint()) == 64

    def test_fingerprint_differs_for_different_trees(self, small_listing: str):
        a = DependencyTree.from_listing(small_listing)
        b = DependencyTree.from_listing(small_listing + "\n3 extra v1")
        assert a.fingerprint() != b.fingerprint()


# ---------------------------------------------------------------------------
# Test: Listing command
# ---------------------------------------------------------------------------


class TestReadCargoTree:
    def test_returns_stdout(self, tmp_path: Path):
        command = [sys.executable, "-c", "print('0root v1')"]
        assert read_cargo_tree(tmp_path, command).strip() == "0root v1"

    def test_runs_in_manifest_dir(self, tmp_path: Path):
        command = [sys.executable, "-c", "import os; print(os.getcwd())"]
        out = read_cargo_tree(tmp_path, command)
        assert Path(out.strip()).resolve() == tmp_path.resolve()

    def test_missing_binary(self, tmp_path: Path):
        with pytest.raises(DependencyListingError, match="Could not run"):
            read_cargo_tree(tmp_path, ["buildorbit-no-such-cargo-binary", "tree"])

    def test_nonzero_exit(self, tmp_path: Path):
        command = [
            sys.executable,
            "-c",
            "import sys; sys.stderr.write('no Cargo.toml'); sys.exit(101)",
        ]
        with pytest.raises(DependencyListingError, match="status 101") as exc_info:
            read_cargo_tree(tmp_path, command)
        assert "no Cargo.toml" in str(exc_info.value)
