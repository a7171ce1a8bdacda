"""DependencyTree — shared, read-only view over a parsed dependency tree.

The tree is parsed once.  Drilling into a subtree only looks up an
existing node by name; nothing is re-parsed or copied.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterator, Sequence
from pathlib import Path

from buildorbit.core.hasher import canonical_json_bytes, sha256_hex
from buildorbit.core.tree_parser import parse_tree
from buildorbit.models.tree import DuplicatePolicy, TreeNode

logger = logging.getLogger(__name__)


class DependencyListingError(RuntimeError):
    """Raised when the dependency listing command cannot be run."""


def walk(node: TreeNode) -> Iterator[tuple[int, TreeNode]]:
    """Yield ``(depth, node)`` pairs in pre-order, children in stored order."""
    stack: list[tuple[int, TreeNode]] = [(0, node)]
    while stack:
        depth, current = stack.pop()
        yield depth, current
        stack.extend((depth + 1, child) for child in reversed(current.children))


def tree_fingerprint(node: TreeNode) -> str:
    """SHA-256 over the pre-order ``(depth, name)`` sequence.

    Two trees share a fingerprint exactly when they have the same shape,
    names and child ordering.
    """
    sequence = [[depth, n.name] for depth, n in walk(node)]
    return sha256_hex(canonical_json_bytes(sequence))


class DependencyTree:
    """Name-indexed access to an immutable ``TreeNode`` hierarchy.

    Parameters
    ----------
    root:
        The root node of the parsed tree.
    """

    def __init__(self, root: TreeNode) -> None:
        self._root = root
        self._index: dict[str, TreeNode] = {}
        for _, node in walk(root):
            # A component listed more than once may be truncated in some
            # places; index the occurrence with the largest subtree.
            known = self._index.get(node.name)
            if known is None or node.descendant_count > known.descendant_count:
                self._index[node.name] = node

    @classmethod
    def from_listing(
        cls,
        text: str,
        policy: DuplicatePolicy = DuplicatePolicy.KEEP_FIRST,
    ) -> DependencyTree:
        """Parse a depth-prefixed listing and index it."""
        return cls(parse_tree(text, policy))

    @property
    def root(self) -> TreeNode:
        return self._root

    def get(self, name: str) -> TreeNode | None:
        """Return the node for *name*, or ``None`` if it is not in the tree."""
        return self._index.get(name)

    def names(self) -> list[str]:
        """All distinct identities, in first pre-order appearance."""
        return list(self._index)

    def walk(self) -> Iterator[tuple[int, TreeNode]]:
        return walk(self._root)

    def fingerprint(self) -> str:
        return tree_fingerprint(self._root)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return self._root.descendant_count + 1


def read_cargo_tree(
    manifest_dir: Path,
    command: Sequence[str],
) -> str:
    """Run the dependency listing command in *manifest_dir* and return stdout.

    Raises
    ------
    DependencyListingError
        If the command cannot be started or exits with a non-zero status.
    """
    logger.info("Reading dependency listing: %s", " ".join(command))
    try:
        result = subprocess.run(
            list(command),
            cwd=manifest_dir,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except (subprocess.SubprocessError, OSError) as exc:
        raise DependencyListingError(
            f"Could not run {command[0]!r}: {exc}"
        ) from exc

    if result.returncode != 0:
        raise DependencyListingError(
            f"{' '.join(command)} exited with status {result.returncode}: "
            f"{result.stderr.strip()}"
        )
    return result.stdout
