"""Dependency tree models — flat listing entries and the immutable tree."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

Color = tuple[int, int, int]


class DuplicatePolicy(str, Enum):
    """How repeated identities within one sibling scan are folded."""

    KEEP_FIRST = "keep_first"
    KEEP_ALL = "keep_all"


class FlatEntry(BaseModel):
    """One parsed listing line: nesting depth and normalized identity."""

    model_config = ConfigDict(frozen=True)

    depth: int = Field(ge=0)
    identity: str


class TreeNode(BaseModel):
    """A node of the dependency tree.

    Nodes are never mutated after construction.  The same instance is
    shared by its parent, by the name index of ``DependencyTree`` and by
    every ``DrawCircle`` produced for it, so re-rooting never copies.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    color: Color
    children: tuple[TreeNode, ...] = ()
    descendant_count: int = 0

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def __repr__(self) -> str:
        return f"TreeNode({self.name!r}, children={len(self.children)})"
