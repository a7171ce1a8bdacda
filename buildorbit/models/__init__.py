"""buildorbit data models — all Pydantic v2, frozen except the live event sets."""

from buildorbit.models.drawing import DrawCircle, DrawLine, DrawPlan, Point
from buildorbit.models.events import BuildEvent, BuildEventSets, EventKind
from buildorbit.models.tree import Color, DuplicatePolicy, FlatEntry, TreeNode

__all__ = [
    # tree
    "Color",
    "DuplicatePolicy",
    "FlatEntry",
    "TreeNode",
    # drawing
    "Point",
    "DrawCircle",
    "DrawLine",
    "DrawPlan",
    # events
    "EventKind",
    "BuildEvent",
    "BuildEventSets",
]
