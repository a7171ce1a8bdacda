"""Draw plan models — the transient output of one layout pass.

A ``DrawPlan`` is recomputed for every frame and never persisted.  It is
consumed by the renderer and replayed by the hit-test.
"""

from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from buildorbit.models.tree import Color, TreeNode

BOUNDARY_TOLERANCE = 1e-9


class Point(NamedTuple):
    x: float
    y: float


class DrawCircle(BaseModel):
    """One node placed on the plane."""

    model_config = ConfigDict(frozen=True)

    center: Point
    radius: float
    color: Color
    label: str
    depth: int = 0
    node: TreeNode | None = Field(default=None, exclude=True, repr=False)

    def contains(self, point: Point) -> bool:
        """Whether *point* lies strictly inside the circle.

        Points within a relative ``BOUNDARY_TOLERANCE`` of the edge count
        as outside.  Children are centered on their parent's boundary, and
        rounding must not let the parent claim a child's center.
        """
        dx = self.center.x - point.x
        dy = self.center.y - point.y
        limit = self.radius * self.radius * (1.0 - BOUNDARY_TOLERANCE)
        return dx * dx + dy * dy < limit


class DrawLine(BaseModel):
    """Connector from a parent's boundary to a child's boundary."""

    model_config = ConfigDict(frozen=True)

    start: Point
    end: Point


class DrawPlan(BaseModel):
    """Ordered circles (pre-order, zig-zag siblings) and connecting lines."""

    model_config = ConfigDict(frozen=True)

    circles: list[DrawCircle] = []
    lines: list[DrawLine] = []

    @property
    def labels(self) -> list[str]:
        return [c.label for c in self.circles]

    def bounds(self) -> tuple[Point, Point]:
        """Axis-aligned bounding box ``(min, max)`` over all circles."""
        if not self.circles:
            return Point(0.0, 0.0), Point(0.0, 0.0)
        min_x = min(c.center.x - c.radius for c in self.circles)
        min_y = min(c.center.y - c.radius for c in self.circles)
        max_x = max(c.center.x + c.radius for c in self.circles)
        max_y = max(c.center.y + c.radius for c in self.circles)
        return Point(min_x, min_y), Point(max_x, max_y)
