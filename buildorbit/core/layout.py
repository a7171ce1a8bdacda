"""Radial layout engine — places a tree as nested circles around its root.

Every node becomes a circle.  Its children sit on the node's boundary,
fanned out around the direction the node itself was placed in, and each
child is shrunk so that neighbouring siblings never intersect.

Geometry
--------
- The root spreads its children over a full turn.  Any other node uses a
  quarter turn, or three quarters of a turn once it has five or more
  children.
- Siblings are placed in zig-zag order: ``0, -Δ, +Δ, -2Δ, +2Δ, …``
  relative to the parent's direction, so a fan grows symmetrically.
- A child's radius is half the chord between two neighbouring slots on
  the parent's boundary, capped at 70% of the parent's radius.
- A crowded child (five or more children of its own) is pushed outward
  by 1.5 times its radius to leave room for its fan.

The layout walks the tree with an explicit stack, so very deep
dependency chains cannot exhaust the interpreter's recursion limit.
"""

from __future__ import annotations

import math
from typing import NamedTuple

from buildorbit.models.drawing import DrawCircle, DrawLine, DrawPlan, Point
from buildorbit.models.events import BuildEventSets
from buildorbit.models.tree import Color, TreeNode

FULL_TURN = 2.0 * math.pi
CROWDED_FANOUT = 5
SHRINK_FACTOR = 0.7
CROWDED_PUSH = 1.5

DEFAULT_CENTER = Point(0.0, 0.0)
DEFAULT_RADIUS = 150.0
DEFAULT_ANGLE = 1.0

DONE_COLOR: Color = (0x98, 0xFB, 0x98)


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------


def sky_arc(depth: int, children: int) -> float:
    """Angular budget for the children of a node at *depth*."""
    if depth == 0:
        return FULL_TURN
    if children < CROWDED_FANOUT:
        return math.pi / 2.0
    return math.pi * 1.5


def zigzag_offset(index: int, step: float) -> float:
    """Angular offset of sibling *index*: ``0, -Δ, +Δ, -2Δ, +2Δ, …``."""
    sign = -1.0 if index % 2 == 1 else 1.0
    return math.ceil(index / 2) * step * sign


def child_radius(parent_radius: float, step: float) -> float:
    """Largest radius keeping siblings *step* radians apart disjoint."""
    cap = parent_radius * SHRINK_FACTOR
    if step > math.pi:
        return cap
    half_chord = parent_radius * math.sqrt(2.0 * (1.0 - math.cos(step))) / 2.0
    return min(cap, half_chord)


def _on_circle(center: Point, radius: float, angle: float) -> Point:
    return Point(
        center.x + math.cos(angle) * radius,
        center.y + math.sin(angle) * radius,
    )


def child_center(
    parent_center: Point,
    parent_radius: float,
    radius: float,
    angle: float,
    grandchildren: int,
) -> Point:
    """Center for a child placed at *angle* on the parent's boundary."""
    point = _on_circle(parent_center, parent_radius, angle)
    if grandchildren < CROWDED_FANOUT:
        return point
    return _on_circle(point, radius * CROWDED_PUSH, angle)


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class _Frame(NamedTuple):
    node: TreeNode
    center: Point
    radius: float
    angle: float
    depth: int
    sky: float | None


def layout(
    node: TreeNode,
    center: Point = DEFAULT_CENTER,
    radius: float = DEFAULT_RADIUS,
    incoming_angle: float = DEFAULT_ANGLE,
    depth: int = 0,
    sky: float | None = None,
    phase_offset: float = 0.0,
) -> DrawPlan:
    """Compute the draw plan for the subtree rooted at *node*.

    Parameters
    ----------
    node:
        Subtree root; drawn at *center* with *radius*.
    incoming_angle:
        Direction (radians) the children fan out around.
    depth:
        Depth of *node*; decides the default angular budget.
    sky:
        Angular budget for *node*'s children.  ``None`` derives it from
        *depth* and fan-out.  Descendants always derive their own.
    phase_offset:
        Added to every child angle at every level; varying it over time
        makes the diagram sway.

    Returns
    -------
    DrawPlan
        Circles in pre-order (parent first, siblings in zig-zag order)
        and one line per parent/child edge.
    """
    circles: list[DrawCircle] = []
    lines: list[DrawLine] = []
    stack = [_Frame(node, center, radius, incoming_angle, depth, sky)]

    while stack:
        frame = stack.pop()
        circles.append(
            DrawCircle(
                center=frame.center,
                radius=frame.radius,
                color=frame.node.color,
                label=frame.node.name,
                depth=frame.depth,
                node=frame.node,
            )
        )

        children = frame.node.children
        if not children:
            continue

        arc = frame.sky if frame.sky is not None else sky_arc(frame.depth, len(children))
        step = arc / len(children)
        r_child = child_radius(frame.radius, step)

        placed: list[_Frame] = []
        for index, child in enumerate(children):
            angle = frame.angle + zigzag_offset(index, step) + phase_offset
            c_center = child_center(
                frame.center, frame.radius, r_child, angle, len(child.children)
            )
            lines.append(
                DrawLine(
                    start=_on_circle(frame.center, frame.radius, angle),
                    end=_on_circle(c_center, -r_child, angle),
                )
            )
            placed.append(
                _Frame(child, c_center, r_child, angle, frame.depth + 1, None)
            )

        # Reversed so the first zig-zag child is popped first.
        stack.extend(reversed(placed))

    return DrawPlan(circles=circles, lines=lines)


# ---------------------------------------------------------------------------
# Animation and build overlay
# ---------------------------------------------------------------------------


def animation_phase(elapsed: float, amplitude: float = 0.1) -> float:
    """Slow sway applied to every child angle."""
    return math.sin(elapsed) * amplitude


def transition_factor(elapsed: float) -> float:
    """Pulse in ``[0, 1]`` for components that are currently compiling."""
    return abs(math.sin(elapsed))


def blend_colors(start: Color, end: Color, transition: float) -> Color:
    """Linear per-channel blend from *start* (0.0) to *end* (1.0)."""
    t = min(max(transition, 0.0), 1.0)
    r, g, b = (
        min(255, int((1.0 - t) * a) + int(t * z)) for a, z in zip(start, end)
    )
    return r, g, b


def apply_build_overlay(
    plan: DrawPlan,
    sets: BuildEventSets,
    transition: float,
) -> DrawPlan:
    """Recolor circles by build state; geometry is left untouched.

    Completed components take ``DONE_COLOR``; active ones pulse between
    their own color and ``DONE_COLOR``.
    """
    circles: list[DrawCircle] = []
    for circle in plan.circles:
        if sets.is_completed(circle.label):
            color = DONE_COLOR
        elif sets.is_active(circle.label):
            color = blend_colors(circle.color, DONE_COLOR, transition)
        else:
            circles.append(circle)
            continue
        circles.append(circle.model_copy(update={"color": color}))
    return DrawPlan(circles=circles, lines=plan.lines)
