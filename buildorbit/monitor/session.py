"""OrbitSession — the state behind one render loop.

Holds the parsed tree, which node is currently drawn as the root, and the
handle of the build being watched.  Each frame calls ``update`` once (a
non-blocking poll of build events) and then ``frame`` to get the draw
plan.  Clicks and resets only move the root pointer; the tree itself is
never touched.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from buildorbit.core.build_tracker import BuildHandle
from buildorbit.core.dependency_tree import DependencyTree
from buildorbit.core.hit_test import hit_test
from buildorbit.core.layout import (
    DEFAULT_ANGLE,
    DEFAULT_CENTER,
    DEFAULT_RADIUS,
    animation_phase,
    apply_build_overlay,
    layout,
    transition_factor,
)
from buildorbit.models.drawing import DrawPlan, Point
from buildorbit.models.events import BuildEvent, BuildEventSets
from buildorbit.models.tree import TreeNode

logger = logging.getLogger(__name__)


class OrbitSession:
    """Render-loop model for a dependency tree and an optional live build.

    Parameters
    ----------
    tree:
        The parsed dependency tree.
    handle:
        Handle of a launched build, or ``None`` for a static view.
    clock:
        Monotonic time source; injectable for tests.
    """

    def __init__(
        self,
        tree: DependencyTree,
        handle: BuildHandle | None = None,
        *,
        radius: float = DEFAULT_RADIUS,
        incoming_angle: float = DEFAULT_ANGLE,
        phase_amplitude: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.tree = tree
        self.handle = handle
        self.radius = radius
        self.incoming_angle = incoming_angle
        self.phase_amplitude = phase_amplitude
        self._clock = clock
        self._started = clock()
        self._root_name: str | None = None
        self._static_sets = BuildEventSets()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def current_root(self) -> TreeNode:
        if self._root_name is None:
            return self.tree.root
        return self.tree.get(self._root_name) or self.tree.root

    def drill_down(self, name: str) -> bool:
        """Draw the subtree of *name* from now on; ``False`` if unknown."""
        if name not in self.tree:
            return False
        self._root_name = name
        logger.debug("Drilled down to %s", name)
        return True

    def reset(self) -> None:
        """Go back to drawing the whole tree."""
        self._root_name = None

    def click(self, point: Point, elapsed: float | None = None) -> str | None:
        """Drill into the node under *point* in the frame drawn at *elapsed*."""
        t = self.elapsed() if elapsed is None else elapsed
        name = hit_test(
            self.current_root,
            point,
            self.phase(t),
            center=DEFAULT_CENTER,
            radius=self.radius,
            incoming_angle=self.incoming_angle,
        )
        if name is not None:
            self.drill_down(name)
        return name

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def elapsed(self) -> float:
        return self._clock() - self._started

    def phase(self, elapsed: float) -> float:
        return animation_phase(elapsed, self.phase_amplitude)

    # ------------------------------------------------------------------
    # Build state
    # ------------------------------------------------------------------

    @property
    def sets(self) -> BuildEventSets:
        if self.handle is None:
            return self._static_sets
        return self.handle.sets

    @property
    def build_finished(self) -> bool:
        """No build, or its output is fully read and every event consumed."""
        if self.handle is None:
            return True
        return not self.handle.readers_alive and self.handle.pending == 0

    def update(self, max_events: int = 1) -> list[BuildEvent]:
        """Fold at most *max_events* pending build events; never blocks."""
        if self.handle is None:
            return []
        return self.handle.drain(max_events)

    def shutdown(self) -> int | None:
        """Stop the build, if any, and join its reader threads."""
        if self.handle is None:
            return None
        return self.handle.close()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def frame(self, elapsed: float | None = None) -> DrawPlan:
        """Draw plan for the current root, recolored by build state."""
        t = self.elapsed() if elapsed is None else elapsed
        plan = layout(
            self.current_root,
            center=DEFAULT_CENTER,
            radius=self.radius,
            incoming_angle=self.incoming_angle,
            phase_offset=self.phase(t),
        )
        return apply_build_overlay(plan, self.sets, transition_factor(t))
