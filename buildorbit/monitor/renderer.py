"""Rich terminal renderer for the dependency orbit.

``render_plan`` replays a ``DrawPlan`` onto any ``Canvas``.
``OrbitRenderer`` wraps a ``TerminalCanvas`` frame in a Rich ``Panel``
with a build-progress footer and drives continuous ``Rich.Live`` mode.

Drawing order
-------------
- lines     : white, half transparent
- circles   : node color (or overlay color), half transparent
- labels    : only for circles with radius above ``LABEL_MIN_RADIUS``
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from buildorbit.models.drawing import DrawPlan
from buildorbit.monitor.canvas import Canvas, TerminalCanvas

if TYPE_CHECKING:
    from buildorbit.models.events import BuildEventSets
    from buildorbit.monitor.session import OrbitSession

logger = logging.getLogger(__name__)

LINE_COLOR = (255, 255, 255)
LINE_ALPHA = 127
CIRCLE_ALPHA = 127
LABEL_MIN_RADIUS = 5.0
LABEL_BOUNDS = (200.0, 200.0)


def render_plan(plan: DrawPlan, canvas: Canvas) -> None:
    """Draw every line, then every circle, then the labels that fit."""
    for line in plan.lines:
        canvas.draw_line(line.start, line.end, LINE_COLOR, LINE_ALPHA)
    for circle in plan.circles:
        canvas.draw_circle(circle.center, circle.radius, circle.color, CIRCLE_ALPHA)
    for circle in plan.circles:
        if circle.radius > LABEL_MIN_RADIUS:
            canvas.draw_label(circle.label, circle.center, LABEL_BOUNDS)


class OrbitRenderer:
    """Renders draw plans as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    width, height:
        Canvas size in terminal cells.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        width: int = 100,
        height: int = 40,
    ) -> None:
        self.console = console or Console()
        self.width = width
        self.height = height

    # ------------------------------------------------------------------
    # Single frame render
    # ------------------------------------------------------------------

    def rasterize(self, plan: DrawPlan) -> TerminalCanvas:
        """Fit *plan* into a fresh canvas and draw it."""
        canvas = TerminalCanvas(self.width, self.height, plan.bounds())
        render_plan(plan, canvas)
        return canvas

    def render_frame(
        self,
        plan: DrawPlan,
        *,
        root_name: str,
        sets: BuildEventSets | None = None,
        status: str | None = None,
    ) -> Panel:
        """Render a plan as a Rich Panel with a summary footer."""
        canvas = self.rasterize(plan)

        summary_parts: list[str] = [
            f"[bold]Root:[/bold] {escape(root_name)}",
            f"[bold]Nodes:[/bold] {len(plan.circles)}",
        ]
        if sets is not None:
            summary_parts.append(f"[yellow][bold]Compiling:[/bold] {len(sets.active)}[/yellow]")
            summary_parts.append(f"[green][bold]Done:[/bold] {len(sets.completed)}[/green]")
        if status:
            summary_parts.append(f"[bold]Build:[/bold] {escape(status)}")
        summary = "  |  ".join(summary_parts)

        return Panel(
            Group(canvas.to_text(), Text(""), Text.from_markup(summary)),
            title="[bold]buildorbit[/bold]",
            border_style="blue",
            padding=(0, 1),
        )

    def print_frame(self, plan: DrawPlan, *, root_name: str) -> None:
        """Print a single static frame to the console."""
        self.console.print(self.render_frame(plan, root_name=root_name))

    # ------------------------------------------------------------------
    # Continuous live rendering
    # ------------------------------------------------------------------

    def render_live(
        self,
        session: OrbitSession,
        *,
        refresh_hz: float = 4.0,
        events_per_frame: int = 1,
    ) -> int | None:
        """Animate *session* until its build finishes or Ctrl+C.

        Each cycle folds at most *events_per_frame* build events and
        redraws.  The build's reader threads are joined before returning.

        Returns
        -------
        int | None
            The build's exit status, or ``None`` without a build.
        """
        interval = 1.0 / max(refresh_hz, 0.1)

        def _panel() -> Panel:
            status = "running" if not session.build_finished else "finished"
            return self.render_frame(
                session.frame(),
                root_name=session.current_root.name,
                sets=session.sets,
                status=status,
            )

        try:
            with Live(
                console=self.console,
                refresh_per_second=refresh_hz,
                transient=False,
            ) as live:
                while not session.build_finished:
                    session.update(events_per_frame)
                    live.update(_panel())
                    time.sleep(interval)
                live.update(_panel())
        except KeyboardInterrupt:
            logger.info("Interrupted; stopping build")
        finally:
            returncode = session.shutdown()
        return returncode
