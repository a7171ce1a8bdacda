"""Unit tests for the terminal canvas and the Rich orbit renderer."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel

from buildorbit.core.build_tracker import BuildTracker
from buildorbit.core.dependency_tree import DependencyTree
from buildorbit.core.layout import layout
from buildorbit.models.drawing import DrawCircle, DrawPlan, Point
from buildorbit.models.events import BuildEvent, BuildEventSets
from buildorbit.monitor.canvas import (
    DOT_CHAR,
    FILL_CHAR,
    LINE_CHAR,
    TerminalCanvas,
)
from buildorbit.monitor.renderer import (
    CIRCLE_ALPHA,
    LABEL_MIN_RADIUS,
    LINE_ALPHA,
    OrbitRenderer,
    render_plan,
)
from buildorbit.monitor.session import OrbitSession


class _RecordingCanvas:
    """Canvas that remembers every call in order."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def draw_circle(self, center, radius, color, alpha):
        self.calls.append(("circle", radius, alpha))

    def draw_line(self, start, end, color, alpha):
        self.calls.append(("line", color, alpha))

    def draw_label(self, text, center, bounds):
        self.calls.append(("label", text))


def _capture(renderable) -> str:
    console = Console(force_terminal=True, width=120)
    with console.capture() as capture:
        console.print(renderable)
    return capture.get()


# ---------------------------------------------------------------------------
# Test: Plan replay
# ---------------------------------------------------------------------------


class TestRenderPlan:
    def test_draw_order(self, small_tree):
        canvas = _RecordingCanvas()
        render_plan(layout(small_tree), canvas)
        kinds = [call[0] for call in canvas.calls]

        assert kinds[:3] == ["line"] * 3
        assert kinds[3:7] == ["circle"] * 4
        assert kinds[7:] == ["label"] * 4

    def test_alphas_and_line_color(self, small_tree):
        canvas = _RecordingCanvas()
        render_plan(layout(small_tree), canvas)
        assert ("line", (255, 255, 255), LINE_ALPHA) in canvas.calls
        assert all(c[2] == CIRCLE_ALPHA for c in canvas.calls if c[0] == "circle")

    def test_small_circles_unlabeled(self):
        plan = DrawPlan(
            circles=[
                DrawCircle(center=Point(0, 0), radius=50.0, color=(1, 2, 3), label="big 1"),
                DrawCircle(
                    center=Point(9, 9), radius=LABEL_MIN_RADIUS, color=(1, 2, 3), label="tiny 1"
                ),
            ]
        )
        canvas = _RecordingCanvas()
        render_plan(plan, canvas)
        labels = [c[1] for c in canvas.calls if c[0] == "label"]
        assert labels == ["big 1"]


# ---------------------------------------------------------------------------
# Test: Terminal canvas
# ---------------------------------------------------------------------------


class TestTerminalCanvas:
    def test_center_maps_to_middle(self):
        canvas = TerminalCanvas(40, 20, (Point(-10, -10), Point(10, 10)))
        assert canvas.to_cell(Point(0, 0)) == (20.0, 10.0)

    def test_rows_grow_downward(self):
        canvas = TerminalCanvas(40, 20, (Point(-10, -10), Point(10, 10)))
        _, row_up = canvas.to_cell(Point(0, 5))
        _, row_down = canvas.to_cell(Point(0, -5))
        assert row_up < row_down

    def test_circle_fills_cells(self):
        canvas = TerminalCanvas(40, 20, (Point(-10, -10), Point(10, 10)))
        canvas.draw_circle(Point(0, 0), 5.0, (200, 0, 0), 255)
        assert canvas.char_at(20, 10) == FILL_CHAR
        assert canvas.char_at(0, 0) == " "

    def test_tiny_circle_is_a_dot(self):
        canvas = TerminalCanvas(40, 20, (Point(-10, -10), Point(10, 10)))
        canvas.draw_circle(Point(0, 0), 0.01, (200, 0, 0), 255)
        assert canvas.char_at(20, 10) == DOT_CHAR

    def test_line_endpoints(self):
        canvas = TerminalCanvas(40, 20, (Point(-10, -10), Point(10, 10)))
        canvas.draw_line(Point(-5, 0), Point(5, 0), (255, 255, 255), 127)
        row = canvas.to_plain().splitlines()[10]
        assert row[10:31] == LINE_CHAR * 21

    def test_label_written_and_clipped(self):
        canvas = TerminalCanvas(40, 20, (Point(-10, -10), Point(10, 10)))
        canvas.draw_label("serde 1.0.130", Point(0, 0), (2.0, 2.0))
        plain = canvas.to_plain()
        assert "serde 1.0.130" not in plain
        assert "se" in plain

    def test_out_of_bounds_drawing_ignored(self):
        canvas = TerminalCanvas(10, 5)
        canvas.draw_circle(Point(10_000, 10_000), 50.0, (1, 1, 1), 255)
        canvas.draw_line(Point(-10_000, 0), Point(-9_000, 0), (1, 1, 1), 255)
        assert canvas.to_plain() == "\n".join([" " * 10] * 5)

    def test_to_text_has_one_line_per_row(self):
        canvas = TerminalCanvas(12, 6)
        assert canvas.to_text().plain.count("\n") == 5


# ---------------------------------------------------------------------------
# Test: Renderer
# ---------------------------------------------------------------------------


class TestOrbitRenderer:
    def test_render_frame_returns_panel(self, small_tree):
        renderer = OrbitRenderer(width=60, height=20)
        panel = renderer.render_frame(layout(small_tree), root_name="root 1")
        assert isinstance(panel, Panel)

    def test_footer_without_build(self, small_tree):
        renderer = OrbitRenderer(width=60, height=20)
        output = _capture(renderer.render_frame(layout(small_tree), root_name="root 1"))
        assert "buildorbit" in output
        assert "Root:" in output
        assert "Nodes:" in output
        assert "Compiling:" not in output

    def test_footer_with_build(self, small_tree):
        sets = BuildEventSets()
        sets.apply(BuildEvent.started("left 1"))
        sets.apply(BuildEvent.finished("leaf 1"))
        renderer = OrbitRenderer(width=60, height=20)
        output = _capture(
            renderer.render_frame(
                layout(small_tree), root_name="root 1", sets=sets, status="running"
            )
        )
        assert "Compiling:" in output
        assert "Done:" in output
        assert "running" in output

    def test_footer_shows_brackets_literally(self, small_tree):
        renderer = OrbitRenderer(width=60, height=20)
        output = _capture(
            renderer.render_frame(
                layout(small_tree), root_name="odd[/name] 1", status="[red]stuck[/x]"
            )
        )
        assert "odd[/name] 1" in output
        assert "[red]stuck[/x]" in output

    def test_print_frame(self, small_tree):
        console = Console(force_terminal=True, width=120)
        renderer = OrbitRenderer(console=console, width=60, height=20)
        with console.capture() as capture:
            renderer.print_frame(layout(small_tree), root_name="root 1")
        assert "root 1" in capture.get()

    def test_rasterize_fits_plan(self, cargo_tree):
        renderer = OrbitRenderer(width=80, height=30)
        canvas = renderer.rasterize(layout(cargo_tree.root))
        assert FILL_CHAR in canvas.to_plain()

    def test_render_live_static_session(self, cargo_tree):
        console = Console(force_terminal=True, width=120)
        renderer = OrbitRenderer(console=console, width=60, height=20)
        session = OrbitSession(cargo_tree)
        with console.capture() as capture:
            returncode = renderer.render_live(session, refresh_hz=20.0)
        assert returncode is None
        assert "finished" in capture.get()

    def test_render_live_with_build(self, fake_build, small_listing):
        command = fake_build(
            """
            sys.stderr.write("   Compiling leaf v1\\n")
            sys.stdout.write(json.dumps({"reason": "compiler-artifact", "package_id": "leaf 1 (x)"}) + "\\n")
            """
        )
        handle = BuildTracker().start(command)
        session = OrbitSession(DependencyTree.from_listing(small_listing), handle)

        console = Console(force_terminal=True, width=120)
        renderer = OrbitRenderer(console=console, width=60, height=20)
        with console.capture():
            returncode = renderer.render_live(session, refresh_hz=50.0, events_per_frame=8)

        assert returncode == 0
        assert session.sets.completed == {"leaf 1"}
        assert not handle.readers_alive
