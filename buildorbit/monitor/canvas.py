"""Render capability and a Rich character-cell implementation of it.

The layout core never talks to a graphics backend.  It hands a
``DrawPlan`` to anything satisfying the ``Canvas`` protocol.
``TerminalCanvas`` rasterizes onto a grid of terminal cells and exports
the result as a Rich ``Text``.
"""

from __future__ import annotations

import math
from typing import Protocol

from rich.text import Text

from buildorbit.models.drawing import Point
from buildorbit.models.tree import Color

# Terminal cells are roughly twice as tall as they are wide.
CELL_ASPECT = 2.0

FILL_CHAR = "█"
DOT_CHAR = "•"
LINE_CHAR = "·"


class Canvas(Protocol):
    """Drawing surface consumed by ``render_plan``."""

    def draw_circle(
        self, center: Point, radius: float, color: Color, alpha: int
    ) -> None: ...

    def draw_line(
        self, start: Point, end: Point, color: Color, alpha: int
    ) -> None: ...

    def draw_label(
        self, text: str, center: Point, bounds: tuple[float, float]
    ) -> None: ...


def _style(color: Color, alpha: int) -> str:
    """Rich style for *color* composited over a black background."""
    r, g, b = (int(channel * alpha / 255) for channel in color)
    return f"rgb({r},{g},{b})"


class TerminalCanvas:
    """Character-cell canvas fitted to a world-space viewport.

    Parameters
    ----------
    width, height:
        Canvas size in terminal cells.
    viewport:
        ``(min, max)`` world-space corners that must be visible.  The
        canvas keeps the aspect ratio and centers the viewport.
    """

    def __init__(
        self,
        width: int,
        height: int,
        viewport: tuple[Point, Point] = (Point(-200.0, -200.0), Point(200.0, 200.0)),
    ) -> None:
        self.width = max(width, 1)
        self.height = max(height, 1)
        self._chars = [[" "] * self.width for _ in range(self.height)]
        self._styles: list[list[str | None]] = [
            [None] * self.width for _ in range(self.height)
        ]

        low, high = viewport
        span_x = max(high.x - low.x, 1e-9)
        span_y = max(high.y - low.y, 1e-9)
        # Columns per world unit; a row covers CELL_ASPECT times more.
        self.scale = min(self.width / span_x, self.height * CELL_ASPECT / span_y)
        self._mid = Point((low.x + high.x) / 2.0, (low.y + high.y) / 2.0)

    # ------------------------------------------------------------------
    # Coordinates
    # ------------------------------------------------------------------

    def to_cell(self, point: Point) -> tuple[float, float]:
        """World point to fractional ``(column, row)``; rows grow downward."""
        col = self.width / 2.0 + (point.x - self._mid.x) * self.scale
        row = self.height / 2.0 - (point.y - self._mid.y) * self.scale / CELL_ASPECT
        return col, row

    def _put(self, col: int, row: int, char: str, style: str | None) -> None:
        if 0 <= col < self.width and 0 <= row < self.height:
            self._chars[row][col] = char
            self._styles[row][col] = style

    def char_at(self, col: int, row: int) -> str:
        return self._chars[row][col]

    # ------------------------------------------------------------------
    # Canvas protocol
    # ------------------------------------------------------------------

    def draw_circle(
        self, center: Point, radius: float, color: Color, alpha: int
    ) -> None:
        style = _style(color, alpha)
        col_c, row_c = self.to_cell(center)
        r_cols = radius * self.scale
        r_rows = r_cols / CELL_ASPECT

        if r_cols < 0.5 or r_rows < 0.5:
            self._put(int(col_c), int(row_c), DOT_CHAR, style)
            return

        top = max(0, math.floor(row_c - r_rows))
        bottom = min(self.height - 1, math.ceil(row_c + r_rows))
        left = max(0, math.floor(col_c - r_cols))
        right = min(self.width - 1, math.ceil(col_c + r_cols))
        for row in range(top, bottom + 1):
            dy = (row + 0.5 - row_c) / r_rows
            for col in range(left, right + 1):
                dx = (col + 0.5 - col_c) / r_cols
                if dx * dx + dy * dy <= 1.0:
                    self._put(col, row, FILL_CHAR, style)

    def draw_line(
        self, start: Point, end: Point, color: Color, alpha: int
    ) -> None:
        style = _style(color, alpha)
        x0, y0 = (int(v) for v in self.to_cell(start))
        x1, y1 = (int(v) for v in self.to_cell(end))

        # Bresenham
        dx, dy = abs(x1 - x0), -abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx + dy
        while True:
            self._put(x0, y0, LINE_CHAR, style)
            if x0 == x1 and y0 == y1:
                break
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                x0 += sx
            if e2 <= dx:
                err += dx
                y0 += sy

    def draw_label(
        self, text: str, center: Point, bounds: tuple[float, float]
    ) -> None:
        max_cols = min(int(bounds[0] * self.scale), self.width)
        if max_cols <= 0:
            return
        label = text[:max_cols]
        col_c, row_c = self.to_cell(center)
        start = int(col_c - len(label) / 2.0)
        row = int(row_c)
        for offset, char in enumerate(label):
            self._put(start + offset, row, char, "bold white")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_text(self) -> Text:
        """The canvas as Rich ``Text``, one line per row."""
        text = Text(no_wrap=True, overflow="crop")
        for row in range(self.height):
            chars, styles = self._chars[row], self._styles[row]
            run_start = 0
            for col in range(1, self.width + 1):
                if col == self.width or styles[col] != styles[run_start]:
                    text.append("".join(chars[run_start:col]), style=styles[run_start])
                    run_start = col
            if row < self.height - 1:
                text.append("\n")
        return text

    def to_plain(self) -> str:
        return "\n".join("".join(row) for row in self._chars)
