"""Vector path construction and signed-area coverage rasterization.

Paths are accumulated as a list of commands and rasterized in one pass. Each
line segment deposits its signed area into a flat per-pixel buffer; a running
sum across the buffer then yields the winding coverage of every pixel. The
final alpha is ``min(|coverage|, 1)``, so overlapping subpaths of opposite
direction cancel out (a rectangle with an inner, reversed rounded rectangle
produces a frame).

Conventions
- Coordinates are in pixels, origin top-left, y growing downward.
- A pixel ``(i, j)`` covers the square ``[i, i+1) x [j, j+1)``.
- Cubic Beziers are flattened into line segments; the segment count adapts to
  the curve's deviation from its chord.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np
from PIL import Image

Point = Tuple[float, float]

# Control point offset, as a fraction of the radius, for a quarter circle cubic.
CIRCLE_CONTROL_RATIO = 0.552

_FLATTEN_TOLERANCE = 3.0
_FLATTEN_MIN_DEVSQ = 0.333


@dataclass(frozen=True, slots=True)
class PathCommand:
    op: str  # "move" | "line" | "cube" | "close"
    points: Tuple[Point, ...] = ()


@dataclass
class Path:
    """Ordered list of path-construction commands."""

    commands: List[PathCommand] = field(default_factory=list)

    def move_to(self, x: float, y: float) -> "Path":
        self.commands.append(PathCommand("move", ((x, y),)))
        return self

    def line_to(self, x: float, y: float) -> "Path":
        self.commands.append(PathCommand("line", ((x, y),)))
        return self

    def cube_to(self, x1: float, y1: float, x2: float, y2: float, x: float, y: float) -> "Path":
        self.commands.append(PathCommand("cube", ((x1, y1), (x2, y2), (x, y))))
        return self

    def close_path(self) -> "Path":
        self.commands.append(PathCommand("close"))
        return self

    def __len__(self) -> int:
        return len(self.commands)


def rect(path: Path, x: float, y: float, width: float, height: float) -> Path:
    """Append a clockwise (screen space) rectangle subpath."""
    path.move_to(x, y)
    path.line_to(x + width, y)
    path.line_to(x + width, y + height)
    path.line_to(x, y + height)
    return path.close_path()


def rounded_rect(path: Path, x: float, y: float, width: float, height: float, r: float) -> Path:
    """Append a counter-clockwise (screen space) rounded rectangle subpath.

    Each corner is a single cubic using ``CIRCLE_CONTROL_RATIO * r`` as the
    control point offset.
    """
    ct = r * CIRCLE_CONTROL_RATIO
    path.move_to(x + r, y)
    path.cube_to(x + r - ct, y, x, y + r - ct, x, y + r)
    path.line_to(x, y + height - r)
    path.cube_to(x, y + height - r + ct, x + r - ct, y + height, x + r, y + height)
    path.line_to(x + width - r, y + height)
    path.cube_to(x + width - r + ct, y + height, x + width, y + height - r + ct, x + width, y + height - r)
    path.line_to(x + width, y + r)
    path.cube_to(x + width, y + r - ct, x + width - r + ct, y, x + width - r, y)
    return path.close_path()


def _lerp(t: float, p: Point, q: Point) -> Point:
    return (p[0] + t * (q[0] - p[0]), p[1] + t * (q[1] - p[1]))


def _dev_squared(a: Point, b: Point, c: Point) -> float:
    """Squared deviation of ``b`` from the midpoint of ``a`` and ``c`` (times 4)."""
    dx = a[0] - 2 * b[0] + c[0]
    dy = a[1] - 2 * b[1] + c[1]
    return dx * dx + dy * dy


class Rasterizer:
    """Accumulates path coverage for a ``width`` x ``height`` canvas."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Rasterizer size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self._area = np.zeros(self.width * self.height, dtype=np.float64)
        self._pen: Point = (0.0, 0.0)
        self._first: Point = (0.0, 0.0)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def fill(self, path: Path) -> None:
        """Accumulate the coverage of every subpath in ``path``."""
        for cmd in path.commands:
            if cmd.op == "move":
                self._close()
                self._pen = self._first = cmd.points[0]
            elif cmd.op == "line":
                self._line_to(cmd.points[0])
            elif cmd.op == "cube":
                self._cube_to(*cmd.points)
            elif cmd.op == "close":
                self._close()
            else:
                raise ValueError(f"Unknown path command: {cmd.op!r}")
        self._close()

    def mask(self) -> Image.Image:
        """Return accumulated coverage as an 8-bit alpha mask."""
        coverage = np.minimum(np.abs(np.cumsum(self._area)), 1.0)
        alpha = np.floor(coverage * 255.0 + 0.5).astype(np.uint8)
        return Image.fromarray(alpha.reshape(self.height, self.width))

    def draw(self, dst: Image.Image, color: Tuple[int, int, int]) -> None:
        """Composite a solid ``color`` onto ``dst`` through the coverage mask."""
        if dst.size != self.size:
            raise ValueError(f"Destination size {dst.size} does not match rasterizer {self.size}")
        layer = Image.new("RGBA", self.size, tuple(color) + (255,))
        layer.putalpha(self.mask())
        dst.alpha_composite(layer)

    # -------- internals --------

    def _close(self) -> None:
        if self._pen != self._first:
            self._line_to(self._first)

    def _cube_to(self, b: Point, c: Point, d: Point) -> None:
        a = self._pen
        devsq = max(_dev_squared(a, b, d), _dev_squared(a, c, d))
        if devsq >= _FLATTEN_MIN_DEVSQ:
            n = 1 + int(math.sqrt(math.sqrt(_FLATTEN_TOLERANCE * devsq)))
            step = 1.0 / n
            t = 0.0
            for _ in range(n - 1):
                t += step
                ab, bc, cd = _lerp(t, a, b), _lerp(t, b, c), _lerp(t, c, d)
                abc, bcd = _lerp(t, ab, bc), _lerp(t, bc, cd)
                self._line_to(_lerp(t, abc, bcd))
        self._line_to(d)

    def _add(self, row_start: int, col: int, value: float) -> None:
        # Columns clamp to [0, width]; column ``width`` spills into the next row
        # so the running sum returns to zero at the end of each scanline.
        col = 0 if col < 0 else min(col, self.width)
        idx = row_start + col
        if idx < self._area.size:
            self._area[idx] += value

    def _line_to(self, b: Point) -> None:
        a = self._pen
        self._pen = b
        direction = 1.0
        if a[1] > b[1]:
            direction = -1.0
            a, b = b, a
        ax, ay = a
        bx, by = b
        if by - ay <= 1e-6:
            return
        dxdy = (bx - ax) / (by - ay)

        x = ax
        y = int(math.floor(ay))
        y_max = min(int(math.ceil(by)), self.height)
        width = self.width
        while y < y_max:
            dy = min(y + 1.0, by) - max(float(y), ay)
            x_next = x + dy * dxdy
            if y < 0:
                x = x_next
                y += 1
                continue
            row = y * width
            d = dy * direction
            x0, x1 = (x, x_next) if x <= x_next else (x_next, x)
            x0i = int(math.floor(x0))
            x0_floor = float(x0i)
            x1i = int(math.ceil(x1))
            x1_ceil = float(x1i)

            if x1i <= x0i + 1:
                xmf = 0.5 * (x + x_next) - x0_floor
                self._add(row, x0i, d - d * xmf)
                self._add(row, x0i + 1, d * xmf)
            else:
                s = 1.0 / (x1 - x0)
                x0f = x0 - x0_floor
                one_minus_x0f = 1.0 - x0f
                a0 = 0.5 * s * one_minus_x0f * one_minus_x0f
                x1f = x1 - x1_ceil + 1.0
                am = 0.5 * s * x1f * x1f
                self._add(row, x0i, d * a0)
                if x1i == x0i + 2:
                    self._add(row, x0i + 1, d * (1.0 - a0 - am))
                else:
                    a1 = s * (1.5 - x0f)
                    self._add(row, x0i + 1, d * (a1 - a0))
                    d_times_s = d * s
                    for xi in range(x0i + 2, x1i - 1):
                        self._add(row, xi, d_times_s)
                    a2 = a1 + s * float(x1i - x0i - 3)
                    self._add(row, x1i - 1, d * (1.0 - a2 - am))
                self._add(row, x1i, d * am)
            x = x_next
            y += 1
