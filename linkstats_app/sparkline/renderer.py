"""
Sparkline rendering.

A sparkline is drawn onto a DrawingSurface, a minimal 2D path API
(clear, begin path, move, line, stroke). SvgSurface is the surface the
dashboard uses; tests can pass any other implementation.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from markupsafe import escape

DEFAULT_WIDTH = 100
DEFAULT_HEIGHT = 30
DEFAULT_COLOR = "#0EA5E9"
DEFAULT_LINE_WIDTH = 1.5

Point = Tuple[float, float]


class DrawingSurface(ABC):
    """
    Abstract 2D drawing surface.

    Mirrors the small subset of a canvas context a sparkline needs.
    """

    stroke_style: str = "#000000"
    line_width: float = 1.0

    @abstractmethod
    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:
        pass

    @abstractmethod
    def begin_path(self) -> None:
        pass

    @abstractmethod
    def move_to(self, x: float, y: float) -> None:
        pass

    @abstractmethod
    def line_to(self, x: float, y: float) -> None:
        pass

    @abstractmethod
    def stroke(self) -> None:
        pass


class SvgSurface(DrawingSurface):
    """
    Surface that records stroked paths and serialises them as inline SVG.
    """

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT):
        self.width = width
        self.height = height
        self.stroke_style = DEFAULT_COLOR
        self.line_width = DEFAULT_LINE_WIDTH
        self._current: List[str] = []
        self._paths: List[Tuple[str, str, float]] = []

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:
        # The surface only holds strokes, so any clear wipes all of them
        self._paths.clear()
        self._current = []

    def begin_path(self) -> None:
        self._current = []

    def move_to(self, x: float, y: float) -> None:
        self._current.append(f"M{x:.2f},{y:.2f}")

    def line_to(self, x: float, y: float) -> None:
        self._current.append(f"L{x:.2f},{y:.2f}")

    def stroke(self) -> None:
        if self._current:
            self._paths.append((" ".join(self._current), self.stroke_style, self.line_width))

    def to_svg(self) -> str:
        paths = "".join(
            f'<path d="{d}" fill="none" stroke="{escape(color)}" stroke-width="{width}" '
            f'stroke-linejoin="round" stroke-linecap="round" />'
            for d, color, width in self._paths
        )
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.width}" '
            f'height="{self.height}" viewBox="0 0 {self.width} {self.height}" '
            f'class="sparkline">{paths}</svg>'
        )


def compute_points(data: Sequence[float], width: float, height: float) -> List[Point]:
    """
    Map a sequence onto the drawing area.

    x runs linearly from 0 to width across the indices; y runs from height
    (minimum value) to 0 (maximum value). A constant sequence maps every
    point to mid-height. Fewer than two values produce no points.
    """
    if len(data) < 2:
        return []

    low = min(data)
    high = max(data)
    span = high - low
    x_step = width / (len(data) - 1)

    points = []
    for index, value in enumerate(data):
        x = index * x_step
        y = height - (value - low) * height / span if span else height / 2
        points.append((x, y))
    return points


def render_sparkline(
    surface: DrawingSurface,
    data: Sequence[float],
    width: float = DEFAULT_WIDTH,
    height: float = DEFAULT_HEIGHT,
    color: str = DEFAULT_COLOR,
    line_width: float = DEFAULT_LINE_WIDTH,
) -> None:
    """
    Draw data as a single stroked polyline.

    Nothing is drawn, not even a clear, when data has fewer than two values.
    """
    points = compute_points(data, width, height)
    if not points:
        return

    surface.clear_rect(0, 0, width, height)
    surface.begin_path()
    surface.stroke_style = color
    surface.line_width = line_width

    first_x, first_y = points[0]
    surface.move_to(first_x, first_y)
    for x, y in points[1:]:
        surface.line_to(x, y)

    surface.stroke()


def sparkline_svg(
    data: Sequence[float],
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    color: str = DEFAULT_COLOR,
) -> str:
    """Render data to an inline SVG string (an empty svg for short data)"""
    surface = SvgSurface(width=width, height=height)
    render_sparkline(surface, data, width=width, height=height, color=color)
    return surface.to_svg()
