"""
Opacity state and shape drawing on the receipt canvas
"""

from contextlib import contextmanager
from typing import Iterator, List

from reportlab.pdfgen import canvas

from receipt_layout import PageGeometry, Point, Region
from receipt_theme import Theme
from receipt_errors import RenderError


class GraphicsStateStack:
    """Scoped opacity presets over a reportlab canvas.

    The bottom of the stack is always the theme's 'full' opacity. Each
    with_opacity() block pushes a preset and applies it to both fill and
    stroke alpha; leaving the block (normally or by exception) pops it and
    re-applies whatever was active before.
    """

    def __init__(self, c: canvas.Canvas, theme: Theme):
        self.c = c
        self.theme = theme
        self._stack: List[float] = [theme.opacity('full')]

    @property
    def current(self) -> float:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack)

    def _apply(self, alpha: float):
        self.c.setFillAlpha(alpha)
        self.c.setStrokeAlpha(alpha)

    @contextmanager
    def with_opacity(self, preset: str) -> Iterator[canvas.Canvas]:
        alpha = self.theme.opacity(preset)
        self._stack.append(alpha)
        self._apply(alpha)
        try:
            yield self.c
        finally:
            self._stack.pop()
            self._apply(self._stack[-1])


class ShapeRenderer:
    """Fills and strokes basic shapes using theme color tokens"""

    def __init__(self, c: canvas.Canvas, page: PageGeometry, theme: Theme):
        self.c = c
        self.page = page
        self.theme = theme

    def filled_rect(self, region: Region, token: str):
        self.c.setFillColor(self.theme.color(token))
        self.c.rect(*self.page.rect(region), stroke=0, fill=1)

    def filled_rounded_rect(self, region: Region, token: str, corner_radius: float):
        _check_non_negative('corner radius', corner_radius)
        self.c.setFillColor(self.theme.color(token))
        self.c.roundRect(*self.page.rect(region), self.page.length(corner_radius), stroke=0, fill=1)

    def filled_circle(self, center: Point, radius: float, token: str):
        _check_non_negative('radius', radius)
        self.c.setFillColor(self.theme.color(token))
        x, y = self.page.point(*center)
        self.c.circle(x, y, self.page.length(radius), stroke=0, fill=1)

    def stroked_circle(self, center: Point, radius: float, token: str, line_width: float = 0.3):
        _check_non_negative('radius', radius)
        self.c.setStrokeColor(self.theme.color(token))
        self.c.setLineWidth(self.page.length(line_width))
        x, y = self.page.point(*center)
        self.c.circle(x, y, self.page.length(radius), stroke=1, fill=0)

    def line(self, start: Point, end: Point, token: str, line_width: float = 0.5):
        self.c.setStrokeColor(self.theme.color(token))
        self.c.setLineWidth(self.page.length(line_width))
        x1, y1 = self.page.point(*start)
        x2, y2 = self.page.point(*end)
        self.c.line(x1, y1, x2, y2)


def _check_non_negative(what: str, value: float):
    if value < 0:
        raise RenderError(f"Negative {what}: {value}")
