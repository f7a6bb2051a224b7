"""
Layout primitives for the receipt page

All receipt geometry is expressed in millimetres with y growing downward from
the top edge. PageGeometry is the only place that converts to reportlab's
bottom-up point coordinates.
"""

from dataclasses import dataclass
from typing import Tuple

from reportlab.lib.units import mm

from receipt_constants import PAGE_HEIGHT, PAGE_WIDTH
from receipt_errors import RenderError

Point = Tuple[float, float]


@dataclass(frozen=True)
class Region:
    """Rectangle a section occupies: origin is the top-left corner"""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise RenderError(
                f"Region has negative size ({self.width:.2f} x {self.height:.2f})"
            )

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True)
class PageGeometry:
    """Page size in millimetres + conversion into canvas points"""

    width: float = PAGE_WIDTH
    height: float = PAGE_HEIGHT

    @property
    def pagesize(self) -> Tuple[float, float]:
        return (self.width * mm, self.height * mm)

    def length(self, value: float) -> float:
        return value * mm

    def point(self, x: float, y: float) -> Point:
        """Convert a top-down mm point into canvas points"""
        return (x * mm, (self.height - y) * mm)

    def rect(self, region: Region) -> Tuple[float, float, float, float]:
        """Convert a region into reportlab (x, y, width, height)"""
        return (
            region.x * mm,
            (self.height - region.bottom) * mm,
            region.width * mm,
            region.height * mm,
        )


class LayoutCursor:
    """Tracks the next free vertical offset on the page.

    Sections ask for current_y() as their origin and advance the cursor by
    their own measured height plus the gap mandated before the next section.
    The cursor never moves upward, so section N+1 cannot start above the
    bottom of section N.
    """

    def __init__(self, start: float = 0.0):
        if start < 0:
            raise RenderError(f"Layout cursor cannot start above the page: {start}")
        self._y = float(start)

    def current_y(self) -> float:
        return self._y

    def advance(self, section_height: float, gap: float = 0.0) -> float:
        if section_height < 0 or gap < 0:
            raise RenderError(
                f"Layout cursor cannot move upward (height={section_height}, gap={gap})"
            )
        self._y += section_height + gap
        return self._y
