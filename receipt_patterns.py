"""
Decorative patterns: header waves and the footer mandala

Geometry is produced by pure functions of position and count so the same
arguments always yield the same strokes. DecorativePatternGenerator only
feeds that geometry to the ShapeRenderer.
"""

import math
from typing import List, Tuple

from receipt_errors import RenderError
from receipt_graphics import ShapeRenderer
from receipt_layout import Point

Segment = Tuple[Point, Point]

WAVE_FREQUENCY = 0.5
MANDALA_RINGS = 3
MANDALA_RAYS = 8
MANDALA_RAY_SCALE = 1.5


def wave_points(y_base: float, amplitude: float, segments: int, width: float) -> List[Point]:
    """Segment boundaries of one wave: y_j = y_base + amplitude * sin(j * 0.5)"""
    if segments < 1:
        raise RenderError(f"Wave needs at least one segment, got {segments}")
    step = width / segments
    return [
        (step * j, y_base + amplitude * math.sin(j * WAVE_FREQUENCY))
        for j in range(segments + 1)
    ]


def wave_segments(y_base: float, amplitude: float, segments: int, width: float) -> List[Segment]:
    points = wave_points(y_base, amplitude, segments, width)
    return list(zip(points[:-1], points[1:]))


def mandala_geometry(center: Point, base_radius: float) -> Tuple[List[float], List[Segment]]:
    """
    Concentric ring radii and radiating rays of the mandala motif.

    Returns:
        (radii, rays) where radii are base, base-1, base-2 and rays are
        eight lines from center at 45 degree steps, 1.5 x base long
    """
    if base_radius < MANDALA_RINGS - 1:
        raise RenderError(f"Mandala radius too small: {base_radius}")

    cx, cy = center
    radii = [base_radius - i for i in range(MANDALA_RINGS)]
    reach = base_radius * MANDALA_RAY_SCALE
    rays = []
    for i in range(MANDALA_RAYS):
        angle = i * math.pi / 4
        rays.append((center, (cx + math.cos(angle) * reach, cy + math.sin(angle) * reach)))
    return radii, rays


class DecorativePatternGenerator:
    """Draw waves and mandalas through a ShapeRenderer"""

    def __init__(self, shapes: ShapeRenderer):
        self.shapes = shapes

    def wave_pattern(self, y_base: float, amplitude: float, segments: int,
                     stroke_token: str, width: float, line_width: float = 0.5):
        for start, end in wave_segments(y_base, amplitude, segments, width):
            self.shapes.line(start, end, stroke_token, line_width)

    def wave_band(self, first_y: float, rows: int, spacing: float, amplitude: float,
                  segments: int, stroke_token: str, width: float, line_width: float = 0.5):
        """Stack of identical waves, `spacing` mm apart"""
        for i in range(rows):
            self.wave_pattern(first_y + i * spacing, amplitude, segments,
                              stroke_token, width, line_width)

    def mandala(self, center: Point, base_radius: float, stroke_token: str,
                line_width: float = 0.3):
        radii, rays = mandala_geometry(center, base_radius)
        for radius in radii:
            self.shapes.stroked_circle(center, radius, stroke_token, line_width)
        for start, end in rays:
            self.shapes.line(start, end, stroke_token, line_width)
