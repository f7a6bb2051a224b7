"""
Theme catalog for the receipt

Maps semantic color tokens and opacity preset names to concrete values.
A Theme is built once per render and never mutated.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple

from reportlab.lib.colors import Color

from receipt_constants import COLORS, OPACITY
from receipt_errors import RenderError

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class Theme:
    """Immutable palette + opacity presets"""

    colors: Mapping[str, RGB] = field(default_factory=lambda: MappingProxyType(dict(COLORS)))
    opacities: Mapping[str, float] = field(default_factory=lambda: MappingProxyType(dict(OPACITY)))

    def rgb(self, token: str) -> RGB:
        try:
            return self.colors[token]
        except KeyError:
            raise RenderError(f"Unknown color token: {token!r}") from None

    def color(self, token: str) -> Color:
        """reportlab Color for a semantic token"""
        r, g, b = self.rgb(token)
        return Color(r / 255.0, g / 255.0, b / 255.0)

    def opacity(self, preset: str) -> float:
        try:
            return self.opacities[preset]
        except KeyError:
            raise RenderError(f"Unknown opacity preset: {preset!r}") from None


def default_theme() -> Theme:
    """Build the receipt theme from the module-level palette."""
    return Theme()
