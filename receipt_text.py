"""
Text measurement, wrapping and placement for the receipt

Widths come from reportlab's font metrics so wrapping matches exactly what
the canvas will draw. Everything is measured in millimetres.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import List, Optional, Union

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from receipt_errors import RenderError
from receipt_layout import PageGeometry, Region
from receipt_theme import Theme


@dataclass(frozen=True)
class Font:
    """Standard PDF font name and size in points"""
    name: str = 'Helvetica'
    size: float = 11


def text_width(text: str, font: Font) -> float:
    """Width of a single line in millimetres"""
    return stringWidth(text, font.name, font.size) / mm


def wrap_text(text: str, max_width: float, font: Font) -> List[str]:
    """
    Word-wrap text so every line fits max_width.

    Breaks only at whitespace. Explicit newlines start a new paragraph and a
    blank paragraph is kept as an empty line. A single word wider than
    max_width is placed on its own line as-is.

    Args:
        text: Text to wrap
        max_width: Available width in mm
        font: Font used for measurement

    Returns:
        Ordered list of lines (never empty)
    """
    if max_width < 0:
        raise RenderError(f"Negative wrap width: {max_width}")

    lines: List[str] = []
    for paragraph in text.split('\n'):
        words = paragraph.split()
        if not words:
            lines.append('')
            continue

        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if text_width(candidate, font) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)

    return lines or ['']


def centered_baselines(count: int, box: Region, line_height: float) -> List[float]:
    """Baselines that vertically center `count` lines inside box."""
    offset = (box.height - count * line_height) / 2
    return [box.top + offset + (i + 1) * line_height for i in range(count)]


def format_amount(amount: Union[Decimal, float, int, str]) -> str:
    """Two fractional digits, half-up rounding, no grouping: 0.999 -> '1.00'"""
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    # Precision must cover every integer digit plus the two decimals
    with localcontext() as ctx:
        ctx.prec = max(28, value.adjusted() + 3)
        return str(value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def format_receipt_date(d: date) -> str:
    """US long date, e.g. 'January 15, 2025'"""
    return f"{d:%B} {d.day}, {d.year}"


class TextBlockRenderer:
    """Draw single lines and vertically centered blocks of text"""

    def __init__(self, c: canvas.Canvas, page: PageGeometry, theme: Theme):
        self.c = c
        self.page = page
        self.theme = theme

    def measure(self, text: str, max_width: float, font: Font) -> List[str]:
        return wrap_text(text, max_width, font)

    def text_width(self, text: str, font: Font) -> float:
        return text_width(text, font)

    def draw_line(self, text: str, x: float, y: float, font: Font,
                  color: str, align: str = 'left'):
        """Draw one line with its baseline at (x, y) in page mm"""
        self.c.setFont(font.name, font.size)
        self.c.setFillColor(self.theme.color(color))
        px, py = self.page.point(x, y)
        if align == 'right':
            self.c.drawRightString(px, py, text)
        elif align == 'center':
            self.c.drawCentredString(px, py, text)
        elif align == 'left':
            self.c.drawString(px, py, text)
        else:
            raise RenderError(f"Unknown text alignment: {align!r}")

    def draw_centered(self, lines: List[str], box: Region, line_height: float,
                      font: Font, color: str, x: Optional[float] = None,
                      align: str = 'center') -> List[float]:
        """
        Draw lines vertically centered inside box.

        Returns:
            Baselines used for each line (page mm)
        """
        if x is None:
            x = {'left': box.x, 'right': box.right}.get(align, box.center[0])

        baselines = centered_baselines(len(lines), box, line_height)
        for line, baseline in zip(lines, baselines):
            if line:
                self.draw_line(line, x, baseline, font, color, align)
        return baselines
