"""
PDF Receipt Renderer

Renders the single-page yoga payment receipt with ReportLab.

Sections are drawn in a fixed order, each one taking its origin from a shared
LayoutCursor and advancing it by its own measured height, so variable-height
content (long names, wrapped text) pushes later sections down instead of
overlapping them.
"""

import hashlib
import logging
import re
import unicodedata
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from io import BytesIO
from typing import Callable, Dict, List, Optional, Union

from reportlab.pdfgen import canvas

from receipt_assets import AssetResolver, ReceiptAssets
from receipt_config import ReceiptConfig
from receipt_constants import (
    ARTIFACT_PREFIX, AUTH_BOTTOM_PADDING, AUTH_CREDENTIALS_OFFSET, AUTH_LINE_HEIGHT,
    AUTH_NAME_OFFSET, AUTH_PANEL_MIN_HEIGHT, AUTH_PANEL_OFFSET, AUTH_TITLE_OFFSET,
    DATE_BOX_HEIGHT, DATE_BOX_OFFSET, DATE_BOX_RADIUS, DATE_RIGHT_SPACING,
    FOOTER_HEIGHT, FOOTER_LINE_HEIGHT, FOOTER_SPACING, FOOTER_TEXT, FOOTER_TEXT_SHIFT,
    GAP_AFTER_HEADER, GAP_AFTER_INFO, GAP_AFTER_TABLE, GAP_AFTER_THANK_YOU,
    HEADER_BAND_HEIGHT, HEADER_RULE_Y, HEADER_TITLE_BASELINE,
    INFO_BOTTOM_PADDING, INFO_LINE_HEIGHT, INFO_TITLE_OFFSET,
    INNER_MARGIN, INSTRUCTOR_CREDENTIALS, INSTRUCTOR_NAME,
    LOGO_CENTER, LOGO_RADIUS, MANDALA_CENTER_X, MANDALA_OFFSET_Y, MANDALA_RADIUS,
    ORGANIZATION_NAME, OUTER_MARGIN, PAGE_CORNER_RADIUS, PANEL_CORNER_RADIUS,
    PAYMENT_PANEL_OFFSET, PAYMENT_PANEL_PADDING, PAYMENT_TITLE_OFFSET,
    SERVICE_LABEL, SIGNATURE_RIGHT_OFFSET, SIGNATURE_SIZE, SIGNATURE_TOP_OFFSET,
    TABLE_AMOUNT_COLUMN, TABLE_HEADER_HEIGHT, TABLE_INDENT, TABLE_ROW_HEIGHT,
    THANK_YOU_LINE_HEIGHT, THANK_YOU_MESSAGE, THANK_YOU_MIN_HEIGHT,
    WAVE_AMPLITUDE, WAVE_FIRST_Y, WAVE_ROWS, WAVE_ROW_SPACING, WAVE_SEGMENTS,
    WORDMARK_ORIGIN, WORDMARK_SIZE,
)
from receipt_errors import InputError, ReceiptError, RenderError
from receipt_graphics import GraphicsStateStack, ShapeRenderer
from receipt_images import ImageEmbedder
from receipt_layout import LayoutCursor, PageGeometry, Region
from receipt_patterns import DecorativePatternGenerator
from receipt_text import Font, TextBlockRenderer, format_amount, format_receipt_date
from receipt_theme import Theme, default_theme

logger = logging.getLogger(__name__)

# Fonts (ReportLab standard Type 1 faces)
TITLE_FONT = Font('Helvetica-Bold', 24)
HEADING_FONT = Font('Helvetica-Bold', 14)
BODY_FONT = Font('Helvetica', 12)
TABLE_HEADER_FONT = Font('Helvetica-Bold', 11)
TABLE_BODY_FONT = Font('Helvetica', 11)
THANK_YOU_FONT = Font('Helvetica-Oblique', 11)
INSTRUCTOR_FONT = Font('Helvetica-Bold', 12)
SMALL_FONT = Font('Helvetica', 10)


@dataclass(frozen=True)
class ReceiptInput:
    """Validated receipt input. Amount is normalized to Decimal."""
    name: str
    amount: Decimal

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InputError("Receipt name must be non-empty text")

        try:
            amount = self.amount if isinstance(self.amount, Decimal) else Decimal(str(self.amount))
        except (InvalidOperation, ValueError) as e:
            raise InputError(f"Receipt amount is not a number: {self.amount!r}") from e
        if not amount.is_finite() or amount <= 0:
            raise InputError(f"Receipt amount must be positive, got {self.amount!r}")
        object.__setattr__(self, 'amount', amount)


@dataclass
class ReceiptArtifact:
    """Finished PDF bytes plus the suggested file name"""
    content: bytes
    filename: str

    def buffer(self) -> BytesIO:
        """Fresh BytesIO positioned at the start of the PDF"""
        buf = BytesIO(self.content)
        buf.seek(0)
        return buf


@dataclass(frozen=True)
class PlacedSection:
    """Where a section landed and the gap mandated after it"""
    name: str
    region: Region
    gap_after: float = 0.0


class ComposerState(Enum):
    INITIALIZED = 'initialized'
    BACKGROUND_DRAWN = 'background_drawn'
    HEADER_DRAWN = 'header_drawn'
    INFO_DRAWN = 'info_drawn'
    TABLE_DRAWN = 'table_drawn'
    THANK_YOU_DRAWN = 'thank_you_drawn'
    AUTHORIZATION_DRAWN = 'authorization_drawn'
    FOOTER_DRAWN = 'footer_drawn'
    FINALIZED = 'finalized'
    FAILED = 'failed'


# Fixed drawing order: each state can only be reached from the one before it
SECTION_ORDER = [
    ComposerState.BACKGROUND_DRAWN,
    ComposerState.HEADER_DRAWN,
    ComposerState.INFO_DRAWN,
    ComposerState.TABLE_DRAWN,
    ComposerState.THANK_YOU_DRAWN,
    ComposerState.AUTHORIZATION_DRAWN,
    ComposerState.FOOTER_DRAWN,
]
_PREDECESSOR = dict(zip(SECTION_ORDER, [ComposerState.INITIALIZED] + SECTION_ORDER[:-1]))


def build_artifact_name(name: str, extension: str = 'pdf') -> str:
    """
    Suggested file name for a receipt: yoga_receipt_<name>.<extension>

    The name is reduced to letters and digits of any script (with their
    combining marks), '_' and '-', spaces becoming '_', so 'José García'
    keeps its accents while separators and reserved characters such as
    '/', ':' or '*' are dropped. Names with nothing usable left fall back
    to a short digest of the original.
    """
    safe = re.sub(r'\s+', '_', unicodedata.normalize('NFC', name.strip()))
    safe = ''.join(ch for ch in safe if ch in '_-' or unicodedata.category(ch)[0] in 'LMN')
    safe = safe.strip('_-')
    if not safe:
        safe = hashlib.sha1(name.encode('utf-8')).hexdigest()[:12]
    return f"{ARTIFACT_PREFIX}{safe}.{extension}"


class PDFReceiptRenderer:
    """Render one payment receipt as a single-page A4 PDF.

    An instance renders exactly one document: after generate() it is either
    FINALIZED or FAILED and cannot be reused.
    """

    def __init__(
        self,
        data: ReceiptInput,
        assets: ReceiptAssets,
        config: Optional[ReceiptConfig] = None,
        issue_date: Optional[date] = None,
        resolver: Optional[AssetResolver] = None,
        theme: Optional[Theme] = None,
    ):
        self.data = data
        self.assets = assets
        self.config = config or ReceiptConfig()
        self.issue_date = issue_date or date.today()
        self.resolver = resolver or AssetResolver(timeout=self.config.asset_timeout)
        self.theme = theme or default_theme()
        self.page = PageGeometry()

        self.state = ComposerState.INITIALIZED
        self.cursor = LayoutCursor()
        self.sections: List[PlacedSection] = []

        self.buffer: Optional[BytesIO] = None
        self.c: Optional[canvas.Canvas] = None
        self.opacity: Optional[GraphicsStateStack] = None
        self.shapes: Optional[ShapeRenderer] = None
        self.text: Optional[TextBlockRenderer] = None
        self.images: Optional[ImageEmbedder] = None
        self.patterns: Optional[DecorativePatternGenerator] = None

        self._section_renderers: Dict[ComposerState, Callable[[], None]] = {
            ComposerState.BACKGROUND_DRAWN: self._draw_background,
            ComposerState.HEADER_DRAWN: self._draw_header,
            ComposerState.INFO_DRAWN: self._draw_client_info,
            ComposerState.TABLE_DRAWN: self._draw_payment_table,
            ComposerState.THANK_YOU_DRAWN: self._draw_thank_you,
            ComposerState.AUTHORIZATION_DRAWN: self._draw_authorization,
            ComposerState.FOOTER_DRAWN: self._draw_footer,
        }

    @property
    def content_width(self) -> float:
        return self.page.width - 2 * OUTER_MARGIN

    def generate(self) -> ReceiptArtifact:
        """Compose every section and return the finished PDF"""
        if self.state is not ComposerState.INITIALIZED:
            raise RenderError(f"Receipt renderer is single-use (state: {self.state.value})")

        try:
            logger.info(f"Rendering receipt dated {self.issue_date.isoformat()} "
                        f"({format_amount(self.data.amount)})")
            self._open_canvas()
            for target in SECTION_ORDER:
                self.draw_section(target)
            artifact = self._finalize()
        except ReceiptError as e:
            self._fail(e)
            raise
        except Exception as e:
            self._fail(e)
            raise RenderError(f"Receipt rendering failed: {e}") from e

        logger.info(f"Rendered {artifact.filename} ({len(artifact.content)} bytes)")
        return artifact

    def draw_section(self, target: ComposerState):
        """Run the section that moves the renderer into `target`."""
        try:
            expected = _PREDECESSOR.get(target)
            if expected is None or self.state is not expected:
                raise RenderError(f"Cannot draw {target.value} from state {self.state.value}")
            if self.c is None:
                raise RenderError("Canvas is not open")

            depth = self.opacity.depth
            self._section_renderers[target]()
            if self.opacity.depth != depth:
                raise RenderError(f"Opacity state leaked out of {target.value}")
        except Exception as e:
            self._fail(e)
            raise

        self.state = target
        logger.debug(f"Section done: {target.value} (cursor at {self.cursor.current_y():.1f}mm)")

    # =========================================================================
    # Lifecycle helpers
    # =========================================================================

    def _open_canvas(self):
        self.buffer = BytesIO()
        self.c = canvas.Canvas(
            self.buffer,
            pagesize=self.page.pagesize,
            invariant=1,
            pageCompression=1 if self.config.page_compression else 0,
        )
        self.c.setTitle(f"Receipt - {self.data.name}")
        self.c.setAuthor(ORGANIZATION_NAME)
        self.c.setSubject("Payment receipt")

        self.opacity = GraphicsStateStack(self.c, self.theme)
        self.shapes = ShapeRenderer(self.c, self.page, self.theme)
        self.text = TextBlockRenderer(self.c, self.page, self.theme)
        self.images = ImageEmbedder(self.c, self.page, self.shapes, self.opacity,
                                    self.resolver, clip=self.config.clip_images)
        self.patterns = DecorativePatternGenerator(self.shapes)

    def _finalize(self) -> ReceiptArtifact:
        if self.state is not SECTION_ORDER[-1]:
            raise RenderError(f"Cannot finalize from state {self.state.value}")

        self.c.showPage()
        self.c.save()
        content = self.buffer.getvalue()
        self.buffer.close()
        self.state = ComposerState.FINALIZED
        return ReceiptArtifact(content=content, filename=build_artifact_name(self.data.name))

    def _fail(self, error: Exception):
        if self.state is not ComposerState.FAILED:
            logger.error(f"Receipt rendering failed in state {self.state.value}: {error}")
        self.state = ComposerState.FAILED
        if self.buffer is not None:
            self.buffer.close()
        self.buffer = None
        self.c = None

    def _place(self, name: str, region: Region, gap_after: float = 0.0):
        """Record a section and move the cursor past it"""
        if region.top < self.cursor.current_y():
            raise RenderError(f"Section {name} starts above the layout cursor")
        self.sections.append(PlacedSection(name, region, gap_after))
        self.cursor.advance(region.bottom - self.cursor.current_y(), gap_after)

    # =========================================================================
    # Sections
    # =========================================================================

    def _draw_background(self):
        """Cream page with a faint background texture"""
        page_region = Region(0, 0, self.page.width, self.page.height)
        self.shapes.filled_rounded_rect(page_region, 'softCream', PAGE_CORNER_RADIUS)
        self.images.embed(self.assets.background, page_region, 'background', preset='low')

    def _draw_header(self):
        """Sage band with waves, logo, title, plus the date box below it"""
        top = self.cursor.current_y()
        width = self.page.width

        self.shapes.filled_rect(Region(0, top, width, HEADER_BAND_HEIGHT), 'sage')

        if self.assets.wordmark is not None:
            wx, wy = WORDMARK_ORIGIN
            self.images.embed(self.assets.wordmark,
                              Region(wx, top + wy, *WORDMARK_SIZE), 'wordmark')

        self.patterns.wave_band(
            first_y=top + WAVE_FIRST_Y,
            rows=WAVE_ROWS,
            spacing=WAVE_ROW_SPACING,
            amplitude=WAVE_AMPLITUDE,
            segments=WAVE_SEGMENTS,
            stroke_token='sand',
            width=width,
        )

        logo_x, logo_y = LOGO_CENTER
        self.images.embed_circular(self.assets.logo, (logo_x, top + logo_y), LOGO_RADIUS, 'logo')

        self.text.draw_line("Receipt", width - OUTER_MARGIN, top + HEADER_TITLE_BASELINE,
                            TITLE_FONT, 'softCream', align='right')
        self.shapes.line((width / 2, top + HEADER_RULE_Y),
                         (width - OUTER_MARGIN, top + HEADER_RULE_Y), 'sand', 0.7)

        # Date box
        box_top = top + HEADER_BAND_HEIGHT + DATE_BOX_OFFSET
        date_box = Region(width / 2, box_top, width / 2 - OUTER_MARGIN, DATE_BOX_HEIGHT)
        self.shapes.filled_rounded_rect(date_box, 'sand', DATE_BOX_RADIUS)
        self.text.draw_line(
            f"Date: {format_receipt_date(self.issue_date)}",
            width - OUTER_MARGIN - DATE_RIGHT_SPACING,
            box_top + DATE_BOX_HEIGHT / 2 + 1,
            SMALL_FONT, 'deepTeal', align='right',
        )

        self._place('header', Region(0, top, width, date_box.bottom - top), GAP_AFTER_HEADER)

    def _draw_client_info(self):
        top = self.cursor.current_y()

        self.text.draw_line("Client Information", OUTER_MARGIN, top + INFO_TITLE_OFFSET,
                            HEADING_FONT, 'deepTeal')

        lines = self.text.measure(f"Name: {self.data.name}", self.content_width, BODY_FONT)
        for i, line in enumerate(lines):
            self.text.draw_line(line, OUTER_MARGIN,
                                top + INFO_TITLE_OFFSET + (i + 1) * INFO_LINE_HEIGHT,
                                BODY_FONT, 'deepTeal')

        height = INFO_TITLE_OFFSET + len(lines) * INFO_LINE_HEIGHT + INFO_BOTTOM_PADDING
        self._place('client_info', Region(OUTER_MARGIN, top, self.content_width, height),
                    GAP_AFTER_INFO)

    def _draw_payment_table(self):
        """Terracotta panel holding the Service / Amount table"""
        top = self.cursor.current_y()
        rows = [(SERVICE_LABEL, format_amount(self.data.amount))]

        self.text.draw_line("Payment Details", OUTER_MARGIN, top + PAYMENT_TITLE_OFFSET,
                            HEADING_FONT, 'deepTeal')

        panel_top = top + PAYMENT_PANEL_OFFSET
        table_top = panel_top + PAYMENT_PANEL_PADDING
        table_height = TABLE_HEADER_HEIGHT + len(rows) * TABLE_ROW_HEIGHT
        panel = Region(OUTER_MARGIN, panel_top, self.content_width,
                       table_height + 2 * PAYMENT_PANEL_PADDING)

        with self.opacity.with_opacity('low'):
            self.shapes.filled_rounded_rect(panel, 'terracotta', PANEL_CORNER_RADIUS)

        table_x = OUTER_MARGIN + TABLE_INDENT
        table_width = self.content_width - 2 * TABLE_INDENT
        amount_x = table_x + table_width - TABLE_AMOUNT_COLUMN

        # Header row
        self.shapes.filled_rect(Region(table_x, table_top, table_width, TABLE_HEADER_HEIGHT),
                                'deepTeal')
        self.text.draw_line("Service", table_x + 5, table_top + 8, TABLE_HEADER_FONT, 'softCream')
        self.text.draw_line("Amount", amount_x, table_top + 8, TABLE_HEADER_FONT, 'softCream')

        # Data rows
        row_top = table_top + TABLE_HEADER_HEIGHT
        for service, amount in rows:
            self.shapes.filled_rect(Region(table_x, row_top, table_width, TABLE_ROW_HEIGHT), 'white')
            self.text.draw_line(service, table_x + 5, row_top + 7, TABLE_BODY_FONT, 'deepTeal')
            self.text.draw_line(amount, amount_x, row_top + 7, TABLE_BODY_FONT, 'deepTeal')
            row_top += TABLE_ROW_HEIGHT

        self._place('payment_table',
                    Region(OUTER_MARGIN, top, self.content_width, panel.bottom - top),
                    GAP_AFTER_TABLE)

    def _draw_thank_you(self):
        """Sage panel with the thank-you message centered inside it"""
        top = self.cursor.current_y()
        max_width = self.content_width - 2 * INNER_MARGIN
        lines = self.text.measure(THANK_YOU_MESSAGE, max_width, THANK_YOU_FONT)

        height = max(THANK_YOU_MIN_HEIGHT,
                     len(lines) * THANK_YOU_LINE_HEIGHT + 2 * INNER_MARGIN)
        box = Region(OUTER_MARGIN, top, self.content_width, height)

        with self.opacity.with_opacity('medium'):
            self.shapes.filled_rounded_rect(box, 'sage', PANEL_CORNER_RADIUS)

        self.text.draw_centered(lines, box, THANK_YOU_LINE_HEIGHT, THANK_YOU_FONT,
                                'deepTeal', x=self.page.width / 2)

        self._place('thank_you', box, GAP_AFTER_THANK_YOU)

    def _draw_authorization(self):
        """Instructor details with the signature image on the right"""
        top = self.cursor.current_y()
        left = OUTER_MARGIN + INNER_MARGIN
        signature_x = self.page.width - OUTER_MARGIN - SIGNATURE_RIGHT_OFFSET
        column_width = signature_x - left - INNER_MARGIN

        credentials: List[str] = []
        for line in INSTRUCTOR_CREDENTIALS:
            credentials.extend(self.text.measure(line, column_width, SMALL_FONT))

        last_baseline = AUTH_CREDENTIALS_OFFSET + (len(credentials) - 1) * AUTH_LINE_HEIGHT
        panel_top = top + AUTH_PANEL_OFFSET
        panel = Region(OUTER_MARGIN, panel_top, self.content_width,
                       max(AUTH_PANEL_MIN_HEIGHT, last_baseline + AUTH_BOTTOM_PADDING))

        with self.opacity.with_opacity('low'):
            self.shapes.filled_rounded_rect(panel, 'deepTeal', PANEL_CORNER_RADIUS)

        self.text.draw_line("Authorized By", OUTER_MARGIN, top + AUTH_TITLE_OFFSET,
                            HEADING_FONT, 'deepTeal')
        self.text.draw_line(INSTRUCTOR_NAME, left, panel_top + AUTH_NAME_OFFSET,
                            INSTRUCTOR_FONT, 'deepTeal')
        for i, line in enumerate(credentials):
            self.text.draw_line(line, left,
                                panel_top + AUTH_CREDENTIALS_OFFSET + i * AUTH_LINE_HEIGHT,
                                SMALL_FONT, 'deepTeal')

        signature = Region(signature_x, panel_top + SIGNATURE_TOP_OFFSET, *SIGNATURE_SIZE)
        self.images.embed(self.assets.signature, signature, 'signature', preset='high')

        self._place('authorization',
                    Region(OUTER_MARGIN, top, self.content_width, panel.bottom - top),
                    FOOTER_SPACING)

    def _draw_footer(self):
        """Teal footer pinned to the page bottom, plus the mandala overlay"""
        top = max(self.cursor.current_y(), self.page.height - FOOTER_HEIGHT)
        footer = Region(0, top, self.page.width, FOOTER_HEIGHT)
        if footer.bottom > self.page.height:
            raise RenderError(
                f"Receipt content overflows the page by {footer.bottom - self.page.height:.1f}mm"
            )

        self.shapes.filled_rect(footer, 'deepTeal')

        lines = self.text.measure(FOOTER_TEXT, self.content_width, SMALL_FONT)
        self.text.draw_centered(lines, footer, FOOTER_LINE_HEIGHT, SMALL_FONT, 'softCream',
                                x=self.page.width / 2 + FOOTER_TEXT_SHIFT)

        self.patterns.mandala((MANDALA_CENTER_X, top + MANDALA_OFFSET_Y), MANDALA_RADIUS, 'sand')

        self._place('footer', footer)


def generate_receipt_pdf(
    name: str,
    amount: Union[Decimal, float, int, str],
    assets: Optional[ReceiptAssets] = None,
    issue_date: Optional[date] = None,
    config: Optional[ReceiptConfig] = None,
) -> ReceiptArtifact:
    """
    Convenience function to render a receipt.

    Args:
        name: Client name shown on the receipt
        amount: Payment amount
        assets: Image references (defaults to the configured assets)
        issue_date: Date printed on the receipt (defaults to today)
        config: Renderer configuration (defaults to environment)

    Returns:
        ReceiptArtifact with the PDF bytes and suggested file name
    """
    config = config or ReceiptConfig.from_environment()
    data = ReceiptInput(name=name, amount=amount)
    renderer = PDFReceiptRenderer(
        data,
        assets or config.assets(),
        config=config,
        issue_date=issue_date,
    )
    return renderer.generate()


if __name__ == "__main__":
    # Render a sample receipt with generated placeholder images
    from PIL import Image

    def _placeholder(color, size=(200, 200), fmt='PNG') -> bytes:
        buf = BytesIO()
        Image.new('RGB', size, color).save(buf, format=fmt)
        return buf.getvalue()

    sample_assets = ReceiptAssets(
        background=_placeholder((215, 204, 185), fmt='JPEG'),
        logo=_placeholder((120, 145, 125)),
        signature=_placeholder((42, 83, 89), size=(240, 100)),
    )

    artifact = generate_receipt_pdf("Asha Rao", 1500.5, assets=sample_assets,
                                    config=ReceiptConfig())
    with open(f"/tmp/{artifact.filename}", 'wb') as f:
        f.write(artifact.content)
    print(f"PDF saved to /tmp/{artifact.filename}")
