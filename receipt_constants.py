"""
Constants for the yoga payment receipt
Includes palette, opacity presets, page geometry and the fixed template text
"""

from pathlib import Path

# ==============================================================================
# PALETTE
# ==============================================================================
# Calm, yoga-inspired colors as RGB triples (0-255)
COLORS = {
    'sage': (120, 145, 125),         # Earthy sage green
    'sand': (215, 204, 185),         # Warm sand color
    'deepTeal': (42, 83, 89),        # Deep teal for contrast
    'softCream': (245, 240, 230),    # Soft cream background
    'darkSage': (65, 90, 70),        # Darker sage for contrast elements
    'terracotta': (175, 95, 75),     # Earthy accent color
    'white': (255, 255, 255),        # Logo backdrop and table data row
}

# Named opacity presets
OPACITY = {
    'full': 1.0,
    'high': 0.9,
    'medium': 0.3,
    'low': 0.1,
    'veryLow': 0.05,
}

# ==============================================================================
# PAGE GEOMETRY (millimetres, A4 portrait, y grows downward)
# ==============================================================================
PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
OUTER_MARGIN = 20.0
INNER_MARGIN = 5.0
PAGE_CORNER_RADIUS = 5.0
PANEL_CORNER_RADIUS = 5.0

# Header band
HEADER_BAND_HEIGHT = 50.0
HEADER_TITLE_BASELINE = 45.0
HEADER_RULE_Y = 47.0
LOGO_CENTER = (OUTER_MARGIN + 15.0, 25.0)
LOGO_RADIUS = 15.0
WORDMARK_ORIGIN = (65.0, -4.0)
WORDMARK_SIZE = (LOGO_RADIUS * 6, LOGO_RADIUS * 1.5)

# Header waves: five rows, 3mm apart, starting 20mm from the top
WAVE_ROWS = 5
WAVE_FIRST_Y = 20.0
WAVE_ROW_SPACING = 3.0
WAVE_AMPLITUDE = 2.5
WAVE_SEGMENTS = 20

# Date box (right half, below the band)
DATE_BOX_OFFSET = 5.0
DATE_BOX_HEIGHT = 15.0
DATE_BOX_RADIUS = 3.0
DATE_RIGHT_SPACING = 5.0

# Client information
INFO_TITLE_OFFSET = 5.0
INFO_LINE_HEIGHT = 7.0
INFO_BOTTOM_PADDING = 2.0

# Payment details panel and table
PAYMENT_TITLE_OFFSET = 5.0
PAYMENT_PANEL_OFFSET = 8.0
PAYMENT_PANEL_PADDING = 5.0
TABLE_INDENT = 10.0
TABLE_HEADER_HEIGHT = 12.0
TABLE_ROW_HEIGHT = 10.0
TABLE_AMOUNT_COLUMN = 40.0

# Thank-you block
THANK_YOU_MIN_HEIGHT = 35.0
THANK_YOU_LINE_HEIGHT = 6.0

# Authorization / signature block
AUTH_TITLE_OFFSET = 5.0
AUTH_PANEL_OFFSET = 8.0
AUTH_PANEL_MIN_HEIGHT = 50.0
AUTH_NAME_OFFSET = 15.0
AUTH_CREDENTIALS_OFFSET = 25.0
AUTH_LINE_HEIGHT = 7.0
AUTH_BOTTOM_PADDING = 8.0
SIGNATURE_SIZE = (60.0, 25.0)
SIGNATURE_RIGHT_OFFSET = 70.0
SIGNATURE_TOP_OFFSET = 10.0

# Footer
FOOTER_HEIGHT = 20.0
FOOTER_SPACING = 20.0
FOOTER_TEXT_SHIFT = 10.0
FOOTER_LINE_HEIGHT = 5.0
MANDALA_CENTER_X = 15.0
MANDALA_OFFSET_Y = 10.0
MANDALA_RADIUS = 5.0

# Gaps between consecutive sections
GAP_AFTER_HEADER = 5.0
GAP_AFTER_INFO = 5.0
GAP_AFTER_TABLE = 10.0
GAP_AFTER_THANK_YOU = 5.0

# ==============================================================================
# FIXED TEMPLATE TEXT
# ==============================================================================
ORGANIZATION_NAME = "MoskhaVidya YogaMandir"
FOOTER_TEXT = (
    "MoskhaVidya YogaMandir | Punyagiri Road, S Kota, Vizianagaram District | "
    "535145 | 9989368781, 9866757311"
)
INSTRUCTOR_NAME = "Seela Koteswara Rao"
INSTRUCTOR_CREDENTIALS = [
    "Seela Koteswara Rao, 30 Years Experience",
    "PG Diploma Yoga, M.SC Yoga, M.SC Botany, MS Social Work",
]
SERVICE_LABEL = "Yoga Seva"
THANK_YOU_MESSAGE = (
    "Thank you for your monthly contribution!\n\n"
    "We appreciate your support in sustaining our yoga community."
)
ARTIFACT_PREFIX = "yoga_receipt_"

# ==============================================================================
# DEFAULT ASSETS
# ==============================================================================
ASSET_DIR = Path(__file__).parent / "assets" / "images"
DEFAULT_BACKGROUND_IMAGE = ASSET_DIR / "yoga-bg.jpg"
DEFAULT_LOGO_IMAGE = ASSET_DIR / "logos.png"
DEFAULT_WORDMARK_IMAGE = ASSET_DIR / "logo-text.png"
DEFAULT_SIGNATURE_IMAGE = (
    "https://cdn.pixabay.com/photo/2022/03/21/16/36/signature-7083534_1280.png"
)
