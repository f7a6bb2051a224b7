"""
Image embedding for the receipt

Circular images (the logo) are drawn on an opaque backdrop disc and then
clipped to the circle with a PDF clipping path. When clipping is turned off
the image is drawn over the disc as a plain square; the square's corners
outside the disc stay visible, which is the accepted fallback look.
"""

import logging

from reportlab.pdfgen import canvas

from receipt_assets import AssetRef, AssetResolver
from receipt_errors import RenderError
from receipt_graphics import GraphicsStateStack, ShapeRenderer
from receipt_layout import PageGeometry, Point, Region

logger = logging.getLogger(__name__)


class ImageEmbedder:
    """Place resolved raster images on the canvas"""

    def __init__(self, c: canvas.Canvas, page: PageGeometry, shapes: ShapeRenderer,
                 opacity: GraphicsStateStack, resolver: AssetResolver, clip: bool = True):
        self.c = c
        self.page = page
        self.shapes = shapes
        self.opacity = opacity
        self.resolver = resolver
        self.clip = clip

    def _draw_image(self, image, region: Region):
        self.c.drawImage(image, *self.page.rect(region), mask='auto')

    def embed(self, ref: AssetRef, region: Region, label: str, preset: str = 'full'):
        """Draw an image stretched to region at the given opacity preset"""
        image = self.resolver.resolve(ref, label)
        with self.opacity.with_opacity(preset):
            self._draw_image(image, region)

    def embed_circular(self, ref: AssetRef, center: Point, radius: float,
                       label: str, backdrop: str = 'white'):
        """
        Draw an image inside a circle.

        Args:
            ref: Image reference
            center: Circle center in page mm
            radius: Circle radius in mm
            label: Asset name for error messages
            backdrop: Theme token for the masking disc
        """
        if radius < 0:
            raise RenderError(f"Negative image radius: {radius}")

        image = self.resolver.resolve(ref, label)
        cx, cy = center
        square = Region(cx - radius, cy - radius, radius * 2, radius * 2)

        with self.opacity.with_opacity('full'):
            self.shapes.filled_circle(center, radius, backdrop)

            if not self.clip:
                self._draw_image(image, square)
                return

            self.c.saveState()
            try:
                path = self.c.beginPath()
                px, py = self.page.point(cx, cy)
                path.circle(px, py, self.page.length(radius))
                self.c.clipPath(path, stroke=0, fill=0)
                self._draw_image(image, square)
            finally:
                self.c.restoreState()

        logger.debug(f"Embedded circular {label} image at ({cx:.1f}, {cy:.1f}) r={radius}")
