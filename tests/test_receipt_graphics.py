"""
Test Suite for opacity scoping, shape drawing and image embedding

Run with: python -m pytest tests/test_receipt_graphics.py
"""

import unittest
from unittest.mock import Mock, call

from reportlab.lib.units import mm

from receipt_errors import AssetLoadError, RenderError
from receipt_graphics import GraphicsStateStack, ShapeRenderer
from receipt_images import ImageEmbedder
from receipt_layout import PageGeometry, Region
from receipt_theme import default_theme


# =============================================================================
# GraphicsStateStack
# =============================================================================

class TestGraphicsStateStack(unittest.TestCase):
    """Scoped opacity always restores the previous preset"""

    def setUp(self):
        self.canvas = Mock()
        self.stack = GraphicsStateStack(self.canvas, default_theme())

    def test_starts_fully_opaque(self):
        self.assertEqual(self.stack.current, 1.0)
        self.assertEqual(self.stack.depth, 1)

    def test_applies_fill_and_stroke_alpha(self):
        with self.stack.with_opacity('low'):
            self.assertEqual(self.stack.current, 0.1)
            self.assertEqual(self.stack.depth, 2)
        self.canvas.setFillAlpha.assert_has_calls([call(0.1), call(1.0)])
        self.canvas.setStrokeAlpha.assert_has_calls([call(0.1), call(1.0)])

    def test_restores_after_success(self):
        with self.stack.with_opacity('medium'):
            pass
        self.assertEqual(self.stack.current, 1.0)
        self.assertEqual(self.stack.depth, 1)

    def test_nested_scopes_unwind_in_order(self):
        with self.stack.with_opacity('medium'):
            with self.stack.with_opacity('high'):
                self.assertEqual(self.stack.current, 0.9)
            self.assertEqual(self.stack.current, 0.3)
        self.assertEqual(self.stack.current, 1.0)
        self.assertEqual(self.canvas.setFillAlpha.call_args, call(1.0))

    def test_restores_after_failure(self):
        with self.stack.with_opacity('medium'):
            with self.assertRaises(RuntimeError):
                with self.stack.with_opacity('veryLow'):
                    raise RuntimeError("drawing failed")
            self.assertEqual(self.stack.current, 0.3)
            self.assertEqual(self.canvas.setFillAlpha.call_args, call(0.3))
        self.assertEqual(self.stack.depth, 1)

    def test_unknown_preset_does_not_push(self):
        with self.assertRaises(RenderError):
            with self.stack.with_opacity('opaque-ish'):
                pass
        self.assertEqual(self.stack.depth, 1)
        self.canvas.setFillAlpha.assert_not_called()


# =============================================================================
# ShapeRenderer
# =============================================================================

class TestShapeRenderer(unittest.TestCase):
    """Shapes land at flipped point coordinates"""

    def setUp(self):
        self.canvas = Mock()
        self.page = PageGeometry()
        self.shapes = ShapeRenderer(self.canvas, self.page, default_theme())

    def test_filled_rect(self):
        self.shapes.filled_rect(Region(0, 0, 210, 50), 'sage')
        args, kwargs = self.canvas.rect.call_args
        self.assertAlmostEqual(args[1], 247 * mm)
        self.assertEqual(kwargs, {'stroke': 0, 'fill': 1})
        self.canvas.setFillColor.assert_called_once()

    def test_filled_rounded_rect_radius_in_points(self):
        self.shapes.filled_rounded_rect(Region(20, 100, 170, 35), 'sage', 5)
        args, kwargs = self.canvas.roundRect.call_args
        self.assertAlmostEqual(args[4], 5 * mm)
        self.assertEqual(kwargs, {'stroke': 0, 'fill': 1})

    def test_filled_circle(self):
        self.shapes.filled_circle((35, 25), 15, 'white')
        args, kwargs = self.canvas.circle.call_args
        self.assertAlmostEqual(args[0], 35 * mm)
        self.assertAlmostEqual(args[1], 272 * mm)
        self.assertAlmostEqual(args[2], 15 * mm)
        self.assertEqual(kwargs, {'stroke': 0, 'fill': 1})

    def test_stroked_circle(self):
        self.shapes.stroked_circle((15, 287), 5, 'sand', 0.3)
        _, kwargs = self.canvas.circle.call_args
        self.assertEqual(kwargs, {'stroke': 1, 'fill': 0})
        self.canvas.setLineWidth.assert_called_once_with(0.3 * mm)

    def test_line(self):
        self.shapes.line((105, 47), (190, 47), 'sand', 0.7)
        args, _ = self.canvas.line.call_args
        self.assertAlmostEqual(args[1], args[3])
        self.assertAlmostEqual(args[0], 105 * mm)

    def test_negative_radius_rejected(self):
        with self.assertRaises(RenderError):
            self.shapes.filled_circle((0, 0), -1, 'sage')
        with self.assertRaises(RenderError):
            self.shapes.filled_rounded_rect(Region(0, 0, 10, 10), 'sage', -2)
        self.canvas.circle.assert_not_called()

    def test_unknown_color_rejected(self):
        with self.assertRaises(RenderError):
            self.shapes.filled_rect(Region(0, 0, 10, 10), 'magenta')


# =============================================================================
# ImageEmbedder
# =============================================================================

class TestImageEmbedder(unittest.TestCase):
    """Backdrop disc then clipped image, opacity always restored"""

    def setUp(self):
        self.canvas = Mock()
        self.page = PageGeometry()
        theme = default_theme()
        self.opacity = GraphicsStateStack(self.canvas, theme)
        self.shapes = ShapeRenderer(self.canvas, self.page, theme)
        self.resolver = Mock()
        self.image = object()
        self.resolver.resolve.return_value = self.image

    def _embedder(self, clip=True):
        return ImageEmbedder(self.canvas, self.page, self.shapes, self.opacity,
                             self.resolver, clip=clip)

    def test_circular_draws_disc_then_clipped_image(self):
        self._embedder().embed_circular(b'logo', (35, 25), 15, 'logo')

        names = [c[0] for c in self.canvas.method_calls]
        disc = names.index('circle')
        self.assertLess(disc, names.index('saveState'))
        self.assertLess(names.index('saveState'), names.index('clipPath'))
        self.assertLess(names.index('clipPath'), names.index('drawImage'))
        self.assertLess(names.index('drawImage'), names.index('restoreState'))

        args, kwargs = self.canvas.drawImage.call_args
        self.assertIs(args[0], self.image)
        expected = self.page.rect(Region(20, 10, 30, 30))
        for got, want in zip(args[1:], expected):
            self.assertAlmostEqual(got, want)
        self.assertEqual(kwargs, {'mask': 'auto'})

    def test_circular_without_clip_falls_back_to_overlay(self):
        self._embedder(clip=False).embed_circular(b'logo', (35, 25), 15, 'logo')
        self.canvas.clipPath.assert_not_called()
        self.canvas.drawImage.assert_called_once()

    def test_circular_restores_state_when_drawing_fails(self):
        self.canvas.drawImage.side_effect = RuntimeError("bad image stream")
        with self.assertRaises(RuntimeError):
            self._embedder().embed_circular(b'logo', (35, 25), 15, 'logo')
        self.canvas.restoreState.assert_called_once()
        self.assertEqual(self.opacity.depth, 1)
        self.assertEqual(self.opacity.current, 1.0)

    def test_asset_failure_draws_nothing(self):
        self.resolver.resolve.side_effect = AssetLoadError('logo', 'missing.png')
        with self.assertRaises(AssetLoadError):
            self._embedder().embed_circular('missing.png', (35, 25), 15, 'logo')
        self.canvas.circle.assert_not_called()
        self.canvas.drawImage.assert_not_called()

    def test_negative_radius_rejected(self):
        with self.assertRaises(RenderError):
            self._embedder().embed_circular(b'logo', (35, 25), -15, 'logo')

    def test_embed_uses_scoped_opacity(self):
        self._embedder().embed(b'sig', Region(120, 200, 60, 25), 'signature', preset='high')
        self.canvas.setFillAlpha.assert_has_calls([call(0.9), call(1.0)])
        self.assertEqual(self.opacity.current, 1.0)
        self.resolver.resolve.assert_called_once_with(b'sig', 'signature')


if __name__ == '__main__':
    unittest.main()
