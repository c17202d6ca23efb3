"""
Unit tests for the annotation renderer.
"""

import unittest

from PIL import Image

from SA_Libs.AnnotationLib.annotation_models import Label, Stroke
from SA_Libs.AnnotationLib.geometry import Point, ScaleTransform, Size
from SA_Libs.AnnotationLib.renderer import get_font, render_annotations, render_overlay


class TestRenderStrokes(unittest.TestCase):
    """Test stroke drawing."""

    def test_draws_polyline_in_stroke_color(self):
        stroke = Stroke(points=(Point(10, 50), Point(90, 50)), color="#ff0000", width=5)
        overlay = render_overlay(Size(100, 100), [stroke])

        self.assertEqual(overlay.getpixel((50, 50)), (255, 0, 0, 255))
        self.assertEqual(overlay.getpixel((50, 10)), (0, 0, 0, 0))

    def test_single_point_stroke_draws_nothing(self):
        stroke = Stroke(points=(Point(50, 50),), color="#ff0000", width=10)
        overlay = render_overlay(Size(100, 100), [stroke])
        self.assertIsNone(overlay.getbbox())

    def test_later_entries_draw_on_top(self):
        red = Stroke(points=(Point(10, 50), Point(90, 50)), color="#ff0000", width=6)
        blue = Stroke(points=(Point(50, 10), Point(50, 90)), color="#0000ff", width=6)
        overlay = render_overlay(Size(100, 100), [red, blue])
        self.assertEqual(overlay.getpixel((50, 50)), (0, 0, 255, 255))

    def test_transform_scales_geometry(self):
        stroke = Stroke(points=(Point(10, 25), Point(90, 25)), color="#ff0000", width=2)
        overlay = render_overlay(Size(200, 100), [stroke], ScaleTransform(2.0, 2.0))

        self.assertEqual(overlay.getpixel((100, 50)), (255, 0, 0, 255))
        self.assertEqual(overlay.getpixel((100, 25)), (0, 0, 0, 0))


class TestRenderLabels(unittest.TestCase):
    def test_label_is_drawn_above_its_baseline_anchor(self):
        label = Label(anchor=Point(20, 60), text="Leak", font_size=24, color="#000000")
        overlay = render_overlay(Size(200, 100), [label])

        bbox = overlay.getbbox()
        self.assertIsNotNone(bbox)
        left, top, _, _ = bbox
        self.assertGreaterEqual(left, 15)
        self.assertLess(top, 60)

    def test_get_font_is_cached(self):
        self.assertIs(get_font(16), get_font(16))


class TestRenderAnnotations(unittest.TestCase):
    """Test the shared render entry point."""

    def test_rejects_non_image_target(self):
        with self.assertRaises(TypeError):
            render_annotations("canvas", [])

    def test_rejects_unknown_annotation(self):
        target = Image.new("RGBA", (10, 10))
        with self.assertRaises(TypeError):
            render_annotations(target, [{"type": "arrow"}])

    def test_draws_in_place_without_clearing(self):
        target = Image.new("RGBA", (100, 100), (0, 255, 0, 255))
        stroke = Stroke(points=(Point(10, 50), Point(90, 50)), color="#ff0000", width=4)

        result = render_annotations(target, [stroke])

        self.assertIs(result, target)
        self.assertEqual(target.getpixel((5, 5)), (0, 255, 0, 255))
        self.assertEqual(target.getpixel((50, 50)), (255, 0, 0, 255))

    def test_rendering_is_deterministic(self):
        annotations = [
            Stroke(points=(Point(5, 5), Point(60, 40), Point(90, 10)), color="#ff8800", width=7),
            Label(anchor=Point(10, 80), text="Note", font_size=16, color="#0000ff", id="fixed"),
        ]
        first = render_overlay(Size(100, 100), annotations).tobytes()
        second = render_overlay(Size(100, 100), annotations).tobytes()
        self.assertEqual(first, second)

    def test_identity_scale_matches_unscaled_render(self):
        annotations = [
            Stroke(points=(Point(5, 5), Point(60, 40), Point(90, 10)), color="#00aa00", width=6),
            Label(anchor=Point(10, 80), text="Crack", font_size=18, color="#ff0000", id="fixed"),
        ]
        identity = ScaleTransform.between(Size(100, 100), Size(100, 100))

        scaled = render_overlay(Size(100, 100), annotations, identity).tobytes()
        plain = render_overlay(Size(100, 100), annotations).tobytes()

        self.assertEqual(scaled, plain)
