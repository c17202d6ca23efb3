"""
Annotation renderer.

Replays an ordered annotation list onto a PIL raster of any size. The same
code draws the live edit preview and the native-resolution export, so both
show identical shapes; only the ScaleTransform differs.

Rules:
    - Strokes with two or more points become one connected polyline with
      rounded joins and caps. Single-point strokes draw nothing.
    - Labels are drawn with their anchor as the left end of the text baseline.
    - Later entries draw on top of earlier ones.
    - The caller owns the base layer; nothing is cleared here.

Functions:
    render_annotations: Draw a list onto an existing raster
    render_overlay: Draw a list onto a new transparent raster
    get_font: Cached font lookup for label rendering
"""

import functools
import logging
from typing import Any, Iterable, Optional, Sequence, Tuple

from SA_Libs.AnnotationLib.annotation_models import Annotation, Label, Stroke, scale_annotation
from SA_Libs.AnnotationLib.geometry import ScaleTransform, Size
from SA_Libs.constants import FONT_CANDIDATES
from SA_Libs.pillow_compat import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=64)
def get_font(size: int) -> Any:
    """
    Load a font at ``size`` pixels, trying the configured TrueType candidates
    before Pillow's bundled default font.
    """
    size = max(1, int(size))
    for candidate in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, size=size)
        except OSError:
            continue
    logger.debug(f"No TrueType font candidate found, using Pillow default at {size}px")
    return ImageFont.load_default(size=size)


def _stroke_pixels(stroke: Stroke) -> Tuple[Sequence[Tuple[float, float]], int]:
    return [p.as_tuple() for p in stroke.points], max(1, round(stroke.width))


def draw_stroke(draw: Any, stroke: Stroke) -> None:
    if not stroke.is_visible:
        return

    points, width = _stroke_pixels(stroke)
    draw.line(points, fill=stroke.color, width=width, joint="curve")

    # Round caps at both ends
    if width > 2:
        radius = width / 2.0
        for x, y in (points[0], points[-1]):
            draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=stroke.color)


def draw_label(draw: Any, label: Label) -> None:
    font = get_font(round(label.font_size))
    x, y = label.anchor.as_tuple()

    if isinstance(font, ImageFont.FreeTypeFont):
        draw.text((x, y), label.text, fill=label.color, font=font, anchor="ls")
        return

    # Bitmap fonts have no anchor support: lift the text by its own height
    _, _, _, bottom = draw.textbbox((0, 0), label.text, font=font)
    draw.text((x, y - bottom), label.text, fill=label.color, font=font)


def render_annotations(
    target: Any,
    annotations: Iterable[Annotation],
    transform: Optional[ScaleTransform] = None,
) -> Any:
    """
    Draw ``annotations`` onto ``target`` in list order.

    Args:
        target: PIL Image to draw on (modified in place)
        annotations: Ordered strokes and labels
        transform: Optional transform from annotation space to target space

    Returns:
        The same target image

    Raises:
        TypeError: If target is not a PIL Image or an entry is not a Stroke/Label
    """
    if not hasattr(target, "mode") or not hasattr(target, "size"):
        raise TypeError(f"Expected PIL Image target, got {type(target)}")

    transform = transform or ScaleTransform.identity()
    draw = ImageDraw.Draw(target)

    count = 0
    for annotation in annotations:
        if not transform.is_identity:
            annotation = scale_annotation(annotation, transform)

        if isinstance(annotation, Stroke):
            draw_stroke(draw, annotation)
        elif isinstance(annotation, Label):
            draw_label(draw, annotation)
        else:
            raise TypeError(f"Unsupported annotation type: {type(annotation).__name__}")
        count += 1

    logger.debug(f"Rendered {count} annotations onto {target.size[0]}x{target.size[1]} raster")
    return target


def render_overlay(
    size: Size,
    annotations: Iterable[Annotation],
    transform: Optional[ScaleTransform] = None,
) -> Any:
    """Render onto a new fully transparent RGBA raster of ``size``."""
    width = max(1, round(size.width))
    height = max(1, round(size.height))
    overlay = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    return render_annotations(overlay, annotations, transform)
