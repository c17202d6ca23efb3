"""
Core image operations for Site Audit.

This module provides the low-level raster helpers the annotation engine and
the report side share: decoding a photo reference, producing the display copy
of an upload, encoding a flattened raster and naming downloads.

Functions:
    load_image_source: Decode a photo given as a path, bytes or data URI
    resize_for_display: Downscale an image to fit the display bounds
    get_save_kwargs: Build PIL Image.save() kwargs for a format
    encode_image: Encode an image to bytes
    annotated_filename: Deterministic download name for a flattened photo
    parse_color: Convert a hex color string into an RGBA tuple
"""

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Any, Dict, Union

from SA_Libs.ImageEditingLib.image_models import RgbaColor
from SA_Libs.constants import (
    DEFAULT_DOWNLOAD_NAME,
    DISPLAY_MAX_HEIGHT,
    DISPLAY_MAX_WIDTH,
    DOWNLOAD_FILE_PREFIX,
    EXPORT_EXTENSION,
    EXPORT_FORMAT,
    EXPORT_QUALITY,
)
from SA_Libs.pillow_compat import Image, ImageColor

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes]


class ImageLoadError(OSError):
    """Raised when a photo reference cannot be decoded into an image."""


def _decode_data_uri(uri: str) -> bytes:
    header, _, payload = uri.partition(",")
    if not payload:
        raise ImageLoadError("Data URI has no payload")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(f"Invalid base64 image payload: {e}")
    return payload.encode("latin-1")


def load_image_source(source: ImageSource) -> Any:
    """
    Decode a photo reference into a fully loaded PIL Image.

    Args:
        source: A filesystem path, raw encoded bytes, or a ``data:`` URI

    Returns:
        A PIL Image whose pixel data has been read

    Raises:
        ImageLoadError: If the source is missing or cannot be decoded
    """
    if isinstance(source, bytes):
        raw = source
    elif isinstance(source, str) and source.startswith("data:"):
        raw = _decode_data_uri(source)
    else:
        path = Path(source)
        if not path.is_file():
            raise ImageLoadError(f"Image file not found: {path}")
        raw = path.read_bytes()

    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageLoadError(f"Could not decode image: {e}")

    return image


def resize_for_display(
    image: Any,
    max_width: int = DISPLAY_MAX_WIDTH,
    max_height: int = DISPLAY_MAX_HEIGHT,
) -> Any:
    """
    Produce the display copy of an uploaded photo.

    The aspect ratio is preserved and images already inside the bounds are
    returned as an unchanged copy; the copy is never upscaled.

    Args:
        image: PIL Image to resize
        max_width: Maximum width of the display copy
        max_height: Maximum height of the display copy

    Returns:
        A new PIL Image no larger than ``max_width`` x ``max_height``
    """
    if max_width <= 0 or max_height <= 0:
        raise ValueError(f"Display bounds must be positive, got {max_width}x{max_height}")

    width, height = image.size
    scale = min(max_width / width, max_height / height, 1.0)
    if scale >= 1.0:
        return image.copy()

    new_size = (max(1, round(width * scale)), max(1, round(height * scale)))
    logger.debug(f"Resizing display copy from {image.size} to {new_size}")
    return image.resize(new_size, Image.LANCZOS)


def get_save_kwargs(save_format: str = EXPORT_FORMAT, quality: int = EXPORT_QUALITY) -> Dict[str, Any]:
    """Get PIL Image.save() kwargs based on format."""
    # PIL uses "JPEG" not "JPG"
    save_format = save_format.upper()
    if save_format == "JPG":
        save_format = "JPEG"

    kwargs: Dict[str, Any] = {"format": save_format}

    if save_format == "JPEG":
        kwargs["quality"] = max(1, min(100, quality))

    return kwargs


def encode_image(image: Any, save_format: str = EXPORT_FORMAT, quality: int = EXPORT_QUALITY) -> bytes:
    """
    Encode an image to bytes.

    Args:
        image: PIL Image to encode
        save_format: Target format (JPEG, PNG, ...)
        quality: JPEG quality 1-100 (ignored for lossless formats)

    Returns:
        The encoded bytes

    Raises:
        TypeError: If image is not a PIL Image
        OSError: If the encoder fails
    """
    if not hasattr(image, "save") or not hasattr(image, "mode"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    kwargs = get_save_kwargs(save_format, quality)
    # Convert to RGB for JPEG format
    if kwargs["format"] == "JPEG" and image.mode != "RGB":
        image = image.convert("RGB")

    buffer = io.BytesIO()
    image.save(buffer, **kwargs)
    return buffer.getvalue()


def annotated_filename(file_name: str, extension: str = EXPORT_EXTENSION) -> str:
    """
    Deterministic download name for the flattened copy of a photo.

    Examples:
        >>> annotated_filename("leak.png")
        'annotated-leak.jpg'
        >>> annotated_filename("")
        'annotated-image.jpg'
    """
    name = Path(file_name or DEFAULT_DOWNLOAD_NAME).name or DEFAULT_DOWNLOAD_NAME
    stem = Path(name).stem or Path(DEFAULT_DOWNLOAD_NAME).stem
    return f"{DOWNLOAD_FILE_PREFIX}{stem}{extension}"


def parse_color(color: str) -> RgbaColor:
    """
    Convert a color string into an RGBA tuple.

    Raises:
        ValueError: If the color string is not understood
    """
    rgb = ImageColor.getrgb(str(color))
    if len(rgb) == 3:
        return (rgb[0], rgb[1], rgb[2], 255)
    return tuple(rgb)  # type: ignore[return-value]
