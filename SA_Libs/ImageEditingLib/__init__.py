"""
ImageEditingLib - Core image functionality

This module provides image decoding, encoding, resizing and naming helpers
for the Site Audit project.
"""

from SA_Libs.ImageEditingLib.image_models import EncodedImage, RgbaColor
from SA_Libs.ImageEditingLib.image_editing_ops import (
    ImageLoadError,
    load_image_source,
    resize_for_display,
    get_save_kwargs,
    encode_image,
    annotated_filename,
    parse_color,
)

__all__ = [
    "EncodedImage",
    "RgbaColor",
    "ImageLoadError",
    "load_image_source",
    "resize_for_display",
    "get_save_kwargs",
    "encode_image",
    "annotated_filename",
    "parse_color",
]
