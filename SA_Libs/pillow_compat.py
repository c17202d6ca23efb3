"""
Compatibility wrapper to import Pillow (which provides the `PIL` namespace)
from one place.

This module loads the Pillow-provided modules via importlib and re-exports the
symbols used by Site Audit: `Image`, `ImageDraw`, `ImageFont` and `ImageColor`.
Importing from `pillow_compat` keeps every raster dependency behind a single
module.
"""
from importlib import import_module
from types import ModuleType
from typing import Optional


def _import(name: str) -> Optional[ModuleType]:
    try:
        return import_module(name)
    except ImportError:
        return None


_pil_image = _import("PIL.Image")

if _pil_image is None:
    raise ImportError("pillow (PIL) is required: install with 'pip install Pillow'")

Image = _pil_image
ImageDraw = import_module("PIL.ImageDraw")
ImageFont = import_module("PIL.ImageFont")
ImageColor = import_module("PIL.ImageColor")

# Provide a small helper for type hints referencing PIL.Image.Image
ImageClass = getattr(_pil_image, "Image")
