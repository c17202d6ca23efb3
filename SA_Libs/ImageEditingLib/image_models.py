"""
Image data models for Site Audit.

This module defines core data structures shared by the export and report code.

Classes:
    EncodedImage: Encoded raster bytes together with its name and native size

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
"""

from dataclasses import dataclass
from typing import Tuple

RgbaColor = Tuple[int, int, int, int]


@dataclass(frozen=True)
class EncodedImage:
    file_name: str
    data: bytes
    width: int
    height: int
    save_format: str = "JPEG"

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)
