"""
Annotation coordinate model for Site Audit.

Annotation points live in an *edit space*: the pixel box the photo is rendered
into on screen. Rendering the same annotations onto any other raster (a resized
preview, the native-resolution export) goes through a ScaleTransform.

Classes:
    Point: A location in one photo's annotation space
    Size: Width/height of a coordinate space or raster
    BoundingBox: On-screen box of the displayed image
    ScaleTransform: Independent x/y scale between two spaces
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from SA_Libs.constants import FIELD_HEIGHT, FIELD_WIDTH, FIELD_X, FIELD_Y


@dataclass(frozen=True)
class Point:
    """2D point with x, y coordinates"""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {FIELD_X: self.x, FIELD_Y: self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Point":
        """
        Create a point from a persisted ``{x, y}`` mapping.

        Raises:
            ValueError: If the mapping lacks finite numeric x/y values
        """
        if not isinstance(data, dict):
            raise ValueError(f"Point must be a mapping, got {type(data).__name__}")
        try:
            x, y = float(data[FIELD_X]), float(data[FIELD_Y])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid point {data!r}: {e}")
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValueError(f"Point coordinates must be finite, got {data!r}")
        return cls(x=x, y=y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Size:
    """Width and height of a coordinate space."""
    width: float
    height: float

    @property
    def is_known(self) -> bool:
        """A size with a zero or negative side cannot anchor a transform."""
        return (
            math.isfinite(self.width)
            and math.isfinite(self.height)
            and self.width > 0
            and self.height > 0
        )

    def to_dict(self) -> Dict[str, float]:
        return {FIELD_WIDTH: self.width, FIELD_HEIGHT: self.height}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Size"]:
        """Parse a persisted size; anything malformed or empty yields None."""
        if not isinstance(data, dict):
            return None
        try:
            size = cls(width=float(data[FIELD_WIDTH]), height=float(data[FIELD_HEIGHT]))
        except (KeyError, TypeError, ValueError):
            return None
        return size if size.is_known else None

    @classmethod
    def of_image(cls, image: Any) -> "Size":
        width, height = image.size
        return cls(width=float(width), height=float(height))


@dataclass(frozen=True)
class BoundingBox:
    """Box the image occupies on screen, in the coordinates pointer events use."""
    left: float
    top: float
    width: float
    height: float

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    def to_local(self, client_x: float, client_y: float) -> Point:
        """Resolve an event position to a point relative to the box origin."""
        return Point(client_x - self.left, client_y - self.top)


@dataclass(frozen=True)
class ScaleTransform:
    """
    Maps points between two coordinate spaces.

    x and y are scaled independently; lengths (stroke width, font size) are
    scaled by ``max(scale_x, scale_y)`` so line thickness stays uniform when
    the aspect ratio is skewed.
    """
    scale_x: float = 1.0
    scale_y: float = 1.0

    @classmethod
    def identity(cls) -> "ScaleTransform":
        return cls(1.0, 1.0)

    @classmethod
    def between(cls, source: Optional[Size], target: Optional[Size]) -> "ScaleTransform":
        """
        Build the transform from ``source`` space to ``target`` space.

        Unknown or zero-sized spaces (for instance an image that has not
        finished loading) give the identity transform instead of an error.
        """
        if source is None or target is None:
            return cls.identity()
        if not source.is_known or not target.is_known:
            return cls.identity()
        return cls(target.width / source.width, target.height / source.height)

    @property
    def is_identity(self) -> bool:
        return self.scale_x == 1.0 and self.scale_y == 1.0

    @property
    def length_scale(self) -> float:
        return max(self.scale_x, self.scale_y)

    def apply_point(self, point: Point) -> Point:
        return Point(point.x * self.scale_x, point.y * self.scale_y)

    def apply_length(self, length: float) -> float:
        return length * self.length_scale

    def inverse(self) -> "ScaleTransform":
        return ScaleTransform(1.0 / self.scale_x, 1.0 / self.scale_y)
