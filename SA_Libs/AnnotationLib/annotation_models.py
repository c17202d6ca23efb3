"""
Annotation data models for Site Audit.

A photo's annotations are persisted as an ordered list of *annotation records*:
plain dictionaries tagged by ``type``. Two kinds are understood:

    drawing: {"id", "type": "drawing", "x": 0, "y": 0, "color",
              "data": {"points": [{"x", "y"}, ...], "color", "size"}}
    text:    {"id", "type": "text", "x", "y", "text", "fontSize", "color"}

``arrow`` is a reserved kind; records using it are not rendered yet.

Classes:
    AnnotationKind: Tag of a persisted annotation record
    Stroke: One committed freehand drawing gesture
    Label: One text annotation

Functions:
    parse_record: Turn one persisted record into a Stroke or Label
    parse_records: Parse a whole list, skipping malformed entries
    stroke_to_record / label_to_record: Serialize back to the record shape
    scale_annotation: Move one annotation into another coordinate space
"""

import logging
import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from SA_Libs.AnnotationLib.geometry import Point, ScaleTransform
from SA_Libs.ImageEditingLib.image_editing_ops import parse_color
from SA_Libs.constants import (
    DEFAULT_ANNOTATION_COLOR,
    DEFAULT_FONT_SIZE,
    DEFAULT_STROKE_WIDTH,
    FIELD_COLOR,
    FIELD_DATA,
    FIELD_FONT_SIZE,
    FIELD_ID,
    FIELD_POINTS,
    FIELD_SIZE,
    FIELD_TEXT,
    FIELD_TYPE,
    FIELD_X,
    FIELD_Y,
    KIND_ARROW,
    KIND_DRAWING,
    KIND_TEXT,
    STROKE_ID_PREFIX,
)

logger = logging.getLogger(__name__)


class AnnotationKind(str, Enum):
    DRAWING = KIND_DRAWING
    TEXT = KIND_TEXT
    ARROW = KIND_ARROW


def new_label_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Stroke:
    """
    Committed freehand stroke.

    Attributes:
        points: Ordered, non-empty point sequence in annotation space
        color: Hex color string
        width: Line width in annotation-space units
    """
    points: Tuple[Point, ...]
    color: str = DEFAULT_ANNOTATION_COLOR
    width: float = DEFAULT_STROKE_WIDTH

    def __post_init__(self):
        if not self.points:
            raise ValueError("Stroke must contain at least one point")
        if self.width <= 0:
            raise ValueError(f"Stroke width must be positive, got {self.width}")

    @property
    def is_visible(self) -> bool:
        """A single point is a zero-length stroke and draws nothing."""
        return len(self.points) >= 2


@dataclass(frozen=True)
class Label:
    """
    Text annotation anchored at its left/baseline origin.

    Attributes:
        id: Unique identifier
        anchor: Left end of the text baseline in annotation space
        text: Literal text (non-empty)
        font_size: Font size in annotation-space units
        color: Hex color string
    """
    anchor: Point
    text: str
    font_size: float = DEFAULT_FONT_SIZE
    color: str = DEFAULT_ANNOTATION_COLOR
    id: str = field(default_factory=new_label_id)

    def __post_init__(self):
        if not self.text or not self.text.strip():
            raise ValueError("Label text cannot be empty")
        if self.font_size <= 0:
            raise ValueError(f"Label font size must be positive, got {self.font_size}")


Annotation = Union[Stroke, Label]


def _require_color(value: Any) -> str:
    color = str(value)
    parse_color(color)
    return color


def _require_positive(value: Any, name: str) -> float:
    number = float(value)
    if not math.isfinite(number) or number <= 0:
        raise ValueError(f"{name} must be a finite positive number, got {value!r}")
    return number


def _parse_stroke(record: Dict[str, Any]) -> Stroke:
    data = record.get(FIELD_DATA)
    if not isinstance(data, dict):
        raise ValueError("drawing record has no stroke data")

    raw_points = data.get(FIELD_POINTS)
    if not isinstance(raw_points, list) or not raw_points:
        raise ValueError("drawing record has no points")

    color = _require_color(data.get(FIELD_COLOR) or record.get(FIELD_COLOR) or DEFAULT_ANNOTATION_COLOR)
    width = _require_positive(data.get(FIELD_SIZE, DEFAULT_STROKE_WIDTH), "stroke size")
    points = tuple(Point.from_dict(p) for p in raw_points)
    return Stroke(points=points, color=color, width=width)


def _parse_label(record: Dict[str, Any]) -> Label:
    text = record.get(FIELD_TEXT)
    if not isinstance(text, str) or not text.strip():
        raise ValueError("text record has no text")

    anchor = Point.from_dict({FIELD_X: record.get(FIELD_X), FIELD_Y: record.get(FIELD_Y)})
    font_size = _require_positive(record.get(FIELD_FONT_SIZE) or DEFAULT_FONT_SIZE, "font size")
    color = _require_color(record.get(FIELD_COLOR) or DEFAULT_ANNOTATION_COLOR)
    label_id = str(record.get(FIELD_ID) or new_label_id())
    return Label(anchor=anchor, text=text, font_size=font_size, color=color, id=label_id)


def parse_record(record: Any) -> Annotation:
    """
    Parse one persisted annotation record.

    Raises:
        ValueError: If the record is malformed or of a kind with no renderer
    """
    if not isinstance(record, dict):
        raise ValueError(f"Annotation record must be a mapping, got {type(record).__name__}")

    try:
        kind = AnnotationKind(record.get(FIELD_TYPE))
    except ValueError:
        raise ValueError(f"Unknown annotation type: {record.get(FIELD_TYPE)!r}")

    if kind is AnnotationKind.DRAWING:
        return _parse_stroke(record)
    if kind is AnnotationKind.TEXT:
        return _parse_label(record)
    if kind is AnnotationKind.ARROW:
        raise ValueError("Arrow annotations are reserved and not supported yet")
    raise ValueError(f"Unhandled annotation kind: {kind}")


def parse_records(records: Optional[Iterable[Any]]) -> Tuple[List[Stroke], List[Label], int]:
    """
    Split a persisted record list into strokes and labels.

    Malformed entries are skipped one by one rather than failing the list.

    Returns:
        Tuple of (strokes, labels, skipped_count), each list in record order
    """
    strokes: List[Stroke] = []
    labels: List[Label] = []
    skipped = 0

    if records is None:
        return strokes, labels, skipped

    for index, record in enumerate(records):
        try:
            annotation = parse_record(record)
        except (ValueError, TypeError) as e:
            skipped += 1
            logger.warning(f"Skipping annotation record {index}: {e}")
            continue

        if isinstance(annotation, Stroke):
            strokes.append(annotation)
        else:
            labels.append(annotation)

    return strokes, labels, skipped


def stroke_to_record(stroke: Stroke, index: int) -> Dict[str, Any]:
    return {
        FIELD_ID: f"{STROKE_ID_PREFIX}{index}",
        FIELD_TYPE: KIND_DRAWING,
        FIELD_X: 0,
        FIELD_Y: 0,
        FIELD_COLOR: stroke.color,
        FIELD_DATA: {
            FIELD_POINTS: [p.to_dict() for p in stroke.points],
            FIELD_COLOR: stroke.color,
            FIELD_SIZE: stroke.width,
        },
    }


def label_to_record(label: Label) -> Dict[str, Any]:
    return {
        FIELD_ID: label.id,
        FIELD_TYPE: KIND_TEXT,
        FIELD_X: label.anchor.x,
        FIELD_Y: label.anchor.y,
        FIELD_TEXT: label.text,
        FIELD_FONT_SIZE: label.font_size,
        FIELD_COLOR: label.color,
    }


def scale_annotation(annotation: Annotation, transform: ScaleTransform) -> Annotation:
    """Return ``annotation`` expressed in the transform's target space."""
    if isinstance(annotation, Stroke):
        return Stroke(
            points=tuple(transform.apply_point(p) for p in annotation.points),
            color=annotation.color,
            width=transform.apply_length(annotation.width),
        )
    if isinstance(annotation, Label):
        return Label(
            anchor=transform.apply_point(annotation.anchor),
            text=annotation.text,
            font_size=transform.apply_length(annotation.font_size),
            color=annotation.color,
            id=annotation.id,
        )
    raise TypeError(f"Unsupported annotation type: {type(annotation).__name__}")


def scale_annotations(annotations: Iterable[Annotation], transform: ScaleTransform) -> List[Annotation]:
    if transform.is_identity:
        return list(annotations)
    return [scale_annotation(a, transform) for a in annotations]
