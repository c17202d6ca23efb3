"""
In-memory annotation list for one photo.

The store keeps committed strokes and labels in two ordered lists plus a
single optional in-progress stroke. Rendering and persistence both treat all
strokes as lying below all labels; ``to_records`` writes strokes first, then
labels, so a save/load round trip preserves that order.

Classes:
    AnnotationStore: Committed strokes/labels and the open gesture slot
    AnnotationSnapshot: Immutable copy of a store taken for export
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from SA_Libs.AnnotationLib.annotation_models import (
    Annotation,
    Label,
    Stroke,
    label_to_record,
    parse_records,
    stroke_to_record,
)
from SA_Libs.AnnotationLib.geometry import Point, Size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnotationSnapshot:
    """Read-only view of a store, safe to render while editing continues."""
    strokes: Tuple[Stroke, ...]
    labels: Tuple[Label, ...]
    space: Optional[Size] = None

    @property
    def items(self) -> List[Annotation]:
        return [*self.strokes, *self.labels]


class AnnotationStore:
    """
    Ordered stroke and label lists for one photo's editing session.

    Example:
        >>> store = AnnotationStore()
        >>> store.begin_stroke(Point(0, 0), "#ff0000", 5)
        >>> store.extend_stroke(Point(10, 10))
        >>> stroke = store.commit_stroke()
        >>> label = store.add_label(Point(50, 50), "Leak", 16, "#ff0000")
        >>> [r["type"] for r in store.to_records()]
        ['drawing', 'text']
    """

    def __init__(self, space: Optional[Size] = None):
        self._strokes: List[Stroke] = []
        self._labels: List[Label] = []
        self._in_progress: Optional[List[Point]] = None
        self._in_progress_style: Tuple[str, float] = ("", 0.0)
        self.space = space

    @property
    def strokes(self) -> Tuple[Stroke, ...]:
        return tuple(self._strokes)

    @property
    def labels(self) -> Tuple[Label, ...]:
        return tuple(self._labels)

    @property
    def items(self) -> List[Annotation]:
        """Committed annotations in render order (strokes, then labels)."""
        return [*self._strokes, *self._labels]

    @property
    def current_stroke(self) -> Optional[Stroke]:
        """The open stroke as an immutable value, or None when no gesture is open."""
        if not self._in_progress:
            return None
        color, width = self._in_progress_style
        return Stroke(points=tuple(self._in_progress), color=color, width=width)

    @property
    def has_open_stroke(self) -> bool:
        return self._in_progress is not None

    @property
    def is_empty(self) -> bool:
        return not self._strokes and not self._labels

    @property
    def can_undo(self) -> bool:
        return not self.is_empty

    def load(self, records: Optional[Iterable[Any]]) -> int:
        """
        Replace the whole list from persisted annotation records.

        Malformed records are skipped individually. Any open stroke is discarded.

        Returns:
            Number of records skipped
        """
        strokes, labels, skipped = parse_records(records)
        self._strokes = strokes
        self._labels = labels
        self._in_progress = None
        logger.debug(f"Loaded {len(strokes)} strokes and {len(labels)} labels ({skipped} skipped)")
        return skipped

    def begin_stroke(self, point: Point, color: str, width: float) -> None:
        """Open a new stroke, discarding any stroke that was still open."""
        if width <= 0:
            raise ValueError(f"Stroke width must be positive, got {width}")
        if self._in_progress is not None:
            logger.debug("Discarding uncommitted stroke")
        self._in_progress = [point]
        self._in_progress_style = (color, float(width))

    def extend_stroke(self, point: Point) -> None:
        if self._in_progress is None:
            return
        self._in_progress.append(point)

    def commit_stroke(self) -> Optional[Stroke]:
        """
        Append the open stroke to the committed list.

        The open slot is cleared whether or not anything was committed.

        Returns:
            The committed stroke, or None when no stroke was open
        """
        stroke = self.current_stroke
        self._in_progress = None
        if stroke is None:
            return None
        self._strokes.append(stroke)
        return stroke

    def discard_stroke(self) -> None:
        self._in_progress = None

    def add_label(self, point: Point, text: str, font_size: float, color: str) -> Optional[Label]:
        """
        Append a new label with a fresh id.

        Blank or whitespace-only text is rejected without raising.

        Returns:
            The new label, or None when the text was rejected
        """
        if text is None or not text.strip():
            return None
        label = Label(anchor=point, text=text.strip(), font_size=float(font_size), color=color)
        self._labels.append(label)
        return label

    def undo(self) -> Optional[Annotation]:
        """
        Remove the most recent stroke, or the most recent label when no
        strokes remain. Strokes always go first regardless of which was
        added last.
        """
        if self._strokes:
            return self._strokes.pop()
        if self._labels:
            return self._labels.pop()
        return None

    def clear_all(self) -> None:
        self._strokes.clear()
        self._labels.clear()
        self._in_progress = None

    def to_records(self) -> List[Dict[str, Any]]:
        """Serialize to the persisted record list: all strokes, then all labels."""
        records = [stroke_to_record(stroke, index) for index, stroke in enumerate(self._strokes)]
        records.extend(label_to_record(label) for label in self._labels)
        return records

    def snapshot(self) -> AnnotationSnapshot:
        return AnnotationSnapshot(strokes=tuple(self._strokes), labels=tuple(self._labels), space=self.space)
