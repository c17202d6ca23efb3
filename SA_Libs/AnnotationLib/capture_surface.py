"""
Interactive capture surface.

Turns pointer and touch input over the displayed photo into strokes and
labels. The surface is toolkit-neutral: a widget forwards its events as
PointerEvent values and receives preview rasters through ``on_render``.

State machine:
    draw mode:  IDLE --pointer down--> DRAWING --pointer up/leave--> IDLE (commit)
    label mode: IDLE --click--> AWAITING_TEXT --confirm--> IDLE (commit)
                                              --cancel--> IDLE (discard)
    Switching mode from any state returns to IDLE without committing.

Coordinates:
    Records stay in the store's annotation space. The space is taken from the
    first displayed box (or the space persisted with the records) and is only
    re-adopted on resize while the store is empty. Input is mapped from the
    current box into that space; previews are rendered from it onto the box.

Classes:
    SurfaceMode: draw or label
    SurfaceState: idle, drawing or awaiting text
    PointerEvent: Event position in the same coordinates as the box
    CaptureSurface: The state machine itself
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Sequence, Union

from SA_Libs.AnnotationLib.annotation_models import Annotation, Label, Stroke
from SA_Libs.AnnotationLib.annotation_store import AnnotationStore
from SA_Libs.AnnotationLib.geometry import BoundingBox, Point, ScaleTransform
from SA_Libs.AnnotationLib.renderer import render_overlay
from SA_Libs.constants import (
    DEFAULT_ANNOTATION_COLOR,
    DEFAULT_FONT_SIZE,
    DEFAULT_STROKE_WIDTH,
    MAX_FONT_SIZE,
    MAX_STROKE_WIDTH,
    MIN_FONT_SIZE,
    MIN_STROKE_WIDTH,
    SWATCH_COLORS,
)

logger = logging.getLogger(__name__)

RenderCallback = Callable[[Any], None]


class SurfaceMode(str, Enum):
    DRAW = "draw"
    LABEL = "label"


class SurfaceState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    AWAITING_TEXT = "awaiting_text"


@dataclass(frozen=True)
class PointerEvent:
    client_x: float
    client_y: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class CaptureSurface:
    """
    Event-driven editor over one AnnotationStore.

    Example:
        >>> store = AnnotationStore()
        >>> surface = CaptureSurface(store)
        >>> surface.resize(BoundingBox(0, 0, 400, 300))
        >>> surface.pointer_down(PointerEvent(10, 10))
        >>> surface.pointer_move(PointerEvent(20, 20))
        >>> surface.pointer_up()
        >>> len(store.strokes)
        1
    """

    def __init__(
        self,
        store: AnnotationStore,
        color: str = DEFAULT_ANNOTATION_COLOR,
        stroke_width: float = DEFAULT_STROKE_WIDTH,
        font_size: float = DEFAULT_FONT_SIZE,
        on_render: Optional[RenderCallback] = None,
    ):
        self.store = store
        self.on_render = on_render
        self._mode = SurfaceMode.DRAW
        self._state = SurfaceState.IDLE
        self._box: Optional[BoundingBox] = None
        self._enabled = True
        self._pending_position: Optional[Point] = None
        self._label_text = ""
        self._color = DEFAULT_ANNOTATION_COLOR
        self._stroke_width = float(DEFAULT_STROKE_WIDTH)
        self._font_size = float(DEFAULT_FONT_SIZE)

        self.set_color(color)
        self.set_stroke_width(stroke_width)
        self.set_font_size(font_size)

    # ------------------------------------------------------------------
    # Tool settings

    @property
    def mode(self) -> SurfaceMode:
        return self._mode

    @property
    def state(self) -> SurfaceState:
        return self._state

    @property
    def color(self) -> str:
        return self._color

    @property
    def stroke_width(self) -> float:
        return self._stroke_width

    @property
    def font_size(self) -> float:
        return self._font_size

    @property
    def box(self) -> Optional[BoundingBox]:
        return self._box

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def pending_position(self) -> Optional[Point]:
        return self._pending_position

    @property
    def label_text(self) -> str:
        return self._label_text

    @property
    def can_confirm_label(self) -> bool:
        return self._state is SurfaceState.AWAITING_TEXT and bool(self._label_text.strip())

    def set_mode(self, mode: Union[SurfaceMode, str]) -> None:
        """
        Switch between draw and label mode.

        Any open stroke or pending label is dropped without committing.

        Raises:
            ValueError: If mode is not a known mode
        """
        mode = SurfaceMode(mode)
        if self._state is SurfaceState.DRAWING:
            self.store.discard_stroke()
            logger.debug("Mode switch cancelled the open stroke")
        self._reset_pending_label()
        self._state = SurfaceState.IDLE
        self._mode = mode
        self.render()

    def set_color(self, color: str) -> None:
        """
        Raises:
            ValueError: If color is not a swatch color or the default
        """
        normalized = str(color).lower()
        if normalized not in SWATCH_COLORS and normalized != DEFAULT_ANNOTATION_COLOR:
            raise ValueError(f"Color {color!r} is not in the swatch: {', '.join(SWATCH_COLORS)}")
        self._color = normalized

    def set_stroke_width(self, width: float) -> None:
        self._stroke_width = float(_clamp(float(width), MIN_STROKE_WIDTH, MAX_STROKE_WIDTH))

    def set_font_size(self, size: float) -> None:
        self._font_size = float(_clamp(float(size), MIN_FONT_SIZE, MAX_FONT_SIZE))

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    @contextmanager
    def suspended(self) -> Iterator["CaptureSurface"]:
        """Ignore input for the duration of the block (e.g. while exporting)."""
        previous = self._enabled
        self._enabled = False
        try:
            yield self
        finally:
            self._enabled = previous

    # ------------------------------------------------------------------
    # Coordinate handling

    def resize(self, box: BoundingBox) -> None:
        """
        Redefine the displayed box and re-render everything at the new size.

        The store's records are not rescaled; an empty store adopts the new
        box as its annotation space.
        """
        self._box = box
        if box.size.is_known and (self.store.space is None or self._store_is_blank()):
            self.store.space = box.size
        logger.debug(f"Surface resized to {box.width}x{box.height}")
        self.render()

    def _store_is_blank(self) -> bool:
        return self.store.is_empty and not self.store.has_open_stroke

    def _space_to_box(self) -> ScaleTransform:
        target = self._box.size if self._box is not None else None
        return ScaleTransform.between(self.store.space, target)

    def to_space(self, event: PointerEvent) -> Point:
        """Resolve an event position to a point in the store's annotation space."""
        if self._box is None:
            local = Point(event.client_x, event.client_y)
        else:
            local = self._box.to_local(event.client_x, event.client_y)
        return self._space_to_box().inverse().apply_point(local)

    def _length_in_space(self, length: float) -> float:
        return length / self._space_to_box().length_scale

    # ------------------------------------------------------------------
    # Pointer input

    def pointer_down(self, event: PointerEvent) -> None:
        if not self._enabled or self._mode is not SurfaceMode.DRAW:
            return
        point = self.to_space(event)
        self.store.begin_stroke(point, self._color, self._length_in_space(self._stroke_width))
        self._state = SurfaceState.DRAWING
        self.render()

    def pointer_move(self, event: PointerEvent) -> None:
        if not self._enabled or self._state is not SurfaceState.DRAWING:
            return
        self.store.extend_stroke(self.to_space(event))
        self.render()

    def pointer_up(self, event: Optional[PointerEvent] = None) -> Optional[Stroke]:
        """End the gesture and commit the stroke. Returns the committed stroke."""
        if not self._enabled or self._state is not SurfaceState.DRAWING:
            return None
        stroke = self.store.commit_stroke()
        self._state = SurfaceState.IDLE
        self.render()
        return stroke

    def pointer_leave(self, event: Optional[PointerEvent] = None) -> Optional[Stroke]:
        return self.pointer_up(event)

    def click(self, event: PointerEvent) -> None:
        """Fix the anchor of a new label (label mode only)."""
        if not self._enabled or self._mode is not SurfaceMode.LABEL:
            return
        if self._state is not SurfaceState.IDLE:
            return
        self._pending_position = self.to_space(event)
        self._label_text = ""
        self._state = SurfaceState.AWAITING_TEXT
        logger.debug(f"Awaiting label text at {self._pending_position}")

    # Touch input: only the first touch is followed

    def touch_start(self, touches: Sequence[PointerEvent]) -> None:
        if not touches:
            return
        if self._mode is SurfaceMode.LABEL:
            self.click(touches[0])
        else:
            self.pointer_down(touches[0])

    def touch_move(self, touches: Sequence[PointerEvent]) -> None:
        if touches:
            self.pointer_move(touches[0])

    def touch_end(self, changed_touches: Sequence[PointerEvent] = ()) -> Optional[Stroke]:
        return self.pointer_up(changed_touches[0] if changed_touches else None)

    def touch_cancel(self) -> None:
        """Drop the stroke of an interrupted gesture without committing it."""
        if self._state is not SurfaceState.DRAWING:
            return
        self.store.discard_stroke()
        self._state = SurfaceState.IDLE
        self.render()

    # ------------------------------------------------------------------
    # Label entry

    def set_label_text(self, text: str) -> None:
        if self._state is SurfaceState.AWAITING_TEXT:
            self._label_text = text or ""

    def confirm_label(self) -> Optional[Label]:
        """
        Commit the pending label. Blank text is ignored and the surface keeps
        waiting for text.
        """
        if self._state is not SurfaceState.AWAITING_TEXT or self._pending_position is None:
            return None
        label = self.store.add_label(
            self._pending_position,
            self._label_text,
            self._length_in_space(self._font_size),
            self._color,
        )
        if label is None:
            return None
        self._reset_pending_label()
        self._state = SurfaceState.IDLE
        self.render()
        return label

    def cancel_label(self) -> None:
        if self._state is not SurfaceState.AWAITING_TEXT:
            return
        self._reset_pending_label()
        self._state = SurfaceState.IDLE

    def _reset_pending_label(self) -> None:
        self._pending_position = None
        self._label_text = ""

    # ------------------------------------------------------------------
    # Editing commands

    def undo(self) -> Optional[Annotation]:
        removed = self.store.undo()
        if removed is not None:
            self.render()
        return removed

    def clear_all(self) -> None:
        self.store.clear_all()
        if self._state is SurfaceState.DRAWING:
            self._state = SurfaceState.IDLE
        self.render()

    # ------------------------------------------------------------------
    # Rendering

    def preview_items(self) -> List[Annotation]:
        """Committed strokes, the open stroke, then labels."""
        items: List[Annotation] = list(self.store.strokes)
        current = self.store.current_stroke
        if current is not None:
            items.append(current)
        items.extend(self.store.labels)
        return items

    def render_preview(self) -> Optional[Any]:
        """
        Render the preview overlay at the current box size.

        Returns:
            Transparent RGBA PIL Image, or None while the box size is unknown
        """
        if self._box is None or not self._box.size.is_known:
            return None
        return render_overlay(self._box.size, self.preview_items(), self._space_to_box())

    def render(self) -> Optional[Any]:
        overlay = self.render_preview()
        if overlay is not None and self.on_render is not None:
            self.on_render(overlay)
        return overlay
