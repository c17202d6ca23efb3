"""
AnnotationLib - Photo annotation engine

Coordinate model, stroke/label records, the in-memory annotation store,
the raster renderer, the interactive capture surface, the export compositor
and the per-photo annotate session. The PyQt5 window lives in
``annotate_window`` and is imported separately.
"""

from SA_Libs.AnnotationLib.geometry import BoundingBox, Point, ScaleTransform, Size
from SA_Libs.AnnotationLib.annotation_models import (
    Annotation,
    AnnotationKind,
    Label,
    Stroke,
    label_to_record,
    parse_record,
    parse_records,
    scale_annotation,
    scale_annotations,
    stroke_to_record,
)
from SA_Libs.AnnotationLib.annotation_store import AnnotationSnapshot, AnnotationStore
from SA_Libs.AnnotationLib.renderer import render_annotations, render_overlay
from SA_Libs.AnnotationLib.capture_surface import (
    CaptureSurface,
    PointerEvent,
    SurfaceMode,
    SurfaceState,
)
from SA_Libs.AnnotationLib.export_compositor import (
    ExportError,
    export_photo,
    export_snapshot,
    flatten_image,
    prepare_annotations,
    snapshot_from_records,
)
from SA_Libs.AnnotationLib.annotate_session import AnnotateSession, IssueDetails

__all__ = [
    "BoundingBox",
    "Point",
    "ScaleTransform",
    "Size",
    "Annotation",
    "AnnotationKind",
    "Label",
    "Stroke",
    "label_to_record",
    "parse_record",
    "parse_records",
    "scale_annotation",
    "scale_annotations",
    "stroke_to_record",
    "AnnotationSnapshot",
    "AnnotationStore",
    "render_annotations",
    "render_overlay",
    "CaptureSurface",
    "PointerEvent",
    "SurfaceMode",
    "SurfaceState",
    "ExportError",
    "export_photo",
    "export_snapshot",
    "flatten_image",
    "prepare_annotations",
    "snapshot_from_records",
    "AnnotateSession",
    "IssueDetails",
]
