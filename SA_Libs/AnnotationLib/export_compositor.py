"""
Export compositor.

Produces the flattened copy of a photo: the original image at its native
resolution with every annotation baked in. Both the single-photo download and
the report side go through ``flatten_image`` and scale from the same source
size, the annotation space persisted with the photo's records.

Classes:
    ExportError: Raised when a flattened raster cannot be encoded

Functions:
    snapshot_from_records: Parse persisted records into an AnnotationSnapshot
    prepare_annotations: Move a snapshot into a target raster's space
    flatten_image: Compose photo and annotations at native resolution
    export_snapshot: Flatten and encode for download/embedding
    export_photo: Flatten and encode a stored photo record
"""

import logging
from typing import Any, Callable, Iterable, List, Optional

from SA_Libs.AnnotationLib.annotation_models import Annotation, parse_records, scale_annotations
from SA_Libs.AnnotationLib.annotation_store import AnnotationSnapshot
from SA_Libs.AnnotationLib.geometry import ScaleTransform, Size
from SA_Libs.AnnotationLib.renderer import render_annotations
from SA_Libs.ImageEditingLib.image_editing_ops import (
    annotated_filename,
    encode_image,
    load_image_source,
)
from SA_Libs.ImageEditingLib.image_models import EncodedImage
from SA_Libs.constants import EXPORT_EXTENSION, EXPORT_FORMAT, EXPORT_QUALITY

logger = logging.getLogger(__name__)

ImageLoader = Callable[[Any], Any]


class ExportError(OSError):
    """Raised when a flattened photo cannot be produced or encoded."""


def snapshot_from_records(records: Optional[Iterable[Any]], space: Any = None) -> AnnotationSnapshot:
    """
    Build a read-only snapshot from a persisted record list.

    Args:
        records: Persisted annotation records (None means no annotations)
        space: Persisted annotation space mapping ``{width, height}`` or a Size

    Returns:
        Snapshot with malformed records skipped
    """
    strokes, labels, _ = parse_records(records)
    if not isinstance(space, Size):
        space = Size.from_dict(space)
    return AnnotationSnapshot(strokes=tuple(strokes), labels=tuple(labels), space=space)


def prepare_annotations(snapshot: AnnotationSnapshot, target: Size) -> List[Annotation]:
    """Express the snapshot's annotations in ``target`` space, in render order."""
    transform = ScaleTransform.between(snapshot.space, target)
    return scale_annotations(snapshot.items, transform)


def flatten_image(image: Any, snapshot: AnnotationSnapshot) -> Any:
    """
    Draw the photo at its natural resolution and render the annotations over it.

    Args:
        image: Source PIL Image (left untouched)
        snapshot: Annotations plus the space they were authored in

    Returns:
        New RGBA PIL Image the size of ``image``
    """
    if not hasattr(image, "size") or not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    canvas = image.convert("RGBA")
    native = Size.of_image(canvas)
    annotations = prepare_annotations(snapshot, native)
    return render_annotations(canvas, annotations)


def export_snapshot(
    image: Any,
    snapshot: AnnotationSnapshot,
    file_name: str = "",
    save_format: str = EXPORT_FORMAT,
    quality: int = EXPORT_QUALITY,
) -> EncodedImage:
    """
    Flatten and encode one photo.

    Raises:
        ExportError: If the raster cannot be encoded
    """
    flattened = flatten_image(image, snapshot)
    try:
        data = encode_image(flattened, save_format=save_format, quality=quality)
    except (OSError, ValueError) as e:
        raise ExportError(f"Failed to encode flattened image {file_name!r}: {e}")

    extension = EXPORT_EXTENSION if save_format.upper() in ("JPEG", "JPG") else f".{save_format.lower()}"
    out_name = annotated_filename(file_name, extension=extension)
    logger.info(f"Exported {out_name} at {flattened.width}x{flattened.height}")
    return EncodedImage(
        file_name=out_name,
        data=data,
        width=flattened.width,
        height=flattened.height,
        save_format=save_format.upper(),
    )


def export_photo(
    photo: Any,
    loader: ImageLoader = load_image_source,
    quality: int = EXPORT_QUALITY,
) -> EncodedImage:
    """
    Flatten a stored photo record.

    ``photo`` needs ``url``, ``file_name``, ``annotations`` and
    ``annotation_space`` attributes, as ProjStoreLib's Photo provides.

    Raises:
        ImageLoadError: If the photo cannot be decoded
        ExportError: If the raster cannot be encoded
    """
    image = loader(photo.url)
    snapshot = snapshot_from_records(photo.annotations, photo.annotation_space)
    return export_snapshot(image, snapshot, file_name=photo.file_name, quality=quality)
