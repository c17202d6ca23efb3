"""
Annotate session.

Editing session for one photo of one issue: loads the photo's records into an
AnnotationStore, drives a CaptureSurface over it, tracks the issue details
edited alongside the photo, and writes everything back on save.

Classes:
    IssueDetails: Editable issue fields shown next to the photo
    AnnotateSession: Open/save/cancel/download lifecycle for one photo
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Optional

from SA_Libs.AnnotationLib.annotation_store import AnnotationStore
from SA_Libs.AnnotationLib.capture_surface import CaptureSurface
from SA_Libs.AnnotationLib.export_compositor import export_snapshot
from SA_Libs.AnnotationLib.geometry import Size
from SA_Libs.ImageEditingLib.image_editing_ops import load_image_source
from SA_Libs.ImageEditingLib.image_models import EncodedImage
from SA_Libs.ProjStoreLib.project_models import Issue, Photo, Project
from SA_Libs.ProjStoreLib.project_store import (
    IssueNotFoundError,
    PhotoNotFoundError,
    ProjectNotFoundError,
    get_project,
    save_project,
)
from SA_Libs.constants import EXPORT_QUALITY, ISSUE_PRIORITIES, ISSUE_TYPES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssueDetails:
    title: str = ""
    description: str = ""
    location: str = ""
    type: str = "issue"
    priority: str = "medium"
    assigned_to: str = ""

    def validate(self) -> None:
        """
        Raises:
            ValueError: If type or priority is not an allowed value
        """
        if self.type not in ISSUE_TYPES:
            raise ValueError(f"Invalid issue type {self.type!r}. Must be one of {ISSUE_TYPES}")
        if self.priority not in ISSUE_PRIORITIES:
            raise ValueError(f"Invalid priority {self.priority!r}. Must be one of {ISSUE_PRIORITIES}")

    @classmethod
    def from_issue(cls, issue: Issue) -> "IssueDetails":
        return cls(
            title=issue.title,
            description=issue.description,
            location=issue.location,
            type=issue.type,
            priority=issue.priority,
            assigned_to=issue.assigned_to,
        )

    def apply_to(self, issue: Issue) -> None:
        issue.title = self.title
        issue.description = self.description
        issue.location = self.location
        issue.type = self.type
        issue.priority = self.priority
        issue.assigned_to = self.assigned_to


class AnnotateSession:
    """
    One open annotate dialog.

    Example:
        >>> session = AnnotateSession(base_dir, project.id, issue.id, photo.id)
        >>> session.surface.resize(BoundingBox(0, 0, 400, 300))
        >>> session.surface.pointer_down(PointerEvent(10, 10))
        >>> session.surface.pointer_move(PointerEvent(50, 40))
        >>> session.surface.pointer_up()
        >>> session.save()
    """

    def __init__(
        self,
        base_dir: Path,
        project_id: str,
        issue_id: str,
        photo_id: str,
        on_close: Optional[Callable[[], None]] = None,
    ):
        project = get_project(base_dir, project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        issue = project.get_issue(issue_id)
        if issue is None:
            raise IssueNotFoundError(f"Issue {issue_id} not found in project {project_id}")
        photo = issue.get_photo(photo_id)
        if photo is None:
            raise PhotoNotFoundError(f"Photo {photo_id} not found in issue {issue_id}")

        self.base_dir = Path(base_dir)
        self.project: Project = project
        self.issue: Issue = issue
        self.photo: Photo = photo
        self.on_close = on_close
        self.closed = False

        self.store = AnnotationStore(space=Size.from_dict(photo.annotation_space))
        self.skipped_records = self.store.load(photo.annotations)
        self.surface = CaptureSurface(self.store)
        self._details = IssueDetails.from_issue(issue)

        logger.info(
            f"Opened photo {photo.file_name!r} with {len(self.store.items)} annotations"
            f" ({self.skipped_records} skipped)"
        )

    @property
    def details(self) -> IssueDetails:
        return self._details

    def update_details(self, **changes: Any) -> IssueDetails:
        """
        Change one or more issue detail fields.

        Raises:
            ValueError: If the resulting type or priority is invalid
            TypeError: If an unknown field name is passed
        """
        details = replace(self._details, **changes)
        details.validate()
        self._details = details
        return details

    def save(self) -> Project:
        """
        Write the annotation list, its space and the edited details back and
        close the session. The project is replaced as a whole.
        """
        self._details.validate()
        self._details.apply_to(self.issue)
        self.photo.annotations = self.store.to_records()
        space = self.store.space
        self.photo.annotation_space = space.to_dict() if space is not None and space.is_known else None

        save_project(self.base_dir, self.project)
        logger.info(f"Saved {len(self.photo.annotations)} annotations for photo {self.photo.id}")
        self._close()
        return self.project

    def cancel(self) -> None:
        """Close without writing anything."""
        self._close()

    def download(
        self,
        image: Any = None,
        loader: Callable[[Any], Any] = load_image_source,
        quality: int = EXPORT_QUALITY,
    ) -> EncodedImage:
        """
        Flatten the current annotation list onto the photo.

        The list is copied before flattening and the surface ignores input
        until the export returns. Closing state is not affected.

        Args:
            image: Already decoded photo; loaded from the photo url when None
            loader: Image source decoder
            quality: JPEG quality (0-100)
        """
        with self.surface.suspended():
            snapshot = self.store.snapshot()
            if image is None:
                image = loader(self.photo.url)
            return export_snapshot(image, snapshot, file_name=self.photo.file_name, quality=quality)

    def _close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.on_close is not None:
            self.on_close()
