"""
Report rasters for Site Audit.

Prepares everything the report composer needs per issue: the flattened photos
at native resolution and the detail lines printed next to them. Page layout
and PDF writing happen elsewhere.

A photo that cannot be loaded or encoded never aborts the batch; it becomes a
text-only entry flagged with ``REPORT_IMAGE_MISSING_NOTE``.

Classes:
    ReportFilter: Assignee and completion filter for a report run
    ReportEntry: One row of the report (photo plus detail lines)

Functions:
    filter_issues: Issues matching a filter, sorted by order
    unique_assignees: Distinct non-empty assignees of a project
    build_issue_entries: Report rows for one issue
    build_report_entries: Report rows for a whole filtered project
    report_file_name: Deterministic report filename
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional

from SA_Libs.AnnotationLib.annotation_store import AnnotationSnapshot
from SA_Libs.AnnotationLib.export_compositor import export_photo, export_snapshot
from SA_Libs.ImageEditingLib.image_editing_ops import load_image_source
from SA_Libs.ImageEditingLib.image_models import EncodedImage
from SA_Libs.ProjStoreLib.project_models import Issue, Project, Settings
from SA_Libs.constants import (
    EXPORT_QUALITY,
    REPORT_ALL_ASSIGNEES,
    REPORT_EXTENSION,
    REPORT_FILE_SUFFIX,
    REPORT_IMAGE_MISSING_NOTE,
)

logger = logging.getLogger(__name__)

ImageLoader = Callable[[Any], Any]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


@dataclass(frozen=True)
class ReportFilter:
    assignee: str = REPORT_ALL_ASSIGNEES
    include_completed: bool = True
    include_pending: bool = True

    def matches(self, issue: Issue) -> bool:
        matches_assignee = self.assignee == REPORT_ALL_ASSIGNEES or issue.assigned_to == self.assignee
        matches_status = (self.include_completed and issue.completed) or (
            self.include_pending and not issue.completed
        )
        return matches_assignee and matches_status


@dataclass
class ReportEntry:
    """
    One report row.

    Attributes:
        heading: Issue heading, e.g. "Issue #3: Cracked tile"
        details: Detail lines in print order
        image: Flattened JPEG, or None for text-only rows
        image_missing: True when a photo existed but could not be produced
        sign_off_details: Sign-off block lines (empty unless signed off)
        description: Issue description printed under the details
    """
    issue_id: str
    heading: str
    details: List[str] = field(default_factory=list)
    image: Optional[EncodedImage] = None
    image_missing: bool = False
    sign_off_details: List[str] = field(default_factory=list)
    description: str = ""
    photo_id: Optional[str] = None


def filter_issues(project: Project, report_filter: Optional[ReportFilter] = None) -> List[Issue]:
    report_filter = report_filter or ReportFilter()
    issues = [issue for issue in project.issues if report_filter.matches(issue)]
    return sorted(issues, key=lambda issue: issue.order)


def unique_assignees(project: Project) -> List[str]:
    """Distinct assignees in first-seen order."""
    seen: List[str] = []
    for issue in project.issues:
        if issue.assigned_to and issue.assigned_to not in seen:
            seen.append(issue.assigned_to)
    return seen


def format_report_date(value: Optional[str]) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return value


def _heading(issue: Issue, settings: Settings) -> str:
    return f"{settings.issue_label or 'Issue'} #{issue.order}: {issue.title}"


def _status(issue: Issue) -> str:
    return "Completed" if issue.completed else "Pending"


def _optional_lines(issue: Issue, settings: Settings) -> List[str]:
    lines = []
    if issue.location:
        lines.append(f"Location: {issue.location}")
    if issue.assigned_to:
        lines.append(f"{settings.assigned_to_label or 'Assigned To'}: {issue.assigned_to}")
    return lines


def _sign_off_lines(issue: Issue) -> List[str]:
    if not issue.signed_off:
        return []
    lines = [f"Signed off: {format_report_date(issue.sign_off_date)}"]
    if issue.sign_off_notes:
        lines.append(f"Notes: {issue.sign_off_notes}")
    if issue.sign_off_photo is not None:
        lines.append(f"Evidence photo: {issue.sign_off_photo.file_name}")
    return lines


def _text_only_entry(issue: Issue, settings: Settings) -> ReportEntry:
    details = [f"Type: {issue.type} | Priority: {issue.priority} | Status: {_status(issue)}"]
    details.extend(_optional_lines(issue, settings))
    if issue.description:
        details.append(f"Description: {issue.description}")
    return ReportEntry(issue_id=issue.id, heading=_heading(issue, settings), details=details)


def _sign_off_entry(
    issue: Issue,
    settings: Settings,
    loader: ImageLoader,
    quality: int,
) -> Optional[ReportEntry]:
    sign_off_photo = issue.sign_off_photo
    try:
        image = loader(sign_off_photo.url)
        encoded = export_snapshot(
            image,
            AnnotationSnapshot(strokes=(), labels=()),
            file_name=sign_off_photo.file_name,
            quality=quality,
        )
    except (OSError, ValueError, ArithmeticError) as e:
        logger.warning(f"Skipping close-out photo {sign_off_photo.file_name!r}: {e}")
        return None

    details = [
        f"Close-out Photo: {sign_off_photo.file_name}",
        f"Type: {issue.type} | Priority: {issue.priority}",
        f"Status: {_status(issue)}",
    ]
    details.extend(_optional_lines(issue, settings))
    if issue.signed_off:
        details.append(f"Signed Off: {format_report_date(issue.sign_off_date)}")
    if issue.sign_off_notes:
        details.append(f"Sign-off Notes: {issue.sign_off_notes}")

    return ReportEntry(
        issue_id=issue.id,
        heading=_heading(issue, settings),
        details=details,
        image=encoded,
        photo_id=sign_off_photo.id,
    )


def build_issue_entries(
    issue: Issue,
    settings: Optional[Settings] = None,
    loader: ImageLoader = load_image_source,
    quality: int = EXPORT_QUALITY,
) -> List[ReportEntry]:
    """
    Build the report rows for one issue.

    Each photo becomes one row with its flattened JPEG. Photos that fail to
    load or encode become text-only rows. An issue without photos gets one
    text-only row, followed by a close-out row when it has a sign-off photo.

    Args:
        issue: Issue to render
        settings: Report wording (defaults when None)
        loader: Image source decoder
        quality: JPEG quality (0-100)

    Returns:
        Rows in print order
    """
    settings = settings or Settings()

    if not issue.photos:
        rows = [_text_only_entry(issue, settings)]
        if issue.sign_off_photo is not None:
            sign_off = _sign_off_entry(issue, settings, loader, quality)
            if sign_off is not None:
                rows.append(sign_off)
        return rows

    entries: List[ReportEntry] = []
    for photo in sorted(issue.photos, key=lambda p: p.order):
        heading = _heading(issue, settings)
        try:
            encoded = export_photo(photo, loader=loader, quality=quality)
        except (OSError, ValueError, ArithmeticError) as e:
            logger.warning(f"Could not flatten photo {photo.file_name!r} of issue {issue.id}: {e}")
            entries.append(
                ReportEntry(
                    issue_id=issue.id,
                    heading=heading,
                    details=[f"Photo #{photo.order}: {photo.file_name} {REPORT_IMAGE_MISSING_NOTE}"],
                    image_missing=True,
                    photo_id=photo.id,
                )
            )
            continue

        details = [
            f"Photo #{photo.order}: {photo.file_name}",
            f"Type: {issue.type} | Priority: {issue.priority}",
            f"Status: {_status(issue)}",
        ]
        details.extend(_optional_lines(issue, settings))
        if issue.signed_off:
            details.append(f"Signed Off: {format_report_date(issue.sign_off_date)}")

        entries.append(
            ReportEntry(
                issue_id=issue.id,
                heading=heading,
                details=details,
                image=encoded,
                sign_off_details=_sign_off_lines(issue),
                description=issue.description,
                photo_id=photo.id,
            )
        )

    return entries


def build_report_entries(
    project: Project,
    report_filter: Optional[ReportFilter] = None,
    settings: Optional[Settings] = None,
    loader: ImageLoader = load_image_source,
    quality: int = EXPORT_QUALITY,
) -> List[ReportEntry]:
    entries: List[ReportEntry] = []
    for issue in filter_issues(project, report_filter):
        entries.extend(build_issue_entries(issue, settings, loader=loader, quality=quality))
    logger.info(f"Prepared {len(entries)} report rows for project {project.name!r}")
    return entries


def report_file_name(project: Project, assignee: str = REPORT_ALL_ASSIGNEES) -> str:
    """``<name>_audit_report[_<assignee>].pdf`` with unsafe characters replaced."""
    name = _UNSAFE_FILENAME_CHARS.sub("_", project.name)
    suffix = ""
    if assignee and assignee != REPORT_ALL_ASSIGNEES:
        suffix = f"_{_UNSAFE_FILENAME_CHARS.sub('_', assignee)}"
    return f"{name}{REPORT_FILE_SUFFIX}{suffix}{REPORT_EXTENSION}"
