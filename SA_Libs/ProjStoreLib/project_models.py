"""
Project data models for Site Audit.

Projects hold ordered issues, issues hold ordered photos, and every photo
carries its own annotation records. All models convert to and from the
persisted JSON shape, which uses camelCase field names.

Classes:
    Photo: One uploaded photo with its annotation records
    SignOffPhoto: Evidence photo attached when an issue is signed off
    Issue: One audit finding
    Project: One audit with its issues
    Settings: Report branding and wording
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from SA_Libs.constants import (
    DEFAULT_ISSUE_TYPE,
    DEFAULT_PRIORITY,
    DEFAULT_PROJECT_STATUS,
    DEFAULT_SETTINGS,
    FIELD_ANNOTATION_SPACE,
    FIELD_ANNOTATIONS,
    FIELD_FILE_NAME,
    FIELD_ID,
    FIELD_ORDER,
    FIELD_UPLOAD_DATE,
    FIELD_URL,
    ISSUE_PRIORITIES,
    ISSUE_TYPES,
    PROJECT_STATUSES,
)


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_choice(value: Any, choices, default: str) -> str:
    value = str(value or "")
    return value if value in choices else default


def _dicts(values: Any) -> List[Dict[str, Any]]:
    """Keep only mapping entries of a persisted list."""
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, dict)]


@dataclass
class Photo:
    """
    Uploaded photo.

    ``annotation_space`` is the ``{width, height}`` mapping the records are
    expressed in; None when the photo was never annotated.
    """
    url: str
    file_name: str = ""
    order: int = 1
    id: str = field(default_factory=_new_id)
    upload_date: str = field(default_factory=_now)
    annotations: List[Dict[str, Any]] = field(default_factory=list)
    annotation_space: Optional[Dict[str, float]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            FIELD_ID: self.id,
            FIELD_URL: self.url,
            FIELD_FILE_NAME: self.file_name,
            FIELD_ORDER: self.order,
            FIELD_ANNOTATIONS: list(self.annotations),
            FIELD_UPLOAD_DATE: self.upload_date,
        }
        if self.annotation_space is not None:
            payload[FIELD_ANNOTATION_SPACE] = dict(self.annotation_space)
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Photo":
        space = data.get(FIELD_ANNOTATION_SPACE)
        return cls(
            id=str(data.get(FIELD_ID) or _new_id()),
            url=str(data.get(FIELD_URL) or ""),
            file_name=str(data.get(FIELD_FILE_NAME) or ""),
            order=_as_int(data.get(FIELD_ORDER), 1),
            upload_date=str(data.get(FIELD_UPLOAD_DATE) or ""),
            annotations=_dicts(data.get(FIELD_ANNOTATIONS)),
            annotation_space=dict(space) if isinstance(space, dict) else None,
        )


@dataclass
class SignOffPhoto:
    url: str
    file_name: str = ""
    id: str = field(default_factory=_new_id)
    upload_date: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            FIELD_ID: self.id,
            FIELD_URL: self.url,
            FIELD_FILE_NAME: self.file_name,
            FIELD_UPLOAD_DATE: self.upload_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignOffPhoto":
        return cls(
            id=str(data.get(FIELD_ID) or _new_id()),
            url=str(data.get(FIELD_URL) or ""),
            file_name=str(data.get(FIELD_FILE_NAME) or ""),
            upload_date=str(data.get(FIELD_UPLOAD_DATE) or ""),
        )


@dataclass
class Issue:
    title: str = ""
    description: str = ""
    type: str = DEFAULT_ISSUE_TYPE
    priority: str = DEFAULT_PRIORITY
    location: str = ""
    assigned_to: str = ""
    completed: bool = False
    signed_off: bool = False
    sign_off_date: Optional[str] = None
    sign_off_by: Optional[str] = None
    sign_off_notes: Optional[str] = None
    sign_off_photo: Optional[SignOffPhoto] = None
    order: int = 1
    photos: List[Photo] = field(default_factory=list)
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        if self.type not in ISSUE_TYPES:
            raise ValueError(f"Invalid issue type {self.type!r}. Must be one of {ISSUE_TYPES}")
        if self.priority not in ISSUE_PRIORITIES:
            raise ValueError(f"Invalid priority {self.priority!r}. Must be one of {ISSUE_PRIORITIES}")

    def get_photo(self, photo_id: str) -> Optional[Photo]:
        for photo in self.photos:
            if photo.id == photo_id:
                return photo
        return None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "priority": self.priority,
            "location": self.location,
            "assignedTo": self.assigned_to,
            "completed": self.completed,
            "signedOff": self.signed_off,
            "order": self.order,
            "photos": [photo.to_dict() for photo in self.photos],
        }
        if self.sign_off_date is not None:
            payload["signOffDate"] = self.sign_off_date
        if self.sign_off_by is not None:
            payload["signOffBy"] = self.sign_off_by
        if self.sign_off_notes is not None:
            payload["signOffNotes"] = self.sign_off_notes
        if self.sign_off_photo is not None:
            payload["signOffPhoto"] = self.sign_off_photo.to_dict()
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        sign_off_photo = data.get("signOffPhoto")
        return cls(
            id=str(data.get("id") or _new_id()),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            type=_as_choice(data.get("type"), ISSUE_TYPES, DEFAULT_ISSUE_TYPE),
            priority=_as_choice(data.get("priority"), ISSUE_PRIORITIES, DEFAULT_PRIORITY),
            location=str(data.get("location") or ""),
            assigned_to=str(data.get("assignedTo") or ""),
            completed=bool(data.get("completed", False)),
            signed_off=bool(data.get("signedOff", False)),
            sign_off_date=data.get("signOffDate"),
            sign_off_by=data.get("signOffBy"),
            sign_off_notes=data.get("signOffNotes"),
            sign_off_photo=SignOffPhoto.from_dict(sign_off_photo) if isinstance(sign_off_photo, dict) else None,
            order=_as_int(data.get("order"), 1),
            photos=[Photo.from_dict(p) for p in _dicts(data.get("photos"))],
        )


@dataclass
class Project:
    name: str
    reference_code: str = ""
    audit_date: str = ""
    location: str = ""
    client: str = ""
    auditor_name: str = ""
    status: str = DEFAULT_PROJECT_STATUS
    issues: List[Issue] = field(default_factory=list)
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=_now)

    def __post_init__(self):
        if self.status not in PROJECT_STATUSES:
            raise ValueError(f"Invalid project status {self.status!r}. Must be one of {PROJECT_STATUSES}")

    def get_issue(self, issue_id: str) -> Optional[Issue]:
        for issue in self.issues:
            if issue.id == issue_id:
                return issue
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "referenceCode": self.reference_code,
            "auditDate": self.audit_date,
            "location": self.location,
            "client": self.client,
            "auditorName": self.auditor_name,
            "createdAt": self.created_at,
            "status": self.status,
            "issues": [issue.to_dict() for issue in self.issues],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=str(data.get("id") or _new_id()),
            name=str(data.get("name") or ""),
            reference_code=str(data.get("referenceCode") or ""),
            audit_date=str(data.get("auditDate") or ""),
            location=str(data.get("location") or ""),
            client=str(data.get("client") or ""),
            auditor_name=str(data.get("auditorName") or ""),
            created_at=str(data.get("createdAt") or ""),
            status=_as_choice(data.get("status"), PROJECT_STATUSES, DEFAULT_PROJECT_STATUS),
            issues=[Issue.from_dict(i) for i in _dicts(data.get("issues"))],
        )


@dataclass
class Settings:
    company_name: str = DEFAULT_SETTINGS["companyName"]
    prepared_for_label: str = DEFAULT_SETTINGS["preparedForLabel"]
    assigned_to_label: str = DEFAULT_SETTINGS["assignedToLabel"]
    issue_label: str = DEFAULT_SETTINGS["issueLabel"]
    issues_label: str = DEFAULT_SETTINGS["issuesLabel"]
    report_footer: str = DEFAULT_SETTINGS["reportFooter"]
    company_logo: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "companyName": self.company_name,
            "preparedForLabel": self.prepared_for_label,
            "assignedToLabel": self.assigned_to_label,
            "issueLabel": self.issue_label,
            "issuesLabel": self.issues_label,
            "reportFooter": self.report_footer,
        }
        if self.company_logo is not None:
            payload["companyLogo"] = self.company_logo
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        merged = {**DEFAULT_SETTINGS, **{k: v for k, v in data.items() if v is not None}}
        return cls(
            company_name=str(merged["companyName"]),
            prepared_for_label=str(merged["preparedForLabel"]),
            assigned_to_label=str(merged["assignedToLabel"]),
            issue_label=str(merged["issueLabel"]),
            issues_label=str(merged["issuesLabel"]),
            report_footer=str(merged["reportFooter"]),
            company_logo=merged.get("companyLogo"),
        )
