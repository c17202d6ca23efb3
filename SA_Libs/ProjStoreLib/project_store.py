"""
Audit data storage for Site Audit.

Two JSON documents live in the store directory:

- ``audit_projects.json``: list of projects, each with its issues and photos
- ``audit_settings.json``: report branding and wording

Writes are whole-document replacements. Reads fail soft: a missing or
corrupt document loads as empty (projects) or defaults (settings), and
malformed entries inside a document are skipped.

Functions:
    get_store_dir: Resolve (and create) the store directory
    load_projects: Load every stored project
    get_project: Load one project by id
    save_project: Insert or replace one project
    delete_project: Remove one project
    load_settings: Load settings, falling back to defaults
    save_settings: Persist settings
    save_photo_annotations: Replace one photo's annotation records
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from SA_Libs.ProjStoreLib.project_models import Project, Settings
from SA_Libs.constants import (
    PROJECTS_KEY,
    SETTINGS_KEY,
    STORE_DIR_NAME,
    STORE_EXTENSION,
)

logger = logging.getLogger(__name__)


class ProjectNotFoundError(LookupError):
    """Raised when a project id is not in the store."""


class IssueNotFoundError(LookupError):
    pass


class PhotoNotFoundError(LookupError):
    pass


def get_store_dir(base_dir: Path) -> Path:
    store_dir = Path(base_dir) / STORE_DIR_NAME
    store_dir.mkdir(parents=True, exist_ok=True)
    return store_dir


def _document_path(base_dir: Path, key: str) -> Path:
    return get_store_dir(base_dir) / f"{key}{STORE_EXTENSION}"


def _read_document(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"Ignoring unreadable store document {path.name}: {e}")
        return None


def _write_document(path: Path, payload: Any) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    tmp_path.replace(path)


def _load_raw_projects(base_dir: Path) -> List[Dict[str, Any]]:
    payload = _read_document(_document_path(base_dir, PROJECTS_KEY))
    if not isinstance(payload, list):
        return []
    return [entry for entry in payload if isinstance(entry, dict)]


def load_projects(base_dir: Path) -> List[Project]:
    """
    Load all stored projects in stored order.

    Args:
        base_dir: Directory containing the store folder

    Returns:
        List of projects (empty when nothing is stored yet)
    """
    projects: List[Project] = []
    for entry in _load_raw_projects(base_dir):
        try:
            projects.append(Project.from_dict(entry))
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed project {entry.get('id')!r}: {e}")
    return projects


def get_project(base_dir: Path, project_id: str) -> Optional[Project]:
    for project in load_projects(base_dir):
        if project.id == project_id:
            return project
    return None


def save_project(base_dir: Path, project: Project) -> None:
    """Insert ``project``, or replace the stored project with the same id."""
    projects = load_projects(base_dir)
    for index, existing in enumerate(projects):
        if existing.id == project.id:
            projects[index] = project
            break
    else:
        projects.append(project)

    _write_document(
        _document_path(base_dir, PROJECTS_KEY),
        [entry.to_dict() for entry in projects],
    )
    logger.info(f"Saved project {project.name!r} ({project.id})")


def delete_project(base_dir: Path, project_id: str) -> bool:
    """
    Returns:
        True if a project was removed
    """
    projects = load_projects(base_dir)
    remaining = [project for project in projects if project.id != project_id]
    if len(remaining) == len(projects):
        return False

    _write_document(
        _document_path(base_dir, PROJECTS_KEY),
        [entry.to_dict() for entry in remaining],
    )
    logger.info(f"Deleted project {project_id}")
    return True


def load_settings(base_dir: Path) -> Settings:
    payload = _read_document(_document_path(base_dir, SETTINGS_KEY))
    if not isinstance(payload, dict):
        return Settings()
    return Settings.from_dict(payload)


def save_settings(base_dir: Path, settings: Settings) -> None:
    _write_document(_document_path(base_dir, SETTINGS_KEY), settings.to_dict())


def save_photo_annotations(
    base_dir: Path,
    project_id: str,
    issue_id: str,
    photo_id: str,
    records: List[Dict[str, Any]],
    annotation_space: Optional[Dict[str, float]] = None,
) -> Project:
    """
    Replace one photo's annotation records and write the project back whole.

    Raises:
        ProjectNotFoundError: If the project does not exist
        IssueNotFoundError: If the issue does not exist
        PhotoNotFoundError: If the photo does not exist

    Returns:
        The updated project
    """
    project = get_project(base_dir, project_id)
    if project is None:
        raise ProjectNotFoundError(f"Project not found: {project_id}")

    issue = project.get_issue(issue_id)
    if issue is None:
        raise IssueNotFoundError(f"Issue {issue_id} not found in project {project_id}")

    photo = issue.get_photo(photo_id)
    if photo is None:
        raise PhotoNotFoundError(f"Photo {photo_id} not found in issue {issue_id}")

    photo.annotations = list(records)
    photo.annotation_space = dict(annotation_space) if annotation_space is not None else None
    save_project(base_dir, project)
    return project
