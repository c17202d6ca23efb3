"""
ProjStoreLib - Audit data storage

Project, issue, photo and settings models plus the JSON store that
persists them.
"""

from SA_Libs.ProjStoreLib.project_models import (
    Issue,
    Photo,
    Project,
    Settings,
    SignOffPhoto,
)
from SA_Libs.ProjStoreLib.project_store import (
    IssueNotFoundError,
    PhotoNotFoundError,
    ProjectNotFoundError,
    delete_project,
    get_project,
    get_store_dir,
    load_projects,
    load_settings,
    save_photo_annotations,
    save_project,
    save_settings,
)

__all__ = [
    "Issue",
    "Photo",
    "Project",
    "Settings",
    "SignOffPhoto",
    "IssueNotFoundError",
    "PhotoNotFoundError",
    "ProjectNotFoundError",
    "delete_project",
    "get_project",
    "get_store_dir",
    "load_projects",
    "load_settings",
    "save_photo_annotations",
    "save_project",
    "save_settings",
]
