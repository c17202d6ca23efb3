"""
Pytest configuration and shared fixtures for Site Audit tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import pytest
from PIL import Image

from SA_Libs.ProjStoreLib.project_models import Issue, Photo, Project
from SA_Libs.ProjStoreLib.project_store import save_project


@pytest.fixture
def store_dir(tmp_path):
    """
    Provide a temporary base directory for the audit store.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Path object pointing to a temporary directory
    """
    return tmp_path


@pytest.fixture
def photo_path(tmp_path):
    """Write an 800x600 white PNG and return its path."""
    path = tmp_path / "site.png"
    Image.new("RGB", (800, 600), (255, 255, 255)).save(path)
    return path


@pytest.fixture
def stored_project(store_dir, photo_path):
    """
    Save a project with one issue holding one photo.

    Returns:
        The saved Project
    """
    photo = Photo(url=str(photo_path), file_name="site.png", order=1)
    issue = Issue(title="Cracked tile", location="Lobby", assigned_to="Sam", order=1, photos=[photo])
    project = Project(name="Tower A", location="Main St", issues=[issue])
    save_project(store_dir, project)
    return project


@pytest.fixture
def swatch_colors():
    """
    Provide the swatch colors with their RGBA values.

    Returns:
        List of (hex, (R, G, B, A)) tuples
    """
    return [
        ("#ff0000", (255, 0, 0, 255)),    # Red
        ("#0000ff", (0, 0, 255, 255)),    # Blue
        ("#000000", (0, 0, 0, 255)),      # Black
        ("#ffffff", (255, 255, 255, 255)),  # White
    ]
