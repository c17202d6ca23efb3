"""
SA_Libs - Site Audit Library Modules

This package contains core functionality for the Site Audit project,
organized into specialized sub-packages:

- AnnotationLib: Photo annotation engine (capture, storage, rendering, export)
- ImageEditingLib: Image decoding, encoding and resizing helpers
- ProjStoreLib: Project file management and persistence
- ReportLib: Flattened photo rasters for report composition
"""

__version__ = "0.1.0"
