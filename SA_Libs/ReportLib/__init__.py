"""
ReportLib - Report rasters

Filters a project's issues and prepares the flattened photos and detail
lines the report composer lays out.
"""

from SA_Libs.ReportLib.report_images import (
    ReportEntry,
    ReportFilter,
    build_issue_entries,
    build_report_entries,
    filter_issues,
    format_report_date,
    report_file_name,
    unique_assignees,
)

__all__ = [
    "ReportEntry",
    "ReportFilter",
    "build_issue_entries",
    "build_report_entries",
    "filter_issues",
    "format_report_date",
    "report_file_name",
    "unique_assignees",
]
