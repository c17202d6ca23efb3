"""
Unit tests for report raster preparation.

Tests issue filtering, detail lines, per-photo fallbacks and the report
filename.
"""

import io
import unittest

from PIL import Image

from SA_Libs.ProjStoreLib.project_models import Issue, Photo, Project, Settings, SignOffPhoto
from SA_Libs.ReportLib.report_images import (
    ReportFilter,
    build_issue_entries,
    build_report_entries,
    filter_issues,
    format_report_date,
    report_file_name,
    unique_assignees,
)


def _loader(url):
    if url == "broken":
        raise OSError("cannot read")
    return Image.new("RGB", (640, 480), (255, 255, 255))


def _project():
    return Project(
        name="Tower A / East",
        issues=[
            Issue(title="Third", order=3, assigned_to="Sam", completed=True),
            Issue(title="First", order=1, assigned_to="Kim"),
            Issue(title="Second", order=2, assigned_to="Sam"),
            Issue(title="Fourth", order=4),
        ],
    )


class TestFilterIssues(unittest.TestCase):
    """Test report filtering."""

    def test_default_filter_returns_all_sorted(self):
        titles = [issue.title for issue in filter_issues(_project())]
        self.assertEqual(titles, ["First", "Second", "Third", "Fourth"])

    def test_filters_by_assignee(self):
        issues = filter_issues(_project(), ReportFilter(assignee="Sam"))
        self.assertEqual([issue.title for issue in issues], ["Second", "Third"])

    def test_filters_by_completion(self):
        completed = filter_issues(_project(), ReportFilter(include_pending=False))
        pending = filter_issues(_project(), ReportFilter(include_completed=False))
        self.assertEqual([issue.title for issue in completed], ["Third"])
        self.assertEqual(len(pending), 3)

    def test_unique_assignees_skips_blank(self):
        self.assertEqual(unique_assignees(_project()), ["Sam", "Kim"])


class TestBuildIssueEntries(unittest.TestCase):
    """Test per-issue report rows."""

    def test_one_entry_per_photo_in_order(self):
        issue = Issue(
            title="Leak",
            order=2,
            location="Roof",
            photos=[Photo(url="b", file_name="b.png", order=2), Photo(url="a", file_name="a.png", order=1)],
        )

        entries = build_issue_entries(issue, loader=_loader)

        self.assertEqual(len(entries), 2)
        self.assertEqual(entries[0].heading, "Issue #2: Leak")
        self.assertEqual(entries[0].details[0], "Photo #1: a.png")
        self.assertIn("Location: Roof", entries[0].details)
        self.assertEqual(entries[0].image.size, (640, 480))
        self.assertEqual(entries[0].image.file_name, "annotated-a.jpg")

    def test_photo_annotations_are_flattened_at_native_size(self):
        records = [
            {
                "id": "path-0",
                "type": "drawing",
                "x": 0,
                "y": 0,
                "color": "#ff0000",
                "data": {"points": [{"x": 0, "y": 150}, {"x": 400, "y": 150}], "color": "#ff0000", "size": 5},
            }
        ]
        photo = Photo(
            url="a",
            file_name="a.png",
            annotations=records,
            annotation_space={"width": 400, "height": 300},
        )

        (entry,) = build_issue_entries(Issue(title="Leak", photos=[photo]), loader=_loader)

        with Image.open(io.BytesIO(entry.image.data)) as decoded:
            r, g, b = decoded.convert("RGB").getpixel((320, 240))
        self.assertGreater(r, 200)
        self.assertLess(g, 60)

    def test_broken_photo_becomes_text_only_entry(self):
        issue = Issue(
            title="Leak",
            photos=[Photo(url="broken", file_name="x.png", order=1), Photo(url="ok", file_name="y.png", order=2)],
        )

        with self.assertLogs("SA_Libs.ReportLib.report_images", level="WARNING"):
            entries = build_issue_entries(issue, loader=_loader)

        self.assertTrue(entries[0].image_missing)
        self.assertIsNone(entries[0].image)
        self.assertEqual(entries[0].details, ["Photo #1: x.png (Could not load image)"])
        self.assertIsNotNone(entries[1].image)

    def test_arithmetic_failure_becomes_text_only_entry(self):
        def loader(url):
            if url == "huge":
                raise OverflowError("dimensions too large")
            return _loader(url)

        issue = Issue(
            title="Leak",
            photos=[Photo(url="huge", file_name="x.png", order=1), Photo(url="ok", file_name="y.png", order=2)],
        )

        with self.assertLogs("SA_Libs.ReportLib.report_images", level="WARNING"):
            entries = build_issue_entries(issue, loader=loader)

        self.assertTrue(entries[0].image_missing)
        self.assertIsNotNone(entries[1].image)

    def test_non_finite_records_are_skipped_in_flattened_photo(self):
        records = [
            {
                "type": "drawing",
                "color": "#ff0000",
                "data": {"points": [{"x": 0, "y": 0}, {"x": 400, "y": 300}], "size": float("inf")},
            },
            {"type": "text", "x": 10, "y": 20, "text": "ok", "fontSize": 16, "color": "#ff0000"},
        ]
        photo = Photo(url="a", file_name="a.png", annotations=records)

        (entry,) = build_issue_entries(Issue(title="Leak", photos=[photo]), loader=_loader)

        self.assertFalse(entry.image_missing)
        self.assertEqual(entry.image.size, (640, 480))

    def test_issue_without_photos_gets_text_entry(self):
        issue = Issue(title="Note", type="information", description="Check later", assigned_to="Kim")

        (entry,) = build_issue_entries(issue, loader=_loader)

        self.assertIsNone(entry.image)
        self.assertFalse(entry.image_missing)
        self.assertEqual(entry.details[0], "Type: information | Priority: medium | Status: Pending")
        self.assertIn("Assigned To: Kim", entry.details)
        self.assertIn("Description: Check later", entry.details)

    def test_sign_off_photo_entry_when_no_photos(self):
        issue = Issue(
            title="Fixed",
            completed=True,
            signed_off=True,
            sign_off_date="2024-03-01T10:00:00",
            sign_off_notes="Replaced tile",
            sign_off_photo=SignOffPhoto(url="after", file_name="after.png"),
        )

        entries = build_issue_entries(issue, loader=_loader)

        self.assertEqual(len(entries), 2)
        close_out = entries[1]
        self.assertEqual(close_out.details[0], "Close-out Photo: after.png")
        self.assertIn("Signed Off: 2024-03-01", close_out.details)
        self.assertIn("Sign-off Notes: Replaced tile", close_out.details)
        self.assertIsNotNone(close_out.image)

    def test_signed_off_photo_rows_carry_sign_off_block(self):
        issue = Issue(
            title="Fixed",
            signed_off=True,
            sign_off_date="2024-03-01",
            sign_off_notes="Done",
            photos=[Photo(url="a", file_name="a.png")],
        )

        (entry,) = build_issue_entries(issue, loader=_loader)

        self.assertEqual(entry.sign_off_details, ["Signed off: 2024-03-01", "Notes: Done"])

    def test_uses_settings_labels(self):
        issue = Issue(title="Leak", order=5)
        (entry,) = build_issue_entries(issue, Settings(issue_label="Finding"), loader=_loader)
        self.assertEqual(entry.heading, "Finding #5: Leak")


class TestReportHelpers(unittest.TestCase):
    def test_build_report_entries_follows_filter(self):
        entries = build_report_entries(_project(), ReportFilter(assignee="Kim"), loader=_loader)
        self.assertEqual([entry.heading for entry in entries], ["Issue #1: First"])

    def test_report_file_name(self):
        self.assertEqual(report_file_name(_project()), "Tower_A___East_audit_report.pdf")
        self.assertEqual(
            report_file_name(_project(), "Sam Lee"),
            "Tower_A___East_audit_report_Sam_Lee.pdf",
        )

    def test_format_report_date(self):
        self.assertEqual(format_report_date("2024-03-01T10:00:00Z"), "2024-03-01")
        self.assertEqual(format_report_date("yesterday"), "yesterday")
        self.assertEqual(format_report_date(None), "")
