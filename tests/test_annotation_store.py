"""
Unit tests for AnnotationStore.

Tests gesture lifecycle, undo order, clearing and record round trips.
"""

import json
import unittest

import pytest

from SA_Libs.AnnotationLib.annotation_models import Label, Stroke
from SA_Libs.AnnotationLib.annotation_store import AnnotationStore
from SA_Libs.AnnotationLib.geometry import Point, Size


def _draw(store, *points, color="#ff0000", width=5):
    store.begin_stroke(Point(*points[0]), color, width)
    for point in points[1:]:
        store.extend_stroke(Point(*point))
    return store.commit_stroke()


class TestStrokeLifecycle(unittest.TestCase):
    """Test begin/extend/commit."""

    def test_commit_appends_stroke(self):
        store = AnnotationStore()
        stroke = _draw(store, (0, 0), (10, 10), (20, 5))

        self.assertEqual(store.strokes, (stroke,))
        self.assertEqual(len(stroke.points), 3)
        self.assertFalse(store.has_open_stroke)

    def test_commit_without_begin_is_noop(self):
        store = AnnotationStore()
        self.assertIsNone(store.commit_stroke())
        self.assertTrue(store.is_empty)

    def test_extend_without_begin_is_noop(self):
        store = AnnotationStore()
        store.extend_stroke(Point(1, 1))
        self.assertIsNone(store.current_stroke)

    def test_current_stroke_is_not_committed(self):
        store = AnnotationStore()
        store.begin_stroke(Point(0, 0), "#ff0000", 5)
        store.extend_stroke(Point(5, 5))

        self.assertEqual(len(store.current_stroke.points), 2)
        self.assertEqual(store.strokes, ())

    def test_begin_discards_previous_open_stroke(self):
        store = AnnotationStore()
        store.begin_stroke(Point(0, 0), "#ff0000", 5)
        store.extend_stroke(Point(5, 5))
        store.begin_stroke(Point(50, 50), "#0000ff", 3)
        stroke = store.commit_stroke()

        self.assertEqual(stroke.points, (Point(50, 50),))
        self.assertEqual(len(store.strokes), 1)

    def test_begin_rejects_non_positive_width(self):
        store = AnnotationStore()
        with self.assertRaises(ValueError):
            store.begin_stroke(Point(0, 0), "#ff0000", 0)

    def test_single_point_stroke_is_kept_but_invisible(self):
        store = AnnotationStore()
        stroke = _draw(store, (3, 3))
        self.assertEqual(len(store.strokes), 1)
        self.assertFalse(stroke.is_visible)


class TestLabels(unittest.TestCase):
    def test_blank_text_is_rejected(self):
        store = AnnotationStore()
        self.assertIsNone(store.add_label(Point(0, 0), "   ", 16, "#ff0000"))
        self.assertTrue(store.is_empty)

    def test_text_is_trimmed(self):
        store = AnnotationStore()
        label = store.add_label(Point(0, 0), "  Leak  ", 16, "#ff0000")
        self.assertEqual(label.text, "Leak")


class TestUndo(unittest.TestCase):
    """Test undo ordering."""

    def test_undo_removes_strokes_before_labels(self):
        store = AnnotationStore()
        store.add_label(Point(0, 0), "First", 16, "#ff0000")
        _draw(store, (0, 0), (5, 5))
        store.add_label(Point(10, 10), "Second", 16, "#ff0000")

        self.assertIsInstance(store.undo(), Stroke)
        removed = store.undo()
        self.assertIsInstance(removed, Label)
        self.assertEqual(removed.text, "Second")
        self.assertEqual(store.undo().text, "First")
        self.assertIsNone(store.undo())

    def test_two_labels_need_two_undos(self):
        store = AnnotationStore()
        store.add_label(Point(0, 0), "A", 16, "#ff0000")
        store.add_label(Point(1, 1), "B", 16, "#ff0000")

        store.undo()
        self.assertEqual(len(store.labels), 1)
        store.undo()
        self.assertTrue(store.is_empty)
        self.assertFalse(store.can_undo)

    def test_undo_on_empty_store(self):
        self.assertIsNone(AnnotationStore().undo())


class TestClearAll(unittest.TestCase):
    def test_clears_everything_including_open_stroke(self):
        store = AnnotationStore()
        _draw(store, (0, 0), (5, 5))
        store.add_label(Point(0, 0), "A", 16, "#ff0000")
        store.begin_stroke(Point(1, 1), "#ff0000", 5)

        store.clear_all()

        self.assertTrue(store.is_empty)
        self.assertFalse(store.has_open_stroke)


class TestRecords(unittest.TestCase):
    """Test persistence round trips."""

    def test_records_list_strokes_before_labels(self):
        store = AnnotationStore()
        store.add_label(Point(0, 0), "A", 16, "#ff0000")
        _draw(store, (0, 0), (5, 5))
        _draw(store, (1, 1), (6, 6))

        records = store.to_records()

        self.assertEqual([r["type"] for r in records], ["drawing", "drawing", "text"])
        self.assertEqual([r["id"] for r in records[:2]], ["path-0", "path-1"])

    def test_round_trip_preserves_annotations(self):
        store = AnnotationStore()
        _draw(store, (0, 0), (5, 5), color="#0000ff", width=8)
        store.add_label(Point(20, 30), "Leak", 24, "#000000")

        reloaded = AnnotationStore()
        skipped = reloaded.load(store.to_records())

        self.assertEqual(skipped, 0)
        self.assertEqual(reloaded.strokes, store.strokes)
        self.assertEqual(reloaded.labels, store.labels)

    def test_load_replaces_contents_and_counts_skips(self):
        store = AnnotationStore()
        _draw(store, (0, 0), (5, 5))

        skipped = store.load([{"type": "text", "x": 1, "y": 1, "text": "Ok", "color": "#ff0000"}, {"type": "arrow"}])

        self.assertEqual(skipped, 1)
        self.assertEqual(store.strokes, ())
        self.assertEqual(len(store.labels), 1)

    def test_load_skips_non_finite_records(self):
        records = json.loads(
            '[{"type": "drawing", "color": "#ff0000",'
            '  "data": {"points": [{"x": 0, "y": 0}, {"x": 5, "y": 5}], "size": Infinity}},'
            ' {"type": "text", "x": NaN, "y": 1, "text": "Bad", "color": "#ff0000"},'
            ' {"type": "text", "x": 1, "y": 1, "text": "Ok", "color": "#ff0000"}]'
        )
        store = AnnotationStore()

        skipped = store.load(records)

        self.assertEqual(skipped, 2)
        self.assertEqual(store.strokes, ())
        self.assertEqual([label.text for label in store.labels], ["Ok"])

    def test_snapshot_is_independent_of_later_edits(self):
        store = AnnotationStore(space=Size(400, 300))
        _draw(store, (0, 0), (5, 5))
        snapshot = store.snapshot()

        store.clear_all()

        self.assertEqual(len(snapshot.strokes), 1)
        self.assertEqual(snapshot.space, Size(400, 300))


class TestUndoCount:
    """Tests for how many annotations repeated undo removes."""

    @pytest.mark.parametrize(
        "strokes, labels, undos",
        [
            (0, 0, 3),
            (3, 0, 2),
            (2, 2, 1),
            (2, 2, 3),
            (2, 2, 4),
            (2, 2, 6),
            (0, 3, 2),
            (1, 3, 5),
        ],
    )
    def test_removes_strokes_then_labels(self, strokes, labels, undos):
        store = AnnotationStore()
        for i in range(labels):
            store.add_label(Point(i, i), f"Label {i}", 16, "#ff0000")
        for i in range(strokes):
            _draw(store, (i, 0), (i, 10))

        for _ in range(undos):
            store.undo()

        assert len(store.strokes) == strokes - min(undos, strokes)
        assert len(store.labels) == labels - min(max(undos - strokes, 0), labels)
