from io import BytesIO
from pathlib import Path
from typing import Any, Callable, List, Optional

from PyQt5.QtCore import QEvent, QRectF, Qt
from PyQt5.QtGui import QPainter, QPixmap
from PyQt5.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from SA_Libs.AnnotationLib.annotate_session import AnnotateSession
from SA_Libs.AnnotationLib.capture_surface import PointerEvent, SurfaceMode, SurfaceState
from SA_Libs.AnnotationLib.export_compositor import ExportError
from SA_Libs.AnnotationLib.geometry import BoundingBox
from SA_Libs.ImageEditingLib.image_editing_ops import load_image_source
from SA_Libs.constants import (
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    DETAILS_PANEL_WIDTH,
    ISSUE_PRIORITIES,
    ISSUE_TYPES,
    MAX_FONT_SIZE,
    MAX_STROKE_WIDTH,
    MIN_FONT_SIZE,
    MIN_STROKE_WIDTH,
    SWATCH_COLORS,
)


def _to_png_bytes(image: Any) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _to_pixmap(image: Any) -> QPixmap:
    pixmap = QPixmap()
    pixmap.loadFromData(_to_png_bytes(image), "PNG")
    return pixmap


class AnnotationCanvas(QWidget):
    """Shows the photo fitted to the widget and forwards input to the capture surface."""

    def __init__(
        self,
        session: AnnotateSession,
        photo: Any,
        parent: Optional[QWidget] = None,
        on_changed: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__(parent)
        self.on_changed = on_changed
        self.session = session
        self.surface = session.surface
        self.photo_pixmap = _to_pixmap(photo.convert("RGB"))
        self.overlay_pixmap: Optional[QPixmap] = None

        self.setMinimumSize(480, 360)
        self.setMouseTracking(False)
        self.setAttribute(Qt.WA_AcceptTouchEvents, True)
        self.surface.on_render = self._on_render

    def image_box(self) -> BoundingBox:
        """Box the photo occupies inside the widget (aspect preserved, centered)."""
        photo_w = self.photo_pixmap.width()
        photo_h = self.photo_pixmap.height()
        if photo_w <= 0 or photo_h <= 0:
            return BoundingBox(0, 0, 0, 0)

        scale = min(self.width() / photo_w, self.height() / photo_h)
        width = photo_w * scale
        height = photo_h * scale
        return BoundingBox((self.width() - width) / 2.0, (self.height() - height) / 2.0, width, height)

    def _on_render(self, overlay: Any) -> None:
        self.overlay_pixmap = _to_pixmap(overlay)
        self.update()
        if self.on_changed is not None:
            self.on_changed()

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self.surface.resize(self.image_box())

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.SmoothPixmapTransform)
        box = self.image_box()
        target = QRectF(box.left, box.top, box.width, box.height)
        painter.drawPixmap(target, self.photo_pixmap, QRectF(self.photo_pixmap.rect()))
        if self.overlay_pixmap is not None:
            painter.drawPixmap(target, self.overlay_pixmap, QRectF(self.overlay_pixmap.rect()))
        painter.end()

    @staticmethod
    def _pointer(pos) -> PointerEvent:
        return PointerEvent(float(pos.x()), float(pos.y()))

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            if self.surface.mode is SurfaceMode.LABEL:
                self.surface.click(self._pointer(event.pos()))
                self.window().on_label_position_changed()
            else:
                self.surface.pointer_down(self._pointer(event.pos()))
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:
        if event.buttons() & Qt.LeftButton:
            self.surface.pointer_move(self._pointer(event.pos()))
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self.surface.pointer_up(self._pointer(event.pos()))
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event) -> None:
        self.surface.pointer_leave()
        super().leaveEvent(event)

    def event(self, event) -> bool:
        event_type = event.type()
        if event_type in (QEvent.TouchBegin, QEvent.TouchUpdate, QEvent.TouchEnd, QEvent.TouchCancel):
            touches: List[PointerEvent] = [self._pointer(point.pos()) for point in event.touchPoints()]
            if event_type == QEvent.TouchBegin:
                self.surface.touch_start(touches)
                if self.surface.mode is SurfaceMode.LABEL:
                    self.window().on_label_position_changed()
            elif event_type == QEvent.TouchUpdate:
                self.surface.touch_move(touches)
            elif event_type == QEvent.TouchCancel:
                self.surface.touch_cancel()
            else:
                self.surface.touch_end(touches)
            event.accept()
            return True
        return super().event(event)


class AnnotatePictureWindow(QMainWindow):
    def __init__(self, session: AnnotateSession, photo: Any) -> None:
        super().__init__()
        self.session = session
        self.surface = session.surface
        self.photo = photo
        self.setWindowTitle(f"Annotate Picture - {session.photo.file_name or 'photo'}")
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self._build_ui()
        self._connect_signals()
        self._load_details()
        self._refresh_tool_state()

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)
        root = QHBoxLayout(central)

        canvas_col = QVBoxLayout()
        toolbar = QHBoxLayout()

        self.btn_draw = QPushButton("Draw")
        self.btn_text = QPushButton("Text")
        self.btn_draw.setCheckable(True)
        self.btn_text.setCheckable(True)
        self.mode_group = QButtonGroup(self)
        self.mode_group.addButton(self.btn_draw)
        self.mode_group.addButton(self.btn_text)
        self.btn_draw.setChecked(True)
        toolbar.addWidget(self.btn_draw)
        toolbar.addWidget(self.btn_text)

        self.swatch_buttons: List[QPushButton] = []
        for color in SWATCH_COLORS:
            button = QPushButton()
            button.setFixedSize(24, 24)
            button.setCheckable(True)
            button.setStyleSheet(f"background-color: {color}; border: 1px solid #888;")
            button.setProperty("swatchColor", color)
            self.swatch_buttons.append(button)
            toolbar.addWidget(button)

        self.label_size = QLabel()
        self.slider_size = QSlider(Qt.Horizontal)
        self.slider_size.setMaximumWidth(160)
        toolbar.addWidget(self.label_size)
        toolbar.addWidget(self.slider_size)

        self.btn_undo = QPushButton("Undo")
        self.btn_clear = QPushButton("Clear")
        self.btn_download = QPushButton("Download")
        toolbar.addStretch(1)
        toolbar.addWidget(self.btn_undo)
        toolbar.addWidget(self.btn_clear)
        toolbar.addWidget(self.btn_download)

        self.canvas = AnnotationCanvas(self.session, self.photo, self, on_changed=self._refresh_tool_state)

        label_row = QHBoxLayout()
        self.edit_label_text = QLineEdit()
        self.edit_label_text.setPlaceholderText("Enter text...")
        self.btn_add_label = QPushButton("Add")
        self.btn_cancel_label = QPushButton("Cancel")
        label_row.addWidget(QLabel("Label"))
        label_row.addWidget(self.edit_label_text, stretch=1)
        label_row.addWidget(self.btn_add_label)
        label_row.addWidget(self.btn_cancel_label)
        self.label_row_widget = QWidget()
        self.label_row_widget.setLayout(label_row)

        canvas_col.addLayout(toolbar)
        canvas_col.addWidget(self.canvas, stretch=1)
        canvas_col.addWidget(self.label_row_widget)

        details_panel = QWidget()
        details_panel.setFixedWidth(DETAILS_PANEL_WIDTH)
        details_col = QVBoxLayout(details_panel)
        form = QFormLayout()

        self.edit_title = QLineEdit()
        self.edit_description = QPlainTextEdit()
        self.edit_location = QLineEdit()
        self.combo_type = QComboBox()
        self.combo_type.addItems(ISSUE_TYPES)
        self.combo_priority = QComboBox()
        self.combo_priority.addItems(ISSUE_PRIORITIES)
        self.edit_assignee = QLineEdit()

        form.addRow("Title", self.edit_title)
        form.addRow("Description", self.edit_description)
        form.addRow("Location", self.edit_location)
        form.addRow("Type", self.combo_type)
        form.addRow("Priority", self.combo_priority)
        form.addRow("Assigned To", self.edit_assignee)

        self.btn_save = QPushButton("Save")
        self.btn_cancel = QPushButton("Cancel")
        buttons = QHBoxLayout()
        buttons.addWidget(self.btn_cancel)
        buttons.addWidget(self.btn_save)

        details_col.addWidget(QLabel("Issue Details"))
        details_col.addLayout(form)
        details_col.addStretch(1)
        details_col.addLayout(buttons)

        root.addLayout(canvas_col, stretch=1)
        root.addWidget(details_panel)

    def _connect_signals(self) -> None:
        self.btn_draw.clicked.connect(lambda: self.set_mode(SurfaceMode.DRAW))
        self.btn_text.clicked.connect(lambda: self.set_mode(SurfaceMode.LABEL))
        for button in self.swatch_buttons:
            button.clicked.connect(lambda _checked, b=button: self.set_color(b.property("swatchColor")))
        self.slider_size.valueChanged.connect(self.on_size_changed)
        self.btn_undo.clicked.connect(self.undo)
        self.btn_clear.clicked.connect(self.clear_all)
        self.btn_download.clicked.connect(self.download)
        self.edit_label_text.textChanged.connect(self.on_label_text_changed)
        self.edit_label_text.returnPressed.connect(self.confirm_label)
        self.btn_add_label.clicked.connect(self.confirm_label)
        self.btn_cancel_label.clicked.connect(self.cancel_label)
        self.btn_save.clicked.connect(self.save)
        self.btn_cancel.clicked.connect(self.cancel)

    def _load_details(self) -> None:
        details = self.session.details
        self.edit_title.setText(details.title)
        self.edit_description.setPlainText(details.description)
        self.edit_location.setText(details.location)
        self.combo_type.setCurrentText(details.type)
        self.combo_priority.setCurrentText(details.priority)
        self.edit_assignee.setText(details.assigned_to)

    def _refresh_tool_state(self) -> None:
        drawing = self.surface.mode is SurfaceMode.DRAW
        self.slider_size.blockSignals(True)
        if drawing:
            self.slider_size.setRange(MIN_STROKE_WIDTH, MAX_STROKE_WIDTH)
            self.slider_size.setValue(round(self.surface.stroke_width))
            self.label_size.setText(f"Size: {round(self.surface.stroke_width)}px")
        else:
            self.slider_size.setRange(MIN_FONT_SIZE, MAX_FONT_SIZE)
            self.slider_size.setValue(round(self.surface.font_size))
            self.label_size.setText(f"Font: {round(self.surface.font_size)}px")
        self.slider_size.blockSignals(False)

        for button in self.swatch_buttons:
            button.setChecked(button.property("swatchColor") == self.surface.color)

        awaiting = self.surface.state is SurfaceState.AWAITING_TEXT
        self.label_row_widget.setVisible(awaiting)
        self.btn_add_label.setEnabled(self.surface.can_confirm_label)
        self.btn_undo.setEnabled(self.session.store.can_undo)

    def set_mode(self, mode: SurfaceMode) -> None:
        self.surface.set_mode(mode)
        self.edit_label_text.clear()
        self._refresh_tool_state()

    def set_color(self, color: str) -> None:
        self.surface.set_color(color)
        self._refresh_tool_state()

    def on_size_changed(self, value: int) -> None:
        if self.surface.mode is SurfaceMode.DRAW:
            self.surface.set_stroke_width(value)
        else:
            self.surface.set_font_size(value)
        self._refresh_tool_state()

    def on_label_position_changed(self) -> None:
        self.edit_label_text.clear()
        self._refresh_tool_state()
        if self.surface.state is SurfaceState.AWAITING_TEXT:
            self.edit_label_text.setFocus()

    def on_label_text_changed(self, text: str) -> None:
        self.surface.set_label_text(text)
        self.btn_add_label.setEnabled(self.surface.can_confirm_label)

    def confirm_label(self) -> None:
        if self.surface.confirm_label() is not None:
            self.edit_label_text.clear()
        self._refresh_tool_state()

    def cancel_label(self) -> None:
        self.surface.cancel_label()
        self.edit_label_text.clear()
        self._refresh_tool_state()

    def undo(self) -> None:
        self.surface.undo()
        self._refresh_tool_state()

    def clear_all(self) -> None:
        self.surface.clear_all()
        self._refresh_tool_state()

    def download(self) -> None:
        self.btn_download.setEnabled(False)
        try:
            encoded = self.session.download(self.photo)
        except (ExportError, ValueError) as e:
            QMessageBox.warning(self, "Download Failed", str(e))
            return
        finally:
            self.btn_download.setEnabled(True)

        path_str, _ = QFileDialog.getSaveFileName(self, "Save Annotated Image", encoded.file_name, "JPEG (*.jpg)")
        if not path_str:
            return
        try:
            Path(path_str).write_bytes(encoded.data)
        except OSError as e:
            QMessageBox.warning(self, "Download Failed", str(e))

    def _collect_details(self) -> None:
        self.session.update_details(
            title=self.edit_title.text(),
            description=self.edit_description.toPlainText(),
            location=self.edit_location.text(),
            type=self.combo_type.currentText(),
            priority=self.combo_priority.currentText(),
            assigned_to=self.edit_assignee.text(),
        )

    def save(self) -> None:
        try:
            self._collect_details()
            self.session.save()
        except (OSError, ValueError) as e:
            QMessageBox.warning(self, "Save Failed", str(e))
            return
        self.close()

    def cancel(self) -> None:
        self.session.cancel()
        self.close()


def open_annotate_window(base_dir: Path, project_id: str, issue_id: str, photo_id: str) -> AnnotatePictureWindow:
    """
    Raises:
        LookupError: If the project, issue or photo does not exist
        ImageLoadError: If the photo cannot be decoded
    """
    session = AnnotateSession(base_dir, project_id, issue_id, photo_id)
    photo = load_image_source(session.photo.url)
    return AnnotatePictureWindow(session, photo)

