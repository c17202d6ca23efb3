"""
Constants and configuration values for Site Audit.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Store constants
STORE_DIR_NAME = "AuditData"
STORE_EXTENSION = ".json"
PROJECTS_KEY = "audit_projects"
SETTINGS_KEY = "audit_settings"

# Annotation colors (hex strings, fixed swatch)
COLOR_RED = "#ff0000"
COLOR_BLUE = "#0000ff"
COLOR_YELLOW = "#ffff00"
COLOR_BLACK = "#000000"
COLOR_GREEN = "#00ff00"
COLOR_ORANGE = "#ff8800"
COLOR_MAGENTA = "#ff00ff"
COLOR_WHITE = "#ffffff"

SWATCH_COLORS = (
    COLOR_RED,
    COLOR_BLUE,
    COLOR_YELLOW,
    COLOR_BLACK,
    COLOR_GREEN,
    COLOR_ORANGE,
    COLOR_MAGENTA,
    COLOR_WHITE,
)
DEFAULT_ANNOTATION_COLOR = COLOR_RED

# Stroke and label sizing (edit-space units)
DEFAULT_STROKE_WIDTH = 5
MIN_STROKE_WIDTH = 1
MAX_STROKE_WIDTH = 20
DEFAULT_FONT_SIZE = 16
MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 48

# Fonts tried in order for label rendering before Pillow's built-in font
FONT_CANDIDATES = (
    "DejaVuSans.ttf",
    "Arial.ttf",
    "arial.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/Library/Fonts/Arial.ttf",
    "C:/Windows/Fonts/arial.ttf",
)

# Export settings
EXPORT_FORMAT = "JPEG"
EXPORT_QUALITY = 80
EXPORT_EXTENSION = ".jpg"
DOWNLOAD_FILE_PREFIX = "annotated-"
DEFAULT_DOWNLOAD_NAME = "image.png"

# Display copy produced on upload
DISPLAY_MAX_WIDTH = 1200
DISPLAY_MAX_HEIGHT = 1200

# Annotation record kinds
KIND_DRAWING = "drawing"
KIND_TEXT = "text"
KIND_ARROW = "arrow"

# Annotation record field names
FIELD_ID = "id"
FIELD_TYPE = "type"
FIELD_X = "x"
FIELD_Y = "y"
FIELD_COLOR = "color"
FIELD_TEXT = "text"
FIELD_FONT_SIZE = "fontSize"
FIELD_DATA = "data"
FIELD_POINTS = "points"
FIELD_SIZE = "size"
FIELD_WIDTH = "width"
FIELD_HEIGHT = "height"

# Photo field names
FIELD_URL = "url"
FIELD_FILE_NAME = "fileName"
FIELD_ORDER = "order"
FIELD_UPLOAD_DATE = "uploadDate"
FIELD_ANNOTATIONS = "annotations"
FIELD_ANNOTATION_SPACE = "annotationSpace"

# Stroke record id prefix
STROKE_ID_PREFIX = "path-"

# Issue values
ISSUE_TYPES = ("issue", "information")
ISSUE_PRIORITIES = ("low", "medium", "high", "critical")
PROJECT_STATUSES = ("draft", "in-progress", "completed")
DEFAULT_ISSUE_TYPE = "issue"
DEFAULT_PRIORITY = "medium"
DEFAULT_PROJECT_STATUS = "draft"

# Default settings document
DEFAULT_SETTINGS = {
    "companyName": "Site Audit Manager",
    "preparedForLabel": "Prepared For",
    "assignedToLabel": "Assigned To",
    "issueLabel": "Issue",
    "issuesLabel": "Issues",
    "reportFooter": "Professional Audit Report",
}

# Report
REPORT_ALL_ASSIGNEES = "all"
REPORT_FILE_SUFFIX = "_audit_report"
REPORT_EXTENSION = ".pdf"
REPORT_IMAGE_MISSING_NOTE = "(Could not load image)"

# UI constants
DEFAULT_WINDOW_WIDTH = 1400
DEFAULT_WINDOW_HEIGHT = 850
DETAILS_PANEL_WIDTH = 320
