"""
Page geometry, fonts and colors for the printed dental chart.

Form coordinates are millimetres measured from the top-left corner of a US
Letter page; ``layout`` converts them to reportlab's bottom-left points.
"""
from __future__ import annotations

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.units import mm

PAGE_SIZE = letter
PAGE_WIDTH_MM = 215.9
PAGE_HEIGHT_MM = 279.4
MARGIN_MM = 13.0
CONTENT_WIDTH_MM = PAGE_WIDTH_MM - 2 * MARGIN_MM
RIGHT_EDGE_MM = PAGE_WIDTH_MM - MARGIN_MM

TOTAL_PAGES = 5
FOOTER_OFFSET_MM = 10.0
PAGE_TOP_MM = MARGIN_MM + 5
FORM_REVISION_MARK = "mcml/10"

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

# Font sizes are points, everything else millimetres.
BODY_SIZE = 8
NOTE_SIZE = 7
CONSENT_SIZE = 6.5
CONSENT_LINE_HEIGHT_MM = 2.8
RULE_WIDTH_MM = 0.3

BLACK = colors.black
WHITE = colors.white
LABEL_GRAY = colors.Color(100 / 255, 100 / 255, 100 / 255)
PHOTO_GRAY = colors.Color(150 / 255, 150 / 255, 150 / 255)
GRID_GRAY = PHOTO_GRAY
BAND_GRAY = colors.Color(180 / 255, 180 / 255, 180 / 255)
HEADER_FILL = colors.Color(220 / 255, 220 / 255, 220 / 255)
ACCENT_BLUE = colors.Color(52 / 255, 152 / 255, 219 / 255)
LOGO_PURPLE = colors.Color(150 / 255, 100 / 255, 180 / 255)

# Yes/No pair sits this far left of the right margin.
YES_NO_OFFSET_MM = 27.0
CHECKBOX_MM = 3.0

# ── Odontogram ───────────────────────────────────────────────────────────

TOOTH_PITCH_MM = 7.0
CHART_TOP_MM = 53.0
LEGEND_Y_MM = 145.0
LEGEND_COLUMNS_MM = (MARGIN_MM + 2, MARGIN_MM + 65, MARGIN_MM + 130)
LEGEND_LINE_MM = 2.5
CLINICAL_Y_MM = 175.0
CLINICAL_COLUMNS_MM = (MARGIN_MM, MARGIN_MM + 50, MARGIN_MM + 100, MARGIN_MM + 145)
CLINICAL_LINE_MM = 3.0
TOOTH_SUMMARY_Y_MM = 198.0

# ── Treatment table ──────────────────────────────────────────────────────

TABLE_MIN_ROWS = 30
TABLE_COLUMN_WIDTHS_MM = (20, 12, 50, 30, 20, 20, 18, 16)
TABLE_ROW_HEIGHT_MM = 7.0
TABLE_HEADERS = (
    "Date", "Tooth\nNo./s", "Procedure", "Dentist/s",
    "Amount\ncharged", "Amount\nPaid", "Balance", "Next\nAppt.",
)
TABLE_ALIGNMENTS = ("CENTER", "CENTER", "LEFT", "LEFT", "RIGHT", "RIGHT", "RIGHT", "CENTER")
# Lowest point (mm from top) a table row may reach before it continues on a new page.
TABLE_BOTTOM_MM = PAGE_HEIGHT_MM - FOOTER_OFFSET_MM - 6


def pt(value_mm: float) -> float:
    """Millimetres to points."""
    return value_mm * mm
