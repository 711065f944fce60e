"""
Colors, fonts, fills, borders and alignments for exported cost workbooks.
"""
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

# ---------------------------------------------------------------------------
# Color constants
# ---------------------------------------------------------------------------
ACCENT_ORANGE = "F97316"
DARK_ORANGE = "C2410C"
LIGHT_ORANGE = "FFF7ED"
HEADER_BG = "C2410C"
ALTERNATE_ROW = "F5F5F5"
TOTAL_ROW_BG = "FFEDD5"
WHITE = "FFFFFF"
BLACK = "000000"
GRAY_666 = "666666"
BORDER_GRAY = "CCCCCC"

# Series palette shared with the dashboard charts
SERIES_COLORS = [
    "8884D8", "82CA9D", "FFC658", "FF7F7F", "A28FD0",
    "7DD3FC", "34D399", "F472B6", "60A5FA", "F59E0B",
]

# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------
TITLE_FONT = Font(name="Calibri", size=20, bold=True, color=DARK_ORANGE)
SUBTITLE_FONT = Font(name="Calibri", size=11, italic=True, color=GRAY_666)
SECTION_FONT = Font(name="Calibri", size=13, bold=True, color=DARK_ORANGE)
HEADER_FONT = Font(name="Calibri", size=11, bold=True, color=WHITE)
DATA_FONT = Font(name="Calibri", size=10, color=BLACK)
TOTAL_FONT = Font(name="Calibri", size=10, bold=True, color=BLACK)
KPI_VALUE_FONT = Font(name="Calibri", size=22, bold=True, color=ACCENT_ORANGE)
KPI_LABEL_FONT = Font(name="Calibri", size=10, color=GRAY_666)
WARNING_FONT = Font(name="Calibri", size=10, italic=True, color="B91C1C")

# ---------------------------------------------------------------------------
# Fills
# ---------------------------------------------------------------------------
HEADER_FILL = PatternFill(start_color=HEADER_BG, end_color=HEADER_BG, fill_type="solid")
ALTERNATE_FILL = PatternFill(start_color=ALTERNATE_ROW, end_color=ALTERNATE_ROW, fill_type="solid")
TOTAL_FILL = PatternFill(start_color=TOTAL_ROW_BG, end_color=TOTAL_ROW_BG, fill_type="solid")
KPI_FILL = PatternFill(start_color=LIGHT_ORANGE, end_color=LIGHT_ORANGE, fill_type="solid")

# ---------------------------------------------------------------------------
# Borders
# ---------------------------------------------------------------------------
_thin = Side(style="thin", color=BORDER_GRAY)
THIN_BORDER = Border(left=_thin, right=_thin, top=_thin, bottom=_thin)
HEADER_BORDER = Border(
    left=Side(style="thin", color=DARK_ORANGE),
    right=Side(style="thin", color=DARK_ORANGE),
    top=Side(style="thin", color=DARK_ORANGE),
    bottom=Side(style="medium", color=DARK_ORANGE),
)
TOTAL_BORDER = Border(left=_thin, right=_thin, top=Side(style="medium", color="999999"), bottom=_thin)

# ---------------------------------------------------------------------------
# Alignments
# ---------------------------------------------------------------------------
CENTER = Alignment(horizontal="center", vertical="center")
LEFT = Alignment(horizontal="left", vertical="center")
RIGHT = Alignment(horizontal="right", vertical="center")

# ---------------------------------------------------------------------------
# Number formats by column type
# ---------------------------------------------------------------------------
NUMBER_FORMATS = {
    "currency": '"$"#,##0.00',
    "number": "#,##0",
    "decimal": "#,##0.00",
    "percent": '0.0"%"',
}
