"""
Workbook palette for donor reports: fonts, fills, borders and trend colours.
"""
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

NAVY = "1E1B4B"
INDIGO = "3730A3"
MUTED = "6B7280"
GRID = "D1D5DB"
RULE = "9CA3AF"
ROW_STRIPE = "F8FAFC"
TOTAL_BG = "E0E7FF"
LEGEND_BG = "EEF2FF"


def _font(size: int, bold: bool = False, color: str = "000000", italic: bool = False) -> Font:
    return Font(name="Calibri", size=size, bold=bold, italic=italic, color=color)


def _solid(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _box(color: str, top: str = "thin", bottom: str = "thin") -> Border:
    side = Side(style="thin", color=color)
    return Border(left=side, right=side,
                  top=Side(style=top, color=color), bottom=Side(style=bottom, color=color))


# Fonts
TITLE_FONT = _font(22, bold=True, color=NAVY)
SUBTITLE_FONT = _font(11, italic=True, color=MUTED)
SECTION_FONT = _font(13, bold=True, color=INDIGO)
HEADER_FONT = _font(11, bold=True, color="FFFFFF")
DATA_FONT = _font(10)
TOTAL_FONT = _font(10, bold=True)
KPI_VALUE_FONT = _font(26, bold=True, color=NAVY)
KPI_LABEL_FONT = _font(9, color=MUTED)
POSITIVE_KPI_FONT = _font(26, bold=True, color="15803D")
NEGATIVE_KPI_FONT = _font(26, bold=True, color="B91C1C")
WARNING_FONT = _font(11, bold=True, color="B91C1C")
LEGEND_BOLD_FONT = _font(10, bold=True)

# Fills
HEADER_FILL = _solid(NAVY)
STRIPE_FILL = _solid(ROW_STRIPE)
TOTAL_FILL = _solid(TOTAL_BG)
LEGEND_FILL = _solid(LEGEND_BG)

# Borders
GRID_BORDER = _box(GRID)
HEADER_BORDER = _box(NAVY, bottom="medium")
TOTAL_BORDER = _box(RULE, top="medium", bottom="medium")

# Alignments
CENTER = Alignment(horizontal="center", vertical="center")
LEFT = Alignment(horizontal="left", vertical="center")
RIGHT = Alignment(horizontal="right", vertical="center")
WRAP = Alignment(horizontal="left", vertical="top", wrap_text=True)

# Row and legend colours, keyed by trend tag value
TREND_FILLS = {
    "increasing": _solid("DCFCE7"),
    "new": _solid("DCFCE7"),
    "decreasing": _solid("FEE2E2"),
    "stopped": _solid("FEE2E2"),
    "fluctuating": _solid("FEF3C7"),
    "consistent": _solid("E0F2FE"),
    "insufficientData": _solid("F3F4F6"),
}
