"""
Cell-level formatting: header rows, gift/count cells, KPI cards, column widths.
"""
from __future__ import annotations

from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from donor_analytics.excel.styles import (
    CENTER, LEFT, RIGHT,
    DATA_FONT, HEADER_FONT, KPI_LABEL_FONT, KPI_VALUE_FONT, TOTAL_FONT,
    GRID_BORDER, HEADER_BORDER, TOTAL_BORDER,
    HEADER_FILL, STRIPE_FILL, TOTAL_FILL, TREND_FILLS,
)

# col_type -> (table format, KPI card format)
NUMBER_FORMATS = {
    "currency": ('"$"#,##0.00', '"$"#,##0'),
    "number": ("#,##0", "#,##0"),
    "percent": ('0.0"%"', '0.0"%"'),
}


def format_header_row(ws: Worksheet, row_num: int, labels: list[str], start_col: int = 1) -> None:
    """Write header labels and style them."""
    for offset, label in enumerate(labels):
        cell = ws.cell(row=row_num, column=start_col + offset, value=label)
        cell.font, cell.fill, cell.border, cell.alignment = HEADER_FONT, HEADER_FILL, HEADER_BORDER, CENTER


def format_data_cell(
    ws: Worksheet,
    row_num: int,
    col_num: int,
    value,
    col_type: str = "text",
    is_total: bool = False,
    trend: str | None = None,
) -> None:
    """Write one table cell. A None value stays blank (no gift is not $0)."""
    cell = ws.cell(row=row_num, column=col_num, value=value)
    numeric = col_type in NUMBER_FORMATS
    if numeric:
        cell.number_format = NUMBER_FORMATS[col_type][0]
    cell.alignment = RIGHT if numeric else LEFT

    if is_total:
        cell.font, cell.border, cell.fill = TOTAL_FONT, TOTAL_BORDER, TOTAL_FILL
        return
    cell.font, cell.border = DATA_FONT, GRID_BORDER
    if trend in TREND_FILLS:
        cell.fill = TREND_FILLS[trend]
    elif row_num % 2 == 0:
        cell.fill = STRIPE_FILL


def auto_column_width(ws: Worksheet, min_width: int = 9, max_width: int = 48) -> None:
    for column in ws.iter_cols():
        longest = max((len(str(c.value)) for c in column if c.value is not None), default=0)
        ws.column_dimensions[get_column_letter(column[0].column)].width = min(max(longest + 2, min_width), max_width)


def add_kpi_card(ws: Worksheet, row: int, col: int, value, label: str, col_type: str = "number") -> None:
    """Large value with a small caption underneath."""
    top = ws.cell(row=row, column=col, value=value)
    top.font, top.alignment = KPI_VALUE_FONT, CENTER
    if col_type in NUMBER_FORMATS:
        top.number_format = NUMBER_FORMATS[col_type][1]

    caption = ws.cell(row=row + 1, column=col, value=label)
    caption.font, caption.alignment = KPI_LABEL_FONT, CENTER
