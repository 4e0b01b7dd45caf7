"""
ExcelWriter: builds the styled donor workbook one block at a time.

Every write_* method takes the row to start on and returns the next free row,
so report code can stack blocks without tracking cell positions itself.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd
from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from donor_analytics.excel.formatters import (
    NUMBER_FORMATS,
    add_kpi_card,
    auto_column_width,
    format_data_cell,
    format_header_row,
)
from donor_analytics.excel.styles import (
    CENTER, WRAP,
    DATA_FONT, KPI_LABEL_FONT, LEGEND_BOLD_FONT, NEGATIVE_KPI_FONT, POSITIVE_KPI_FONT,
    SECTION_FONT, SUBTITLE_FONT, TITLE_FONT, WARNING_FONT,
    GRID_BORDER, LEGEND_FILL, TREND_FILLS,
)


ColSpec = tuple[str, str, str]  # (key, col_type, label)


def _cell_value(value):
    """Blank for None/NaN so a missing gift never reads as $0; enums unwrapped."""
    if value is None:
        return None
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    return getattr(value, "value", value)


class ExcelWriter:

    def __init__(self) -> None:
        self.wb = Workbook()
        self._sheets: list[Worksheet] = []

    def add_sheet(self, title: str) -> Worksheet:
        """New worksheet; the workbook's default sheet is renamed for the first one."""
        ws = self.wb.active if not self._sheets else self.wb.create_sheet()
        ws.title = title
        self._sheets.append(ws)
        return ws

    # ------------------------------------------------------------------
    # Headings
    # ------------------------------------------------------------------

    def write_title(self, ws: Worksheet, title: str, subtitle: str, width: int = 8) -> int:
        ws.cell(row=1, column=1, value=title).font = TITLE_FONT
        ws.cell(row=2, column=1, value=subtitle).font = SUBTITLE_FONT
        for r in (1, 2):
            ws.merge_cells(start_row=r, start_column=1, end_row=r, end_column=width)
        return 4

    def write_section(self, ws: Worksheet, row: int, title: str) -> int:
        ws.cell(row=row, column=1, value=title).font = SECTION_FONT
        return row + 2

    def write_warning(self, ws: Worksheet, row: int, message: str) -> int:
        ws.cell(row=row, column=1, value=message).font = WARNING_FONT
        return row + 1

    # ------------------------------------------------------------------
    # KPIs
    # ------------------------------------------------------------------

    def write_kpi_row(self, ws: Worksheet, row: int, kpis: list[tuple], spacing: int = 2) -> int:
        """kpis: [(value, label, col_type), ...] laid out left to right."""
        for i, (value, label, col_type) in enumerate(kpis):
            add_kpi_card(ws, row, 1 + i * spacing, value, label, col_type)
        return row + 3

    def write_delta_kpi(self, ws: Worksheet, row: int, col: int, value: float | None, label: str) -> None:
        """Percentage change card, green/red by sign; 'n/a' when it cannot be computed."""
        cell = ws.cell(row=row, column=col)
        if value is None:
            cell.value, cell.font = "n/a", KPI_LABEL_FONT
        else:
            cell.value = value
            cell.font = POSITIVE_KPI_FONT if value >= 0 else NEGATIVE_KPI_FONT
            cell.number_format = '+0.0"%";-0.0"%";0.0"%"'
        cell.alignment = CENTER
        caption = ws.cell(row=row + 1, column=col, value=label)
        caption.font, caption.alignment = KPI_LABEL_FONT, CENTER

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def write_table(
        self,
        ws: Worksheet,
        start_row: int,
        columns: list[ColSpec],
        data: list[dict] | pd.DataFrame,
        trend_key: str | None = None,
        freeze: bool = True,
        show_total: bool = False,
    ) -> int:
        """Header plus one row per record.

        trend_key names the field whose trend tag colours the row. With
        show_total a TOTAL row sums the currency and number columns.
        """
        rows = data.to_dict("records") if isinstance(data, pd.DataFrame) else list(data)
        format_header_row(ws, start_row, [label for _, _, label in columns])

        row = start_row + 1
        for record in rows:
            trend = _cell_value(record.get(trend_key)) if trend_key else None
            for col_num, (key, col_type, _) in enumerate(columns, 1):
                format_data_cell(ws, row, col_num, _cell_value(record.get(key)), col_type, trend=trend)
            row += 1

        if show_total and rows:
            for col_num, (key, col_type, _) in enumerate(columns, 1):
                if col_num == 1:
                    value = "TOTAL"
                elif col_type in NUMBER_FORMATS and col_type != "percent":
                    value = sum(_cell_value(r.get(key)) or 0 for r in rows)
                else:
                    value = None
                format_data_cell(ws, row, col_num, value, col_type if col_num > 1 else "text", is_total=True)
            row += 1

        auto_column_width(ws)
        if freeze:
            ws.freeze_panes = f"A{start_row + 1}"
        return row

    def write_legend(self, ws: Worksheet, start_row: int, items: list[tuple[str, str]]) -> int:
        """Tag / meaning table; each tag cell carries its trend colour."""
        format_header_row(ws, start_row, ["Trend", "Meaning"])
        row = start_row + 1
        for tag, meaning in items:
            tag_cell = ws.cell(row=row, column=1, value=tag)
            tag_cell.font, tag_cell.border = LEGEND_BOLD_FONT, GRID_BORDER
            tag_cell.fill = TREND_FILLS.get(tag, LEGEND_FILL)

            text_cell = ws.cell(row=row, column=2, value=meaning)
            text_cell.font, text_cell.border, text_cell.alignment = DATA_FONT, GRID_BORDER, WRAP
            text_cell.fill = LEGEND_FILL
            row += 1
        ws.column_dimensions["B"].width = 70
        return row + 1

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(path)
        return path
