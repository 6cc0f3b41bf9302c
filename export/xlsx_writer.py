import logging
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill
from openpyxl.styles import Side as XlSide
from openpyxl.utils import get_column_letter

from core.models import BorderWeight, Cell, RenderedGrid, Side

logger = logging.getLogger(__name__)

BORDER_STYLES = {
    BorderWeight.THIN: "thin",
    BorderWeight.MEDIUM: "medium",
    BorderWeight.THICK: "thick",
    BorderWeight.DOTTED: "dotted",
}


def xl_color(color: Optional[str]) -> Optional[str]:
    if not color:
        return None
    return color.lstrip('#').upper()


class XlsxWriter:
    """Writes a finalized grid to one worksheet, one grid cell per sheet cell."""

    def __init__(self, sheet_title: str = "Timing", label_width: float = 16, unit_width: float = 3.5,
                 row_height: Optional[float] = 18):
        self.sheet_title = sheet_title
        self.label_width = label_width
        self.unit_width = unit_width
        self.row_height = row_height

    def xl_border(self, cell: Cell) -> Border:
        sides = {}
        for side in Side:
            b = cell.border(side)
            if b is not None:
                sides[side.value] = XlSide(style=BORDER_STYLES[b.weight], color=xl_color(b.color))
        return Border(**sides)

    def build_workbook(self, grid: RenderedGrid) -> Workbook:
        wb = Workbook()
        ws = wb.active
        ws.title = self.sheet_title

        for cell in grid.iter_cells():
            if cell.is_empty():
                continue
            # openpyxl is 1-based
            r, c = cell.row + 1, cell.column + 1
            xl_cell = ws.cell(row=r, column=c)
            if cell.label:
                xl_cell.value = cell.label
            if cell.borders:
                xl_cell.border = self.xl_border(cell)
            if cell.fill:
                color = xl_color(cell.fill)
                xl_cell.fill = PatternFill(fill_type="solid", start_color=color, end_color=color)
            xl_cell.alignment = Alignment(horizontal=cell.align, vertical="center")
            if cell.bold:
                xl_cell.font = Font(bold=True)

            # Merging after styling spreads the anchor's edges over the range
            if cell.is_anchor:
                ws.merge_cells(start_row=r, start_column=c, end_row=r, end_column=c + cell.span - 1)

        for col in range(1, grid.column_count + 1):
            width = self.label_width if col <= grid.base_column else self.unit_width
            ws.column_dimensions[get_column_letter(col)].width = width
        if self.row_height:
            for row in range(grid.header_row + 1, grid.last_row + 2):
                ws.row_dimensions[row].height = self.row_height
        ws.freeze_panes = ws.cell(row=grid.header_row + 2, column=grid.base_column + 1)
        return wb

    def write(self, grid: RenderedGrid, path) -> Path:
        path = Path(path)
        wb = self.build_workbook(grid)
        wb.save(path)
        logger.info("Spreadsheet saved to %s", path)
        return path
