import logging
import sys
from pathlib import Path

from PyQt6.QtCore import Qt, QRect
from PyQt6.QtGui import QColor, QFont, QImage, QPainter, QPen
from PyQt6.QtWidgets import QApplication

from core.models import BorderWeight, Cell, RenderedGrid, Side

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    'bg_color': "#1e1e1e",
    'font_color': "#e0e0e0",
    'line_color': "#00d2ff",  # Borders without an explicit color
    'font_size': 10,
    'cell_width': 28,
    'row_height': 32,
    'label_width': 120,
}

PEN_WIDTHS = {
    BorderWeight.THIN: 1,
    BorderWeight.MEDIUM: 2,
    BorderWeight.THICK: 3,
    BorderWeight.DOTTED: 1,
}

ALIGNMENTS = {
    'left': Qt.AlignmentFlag.AlignLeft,
    'center': Qt.AlignmentFlag.AlignHCenter,
    'right': Qt.AlignmentFlag.AlignRight,
}

_app = None


def ensure_app():
    """QPainter text rendering needs an application object. A QApplication
    lets the preview widgets share the process."""
    global _app
    app = QApplication.instance()
    if app is None:
        _app = app = QApplication(sys.argv[:1])
    return app


def merged_settings(settings=None):
    result = dict(DEFAULT_SETTINGS)
    if settings:
        result.update({k: v for k, v in settings.items() if v is not None})
    return result


class GridPainter:
    """Paints a RenderedGrid cell by cell.

    Shared by the image export and the preview widget so both look the same.
    """

    def __init__(self, settings=None):
        self.settings = merged_settings(settings)

    @property
    def cell_width(self) -> int:
        return int(self.settings['cell_width'])

    @property
    def row_height(self) -> int:
        return int(self.settings['row_height'])

    def column_x(self, grid: RenderedGrid, column: int) -> int:
        label_col_w = int(self.settings['label_width']) // max(1, grid.base_column)
        if column <= grid.base_column:
            return column * label_col_w
        return grid.base_column * label_col_w + (column - grid.base_column) * self.cell_width

    def size(self, grid: RenderedGrid):
        w = self.column_x(grid, grid.column_count) + 1  # +1 to include right border
        h = grid.row_count * self.row_height + 1
        return w, h

    def cell_rect(self, grid: RenderedGrid, cell: Cell) -> QRect:
        x1 = self.column_x(grid, cell.column)
        x2 = self.column_x(grid, cell.last_column + 1)
        y = (cell.row - grid.header_row) * self.row_height
        return QRect(x1, y, x2 - x1, self.row_height)

    def pen_for(self, border) -> QPen:
        pen = QPen(QColor(border.color or self.settings['line_color']))
        pen.setWidth(PEN_WIDTHS[border.weight])
        if border.weight == BorderWeight.DOTTED:
            pen.setStyle(Qt.PenStyle.DotLine)
        return pen

    def paint(self, painter: QPainter, grid: RenderedGrid):
        font = QFont(painter.font())
        font.setPointSize(int(self.settings['font_size']))

        cells = [c for c in grid.iter_cells() if not c.is_empty()]
        # Fills first so neighbouring borders are never painted over
        for cell in cells:
            if cell.fill:
                painter.fillRect(self.cell_rect(grid, cell), QColor(cell.fill))

        for cell in cells:
            rect = self.cell_rect(grid, cell)
            for side in Side:
                border = cell.border(side)
                if border is None:
                    continue
                painter.setPen(self.pen_for(border))
                if side == Side.LEFT:
                    painter.drawLine(rect.left(), rect.top(), rect.left(), rect.top() + rect.height())
                elif side == Side.RIGHT:
                    x = rect.left() + rect.width()
                    painter.drawLine(x, rect.top(), x, rect.top() + rect.height())
                elif side == Side.TOP:
                    painter.drawLine(rect.left(), rect.top(), rect.left() + rect.width(), rect.top())
                else:
                    y = rect.top() + rect.height()
                    painter.drawLine(rect.left(), y, rect.left() + rect.width(), y)

            if cell.label:
                font.setBold(cell.bold)
                painter.setFont(font)
                # Dark text on filled cells, configured font color elsewhere
                painter.setPen(QColor("#000000") if cell.fill else QColor(self.settings['font_color']))
                text_rect = rect.adjusted(4, 0, -4, 0)
                flags = ALIGNMENTS.get(cell.align, Qt.AlignmentFlag.AlignHCenter) | Qt.AlignmentFlag.AlignVCenter
                painter.drawText(text_rect, flags, cell.label)


def render_image(grid: RenderedGrid, settings=None) -> QImage:
    ensure_app()
    grid_painter = GridPainter(settings)
    w, h = grid_painter.size(grid)

    img = QImage(w, h, QImage.Format.Format_ARGB32)
    img.fill(QColor(grid_painter.settings['bg_color']))

    painter = QPainter(img)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing, False)  # Sharp grid lines
    grid_painter.paint(painter, grid)
    painter.end()
    return img


def save_image(grid: RenderedGrid, path, settings=None) -> Path:
    path = Path(path)
    img = render_image(grid, settings)
    if not img.save(str(path)):
        raise OSError(f"Could not write image to {path}")
    logger.info("Image saved to %s (%dx%d)", path, img.width(), img.height())
    return path
