from PyQt6.QtWidgets import QWidget
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QPainter, QColor, QPen

from core.models import RenderedGrid
from export.image_writer import GridPainter


class GridView(QWidget):
    # Emitted when the cell width changes through Ctrl+Wheel
    zoom_changed = pyqtSignal(int)
    # Emitted when a cell is clicked (row, column)
    cell_clicked = pyqtSignal(int, int)

    def __init__(self, grid: RenderedGrid = None, settings=None, parent=None):
        super().__init__(parent)
        self.grid = grid
        self.grid_painter = GridPainter(settings)
        self.setMouseTracking(True)
        self.hover_pos = None  # (row, column)
        self.update_dimensions()

    def set_grid(self, grid: RenderedGrid):
        self.grid = grid
        self.hover_pos = None
        self.update_dimensions()
        self.update()

    def set_settings(self, settings):
        self.grid_painter = GridPainter(settings)
        self.update_dimensions()
        self.update()

    def update_dimensions(self):
        if self.grid is None:
            self.setMinimumSize(400, 200)
            return
        w, h = self.grid_painter.size(self.grid)
        self.setMinimumSize(w + 50, h + 50)

    def cell_at_pos(self, x: int, y: int):
        if self.grid is None:
            return None
        row = self.grid.header_row + y // self.grid_painter.row_height
        if not (self.grid.header_row <= row <= self.grid.last_row):
            return None
        for col in range(self.grid.column_count):
            if self.grid_painter.column_x(self.grid, col) <= x < self.grid_painter.column_x(self.grid, col + 1):
                return row, col
        return None

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(self.grid_painter.settings['bg_color']))
        if self.grid is None:
            painter.setPen(QColor("#808080"))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Open a diagram description (Ctrl+O)")
            return

        self.grid_painter.paint(painter, self.grid)

        # Column guide under the cursor
        if self.hover_pos:
            _, col = self.hover_pos
            if col >= self.grid.base_column:
                x = self.grid_painter.column_x(self.grid, col)
                w = self.grid_painter.cell_width
                _, h = self.grid_painter.size(self.grid)
                painter.fillRect(x, 0, w, h, QColor(255, 170, 0, 40))
                painter.setPen(QPen(QColor("#ffaa00"), 1, Qt.PenStyle.DashLine))
                painter.drawLine(x, 0, x, h)

    def mouseMoveEvent(self, event):
        pos = event.position()
        hover = self.cell_at_pos(int(pos.x()), int(pos.y()))
        if hover != self.hover_pos:
            self.hover_pos = hover
            if hover is not None and self.grid is not None:
                _, col = hover
                if col >= self.grid.base_column:
                    self.setToolTip(f"t = {col - self.grid.base_column}")
                else:
                    self.setToolTip("")
            self.update()

    def leaveEvent(self, event):
        self.hover_pos = None
        self.update()

    def mousePressEvent(self, event):
        pos = event.position()
        hit = self.cell_at_pos(int(pos.x()), int(pos.y()))
        if hit is not None:
            self.cell_clicked.emit(*hit)

    def wheelEvent(self, event):
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            delta = event.angleDelta().y()
            step = 4 if delta > 0 else -4

            new_width = self.grid_painter.cell_width + step
            new_width = max(8, min(new_width, 200))  # Clamp

            if new_width != self.grid_painter.cell_width:
                self.grid_painter.settings['cell_width'] = new_width
                self.zoom_changed.emit(new_width)
                self.update_dimensions()
                self.update()

            event.accept()
        else:
            super().wheelEvent(event)
