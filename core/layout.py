import logging
from dataclasses import dataclass

from core.models import Canvas, Side

logger = logging.getLogger(__name__)

@dataclass
class GridLayout:
    """Row cursor and time-axis column mapping for one canvas."""
    time_units: int
    base_column: int = 1  # Columns before this hold signal names
    header_row: int = 0
    cursor_row: int = 0

    def allocate_row(self) -> int:
        row = self.cursor_row
        self.cursor_row += 1
        logger.debug("Allocated row %d", row)
        return row

    def column_for(self, time_unit: int) -> int:
        return self.base_column + time_unit

    def in_range(self, time_unit: int) -> bool:
        return 0 <= time_unit < self.time_units

    @property
    def last_column(self) -> int:
        return self.base_column + self.time_units - 1

    @property
    def last_used_row(self) -> int:
        return self.cursor_row - 1

    def stamp_grid_lines(self, canvas: Canvas):
        """Light vertical divider every `major_period` units.

        Only fills in sides nothing else has drawn, so signal borders win.
        """
        style = canvas.config.style
        period = max(1, style.major_period)
        for t in range(0, self.time_units, period):
            col = self.column_for(t)
            for row in range(self.header_row, self.last_used_row + 1):
                if canvas.is_covered(row, col):
                    continue
                # The previous column's right side is the same line
                left_neighbour = canvas.owner(row, col - 1)
                if left_neighbour is not None and left_neighbour.last_column == col - 1 \
                        and left_neighbour.has_border(Side.RIGHT):
                    continue
                canvas.cell(row, col).add_border(Side.LEFT, style.grid_weight, style.grid_color)

    def stamp_bounds(self, canvas: Canvas):
        """Heavy border on the outward sides of the occupied rectangle."""
        style = canvas.config.style
        top, bottom = self.header_row, self.last_used_row
        first_col, last_col = 0, self.last_column

        def outward(row, col, side):
            target = canvas.owner(row, col) or canvas.cell(row, col)
            target.set_border(side, style.bound_weight, style.bound_color)

        for col in range(first_col, last_col + 1):
            outward(top, col, Side.TOP)
            outward(bottom, col, Side.BOTTOM)
        for row in range(top, bottom + 1):
            outward(row, first_col, Side.LEFT)
            outward(row, last_col, Side.RIGHT)
        logger.debug("Bounds stamped over rows %d..%d, columns %d..%d", top, bottom, first_col, last_col)
