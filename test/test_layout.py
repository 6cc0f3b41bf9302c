import sys
import os
import unittest

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.config import DiagramConfig, GridStyle
from core.diagram import (begin_canvas, add_digital_signal, add_state_signal, add_box_signal,
                          add_spacer, finalize)
from core.errors import InvalidRange
from core.layout import GridLayout
from core.models import BorderWeight, Side


class TestGridLayout(unittest.TestCase):
    def test_allocate_row_is_monotonic(self):
        layout = GridLayout(time_units=4)
        self.assertEqual([layout.allocate_row() for _ in range(3)], [0, 1, 2])
        self.assertEqual(layout.cursor_row, 3)
        self.assertEqual(layout.last_used_row, 2)

    def test_column_mapping(self):
        layout = GridLayout(time_units=4, base_column=2)
        self.assertEqual(layout.column_for(0), 2)
        self.assertEqual(layout.column_for(3), 5)
        self.assertEqual(layout.last_column, 5)
        self.assertTrue(layout.in_range(3))
        self.assertFalse(layout.in_range(4))
        self.assertFalse(layout.in_range(-1))

    def test_begin_canvas_allocates_header(self):
        canvas = begin_canvas(10)
        self.assertEqual(canvas.layout.header_row, 0)
        self.assertEqual(canvas.cursor_row, 1)
        self.assertEqual(canvas.peek(0, canvas.layout.column_for(7)).label, "7")

    def test_begin_canvas_rejects_empty_axis(self):
        with self.assertRaises(InvalidRange):
            begin_canvas(0)


class TestFinalize(unittest.TestCase):
    def test_empty_canvas(self):
        canvas = begin_canvas(10)
        grid = finalize(canvas)
        self.assertEqual(grid.header_row, 0)
        self.assertEqual(grid.last_row, 0)
        self.assertEqual(grid.row_count, 1)
        self.assertEqual(grid.column_count, 11)

        for col in range(grid.column_count):
            cell = grid.cell_at(0, col)
            self.assertEqual(cell.border(Side.TOP).weight, BorderWeight.THICK)
            self.assertEqual(cell.border(Side.BOTTOM).weight, BorderWeight.THICK)
        self.assertEqual(grid.cell_at(0, 0).border(Side.LEFT).weight, BorderWeight.THICK)
        self.assertEqual(grid.cell_at(0, 10).border(Side.RIGHT).weight, BorderWeight.THICK)

    def test_bounds_only_touch_the_outer_ring(self):
        canvas = begin_canvas(10)
        add_digital_signal(canvas, "A", "0001111000")
        add_digital_signal(canvas, "B", "0110000000")
        add_digital_signal(canvas, "C", "0000000000")
        grid = finalize(canvas)
        col = canvas.layout.column_for

        # Interior row keeps its thin signal borders
        middle = grid.cell_at(2, col(1))
        self.assertEqual(middle.border(Side.TOP).weight, BorderWeight.THIN)
        self.assertEqual(middle.border(Side.LEFT).weight, BorderWeight.THIN)

        # Last row bottoms become heavy, first-row tops too
        self.assertEqual(grid.cell_at(3, col(4)).border(Side.BOTTOM).weight, BorderWeight.THICK)
        self.assertEqual(grid.cell_at(0, col(4)).border(Side.TOP).weight, BorderWeight.THICK)
        # Right edge on the last time column, left edge on the label column
        for row in range(0, 4):
            self.assertEqual(grid.cell_at(row, col(9)).border(Side.RIGHT).weight, BorderWeight.THICK)
            self.assertEqual(grid.cell_at(row, 0).border(Side.LEFT).weight, BorderWeight.THICK)
        # Interior sides of edge cells untouched
        self.assertFalse(grid.cell_at(1, 0).has_border(Side.TOP))
        self.assertFalse(grid.cell_at(1, 0).has_border(Side.BOTTOM))

    def test_bounds_on_merged_last_row(self):
        canvas = begin_canvas(4)
        row = add_state_signal(canvas, "S", ["A", "A", "A", "A"])
        grid = finalize(canvas)
        anchor = grid.cell_at(row, canvas.layout.column_for(0))
        self.assertEqual(anchor.border(Side.BOTTOM).weight, BorderWeight.THICK)
        self.assertEqual(anchor.border(Side.RIGHT).weight, BorderWeight.THICK)
        # Left side of the anchor is interior
        self.assertEqual(anchor.border(Side.LEFT).weight, BorderWeight.THIN)
        for t in (1, 2, 3):
            self.assertIsNone(grid.cell_at(row, canvas.layout.column_for(t)))

    def test_bounds_include_trailing_spacer(self):
        canvas = begin_canvas(5)
        add_box_signal(canvas, "B", 0, 1)
        add_spacer(canvas)
        grid = finalize(canvas)
        self.assertEqual(grid.last_row, 2)
        self.assertTrue(grid.cell_at(2, 3).has_border(Side.BOTTOM))
        self.assertIsNone(grid.cell_at(1, 3))

    def test_grid_lines_every_major_period(self):
        canvas = begin_canvas(12)
        add_box_signal(canvas, "B", 7, 8)
        grid = finalize(canvas)
        style = canvas.config.style
        col = canvas.layout.column_for

        for t in (0, 5, 10):
            left = grid.cell_at(1, col(t)).border(Side.LEFT)
            self.assertEqual(left.color, style.grid_color, f"unit {t}")
            self.assertEqual(left.weight, BorderWeight.THIN)
        for t in (1, 4, 6, 9):
            self.assertFalse(grid.cell_at(1, col(t)).has_border(Side.LEFT), f"unit {t}")
        # Header row gets them as well
        self.assertEqual(grid.cell_at(0, col(5)).border(Side.LEFT).color, style.grid_color)

    def test_grid_lines_yield_to_signal_borders(self):
        canvas = begin_canvas(10)
        rising = add_digital_signal(canvas, "R", "0000011111")
        falling = add_digital_signal(canvas, "F", "1111100000")
        grid = finalize(canvas)
        col = canvas.layout.column_for

        # Signal's own rising edge wins
        self.assertIsNone(grid.cell_at(rising, col(5)).border(Side.LEFT).color)
        # Previous cell already draws the line
        self.assertTrue(grid.cell_at(falling, col(4)).has_border(Side.RIGHT))
        self.assertFalse(grid.cell_at(falling, col(5)).has_border(Side.LEFT))

    def test_grid_lines_skip_merged_cells(self):
        canvas = begin_canvas(10)
        row = add_state_signal(canvas, "S", ["A"] * 8)
        grid = finalize(canvas)
        self.assertIsNone(grid.cell_at(row, canvas.layout.column_for(5)))

    def test_custom_period(self):
        canvas = begin_canvas(6, DiagramConfig(style=GridStyle(major_period=2)))
        grid = finalize(canvas)
        col = canvas.layout.column_for
        for t in (2, 4):
            self.assertTrue(grid.cell_at(0, col(t)).has_border(Side.LEFT))
        self.assertFalse(grid.cell_at(0, col(3)).has_border(Side.LEFT))

    def test_finalize_twice_warns(self):
        canvas = begin_canvas(4)
        finalize(canvas)
        with self.assertLogs('core.diagram', level='WARNING'):
            finalize(canvas)

    def test_end_to_end_grid(self):
        canvas = begin_canvas(10)
        add_digital_signal(canvas, "Power", "0001111000")
        add_state_signal(canvas, "Mode", ["OFF", "OFF", "RUN", "RUN", "RUN"])
        grid = finalize(canvas)

        self.assertEqual([r.name for r in grid.rows], ["Power", "Mode"])
        self.assertEqual(grid.merged_ranges(), [(2, 1, 2), (2, 3, 5)])
        self.assertIs(next(r for r in grid.rows if r.name == "Mode").cells[0], grid.cell_at(2, 1))
        self.assertEqual(grid.last_row, 2)


if __name__ == '__main__':
    unittest.main()
