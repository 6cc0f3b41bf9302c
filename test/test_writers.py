import sys
import os
import tempfile
import unittest

# Image export needs no display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from openpyxl import load_workbook

from core.models import Cell, RenderedGrid
from core.diagram import (begin_canvas, add_digital_signal, add_state_signal, add_timing_mark,
                          add_section_header, finalize)
from export.formats import export_grid
from export.image_writer import GridPainter, render_image
from export.xlsx_writer import XlsxWriter


def demo_grid():
    canvas = begin_canvas(10)
    add_digital_signal(canvas, "Power", "0001111000")
    add_state_signal(canvas, "Mode", ["OFF", "OFF", "RUN", "RUN", "RUN"])
    add_timing_mark(canvas, 3, 6, "t_on")
    add_section_header(canvas, "Tail")
    return finalize(canvas)


class TestXlsxWriter(unittest.TestCase):
    def setUp(self):
        self.grid = demo_grid()
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "timing.xlsx")
        XlsxWriter(sheet_title="Demo").write(self.grid, self.path)
        self.ws = load_workbook(self.path)["Demo"]

    def tearDown(self):
        self.tmp.cleanup()

    def test_labels(self):
        self.assertEqual(self.ws["A2"].value, "Power")
        self.assertEqual(self.ws["A3"].value, "Mode")
        self.assertEqual(self.ws["B1"].value, "0")
        self.assertEqual(self.ws["K1"].value, "9")
        self.assertEqual(self.ws["B3"].value, "OFF")
        self.assertEqual(self.ws["D3"].value, "RUN")
        self.assertEqual(self.ws["A5"].value, "Tail")

    def test_digital_borders(self):
        rising = self.ws["E2"]  # unit 3
        self.assertEqual(rising.border.left.style, "thin")
        self.assertEqual(rising.border.top.style, "thin")
        self.assertEqual(self.ws["H2"].border.right.style, "thin")  # unit 6
        self.assertEqual(self.ws["C2"].border.bottom.style, "thin")  # unit 1

    def test_merges(self):
        merged = {str(r) for r in self.ws.merged_cells.ranges}
        self.assertIn("B3:C3", merged)
        self.assertIn("D3:F3", merged)
        self.assertIn("A5:K5", merged)

    def test_fills_and_accent(self):
        self.assertTrue(self.ws["B3"].fill.fgColor.rgb.endswith("D9D9D9"))
        self.assertEqual(self.ws["E4"].border.bottom.style, "medium")
        self.assertTrue(self.ws["E4"].border.bottom.color.rgb.endswith("C00000"))
        self.assertTrue(self.ws["A5"].font.b)

    def test_bounds(self):
        self.assertEqual(self.ws["A1"].border.top.style, "thick")
        self.assertEqual(self.ws["A1"].border.left.style, "thick")
        self.assertEqual(self.ws["K2"].border.right.style, "thick")

    def test_column_widths(self):
        self.assertEqual(self.ws.column_dimensions["A"].width, 16)
        self.assertEqual(self.ws.column_dimensions["B"].width, 3.5)


class TestImageWriter(unittest.TestCase):
    def test_geometry(self):
        grid = demo_grid()
        painter = GridPainter({'cell_width': 20, 'row_height': 30, 'label_width': 100})
        self.assertEqual(painter.column_x(grid, 0), 0)
        self.assertEqual(painter.column_x(grid, 1), 100)
        self.assertEqual(painter.column_x(grid, 3), 140)
        self.assertEqual(painter.size(grid), (100 + 10 * 20 + 1, 5 * 30 + 1))

    def test_render_image(self):
        grid = demo_grid()
        img = render_image(grid, {'cell_width': 20, 'row_height': 30, 'label_width': 100})
        self.assertEqual((img.width(), img.height()), (301, 151))
        self.assertFalse(img.isNull())


class TestExportGrid(unittest.TestCase):
    def test_formats(self):
        grid = demo_grid()
        with tempfile.TemporaryDirectory() as tmp:
            for name in ("out.png", "out.xlsx", "out.json"):
                path = export_grid(grid, os.path.join(tmp, name))
                self.assertTrue(os.path.getsize(path) > 0, name)

    def test_unknown_suffix(self):
        with self.assertRaises(ValueError):
            export_grid(demo_grid(), "out.svg")

    def test_empty_cells_are_skipped(self):
        grid = RenderedGrid(time_units=2, base_column=1, header_row=0, last_row=0, column_count=3,
                            cells={(0, 1): Cell(0, 1), (0, 2): Cell(0, 2, label="1")})
        with tempfile.TemporaryDirectory() as tmp:
            path = XlsxWriter().write(grid, os.path.join(tmp, "sparse.xlsx"))
            ws = load_workbook(path).active
            self.assertIsNone(ws["B1"].alignment.horizontal)
            self.assertEqual(ws["C1"].alignment.horizontal, "center")


if __name__ == '__main__':
    unittest.main()
