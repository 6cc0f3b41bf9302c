"""
Render timing diagram descriptions to a cell grid.

Usage:
    timing-grid diagram.txt -o diagram.xlsx
    timing-grid diagram.json -o diagram.png
    timing-grid diagram.txt --gui
"""

import sys
import os
import argparse
import logging

from core.errors import TimingGridError
from core.script import load_grid

logger = logging.getLogger("timing_grid")


def run_gui(script_path=None):
    from PyQt6.QtWidgets import QApplication
    from ui.mainwindow import MainWindow

    app = QApplication(sys.argv[:1])
    app.setStyle("Fusion")  # Consistent cross-platform look

    window = MainWindow(script_path)
    window.show()
    return app.exec()


def build_parser():
    parser = argparse.ArgumentParser(description="Render timing diagram descriptions to a cell grid")
    parser.add_argument("diagram", nargs="?", help="Diagram description (.txt / .wave text format or .json) or a grid .json export")
    parser.add_argument("-o", "--output", help="Output file: .xlsx, .png, .jpg, .bmp or .json")
    parser.add_argument("--gui", action="store_true", help="Open the preview window")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.gui or not args.output:
        return run_gui(args.diagram)

    if not args.diagram:
        logger.error("A diagram description is required with --output")
        return 2

    # Image export works without a display
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from export.formats import export_grid

    try:
        title, grid = load_grid(args.diagram)
        export_grid(grid, args.output, sheet_title=title)
    except (OSError, ValueError, TimingGridError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
