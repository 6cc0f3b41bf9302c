import os

from PyQt6.QtWidgets import QMainWindow, QScrollArea, QFileDialog, QMessageBox, QLabel
from PyQt6.QtGui import QKeySequence
from PyQt6.QtCore import Qt, QSettings

from core.script import load_grid
from core.errors import TimingGridError
from export.formats import export_grid
from ui.grid_view import GridView


class MainWindow(QMainWindow):
    def __init__(self, script_path=None):
        super().__init__()
        self.resize(1300, 800)

        # State Tracking
        self.current_script_path = None
        self.diagram_title = None
        self.grid = None

        # Settings Store
        self.settings = QSettings("TimingGrid", "TimingGrid")

        self.init_ui()
        self.update_title()

        if script_path:
            self.load_script(script_path)

    def init_ui(self):
        menubar = self.menuBar()

        # File Menu
        file_menu = menubar.addMenu("File")

        open_action = file_menu.addAction("Open Diagram...")
        open_action.setShortcut(QKeySequence("Ctrl+O"))
        open_action.triggered.connect(self.open_script_file)

        reload_action = file_menu.addAction("Reload")
        reload_action.setShortcut(QKeySequence("F5"))
        reload_action.triggered.connect(self.reload_script)

        export_action = file_menu.addAction("Export...")
        export_action.setShortcut(QKeySequence("Ctrl+E"))
        export_action.triggered.connect(self.export_grid)

        file_menu.addSeparator()

        exit_action = file_menu.addAction("Exit")
        exit_action.triggered.connect(self.close)

        # Central: scrollable grid
        self.grid_view = GridView()
        self.grid_view.zoom_changed.connect(lambda w: self.statusBar().showMessage(f"Cell width: {w}px", 2000))
        self.grid_view.cell_clicked.connect(self.on_cell_clicked)

        scroll = QScrollArea()
        scroll.setWidget(self.grid_view)
        scroll.setWidgetResizable(True)
        self.setCentralWidget(scroll)

        # Overflow badge (Top Right)
        self.overflow_badge = QLabel("")
        self.overflow_badge.setStyleSheet("background-color: #ff9900; color: black; font-weight: bold; border-radius: 2px;")
        self.overflow_badge.setVisible(False)
        menubar.setCornerWidget(self.overflow_badge, Qt.Corner.TopRightCorner)

    def update_title(self):
        title = "Timing Grid"
        if self.diagram_title:
            title += f" - {self.diagram_title}"
        if self.current_script_path:
            title += f" [{os.path.basename(self.current_script_path)}]"
        self.setWindowTitle(title)

    def open_script_file(self):
        start_dir = self.settings.value("last_open_dir", "")
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Open Diagram", start_dir, "Diagram Files (*.txt *.wave *.json);;All Files (*)")
        if not file_path:
            return
        self.settings.setValue("last_open_dir", os.path.dirname(file_path))
        self.load_script(file_path)

    def reload_script(self):
        if self.current_script_path:
            self.load_script(self.current_script_path)

    def load_script(self, file_path):
        try:
            title, grid = load_grid(file_path)
        except (OSError, ValueError, TimingGridError) as e:
            QMessageBox.critical(self, "Error", f"Failed to load diagram: {e}")
            return

        self.current_script_path = file_path
        self.diagram_title = title
        self.grid = grid
        self.grid_view.set_grid(grid)
        self.update_title()

        if grid.overflows:
            self.overflow_badge.setText(f" {len(grid.overflows)} TRUNCATED ")
            self.overflow_badge.setToolTip("\n".join(str(o) for o in grid.overflows))
            self.overflow_badge.setVisible(True)
        else:
            self.overflow_badge.setVisible(False)
        self.statusBar().showMessage(f"Loaded {len(grid.rows)} rows, {grid.time_units} time units", 3000)

    def on_cell_clicked(self, row, col):
        if self.grid is None:
            return
        cell = self.grid.cell_at(row, col)
        sides = ", ".join(s.value for s in cell.borders) if cell else ""
        label = cell.label if cell and cell.label else ""
        self.statusBar().showMessage(f"row {row}, column {col}: {label} [{sides}]", 4000)

    def export_grid(self):
        if self.grid is None:
            QMessageBox.information(self, "Export", "Nothing to export yet.")
            return

        from ui.dialogs import ExportDialog

        # Load saved settings
        initial_settings = {
            'path': self.settings.value("export_path", ""),
            'bg_color': self.settings.value("export_bg_color", "#1e1e1e"),
            'font_color': self.settings.value("export_font_color", "#e0e0e0"),
            'line_color': self.settings.value("export_line_color", "#00d2ff"),
            'font_size': int(self.settings.value("export_font_size", 10)),
            'cell_width': int(self.settings.value("export_cell_width", 28)),
            'format': self.settings.value("export_format", "PNG"),
            'filename': self.settings.value("export_filename", "timing")
        }

        dlg = ExportDialog(self.grid, initial_settings, self)
        if not dlg.exec():
            return
        settings = dlg.get_settings()

        output_dir = settings['path']
        if not output_dir:
            return

        # Save settings for next time
        self.settings.setValue("export_path", output_dir)
        self.settings.setValue("export_bg_color", settings['bg_color'].name())
        self.settings.setValue("export_font_color", settings['font_color'].name())
        self.settings.setValue("export_line_color", settings['line_color'].name())
        self.settings.setValue("export_font_size", settings['font_size'])
        self.settings.setValue("export_cell_width", settings['cell_width'])
        self.settings.setValue("export_format", settings['format'])
        self.settings.setValue("export_filename", settings['filename'])

        filename = settings.get('filename') or 'timing'
        full_path = os.path.join(output_dir, f"{filename}.{settings['format'].lower()}")
        try:
            export_grid(self.grid, full_path, settings, sheet_title=self.diagram_title or "Timing")
        except (OSError, ValueError) as e:
            QMessageBox.critical(self, "Error", f"Failed to export: {e}")
            return
        QMessageBox.information(self, "Success", f"Saved to:\n{full_path}")
