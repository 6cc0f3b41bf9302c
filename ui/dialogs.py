from PyQt6.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QLineEdit, QDialogButtonBox, QPushButton,
                             QColorDialog, QSpinBox, QComboBox, QFileDialog, QFormLayout, QGroupBox,
                             QScrollArea)
from PyQt6.QtGui import QColor

from ui.grid_view import GridView

IMAGE_FORMATS = ["PNG", "JPG", "BMP"]
EXPORT_FORMATS = IMAGE_FORMATS + ["XLSX", "JSON"]

COLOR_FIELDS = (
    ('bg_color', "Background", "#1e1e1e"),
    ('font_color', "Text", "#e0e0e0"),
    ('line_color', "Lines", "#00d2ff"),
)


class ExportDialog(QDialog):
    """Export target plus image styling, previewed on a live GridView."""

    def __init__(self, grid, initial_settings=None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Export Timing Grid")
        settings = initial_settings or {}

        # Target
        target_box = QGroupBox("Target")
        target_form = QFormLayout(target_box)
        self.format_combo = QComboBox()
        self.format_combo.addItems(EXPORT_FORMATS)
        if settings.get('format') in EXPORT_FORMATS:
            self.format_combo.setCurrentText(settings['format'])
        self.format_combo.currentTextChanged.connect(self.on_format_changed)
        target_form.addRow("Format:", self.format_combo)

        self.filename_edit = QLineEdit(settings.get('filename', 'timing'))
        target_form.addRow("File name:", self.filename_edit)

        self.path_edit = QLineEdit(settings.get('path', ''))
        browse_btn = QPushButton("...")
        browse_btn.setFixedWidth(30)
        browse_btn.clicked.connect(self.browse_folder)
        path_row = QHBoxLayout()
        path_row.addWidget(self.path_edit)
        path_row.addWidget(browse_btn)
        target_form.addRow("Folder:", path_row)

        # Image styling; spreadsheet and JSON output ignore it
        self.style_box = QGroupBox("Image style")
        style_form = QFormLayout(self.style_box)
        self.colors = {}
        self.color_buttons = {}
        for key, title, default in COLOR_FIELDS:
            self.colors[key] = QColor(settings.get(key, default))
            btn = QPushButton()
            btn.setFixedWidth(60)
            btn.clicked.connect(lambda _, k=key: self.pick_color(k))
            self.color_buttons[key] = btn
            style_form.addRow(f"{title}:", btn)
            self.paint_swatch(key)

        self.font_size_spin = QSpinBox()
        self.font_size_spin.setRange(6, 72)
        self.font_size_spin.setValue(int(settings.get('font_size', 10)))
        self.font_size_spin.valueChanged.connect(self.refresh_preview)
        style_form.addRow("Font size:", self.font_size_spin)

        self.cell_width_spin = QSpinBox()
        self.cell_width_spin.setRange(8, 200)
        self.cell_width_spin.setSuffix(" px")
        self.cell_width_spin.setValue(int(settings.get('cell_width', 28)))
        self.cell_width_spin.valueChanged.connect(self.refresh_preview)
        style_form.addRow("Cell width:", self.cell_width_spin)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        side = QVBoxLayout()
        side.addWidget(target_box)
        side.addWidget(self.style_box)
        side.addStretch()
        side.addWidget(buttons)

        self.preview = GridView(grid)
        scroll = QScrollArea()
        scroll.setWidget(self.preview)
        scroll.setWidgetResizable(True)
        scroll.setMinimumWidth(480)

        layout = QHBoxLayout(self)
        layout.addLayout(side)
        layout.addWidget(scroll, 1)

        self.on_format_changed(self.format_combo.currentText())
        self.refresh_preview()

    def paint_swatch(self, key):
        self.color_buttons[key].setStyleSheet(f"background-color: {self.colors[key].name()};")

    def pick_color(self, key):
        color = QColorDialog.getColor(self.colors[key], self)
        if color.isValid():
            self.colors[key] = color
            self.paint_swatch(key)
            self.refresh_preview()

    def on_format_changed(self, fmt):
        self.style_box.setEnabled(fmt in IMAGE_FORMATS)

    def refresh_preview(self):
        self.preview.set_settings(self.get_settings())

    def browse_folder(self):
        folder = QFileDialog.getExistingDirectory(self, "Select Output Folder", self.path_edit.text())
        if folder:
            self.path_edit.setText(folder)

    def get_settings(self):
        settings = {key: color for key, color in self.colors.items()}
        settings.update({
            'font_size': self.font_size_spin.value(),
            'cell_width': self.cell_width_spin.value(),
            'format': self.format_combo.currentText(),
            'filename': self.filename_edit.text(),
            'path': self.path_edit.text(),
        })
        return settings
