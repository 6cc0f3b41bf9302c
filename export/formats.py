import json
import logging
from pathlib import Path

from core.models import RenderedGrid
from export.image_writer import save_image
from export.xlsx_writer import XlsxWriter

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".bmp")


def export_grid(grid: RenderedGrid, path, settings=None, sheet_title: str = "Timing") -> Path:
    """Writes the grid in the format implied by the file suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in IMAGE_SUFFIXES:
        return save_image(grid, path, settings)
    if suffix == ".xlsx":
        return XlsxWriter(sheet_title=sheet_title[:31] or "Timing").write(grid, path)
    if suffix == ".json":
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(grid.to_dict(), f, indent=4)
        logger.info("Grid JSON saved to %s", path)
        return path
    raise ValueError(f"Unsupported export format {path.suffix!r} (use .png, .jpg, .bmp, .xlsx or .json)")
