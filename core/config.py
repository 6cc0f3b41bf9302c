"""Styling and palette configuration for the grid encoders.

Everything here is immutable; build a new ``DiagramConfig`` to change a
palette or a line color rather than mutating one in place.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from core.models import BorderWeight


# Token -> fill color for state tracks. Keys are matched case-insensitively.
DEFAULT_STATE_COLORS: Dict[str, str] = {
    "OFF": "#d9d9d9",
    "IDLE": "#e2efda",
    "INIT": "#fff2cc",
    "RESET": "#f8cbad",
    "WAIT": "#fce4d6",
    "BUSY": "#ffd966",
    "RUN": "#c6efce",
    "ON": "#c6efce",
    "READY": "#ddebf7",
    "SLEEP": "#d9e1f2",
    "ERROR": "#ff9999",
    "FAULT": "#ff9999",
}

DEFAULT_FILL = "#f2f2f2"


@dataclass(frozen=True)
class StatePalette:
    """Closed token -> color table with a single fallback fill."""
    colors: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_STATE_COLORS))
    default_fill: str = DEFAULT_FILL

    def __post_init__(self):
        # Normalise keys once so lookups stay a plain dict access
        object.__setattr__(self, "colors", {k.upper(): v for k, v in self.colors.items()})

    def lookup(self, token: str) -> str:
        return self.colors.get(token.strip().upper(), self.default_fill)


@dataclass(frozen=True)
class GridStyle:
    major_period: int = 5  # Time units between major grid lines
    grid_color: str = "#c0c0c0"
    grid_weight: BorderWeight = BorderWeight.THIN
    bound_weight: BorderWeight = BorderWeight.THICK
    bound_color: Optional[str] = None
    accent_color: str = "#c00000"  # Timing mark line
    section_fill: str = "#bdd7ee"
    header_fill: Optional[str] = None
    label_columns: int = 1  # Columns reserved for signal names


@dataclass(frozen=True)
class DiagramConfig:
    style: GridStyle = field(default_factory=GridStyle)
    palette: StatePalette = field(default_factory=StatePalette)
    show_time_axis: bool = True  # Number the time units in the header row
