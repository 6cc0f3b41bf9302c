"""Operations for building a timing diagram row by row.

Typical use::

    canvas = begin_canvas(10)
    add_digital_signal(canvas, "Power", "0001111000")
    add_state_signal(canvas, "Mode", ["OFF", "OFF", "RUN", "RUN", "RUN"])
    grid = finalize(canvas)

Every add-operation validates its input before allocating a row, so a
failed call leaves the canvas exactly as it was.
"""

import logging
from typing import Optional, Sequence

from core.annotations import BoxEncoder, SectionEncoder, TimingMarkEncoder, check_range
from core.config import DiagramConfig
from core.encoders import DigitalEncoder, StateEncoder, clock_pattern, format_bus_value
from core.errors import InvalidRange
from core.layout import GridLayout
from core.models import Canvas, RenderedGrid, RowKind, SignalRow

logger = logging.getLogger(__name__)


def begin_canvas(time_units: int, config: Optional[DiagramConfig] = None) -> Canvas:
    if time_units < 1:
        raise InvalidRange(0, time_units - 1, time_units)
    config = config or DiagramConfig()
    layout = GridLayout(time_units=time_units, base_column=max(1, config.style.label_columns))
    canvas = Canvas(layout, config)

    # Header row: time axis numbers above each unit
    header = layout.allocate_row()
    layout.header_row = header
    if config.show_time_axis:
        for t in range(time_units):
            cell = canvas.cell(header, layout.column_for(t))
            cell.label = str(t)
            cell.fill = config.style.header_fill
    logger.debug("Canvas started: %d time units", time_units)
    return canvas


def _name_cell(canvas: Canvas, row: int, name: str):
    cell = canvas.cell(row, 0)
    cell.label = name
    cell.align = "right"


def _commit(canvas: Canvas, row: int, name: str, kind: RowKind, cells) -> int:
    canvas.rows.append(SignalRow(row=row, name=name, kind=kind, cells=list(cells)))
    return row


def add_digital_signal(canvas: Canvas, name: str, pattern: str) -> int:
    DigitalEncoder.validate(pattern)
    row = canvas.layout.allocate_row()
    _name_cell(canvas, row, name)
    cells = DigitalEncoder.encode(canvas, row, pattern, name)
    return _commit(canvas, row, name, RowKind.DIGITAL, cells)


def add_clock_signal(canvas: Canvas, name: str, period: int = 2, rising_first: bool = True) -> int:
    return add_digital_signal(canvas, name, clock_pattern(canvas.time_units, period, rising_first))


def add_state_signal(canvas: Canvas, name: str, states: Sequence[Optional[str]]) -> int:
    row = canvas.layout.allocate_row()
    _name_cell(canvas, row, name)
    anchors = StateEncoder.encode(canvas, row, states, name)
    return _commit(canvas, row, name, RowKind.STATE, anchors)


def add_bus_signal(canvas: Canvas, name: str, values: Sequence[Optional[str]],
                   bits: int = 8, input_base: int = 16, display_base: int = 16) -> int:
    tokens = [format_bus_value(v, bits, input_base, display_base) for v in values]
    return add_state_signal(canvas, name, tokens)


def add_box_signal(canvas: Canvas, name: str, start: int, end: int, label: str = "") -> int:
    check_range(canvas, start, end)
    row = canvas.layout.allocate_row()
    _name_cell(canvas, row, name)
    cells = BoxEncoder.encode(canvas, row, start, end, label)
    return _commit(canvas, row, name, RowKind.BOX, cells)


def add_timing_mark(canvas: Canvas, start: int, end: int, label: str = "") -> int:
    check_range(canvas, start, end)
    row = canvas.layout.allocate_row()
    cells = TimingMarkEncoder.encode(canvas, row, start, end, label)
    return _commit(canvas, row, label, RowKind.TIMING_MARK, cells)


def add_section_header(canvas: Canvas, title: str) -> int:
    row = canvas.layout.allocate_row()
    anchor = SectionEncoder.encode(canvas, row, title)
    return _commit(canvas, row, title, RowKind.SECTION, [anchor])


def add_spacer(canvas: Canvas):
    canvas.layout.allocate_row()


def finalize(canvas: Canvas) -> RenderedGrid:
    """Stamps grid lines and the outer border. Call exactly once."""
    if canvas.finalized:
        logger.warning("Canvas finalized twice; grid lines and bounds applied again")
    layout = canvas.layout
    layout.stamp_grid_lines(canvas)
    layout.stamp_bounds(canvas)
    canvas.finalized = True

    grid = RenderedGrid(
        time_units=layout.time_units,
        base_column=layout.base_column,
        header_row=layout.header_row,
        last_row=layout.last_used_row,
        column_count=canvas.column_count,
        cells=dict(canvas.cells),
        rows=list(canvas.rows),
        overflows=list(canvas.overflows),
    )
    logger.info("Finalized %d row(s) x %d column(s), %d overflow(s)",
                grid.row_count, grid.column_count, len(grid.overflows))
    return grid
