"""Span-based overlays: boxes, timing callouts and section headers."""

from typing import List

from core.errors import InvalidRange
from core.models import BorderWeight, Canvas, Cell, Side


def check_range(canvas: Canvas, start: int, end: int):
    layout = canvas.layout
    if start > end or not layout.in_range(start) or not layout.in_range(end):
        raise InvalidRange(start, end, canvas.time_units)


def midpoint(start: int, end: int) -> int:
    return (start + end) // 2


class BoxEncoder:
    @staticmethod
    def encode(canvas: Canvas, row: int, start: int, end: int, label: str = "") -> List[Cell]:
        layout = canvas.layout
        cells = []
        for t in range(start, end + 1):
            cell = canvas.cell(row, layout.column_for(t))
            cell.set_border(Side.TOP)
            cell.set_border(Side.BOTTOM)
            if t == start:
                cell.set_border(Side.LEFT)
            if t == end:
                cell.set_border(Side.RIGHT)
            cells.append(cell)

        if label:
            mid = canvas.cell(row, layout.column_for(midpoint(start, end)))
            mid.label = label
            mid.align = "center"
        return cells


class TimingMarkEncoder:
    """A duration callout: an accent line with corner ticks at both ends."""

    @staticmethod
    def encode(canvas: Canvas, row: int, start: int, end: int, label: str = "") -> List[Cell]:
        layout = canvas.layout
        accent = canvas.config.style.accent_color
        cells = []
        for t in range(start, end + 1):
            cell = canvas.cell(row, layout.column_for(t))
            cell.set_border(Side.BOTTOM, BorderWeight.MEDIUM, accent)
            if t == start:
                cell.set_border(Side.LEFT, BorderWeight.MEDIUM, accent)
            if t == end:
                cell.set_border(Side.RIGHT, BorderWeight.MEDIUM, accent)
            cells.append(cell)

        if label:
            mid = canvas.cell(row, layout.column_for(midpoint(start, end)))
            mid.label = label
            mid.align = "center"
        return cells


class SectionEncoder:
    @staticmethod
    def encode(canvas: Canvas, row: int, title: str) -> Cell:
        anchor = canvas.merge(row, 0, canvas.layout.last_column)
        anchor.label = title
        anchor.align = "left"
        anchor.bold = True
        anchor.fill = canvas.config.style.section_fill
        return anchor
