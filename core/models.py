from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Iterator, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from core.config import DiagramConfig
    from core.errors import ColumnOverflow
    from core.layout import GridLayout


class BorderWeight(Enum):
    THIN = "thin"
    MEDIUM = "medium"
    THICK = "thick"
    DOTTED = "dotted"


class Side(Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


class RowKind(Enum):
    DIGITAL = "Digital"
    STATE = "State"
    BOX = "Box"
    TIMING_MARK = "Timing"
    SECTION = "Section"


@dataclass
class Border:
    weight: BorderWeight = BorderWeight.THIN
    color: Optional[str] = None  # Hex color, None = writer default

    def to_dict(self):
        return {'weight': self.weight.name, 'color': self.color}

    @classmethod
    def from_dict(cls, data):
        weight = data.get('weight', 'THIN')
        return cls(
            weight=BorderWeight[weight] if weight in BorderWeight.__members__ else BorderWeight.THIN,
            color=data.get('color'),
        )


@dataclass
class Cell:
    row: int
    column: int
    borders: Dict[Side, Border] = field(default_factory=dict)
    fill: Optional[str] = None
    label: Optional[str] = None
    span: int = 1  # > 1: anchor of a merge covering `span` columns
    align: str = "center"  # 'left', 'center', 'right'
    bold: bool = False

    def set_border(self, side: Side, weight: BorderWeight = BorderWeight.THIN, color: Optional[str] = None):
        self.borders[side] = Border(weight, color)

    def add_border(self, side: Side, weight: BorderWeight = BorderWeight.THIN, color: Optional[str] = None) -> bool:
        """Sets the side only if it is not already present."""
        if side in self.borders:
            return False
        self.set_border(side, weight, color)
        return True

    def has_border(self, side: Side) -> bool:
        return side in self.borders

    def border(self, side: Side) -> Optional[Border]:
        return self.borders.get(side)

    @property
    def is_anchor(self) -> bool:
        return self.span > 1

    @property
    def last_column(self) -> int:
        return self.column + self.span - 1

    def is_empty(self) -> bool:
        return not self.borders and self.fill is None and not self.label and self.span == 1

    def to_dict(self):
        return {
            'row': self.row,
            'column': self.column,
            'borders': {side.name: b.to_dict() for side, b in self.borders.items()},
            'fill': self.fill,
            'label': self.label,
            'span': self.span,
            'align': self.align,
            'bold': self.bold,
        }

    @classmethod
    def from_dict(cls, data):
        c = cls(row=data['row'], column=data['column'])
        for side_name, b_data in data.get('borders', {}).items():
            if side_name in Side.__members__:
                c.borders[Side[side_name]] = Border.from_dict(b_data)
        c.fill = data.get('fill')
        c.label = data.get('label')
        c.span = data.get('span', 1)
        c.align = data.get('align', 'center')
        c.bold = data.get('bold', False)
        return c


@dataclass
class SignalRow:
    row: int
    name: str
    kind: RowKind
    cells: List[Cell] = field(default_factory=list)

    def to_dict(self):
        return {
            'row': self.row,
            'name': self.name,
            'kind': self.kind.name,
            'columns': [c.column for c in self.cells],
        }


class Canvas:
    """The drawing surface for one diagram.

    Exclusively owned by the caller issuing add-operations; every encoder
    receives it explicitly.
    """

    def __init__(self, layout: "GridLayout", config: "DiagramConfig"):
        self.layout = layout
        self.config = config
        self.cells: Dict[Tuple[int, int], Cell] = {}
        self.rows: List[SignalRow] = []
        self.overflows: List["ColumnOverflow"] = []
        self.finalized = False

    @property
    def time_units(self) -> int:
        return self.layout.time_units

    @property
    def cursor_row(self) -> int:
        return self.layout.cursor_row

    @property
    def column_count(self) -> int:
        return self.layout.base_column + self.layout.time_units

    def cell(self, row: int, column: int) -> Cell:
        key = (row, column)
        c = self.cells.get(key)
        if c is None:
            c = Cell(row=row, column=column)
            self.cells[key] = c
        return c

    def peek(self, row: int, column: int) -> Optional[Cell]:
        return self.cells.get((row, column))

    def owner(self, row: int, column: int) -> Optional[Cell]:
        """Returns the cell carrying the visual state of (row, column).

        That is the cell itself, or the anchor of a merge covering it.
        """
        c = self.cells.get((row, column))
        if c is not None:
            return c
        for col in range(column - 1, -1, -1):
            left = self.cells.get((row, col))
            if left is not None:
                return left if left.last_column >= column else None
        return None

    def is_covered(self, row: int, column: int) -> bool:
        """True if (row, column) sits inside a merge but is not its anchor."""
        c = self.owner(row, column)
        return c is not None and c.column != column

    def merge(self, row: int, first: int, last: int) -> Cell:
        anchor = self.cell(row, first)
        anchor.span = last - first + 1
        # Covered cells never hold state of their own
        for col in range(first + 1, last + 1):
            self.cells.pop((row, col), None)
        return anchor


@dataclass
class RenderedGrid:
    """Finalized canvas content handed to output writers."""
    time_units: int
    base_column: int
    header_row: int
    last_row: int
    column_count: int
    cells: Dict[Tuple[int, int], Cell] = field(default_factory=dict)
    rows: List[SignalRow] = field(default_factory=list)
    overflows: list = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return self.last_row - self.header_row + 1

    def cell_at(self, row: int, column: int) -> Optional[Cell]:
        return self.cells.get((row, column))

    def iter_cells(self) -> Iterator[Cell]:
        for key in sorted(self.cells):
            yield self.cells[key]

    def merged_ranges(self) -> List[Tuple[int, int, int]]:
        """(row, first column, last column) for every merged anchor."""
        return [(c.row, c.column, c.last_column) for c in self.iter_cells() if c.is_anchor]

    def to_dict(self):
        return {
            'time_units': self.time_units,
            'base_column': self.base_column,
            'header_row': self.header_row,
            'last_row': self.last_row,
            'column_count': self.column_count,
            'rows': [r.to_dict() for r in self.rows],
            'cells': [c.to_dict() for c in self.iter_cells()],
        }

    @classmethod
    def from_dict(cls, data):
        grid = cls(
            time_units=data.get('time_units', 0),
            base_column=data.get('base_column', 1),
            header_row=data.get('header_row', 0),
            last_row=data.get('last_row', 0),
            column_count=data.get('column_count', 0),
        )
        for c_data in data.get('cells', []):
            c = Cell.from_dict(c_data)
            grid.cells[(c.row, c.column)] = c
        for r_data in data.get('rows', []):
            kind = r_data.get('kind', 'DIGITAL')
            grid.rows.append(SignalRow(
                row=r_data['row'],
                name=r_data.get('name', ''),
                kind=RowKind[kind] if kind in RowKind.__members__ else RowKind.DIGITAL,
                cells=[grid.cells[(r_data['row'], col)] for col in r_data.get('columns', [])
                       if (r_data['row'], col) in grid.cells],
            ))
        return grid
