"""Per-time-unit encoders for digital and state tracks.

Both encoders write straight into the canvas cells of a row that has
already been allocated. Time units are processed in increasing order; the
digital encoder's falling-edge handling depends on it.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from core.errors import ColumnOverflow, InvalidSymbol
from core.models import BorderWeight, Canvas, Cell, Side

logger = logging.getLogger(__name__)

DIGITAL_SYMBOLS = frozenset("01-X")
BLANK_TOKENS = ("", ".")
BASE_PREFIXES = {2: '0b', 8: '0o', 16: '0x'}

Run = Tuple[int, int, str]  # (first unit, last unit, token)


def note_overflow(canvas: Canvas, row: int, name: str, total: int) -> int:
    """Records units past the time axis and returns how many fit."""
    fits = min(total, canvas.time_units)
    dropped = total - fits
    if dropped > 0:
        overflow = ColumnOverflow(row, name, dropped)
        canvas.overflows.append(overflow)
        logger.warning("%s", overflow)
    return fits


class EdgeWindow:
    """The current cell of a digital row and the one before it.

    The previous cell is the only already-written cell an encoder may revise.
    """

    def __init__(self, baseline: str = '0'):
        self.previous: Optional[Cell] = None
        self.current: Optional[Cell] = None
        self.previous_symbol = baseline
        self.symbol = baseline

    def advance(self, cell: Cell, symbol: str):
        self.previous, self.current = self.current, cell
        self.previous_symbol, self.symbol = self.symbol, symbol

    @property
    def is_edge(self) -> bool:
        return self.symbol != self.previous_symbol

    def close_previous(self):
        # Falling edge: vertical line on the previous cell's right side
        if self.previous is not None:
            self.previous.add_border(Side.RIGHT)


class DigitalEncoder:
    @staticmethod
    def validate(pattern: str):
        for i, s in enumerate(pattern):
            if s not in DIGITAL_SYMBOLS:
                raise InvalidSymbol(i, s)

    @staticmethod
    def encode(canvas: Canvas, row: int, pattern: str, name: str = "") -> List[Cell]:
        layout = canvas.layout
        count = note_overflow(canvas, row, name, len(pattern))

        window = EdgeWindow()
        cells = []
        for i in range(count):
            s = pattern[i]
            cell = canvas.cell(row, layout.column_for(i))
            window.advance(cell, s)

            if s in ('0', '1'):
                if window.is_edge:
                    if s == '1':
                        cell.set_border(Side.LEFT)
                        cell.set_border(Side.TOP)
                    else:
                        window.close_previous()
                        cell.set_border(Side.TOP)
                if s == '1':
                    cell.add_border(Side.TOP)
                else:
                    cell.set_border(Side.BOTTOM)
            elif s == '-':
                cell.set_border(Side.TOP, BorderWeight.DOTTED)
            else:
                for side in Side:
                    cell.set_border(side, BorderWeight.DOTTED)
            cells.append(cell)
        return cells


def clock_pattern(time_units: int, period: int = 2, rising_first: bool = True) -> str:
    """Digital pattern for a free-running clock.

    `period` is in time units; the high phase takes the first half of each
    period (the second half when `rising_first` is False).
    """
    period = max(1, period)
    half = period / 2.0
    symbols = []
    for t in range(time_units):
        is_first_half = (t % period) < half
        is_high = is_first_half if rising_first else not is_first_half
        symbols.append('1' if is_high else '0')
    return "".join(symbols)


def format_bus_value(val: Optional[str], bits: int = 8, input_base: int = 16, display_base: int = 16) -> Optional[str]:
    if bits < 1:
        raise ValueError(f"Bit width must be positive, got {bits}")
    if val is None or val.strip() in BLANK_TOKENS:
        return None
    val = val.strip()
    if val.upper() in ('X', 'Z'):
        return val.upper()

    try:
        # 1. Parse from input_base, base prefix stripped
        clean_val = val.lower()
        if clean_val.startswith(BASE_PREFIXES.get(input_base, '-')):
            clean_val = clean_val[2:]
        num = int(clean_val, input_base)
    except ValueError:
        return val  # Not a number in this base, keep as a plain label

    # 2. Mask to bit-width
    num &= (1 << bits) - 1

    # 3. Format to display_base
    if display_base == 2:
        return f"{num:0{bits}b}"
    elif display_base == 8:
        oct_len = (bits + 2) // 3
        return "0o" + f"{num:0{oct_len}o}"
    elif display_base == 16:
        hex_len = (bits + 3) // 4
        return "0x" + f"{num:0{hex_len}X}"
    return str(num)


class StateEncoder:
    @staticmethod
    def is_blank(token: Optional[str]) -> bool:
        return token is None or token.strip() in BLANK_TOKENS

    @staticmethod
    def runs(tokens: Sequence[Optional[str]]) -> List[Run]:
        """Maximal runs of identical consecutive non-blank tokens."""
        result = []
        current = None
        start = 0
        for i, tok in enumerate(tokens):
            tok = None if StateEncoder.is_blank(tok) else tok.strip()
            if tok != current:
                if current is not None:
                    result.append((start, i - 1, current))
                current = tok
                start = i
        if current is not None:
            result.append((start, len(tokens) - 1, current))
        return result

    @staticmethod
    def expand(runs: Sequence[Run], length: int = 0) -> List[Optional[str]]:
        """Inverse of runs(): one token (or None) per time unit."""
        length = max([length] + [last + 1 for _, last, _ in runs])
        tokens: List[Optional[str]] = [None] * length
        for first, last, tok in runs:
            for i in range(first, last + 1):
                tokens[i] = tok
        return tokens

    @staticmethod
    def encode(canvas: Canvas, row: int, tokens: Sequence[Optional[str]], name: str = "") -> List[Cell]:
        layout = canvas.layout
        palette = canvas.config.palette
        count = note_overflow(canvas, row, name, len(tokens))

        anchors = []
        for first, last, tok in StateEncoder.runs(list(tokens[:count])):
            c0, c1 = layout.column_for(first), layout.column_for(last)
            anchor = canvas.cell(row, c0) if c1 == c0 else canvas.merge(row, c0, c1)
            # The anchor's sides cover the span's full logical width
            for side in Side:
                anchor.set_border(side)
            anchor.label = tok
            anchor.align = "center"
            anchor.fill = palette.lookup(tok)
            anchors.append(anchor)
        return anchors
