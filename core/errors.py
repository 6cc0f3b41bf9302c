class TimingGridError(Exception):
    """Base class for diagram construction failures."""


class InvalidSymbol(TimingGridError, ValueError):
    def __init__(self, index: int, symbol: str):
        self.index = index
        self.symbol = symbol
        super().__init__(f"Invalid symbol {symbol!r} at index {index} (expected one of 0, 1, -, X)")


class InvalidRange(TimingGridError, ValueError):
    def __init__(self, start: int, end: int, time_units: int):
        self.start = start
        self.end = end
        self.time_units = time_units
        super().__init__(f"Invalid range {start}..{end} for a {time_units}-unit diagram")


class ScriptError(TimingGridError):
    def __init__(self, message: str, line_no: int = 0):
        self.line_no = line_no
        if line_no:
            message = f"line {line_no}: {message}"
        super().__init__(message)


class ColumnOverflow(UserWarning):
    """Units dropped because they fall beyond the time axis. Not fatal."""

    def __init__(self, row: int, name: str, dropped: int):
        self.row = row
        self.name = name
        self.dropped = dropped
        super().__init__(f"{name!r} (row {row}): {dropped} unit(s) beyond the time axis dropped")
