import json
import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from core import diagram
from core.config import DiagramConfig
from core.errors import ScriptError, TimingGridError
from core.models import RenderedGrid

logger = logging.getLogger(__name__)

ENTRY_KINDS = ("digital", "clock", "state", "bus", "box", "timing", "section", "spacer")
BLANK = "."


@dataclass
class Entry:
    kind: str
    name: str = ""
    pattern: str = ""
    states: List[Optional[str]] = field(default_factory=list)
    start: int = 0
    end: int = 0
    label: str = ""
    period: int = 2
    rising_first: bool = True
    bits: int = 8
    input_base: int = 16
    display_base: int = 16
    line_no: int = 0  # Source line for text descriptions, 0 otherwise

    def to_dict(self):
        data = {'kind': self.kind}
        if self.kind in ("digital", "clock", "state", "bus", "box"):
            data['name'] = self.name
        if self.kind == "digital":
            data['pattern'] = self.pattern
        elif self.kind == "clock":
            data['period'] = self.period
            data['rising_first'] = self.rising_first
        elif self.kind in ("state", "bus"):
            data['states'] = self.states
            if self.kind == "bus":
                data['bits'] = self.bits
                data['input_base'] = self.input_base
                data['display_base'] = self.display_base
        elif self.kind in ("box", "timing"):
            data['start'] = self.start
            data['end'] = self.end
            data['label'] = self.label
        elif self.kind == "section":
            data['label'] = self.label
        return data

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ScriptError(f"Entry must be an object, got {type(data).__name__}")
        kind = data.get('kind', '')
        if kind not in ENTRY_KINDS:
            raise ScriptError(f"Unknown entry kind {kind!r}")
        states = data.get('states', [])
        if not isinstance(states, list):
            raise ScriptError(f"'{kind}' states must be a list")
        try:
            entry = cls(
                kind=kind,
                name=str(data.get('name', '')),
                pattern=str(data.get('pattern', '')),
                # JSON numbers are accepted as tokens: 10 -> "10"
                states=[None if v is None else str(v) for v in states],
                start=int(data.get('start', 0)),
                end=int(data.get('end', 0)),
                label=str(data.get('label', '')),
                period=int(data.get('period', 2)),
                rising_first=bool(data.get('rising_first', True)),
                bits=int(data.get('bits', 8)),
                input_base=int(data.get('input_base', 16)),
                display_base=int(data.get('display_base', 16)),
            )
        except (TypeError, ValueError) as e:
            raise ScriptError(f"Invalid '{kind}' entry: {e}") from e
        if kind == "bus" and entry.bits < 1:
            raise ScriptError(f"Invalid bit width {entry.bits}")
        return entry


@dataclass
class DiagramScript:
    name: str = "Untitled"
    time_units: int = 20
    entries: List[Entry] = field(default_factory=list)

    @staticmethod
    def parse(text: str) -> "DiagramScript":
        """
        Parses the line-oriented description format.

        One command per line, '#' starts a comment, quoted arguments may hold
        spaces. '.' stands for a blank unit in state and bus value lists.
        """
        script = DiagramScript()
        for line_no, line in enumerate(text.splitlines(), start=1):
            try:
                words = shlex.split(line, comments=True)
            except ValueError as e:
                raise ScriptError(str(e), line_no) from e
            if not words:
                continue

            cmd, args = words[0].lower(), words[1:]
            if cmd in ("units", "width"):
                script.time_units = _int(args, 0, line_no, "time units")
            elif cmd == "title":
                script.name = " ".join(args)
            elif cmd in ENTRY_KINDS:
                entry = DiagramScript.parse_entry(cmd, args, line_no)
                script.entries.append(entry)
            else:
                raise ScriptError(f"Unknown command {words[0]!r}", line_no)
        logger.debug("Parsed %d entries, %d time units", len(script.entries), script.time_units)
        return script

    @staticmethod
    def parse_entry(cmd: str, args: List[str], line_no: int) -> Entry:
        entry = Entry(kind=cmd, line_no=line_no)

        if cmd == "spacer":
            return entry
        if cmd == "section":
            entry.label = " ".join(args)
            return entry
        if cmd == "timing":
            entry.start = _int(args, 0, line_no, "start")
            entry.end = _int(args, 1, line_no, "end")
            entry.label = " ".join(args[2:])
            return entry

        # Remaining kinds all lead with a signal name
        if not args:
            raise ScriptError(f"'{cmd}' needs a signal name", line_no)
        entry.name, args = args[0], args[1:]

        if cmd == "digital":
            # Allow patterns split into groups: digital D 0001 1110
            entry.pattern = "".join(args)
        elif cmd == "clock":
            if args:
                entry.period = _int(args, 0, line_no, "period")
            if len(args) > 1:
                entry.rising_first = args[1].lower() not in ("neg", "fall", "falling")
        elif cmd == "state":
            entry.states = [None if a == BLANK else a for a in args]
        elif cmd == "bus":
            # bus NAME BITS BASE[:DISPLAY_BASE] VALUES...
            entry.bits = _int(args, 0, line_no, "bit width")
            if entry.bits < 1:
                raise ScriptError(f"Invalid bit width {entry.bits}", line_no)
            if len(args) < 2:
                raise ScriptError("'bus' needs a base", line_no)
            bases = args[1].split(':')
            try:
                entry.input_base = int(bases[0])
                entry.display_base = int(bases[1]) if len(bases) > 1 else entry.input_base
            except ValueError as e:
                raise ScriptError(f"Invalid base {args[1]!r}", line_no) from e
            entry.states = [None if a == BLANK else a for a in args[2:]]
        elif cmd == "box":
            entry.start = _int(args, 0, line_no, "start")
            entry.end = _int(args, 1, line_no, "end")
            entry.label = " ".join(args[2:])
        return entry

    def to_text(self) -> str:
        lines = [f"title {shlex.quote(self.name)}", f"units {self.time_units}"]
        for e in self.entries:
            name = shlex.quote(e.name)
            if e.kind == "spacer":
                lines.append("spacer")
            elif e.kind == "section":
                lines.append(f"section {shlex.quote(e.label)}")
            elif e.kind == "digital":
                lines.append(f"digital {name} {e.pattern}")
            elif e.kind == "clock":
                lines.append(f"clock {name} {e.period}" + ("" if e.rising_first else " neg"))
            elif e.kind in ("state", "bus"):
                tokens = " ".join(BLANK if s is None else shlex.quote(s) for s in e.states)
                prefix = f"bus {name} {e.bits} {e.input_base}:{e.display_base}" if e.kind == "bus" else f"state {name}"
                lines.append(f"{prefix} {tokens}".rstrip())
            elif e.kind == "box":
                lines.append(f"box {name} {e.start} {e.end} {shlex.quote(e.label)}".rstrip())
            elif e.kind == "timing":
                lines.append(f"timing {e.start} {e.end} {shlex.quote(e.label)}".rstrip())
        return "\n".join(lines) + "\n"

    def to_dict(self):
        return {
            'name': self.name,
            'time_units': self.time_units,
            'entries': [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ScriptError(f"Diagram must be an object, got {type(data).__name__}")
        entries = data.get('entries', [])
        if not isinstance(entries, list):
            raise ScriptError("'entries' must be a list")
        try:
            s = cls(
                name=str(data.get('name', 'Untitled')),
                time_units=int(data.get('time_units', 20)),
            )
        except (TypeError, ValueError) as e:
            raise ScriptError(f"Invalid time units: {e}") from e
        for e_data in entries:
            s.entries.append(Entry.from_dict(e_data))
        return s

    @classmethod
    def load(cls, path) -> "DiagramScript":
        path = Path(path)
        if path.suffix.lower() == ".json":
            return cls.from_dict(_read_json(path))
        with open(path, 'r', encoding='utf-8') as f:
            return cls.parse(f.read())

    def save(self, path):
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            if path.suffix.lower() == ".json":
                json.dump(self.to_dict(), f, indent=4)
            else:
                f.write(self.to_text())

    def apply(self, canvas, entry: Entry):
        if entry.kind == "digital":
            diagram.add_digital_signal(canvas, entry.name, entry.pattern)
        elif entry.kind == "clock":
            diagram.add_clock_signal(canvas, entry.name, entry.period, entry.rising_first)
        elif entry.kind == "state":
            diagram.add_state_signal(canvas, entry.name, entry.states)
        elif entry.kind == "bus":
            diagram.add_bus_signal(canvas, entry.name, entry.states, entry.bits,
                                   entry.input_base, entry.display_base)
        elif entry.kind == "box":
            diagram.add_box_signal(canvas, entry.name, entry.start, entry.end, entry.label)
        elif entry.kind == "timing":
            diagram.add_timing_mark(canvas, entry.start, entry.end, entry.label)
        elif entry.kind == "section":
            diagram.add_section_header(canvas, entry.label)
        elif entry.kind == "spacer":
            diagram.add_spacer(canvas)

    def build(self, config: Optional[DiagramConfig] = None) -> RenderedGrid:
        canvas = diagram.begin_canvas(self.time_units, config)
        for entry in self.entries:
            try:
                self.apply(canvas, entry)
            except TimingGridError as e:
                raise ScriptError(str(e), entry.line_no) from e
        return diagram.finalize(canvas)


def _int(args: List[str], index: int, line_no: int, what: str) -> int:
    if index >= len(args):
        raise ScriptError(f"Missing {what}", line_no)
    try:
        return int(args[index])
    except ValueError as e:
        raise ScriptError(f"Invalid {what} {args[index]!r}", line_no) from e


def _read_json(path: Path):
    with open(path, 'r', encoding='utf-8') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ScriptError(f"Invalid JSON: {e.msg}", e.lineno) from e


def load_grid(path, config: Optional[DiagramConfig] = None) -> Tuple[str, RenderedGrid]:
    """Loads a diagram description or a saved grid export.

    JSON files holding 'cells' are grid exports and are taken as they are;
    anything else is built as a DiagramScript. Returns (title, grid).
    """
    path = Path(path)
    if path.suffix.lower() == ".json":
        data = _read_json(path)
        if isinstance(data, dict) and 'cells' in data:
            try:
                grid = RenderedGrid.from_dict(data)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise ScriptError(f"Invalid grid export: {e}") from e
            logger.debug("Loaded grid export %s", path)
            return path.stem, grid
        script = DiagramScript.from_dict(data)
    else:
        script = DiagramScript.load(path)
    return script.name, script.build(config)
