"""
G-code parser for turning raw text into an ordered list of Command records.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union
from core.lexer import GCodeLexer, LexedLine, TokenType
from utils.errors import ErrorCollector, ErrorType
from utils.units import Units

logger = logging.getLogger(__name__)

# Words converted from inches when parsing imperial files. F and S never are.
LINEAR_WORDS = {TokenType.X_WORD, TokenType.Y_WORD, TokenType.Z_WORD, TokenType.E_WORD}


@dataclass(frozen=True)
class Command:
    """One parsed instruction line. Linear values are in millimeters."""
    line_number: int
    mnemonic: str                   # "" for a comment-only line
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None
    f: Optional[float] = None       # Feed rate
    e: Optional[float] = None       # Auxiliary axis (extrusion)
    s: Optional[float] = None       # Spindle speed
    comment: Optional[str] = None
    raw: str = ""

    @property
    def is_comment_only(self) -> bool:
        return self.mnemonic == ""

    @property
    def has_xy(self) -> bool:
        return self.x is not None and self.y is not None


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in world space. Axes without data are 0."""
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    min_z: float
    max_z: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


def _axis_range(values: List[float]):
    if not values:
        return 0.0, 0.0
    return min(values), max(values)


def bounding_box(commands: Iterable[Command]) -> Optional[BoundingBox]:
    """Min/max per axis over the given commands, or None if none has a coordinate."""
    xs, ys, zs = [], [], []
    for cmd in commands:
        if cmd.x is not None:
            xs.append(cmd.x)
        if cmd.y is not None:
            ys.append(cmd.y)
        if cmd.z is not None:
            zs.append(cmd.z)

    if not (xs or ys or zs):
        return None

    min_x, max_x = _axis_range(xs)
    min_y, max_y = _axis_range(ys)
    min_z, max_z = _axis_range(zs)
    return BoundingBox(min_x, max_x, min_y, max_y, min_z, max_z)


class GCodeParser:
    """Parses G-code text into Command records.

    Parsing is permissive: lines that do not start with a recognized
    instruction and words with malformed values are skipped. Each skip is
    recorded in the error collector.
    """

    def __init__(self, error_collector: Optional[ErrorCollector] = None):
        self.error_collector = error_collector if error_collector is not None else ErrorCollector()
        self.lexer = GCodeLexer(self.error_collector)

    def parse(self, gcode_text: str, units: Union[Units, str] = Units.METRIC) -> List[Command]:
        """Parse G-code text. Blank and unrecognized lines produce no command."""
        if not isinstance(gcode_text, str):
            raise TypeError(f"G-code text must be a string, not {type(gcode_text).__name__}")
        units = Units.coerce(units)

        commands = []
        skipped = 0
        for lexed in self.lexer.tokenize(gcode_text):
            command = self._build_command(lexed, units)
            if command is None:
                skipped += 1
                continue
            commands.append(command)

        if skipped:
            logger.debug("Skipped %d unrecognized line(s)", skipped)
        return commands

    def _build_command(self, lexed: LexedLine, units: Units) -> Optional[Command]:
        if lexed.is_comment_only:
            return Command(line_number=lexed.line_number, mnemonic="",
                           comment=lexed.comment, raw=lexed.text)

        if lexed.instruction is None:
            return None

        values = {}
        for token in lexed.words:
            # The word pattern only admits valid decimal numbers
            value = float(token.value)
            if token.type in LINEAR_WORDS:
                value *= units.linear_factor
            # Last occurrence wins
            values[token.type] = value

        return Command(
            line_number=lexed.line_number,
            mnemonic=lexed.instruction.value,
            x=values.get(TokenType.X_WORD),
            y=values.get(TokenType.Y_WORD),
            z=values.get(TokenType.Z_WORD),
            f=values.get(TokenType.F_WORD),
            e=values.get(TokenType.E_WORD),
            s=values.get(TokenType.S_WORD),
            comment=lexed.comment,
            raw=lexed.text,
        )

    @staticmethod
    def z_heights(commands: Iterable[Command]) -> List[float]:
        """Distinct Z values present, sorted ascending."""
        return sorted({cmd.z for cmd in commands if cmd.z is not None})

    @staticmethod
    def bounds(commands: Iterable[Command]) -> Optional[BoundingBox]:
        """Bounding box over all coordinate-bearing commands."""
        return bounding_box(commands)


def parse(gcode_text: str, units: Union[Units, str] = Units.METRIC,
          error_collector: Optional[ErrorCollector] = None) -> List[Command]:
    """Parse G-code text with a one-off parser."""
    return GCodeParser(error_collector).parse(gcode_text, units)
