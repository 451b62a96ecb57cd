"""
Toolpath geometry for drawing.
Turns a command list into line segments with colors and selection flags,
keeping the mapping from segments back to command indices and source lines.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Any, Callable, Dict, List, Optional, Sequence, Tuple
from core.palette import ZHeightPalette
from core.parser import Command


class MoveType(Enum):
    RAPID = "rapid"
    FEED = "feed"
    ARC_CW = "arc_cw"
    ARC_CCW = "arc_ccw"


MOVE_TYPES = {
    'G0': MoveType.RAPID,
    'G00': MoveType.RAPID,
    'G1': MoveType.FEED,
    'G01': MoveType.FEED,
    'G2': MoveType.ARC_CW,
    'G02': MoveType.ARC_CW,
    'G3': MoveType.ARC_CCW,
    'G03': MoveType.ARC_CCW,
}


@dataclass(frozen=True)
class ToolpathSegment:
    """A single drawable move, in world coordinates."""
    index: int                       # index of the command in the list
    line_number: int
    move_type: MoveType
    start: Tuple[float, float]
    end: Tuple[float, float]
    z: float                         # height the move starts at
    color: str
    selected: bool = False

    @property
    def length(self) -> float:
        return math.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1])

    @property
    def is_arc(self) -> bool:
        return self.move_type in (MoveType.ARC_CW, MoveType.ARC_CCW)


def move_type_for(mnemonic: str) -> Optional[MoveType]:
    return MOVE_TYPES.get(mnemonic)


def build_toolpath(commands: Sequence[Command], palette: ZHeightPalette,
                   selected: AbstractSet[int] = frozenset(),
                   visible: Optional[Callable[[Command], bool]] = None) -> List[ToolpathSegment]:
    """Build drawable segments, tracking the tool position from (0, 0, 0).

    Linear moves need an X or Y word to produce a segment. Arcs are drawn as
    straight chords between their endpoints; the I/J center offsets are not
    interpreted. Hidden commands still move the tracked position but are not
    drawn.
    """
    segments = []
    x = y = z = 0.0

    for index, cmd in enumerate(commands):
        prev_x, prev_y, prev_z = x, y, z
        if cmd.x is not None:
            x = cmd.x
        if cmd.y is not None:
            y = cmd.y
        if cmd.z is not None:
            z = cmd.z

        move_type = move_type_for(cmd.mnemonic)
        if move_type is None:
            continue
        if move_type in (MoveType.RAPID, MoveType.FEED) and cmd.x is None and cmd.y is None:
            continue
        if visible is not None and not visible(cmd):
            continue

        segments.append(ToolpathSegment(
            index=index,
            line_number=cmd.line_number,
            move_type=move_type,
            start=(prev_x, prev_y),
            end=(x, y),
            z=prev_z,
            color=palette.color_for(prev_z),
            selected=index in selected,
        ))

    return segments


def toolpath_statistics(segments: Sequence[ToolpathSegment]) -> Dict[str, Any]:
    """Counts and lengths per move type."""
    rapid_length = sum(s.length for s in segments if s.move_type == MoveType.RAPID)
    feed_length = sum(s.length for s in segments if s.move_type != MoveType.RAPID)
    return {
        'total_segments': len(segments),
        'rapid_segments': sum(1 for s in segments if s.move_type == MoveType.RAPID),
        'feed_segments': sum(1 for s in segments if s.move_type == MoveType.FEED),
        'arc_segments': sum(1 for s in segments if s.is_arc),
        'total_length': rapid_length + feed_length,
        'rapid_length': rapid_length,
        'feed_length': feed_length,
        'lines_with_geometry': len({s.line_number for s in segments}),
    }
