"""
Geometric transformation of parsed G-code commands.

Transforms are applied to a selection of commands in a fixed order:
rotate about the world origin, scale per axis, translate. Every command
whose coordinates change gets its raw line regenerated in the same step.
"""
import dataclasses
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
from core.parser import BoundingBox, Command, bounding_box
from utils.geometry import format_fixed, format_plain, rotate_xy, round_mm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformParams:
    """Rotation (degrees about Z), per-axis scale and translation."""
    translate_x: float = 0.0
    translate_y: float = 0.0
    translate_z: float = 0.0
    rotation_degrees: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0

    @property
    def is_identity(self) -> bool:
        return self == TransformParams()


def regenerate_line(command: Command) -> str:
    """Emit a command as G-code in the fixed order M X Y Z F E S ; comment."""
    parts = [command.mnemonic]

    if command.x is not None:
        parts.append(f"X{format_fixed(command.x)}")
    if command.y is not None:
        parts.append(f"Y{format_fixed(command.y)}")
    if command.z is not None:
        parts.append(f"Z{format_fixed(command.z)}")
    if command.f is not None:
        parts.append(f"F{format_plain(command.f)}")
    if command.e is not None:
        parts.append(f"E{format_fixed(command.e)}")
    if command.s is not None:
        parts.append(f"S{format_plain(command.s)}")

    line = " ".join(parts)
    if command.comment:
        line += f" ; {command.comment}"
    return line


def transform_command(command: Command, params: TransformParams) -> Command:
    """Transform a single command. Commands without both X and Y are returned as-is."""
    if not command.has_xy or params.is_identity:
        return command

    x, y = rotate_xy(command.x, command.y, params.rotation_degrees)

    x *= params.scale_x
    y *= params.scale_y

    x += params.translate_x
    y += params.translate_y

    z = command.z
    if z is not None and params.translate_z != 0:
        z += params.translate_z

    moved = dataclasses.replace(
        command,
        x=round_mm(x),
        y=round_mm(y),
        z=round_mm(z) if z is not None else None,
    )
    return dataclasses.replace(moved, raw=regenerate_line(moved))


def apply_to_selection(commands: Sequence[Command], indices: Iterable[int],
                       params: TransformParams) -> List[Command]:
    """Return a new list with the commands at the given indices transformed.

    Unselected commands are carried over unchanged; indices outside the
    list are ignored.
    """
    result = list(commands)
    changed = 0
    for index in sorted(set(indices)):
        if 0 <= index < len(result):
            transformed = transform_command(result[index], params)
            if transformed is not result[index]:
                changed += 1
            result[index] = transformed

    logger.debug("Transformed %d of %d commands", changed, len(result))
    return result


def apply_to_all(commands: Sequence[Command], params: TransformParams) -> List[Command]:
    """Transform every command in the list."""
    return apply_to_selection(commands, range(len(commands)), params)


def reconstruct_text(commands: Iterable[Command]) -> str:
    """Serialize commands back to G-code text, one line per command."""
    lines = []
    for cmd in commands:
        if cmd.is_comment_only and cmd.comment:
            lines.append(f"; {cmd.comment}")
        else:
            lines.append(cmd.raw)
    return "\n".join(lines)


def compute_selection_bounds(commands: Sequence[Command],
                             indices: Iterable[int]) -> Optional[BoundingBox]:
    """Bounding box of the selected commands; None for an empty selection."""
    indices = set(indices)
    if not indices:
        return None

    selected = [commands[i] for i in sorted(indices) if 0 <= i < len(commands)]
    box = bounding_box(selected)
    if box is None:
        return BoundingBox(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    return box
