"""
Spatial and explicit picking of commands. Selections are sets of indices
into the current command list.
"""
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Sequence, Tuple
from core.parser import Command
from core.viewport import ViewportState, surface_to_world


@dataclass(frozen=True)
class SelectionRegion:
    """A world-space rectangle given by two opposite corners.

    The corners may come in any order. z_min/z_max optionally restrict the
    selection to a Z band; commands without Z are not filtered by it.
    """
    x1: float
    y1: float
    x2: float
    y2: float
    z_min: Optional[float] = None
    z_max: Optional[float] = None

    def normalized(self) -> Tuple[float, float, float, float]:
        """(min_x, max_x, min_y, max_y)"""
        return (min(self.x1, self.x2), max(self.x1, self.x2),
                min(self.y1, self.y2), max(self.y1, self.y2))

    def contains(self, command: Command) -> bool:
        if not command.has_xy:
            return False

        min_x, max_x, min_y, max_y = self.normalized()
        if not (min_x <= command.x <= max_x and min_y <= command.y <= max_y):
            return False

        if command.z is not None:
            if self.z_min is not None and command.z < self.z_min:
                return False
            if self.z_max is not None and command.z > self.z_max:
                return False
        return True


def select_in_region(commands: Sequence[Command], region: SelectionRegion) -> FrozenSet[int]:
    """Indices of commands whose X/Y endpoint lies inside the region (inclusive)."""
    return frozenset(i for i, cmd in enumerate(commands) if region.contains(cmd))


def surface_region(state: ViewportState, start: Tuple[float, float],
                   end: Tuple[float, float]) -> SelectionRegion:
    """World-space region under a rectangle dragged in surface coordinates."""
    x1, y1 = surface_to_world(state, *start)
    x2, y2 = surface_to_world(state, *end)
    return SelectionRegion(x1, y1, x2, y2)


def select_in_surface_rect(commands: Sequence[Command], state: ViewportState,
                           start: Tuple[float, float],
                           end: Tuple[float, float]) -> FrozenSet[int]:
    """Select with a rectangle dragged in surface coordinates."""
    return select_in_region(commands, surface_region(state, start, end))


def select_lines(commands: Sequence[Command], line_numbers: Iterable[int]) -> FrozenSet[int]:
    """Indices of the commands parsed from the given source lines."""
    wanted = set(line_numbers)
    return frozenset(i for i, cmd in enumerate(commands) if cmd.line_number in wanted)
