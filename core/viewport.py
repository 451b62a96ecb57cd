"""
World-to-surface mapping for the 2D toolpath view.

The mapping is a uniform scale plus an offset, with the Y axis flipped
because world Y grows up while surface Y grows down. A ViewportState is
derived data: it is rebuilt with recompute() whenever the visible commands
or the surface size change, never patched.
"""
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
from core.parser import Command
from utils.geometry import nice_step

DEFAULT_PADDING = 40.0
DEFAULT_FIT_MARGIN = 0.9
DEFAULT_GRID_LINES = 10
DEFAULT_GRID_SPACING = 10.0


@dataclass(frozen=True)
class Bounds2D:
    """World-space extent of the visible commands."""
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def is_degenerate(self) -> bool:
        return self.width == 0 or self.height == 0


@dataclass(frozen=True)
class ViewportState:
    """Affine map between world space and a surface of the given size."""
    bounds: Optional[Bounds2D]
    surface_width: float
    surface_height: float
    padding: float = DEFAULT_PADDING
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0


def visible_bounds(commands: Iterable[Command]) -> Optional[Bounds2D]:
    """X/Y extent of the commands; None when no command carries X or Y."""
    xs = []
    ys = []
    for cmd in commands:
        if cmd.x is not None:
            xs.append(cmd.x)
        if cmd.y is not None:
            ys.append(cmd.y)

    if not xs and not ys:
        return None

    return Bounds2D(
        min(xs) if xs else 0.0,
        max(xs) if xs else 0.0,
        min(ys) if ys else 0.0,
        max(ys) if ys else 0.0,
    )


def recompute(bounds: Optional[Bounds2D], surface_width: float, surface_height: float,
              padding: float = DEFAULT_PADDING,
              fit_margin: float = DEFAULT_FIT_MARGIN) -> ViewportState:
    """Fit the bounds into the padded surface, centered."""
    available_width = surface_width - 2 * padding
    available_height = surface_height - 2 * padding

    if (bounds is None or bounds.is_degenerate
            or available_width <= 0 or available_height <= 0):
        # Nothing to fit or no room inside the padding: unit scale, centered
        return ViewportState(bounds, surface_width, surface_height, padding,
                             scale=1.0,
                             offset_x=surface_width / 2,
                             offset_y=surface_height / 2)

    scale = min(available_width / bounds.width, available_height / bounds.height) * fit_margin

    offset_x = padding + (available_width - bounds.width * scale) / 2 - bounds.min_x * scale
    offset_y = padding + (available_height - bounds.height * scale) / 2 - bounds.min_y * scale

    return ViewportState(bounds, surface_width, surface_height, padding,
                         scale=scale, offset_x=offset_x, offset_y=offset_y)


def world_to_surface(state: ViewportState, x: float, y: float) -> Tuple[float, float]:
    return (x * state.scale + state.offset_x,
            state.surface_height - (y * state.scale + state.offset_y))


def surface_to_world(state: ViewportState, sx: float, sy: float) -> Tuple[float, float]:
    return ((sx - state.offset_x) / state.scale,
            (state.surface_height - sy - state.offset_y) / state.scale)


def grid_spacing(data_width: float, target_lines: int = DEFAULT_GRID_LINES) -> float:
    """Spacing that puts roughly target_lines grid lines across the data."""
    if not data_width > 0:
        return DEFAULT_GRID_SPACING
    return nice_step(data_width / target_lines)


def grid_lines(state: ViewportState,
               target_lines: int = DEFAULT_GRID_LINES) -> Tuple[List[float], List[float]]:
    """World X positions of vertical lines and Y positions of horizontal lines."""
    bounds = state.bounds
    if bounds is None:
        return [], []

    x_step = grid_spacing(bounds.width, target_lines)
    # Horizontal lines are never denser than the height calls for
    y_step = max(x_step, grid_spacing(bounds.height, target_lines))

    def positions(low: float, high: float, step: float) -> List[float]:
        start = math.floor(low / step)
        end = math.ceil(high / step)
        return [i * step for i in range(start, end + 1)]

    return (positions(bounds.min_x, bounds.max_x, x_step),
            positions(bounds.min_y, bounds.max_y, y_step))
