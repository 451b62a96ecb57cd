"""
Color table keyed by Z-height.
"""
from typing import Iterable, List, Optional, Sequence, Tuple

DEFAULT_COLORS = (
    '#3B82F6',  # blue
    '#10B981',  # green
    '#8B5CF6',  # purple
    '#F59E0B',  # amber
    '#EF4444',  # red
    '#06B6D4',  # cyan
    '#84CC16',  # lime
    '#EC4899',  # pink
)
DEFAULT_HEIGHTS = (0.2, 0.4, 0.6)
FALLBACK_COLOR = '#6B7280'


class ZHeightPalette:
    """Sorted (z, color) association list with nearest-height lookup."""

    def __init__(self, colors: Sequence[str] = DEFAULT_COLORS,
                 heights: Iterable[float] = DEFAULT_HEIGHTS,
                 fallback: str = FALLBACK_COLOR):
        if not colors:
            raise ValueError("Palette needs at least one color")
        self.colors = list(colors)
        self.fallback = fallback
        self._entries: List[Tuple[float, str]] = []
        self.register_heights(heights)

    def set_color(self, z: float, color: str):
        """Assign a color to a height, replacing any previous assignment."""
        entries = [(height, c) for height, c in self._entries if height != z]
        entries.append((z, color))
        entries.sort(key=lambda entry: entry[0])
        self._entries = entries

    def register_heights(self, heights: Iterable[float]):
        """Assign colors to heights in order, cycling through the color list."""
        for index, z in enumerate(heights):
            self.set_color(z, self.colors[index % len(self.colors)])

    def color_for(self, z: Optional[float]) -> str:
        """Color of the registered height closest to z.

        Ties go to the lower height. A z of None is looked up as 0.
        """
        if not self._entries:
            return self.fallback

        z = 0.0 if z is None else z
        best_color = self.fallback
        best_diff = float('inf')
        for height, color in self._entries:
            diff = abs(z - height)
            if diff < best_diff:
                best_diff = diff
                best_color = color
        return best_color
