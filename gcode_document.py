"""
Main G-code document interface.
Holds the current command list and runs the edit pipeline: parse, select,
transform, export. This is the entry point used by the desktop shell.
"""
import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union
from config.editor_config import ConfigManager, EditorConfig
from core.geometry import TransformParams, apply_to_all, apply_to_selection, compute_selection_bounds, reconstruct_text
from core.palette import ZHeightPalette
from core.parser import BoundingBox, Command, GCodeParser
from core.selection import SelectionRegion, select_in_region, select_lines, surface_region
from core.toolpath import ToolpathSegment, build_toolpath, toolpath_statistics
from core.viewport import ViewportState, recompute, visible_bounds
from utils.errors import ErrorCollector, ErrorType, GCodeError
from utils.units import Units

logger = logging.getLogger(__name__)


class GCodeDocument:
    """
    An editing session over one G-code text.

    The command list is replaced wholesale by every load, reparse and
    transform; it is never patched in place. Selections are indices into
    the current list and are cleared whenever the list is rebuilt from text.
    """

    def __init__(self, config: Optional[EditorConfig] = None):
        self.config = config or ConfigManager.default()
        self.error_collector = ErrorCollector()
        self.parser = GCodeParser(self.error_collector)

        self.units = self.config.units_enum
        self.commands: List[Command] = []
        self.selection: FrozenSet[int] = frozenset()
        self.visible_z_heights: set = set()
        self.palette = self._new_palette()
        self.has_unsaved_changes = False
        self._source_text = ""

    # Loading and parsing

    def load(self, gcode_text: str, units: Union[Units, str, None] = None) -> List[Command]:
        """
        Parse G-code text and make it the current document.

        Args:
            gcode_text: Raw G-code text
            units: Units the text is written in; defaults to the current units

        Returns:
            The new command list
        """
        if units is not None:
            self.units = Units.coerce(units)

        self.error_collector.clear()
        self._source_text = gcode_text
        self.commands = self.parser.parse(gcode_text, self.units)
        self.selection = frozenset()

        heights = self.z_heights()
        self.visible_z_heights = set(heights)
        self.palette = self._new_palette()
        self.palette.register_heights(heights)
        self.has_unsaved_changes = False

        logger.info("Loaded %d commands (%s, %d diagnostics)",
                    len(self.commands), self.units.value, len(self.error_collector))
        return self.commands

    def reparse(self, units: Union[Units, str]) -> List[Command]:
        """Re-interpret the last loaded or saved text with other units.

        Unsaved transforms are discarded: exported text is already in
        millimeters and must not be converted a second time.
        """
        return self.load(self._source_text, units)

    def export_text(self) -> str:
        """Serialize the current commands for saving."""
        return reconstruct_text(self.commands)

    def mark_saved(self):
        self._source_text = self.export_text()
        self.has_unsaved_changes = False

    # Derived queries

    def z_heights(self) -> List[float]:
        return GCodeParser.z_heights(self.commands)

    def bounds(self) -> Optional[BoundingBox]:
        return GCodeParser.bounds(self.commands)

    def is_visible(self, command: Command) -> bool:
        """Commands without Z are always visible; others follow their layer."""
        return command.z is None or command.z in self.visible_z_heights

    def set_z_visible(self, z: float, visible: bool):
        if visible:
            self.visible_z_heights.add(z)
        else:
            self.visible_z_heights.discard(z)

    def visible_indices(self) -> List[int]:
        return [i for i, cmd in enumerate(self.commands) if self.is_visible(cmd)]

    def visible_commands(self) -> List[Command]:
        return [cmd for cmd in self.commands if self.is_visible(cmd)]

    # Viewport and rendering

    def viewport(self, surface_width: float, surface_height: float) -> ViewportState:
        """Viewport mapping that fits the visible commands into the surface."""
        return recompute(visible_bounds(self.visible_commands()),
                         surface_width, surface_height,
                         padding=self.config.padding,
                         fit_margin=self.config.fit_margin)

    def toolpath(self) -> List[ToolpathSegment]:
        return build_toolpath(self.commands, self.palette, self.selection, self.is_visible)

    # Selection

    def select(self, indices: Iterable[int]) -> FrozenSet[int]:
        """Replace the selection with explicit indices (out-of-range ones dropped)."""
        self.selection = frozenset(i for i in indices if 0 <= i < len(self.commands))
        return self.selection

    def select_region(self, region: SelectionRegion) -> FrozenSet[int]:
        """Select visible commands inside a world-space region."""
        visible = set(self.visible_indices())
        return self.select(select_in_region(self.commands, region) & visible)

    def select_surface_rect(self, state: ViewportState, start: Tuple[float, float],
                            end: Tuple[float, float]) -> FrozenSet[int]:
        """Select visible commands inside a rectangle dragged on the surface."""
        return self.select_region(surface_region(state, start, end))

    def clear_selection(self):
        self.selection = frozenset()

    def selection_bounds(self) -> Optional[BoundingBox]:
        return compute_selection_bounds(self.commands, self.selection)

    # Transformation

    def apply_transform(self, params: TransformParams) -> int:
        """
        Transform the selected commands.

        Returns:
            Number of selected commands; 0 means nothing was done
        """
        if not self.selection:
            logger.info("No selection, transform skipped")
            return 0

        self.commands = apply_to_selection(self.commands, self.selection, params)
        self.has_unsaved_changes = True
        logger.info("Applied %s to %d commands", params, len(self.selection))
        return len(self.selection)

    def apply_transform_all(self, params: TransformParams) -> int:
        """Transform every command regardless of selection or layer visibility."""
        if not self.commands:
            return 0
        self.commands = apply_to_all(self.commands, params)
        self.has_unsaved_changes = True
        logger.info("Applied %s to all %d commands", params, len(self.commands))
        return len(self.commands)

    # Search and diagnostics

    def search(self, term: str) -> List[int]:
        """Indices of commands whose raw text or comment contains term (case-insensitive)."""
        if not term:
            return []
        needle = term.lower()
        return [i for i, cmd in enumerate(self.commands)
                if needle in cmd.raw.lower() or (cmd.comment and needle in cmd.comment.lower())]

    def get_all_errors(self) -> List[GCodeError]:
        return self.error_collector.get_all_errors()

    def diagnostic_indices(self) -> List[int]:
        """Indices of kept commands whose line had a word skipped."""
        lines = self.error_collector.get_lines_with_errors(ErrorType.MALFORMED_WORD)
        return sorted(select_lines(self.commands, lines))

    def get_statistics(self) -> Dict[str, Any]:
        """Line, command and toolpath statistics for display."""
        text = self._source_text
        return {
            'document': {
                'total_lines': len(text.split('\n')) if text else 0,
                'size': len(text.encode('utf-8')),
                'commands': len(self.commands),
                'comments': sum(1 for cmd in self.commands if cmd.is_comment_only),
                'diagnostics': len(self.error_collector),
                'units': self.units.value,
                'bounds': self.bounds(),
            },
            'selection': {
                'count': len(self.selection),
                'bounds': self.selection_bounds(),
            },
            'geometry': toolpath_statistics(self.toolpath()),
        }

    def _new_palette(self) -> ZHeightPalette:
        return ZHeightPalette(self.config.colors, self.config.default_heights)
