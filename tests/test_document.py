"""Tests for the editing session facade."""

import pytest

from config.editor_config import ConfigManager
from core.geometry import TransformParams
from core.parser import BoundingBox
from core.selection import SelectionRegion
from core.viewport import world_to_surface
from gcode_document import GCodeDocument
from utils.units import Units

SAMPLE = """; part
G21
G0 X0 Y0 Z0.2
G1 X10 Y0 F1200
G1 X10 Y10
G0 Z0.4
G1 X0 Y10 Z0.4
bogus line
M30"""


@pytest.fixture()
def document() -> GCodeDocument:
    doc = GCodeDocument()
    doc.load(SAMPLE)
    return doc


class TestLoading:
    def test_load_parses_commands(self, document: GCodeDocument) -> None:
        assert len(document.commands) == 8
        assert document.units is Units.METRIC
        assert not document.has_unsaved_changes

    def test_diagnostics_for_skipped_lines(self, document: GCodeDocument) -> None:
        errors = document.get_all_errors()
        assert [e.line_number for e in errors] == [8]

    def test_reload_clears_state(self, document: GCodeDocument) -> None:
        document.select([2, 3])
        document.load("G1 X1 Y1")
        assert document.selection == frozenset()
        assert document.get_all_errors() == []

    def test_z_heights_visible_after_load(self, document: GCodeDocument) -> None:
        assert document.z_heights() == [0.2, 0.4]
        assert document.visible_z_heights == {0.2, 0.4}

    def test_config_units_used_by_default(self) -> None:
        doc = GCodeDocument(ConfigManager.imperial())
        [cmd] = doc.load("G1 X1")
        assert cmd.x == pytest.approx(25.4)

    def test_reparse_switches_units(self, document: GCodeDocument) -> None:
        commands = document.reparse("imperial")
        assert document.units is Units.IMPERIAL
        assert commands[3].x == pytest.approx(254.0)

    def test_reparse_discards_unsaved_transforms(self, document: GCodeDocument) -> None:
        document.select([3])
        document.apply_transform(TransformParams(translate_x=1))
        document.reparse(Units.METRIC)
        assert document.commands[3].x == 10.0
        assert not document.has_unsaved_changes

    def test_reparse_after_save_keeps_saved_text(self, document: GCodeDocument) -> None:
        document.select([3])
        document.apply_transform(TransformParams(translate_x=1))
        document.mark_saved()
        document.reparse(Units.METRIC)
        assert document.commands[3].x == 11.0


class TestSelectionAndTransform:
    def test_empty_selection_transform_is_noop(self, document: GCodeDocument) -> None:
        before = list(document.commands)
        assert document.apply_transform(TransformParams(translate_x=5)) == 0
        assert document.commands == before
        assert not document.has_unsaved_changes

    def test_transform_selected(self, document: GCodeDocument) -> None:
        document.select_region(SelectionRegion(9, -1, 11, 11))
        assert document.selection == {3, 4}
        assert document.apply_transform(TransformParams(translate_y=2)) == 2
        assert document.commands[3].raw == "G1 X10.000 Y2.000 F1200"
        assert document.commands[4].raw == "G1 X10.000 Y12.000"
        assert document.has_unsaved_changes

    def test_export_reflects_transform(self, document: GCodeDocument) -> None:
        document.select([2])
        document.apply_transform(TransformParams(translate_x=1, translate_y=1))
        lines = document.export_text().split("\n")
        assert lines[0] == "; part"
        assert lines[2] == "G0 X1.000 Y1.000 Z0.200"
        assert "bogus line" not in lines

    def test_hidden_layers_are_not_selectable(self, document: GCodeDocument) -> None:
        document.set_z_visible(0.4, False)
        selected = document.select_region(SelectionRegion(-1, -1, 11, 11))
        assert 6 not in selected
        assert selected == {2, 3, 4}

    def test_select_drops_out_of_range(self, document: GCodeDocument) -> None:
        assert document.select([-1, 0, 99]) == {0}

    def test_selection_bounds(self, document: GCodeDocument) -> None:
        assert document.selection_bounds() is None
        document.select([3, 4])
        box = document.selection_bounds()
        assert (box.min_x, box.max_x, box.min_y, box.max_y) == (10, 10, 0, 10)

    def test_surface_drag_skips_hidden_layers(self, document: GCodeDocument) -> None:
        document.set_z_visible(0.4, False)
        state = document.viewport(400, 400)
        start = world_to_surface(state, -1, -1)
        end = world_to_surface(state, 11, 11)
        assert document.select_surface_rect(state, start, end) == {2, 3, 4}
        assert document.selection == {2, 3, 4}

    def test_transform_all_ignores_selection_and_layers(self, document: GCodeDocument) -> None:
        document.set_z_visible(0.4, False)
        document.select([3])
        assert document.apply_transform_all(TransformParams(translate_x=1)) == 8
        assert [document.commands[i].x for i in (2, 3, 4, 6)] == [1.0, 11.0, 11.0, 1.0]
        assert document.commands[0].raw == "; part"
        assert document.has_unsaved_changes

    def test_transform_all_on_empty_document(self) -> None:
        doc = GCodeDocument()
        assert doc.apply_transform_all(TransformParams(translate_x=1)) == 0
        assert not doc.has_unsaved_changes

    def test_clear_selection(self, document: GCodeDocument) -> None:
        document.select([1])
        document.clear_selection()
        assert document.selection == frozenset()


class TestQueries:
    def test_visibility(self, document: GCodeDocument) -> None:
        document.set_z_visible(0.2, False)
        assert 2 not in document.visible_indices()
        assert 3 in document.visible_indices()
        document.set_z_visible(0.2, True)
        assert 2 in document.visible_indices()

    def test_viewport_fits_visible_commands(self, document: GCodeDocument) -> None:
        state = document.viewport(800, 600)
        assert state.bounds.width == 10
        assert state.scale > 0

    def test_toolpath_marks_selection(self, document: GCodeDocument) -> None:
        document.select([3])
        selected = [s.index for s in document.toolpath() if s.selected]
        assert selected == [3]

    def test_search(self, document: GCodeDocument) -> None:
        assert document.search("x10") == [3, 4]
        assert document.search("PART") == [0]
        assert document.search("") == []

    def test_statistics(self, document: GCodeDocument) -> None:
        stats = document.get_statistics()
        assert stats["document"]["total_lines"] == 9
        assert stats["document"]["commands"] == 8
        assert stats["document"]["comments"] == 1
        assert stats["document"]["diagnostics"] == 1
        assert stats["selection"]["count"] == 0
        assert stats["geometry"]["total_segments"] == 4
        assert stats["document"]["bounds"] == BoundingBox(0, 10, 0, 10, 0.2, 0.4)

    def test_diagnostic_indices_point_at_kept_commands(self) -> None:
        doc = GCodeDocument()
        doc.load("G1 X1\nG28 X Y10\nbogus\nM117 Setting up")
        assert [e.line_number for e in doc.get_all_errors()] == [2, 3]
        # The dropped line 3 has no command to point at
        assert doc.diagnostic_indices() == [1]
