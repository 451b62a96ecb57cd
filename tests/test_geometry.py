"""Tests for the transformer: rotate, scale, translate and line regeneration."""

import pytest

from core.geometry import (
    TransformParams,
    apply_to_all,
    apply_to_selection,
    compute_selection_bounds,
    reconstruct_text,
    regenerate_line,
    transform_command,
)
from core.parser import BoundingBox, Command, parse
from utils.geometry import format_plain, nice_step, round_mm


def _cmd(**kwargs) -> Command:
    kwargs.setdefault("line_number", 1)
    kwargs.setdefault("mnemonic", "G1")
    return Command(**kwargs)


# ---------------------------------------------------------------------------
# Single commands
# ---------------------------------------------------------------------------


class TestTransformCommand:
    def test_translate_regenerates_raw(self) -> None:
        [cmd] = parse("G1 X10 Y0 F200")
        moved = transform_command(cmd, TransformParams(translate_x=5))
        assert (moved.x, moved.y) == (15.0, 0.0)
        assert moved.raw == "G1 X15.000 Y0.000 F200"

    def test_rotate_quarter_turn(self) -> None:
        moved = transform_command(_cmd(x=10.0, y=0.0), TransformParams(rotation_degrees=90))
        assert moved.x == 0.0
        assert moved.y == 10.0
        assert moved.raw == "G1 X0.000 Y10.000"

    def test_order_is_rotate_scale_translate(self) -> None:
        params = TransformParams(rotation_degrees=90, scale_x=2, scale_y=3, translate_x=1)
        moved = transform_command(_cmd(x=1.0, y=0.0), params)
        assert (moved.x, moved.y) == (1.0, 3.0)

    def test_translate_z_only_touches_existing_z(self) -> None:
        params = TransformParams(translate_z=0.5)
        assert transform_command(_cmd(x=1.0, y=1.0, z=0.2), params).z == 0.7
        assert transform_command(_cmd(x=1.0, y=1.0), params).z is None

    def test_identity_returns_same_command(self) -> None:
        [cmd] = parse("G1 X10.12345 Y3 ; keep me")
        assert transform_command(cmd, TransformParams()) is cmd

    @pytest.mark.parametrize("cmd", [
        _cmd(x=5.0),
        _cmd(y=5.0),
        _cmd(z=1.0),
        _cmd(mnemonic="", comment="note", raw="; note"),
        _cmd(mnemonic="M3", s=1000.0, raw="M3 S1000"),
    ])
    def test_commands_without_xy_are_untouched(self, cmd: Command) -> None:
        params = TransformParams(translate_x=3, translate_y=4, translate_z=1, rotation_degrees=45)
        assert transform_command(cmd, params) is cmd

    def test_other_fields_preserved(self) -> None:
        [cmd] = parse("G1 X1 Y1 Z0.2 F1500 E0.5 S300 ; perimeter")
        moved = transform_command(cmd, TransformParams(translate_y=1))
        assert moved.line_number == cmd.line_number
        assert moved.mnemonic == "G1"
        assert (moved.f, moved.e, moved.s) == (1500.0, 0.5, 300.0)
        assert moved.comment == "perimeter"
        assert moved.raw == "G1 X1.000 Y2.000 Z0.200 F1500 E0.500 S300 ; perimeter"

    def test_values_rounded_to_three_decimals(self) -> None:
        moved = transform_command(_cmd(x=1.0, y=0.0), TransformParams(rotation_degrees=30))
        assert moved.x == 0.866
        assert moved.y == 0.5

    def test_negative_zero_is_normalized(self) -> None:
        moved = transform_command(_cmd(x=0.0, y=0.0001), TransformParams(scale_y=-1))
        assert moved.raw == "G1 X0.000 Y0.000"

    def test_input_command_not_modified(self) -> None:
        cmd = _cmd(x=1.0, y=2.0, raw="G1 X1 Y2")
        transform_command(cmd, TransformParams(translate_x=10))
        assert cmd.x == 1.0
        assert cmd.raw == "G1 X1 Y2"


class TestInverseTransforms:
    @pytest.mark.parametrize("forward, inverse", [
        (TransformParams(translate_x=7.5, translate_y=-2),
         TransformParams(translate_x=-7.5, translate_y=2)),
        (TransformParams(rotation_degrees=33), TransformParams(rotation_degrees=-33)),
        (TransformParams(scale_x=2, scale_y=4), TransformParams(scale_x=0.5, scale_y=0.25)),
    ])
    def test_inverse_restores_coordinates(self, forward: TransformParams,
                                          inverse: TransformParams) -> None:
        original = _cmd(x=12.5, y=-4.25)
        restored = transform_command(transform_command(original, forward), inverse)
        assert restored.x == pytest.approx(original.x, abs=2e-3)
        assert restored.y == pytest.approx(original.y, abs=2e-3)


# ---------------------------------------------------------------------------
# Lists and selections
# ---------------------------------------------------------------------------


class TestApplyToSelection:
    def test_only_selected_indices_change(self) -> None:
        commands = parse("G1 X0 Y0\nG1 X1 Y1\nG1 X2 Y2")
        result = apply_to_selection(commands, {1}, TransformParams(translate_x=10))
        assert result[0] is commands[0]
        assert result[2] is commands[2]
        assert (result[1].x, result[1].y) == (11.0, 1.0)

    def test_original_list_untouched(self) -> None:
        commands = parse("G1 X0 Y0")
        result = apply_to_selection(commands, [0], TransformParams(translate_x=1))
        assert result is not commands
        assert commands[0].x == 0.0

    def test_out_of_range_indices_ignored(self) -> None:
        commands = parse("G1 X0 Y0")
        result = apply_to_selection(commands, [-1, 5], TransformParams(translate_x=1))
        assert result == commands

    def test_empty_selection_is_noop(self) -> None:
        commands = parse("G1 X0 Y0\nG1 X1 Y1")
        assert apply_to_selection(commands, [], TransformParams(translate_x=1)) == commands

    def test_apply_to_all(self) -> None:
        commands = parse("G1 X0 Y0\n; c\nG1 X1 Y1")
        result = apply_to_all(commands, TransformParams(translate_y=1))
        assert [c.y for c in result] == [1.0, None, 2.0]


class TestReconstructText:
    def test_unchanged_commands_round_trip(self) -> None:
        text = "; header\nG21\nG1 X10 Y5 F1200 ; cut\nM30"
        assert reconstruct_text(parse(text)) == text

    def test_reparse_of_transformed_text_matches(self) -> None:
        text = "; start\nG0 X1.25 Y-3 Z0.2 ; travel\nG1 X10 Y5 F1200 E0.4\nM5"
        commands = apply_to_all(parse(text), TransformParams(rotation_degrees=17, translate_x=2))
        reparsed = parse(reconstruct_text(commands))
        assert len(reparsed) == len(commands)
        for before, after in zip(commands, reparsed):
            assert after.mnemonic == before.mnemonic
            assert after.comment == before.comment
            for axis in ("x", "y", "z", "f", "e", "s"):
                expected = getattr(before, axis)
                if expected is None:
                    assert getattr(after, axis) is None
                else:
                    assert getattr(after, axis) == pytest.approx(expected, abs=1e-3)

    def test_blank_and_unrecognized_lines_are_dropped(self) -> None:
        text = "G1 X1\n\nfoo\nG1 X2"
        assert reconstruct_text(parse(text)) == "G1 X1\nG1 X2"

    def test_comment_lines_are_normalized(self) -> None:
        assert reconstruct_text(parse(";tight")) == "; tight"

    def test_transformed_lines_use_regenerated_raw(self) -> None:
        commands = apply_to_all(parse("G0 X1 Y1\nM5"), TransformParams(translate_x=1))
        assert reconstruct_text(commands) == "G0 X2.000 Y1.000\nM5"


class TestSelectionBounds:
    def test_empty_selection(self) -> None:
        assert compute_selection_bounds(parse("G1 X1 Y1"), []) is None

    def test_selection_without_coordinates(self) -> None:
        commands = parse("; c\nM3 S100")
        assert compute_selection_bounds(commands, [0, 1]) == BoundingBox(0, 0, 0, 0, 0, 0)

    def test_bounds_of_selected_only(self) -> None:
        commands = parse("G1 X-1 Y-1 Z0.2\nG1 X4 Y2 Z0.4\nG1 X100 Y100")
        assert compute_selection_bounds(commands, {0, 1}) == BoundingBox(-1, 4, -1, 2, 0.2, 0.4)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


class TestFormatting:
    def test_regenerate_field_order(self) -> None:
        cmd = _cmd(mnemonic="G1", s=5.0, e=1.0, f=100.0, z=2.0, y=1.0, x=0.5)
        assert regenerate_line(cmd) == "G1 X0.500 Y1.000 Z2.000 F100 E1.000 S5"

    def test_regenerate_without_comment(self) -> None:
        assert regenerate_line(_cmd(x=1.0, y=1.0, comment="")) == "G1 X1.000 Y1.000"

    @pytest.mark.parametrize("value, expected", [
        (200.0, "200"),
        (1.5, "1.5"),
        (-3.0, "-3"),
        (0.00001, "0.00001"),
        (1.5e-07, "0.00000015"),
        (-2.5e-06, "-0.0000025"),
    ])
    def test_format_plain(self, value: float, expected: str) -> None:
        assert format_plain(value) == expected

    def test_tiny_feed_survives_reparse(self) -> None:
        [cmd] = parse("G1 X1 Y1 F0.00001")
        moved = transform_command(cmd, TransformParams(translate_x=1))
        assert moved.raw == "G1 X2.000 Y1.000 F0.00001"
        [reparsed] = parse(moved.raw)
        assert reparsed.f == 0.00001
        assert reparsed.e is None

    def test_round_mm(self) -> None:
        assert round_mm(1.23456) == 1.235
        assert str(round_mm(-0.0001)) == "0.0"

    @pytest.mark.parametrize("raw, expected", [
        (10.0, 10.0),
        (3.5, 5.0),
        (1.2, 2.0),
        (7.0, 10.0),
        (150.0, 200.0),
    ])
    def test_nice_step(self, raw: float, expected: float) -> None:
        assert nice_step(raw) == expected
