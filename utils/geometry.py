"""
Utility functions for the planar math used by the transformer and the
viewport: rotation about the origin, millimeter rounding, number formatting
and "nice" grid steps.
"""
import math
from decimal import Decimal
from typing import Tuple

MM_DECIMALS = 3


def rotate_xy(x: float, y: float, degrees: float) -> Tuple[float, float]:
    """Rotate (x, y) about the origin, counter-clockwise for positive angles."""
    if degrees == 0:
        return x, y
    angle = math.radians(degrees)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return x * cos_a - y * sin_a, x * sin_a + y * cos_a


def round_mm(value: float, decimals: int = MM_DECIMALS) -> float:
    """Round the way a fixed-point formatter does; never returns -0.0."""
    return float(f"{value:.{decimals}f}") + 0.0


def format_fixed(value: float, decimals: int = MM_DECIMALS) -> str:
    return f"{round_mm(value, decimals):.{decimals}f}"


def format_plain(value: float) -> str:
    """Shortest plain rendering of a number: 200.0 -> '200', 1e-05 -> '0.00001'.

    Never uses exponent notation; a G-code reader would take the E as a word.
    """
    value = float(value)
    if not math.isfinite(value):
        return repr(value)
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), 'f')


def nice_step(raw: float) -> float:
    """Round a positive step up to 1, 2, 5 or 10 times a power of ten."""
    magnitude = 10 ** math.floor(math.log10(raw))
    normalized = raw / magnitude

    if normalized <= 1:
        return magnitude
    if normalized <= 2:
        return 2 * magnitude
    if normalized <= 5:
        return 5 * magnitude
    return 10 * magnitude
