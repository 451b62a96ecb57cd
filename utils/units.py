"""
Unit handling. Coordinates are always stored in millimeters; inches only
exist at the text ingress (parsing) and in what is shown to the user.
"""
from enum import Enum
from typing import Union

MM_PER_INCH = 25.4


class Units(Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"

    @classmethod
    def coerce(cls, value: Union["Units", str]) -> "Units":
        """Accept a Units member or its string value ("metric"/"imperial")."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown units: {value!r} (expected 'metric' or 'imperial')") from None

    @property
    def label(self) -> str:
        return "mm" if self is Units.METRIC else "in"

    @property
    def linear_factor(self) -> float:
        """Multiplier that turns a value in these units into millimeters."""
        return MM_PER_INCH if self is Units.IMPERIAL else 1.0


def to_mm(value: float, units: Units) -> float:
    return value * units.linear_factor


def from_mm(value: float, units: Units) -> float:
    return value / units.linear_factor


def format_coordinate(value_mm: float, units: Units) -> str:
    """Format a millimeter value for display: 1 decimal in mm, 3 in inches."""
    decimals = 1 if units is Units.METRIC else 3
    return f"{from_mm(value_mm, units):.{decimals}f}"
