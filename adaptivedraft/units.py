from __future__ import annotations

from enum import Enum


class Units(str, Enum):
    MM = "mm"
    CM = "cm"
    M = "m"
    IN = "in"
    FT = "ft"


# Internal unit is millimeters.
_MM_PER_UNIT = {
    Units.MM: 1.0,
    Units.CM: 10.0,
    Units.M: 1000.0,
    Units.IN: 25.4,
    Units.FT: 304.8,
}


def to_internal(value: float, units: Units) -> float:
    """Convert a value from given units to internal (mm)."""
    try:
        return float(value) * _MM_PER_UNIT[Units(units)]
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported units: {units}") from None


def from_internal(value_mm: float, units: Units) -> float:
    """Convert a value from internal (mm) to given units."""
    try:
        return float(value_mm) / _MM_PER_UNIT[Units(units)]
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported units: {units}") from None
