# adaptivedraft global settings

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

from .errors import ConfigurationError
from .kernel.entities import Style
from .kernel.numeric import DEFAULT_TOLERANCE, TolerancePolicy
from .units import Units

# Display
DEFAULT_PRECISION = 2          # decimals shown in dimension text and measurements
MAX_PRECISION = 4
DEFAULT_UNITS = Units.MM
SHOW_UNITS = True

# Interaction (screen pixels, converted with DraftSettings.pixel_size)
PICK_TOLERANCE_PX = 5.0
CLOSE_TOLERANCE_PX = 10.0
LINE_MIN_DELTA = 0.001         # drawing units; shorter second clicks are ignored
ARC_MIN_RADIUS = 0.001

# Fillet tool
DEFAULT_FILLET_RADIUS = 10.0
FILLET_RADIUS_STEP = 1.0
MIN_FILLET_RADIUS = 0.1

# Dimensions
DEFAULT_EXTENSION_DISTANCE = 10.0
DEFAULT_OFFSET_DISTANCE = 15.0


@dataclass(frozen=True)
class DraftSettings:
    """Settings injected into every tool through its context."""

    precision: int = DEFAULT_PRECISION
    units: Units = DEFAULT_UNITS
    default_style: Style = field(default_factory=Style)
    layer: Optional[str] = None
    pixel_size: float = 1.0
    pick_tolerance_px: float = PICK_TOLERANCE_PX
    close_tolerance_px: float = CLOSE_TOLERANCE_PX
    fillet_radius: float = DEFAULT_FILLET_RADIUS
    fillet_radius_step: float = FILLET_RADIUS_STEP
    show_units: bool = SHOW_UNITS
    tolerance: TolerancePolicy = DEFAULT_TOLERANCE

    def __post_init__(self) -> None:
        if isinstance(self.precision, bool) or not isinstance(self.precision, int):
            raise ConfigurationError(f"precision must be an integer, got {self.precision!r}")
        if not 0 <= self.precision <= MAX_PRECISION:
            raise ConfigurationError(f"precision must be between 0 and {MAX_PRECISION}, got {self.precision}")
        if not isinstance(self.units, Units):
            raise ConfigurationError(f"units must be a Units value, got {self.units!r}")
        for name in ("pixel_size", "pick_tolerance_px", "close_tolerance_px", "fillet_radius", "fillet_radius_step"):
            value = getattr(self, name)
            if not value > 0:
                raise ConfigurationError(f"{name} must be positive, got {value!r}")
        if self.fillet_radius < MIN_FILLET_RADIUS:
            raise ConfigurationError(f"fillet_radius must be at least {MIN_FILLET_RADIUS}")

    @property
    def pick_tolerance(self) -> float:
        """Pick tolerance in drawing units."""
        return self.pick_tolerance_px * self.pixel_size

    @property
    def close_tolerance(self) -> float:
        return self.close_tolerance_px * self.pixel_size

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DraftSettings":
        """Build settings from host configuration such as a parsed JSON/TOML table."""

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        values = dict(data)
        try:
            if "units" in values:
                values["units"] = Units(values["units"])
            if isinstance(values.get("default_style"), Mapping):
                style = dict(values["default_style"])
                if "dash" in style:
                    style["dash"] = tuple(style["dash"])
                values["default_style"] = Style(**style)
            if isinstance(values.get("tolerance"), Mapping):
                values["tolerance"] = TolerancePolicy(**values["tolerance"])
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(str(exc)) from exc
        return cls(**values)
