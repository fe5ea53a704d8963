"""Numeric primitives and tolerance configuration for the drafting kernel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TolerancePolicy:
    """Container for numeric tolerances used throughout the drafting kernel."""

    linear: float = 1e-9
    angular: float = 1e-10  # radians
    parametric: float = 1e-9


DEFAULT_TOLERANCE = TolerancePolicy()


def nearly_equal(a: float, b: float, *, eps: Optional[float] = None) -> bool:
    tol = eps if eps is not None else DEFAULT_TOLERANCE.linear
    return abs(a - b) <= tol


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


__all__ = ["TolerancePolicy", "DEFAULT_TOLERANCE", "nearly_equal", "clamp"]
