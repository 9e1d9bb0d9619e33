"""Scalar intervals for bounding ray parameters.

An Interval [lower, upper] bounds the valid intersection parameters of a
ray query. The renderer uses it to skip self-intersections near t = 0 and
to shrink the search range as closer hits are found; tone mapping reuses
it to clamp colour channels.
"""

import math

import taichi as ti

# Bounds of the empty and the all-encompassing interval
EMPTY = (math.inf, -math.inf)
UNIVERSE = (-math.inf, math.inf)


@ti.dataclass
class Interval:
    """A closed scalar range.

    Attributes:
        lower: Lower bound.
        upper: Upper bound. An interval with upper < lower is empty.
    """

    lower: ti.f32
    upper: ti.f32


@ti.func
def make_interval(lower: ti.f32, upper: ti.f32) -> Interval:
    """Create an interval from its bounds."""
    return Interval(lower=lower, upper=upper)


@ti.func
def interval_size(interval: Interval) -> ti.f32:
    """Length of the interval (negative when empty)."""
    return interval.upper - interval.lower


@ti.func
def interval_contains(interval: Interval, x: ti.f32) -> ti.i32:
    """Check lower <= x <= upper."""
    result = 0
    if interval.lower <= x and x <= interval.upper:
        result = 1
    return result


@ti.func
def interval_surrounds(interval: Interval, x: ti.f32) -> ti.i32:
    """Check lower < x < upper."""
    result = 0
    if interval.lower < x and x < interval.upper:
        result = 1
    return result


@ti.func
def interval_clamp(interval: Interval, x: ti.f32) -> ti.f32:
    """Clamp x into [lower, upper]."""
    result = x
    if x < interval.lower:
        result = interval.lower
    if x > interval.upper:
        result = interval.upper
    return result
