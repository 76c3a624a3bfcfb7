"""Decimal degree to degrees/minutes/seconds conversion."""

from __future__ import annotations

import math

SECONDS_PRECISION = 3


def to_dms(decimal_degrees: float) -> tuple[int, int, float]:
    """Split ``decimal_degrees`` into (degrees, minutes, seconds).

    The decomposition is floor based, so a negative angle yields negative
    degrees with non-negative minutes and seconds (-0.5 -> (-1, 30, 0.0)).
    Seconds are rounded to three decimals; a rounding result of 60 is carried
    into the minutes so seconds always stay below 60.
    """
    degrees = math.floor(decimal_degrees)
    minutes_total = (decimal_degrees - degrees) * 60
    minutes = math.floor(minutes_total)
    seconds = round((minutes_total - minutes) * 60, SECONDS_PRECISION)

    if seconds >= 60:
        seconds = 0.0
        minutes += 1
    if minutes >= 60:
        minutes -= 60
        degrees += 1

    return int(degrees), int(minutes), float(seconds)


def from_dms(degrees: int, minutes: int, seconds: float) -> float:
    return degrees + minutes / 60 + seconds / 3600
