"""
Rounding helpers.

Scores and positions shown to users round halves up (2.5 -> 3, -2.5 -> -2),
not to even as the builtin round() does.
"""

from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round to ndigits decimal places, halves towards +infinity."""
    if ndigits == 0:
        return float(math.floor(value + 0.5))
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_score(value: float) -> int:
    """Round a score or position to the nearest integer, halves up."""
    return int(math.floor(value + 0.5))
