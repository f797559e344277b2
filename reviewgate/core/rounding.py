"""
Half-up rounding for score averages and RCI arithmetic.

Python's ``round`` uses banker's rounding (``round(2.5) == 2``); scores
always round .5 away from zero instead. All inputs here are non-negative.
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
