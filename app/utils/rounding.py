"""
Percentage rounding shared by progress and scoring
"""
import math


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)"""
    return int(math.floor(value + 0.5))


def percentage(part: float, whole: float) -> int:
    """Integer percentage of part in whole, 0 when whole is not positive"""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)
