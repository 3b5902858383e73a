"""
Statistics Utilities

Small numeric helpers shared by the calculators.

Usage:
    from teamdash.utils.statistics import round_half_up, safe_ratio

    score = round_half_up(94.5)          # 95
    merge_rate = safe_ratio(merged, total)  # 0 when total == 0
"""

import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Python's round() uses banker's rounding (round(94.5) == 94); dashboard
    figures round halves up.

    Example:
        >>> round_half_up(94.5)
        95
        >>> round_half_up(2.4)
        2
    """
    if value < 0:
        return -round_half_up(-value)
    return math.floor(value + 0.5)


def safe_ratio(numerator: float, denominator: float, digits: int | None = None) -> float:
    """numerator / denominator, or 0 when the denominator is 0."""
    if denominator == 0:
        return 0
    ratio = numerator / denominator
    return round(ratio, digits) if digits is not None else ratio
