"""Half-up rounding for derived percentages and ratings.

Python's round() uses banker's rounding (round(12.5) == 12); progress and
rating figures are shown to users, who expect 12.5 -> 13.
"""

from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, digits: int = 0) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percent(part: int, whole: int) -> int:
    """Integer percentage of part/whole, clamped to [0, 100]; 0 when whole is 0."""
    if whole <= 0:
        return 0
    value = int(round_half_up(100 * part / whole))
    return max(0, min(100, value))
