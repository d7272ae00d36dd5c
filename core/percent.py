import math


def round_half_up(value: float) -> int:
    """Round .5 away from zero (Python's round() would give 62 for 62.5)."""
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(100 * part / whole)
