"""Numeric building blocks shared by the constraint functions.

All helpers are pure. None of them accept a zero `unit`.
"""

from __future__ import annotations


def in_range(value: int, low: int, high: int) -> bool:
    return low <= value <= high


def clamp(value: int, low: int, high: int) -> int:
    """Return the bound nearest to `value` when it lies outside [low, high]."""
    if value < low:
        return low
    if value > high:
        return high
    return value


def is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


def round_down_to_power_of_two(value: int) -> int:
    """Largest power of two not above `value` (1 for anything below 1)."""
    if value < 1:
        return 1
    return 1 << (value.bit_length() - 1)


def is_multiple_of(value: int, unit: int) -> bool:
    return value % unit == 0


def round_down_to_multiple(value: int, unit: int) -> int:
    """Drop the remainder; a zero result becomes `unit` so alignments never degenerate."""
    rounded = value - (value % unit)
    return rounded if rounded != 0 else unit


def percent_of(value: int, percent: int) -> int:
    """Integer percentage of `value`, truncated toward zero."""
    magnitude = abs(value) * percent // 100
    return magnitude if value >= 0 else -magnitude


def unpack_digits(value: int, count: int) -> tuple[list[int], int]:
    """
    Split the lowest `count` base-10 digits off `value`.

    Returns:
        (digits, overflow) where digits[0] is the ones digit and overflow is
        whatever is left above the requested digits (0 when the value fits).
    """
    digits: list[int] = []
    rest = value
    for _ in range(count):
        digits.append(rest % 10)
        rest //= 10
    return digits, rest


def pack_digits(digits: list[int]) -> int:
    """Inverse of `unpack_digits` for a value without overflow."""
    packed = 0
    for position, digit in enumerate(digits):
        packed += digit * 10**position
    return packed
