"""
Helper functions shared by the paste_alignments modules.

- Fuzzy float comparison with a relative tolerance
- Strict parsing of unsigned integer fields
- Rounding helpers used by the scoring system
"""

import math

from .exceptions import ParsingError


# ============================================
# Float Comparison
# ============================================

def fuzzy_float_equals(a: float, b: float, epsilon: float) -> bool:
    """
    Compare two floats with a tolerance relative to the smaller magnitude.

    If one of the values is zero the tolerance is relative to the other
    value; two zeros are always equal.
    """
    if a == b:
        return True
    abs_a, abs_b = abs(a), abs(b)
    if abs_a == 0.0 or abs_b == 0.0:
        return abs(a - b) <= epsilon * max(abs_a, abs_b)
    return abs(a - b) <= epsilon * min(abs_a, abs_b)


def fuzzy_float_less(a: float, b: float, epsilon: float) -> bool:
    """True if a is smaller than b and the two are not fuzzy-equal."""
    return a < b and not fuzzy_float_equals(a, b, epsilon)


def next_lower_even(value: float, epsilon: float) -> float:
    """
    Round value down to the next even number.

    Values that already lie within tolerance of an even number are
    returned unchanged.
    """
    modulo = abs(math.fmod(value, 2.0))
    if fuzzy_float_equals(modulo, 0.0, epsilon) or fuzzy_float_equals(modulo, 2.0, epsilon):
        return value
    return 2.0 * math.floor(value / 2.0)


def megablast_extend_cost(reward: int, penalty: int) -> float:
    """Gap extension cost BLAST uses for megablast when open and extend are 0."""
    return reward / 2.0 + penalty


# ============================================
# Field Parsing
# ============================================

def parse_count(field: str, name: str) -> int:
    """
    Parse a field that must consist of ASCII digits only.

    Signs, whitespace, decimal points and empty strings are rejected.

    Raises:
        ParsingError: If the field is not a plain unsigned integer
    """
    if not field or not (field.isascii() and field.isdigit()):
        raise ParsingError(f"Field '{name}' is not an unsigned integer: {field!r}")
    return int(field)


def parse_position(field: str, name: str) -> int:
    """Parse a 1-based sequence coordinate (digits only, at least 1)."""
    value = parse_count(field, name)
    if value == 0:
        raise ParsingError(f"Field '{name}' must be a positive coordinate, got 0")
    return value
