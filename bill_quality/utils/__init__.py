"""
Shared utilities and helpers.
"""

import json
import math
from typing import Dict


def dict_to_json_string(data: Dict) -> str:
    """Convert an already JSON-safe payload dict to an indented JSON string."""
    return json.dumps(data, indent=2)


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division with default value."""
    if denominator == 0:
        return default
    return numerator / denominator


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero for positive values.

    The value is first rounded to 6 decimals so that accumulated float error
    in weighted sums (e.g. 82.49999999999999) does not flip a half.
    """
    return int(math.floor(round(value, 6) + 0.5))
