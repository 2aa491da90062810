"""
Aspect ratio helpers for the image synthesis capability.

The capability only accepts a fixed set of ratios; everything else is snapped
to the closest supported label.
"""

from math import gcd
from typing import Union

from .constants import SUPPORTED_ASPECT_RATIOS

SUPPORTED_LABELS = [label for label, _ in SUPPORTED_ASPECT_RATIOS]


def is_supported_aspect_ratio(ratio: str) -> bool:
    return ratio in SUPPORTED_LABELS


def parse_aspect_ratio(ratio: str) -> float:
    """Parse ``"W:H"`` into a width/height float. Unparseable input is treated as square."""
    if not ratio or not isinstance(ratio, str):
        return 1.0

    parts = ratio.split(':')
    if len(parts) != 2:
        return 1.0

    try:
        width = float(parts[0])
        height = float(parts[1])
    except ValueError:
        return 1.0

    if height == 0:
        return 1.0
    return width / height


def closest_aspect_ratio(value: Union[str, float, int, None]) -> str:
    """
    Find the supported aspect ratio closest to ``value``.

    Args:
        value: A ratio label such as ``"0.75:1"`` or a numeric width/height ratio

    Returns:
        A supported label; ties resolve to the earlier entry of the supported list
    """
    if isinstance(value, str) and is_supported_aspect_ratio(value):
        return value

    target = float(value) if isinstance(value, (int, float)) else parse_aspect_ratio(value)

    best_label, best_value = SUPPORTED_ASPECT_RATIOS[0]
    best_diff = abs(target - best_value)
    for label, ratio in SUPPORTED_ASPECT_RATIOS[1:]:
        diff = abs(target - ratio)
        if diff < best_diff:
            best_label, best_diff = label, diff
    return best_label


def aspect_ratio_from_dimensions(width: int, height: int) -> str:
    """Reduce pixel dimensions to a ``"W:H"`` label, e.g. 1200x1600 -> ``"3:4"``."""
    if width <= 0 or height <= 0:
        raise ValueError("Dimensions must be positive")
    divisor = gcd(int(width), int(height))
    return f"{int(width) // divisor}:{int(height) // divisor}"
