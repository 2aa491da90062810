"""
Progress percentage for page/panel based jobs.
"""

from fractions import Fraction
import math

MAX_RUNNING_PERCENT = 99


def compute_percent(current_page: int, total_pages: int, current_panel: int, total_panels: int) -> int:
    """
    Percent done while a job is running.

    ``floor(100 * ((current_page - 1) / total_pages + (current_panel / total_panels) / total_pages))``
    clamped to 0..99; only completion reports 100. Exact fractions keep page
    boundaries from flooring one point low.
    """
    if total_pages <= 0:
        return 0
    done = Fraction(max(current_page, 1) - 1, total_pages)
    if total_panels > 0:
        done += Fraction(max(current_panel, 0), total_panels) / total_pages
    return max(0, min(math.floor(done * 100), MAX_RUNNING_PERCENT))
