from __future__ import annotations

from datetime import date


def ranges_overlap(in_a: date, out_a: date, in_b: date, out_b: date) -> bool:
    """Half-open [in, out) overlap: a checkout on another stay's check-in day does not overlap."""
    return in_a < out_b and out_a > in_b
