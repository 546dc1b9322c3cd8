"""
numbers.py - rounding and INR display helpers shared by all calculators.

Payroll figures must match the amounts already printed on payslips, which were
produced with half-up rounding (2.5 → 3, -2.5 → -2). Python's round() is
banker's rounding (2.5 → 2), so it is never used for money in this package.
"""
from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round half toward +infinity at `ndigits` decimal places."""
    if ndigits == 0:
        return float(math.floor(value + 0.5))
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def format_inr(value: float, max_decimals: int = 3) -> str:
    """
    Format a number with Indian digit grouping (lakh/crore): 1234567.5 → "12,34,567.5".

    Trailing zero decimals are dropped, matching en-IN locale output.
    """
    negative = value < 0
    text = f"{abs(value):.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    whole, _, fraction = text.partition(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups: list[str] = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    result = f"{whole}.{fraction}" if fraction else whole
    return f"-{result}" if negative and result != "0" else result


def format_lakhs(value: float) -> str:
    """Compact lakh notation used in slab labels: 300001 → "3.0"."""
    return f"{value / 100_000:.1f}"
