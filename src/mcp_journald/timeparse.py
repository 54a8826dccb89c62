"""Relative time offsets in the style journalctl accepts for --since/--until."""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Optional

OFFSET_PATTERN = re.compile(r"([+-]?)([0-9]+)(m|h|d|M|y)")

# Months and years are fixed spans, not calendar arithmetic.
UNIT_SPANS = {
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "M": timedelta(days=30),
    "y": timedelta(days=365),
}


def parse_offset(expr: str, reference: datetime) -> Optional[datetime]:
    """Apply an offset like ``-30m`` or ``2d`` to ``reference``.

    Args:
        expr: ``[sign]digits unit`` with unit one of m, h, d, M, y
        reference: Time the offset is relative to

    Returns:
        The shifted time, or None if ``expr`` is not a supported offset
        or lands outside the representable range.
    """
    match = OFFSET_PATTERN.fullmatch(expr)
    if match is None:
        return None

    sign, digits, unit = match.groups()
    try:
        span = UNIT_SPANS[unit] * int(digits)
        if sign == "-":
            return reference - span
        return reference + span
    except OverflowError:
        # Outside the range datetime can represent
        return None
