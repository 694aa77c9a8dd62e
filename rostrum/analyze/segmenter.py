"""
rostrum.analyze.segmenter - Lexical sentence splitting.

Splits text into sentence-like units ending in ``.``, ``!`` or ``?``.
No abbreviation or quotation handling; "Dr. Smith" is two units.
"""

from __future__ import annotations

import re

from rostrum.exceptions import InputValidationError

MAX_UNITS = 100

_TERMINATORS = ".!?"
_UNIT_RE = re.compile(r"[^.!?]+[.!?]+|[^.!?]+$")


def segment(text: str, max_units: int = MAX_UNITS) -> list[str]:
    """Split text into ordered sentence units.

    Terminators stay attached to the text before them. Text after the last
    terminator becomes a final unit. If no unit is found the stripped input
    is returned as the only unit.

    Args:
        text: Raw speech text
        max_units: Cap on the number of units returned

    Returns:
        Non-empty list of at most ``max_units`` stripped units

    Raises:
        InputValidationError: If text is empty or whitespace only
    """
    stripped = text.strip() if text else ""
    if not stripped:
        raise InputValidationError("Cannot segment empty text")
    if max_units < 1:
        raise ValueError("max_units must be at least 1")

    units = []
    for match in _UNIT_RE.finditer(stripped):
        unit = match.group(0).strip()
        if unit.rstrip(_TERMINATORS).strip():
            units.append(unit)

    if not units:
        units = [stripped]

    return units[:max_units]
