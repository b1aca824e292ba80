"""Resolution helpers for loosely shaped catalog fields.

Catalog records come from hand-maintained JSON, so numeric fields may be
missing, null, strings or NaN. Every ambiguous field goes through one of
these helpers exactly once, in the model validators or a model property.
"""

import math
from typing import Any


def finite_or_none(value: Any) -> float | None:
    """Return ``value`` as a float when it is a finite real number, else ``None``.

    Booleans are rejected even though they are ints.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def first_present(*values: Any) -> Any:
    """Return the first value that is not ``None``."""
    for value in values:
        if value is not None:
            return value
    return None


def number_or_none(value: Any) -> float | None:
    """Like ``finite_or_none`` but also parses numeric strings such as ``"2"``.

    Used for the fields catalogs commonly quote: a card's base rate and a
    rotating rule's boosted rate.
    """
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    return finite_or_none(value)
