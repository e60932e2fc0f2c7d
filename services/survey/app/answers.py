"""Answer value coercion shared by the validator and the calculators."""

from __future__ import annotations

import math
from typing import Any

_YES = frozenset({"yes", "y", "true"})
_NO = frozenset({"no", "n", "false"})


def is_empty_answer(value: Any) -> bool:
    """None, blank strings and empty collections are unanswered; ``0`` and ``False`` are answers."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def to_number(value: Any) -> int | float | None:
    """Coerce a scale answer to a number; None when it isn't one.

    Booleans, blank strings, NaN and infinities are not numbers here.
    Whole floats come back as ``int`` so ``5.0`` lands in the ``5`` bucket.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            number = int(raw)
        except ValueError:
            try:
                number = float(raw)
            except ValueError:
                return None
    else:
        return None
    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def normalize_yes_no(value: Any) -> str | None:
    """Map booleans and yes/no/true/false strings onto ``"yes"`` / ``"no"``."""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _YES:
            return "yes"
        if lowered in _NO:
            return "no"
    return None


def as_selection(value: Any) -> list[Any] | None:
    """A multiple-selection answer as a list; a lone string counts as one selection."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    return None
