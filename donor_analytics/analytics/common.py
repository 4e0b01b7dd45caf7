"""
Shared helpers for the analytics modules: guarded arithmetic, ordering checks, JSON cleanup.
"""
from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np
import pandas as pd


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """numerator / denominator, or default when the denominator is 0 or NaN."""
    if denominator == 0 or pd.isna(denominator):
        return default
    return numerator / denominator


def pct_change(current: float, previous: float) -> Optional[float]:
    """Percentage change from previous to current; None when previous is 0."""
    if previous == 0 or pd.isna(previous):
        return None
    return (current - previous) / abs(previous) * 100


def recorded(amounts: Sequence[Optional[float]]) -> list[float]:
    """The recorded amounts in their original order; None and NaN are dropped."""
    return [a for a in amounts if not pd.isna(a)]


def is_non_decreasing(values: Sequence[float]) -> bool:
    return all(later >= earlier for earlier, later in zip(values, values[1:]))


def is_non_increasing(values: Sequence[float]) -> bool:
    return all(later <= earlier for earlier, later in zip(values, values[1:]))


def _json_key(key) -> Optional[str]:
    if isinstance(key, tuple):
        return " to ".join(str(part) for part in key)
    if key is None or (isinstance(key, float) and math.isnan(key)):
        return None
    return key if isinstance(key, str) else str(key)


def sanitize_for_json(obj):
    """Make a report structure json.dumps-safe.

    numpy scalars become Python scalars, NaN/inf become None, and tuple keys
    such as tier transitions become "from to to" strings.
    """
    if isinstance(obj, dict):
        out = {}
        for key, value in obj.items():
            name = _json_key(key)
            if name is not None:
                out[name] = sanitize_for_json(value)
        return out
    if isinstance(obj, (list, tuple, np.ndarray)):
        return [sanitize_for_json(v) for v in obj]
    if isinstance(obj, np.generic):
        obj = obj.item()
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    if obj is pd.NaT or obj is pd.NA:
        return None
    return obj
