"""General utilities for FinRisk

Contents
--------
- Validation helpers (ensure_1d)
- Display formatters (format_money, format_pct, format_months)
- Matplotlib formatters (thousands_formatter)
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

__all__ = [
    # Validation
    "ensure_1d",
    # Display
    "format_money",
    "format_pct",
    "format_months",
    # Matplotlib formatters
    "thousands_formatter",
]

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

ArrayLike = Union[Sequence[float], np.ndarray, pd.Series]


def ensure_1d(a: ArrayLike, *, name: str = "array") -> np.ndarray:
    """Convert input to a 1-D float NumPy array with helpful error messages."""
    arr = np.asarray(a, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1-D, got shape {arr.shape}.")
    if not np.isfinite(arr).all():
        raise ValueError(f"{name} must contain only finite values.")
    return arr


# ---------------------------------------------------------------------------
# Display formatters
# ---------------------------------------------------------------------------

def format_money(value: float) -> str:
    """
    Compact dollar amount for tables and chart annotations.

    Examples
    --------
    >>> format_money(1_250_000)
    '$1.25M'
    >>> format_money(-48_300)
    '-$48.3K'
    >>> format_money(950.4)
    '$950'
    """
    if not math.isfinite(value):
        return "N/A"
    sign = "-" if value < 0 else ""
    v = abs(value)
    if v >= 1e6:
        return f"{sign}${v / 1e6:.2f}M"
    if v >= 1e3:
        return f"{sign}${v / 1e3:.1f}K"
    return f"{sign}${v:.0f}"


def format_pct(p: Optional[float], decimals: int = 1) -> str:
    """Probability in [0, 1] as a percentage string ('12.3%')."""
    if p is None:
        return "N/A"
    return f"{p * 100:.{decimals}f}%"


def format_months(months: Optional[int]) -> str:
    """
    Month count as years and months.

    >>> format_months(27)
    '2y 3m'
    >>> format_months(7)
    '7m'
    >>> format_months(None)
    'N/A'
    """
    if months is None:
        return "N/A"
    years, rem = divmod(int(months), 12)
    if years == 0:
        return f"{rem}m"
    return f"{years}y {rem}m"


# ---------------------------------------------------------------------------
# Matplotlib formatters
# ---------------------------------------------------------------------------

def thousands_formatter(x, pos):
    """
    Format axis values as thousands for matplotlib FuncFormatter.

    - 250_000 → "250K"
    - 1_500_000 → "1500K"
    - 0 → "0"

    Examples
    --------
    >>> from matplotlib.ticker import FuncFormatter
    >>> ax.yaxis.set_major_formatter(FuncFormatter(thousands_formatter))
    """
    if x == 0:
        return '0'
    val = x / 1e3
    return f'{val:.0f}K' if val == int(val) else f'{val:.1f}K'
