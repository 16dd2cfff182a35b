"""
Net-worth confidence bands for FinRisk.

For every month, the net worths of the retained trajectories are sorted and
the p5 / p50 / p95 envelope is read off by nearest rank: element
``floor(q * n)`` of the sorted values, clamped to ``n - 1``. No
interpolation is done.

Examples
--------
>>> bands = build_confidence_bands(results["minimum"].sampled_trajectories)
>>> bands.to_frame().head()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from .constants import BAND_QUANTILES
from .simulation import Trajectory

__all__ = ["ConfidenceBands", "build_confidence_bands", "net_worth_matrix"]


@dataclass(frozen=True, eq=False)
class ConfidenceBands:
    """Per-month net-worth percentiles (p5, p50, p95), one entry per month."""

    p5: np.ndarray
    p50: np.ndarray
    p95: np.ndarray

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfidenceBands):
            return NotImplemented
        return all(
            np.array_equal(a, b)
            for a, b in ((self.p5, other.p5), (self.p50, other.p50), (self.p95, other.p95))
        )

    def __len__(self) -> int:
        return int(self.p50.shape[0])

    @property
    def months(self) -> np.ndarray:
        return np.arange(len(self))

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame({"p5": self.p5, "p50": self.p50, "p95": self.p95})
        df.index.name = "month"
        return df


def net_worth_matrix(trajectories: Sequence[Trajectory]) -> np.ndarray:
    """
    Stack trajectory net worths into an array of shape (n_trajectories, months).

    The month count is taken from the first trajectory; months missing from
    a shorter trajectory count as 0.
    """
    if not trajectories:
        return np.zeros((0, 0), dtype=float)
    months = len(trajectories[0])
    out = np.zeros((len(trajectories), months), dtype=float)
    for i, traj in enumerate(trajectories):
        nw = traj.net_worth[:months]
        out[i, : nw.shape[0]] = nw
    return out


def build_confidence_bands(trajectories: Sequence[Trajectory]) -> ConfidenceBands:
    """
    Derive p5 / p50 / p95 net-worth series from sampled trajectories.

    Parameters
    ----------
    trajectories : sequence of Trajectory
        Typically ``StrategyResult.sampled_trajectories``.

    Returns
    -------
    ConfidenceBands
        Empty series when no trajectories are given.
    """
    if not trajectories:
        empty = np.zeros(0, dtype=float)
        return ConfidenceBands(p5=empty, p50=empty.copy(), p95=empty.copy())

    values = np.sort(net_worth_matrix(trajectories), axis=0)
    n = values.shape[0]
    rows = [min(n - 1, int(np.floor(q * n))) for q in BAND_QUANTILES]
    lo, mid, hi = (values[r, :].copy() for r in rows)
    return ConfidenceBands(p5=lo, p50=mid, p95=hi)
