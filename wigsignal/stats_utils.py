"""
stats_utils.py

Small numeric helpers for NaN-safe stats.
"""

from __future__ import annotations

import numpy as np


def finite_mean(values: np.ndarray) -> float:
    """
    Mean over finite values only; NaN if there are none.
    """
    vals = np.asarray(values, dtype=float)
    mask = np.isfinite(vals)
    if mask.sum() == 0:
        return float("nan")
    return float(vals[mask].mean())


def weighted_mean(values: np.ndarray, weights: np.ndarray) -> float:
    """
    Weighted mean ignoring NaNs in values and non-positive weights.
    """
    values = np.asarray(values, dtype=float)
    weights = np.asarray(weights, dtype=float)
    mask = np.isfinite(values) & np.isfinite(weights) & (weights > 0)
    if mask.sum() == 0:
        return float("nan")
    v = values[mask]
    w = weights[mask]
    return float(np.sum(v * w) / np.sum(w))
