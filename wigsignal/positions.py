"""
positions.py

Index lookups on irregularly sampled, ascending position columns.

Wiggle positions come from experimental sampling, so a requested base pair is
frequently absent. Lookups fall back to the nearest row on the requested side:
  - floor:   exact match, else the greatest position < target
  - ceiling: exact match, else the least position > target
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from wigsignal.errors import OutOfRangeError


def _positions(track: pd.DataFrame | np.ndarray) -> np.ndarray:
    if isinstance(track, pd.DataFrame):
        return track["position"].to_numpy()
    return np.asarray(track)


def exact_index(track: pd.DataFrame | np.ndarray, target: int) -> Optional[int]:
    pos = _positions(track)
    idx = int(np.searchsorted(pos, target, side="left"))
    if idx < pos.size and pos[idx] == target:
        return idx
    return None


def floor_index(track: pd.DataFrame | np.ndarray, target: int) -> int:
    pos = _positions(track)
    hit = exact_index(pos, target)
    if hit is not None:
        return hit
    idx = int(np.searchsorted(pos, target, side="left")) - 1
    if idx < 0:
        first = pos[0] if pos.size else "NA"
        raise OutOfRangeError(f"No position below {target} (first position: {first})")
    return idx


def ceiling_index(track: pd.DataFrame | np.ndarray, target: int) -> int:
    pos = _positions(track)
    hit = exact_index(pos, target)
    if hit is not None:
        return hit
    idx = int(np.searchsorted(pos, target, side="right"))
    if idx >= pos.size:
        last = pos[-1] if pos.size else "NA"
        raise OutOfRangeError(f"No position above {target} (last position: {last})")
    return idx
