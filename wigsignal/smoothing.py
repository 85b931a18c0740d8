"""
smoothing.py

Smoothing strategies for irregularly sampled position/signal tables:

1) window_mean: non-overlapping fixed-width windows laid out in bp space; one
   output row per window that holds at least one observation
2) kernel:      Nadaraya-Watson regression with a Gaussian kernel in bp space

Both return a table with columns (position, signal), so the output can be fed
back into any function that takes a chromosome or region table.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Mapping, Optional

import numpy as np
import pandas as pd
from scipy.stats import norm

from wigsignal.genomes import TRACK_COLUMNS, ResolvedTrackSet, as_track, resolve_track_set
from wigsignal.regions import RegionProfile

logger = logging.getLogger(__name__)

# Normal kernel scaled so its quartiles sit at +/- 0.25 * bandwidth.
KERNEL_SD_PER_BANDWIDTH = 0.25 / norm.ppf(0.75)
KERNEL_CUTOFF_SD = 4.0


class InputShape(str, Enum):
    GENOME = "genome"
    CHROMOSOME = "chromosome"
    REGION = "region"


class SmoothingMethod(str, Enum):
    WINDOW_MEAN = "window_mean"
    KERNEL = "kernel"


def _region_table(data: RegionProfile | pd.DataFrame) -> pd.DataFrame:
    table = data.table if isinstance(data, RegionProfile) else pd.DataFrame(data)
    if table.shape[1] < 2:
        raise ValueError("Region table must have two columns (coordinate, signal)")
    out = table.iloc[:, :2].copy()
    out.columns = TRACK_COLUMNS
    out = out.reset_index(drop=True)
    pos = out["position"].to_numpy()
    if pos.size > 1 and not np.all(np.diff(pos) > 0):
        raise ValueError("Region coordinates must be strictly increasing")
    return out


def select_table(
    data: Mapping[str, pd.DataFrame] | ResolvedTrackSet | RegionProfile | pd.DataFrame,
    shape: InputShape,
    chrom: Optional[int | str] = None,
) -> pd.DataFrame:
    """
    Pick the table to smooth.

    For InputShape.GENOME, chrom selects one chromosome by number (1-16) or
    label; for single tables it is ignored.
    """
    shape = InputShape(shape)
    if shape is InputShape.GENOME:
        if chrom is None:
            raise ValueError("chrom is required when smoothing a whole-genome track set")
        return resolve_track_set(data).track(str(chrom))
    if chrom is not None:
        logger.debug("chrom=%s ignored for %s input", chrom, shape.value)
    if shape is InputShape.CHROMOSOME:
        return as_track(data, name="chromosome")
    return _region_table(data)


def sliding_window_mean(
    table: pd.DataFrame,
    bandwidth: int,
    start: Optional[int] = None,
) -> pd.DataFrame:
    """
    Mean signal in consecutive windows of `bandwidth` bp.

    Windows are [start + k*bandwidth, start + (k+1)*bandwidth); `start` defaults
    to the first position. Each row is placed at the window midpoint
    (window start + bandwidth // 2). Empty windows are omitted. A bandwidth
    at least as wide as the track span yields a single window.
    """
    bandwidth = int(bandwidth)
    if bandwidth < 1:
        raise ValueError("bandwidth must be >= 1")
    pos = table["position"].to_numpy(dtype=np.int64)
    sig = table["signal"].to_numpy(dtype=float)
    if pos.size == 0:
        return pd.DataFrame({"position": np.array([], dtype=np.int64), "signal": np.array([], dtype=float)})
    origin = int(pos[0]) if start is None else int(start)

    keep = pos >= origin
    if not keep.all():
        logger.debug("sliding_window_mean: %d rows before start=%d ignored", int((~keep).sum()), origin)
    window_idx = (pos[keep] - origin) // bandwidth
    if keep.any() and bandwidth >= int(pos[keep][-1]) - origin:
        # Window spans the whole track: one mean, even if the last position sits on the edge.
        window_idx = np.zeros_like(window_idx)
    means = pd.Series(sig[keep]).groupby(window_idx).mean()

    midpoints = origin + means.index.to_numpy(dtype=np.int64) * bandwidth + bandwidth // 2
    return pd.DataFrame({"position": midpoints.astype(np.int64), "signal": means.to_numpy(dtype=float)})


def kernel_regression(
    table: pd.DataFrame,
    bandwidth: float,
    step: Optional[int] = None,
) -> pd.DataFrame:
    """
    Gaussian kernel regression over the position axis.

    Evaluated at the original positions, or on a regular grid with spacing
    `step` covering the first to last position. Evaluation points with no
    observation within the kernel cutoff are NaN.
    """
    bandwidth = float(bandwidth)
    if bandwidth <= 0:
        raise ValueError("bandwidth must be > 0")
    pos = table["position"].to_numpy(dtype=np.int64)
    sig = table["signal"].to_numpy(dtype=float)
    if step is None:
        grid = pos.copy()
    else:
        step = int(step)
        if step < 1:
            raise ValueError("step must be >= 1")
        grid = np.arange(pos[0], pos[-1] + 1, step, dtype=np.int64) if pos.size else pos.copy()

    sd = KERNEL_SD_PER_BANDWIDTH * bandwidth
    cutoff = KERNEL_CUTOFF_SD * sd
    lefts = np.searchsorted(pos, grid - cutoff, side="left")
    rights = np.searchsorted(pos, grid + cutoff, side="right")

    out = np.full(grid.shape, np.nan, dtype=float)
    for i, x in enumerate(grid):
        lo, hi = lefts[i], rights[i]
        if hi <= lo:
            continue
        w = norm.pdf(pos[lo:hi] - x, scale=sd)
        total = w.sum()
        if total > 0:
            out[i] = float(np.dot(w, sig[lo:hi]) / total)

    n_missing = int(np.isnan(out).sum())
    if n_missing:
        logger.warning(
            "kernel_regression: %d of %d points have no data within %.0f bp; left as NaN",
            n_missing,
            out.size,
            cutoff,
        )
    return pd.DataFrame({"position": grid, "signal": out})


SMOOTHER_REGISTRY: Dict[SmoothingMethod, Callable[..., pd.DataFrame]] = {
    SmoothingMethod.WINDOW_MEAN: sliding_window_mean,
    SmoothingMethod.KERNEL: kernel_regression,
}


def wiggle_smooth(
    data: Mapping[str, pd.DataFrame] | ResolvedTrackSet | RegionProfile | pd.DataFrame,
    bandwidth: float,
    method: SmoothingMethod | str = SmoothingMethod.WINDOW_MEAN,
    shape: InputShape | str = InputShape.CHROMOSOME,
    chrom: Optional[int | str] = None,
    **kwargs,
) -> pd.DataFrame:
    """
    Smooth a chromosome or region table.

    Extra keyword arguments go to the selected strategy (`start` for
    window_mean, `step` for kernel).
    """
    method = SmoothingMethod(method)
    table = select_table(data, InputShape(shape), chrom=chrom)
    logger.debug("Smoothing %d rows (%s, bandwidth=%s)", len(table), method.value, bandwidth)
    return SMOOTHER_REGISTRY[method](table, bandwidth, **kwargs)
