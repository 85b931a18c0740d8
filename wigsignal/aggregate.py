"""
aggregate.py

Genome-wide averages and coordinate-wise averaging of region profiles.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from wigsignal.anchors import load_anchor_table
from wigsignal.errors import EmptyInputError
from wigsignal.genomes import ResolvedTrackSet, SizeClass, as_track, resolve_track_set
from wigsignal.regions import RegionProfile, TelomereProfiles
from wigsignal.stats_utils import finite_mean, weighted_mean

logger = logging.getLogger(__name__)

AGGREGATED_COLUMNS = ["position", "mean_signal", "n_observations"]


def _iter_tracks(track_set: Mapping[str, pd.DataFrame] | ResolvedTrackSet) -> Iterable[tuple[str, pd.DataFrame]]:
    if isinstance(track_set, ResolvedTrackSet):
        return track_set.tracks.items()
    return ((str(k), as_track(v, name=str(k))) for k, v in track_set.items())


def genome_average(track_set: Mapping[str, pd.DataFrame] | ResolvedTrackSet) -> float:
    """
    Unweighted mean of every signal value in every chromosome.

    Each observation counts once, so longer (or more densely sampled)
    chromosomes contribute proportionally more. Non-finite signal values
    are skipped, as in chr_coverage.
    """
    signals = [t["signal"].to_numpy(dtype=float) for _, t in _iter_tracks(track_set)]
    if not signals:
        raise EmptyInputError("genome_average: no chromosome tables provided")
    values = np.concatenate(signals)
    if values.size == 0:
        raise EmptyInputError("genome_average: chromosome tables contain no observations")
    return finite_mean(values)


def _profile_frame(profile: RegionProfile | pd.DataFrame, idx: int) -> pd.DataFrame:
    table = profile.table if isinstance(profile, RegionProfile) else profile
    if table.shape[1] < 2:
        raise ValueError("Profiles must have two columns (coordinate, signal)")
    out = table.iloc[:, :2].copy()
    out.columns = ["position", "signal"]
    out["profile"] = idx
    return out


def signal_average(
    profiles: Iterable[RegionProfile | pd.DataFrame],
    require_complete: bool = False,
) -> pd.DataFrame:
    """
    Average signal per coordinate across a collection of profiles.

    The mean at each coordinate is taken over the profiles that have a value
    there, and n_observations records how many did. With require_complete,
    coordinates missing from any profile are dropped.
    """
    frames: List[pd.DataFrame] = [_profile_frame(p, i) for i, p in enumerate(profiles)]
    if not frames:
        raise EmptyInputError("signal_average: no profiles provided")

    stacked = pd.concat(frames, ignore_index=True)
    stacked = stacked[np.isfinite(stacked["signal"].to_numpy(dtype=float))]
    grouped = stacked.groupby("position", sort=True)
    out = pd.DataFrame(
        {
            "mean_signal": grouped["signal"].mean(),
            # Count profiles, not rows, in case a profile repeats a coordinate.
            "n_observations": grouped["profile"].nunique(),
        }
    ).reset_index()
    out["position"] = out["position"].astype(np.int64)
    out["n_observations"] = out["n_observations"].astype(np.int64)

    if require_complete:
        before = len(out)
        out = out[out["n_observations"] == len(frames)].reset_index(drop=True)
        logger.debug("signal_average: dropped %d incomplete coordinates", before - len(out))
    return out[AGGREGATED_COLUMNS]


def telomere_average(
    profiles: TelomereProfiles,
    cls: Optional[SizeClass] = None,
    require_complete: bool = False,
) -> pd.DataFrame:
    """Average telomere arms, optionally restricted to one chromosome size class."""
    return signal_average(profiles.pool(cls), require_complete=require_complete)


def chr_coverage(track_set: Mapping[str, pd.DataFrame] | ResolvedTrackSet) -> pd.DataFrame:
    """
    Mean signal per chromosome alongside chromosome length.

    Used to check for chromosome size bias in ChIP signal.
    """
    resolved = resolve_track_set(track_set)
    anchors = load_anchor_table(resolved.scheme)
    rows = []
    for chrom, track in resolved.tracks.items():
        signal = track["signal"].to_numpy(dtype=float)
        rows.append(
            {
                "chrom": chrom,
                "length": anchors.lookup(chrom).length,
                "n_positions": int(signal.size),
                "mean_signal": finite_mean(signal),
            }
        )
    return pd.DataFrame(rows)


def length_weighted_average(coverage: pd.DataFrame) -> float:
    """Whole-genome average of per-chromosome means, weighted by chromosome length."""
    if coverage.empty:
        raise EmptyInputError("length_weighted_average: empty coverage table")
    return weighted_mean(
        coverage["mean_signal"].to_numpy(dtype=float),
        coverage["length"].to_numpy(dtype=float),
    )
