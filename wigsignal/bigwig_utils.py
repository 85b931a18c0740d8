"""
bigwig_utils.py

Helpers for reading per-chromosome signal tables from a bigWig file.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd
import pyBigWig

from wigsignal.logging_utils import progress_line

logger = logging.getLogger(__name__)


def get_bigwig_chrom_lengths(bigwig_path: str | Path) -> dict[str, int]:
    bw = pyBigWig.open(str(bigwig_path))
    chroms = bw.chroms()
    bw.close()
    return {str(k): int(v) for k, v in chroms.items()}


def bigwig_track(bw, chrom: str) -> pd.DataFrame:
    """
    Position/signal table for one contig of an open bigWig.

    Each interval contributes one row at its 1-based start position.
    """
    intervals = bw.intervals(chrom) or ()
    if not intervals:
        return pd.DataFrame({"position": np.array([], dtype=np.int64), "signal": np.array([], dtype=float)})
    arr = np.asarray(intervals, dtype=float)
    return pd.DataFrame(
        {
            "position": arr[:, 0].astype(np.int64) + 1,
            "signal": arr[:, 2],
        }
    )


def load_bigwig_track_set(
    bigwig_path: str | Path,
    chroms: Optional[Sequence[str]] = None,
) -> Dict[str, pd.DataFrame]:
    """
    Load a GenomeTrackSet from a bigWig, keyed by "<contig>." labels.

    Contigs not listed in `chroms` (e.g. chrM, 2-micron) are skipped when given.
    """
    bigwig_path = Path(bigwig_path)
    if not bigwig_path.exists():
        raise FileNotFoundError(f"bigWig not found: {bigwig_path}")
    bw = pyBigWig.open(str(bigwig_path))
    try:
        contigs = list(bw.chroms().keys())
        if chroms is not None:
            wanted = set(chroms)
            missing = sorted(wanted - set(contigs))
            if missing:
                examples = ", ".join(sorted(contigs)[:10]) or "none"
                raise ValueError(f"bigWig missing contigs {missing}. Example contigs: {examples}.")
            contigs = [c for c in contigs if c in wanted]
        run_start = time.perf_counter()
        tracks: Dict[str, pd.DataFrame] = {}
        for i, c in enumerate(contigs, start=1):
            tracks[f"{c}."] = bigwig_track(bw, c)
            progress_line(logger, i=i, total=len(contigs), run_start=run_start)
        return tracks
    finally:
        bw.close()
