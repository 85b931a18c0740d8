"""
io_utils.py

Small helpers for loading per-chromosome signal tables and saving results.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Sequence

import io
import json
import logging
import time
import pandas as pd

from wigsignal.logging_utils import progress_line

logger = logging.getLogger(__name__)

TRACK_SUFFIXES = (".wig", ".tab", ".tsv", ".txt")


def ensure_dir(p: str | Path) -> Path:
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def save_json(obj: Dict[str, Any], path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2), encoding="utf-8")


def save_df(df: pd.DataFrame, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        df.to_csv(path, index=False)
    else:
        # default parquet
        df.to_parquet(path, index=False)


def read_track_table(path: str | Path) -> pd.DataFrame:
    """
    Read a two-column (position, signal) whitespace-separated table.

    Header lines from wiggle exports ("track ...", "variableStep ...", "#...")
    are skipped.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Track table not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        body = [line for line in fh if line[:1].isdigit()]
    if not body:
        return pd.DataFrame({"position": pd.Series([], dtype="int64"), "signal": pd.Series([], dtype=float)})
    df = pd.read_csv(
        io.StringIO("".join(body)),
        sep=r"\s+",
        header=None,
        usecols=[0, 1],
        names=["position", "signal"],
    )
    df["position"] = df["position"].astype("int64")
    df["signal"] = df["signal"].astype(float)
    return df


def load_track_dir(
    track_dir: str | Path,
    suffixes: Sequence[str] = TRACK_SUFFIXES,
) -> Dict[str, pd.DataFrame]:
    """
    Load every per-chromosome table in a directory, keyed by file name.

    File names must carry the chromosome label followed by a '.', e.g.
    "Red1_chrI.wig" or "chr01.fa.wig".
    """
    track_dir = Path(track_dir)
    if not track_dir.is_dir():
        raise FileNotFoundError(f"Track directory not found: {track_dir}")
    paths = sorted(p for p in track_dir.iterdir() if p.is_file() and p.suffix.lower() in suffixes)
    if not paths:
        raise ValueError(f"No track tables ({', '.join(suffixes)}) in {track_dir}")
    run_start = time.perf_counter()
    tracks: Dict[str, pd.DataFrame] = {}
    for i, p in enumerate(paths, start=1):
        tracks[p.name] = read_track_table(p)
        progress_line(logger, i=i, total=len(paths), run_start=run_start)
    return tracks
