import numpy as np
import pandas as pd
import pytest

from wigsignal.anchors import load_anchor_table
from wigsignal.genomes import GenomeScheme


def _make_track(length, step=500, signal=1.0, first=1):
    pos = np.arange(first, length + 1, step, dtype=np.int64)
    if callable(signal):
        sig = np.asarray(signal(pos), dtype=float)
    else:
        sig = np.full(pos.size, float(signal))
    return pd.DataFrame({"position": pos, "signal": sig})


def _make_track_set(scheme, step=500, signal=1.0, label="{chrom}.wig"):
    table = load_anchor_table(scheme)
    return {label.format(chrom=rec.chrom): _make_track(rec.length, step, signal) for rec in table}


@pytest.fixture
def make_track():
    return _make_track


@pytest.fixture
def make_track_set():
    return _make_track_set


@pytest.fixture
def s288c_tracks():
    return _make_track_set(GenomeScheme.S288C)


@pytest.fixture
def sk1_tracks():
    return _make_track_set(GenomeScheme.SK1, label="AH119C_{chrom}.fa.wig")
