import logging

import numpy as np
import pandas as pd
import pytest

from wigsignal.anchors import AnchorRecord, load_anchor_table
from wigsignal.errors import UnknownChromosomeError, WindowOutOfBoundsError
from wigsignal.genomes import GenomeScheme, SizeClass
from wigsignal.regions import (
    Arm,
    flip_right_arm,
    meta_orf_coordinates,
    signal_at_centromeres,
    signal_at_orf,
    signal_at_summit,
    signal_from_telomeres,
    telomere_arms,
)

N = 1000


def _contiguous(n=N, first=0):
    pos = np.arange(first, n + 1, dtype=np.int64)
    return pd.DataFrame({"position": pos, "signal": pos.astype(float)})


def _record(length=N):
    return AnchorRecord(chrom="chrI", length=length, cen_start=400, cen_end=402)


def test_flip_right_arm():
    out = flip_right_arm(np.array([1000, 901, 1005]), 1000)
    assert out.tolist() == [1, 100, -4]


def test_telomere_arms_on_contiguous_chromosome():
    left, right = telomere_arms(_contiguous(), _record(), 100, GenomeScheme.S288C)

    assert left.arm is Arm.LEFT and right.arm is Arm.RIGHT
    assert left.size_class is SizeClass.SMALL
    assert left.table["distance"].tolist() == list(range(0, 101))
    assert (left.table["distance"] == left.table["signal"]).all()

    # signal column still holds the original position
    expected = N - right.table["signal"].to_numpy().astype(int) + 1
    assert right.table["distance"].tolist() == expected.tolist()
    assert right.table["distance"].tolist() == list(range(1, 102))
    assert np.all(np.diff(right.table["distance"]) > 0)


def test_telomere_arms_tolerate_missing_positions():
    track = pd.DataFrame({"position": [0, 40, 90, 130, 870, 950, 1000], "signal": np.arange(7.0)})
    left, right = telomere_arms(track, _record(), 100, GenomeScheme.S288C)
    assert left.table["distance"].tolist() == [0, 40, 90]
    assert right.table["distance"].tolist() == [1, 51]


def test_telomere_window_longer_than_chromosome():
    with pytest.raises(WindowOutOfBoundsError):
        telomere_arms(_contiguous(), _record(), 5000, GenomeScheme.S288C)


def test_telomere_window_without_data():
    track = _contiguous().iloc[200:800]
    with pytest.raises(WindowOutOfBoundsError):
        telomere_arms(track, _record(), 100, GenomeScheme.S288C)


def test_positions_past_chromosome_end_keep_negative_distance():
    track = _contiguous(n=1010)
    _, right = telomere_arms(track, _record(), 100, GenomeScheme.S288C)
    assert right.table["distance"].min() == -9
    assert np.all(np.diff(right.table["distance"]) > 0)


def test_signal_from_telomeres_splits_small_and_large(s288c_tracks):
    profiles = signal_from_telomeres(s288c_tracks, length_to_collect=20_000)
    assert sorted(profiles.small) == sorted(
        f"{c}_{a}arm" for c in ("chrI", "chrIII", "chrVI") for a in ("L", "R")
    )
    assert len(profiles.large) == 26
    for prof in profiles.pool():
        d = prof.table["distance"].to_numpy()
        assert d.min() >= 1 and d.max() <= 20_001
        assert np.all(np.diff(d) > 0)


def test_summit_distances_are_signed(make_track_set):
    tracks = make_track_set(GenomeScheme.S288C, signal=lambda p: p)
    summits = pd.DataFrame({"chrom": ["chrIV"], "start": [500_000], "end": [500_001]})
    [prof] = signal_at_summit(tracks, summits, window=1000)
    assert prof.anchor == 500_000
    assert prof.table["distance"].tolist() == [-999, -499, 1, 501]
    assert (prof.table["signal"] - prof.table["distance"] == 500_000).all()


def test_only_complete_drops_truncated_windows(s288c_tracks):
    summits = pd.DataFrame({"chrom": ["chrI", "chrII"], "start": [100, 300_000], "end": [101, 300_001]})
    complete = signal_at_summit(s288c_tracks, summits, window=1000, only_complete=True)
    assert [p.chrom for p in complete] == ["chrII"]

    truncated = signal_at_summit(s288c_tracks, summits, window=1000, only_complete=False)
    assert len(truncated) == 2
    assert truncated[0].table["distance"].min() == -99
    assert len(truncated[0]) < len(truncated[1])


def test_summit_outside_track_raises(s288c_tracks):
    summits = pd.DataFrame({"chrom": ["chrI"], "start": [300_000], "end": [300_001]})
    for flag in (True, False):
        with pytest.raises(WindowOutOfBoundsError):
            signal_at_summit(s288c_tracks, summits, window=1000, only_complete=flag)


def test_summit_on_unknown_chromosome(s288c_tracks):
    summits = pd.DataFrame({"chrom": ["chrXVII"], "start": [1000], "end": [1001]})
    with pytest.raises(UnknownChromosomeError):
        signal_at_summit(s288c_tracks, summits)


def test_summit_from_other_genome_is_rejected(s288c_tracks):
    summits = pd.DataFrame({"chrom": ["chr04"], "start": [438_801], "end": [438_802]})
    with pytest.raises(UnknownChromosomeError):
        signal_at_summit(s288c_tracks, summits)


def test_unnamed_bed_columns(sk1_tracks):
    bed = pd.DataFrame([["chr02", 100_000, 100_001, "peak1"]])
    [prof] = signal_at_summit(sk1_tracks, bed, window=500)
    assert prof.chrom == "chr02"
    assert prof.name == "peak1"


def test_signal_at_centromeres(sk1_tracks):
    profiles = signal_at_centromeres(sk1_tracks, window=50_000)
    anchors = load_anchor_table(GenomeScheme.SK1)
    assert [p.chrom for p in profiles] == [r.chrom for r in anchors]
    for prof, rec in zip(profiles, anchors):
        assert prof.anchor == rec.cen_mid
        assert prof.table["distance"].abs().max() <= 50_000


def test_meta_orf_coordinates():
    pos = np.array([9501, 10001, 10501, 11001, 11501])
    plus = meta_orf_coordinates(pos, 10001, 11001, "+", 1000)
    minus = meta_orf_coordinates(pos, 10001, 11001, "-", 1000)
    assert plus.tolist() == [-500, 0, 500, 1000, 1500]
    assert minus.tolist() == [1500, 1000, 500, 0, -500]
    with pytest.raises(ValueError):
        meta_orf_coordinates(pos, 10001, 11001, ".", 1000)


def test_signal_at_orf_orients_by_strand(make_track_set):
    tracks = make_track_set(GenomeScheme.S288C, signal=lambda p: p)
    orfs = pd.DataFrame(
        {
            "chrom": ["chrII", "chrII"],
            "start": [10_001, 10_001],
            "end": [11_001, 11_001],
            "strand": ["+", "-"],
            "name": ["YBL_W", "YBL_C"],
        }
    )
    plus, minus = signal_at_orf(tracks, orfs, flank=500)
    assert plus.table["distance"].tolist() == [-500, 0, 500, 1000, 1500]
    assert plus.table["signal"].tolist() == [9501, 10001, 10501, 11001, 11501]
    assert minus.table["distance"].tolist() == [-500, 0, 500, 1000, 1500]
    assert minus.table["signal"].tolist() == [11501, 11001, 10501, 10001, 9501]
    assert minus.anchor == 11_001


def test_position_one_past_end_is_reported(caplog):
    track = _contiguous(n=N + 1)
    with caplog.at_level(logging.WARNING, logger="wigsignal.regions"):
        _, right = telomere_arms(track, _record(), 100, GenomeScheme.S288C)
    assert right.table["distance"].min() == 0
    assert "1 positions beyond annotated length 1000" in caplog.text
