import json
import logging

import numpy as np
import pandas as pd
import pytest

from wigsignal.cli import main
from wigsignal.genomes import GenomeScheme
from wigsignal.io_utils import load_track_dir, read_track_table


@pytest.fixture
def tracks_dir(tmp_path, make_track_set):
    out = tmp_path / "tracks"
    out.mkdir()
    tracks = make_track_set(GenomeScheme.S288C, step=2000, signal=2.0, label="Red1_{chrom}.wig")
    for name, df in tracks.items():
        df.to_csv(out / name, sep="\t", header=False, index=False)
    return out


def test_read_track_table_skips_headers(tmp_path):
    path = tmp_path / "chrI.wig"
    path.write_text("track type=wiggle_0 name=Red1\nvariableStep chrom=chrI\n1\t0.5\n11\t1.5\n")
    df = read_track_table(path)
    assert df["position"].tolist() == [1, 11]
    assert df["signal"].tolist() == [0.5, 1.5]


def test_load_track_dir_keys_by_file_name(tracks_dir):
    tracks = load_track_dir(tracks_dir)
    assert len(tracks) == 16
    assert "Red1_chrXVI.wig" in tracks


def test_load_track_dir_reports_progress(tracks_dir, caplog):
    with caplog.at_level(logging.INFO, logger="wigsignal.io_utils"):
        load_track_dir(tracks_dir)
    lines = [r.getMessage() for r in caplog.records if "chrom" in r.getMessage()]
    assert lines[0].strip().startswith("chrom  1/16")
    assert lines[-1].strip().startswith("chrom 16/16")


def test_cli_writes_tables(tracks_dir, tmp_path):
    out_dir = tmp_path / "out"
    main(
        [
            "--tracks-dir", str(tracks_dir),
            "--out-dir", str(out_dir),
            "--telomere-length", "20000",
            "--centromere-window", "10000",
            "--smooth-chrom", "3",
            "--bandwidth", "10000",
        ]
    )
    for name in (
        "chr_coverage.csv",
        "centromere_average.csv",
        "telomere_small.csv",
        "telomere_large.csv",
        "smoothed_chrIII.csv",
    ):
        assert (out_dir / name).exists()

    summary = json.loads((out_dir / "summary.json").read_text())
    assert summary["ref_genome"] == "S288C"
    assert summary["genome_average"] == pytest.approx(2.0)
    assert summary["n_centromere_windows"] == 16

    cen = pd.read_csv(out_dir / "centromere_average.csv")
    assert cen["position"].abs().max() <= 10_000
    assert np.allclose(cen["mean_signal"], 2.0)


def test_cli_refuses_existing_out_dir(tracks_dir, tmp_path):
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    with pytest.raises(FileExistsError):
        main(["--tracks-dir", str(tracks_dir), "--out-dir", str(out_dir)])


def test_cli_parquet_tables(tracks_dir, tmp_path):
    pytest.importorskip("pyarrow")
    out_dir = tmp_path / "out"
    main(["--tracks-dir", str(tracks_dir), "--out-dir", str(out_dir), "--table-format", "parquet"])
    coverage = pd.read_parquet(out_dir / "chr_coverage.parquet")
    assert len(coverage) == 16
    assert not (out_dir / "smoothed_chrI.parquet").exists()


@pytest.fixture
def bigwig_path(tmp_path):
    pyBigWig = pytest.importorskip("pyBigWig")
    from wigsignal.anchors import load_anchor_table

    path = tmp_path / "Red1.bw"
    anchors = list(load_anchor_table(GenomeScheme.SK1))
    bw = pyBigWig.open(str(path), "w")
    bw.addHeader([(r.chrom, r.length) for r in anchors] + [("chrM", 86000)])
    for r in anchors + [None]:
        chrom, length = (r.chrom, r.length) if r else ("chrM", 86000)
        starts = list(range(0, length - 1, 5000))
        bw.addEntries([chrom] * len(starts), starts, ends=[s + 1 for s in starts], values=[1.5] * len(starts))
    bw.close()
    return path


def test_load_bigwig_track_set(bigwig_path):
    from wigsignal.bigwig_utils import load_bigwig_track_set
    from wigsignal.genomes import chrom_ids

    tracks = load_bigwig_track_set(bigwig_path, chroms=chrom_ids(GenomeScheme.SK1))
    assert sorted(tracks) == sorted(f"{c}." for c in chrom_ids(GenomeScheme.SK1))
    assert tracks["chr01."]["position"].iloc[:2].tolist() == [1, 5001]
    assert (tracks["chr01."]["signal"] == 1.5).all()


def test_cli_reads_bigwig(bigwig_path, tmp_path):
    out_dir = tmp_path / "out"
    main(["--bigwig", str(bigwig_path), "--out-dir", str(out_dir)])
    summary = json.loads((out_dir / "summary.json").read_text())
    assert summary["ref_genome"] == "SK1"
    assert summary["genome_average"] == pytest.approx(1.5)
