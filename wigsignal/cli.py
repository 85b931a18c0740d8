"""
cli.py

Standard analysis of a ChIP-seq wiggle data set: chromosome size bias, signal
around centromeres, signal flanking telomeres and (optionally) a smoothed
chromosome track. Results are written as CSV (or parquet) tables plus a
summary.json.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional

from wigsignal.aggregate import (
    chr_coverage,
    genome_average,
    length_weighted_average,
    signal_average,
    telomere_average,
)
from wigsignal.bigwig_utils import get_bigwig_chrom_lengths, load_bigwig_track_set
from wigsignal.config import AnalysisConfig
from wigsignal.genomes import SizeClass, canonical_chrom, chrom_ids, detect_genome, resolve_track_set
from wigsignal.io_utils import ensure_dir, load_track_dir, save_df, save_json
from wigsignal.logging_utils import (
    log_kv,
    log_section,
    setup_rich_logging,
    summarise_run,
    timed,
)
from wigsignal.regions import signal_at_centromeres, signal_from_telomeres
from wigsignal.smoothing import InputShape, SmoothingMethod, wiggle_smooth


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Standard analysis of yeast ChIP-seq wiggle data.")
    src = parser.add_mutually_exclusive_group(required=True)
    src.add_argument("--tracks-dir", type=str, help="Directory of per-chromosome (position, signal) tables")
    src.add_argument("--bigwig", type=str, help="bigWig file with one contig per chromosome")
    parser.add_argument("--out-dir", type=str, required=True, help="Output directory (must not exist)")
    parser.add_argument("--config", type=str, default=None, help="JSON file with analysis parameters")
    parser.add_argument("--telomere-length", type=int, default=None, help="bp collected from each telomere")
    parser.add_argument("--centromere-window", type=int, default=None, help="bp collected on each side of centromeres")
    parser.add_argument(
        "--only-complete",
        action="store_true",
        default=None,
        help="Drop centromere windows that run past the track ends",
    )
    parser.add_argument(
        "--smoothing-method",
        type=str,
        default=None,
        choices=[m.value for m in SmoothingMethod],
        help="Smoothing strategy for --smooth-chrom",
    )
    parser.add_argument("--bandwidth", type=int, default=None, help="Smoothing window / kernel bandwidth (bp)")
    parser.add_argument("--kernel-step", type=int, default=None, help="Regular grid spacing for kernel smoothing")
    parser.add_argument("--smooth-chrom", type=str, default=None, help="Chromosome (number or label) to smooth")
    parser.add_argument(
        "--table-format",
        type=str,
        default="csv",
        choices=["csv", "parquet"],
        help="File format for output tables",
    )
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    return parser


def load_config(args: argparse.Namespace) -> AnalysisConfig:
    base = AnalysisConfig.from_json(args.config) if args.config else AnalysisConfig()
    return base.with_overrides(
        telomere_length=args.telomere_length,
        centromere_window=args.centromere_window,
        only_complete=args.only_complete,
        smoothing_method=args.smoothing_method,
        bandwidth=args.bandwidth,
        kernel_step=args.kernel_step,
        smooth_chrom=args.smooth_chrom,
    )


def load_tracks(args: argparse.Namespace, logger: logging.Logger):
    if args.tracks_dir:
        return load_track_dir(args.tracks_dir)
    # bigWigs usually carry extra contigs (chrM, 2-micron); keep the 16 nuclear chromosomes.
    contigs = list(get_bigwig_chrom_lengths(args.bigwig).keys())
    scheme = detect_genome([f"{c}." for c in contigs])
    wanted = chrom_ids(scheme)
    skipped = sorted(set(contigs) - set(wanted))
    if skipped:
        logger.info("Skipping bigWig contigs: %s", ", ".join(skipped))
    return load_bigwig_track_set(args.bigwig, chroms=wanted)


def run_analysis(
    track_set,
    out_dir: str | Path,
    config: AnalysisConfig,
    logger: Optional[logging.Logger] = None,
    table_format: str = "csv",
) -> Dict[str, str]:
    """
    Run the standard analyses on a GenomeTrackSet and write one table per analysis.

    Returns a mapping of output name -> written path ("skipped" when not run).
    """
    logger = logger or logging.getLogger("wigsignal")
    out_dir = Path(out_dir)
    if out_dir.exists():
        raise FileExistsError(f"Output directory already exists: {out_dir}")
    ensure_dir(out_dir)

    resolved = resolve_track_set(track_set)
    log_section(logger, "Inputs")
    log_kv(logger, "ref_genome", resolved.scheme.value)
    log_kv(logger, "chromosomes", str(len(resolved.chroms)))
    log_kv(logger, "rows", f"{sum(len(t) for t in resolved.tracks.values()):,}")
    for key, value in config.to_dict().items():
        log_kv(logger, key, str(value))

    out_paths: Dict[str, str] = {}

    with timed(logger, "Chromosome size bias"):
        coverage = chr_coverage(resolved)
        path = out_dir / f"chr_coverage.{table_format}"
        save_df(coverage, path)
        out_paths["chr_coverage"] = str(path)

    with timed(logger, "Signal at centromeres"):
        cen_profiles = signal_at_centromeres(
            resolved,
            window=config.centromere_window,
            only_complete=config.only_complete,
        )
        cen_avg = signal_average(cen_profiles, require_complete=config.require_complete)
        path = out_dir / f"centromere_average.{table_format}"
        save_df(cen_avg, path)
        out_paths["centromere_average"] = str(path)

    with timed(logger, "Signal flanking telomeres"):
        telomeres = signal_from_telomeres(resolved, length_to_collect=config.telomere_length)
        for cls in SizeClass:
            path = out_dir / f"telomere_{cls.value}.{table_format}"
            save_df(telomere_average(telomeres, cls, require_complete=config.require_complete), path)
            out_paths[f"telomere_{cls.value}"] = str(path)

    if config.smooth_chrom is not None:
        with timed(logger, f"Smoothing {config.smooth_chrom}"):
            smoothed = wiggle_smooth(
                resolved,
                config.bandwidth,
                method=config.smoothing_method,
                shape=InputShape.GENOME,
                chrom=config.smooth_chrom,
                **config.smoothing_kwargs(),
            )
            chrom = canonical_chrom(config.smooth_chrom, resolved.scheme)
            path = out_dir / f"smoothed_{chrom}.{table_format}"
            save_df(smoothed, path)
            out_paths["smoothed"] = str(path)
    else:
        out_paths["smoothed"] = "skipped"

    avg = genome_average(resolved)
    weighted = length_weighted_average(coverage)
    summary = {
        "ref_genome": resolved.scheme.value,
        "genome_average": avg,
        "length_weighted_average": weighted,
        "n_centromere_windows": len(cen_profiles),
        "config": config.to_dict(),
    }
    path = out_dir / "summary.json"
    save_json(summary, path)
    out_paths["summary"] = str(path)

    summarise_run(
        logger,
        scheme=resolved.scheme.value,
        genome_average=avg,
        weighted_average=weighted,
        out_paths=out_paths,
    )
    return out_paths


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    log_level = logging.DEBUG if args.debug else logging.INFO
    logger = setup_rich_logging(level=log_level, logger_name="wigsignal", force=True)

    config = load_config(args)
    with timed(logger, "Load tracks"):
        track_set = load_tracks(args, logger)
    run_analysis(track_set, args.out_dir, config, logger=logger, table_format=args.table_format)


if __name__ == "__main__":
    main()
