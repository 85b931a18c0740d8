"""Signal extraction and coordinate normalisation for yeast ChIP-seq wiggle data."""

from wigsignal.aggregate import (
    chr_coverage,
    genome_average,
    length_weighted_average,
    signal_average,
    telomere_average,
)
from wigsignal.anchors import AnchorRecord, AnchorTable, load_anchor_table, lookup
from wigsignal.errors import (
    EmptyInputError,
    OutOfRangeError,
    UnknownChromosomeError,
    UnrecognizedGenomeError,
    WigSignalError,
    WindowOutOfBoundsError,
)
from wigsignal.genomes import (
    GenomeScheme,
    ResolvedTrackSet,
    SizeClass,
    canonical_chrom,
    chrom_ids,
    detect_genome,
    resolve_track_set,
    size_class,
)
from wigsignal.positions import ceiling_index, exact_index, floor_index
from wigsignal.regions import (
    Arm,
    RegionProfile,
    flip_right_arm,
    signal_at_centromeres,
    signal_at_orf,
    signal_at_summit,
    signal_from_telomeres,
)
from wigsignal.smoothing import (
    InputShape,
    SmoothingMethod,
    kernel_regression,
    select_table,
    sliding_window_mean,
    wiggle_smooth,
)

__version__ = "0.1.0"

__all__ = [
    "AnchorRecord",
    "AnchorTable",
    "Arm",
    "EmptyInputError",
    "GenomeScheme",
    "InputShape",
    "OutOfRangeError",
    "RegionProfile",
    "ResolvedTrackSet",
    "SizeClass",
    "SmoothingMethod",
    "UnknownChromosomeError",
    "UnrecognizedGenomeError",
    "WigSignalError",
    "WindowOutOfBoundsError",
    "canonical_chrom",
    "ceiling_index",
    "chr_coverage",
    "chrom_ids",
    "detect_genome",
    "exact_index",
    "flip_right_arm",
    "floor_index",
    "genome_average",
    "kernel_regression",
    "length_weighted_average",
    "load_anchor_table",
    "lookup",
    "resolve_track_set",
    "select_table",
    "signal_at_centromeres",
    "signal_at_orf",
    "signal_at_summit",
    "signal_average",
    "signal_from_telomeres",
    "size_class",
    "sliding_window_mean",
    "telomere_average",
    "wiggle_smooth",
]
