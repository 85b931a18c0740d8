"""
regions.py

Anchor-relative signal extraction.

Three extraction modes share one output type, RegionProfile, whose table has
two columns (distance, signal):

1) telomeres:  left and right arm ends of every chromosome; distance is >= 1 bp
               from the telomere and grows towards the centromere on both arms
2) summits:    signed distance around arbitrary anchor midpoints (centromeres,
               peak summits); negative = upstream, 0 = anchor, positive = downstream
3) meta-ORF:   ORF bodies rescaled to a fixed length with unscaled flanks,
               oriented 5' -> 3' regardless of strand
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional

import numpy as np
import pandas as pd

from wigsignal.anchors import AnchorRecord, load_anchor_table
from wigsignal.errors import OutOfRangeError, WindowOutOfBoundsError
from wigsignal.genomes import (
    GenomeScheme,
    ResolvedTrackSet,
    SizeClass,
    canonical_chrom,
    resolve_track_set,
    size_class,
)
from wigsignal.positions import ceiling_index, floor_index

logger = logging.getLogger(__name__)


class Arm(str, Enum):
    LEFT = "L"
    RIGHT = "R"


@dataclass(frozen=True, eq=False)
class RegionProfile:
    chrom: str
    table: pd.DataFrame = field(repr=False)
    anchor: int
    arm: Optional[Arm] = None
    size_class: Optional[SizeClass] = None
    name: Optional[str] = None

    @property
    def key(self) -> str:
        if self.arm is not None:
            return f"{self.chrom}_{self.arm.value}arm"
        return self.name or f"{self.chrom}:{self.anchor}"

    def __len__(self) -> int:
        return len(self.table)


@dataclass(frozen=True, eq=False)
class TelomereProfiles:
    small: Dict[str, RegionProfile]
    large: Dict[str, RegionProfile]

    def pool(self, cls: Optional[SizeClass] = None) -> List[RegionProfile]:
        if cls is None:
            return list(self.small.values()) + list(self.large.values())
        return list(self.small.values() if SizeClass(cls) is SizeClass.SMALL else self.large.values())


def _profile_table(distance: np.ndarray, signal: np.ndarray) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "distance": np.asarray(distance, dtype=np.int64),
            "signal": np.asarray(signal, dtype=float),
        }
    )


def flip_right_arm(positions: np.ndarray | pd.Series, chrom_length: int) -> np.ndarray:
    """
    Convert right-arm positions into distance from the right telomere.

    The last base (chrom_length) maps to 1, matching the 1-based left arm.
    Positions past chrom_length give values <= 0 and are returned as-is.
    """
    return int(chrom_length) - np.asarray(positions, dtype=np.int64) + 1


# -------------------------
# Telomeres
# -------------------------
def telomere_arms(
    track: pd.DataFrame,
    record: AnchorRecord,
    length_to_collect: int,
    scheme: GenomeScheme,
) -> tuple[RegionProfile, RegionProfile]:
    """Collect the left and right telomere-flanking profiles of one chromosome."""
    length_to_collect = int(length_to_collect)
    if length_to_collect <= 0:
        raise ValueError("length_to_collect must be > 0")
    if length_to_collect > record.length:
        raise WindowOutOfBoundsError(
            f"{record.chrom}: length_to_collect={length_to_collect:,} exceeds "
            f"chromosome length {record.length:,}"
        )
    cls = size_class(record.chrom, scheme)
    pos = track["position"].to_numpy()
    sig = track["signal"].to_numpy()

    try:
        end = floor_index(pos, length_to_collect)
    except OutOfRangeError as e:
        raise WindowOutOfBoundsError(f"{record.chrom} left arm: no data within {length_to_collect:,} bp") from e
    left = RegionProfile(
        chrom=record.chrom,
        table=_profile_table(pos[: end + 1], sig[: end + 1]),
        anchor=0,
        arm=Arm.LEFT,
        size_class=cls,
    )

    try:
        start = ceiling_index(pos, record.length - length_to_collect)
    except OutOfRangeError as e:
        raise WindowOutOfBoundsError(f"{record.chrom} right arm: no data within {length_to_collect:,} bp") from e
    distance = flip_right_arm(pos[start:], record.length)
    n_past_end = int((distance <= 0).sum())
    if n_past_end:
        # Reads mapped past the annotated chromosome end (incomplete sub-telomeric sequence).
        logger.warning(
            "%s right arm: %d positions beyond annotated length %d give distances <= 0",
            record.chrom,
            n_past_end,
            record.length,
        )
    # Reverse so distance increases down the table, like the left arm.
    right = RegionProfile(
        chrom=record.chrom,
        table=_profile_table(distance[::-1], sig[start:][::-1]),
        anchor=record.length,
        arm=Arm.RIGHT,
        size_class=cls,
    )
    return left, right


def signal_from_telomeres(
    track_set: Mapping[str, pd.DataFrame] | ResolvedTrackSet,
    length_to_collect: int = 100_000,
) -> TelomereProfiles:
    """
    Collect signal flanking every telomere of the genome.

    Returns profiles split into small (I, III, VI) and large chromosomes, keyed
    "<chrom>_Larm" / "<chrom>_Rarm". Right-arm distances are measured from the
    annotated chromosome end; see flip_right_arm for positions past that end.
    """
    resolved = resolve_track_set(track_set)
    anchors = load_anchor_table(resolved.scheme)
    small: Dict[str, RegionProfile] = {}
    large: Dict[str, RegionProfile] = {}

    logger.info("Collecting telomere signal (%s bp per arm)", f"{int(length_to_collect):,}")
    for chrom in resolved.chroms:
        left, right = telomere_arms(
            resolved.tracks[chrom],
            anchors.lookup(chrom),
            length_to_collect,
            resolved.scheme,
        )
        dest = small if left.size_class is SizeClass.SMALL else large
        dest[left.key] = left
        dest[right.key] = right
        logger.debug("  %s (%s) L=%d R=%d rows", chrom, left.size_class.value, len(left), len(right))

    return TelomereProfiles(small=small, large=large)


# -------------------------
# Summits / centromeres
# -------------------------
def _window_slice(
    pos: np.ndarray,
    lo: int,
    hi: int,
    *,
    only_complete: bool,
    label: str,
) -> Optional[slice]:
    """
    Row slice covering [lo, hi], None when only_complete and the window is cut
    by the track ends. A window that contains no rows at all is an error.
    """
    if pos.size == 0 or hi < pos[0] or lo > pos[-1]:
        first = int(pos[0]) if pos.size else "NA"
        last = int(pos[-1]) if pos.size else "NA"
        raise WindowOutOfBoundsError(
            f"{label}: window [{lo:,}, {hi:,}] lies outside track range [{first}, {last}]"
        )
    if only_complete and (lo < pos[0] or hi > pos[-1]):
        return None
    start = ceiling_index(pos, lo)
    end = floor_index(pos, hi)
    if end < start:
        raise WindowOutOfBoundsError(f"{label}: no data in window [{lo:,}, {hi:,}]")
    return slice(start, end + 1)


def _bed_columns(table: pd.DataFrame, required: List[str]) -> pd.DataFrame:
    if set(required).issubset(table.columns):
        return table
    if table.shape[1] < len(required):
        raise ValueError(f"Expected columns {required}, got {list(table.columns)}")
    # Unnamed BED-style input: take columns positionally, then an optional name.
    names = required + ["name"] + [f"col{i}" for i in range(len(required) + 1, table.shape[1])]
    out = table.copy()
    out.columns = names[: table.shape[1]]
    return out


def summit_midpoint(start: int, end: int) -> int:
    return int(start) + (int(end) - int(start)) // 2


def signal_at_summit(
    track_set: Mapping[str, pd.DataFrame] | ResolvedTrackSet,
    summits: pd.DataFrame,
    window: int = 1000,
    only_complete: bool = True,
) -> List[RegionProfile]:
    """
    Collect signal in a +/- window around each summit of a BED-like table.

    Parameters
    ----------
    summits
        Columns chrom, start, end (optionally name); the anchor is the midpoint
        of start and end. Unnamed tables are read positionally.
    window
        Half-width of the collected region, in bp.
    only_complete
        If True, summits whose window runs past either end of the track are
        dropped so every profile spans the full window. If False, windows are
        truncated at the track ends and profiles may differ in length.
    """
    window = int(window)
    if window <= 0:
        raise ValueError("window must be > 0")
    resolved = resolve_track_set(track_set)
    summits = _bed_columns(summits, ["chrom", "start", "end"])

    profiles: List[RegionProfile] = []
    n_dropped = 0
    for row in summits.itertuples(index=False):
        chrom = canonical_chrom(row.chrom, resolved.scheme)
        anchor = summit_midpoint(row.start, row.end)
        name = getattr(row, "name", None)
        label = f"{chrom}:{anchor}"
        track = resolved.tracks[chrom]
        pos = track["position"].to_numpy()

        sl = _window_slice(pos, anchor - window, anchor + window, only_complete=only_complete, label=label)
        if sl is None:
            n_dropped += 1
            logger.debug("  %s dropped (window incomplete)", label)
            continue
        profiles.append(
            RegionProfile(
                chrom=chrom,
                table=_profile_table(pos[sl] - anchor, track["signal"].to_numpy()[sl]),
                anchor=anchor,
                name=str(name) if name is not None else None,
            )
        )

    logger.info(
        "Collected %d summit windows (+/- %s bp); %d dropped as incomplete",
        len(profiles),
        f"{window:,}",
        n_dropped,
    )
    return profiles


def signal_at_centromeres(
    track_set: Mapping[str, pd.DataFrame] | ResolvedTrackSet,
    window: int = 50_000,
    only_complete: bool = False,
) -> List[RegionProfile]:
    resolved = resolve_track_set(track_set)
    summits = load_anchor_table(resolved.scheme).centromere_summits()
    return signal_at_summit(resolved, summits, window=window, only_complete=only_complete)


# -------------------------
# Meta-ORF
# -------------------------
def meta_orf_coordinates(
    positions: np.ndarray,
    start: int,
    end: int,
    strand: str,
    scaled_length: int,
) -> np.ndarray:
    """
    Map genomic positions onto a meta-ORF axis.

    Upstream of the 5' end: negative bp distance. ORF body: rescaled to
    [0, scaled_length]. Downstream of the 3' end: scaled_length + bp distance.
    """
    positions = np.asarray(positions, dtype=float)
    if strand == "+":
        rel = positions - start
    elif strand == "-":
        rel = end - positions
    else:
        raise ValueError(f"Unknown strand '{strand}'; use '+' or '-'.")
    body = float(end - start)
    coords = np.where(
        rel < 0,
        rel,
        np.where(rel > body, scaled_length + (rel - body), rel * scaled_length / body),
    )
    return np.rint(coords).astype(np.int64)


def signal_at_orf(
    track_set: Mapping[str, pd.DataFrame] | ResolvedTrackSet,
    orfs: pd.DataFrame,
    flank: int = 500,
    scaled_length: int = 1000,
) -> List[RegionProfile]:
    """
    Collect meta-ORF profiles for each ORF in a (chrom, start, end, strand) table.

    Rows that land on the same scaled coordinate are averaged so each profile
    holds at most one value per coordinate.
    """
    flank = int(flank)
    scaled_length = int(scaled_length)
    if flank < 0:
        raise ValueError("flank must be >= 0")
    if scaled_length <= 0:
        raise ValueError("scaled_length must be > 0")
    resolved = resolve_track_set(track_set)
    orfs = _bed_columns(orfs, ["chrom", "start", "end", "strand"])

    profiles: List[RegionProfile] = []
    for row in orfs.itertuples(index=False):
        chrom = canonical_chrom(row.chrom, resolved.scheme)
        start, end = int(row.start), int(row.end)
        if end <= start:
            raise ValueError(f"{chrom}: ORF end ({end}) must be greater than start ({start})")
        strand = str(row.strand)
        name = getattr(row, "name", None)
        track = resolved.tracks[chrom]
        pos = track["position"].to_numpy()

        sl = _window_slice(pos, start - flank, end + flank, only_complete=False, label=f"{chrom}:{start}-{end}")
        coords = meta_orf_coordinates(pos[sl], start, end, strand, scaled_length)
        table = (
            _profile_table(coords, track["signal"].to_numpy()[sl])
            .groupby("distance", as_index=False)["signal"]
            .mean()
        )
        profiles.append(
            RegionProfile(
                chrom=chrom,
                table=table,
                anchor=start if strand == "+" else end,
                name=str(name) if name is not None else None,
            )
        )

    logger.info("Collected %d meta-ORF profiles (flank %s bp)", len(profiles), f"{flank:,}")
    return profiles
