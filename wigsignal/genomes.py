"""
genomes.py

Reference genome detection and chromosome label handling.

Two yeast reference genomes are supported:
  - S288C: chromosomes numbered with roman numerals ("chrI".."chrXVI")
  - SK1:   chromosomes numbered with zero-padded arabic numerals ("chr01".."chr16")

Input tables are keyed by whatever label the reader produced (typically a file
name such as "chrI.wig" or "chr01.fa.wig"). The scheme is detected once and the
tables are re-keyed by canonical chromosome id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from wigsignal.errors import UnknownChromosomeError, UnrecognizedGenomeError

logger = logging.getLogger(__name__)

TRACK_COLUMNS = ["position", "signal"]

ROMAN_NUMERALS = [
    "I", "II", "III", "IV", "V", "VI", "VII", "VIII",
    "IX", "X", "XI", "XII", "XIII", "XIV", "XV", "XVI",
]
ARABIC_NUMERALS = [f"{i:02d}" for i in range(1, 17)]

# Chromosomes I, III and VI (0-based positions in the canonical order).
SMALL_CHROM_INDICES = (0, 2, 5)


class GenomeScheme(str, Enum):
    S288C = "S288C"
    SK1 = "SK1"


class SizeClass(str, Enum):
    SMALL = "small"
    LARGE = "large"


_NUMERALS = {
    GenomeScheme.S288C: ROMAN_NUMERALS,
    GenomeScheme.SK1: ARABIC_NUMERALS,
}


def chrom_ids(scheme: GenomeScheme) -> list[str]:
    return [f"chr{n}" for n in _NUMERALS[GenomeScheme(scheme)]]


def leading_label(scheme: GenomeScheme) -> str:
    """Label fragment that identifies a scheme ("chrI." or "chr01.")."""
    return chrom_ids(scheme)[0] + "."


def _label_matches(label: str, chrom: str) -> bool:
    # Trailing '.' keeps "chrI" from matching "chrII", "chrIII", ...
    return label == chrom or f"{chrom}." in label


def detect_genome(labels: Iterable[str]) -> GenomeScheme:
    """
    Classify a set of chromosome labels as S288C or SK1.

    Exactly one scheme must match. Labels matching both, or neither, raise
    UnrecognizedGenomeError rather than falling back to a default.
    """
    labels = [str(x) for x in labels]
    matches = [
        scheme for scheme in GenomeScheme
        if any(_label_matches(label, chrom_ids(scheme)[0]) for label in labels)
    ]
    if len(matches) != 1:
        examples = ", ".join(sorted(labels)[:5]) or "none"
        reason = "both" if matches else "neither"
        raise UnrecognizedGenomeError(
            f"Did not recognize reference genome: labels match {reason} of "
            f"'{leading_label(GenomeScheme.S288C)}' (S288C) and "
            f"'{leading_label(GenomeScheme.SK1)}' (SK1). Example labels: {examples}."
        )
    scheme = matches[0]
    if scheme is GenomeScheme.S288C:
        logger.info("Detected ref. genome - S288C (chrs numbered using roman numerals)")
    else:
        logger.info("Detected ref. genome - SK1 (chrs numbered using arabic numerals)")
    return scheme


def canonical_chrom(label: str, scheme: GenomeScheme) -> str:
    """
    Map a user-facing chromosome label to the canonical id of a scheme.

    Accepts the canonical id itself ("chrIV"), a file-style label ("chrIV.wig"),
    a bare numeral ("IV", "04") or an unprefixed chromosome number ("4").
    A "chr"-prefixed label must use the scheme's own numerals, so "chr01"
    is unknown to S288C and "chrIV" is unknown to SK1.
    """
    scheme = GenomeScheme(scheme)
    ids = chrom_ids(scheme)
    raw = str(label).strip()
    for chrom in ids:
        if _label_matches(raw, chrom):
            return chrom

    prefixed = raw.lower().startswith("chr")
    core = raw[3:] if prefixed else raw
    core = core.split(".", 1)[0]
    numerals = _NUMERALS[scheme]
    if core in numerals:
        return ids[numerals.index(core)]
    if not prefixed and core.isdigit() and 1 <= int(core) <= len(ids):
        return ids[int(core) - 1]
    raise UnknownChromosomeError(
        f"Chromosome '{label}' is not part of the {scheme.value} genome "
        f"(expected one of {ids[0]}..{ids[-1]})."
    )


def size_class(chrom: str, scheme: GenomeScheme) -> SizeClass:
    chrom = canonical_chrom(chrom, scheme)
    idx = chrom_ids(scheme).index(chrom)
    return SizeClass.SMALL if idx in SMALL_CHROM_INDICES else SizeClass.LARGE


def as_track(table: pd.DataFrame, name: str = "track") -> pd.DataFrame:
    """
    Return a copy of a two-column table as a ChromosomeTrack.

    The first two columns are taken as position and signal. Positions must be
    non-negative and strictly increasing (gaps are allowed).
    """
    if not isinstance(table, pd.DataFrame):
        table = pd.DataFrame(table)
    if table.shape[1] < 2:
        raise ValueError(f"{name}: expected two columns (position, signal), got {table.shape[1]}")

    out = table.iloc[:, :2].copy()
    out.columns = TRACK_COLUMNS
    out = out.reset_index(drop=True)
    out["position"] = out["position"].astype(np.int64)
    out["signal"] = out["signal"].astype(float)

    pos = out["position"].to_numpy()
    if pos.size and pos[0] < 0:
        raise ValueError(f"{name}: positions must be >= 0")
    if pos.size > 1 and not np.all(np.diff(pos) > 0):
        raise ValueError(f"{name}: positions must be strictly increasing")
    return out


@dataclass(frozen=True, eq=False)
class ResolvedTrackSet:
    """A GenomeTrackSet re-keyed by canonical chromosome id, in canonical order."""

    scheme: GenomeScheme
    tracks: Dict[str, pd.DataFrame] = field(repr=False)

    @property
    def chroms(self) -> List[str]:
        return list(self.tracks.keys())

    def track(self, chrom: str) -> pd.DataFrame:
        return self.tracks[canonical_chrom(chrom, self.scheme)]


def resolve_track_set(
    track_set: Mapping[str, pd.DataFrame] | ResolvedTrackSet,
    scheme: Optional[GenomeScheme] = None,
) -> ResolvedTrackSet:
    """
    Detect the reference genome of a GenomeTrackSet and key it by canonical id.

    Every one of the 16 chromosomes must match exactly one input label.
    """
    if isinstance(track_set, ResolvedTrackSet):
        return track_set

    labels = [str(k) for k in track_set.keys()]
    scheme = detect_genome(labels) if scheme is None else GenomeScheme(scheme)

    tracks: Dict[str, pd.DataFrame] = {}
    for chrom in chrom_ids(scheme):
        hits = [label for label in labels if _label_matches(label, chrom)]
        if len(hits) != 1:
            problem = "missing" if not hits else f"ambiguous ({', '.join(hits)})"
            raise UnrecognizedGenomeError(
                f"{scheme.value} genome requires one table per chromosome; {chrom} is {problem}."
            )
        tracks[chrom] = as_track(track_set[hits[0]], name=hits[0])

    if len(labels) != len(tracks):
        raise UnrecognizedGenomeError(
            f"Expected 16 chromosome tables for {scheme.value}, got {len(labels)}."
        )
    logger.debug("Resolved %d chromosome tables (%s)", len(tracks), scheme.value)
    return ResolvedTrackSet(scheme=scheme, tracks=tracks)
