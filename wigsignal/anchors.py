"""
anchors.py

Static reference coordinates (chromosome length, centromere position) for the
S288C and SK1 yeast genomes.

The tables are bundled as tab-separated files under wigsignal/data/ and read
once per process; callers receive the same immutable AnchorTable instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator

import pandas as pd

from wigsignal.errors import UnknownChromosomeError
from wigsignal.genomes import GenomeScheme, canonical_chrom, chrom_ids

DATA_DIR = Path(__file__).resolve().parent / "data"

ANCHOR_FILES = {
    GenomeScheme.S288C: DATA_DIR / "S288C_centromeres.tsv",
    GenomeScheme.SK1: DATA_DIR / "SK1_centromeres.tsv",
}


@dataclass(frozen=True)
class AnchorRecord:
    chrom: str
    length: int
    cen_start: int
    cen_end: int

    @property
    def cen_mid(self) -> int:
        return self.cen_start + (self.cen_end - self.cen_start) // 2


class AnchorTable:
    def __init__(self, scheme: GenomeScheme, records: Iterable[AnchorRecord]) -> None:
        self.scheme = GenomeScheme(scheme)
        self._by_chrom: dict[str, AnchorRecord] = {}
        for rec in records:
            if rec.chrom in self._by_chrom:
                raise ValueError(f"Duplicate anchor record for {rec.chrom}")
            if rec.length <= 0:
                raise ValueError(f"{rec.chrom}: chromosome length must be > 0")
            if not (0 < rec.cen_mid < rec.length):
                raise ValueError(
                    f"{rec.chrom}: centromere midpoint {rec.cen_mid} outside (0, {rec.length})"
                )
            self._by_chrom[rec.chrom] = rec

    @classmethod
    def from_tsv(cls, path: str | Path, scheme: GenomeScheme) -> "AnchorTable":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Anchor table not found: {path}")
        df = pd.read_csv(path, sep="\t", dtype={"chrom": str})
        missing = {"chrom", "cen_start", "cen_end", "length"} - set(df.columns)
        if missing:
            raise ValueError(f"{path.name}: missing columns {sorted(missing)}")
        records = [
            AnchorRecord(
                chrom=str(row.chrom),
                length=int(row.length),
                cen_start=int(row.cen_start),
                cen_end=int(row.cen_end),
            )
            for row in df.itertuples(index=False)
        ]
        return cls(scheme, records)

    def lookup(self, chrom: str) -> AnchorRecord:
        key = str(chrom)
        if key not in self._by_chrom:
            key = canonical_chrom(key, self.scheme)
        if key not in self._by_chrom:
            raise UnknownChromosomeError(
                f"No {self.scheme.value} anchor record for '{chrom}'; "
                f"reference data is inconsistent with the detected genome."
            )
        return self._by_chrom[key]

    def __iter__(self) -> Iterator[AnchorRecord]:
        return iter(self._by_chrom.values())

    def __len__(self) -> int:
        return len(self._by_chrom)

    def centromere_summits(self) -> pd.DataFrame:
        """Bed-like (chrom, start, end) table of centromere midpoints."""
        mids = [r.cen_mid for r in self]
        return pd.DataFrame(
            {
                "chrom": [r.chrom for r in self],
                "start": mids,
                "end": [m + 1 for m in mids],
                "name": [f"CEN_{r.chrom}" for r in self],
            }
        )


@lru_cache(maxsize=None)
def load_anchor_table(scheme: GenomeScheme) -> AnchorTable:
    scheme = GenomeScheme(scheme)
    table = AnchorTable.from_tsv(ANCHOR_FILES[scheme], scheme)
    expected = chrom_ids(scheme)
    if [r.chrom for r in table] != expected:
        raise ValueError(f"{scheme.value} anchor table must list {expected[0]}..{expected[-1]} in order")
    return table


def lookup(scheme: GenomeScheme, chrom: str) -> AnchorRecord:
    return load_anchor_table(scheme).lookup(chrom)
