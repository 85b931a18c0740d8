"""
errors.py

Exception types raised by the signal extraction and aggregation helpers.
All of them are deterministic data-shape failures; none are retried.
"""

from __future__ import annotations


class WigSignalError(Exception):
    """Base class for every error raised by wigsignal."""


class UnrecognizedGenomeError(WigSignalError, ValueError):
    """Chromosome labels match neither (or both) of the supported reference genomes."""


class UnknownChromosomeError(WigSignalError, KeyError):
    """A chromosome label is absent from the reference anchor table."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class OutOfRangeError(WigSignalError, IndexError):
    """No floor/ceiling row exists for a requested coordinate."""


class WindowOutOfBoundsError(WigSignalError, ValueError):
    """An extraction window does not overlap the available track range."""


class EmptyInputError(WigSignalError, ValueError):
    """Aggregation was asked to combine zero inputs."""
