from __future__ import annotations

import logging
from pathlib import Path
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional


def setup_rich_logging(
    *,
    level: int = logging.INFO,
    logger_name: str = "wigsignal",
    force: bool = True,
) -> logging.Logger:
    """
    Configure logging for compact console output without colors.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(message)s",
        datefmt="[%X]",
        force=force,
    )

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    return logger


def _fmt_s(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    m = int(seconds // 60)
    s = seconds - 60 * m
    return f"{m}m{s:04.1f}s"


def log_section(logger: logging.Logger, title: str) -> None:
    logger.info("%s", title)


def log_kv(logger: logging.Logger, key: str, value: str) -> None:
    logger.info("  %-20s %s", f"{key}:", value)


@contextmanager
def timed(logger: logging.Logger, label: str) -> Iterator[None]:
    t0 = time.perf_counter()
    logger.info("START %s ...", label)
    try:
        yield
    finally:
        dt = time.perf_counter() - t0
        logger.info("DONE %s (%s)", label, _fmt_s(dt))


def progress_line(
    logger: logging.Logger,
    *,
    i: int,
    total: int,
    run_start: float,
    every: int = 4,
    force: bool = False,
) -> None:
    """
    Emit a progress line every N chromosomes (or when forced).
    Includes elapsed, rate, and ETA.
    """
    if not force and i != 1 and i % every != 0 and i != total:
        return

    elapsed = time.perf_counter() - run_start
    rate = (i / elapsed) if elapsed > 0 else float("nan")
    remaining = ((total - i) / rate) if rate and rate > 0 else float("nan")

    logger.info(
        "  chrom %2d/%d  elapsed=%s  rate=%.3f chr/s  eta=%s",
        i,
        total,
        _fmt_s(elapsed),
        rate,
        _fmt_s(remaining) if remaining == remaining else "NA",
    )


def summarise_run(
    logger: logging.Logger,
    *,
    scheme: str,
    genome_average: float,
    weighted_average: Optional[float],
    out_paths: Dict[str, str],
) -> None:
    log_section(logger, "Run summary")
    log_kv(logger, "ref_genome", scheme)
    log_kv(logger, "genome_average", f"{genome_average:.4f}")
    weighted = weighted_average if weighted_average is not None else float("nan")
    log_kv(logger, "length_weighted_avg", f"{weighted:.4f}" if weighted == weighted else "NA")

    log_section(logger, "Outputs")
    for key, value in out_paths.items():
        if value == "skipped":
            logger.info("  %s skipped", key)
            continue
        logger.info("  %s saved", Path(value).name)
