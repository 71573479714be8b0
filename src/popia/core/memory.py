"""Memory estimation and checking for the pairwise-distance step.

The distance matrix grows with the square of the number of individuals
(n * (n - 1) / 2 pairs, one float64 per pair and locus). The estimate is
checked against available memory before anything is allocated.
"""

from typing import NamedTuple

import psutil
from loguru import logger


class DistanceMemoryBreakdown(NamedTuple):
    """Memory breakdown for the index of association.

    All values in GB.
    """

    frequencies_gb: float  # n * columns * 8 bytes (float64)
    distances_gb: float  # pairs * loci * 8 bytes (float64)
    chunk_gb: float  # chunk * columns * 8 bytes * 3 (two gathered rows + diff)
    total_gb: float  # Peak memory
    available_gb: float  # Free system memory at estimate time
    sufficient: bool  # total plus a 10% margin fits in available_gb


def estimate_distance_memory(
    n_individuals: int,
    n_loci: int,
    n_columns: int,
    chunk_size: int = 50_000,
) -> DistanceMemoryBreakdown:
    """Estimate peak memory for the pairwise-distance computation.

    Args:
        n_individuals: Number of matrix rows.
        n_loci: Number of loci (distance matrix columns).
        n_columns: Total number of variations (allele matrix columns).
        chunk_size: Pairs processed per chunk.

    Returns:
        DistanceMemoryBreakdown with component estimates and total.

    Example:
        >>> est = estimate_distance_memory(10_000, 20, 200)
        >>> round(est.distances_gb, 1)
        8.0
    """
    n_pairs = n_individuals * (n_individuals - 1) // 2
    chunk = min(chunk_size, max(n_pairs, 1))

    frequencies_gb = n_individuals * n_columns * 8 / 1e9
    distances_gb = n_pairs * n_loci * 8 / 1e9
    chunk_gb = chunk * n_columns * 8 * 3 / 1e9

    total_gb = frequencies_gb + distances_gb + chunk_gb

    available_gb = psutil.virtual_memory().available / 1e9
    sufficient = total_gb * 1.1 < available_gb

    return DistanceMemoryBreakdown(
        frequencies_gb=frequencies_gb,
        distances_gb=distances_gb,
        chunk_gb=chunk_gb,
        total_gb=total_gb,
        available_gb=available_gb,
        sufficient=sufficient,
    )


def check_memory_available(
    required_gb: float,
    safety_margin: float = 0.1,
    operation: str = "operation",
) -> bool:
    """Raise MemoryError unless ``required_gb`` plus a margin fits in free memory.

    Args:
        required_gb: Peak memory of the step about to run, in GB.
        safety_margin: Fraction added on top of ``required_gb``.
        operation: Step name used in the error message.

    Returns:
        True when the step fits.

    Raises:
        MemoryError: With the required, padded and available sizes.
    """
    free_gb = psutil.virtual_memory().available / 1e9
    padded_gb = required_gb * (1 + safety_margin)

    if padded_gb > free_gb:
        raise MemoryError(
            f"Insufficient memory for {operation}. "
            f"Need {required_gb:.1f}GB ({padded_gb:.1f}GB with "
            f"{safety_margin:.0%} margin) but {free_gb:.1f}GB is free. "
            "Reduce the number of individuals or lower chunk_size."
        )

    logger.debug(
        f"Memory check for {operation}: {padded_gb:.2f}GB of {free_gb:.1f}GB free"
    )
    return True


class MemorySnapshot(NamedTuple):
    """Process and system memory at one point in time, in GB."""

    rss_gb: float
    available_gb: float
    total_gb: float
    percent_used: float


def get_memory_snapshot() -> MemorySnapshot:
    """Read RSS of this process and system-wide memory from psutil."""
    system = psutil.virtual_memory()
    used = system.total - system.available
    return MemorySnapshot(
        rss_gb=psutil.Process().memory_info().rss / 1e9,
        available_gb=system.available / 1e9,
        total_gb=system.total / 1e9,
        percent_used=100 * used / system.total,
    )


def log_memory_snapshot(label: str = "", level: str = "DEBUG") -> MemorySnapshot:
    """Log a memory snapshot, tagged with ``label`` when given.

    Args:
        label: Tag for the log line, e.g. "after_distances".
        level: loguru level name.

    Returns:
        The snapshot that was logged.
    """
    snapshot = get_memory_snapshot()
    tag = f" [{label}]" if label else ""
    logger.log(
        level,
        f"Memory{tag}: RSS={snapshot.rss_gb:.2f}GB, "
        f"free {snapshot.available_gb:.1f}/{snapshot.total_gb:.1f}GB "
        f"({snapshot.percent_used:.1f}% used)",
    )
    return snapshot
