"""Standardized index of association.

The index of association (I_A) compares the variance of the total allelic
distance between pairs of individuals with the variance expected when loci
are independent:

    T_p = sum_l D[p, l]
    V_O = (sum_p T_p^2 - (sum_p T_p)^2 / P) / P
    I_A = V_O / V_E - 1

where D is the (pairs x loci) distance matrix from popia.stats.distance and
P the number of pairs. I_A is close to 0 under free recombination and
positive when alleles are linked across loci, as in clonal populations.

Two expected-variance formulas are available:

- "reference": V_E = sum_l (sum_p D[p,l]^2 - sum_p D[p,l] / P) / P
  Subtracts the plain per-locus sum. This is the default.
- "corrected": V_E = sum_l (sum_p D[p,l]^2 - (sum_p D[p,l])^2 / P) / P
  Per-locus variance with the same form as V_O.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from loguru import logger

from popia.core.config import AssociationConfig
from popia.core.errors import ComputationError
from popia.core.memory import (
    check_memory_available,
    estimate_distance_memory,
    log_memory_snapshot,
)
from popia.stats.distance import pairwise_distances
from popia.stats.frequency import allele_frequencies

if TYPE_CHECKING:
    from popia.model.sample import Sample


@dataclass(frozen=True)
class IndexOfAssociationSummary:
    """Result of an index-of-association computation.

    Attributes:
        index_of_association: I_A = V_O / V_E - 1.
        observed_variance: V_O.
        expected_variance: V_E under the selected formula.
        n_individuals: Number of individuals (matrix rows).
        n_loci: Number of loci.
        n_pairs: Number of individual pairs.
        variance: Name of the expected-variance formula used.
    """

    index_of_association: float
    observed_variance: float
    expected_variance: float
    n_individuals: int
    n_loci: int
    n_pairs: int
    variance: str = "reference"


def observed_variance(distances: np.ndarray) -> float:
    """Variance of the per-pair total distance, V_O."""
    n_pairs = distances.shape[0]
    totals = distances.sum(axis=1)
    return float((np.sum(totals**2) - totals.sum() ** 2 / n_pairs) / n_pairs)


def _reference_expected_variance(distances: np.ndarray) -> float:
    n_pairs = distances.shape[0]
    per_locus = (
        np.sum(distances**2, axis=0) - distances.sum(axis=0) / n_pairs
    ) / n_pairs
    return float(per_locus.sum())


def _corrected_expected_variance(distances: np.ndarray) -> float:
    n_pairs = distances.shape[0]
    per_locus = (
        np.sum(distances**2, axis=0) - distances.sum(axis=0) ** 2 / n_pairs
    ) / n_pairs
    return float(per_locus.sum())


EXPECTED_VARIANCE: dict[str, Callable[[np.ndarray], float]] = {
    "reference": _reference_expected_variance,
    "corrected": _corrected_expected_variance,
}


def expected_variance(distances: np.ndarray, variance: str = "reference") -> float:
    """Sum of per-locus distance variances, V_E.

    Raises:
        ValueError: If ``variance`` names an unknown formula.
    """
    try:
        formula = EXPECTED_VARIANCE[variance]
    except KeyError:
        raise ValueError(
            f"Unknown expected-variance formula {variance!r}. "
            f"Use one of {tuple(EXPECTED_VARIANCE)}."
        ) from None
    return formula(distances)


def summarize_distances(
    distances: np.ndarray,
    n_individuals: int,
    variance: str = "reference",
) -> IndexOfAssociationSummary:
    """Compute I_A from a precomputed (pairs x loci) distance matrix.

    Raises:
        ComputationError: If there are no pairs or loci, or if V_O or V_E is
            not finite, or V_E is zero (I_A undefined).
    """
    n_pairs, n_loci = distances.shape
    if n_pairs == 0:
        raise ComputationError("Index of association needs at least one pair")
    if n_loci == 0:
        raise ComputationError("Index of association needs at least one locus")

    v_obs = observed_variance(distances)
    v_exp = expected_variance(distances, variance)

    if not (np.isfinite(v_obs) and np.isfinite(v_exp)):
        raise ComputationError(
            f"Variances are not finite (V_O={v_obs}, V_E={v_exp}); "
            "frequencies contain NaN for individuals untyped at some locus"
        )
    if v_exp == 0.0:
        raise ComputationError(
            f"Expected variance is zero (V_O={v_obs}); the index of association "
            "is undefined, typically because all individuals are identical"
        )

    return IndexOfAssociationSummary(
        index_of_association=v_obs / v_exp - 1.0,
        observed_variance=v_obs,
        expected_variance=v_exp,
        n_individuals=n_individuals,
        n_loci=n_loci,
        n_pairs=n_pairs,
        variance=variance,
    )


def index_of_association(
    sample: Sample,
    config: AssociationConfig | None = None,
) -> IndexOfAssociationSummary:
    """Compute the standardized index of association of a sample.

    Rebuilds the sample's allele matrix first if it is stale.

    Pipeline:
    1. Flush the allele matrix
    2. Normalize counts to per-locus frequencies
    3. Compute pairwise L1 distances per locus
    4. Compare observed and expected variance of the total distance

    Args:
        sample: Sample to analyze.
        config: Computation settings. Defaults to AssociationConfig().

    Returns:
        IndexOfAssociationSummary with I_A and its variance components.

    Raises:
        ShapeError: If the sample cannot be laid out as a matrix.
        ComputationError: If there are fewer than two individuals, no loci,
            a locus without variations, or the expected variance is zero or
            not finite.
        MemoryError: If config.check_memory is set and the distance matrix
            would not fit in available memory.

    Example:
        >>> from popia import AlleleObservation, Sample
        >>> sample = Sample()
        >>> sample.observe(
        ...     AlleleObservation(ind, locus, allele)
        ...     for ind, locus, allele in [
        ...         ("a", "L1", "1"), ("a", "L2", "1"),
        ...         ("b", "L1", "1"), ("b", "L2", "2"),
        ...         ("c", "L1", "2"), ("c", "L2", "1"),
        ...     ]
        ... )
        6
        >>> round(index_of_association(sample).index_of_association, 4)
        -0.8
    """
    if config is None:
        config = AssociationConfig()

    t_start = time.perf_counter()
    matrix = sample.flush()

    if matrix.n_individuals < 2:
        raise ComputationError(
            f"Index of association needs at least 2 individuals, "
            f"got {matrix.n_individuals}"
        )
    if matrix.n_loci == 0:
        raise ComputationError("Index of association needs at least one locus")
    empty = [
        name
        for name, (start, end) in zip(matrix.locus_names, matrix.loci)
        if end == start
    ]
    if empty:
        raise ComputationError(f"Loci without variations: {', '.join(empty)}")

    if config.check_memory:
        est = estimate_distance_memory(
            matrix.n_individuals,
            matrix.n_loci,
            matrix.n_columns,
            chunk_size=config.chunk_size,
        )
        check_memory_available(
            est.total_gb,
            safety_margin=0.1,
            operation=f"index of association (peak: {est.total_gb:.2f}GB)",
        )

    freqs = allele_frequencies(matrix.counts, matrix.loci, zero_sum=config.zero_sum)
    log_memory_snapshot("before_distances")
    distances = pairwise_distances(
        freqs,
        matrix.loci,
        chunk_size=config.chunk_size,
        backend=config.backend,
        show_progress=config.show_progress,
    )
    log_memory_snapshot("after_distances")
    summary = summarize_distances(distances, matrix.n_individuals, config.variance)

    elapsed = time.perf_counter() - t_start
    logger.info(
        f"Index of association: I_A={summary.index_of_association:.6f} "
        f"(V_O={summary.observed_variance:.6g}, V_E={summary.expected_variance:.6g}, "
        f"{summary.variance}) over {summary.n_pairs:,} pairs in {elapsed:.2f}s"
    )
    return summary
