"""Population statistics.

Key functions:
- allele_frequencies: Per-locus normalization of allele counts
- pairwise_distances: Per-locus L1 distances between all pairs of individuals
- index_of_association: Standardized index of association of a Sample
- summarize_distances: I_A from a precomputed distance matrix
"""

from popia.stats.association import (
    EXPECTED_VARIANCE,
    IndexOfAssociationSummary,
    expected_variance,
    index_of_association,
    observed_variance,
    summarize_distances,
)
from popia.stats.distance import pair_indices, pairwise_distances
from popia.stats.frequency import allele_frequencies

__all__ = [
    "EXPECTED_VARIANCE",
    "IndexOfAssociationSummary",
    "allele_frequencies",
    "expected_variance",
    "index_of_association",
    "observed_variance",
    "pair_indices",
    "pairwise_distances",
    "summarize_distances",
]
