"""Per-locus allele frequencies.

Each row of the count matrix is split into its locus column ranges and every
range is divided by its own sum, so the frequencies of one individual at one
locus add up to 1.

An individual with no recorded allele at a locus has a zero row-sum there.
The ``zero_sum`` policy decides the outcome:
- "zero": the block is all zeros (the individual contributes distance 0 to
  another untyped individual and 1 to any typed one at that locus)
- "nan": the block is NaN, which propagates into any statistic using it
"""

from collections.abc import Sequence

import numpy as np
from loguru import logger

from popia.core.config import ZERO_SUM_POLICIES


def allele_frequencies(
    counts: np.ndarray,
    loci: Sequence[tuple[int, int]],
    zero_sum: str = "zero",
) -> np.ndarray:
    """Normalize allele counts to relative frequencies per locus.

    Args:
        counts: (n_individuals, n_columns) allele-count matrix.
        loci: Half-open column range of each locus.
        zero_sum: Policy for a zero row-sum block, "zero" or "nan".

    Returns:
        float64 matrix with the same shape as ``counts``.

    Raises:
        ValueError: If ``zero_sum`` is unknown or a locus range falls outside
            the matrix.

    Example:
        >>> counts = np.array([[1, 3, 2], [0, 0, 5]])
        >>> allele_frequencies(counts, [(0, 2), (2, 3)]).tolist()
        [[0.25, 0.75, 1.0], [0.0, 0.0, 1.0]]
    """
    if zero_sum not in ZERO_SUM_POLICIES:
        raise ValueError(
            f"zero_sum must be one of {ZERO_SUM_POLICIES}, got {zero_sum!r}"
        )

    n_columns = counts.shape[1]
    freqs = np.zeros(counts.shape, dtype=np.float64)
    n_empty = 0

    for start, end in loci:
        if not 0 <= start <= end <= n_columns:
            raise ValueError(
                f"Locus range ({start}, {end}) outside matrix with {n_columns} columns"
            )
        block = counts[:, start:end].astype(np.float64)
        sums = block.sum(axis=1, keepdims=True)
        empty = sums[:, 0] == 0
        n_empty += int(empty.sum())

        np.divide(block, sums, out=freqs[:, start:end], where=sums > 0)
        if zero_sum == "nan":
            freqs[empty, start:end] = np.nan

    if n_empty and zero_sum == "nan":
        logger.warning(
            f"{n_empty} individual/locus blocks have no alleles; "
            "their frequencies are NaN"
        )
    elif n_empty:
        logger.debug(f"{n_empty} individual/locus blocks have no alleles (set to 0)")

    return freqs
