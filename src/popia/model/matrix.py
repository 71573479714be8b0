"""Dense allele-count matrix materialized from a sample registry.

Layout:
    rows    = individuals sorted by name
    columns = loci sorted by name, each expanded into its variations sorted
              by name

``AlleleMatrix.loci`` records the half-open column range of every locus in
that order. The matrix is a cache: it is rebuilt wholesale from the registry
whenever the registry version changes, never patched in place, since a new
locus or variation can shift every column after it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from loguru import logger

from popia.core.errors import ShapeError
from popia.model.entities import Individual, Locus

COUNT_DTYPE = np.uint32


@dataclass
class AlleleMatrix:
    """Allele counts with row/column labels.

    Attributes:
        counts: (n_individuals, n_columns) uint32 matrix.
        loci: Per-locus (start, end) column ranges in canonical locus order.
        locus_names: Locus names, parallel to ``loci``.
        columns: (locus, variation) name pair for each column.
        individuals: Individual names, one per row.
        version: Registry version the matrix was built from.
    """

    counts: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 0), dtype=COUNT_DTYPE)
    )
    loci: list[tuple[int, int]] = field(default_factory=list)
    locus_names: list[str] = field(default_factory=list)
    columns: list[tuple[str, str]] = field(default_factory=list)
    individuals: list[str] = field(default_factory=list)
    version: int = 0

    @property
    def n_individuals(self) -> int:
        return self.counts.shape[0]

    @property
    def n_columns(self) -> int:
        return self.counts.shape[1]

    @property
    def n_loci(self) -> int:
        return len(self.loci)

    def locus_range(self, name: str) -> tuple[int, int]:
        """Column range of a locus.

        Raises:
            KeyError: If the locus is not part of the matrix.
        """
        try:
            return self.loci[self.locus_names.index(name)]
        except ValueError:
            raise KeyError(name) from None


def locus_ranges(loci: Sequence[Locus]) -> list[tuple[int, int]]:
    """Half-open column ranges from cumulative variation counts."""
    ranges = []
    start = 0
    for locus in loci:
        end = start + len(locus)
        ranges.append((start, end))
        start = end
    return ranges


def build_allele_matrix(
    loci: Sequence[Locus],
    individuals: Sequence[Individual],
    version: int = 0,
) -> AlleleMatrix:
    """Materialize the allele-count matrix.

    Args:
        loci: Loci in canonical order.
        individuals: Individuals in canonical order.
        version: Registry version to stamp on the result.

    Returns:
        A new AlleleMatrix.

    Raises:
        ShapeError: If there are individuals but no columns, or columns but
            no individuals.
    """
    ranges = locus_ranges(loci)
    n_columns = ranges[-1][1] if ranges else 0
    n_individuals = len(individuals)

    if (n_individuals == 0) != (n_columns == 0):
        raise ShapeError(
            f"Cannot shape allele matrix with {n_individuals} individuals "
            f"and {n_columns} variation columns"
        )

    columns: list[tuple[str, str]] = []
    column_index: dict[tuple[str, str], int] = {}
    for locus in loci:
        for variation in locus.variations():
            column_index[(locus.name, variation.name)] = len(columns)
            columns.append((locus.name, variation.name))

    counts = np.zeros((n_individuals, n_columns), dtype=COUNT_DTYPE)
    for row, individual in enumerate(individuals):
        for allele, n in individual.genome.items():
            col = column_index.get((allele.locus.name, allele.variation.name))
            if col is None:
                raise ShapeError(
                    f"Individual {individual.name!r} carries allele "
                    f"{allele.locus.name}:{allele.variation.name} "
                    "that is not in the registry"
                )
            counts[row, col] = n

    logger.info(
        f"Allele matrix built: {n_individuals} individuals x {n_columns} "
        f"variations across {len(ranges)} loci (version {version})"
    )

    return AlleleMatrix(
        counts=counts,
        loci=ranges,
        locus_names=[locus.name for locus in loci],
        columns=columns,
        individuals=[individual.name for individual in individuals],
        version=version,
    )
