"""Configuration dataclasses for popia.

This module contains dataclasses that configure the index-of-association
computation: how empty loci are normalized, which expected-variance formula
is used, and how the pairwise-distance step is chunked and dispatched.
"""

from dataclasses import dataclass
from typing import Literal

ZeroSumPolicy = Literal["zero", "nan"]
VarianceVariant = Literal["reference", "corrected"]

ZERO_SUM_POLICIES: tuple[str, ...] = ("zero", "nan")
VARIANCE_VARIANTS: tuple[str, ...] = ("reference", "corrected")


@dataclass
class AssociationConfig:
    """Configuration for the index of association.

    Attributes:
        zero_sum: Policy for a locus where an individual has no recorded
            alleles. "zero" writes an all-zero frequency block, "nan"
            propagates NaN (the statistic then fails with ComputationError).
        variance: Expected-variance formula. "reference" subtracts the plain
            per-locus distance sum divided by the pair count (default).
            "corrected" subtracts the squared sum, mirroring the
            observed-variance formula.
        chunk_size: Number of individual pairs per distance chunk.
        backend: Distance backend ("numpy" or "jax"). None selects
            automatically (see popia.core.backend).
        check_memory: If True, check available memory before allocating the
            distance matrix and raise MemoryError if insufficient.
        show_progress: If True, show a progress bar when the distance step
            spans more than one chunk.
    """

    zero_sum: ZeroSumPolicy = "zero"
    variance: VarianceVariant = "reference"
    chunk_size: int = 50_000
    backend: str | None = None
    check_memory: bool = True
    show_progress: bool = True

    def __post_init__(self) -> None:
        if self.zero_sum not in ZERO_SUM_POLICIES:
            raise ValueError(
                f"zero_sum must be one of {ZERO_SUM_POLICIES}, got {self.zero_sum!r}"
            )
        if self.variance not in VARIANCE_VARIANTS:
            raise ValueError(
                f"variance must be one of {VARIANCE_VARIANTS}, got {self.variance!r}"
            )
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
