"""Pytest fixtures for popia test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from popia import AlleleObservation, AssociationConfig, Sample

# =============================================================================
# Test Tier System
# =============================================================================
#
# tier0 - Fast unit tests: registry, matrix, frequencies, distances, config
#   Run: pytest -m tier0
#
# tier1 - End-to-end tests: delimited table -> Sample -> index of association
#   Run: pytest -m tier1
#
# slow - Property tests with many hypothesis examples
#
# Quick reference:
#   pytest -m tier0             # Fast tests only
#   pytest -m "not slow"        # Skip long property runs
#   pytest                      # All tests
# =============================================================================


def alleles(rows: list[tuple[str, str, str]]) -> list[AlleleObservation]:
    """Build allele observations from (individual, locus, variation) triples."""
    return [AlleleObservation(ind, locus, var) for ind, locus, var in rows]


@pytest.fixture
def numpy_config() -> AssociationConfig:
    """Association config pinned to the numpy backend, no progress output."""
    return AssociationConfig(backend="numpy", show_progress=False)


@pytest.fixture
def two_locus_sample() -> Sample:
    """Three individuals over two biallelic loci.

    Distances per pair (L1, L2): (a,b)=(0,2), (a,c)=(2,0), (b,c)=(2,2).
    """
    sample = Sample()
    sample.observe(
        alleles(
            [
                ("a", "L1", "1"),
                ("a", "L2", "1"),
                ("b", "L1", "1"),
                ("b", "L2", "2"),
                ("c", "L1", "2"),
                ("c", "L2", "1"),
            ]
        )
    )
    return sample


@pytest.fixture
def linked_sample() -> Sample:
    """Two clones (a,b) and (c,d) perfectly linked across two loci."""
    sample = Sample()
    rows = []
    for ind, allele in [("a", "x"), ("b", "x"), ("c", "y"), ("d", "y")]:
        rows.append((ind, "L1", allele))
        rows.append((ind, "L2", allele))
    sample.observe(alleles(rows))
    return sample


@pytest.fixture
def genotype_table(tmp_path: Path) -> Path:
    """Small CSV table with name, group, presence and meta columns."""
    path = tmp_path / "isolates.csv"
    path.write_text(
        "id,site,L1,L2,resistant,host\n"
        "iso1,farmA,12/14,7,Y,cow\n"
        "iso2,farmA,12,7/9,N,cow\n"
        "iso3,farmB,14,9,Y,sheep\n"
    )
    return path
