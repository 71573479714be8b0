"""The sample registry.

A ``Sample`` owns every locus, variation, group and individual it has seen,
deduplicated by name, plus the allele matrix derived from them. Ingestion only
ever adds; nothing is removed.

Every mutation that can move a matrix row or column, or change a count, bumps
``Sample.version``. The matrix remembers the version it was built from, and
readers call ``flush()`` (a no-op when the versions agree) before using it.

A sample has a single owner. Ingestion mutates the collections the
statistics read, so callers that share a sample across threads must serialize
access themselves.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import numpy as np
from loguru import logger

from popia.core.config import ZeroSumPolicy
from popia.core.errors import IngestionError
from popia.model.entities import Allele, Group, Individual, Locus, Variation
from popia.model.matrix import AlleleMatrix, build_allele_matrix
from popia.model.observation import (
    AlleleObservation,
    GroupObservation,
    MetaObservation,
    Observation,
)

if TYPE_CHECKING:
    from popia.core.config import AssociationConfig
    from popia.stats.association import IndexOfAssociationSummary


class Sample:
    """Registry of loci, groups and individuals with a lazily built allele matrix.

    Example:
        >>> sample = Sample()
        >>> sample.observe([
        ...     AlleleObservation("ind1", "L1", "a"),
        ...     AlleleObservation("ind2", "L1", "b"),
        ... ])
        2
        >>> sample.loci_names()
        ['L1']
        >>> sample.matrix.counts.tolist()
        [[1, 0], [0, 1]]
    """

    def __init__(self) -> None:
        self._loci: dict[str, Locus] = {}
        self._groups: dict[str, Group] = {}
        self._individuals: dict[str, Individual] = {}
        self._version = 0
        self._matrix = AlleleMatrix(version=0)

    def __repr__(self) -> str:
        return (
            f"popia.Sample with {len(self._individuals)} individuals, "
            f"{len(self._loci)} loci, {self.n_alleles} alleles, "
            f"{len(self._groups)} groups"
        )

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        """Registry version, bumped by every layout- or count-changing mutation."""
        return self._version

    @property
    def stale(self) -> bool:
        """True when the allele matrix no longer reflects the registry."""
        return self._matrix.version != self._version

    def _touch(self) -> None:
        self._version += 1

    def locus(self, name: str) -> Locus:
        """Return the locus called ``name``, creating it if needed."""
        locus = self._loci.get(name)
        if locus is None:
            locus = Locus(name)
            self._loci[name] = locus
            self._touch()
        return locus

    def variation(self, locus: str, name: str) -> Variation:
        """Return a variation of a locus, creating both if needed."""
        variation, created = self.locus(locus)._get_or_add(name)
        if created:
            self._touch()
        return variation

    def allele(self, locus: str, variation: str) -> Allele:
        """Return the (locus, variation) handle, creating both if needed."""
        return Allele(self.locus(locus), self.variation(locus, variation))

    def group(self, name: str) -> Group:
        """Return the group called ``name``, creating it if needed."""
        group = self._groups.get(name)
        if group is None:
            group = Group(name)
            self._groups[name] = group
            self._touch()
        return group

    def individual(self, name: str) -> Individual:
        """Return the individual called ``name``, creating it if needed."""
        individual = self._individuals.get(name)
        if individual is None:
            individual = Individual(name)
            self._individuals[name] = individual
            self._touch()
        return individual

    def record(
        self, individual: str, locus: str, variation: str, count: int = 1
    ) -> Individual:
        """Add ``count`` copies of an allele to an individual's genome.

        Creates the individual, locus and variation as needed. Genomes are
        only changed through here so that the matrix is marked stale.

        Raises:
            ValueError: If ``count`` is negative.
        """
        allele = self.allele(locus, variation)
        owner = self.individual(individual)
        owner._record(allele, count)
        if count:
            self._touch()
        return owner

    def get_individual(self, name: str) -> Individual | None:
        """Look up an individual without creating it."""
        return self._individuals.get(name)

    def loci_names(self) -> list[str]:
        """Locus names in canonical order."""
        return sorted(self._loci)

    def variations(self, locus: str) -> list[str] | None:
        """Variation names of a locus in canonical order, None if unknown."""
        found = self._loci.get(locus)
        if found is None:
            return None
        return found.variation_names()

    def individual_names(self) -> list[str]:
        """Individual names in canonical (row) order."""
        return sorted(self._individuals)

    def group_names(self) -> list[str]:
        return sorted(self._groups)

    def members(self, group: str) -> list[str]:
        """Names of the individuals that belong to ``group``, sorted."""
        return sorted(
            ind.name
            for ind in self._individuals.values()
            if any(g.name == group for g in ind.groups)
        )

    @property
    def n_individuals(self) -> int:
        return len(self._individuals)

    @property
    def n_loci(self) -> int:
        return len(self._loci)

    @property
    def n_alleles(self) -> int:
        """Total number of distinct variations across all loci."""
        return sum(len(locus) for locus in self._loci.values())

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def apply(self, observation: Observation) -> None:
        """Apply a single observation.

        Raises:
            IngestionError: If ``observation`` is not an observation record.
        """
        if isinstance(observation, AlleleObservation):
            self.record(
                observation.individual, observation.locus, observation.variation
            )
        elif isinstance(observation, GroupObservation):
            group = self.group(observation.group)
            self.individual(observation.individual).groups.add(group)
        elif isinstance(observation, MetaObservation):
            individual = self.individual(observation.individual)
            individual.meta[observation.key] = observation.value
        else:
            raise IngestionError(
                f"Expected an observation record, got {type(observation).__name__}: "
                f"{observation!r}"
            )

    def observe(self, observations: Iterable[Observation | BaseException]) -> int:
        """Apply every observation from a producer, in order.

        The producer signals a bad record either by raising from its iterator
        or by yielding the exception instance. Either way ingestion stops at
        the first failure. Observations applied before it are kept, so the
        sample may hold a partial row after an error.

        Args:
            observations: Finite, single-pass iterable of observations.

        Returns:
            Number of observations applied.

        Raises:
            IngestionError: On the first producer failure or invalid record.
        """
        applied = 0
        iterator = iter(observations)
        while True:
            try:
                item = next(iterator)
            except StopIteration:
                break
            except IngestionError:
                raise
            except Exception as e:
                raise IngestionError(
                    f"Observation source failed after {applied} observations: {e}"
                ) from e

            if isinstance(item, IngestionError):
                raise item
            if isinstance(item, BaseException):
                raise IngestionError(
                    f"Observation source reported an error after {applied} "
                    f"observations: {item}"
                ) from item

            self.apply(item)
            applied += 1

        logger.debug(
            f"Observed {applied} records: {len(self._individuals)} individuals, "
            f"{len(self._loci)} loci, {self.n_alleles} alleles"
        )
        return applied

    # ------------------------------------------------------------------
    # Derived data
    # ------------------------------------------------------------------

    def flush(self) -> AlleleMatrix:
        """Rebuild the allele matrix if the registry changed since the last build.

        Called by every reader, so there is no need to call it explicitly
        after observing data.

        Returns:
            The current allele matrix.

        Raises:
            ShapeError: If the registry cannot be laid out as a matrix. The
                sample stays stale.
        """
        if not self.stale:
            logger.debug(f"Allele matrix up to date (version {self._version})")
            return self._matrix

        loci = [self._loci[name] for name in sorted(self._loci)]
        individuals = [self._individuals[name] for name in sorted(self._individuals)]
        self._matrix = build_allele_matrix(loci, individuals, version=self._version)
        return self._matrix

    @property
    def matrix(self) -> AlleleMatrix:
        """The up-to-date allele matrix (rebuilt on access when stale)."""
        return self.flush()

    def frequencies(self, zero_sum: ZeroSumPolicy = "zero") -> np.ndarray:
        """Per-locus relative allele frequencies of the current matrix."""
        from popia.stats.frequency import allele_frequencies

        matrix = self.flush()
        return allele_frequencies(matrix.counts, matrix.loci, zero_sum=zero_sum)

    def index_of_association(
        self, config: AssociationConfig | None = None
    ) -> IndexOfAssociationSummary:
        """Standardized index of association of this sample.

        See popia.stats.association.index_of_association.
        """
        from popia.stats.association import index_of_association

        return index_of_association(self, config)
