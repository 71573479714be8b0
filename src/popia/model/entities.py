"""Entities of the sample registry.

Every entity is identified by its name: two loci with the same name are the
same locus, whichever object holds it. Entities are created and mutated only
by their owning ``Sample``; callers receive references as handles.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


@dataclass(frozen=True)
class Variation:
    """One observed state (allele) at a locus."""

    name: str


class LocusHint(Enum):
    """Marker classification. Informational only."""

    CLASSICAL = "classical"
    MICROSATELLITE = "microsatellite"


@dataclass(eq=False)
class Locus:
    """A marker and the variations observed at it.

    Attributes:
        name: Locus name (identity).
        hint: Marker classification, not used by any computation.
    """

    name: str
    hint: LocusHint = LocusHint.MICROSATELLITE
    _variations: dict[str, Variation] = field(default_factory=dict, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Locus):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __len__(self) -> int:
        return len(self._variations)

    def __contains__(self, name: object) -> bool:
        return name in self._variations

    def variation_names(self) -> list[str]:
        """Variation names in canonical (sorted) order."""
        return sorted(self._variations)

    def variations(self) -> list[Variation]:
        """Variations in canonical (sorted) order."""
        return [self._variations[name] for name in sorted(self._variations)]

    def get(self, name: str) -> Variation | None:
        return self._variations.get(name)

    def _get_or_add(self, name: str) -> tuple[Variation, bool]:
        variation = self._variations.get(name)
        if variation is not None:
            return variation, False
        variation = Variation(name)
        self._variations[name] = variation
        return variation, True


class Allele(NamedTuple):
    """Handle for a (locus, variation) pair; the key of a genome."""

    locus: Locus
    variation: Variation


@dataclass(frozen=True)
class Group:
    """A named population, site or cohort an individual can belong to."""

    name: str


@dataclass(eq=False)
class Individual:
    """A sampled organism.

    Attributes:
        name: Individual name (identity).
        genome: Allele counts. Several variations may be recorded for the
            same locus, and the same allele may be recorded more than once.
        groups: Group memberships.
        meta: Free-form metadata, last write wins.
    """

    name: str
    genome: Counter[Allele] = field(default_factory=Counter)
    groups: set[Group] = field(default_factory=set)
    meta: dict[str, str] = field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Individual):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def _record(self, allele: Allele, count: int = 1) -> None:
        """Add ``count`` copies of ``allele``. Use ``Sample.record`` from outside."""
        if count < 0:
            raise ValueError(f"Allele count must be non-negative, got {count}")
        self.genome[allele] += count

    def count(self, locus: str, variation: str) -> int:
        """Number of recorded copies of a variation, 0 if never observed."""
        return self.genome[Allele(Locus(locus), Variation(variation))]

    def locus_total(self, locus: str) -> int:
        """Total allele copies recorded at a locus."""
        return sum(
            n for allele, n in self.genome.items() if allele.locus.name == locus
        )

    def group_names(self) -> list[str]:
        return sorted(group.name for group in self.groups)
