"""Entity model and registry.

- entities: Locus, Variation, Group, Individual and the Allele handle
- observation: Observation records consumed during ingestion
- sample: Sample registry with lazy matrix rebuild
- matrix: AlleleMatrix and its materializer
"""

from popia.model.entities import (
    Allele,
    Group,
    Individual,
    Locus,
    LocusHint,
    Variation,
)
from popia.model.matrix import AlleleMatrix, build_allele_matrix, locus_ranges
from popia.model.observation import (
    AlleleObservation,
    GroupObservation,
    MetaObservation,
    Observation,
)
from popia.model.sample import Sample

__all__ = [
    "Allele",
    "AlleleMatrix",
    "AlleleObservation",
    "Group",
    "GroupObservation",
    "Individual",
    "Locus",
    "LocusHint",
    "MetaObservation",
    "Observation",
    "Sample",
    "Variation",
    "build_allele_matrix",
    "locus_ranges",
]
