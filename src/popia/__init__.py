"""popia: population index of association.

popia collects genotype observations (an individual carries an allele at a
locus, belongs to a group, or has metadata) into a deduplicated registry,
materializes them as an allele-count matrix, and computes the standardized
index of association, a multilocus linkage-disequilibrium statistic used to
tell clonal from freely recombining populations.

Example:
    >>> from popia import Sample, read_observations
    >>> sample = Sample()
    >>> sample.observe(read_observations("isolates.csv"))
    >>> result = sample.index_of_association()
    >>> print(f"I_A = {result.index_of_association:.3f}")
"""

import sys
from importlib.metadata import version

from loguru import logger

from popia.utils.logging import LOG_FORMAT

__version__ = version("popia")

# Users can override by calling logger.remove()/add() or setup_logging()
logger.remove()
logger.add(sys.stdout, level="INFO", format=LOG_FORMAT, colorize=True)

from popia.core import (  # noqa: E402
    AssociationConfig,
    ComputationError,
    IngestionError,
    PopiaError,
    ShapeError,
)
from popia.io import DelimitedConfig, read_observations  # noqa: E402
from popia.model import (  # noqa: E402
    Allele,
    AlleleMatrix,
    AlleleObservation,
    GroupObservation,
    MetaObservation,
    Observation,
    Sample,
)
from popia.stats import IndexOfAssociationSummary, index_of_association  # noqa: E402
from popia.utils import setup_logging  # noqa: E402

__all__ = [
    "Allele",
    "AlleleMatrix",
    "AlleleObservation",
    "AssociationConfig",
    "ComputationError",
    "DelimitedConfig",
    "GroupObservation",
    "IndexOfAssociationSummary",
    "IngestionError",
    "MetaObservation",
    "Observation",
    "PopiaError",
    "Sample",
    "ShapeError",
    "__version__",
    "index_of_association",
    "read_observations",
    "setup_logging",
]
