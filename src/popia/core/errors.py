"""Exception types raised by popia.

All errors derive from ``ValueError`` so callers that already guard against
bad input with ``except ValueError`` keep working.
"""


class PopiaError(ValueError):
    """Base class for popia errors."""


class IngestionError(PopiaError):
    """An observation could not be read or applied.

    Raised by ``Sample.observe`` when the producer fails or yields something
    that is not an observation. The sample is left partially updated.
    """


class ShapeError(PopiaError):
    """Registry dimensions cannot be reshaped into an allele matrix."""


class ComputationError(PopiaError):
    """Statistic inputs are degenerate (too few individuals, no loci, zero variance)."""
