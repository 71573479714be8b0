"""Core infrastructure for popia.

This package contains configuration, errors and runtime support:
- config: AssociationConfig dataclass
- errors: IngestionError, ShapeError, ComputationError
- backend: numpy/JAX distance backend selection
- memory: Pre-allocation memory checks
- progress: Chunked progress bars

JAX configuration lives in popia.core.jax_config and is imported lazily so
that the numpy backend works without JAX installed.
"""

from popia.core.backend import get_compute_backend, resolve_backend
from popia.core.config import AssociationConfig
from popia.core.errors import (
    ComputationError,
    IngestionError,
    PopiaError,
    ShapeError,
)
from popia.core.memory import (
    DistanceMemoryBreakdown,
    MemorySnapshot,
    check_memory_available,
    estimate_distance_memory,
    get_memory_snapshot,
    log_memory_snapshot,
)

__all__ = [
    "AssociationConfig",
    "ComputationError",
    "DistanceMemoryBreakdown",
    "IngestionError",
    "MemorySnapshot",
    "PopiaError",
    "ShapeError",
    "check_memory_available",
    "estimate_distance_memory",
    "get_compute_backend",
    "get_memory_snapshot",
    "log_memory_snapshot",
    "resolve_backend",
]
