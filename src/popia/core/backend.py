"""Distance backend detection and dispatch.

popia computes pairwise allelic distances with one of two backends:

- jax: jit-compiled chunk kernel. Runs on whatever device JAX selects and
  parallelizes the per-pair work. Preferred when JAX is importable.

- numpy: vectorized numpy chunk kernel. Always available.

Both backends enumerate pairs in the same order and agree to floating-point
tolerance. Selection is automatic but can be overridden via the POPIA_BACKEND
environment variable or AssociationConfig.backend.
"""

import os
from functools import cache
from typing import Literal

from loguru import logger

Backend = Literal["numpy", "jax"]

BACKENDS: tuple[str, ...] = ("numpy", "jax")


def normalize_backend_name(value: str) -> str:
    """Normalize backend name to canonical form.

    Args:
        value: Backend name from user input or environment.

    Returns:
        Lower-cased, stripped backend name.

    Raises:
        ValueError: If the name is not a known backend or "auto".

    Examples:
        >>> normalize_backend_name(" NumPy ")
        'numpy'
    """
    normalized = value.lower().strip()
    if normalized not in (*BACKENDS, "auto"):
        raise ValueError(
            f"Unknown backend {value!r}. Use one of {BACKENDS} or 'auto'."
        )
    return normalized


def is_jax_available() -> bool:
    """Check if JAX can be imported."""
    try:
        import jax  # noqa: F401

        return True
    except ImportError:
        return False


@cache
def get_compute_backend() -> Backend:
    """Detect the distance backend to use.

    Priority:
    1. POPIA_BACKEND environment variable ('numpy', 'jax', 'auto')
    2. Auto-selection: jax when importable, numpy otherwise

    Returns:
        Backend identifier ('numpy' or 'jax').

    Raises:
        ValueError: If POPIA_BACKEND names an unknown backend, or requests
            'jax' while JAX is not installed.
    """
    override = os.environ.get("POPIA_BACKEND", "").strip()
    if override:
        override = normalize_backend_name(override)
        if override == "jax" and not is_jax_available():
            raise ValueError("POPIA_BACKEND=jax but JAX is not installed")
        if override in BACKENDS:
            logger.debug(f"Backend override via POPIA_BACKEND={override}")
            return override

    if is_jax_available():
        logger.debug("Using jax backend (default)")
        return "jax"

    logger.debug("JAX not installed, using numpy backend")
    return "numpy"


def resolve_backend(requested: str | None) -> Backend:
    """Resolve an explicit backend request, falling back to auto-detection."""
    if requested is None:
        return get_compute_backend()
    name = normalize_backend_name(requested)
    if name == "auto":
        return get_compute_backend()
    return name
