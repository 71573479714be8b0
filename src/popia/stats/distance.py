"""Pairwise allelic distances.

For every unordered pair of individuals (i, j) with i < j and every locus l,
D[p, l] is the L1 (Manhattan) distance between the two frequency vectors
restricted to locus l's columns. Pair p is numbered row-major over the upper
triangle: (0, 1), (0, 2), ..., (0, n-1), (1, 2), ...

Pairs are processed in chunks so that the gathered (chunk, n_columns)
difference block stays small. Each chunk is independent, and the JAX backend
compiles one kernel that evaluates a whole chunk at once.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import cache, partial

import numpy as np
from loguru import logger

from popia.core.backend import resolve_backend
from popia.core.progress import progress_chunks


def pair_indices(n_individuals: int) -> tuple[np.ndarray, np.ndarray]:
    """Row/column indices of all pairs i < j, in pair order.

    Example:
        >>> left, right = pair_indices(3)
        >>> list(zip(left.tolist(), right.tolist()))
        [(0, 1), (0, 2), (1, 2)]
    """
    return np.triu_indices(n_individuals, k=1)


def _numpy_chunk(
    freqs: np.ndarray,
    left: np.ndarray,
    right: np.ndarray,
    loci: Sequence[tuple[int, int]],
) -> np.ndarray:
    diffs = np.abs(freqs[left] - freqs[right])
    out = np.empty((len(left), len(loci)), dtype=np.float64)
    for idx, (start, end) in enumerate(loci):
        out[:, idx] = diffs[:, start:end].sum(axis=1)
    return out


@cache
def _jax_kernel():
    import jax
    import jax.numpy as jnp

    @partial(jax.jit, static_argnames=("n_loci",))
    def kernel(freqs, left, right, segment_ids, n_loci):
        diffs = jnp.abs(freqs[left] - freqs[right])
        # segment_sum reduces along axis 0: sum columns of the same locus
        return jax.ops.segment_sum(diffs.T, segment_ids, num_segments=n_loci).T

    return kernel


def pairwise_distances(
    freqs: np.ndarray,
    loci: Sequence[tuple[int, int]],
    chunk_size: int = 50_000,
    backend: str | None = None,
    show_progress: bool = True,
) -> np.ndarray:
    """Compute the (pairs x loci) allelic distance matrix.

    Args:
        freqs: (n_individuals, n_columns) frequency matrix.
        loci: Half-open column range of each locus.
        chunk_size: Pairs per chunk.
        backend: "numpy", "jax" or None for auto-detection.
        show_progress: Show a progress bar when there is more than one chunk.

    Returns:
        float64 matrix of shape (n * (n - 1) / 2, n_loci).
    """
    n_individuals = freqs.shape[0]
    n_loci = len(loci)
    left, right = pair_indices(n_individuals)
    n_pairs = len(left)

    distances = np.zeros((n_pairs, n_loci), dtype=np.float64)
    if n_pairs == 0 or n_loci == 0:
        return distances

    selected = resolve_backend(backend)
    n_chunks = (n_pairs + chunk_size - 1) // chunk_size
    logger.info(
        f"Distances: {n_individuals:,} individuals, {n_pairs:,} pairs x "
        f"{n_loci} loci, {n_chunks} chunk(s) of {chunk_size:,} ({selected})"
    )

    chunks = progress_chunks(
        n_pairs, chunk_size, desc="Distances", show=show_progress
    )

    if selected == "jax":
        import jax.numpy as jnp

        from popia.core.jax_config import ensure_jax_configured

        ensure_jax_configured()
        kernel = _jax_kernel()
        freqs_dev = jnp.asarray(freqs, dtype=jnp.float64)
        # columns outside every locus map to segment n_loci, which is dropped
        column_loci = np.full(freqs.shape[1], n_loci, dtype=np.int32)
        for idx, (lo, hi) in enumerate(loci):
            column_loci[lo:hi] = idx
        segment_ids = jnp.asarray(column_loci)
        for start, end in chunks:
            block = kernel(
                freqs_dev,
                jnp.asarray(left[start:end]),
                jnp.asarray(right[start:end]),
                segment_ids,
                n_loci=n_loci,
            )
            distances[start:end] = np.asarray(block)
    else:
        for start, end in chunks:
            distances[start:end] = _numpy_chunk(
                freqs, left[start:end], right[start:end], loci
            )

    return distances
