"""I/O modules for popia.

- delimited: CSV/TSV genotype tables streamed as observations
"""

from popia.io.delimited import ColumnRole, DelimitedConfig, read_observations

__all__ = [
    "ColumnRole",
    "DelimitedConfig",
    "read_observations",
]
