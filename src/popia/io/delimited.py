"""Delimited-text genotype tables.

Reads a CSV/TSV table with one row per individual and turns every cell into
observations for ``Sample.observe``.

Column roles (with a header row):
- name column: the individual's name (default: 0-based data row index)
- group column: the cell value is a group the individual belongs to
- group-presence columns: the header is a group name; the individual belongs
  to it when the cell equals ``group_presence`` (default "Y")
- meta columns: the header is the metadata key, the cell its value
- every other column is a locus named by its header

Locus cells hold one or more alleles joined by ``separator`` (default "/"),
e.g. "12/14" records alleles 12 and 14. An empty cell records nothing.
Without a header row every column is a locus named by its 0-based index.

Example table:
```
id,site,L1,L2
iso1,farmA,12/14,7
iso2,farmB,12,7/9
```
"""

from __future__ import annotations

import csv
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TextIO

from popia.core.errors import IngestionError
from popia.model.observation import (
    AlleleObservation,
    GroupObservation,
    MetaObservation,
    Observation,
)


class ColumnRole(Enum):
    NAME = "name"
    LOCUS = "locus"
    GROUP = "group"
    GROUP_PRESENCE = "group_presence"
    META = "meta"


@dataclass
class DelimitedConfig:
    """Layout of a delimited genotype table.

    Attributes:
        headers: First row holds column names.
        delimiter: Field delimiter (single character).
        separator: Separator between alleles inside a locus cell.
        name_field: Header of the column holding individual names.
        group_field: Header of the column whose values are group names.
        group_fields: Headers of presence/absence group columns.
        group_presence: Cell value marking membership in a presence column.
        meta_fields: Headers of metadata columns.
    """

    headers: bool = True
    delimiter: str = ","
    separator: str = "/"
    name_field: str | None = None
    group_field: str | None = None
    group_fields: frozenset[str] = field(default_factory=frozenset)
    group_presence: str = "Y"
    meta_fields: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1:
            raise ValueError(
                f"delimiter must be a single character, got {self.delimiter!r}"
            )
        if not self.separator:
            raise ValueError("separator must not be empty")
        self.group_fields = frozenset(self.group_fields)
        self.meta_fields = frozenset(self.meta_fields)

    def role(self, header: str) -> ColumnRole:
        """Classify a column by its header."""
        if self.name_field is not None and header == self.name_field:
            return ColumnRole.NAME
        if header in self.group_fields:
            return ColumnRole.GROUP_PRESENCE
        if self.group_field is not None and header == self.group_field:
            return ColumnRole.GROUP
        if header in self.meta_fields:
            return ColumnRole.META
        return ColumnRole.LOCUS


def _row_observations(
    row: list[str],
    columns: list[tuple[ColumnRole, str]],
    default_name: str,
    config: DelimitedConfig,
) -> list[Observation]:
    individual = default_name
    for (role, _header), cell in zip(columns, row):
        if role is ColumnRole.NAME:
            individual = cell

    observations: list[Observation] = []
    for (role, header), cell in zip(columns, row):
        if role is ColumnRole.LOCUS:
            for part in cell.split(config.separator):
                part = part.strip()
                if part:
                    observations.append(AlleleObservation(individual, header, part))
        elif role is ColumnRole.GROUP:
            if cell:
                observations.append(GroupObservation(individual, cell))
        elif role is ColumnRole.GROUP_PRESENCE:
            if cell == config.group_presence:
                observations.append(GroupObservation(individual, header))
        elif role is ColumnRole.META:
            observations.append(MetaObservation(individual, header, cell))
    return observations


def _iter_table(handle: TextIO, config: DelimitedConfig) -> Iterator[Observation]:
    reader = csv.reader(handle, delimiter=config.delimiter)

    columns: list[tuple[ColumnRole, str]] | None = None
    if config.headers:
        try:
            header = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise IngestionError(f"Cannot parse header row: {e}") from e
        columns = [(config.role(name), name) for name in header]

    index = 0
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise IngestionError(f"Line {reader.line_num}: {e}") from e

        if not row:
            continue

        if columns is None:
            row_columns = [(ColumnRole.LOCUS, str(i)) for i in range(len(row))]
        elif len(row) != len(columns):
            raise IngestionError(
                f"Line {reader.line_num} has {len(row)} fields "
                f"but the header has {len(columns)}"
            )
        else:
            row_columns = columns

        yield from _row_observations(row, row_columns, str(index), config)
        index += 1


def read_observations(
    source: str | Path | TextIO,
    config: DelimitedConfig | None = None,
) -> Iterator[Observation]:
    """Stream observations from a delimited genotype table.

    The table is read lazily, one row at a time, so the result is a
    single-pass iterator suitable for ``Sample.observe``.

    Args:
        source: Path to the table, or an open text stream.
        config: Table layout. Defaults to DelimitedConfig().

    Yields:
        Observations in row order, then column order within a row.

    Raises:
        FileNotFoundError: If ``source`` is a path that does not exist.
        IngestionError: If a row cannot be parsed or its field count differs
            from the header's.

    Example:
        >>> import io
        >>> from popia import Sample
        >>> sample = Sample()
        >>> sample.observe(read_observations(io.StringIO("L1\\n0/1\\n2\\n")))
        3
        >>> sample.variations("L1")
        ['0', '1', '2']
    """
    if config is None:
        config = DelimitedConfig()

    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Genotype table not found: {path}")
        return _read_path(path, config)
    return _iter_table(source, config)


def _read_path(path: Path, config: DelimitedConfig) -> Iterator[Observation]:
    with open(path, newline="") as f:
        yield from _iter_table(f, config)
