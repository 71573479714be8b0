"""Observation records consumed by ``Sample.observe``.

A producer (for example ``popia.io.read_observations``) yields one record per
fact about an individual. The record type decides how the sample applies it.
"""

from typing import NamedTuple, Union


class AlleleObservation(NamedTuple):
    """The individual carries one copy of ``variation`` at ``locus``."""

    individual: str
    locus: str
    variation: str


class GroupObservation(NamedTuple):
    """The individual belongs to ``group``."""

    individual: str
    group: str


class MetaObservation(NamedTuple):
    """The individual has metadata ``key`` set to ``value``."""

    individual: str
    key: str
    value: str


Observation = Union[AlleleObservation, GroupObservation, MetaObservation]
