"""Tests for the Sample registry: get-or-create, ingestion and versioning."""

import pytest

from popia import (
    AlleleObservation,
    GroupObservation,
    IngestionError,
    MetaObservation,
    Sample,
)
from popia.model import Allele, Locus, LocusHint, Variation


def alleles(rows):
    return [AlleleObservation(ind, locus, var) for ind, locus, var in rows]


@pytest.mark.tier0
class TestGetOrCreate:
    """Tests for idempotent entity creation."""

    def test_locus_is_idempotent(self):
        sample = Sample()
        first = sample.locus("L1")
        second = sample.locus("L1")
        assert first is second
        assert sample.loci_names() == ["L1"]

    def test_new_locus_has_microsatellite_hint(self):
        sample = Sample()
        assert sample.locus("L1").hint is LocusHint.MICROSATELLITE

    def test_variation_creates_locus(self):
        sample = Sample()
        sample.variation("L1", "a")
        assert sample.loci_names() == ["L1"]
        assert sample.variations("L1") == ["a"]

    def test_allele_returns_handle_pair(self):
        sample = Sample()
        allele = sample.allele("L1", "a")
        assert isinstance(allele, Allele)
        assert allele.locus.name == "L1"
        assert allele.variation.name == "a"
        assert sample.allele("L1", "a") == allele

    def test_handles_compare_by_name(self):
        assert Locus("L1") == Locus("L1")
        assert hash(Locus("L1")) == hash(Locus("L1"))
        assert Variation("a") == Variation("a")

    def test_group_is_idempotent(self):
        sample = Sample()
        assert sample.group("G1") is sample.group("G1")
        assert sample.group_names() == ["G1"]

    def test_variations_unknown_locus_is_none(self):
        assert Sample().variations("missing") is None


@pytest.mark.tier0
class TestCanonicalOrder:
    """Tests for name-sorted output regardless of creation order."""

    def test_loci_sorted(self):
        sample = Sample()
        for name in ["L3", "L1", "L2"]:
            sample.locus(name)
        assert sample.loci_names() == ["L1", "L2", "L3"]

    def test_variations_sorted(self):
        sample = Sample()
        for name in ["c", "a", "b", "a"]:
            sample.variation("L1", name)
        assert sample.variations("L1") == ["a", "b", "c"]

    def test_individuals_sorted(self):
        sample = Sample()
        sample.observe(alleles([("z", "L1", "a"), ("m", "L1", "a"), ("b", "L1", "a")]))
        assert sample.individual_names() == ["b", "m", "z"]


@pytest.mark.tier0
class TestApply:
    """Tests for applying individual observations."""

    def test_two_individuals_one_locus_layout(self):
        """Two individuals, one locus, two alleles."""
        sample = Sample()
        sample.observe(alleles([("ind1", "L1", "a"), ("ind2", "L1", "b")]))

        assert sample.loci_names() == ["L1"]
        assert sample.variations("L1") == ["a", "b"]
        assert sample.matrix.counts.tolist() == [[1, 0], [0, 1]]

    def test_repeated_allele_increments_count(self):
        sample = Sample()
        sample.observe(alleles([("ind1", "L1", "a")] * 3))
        assert sample.individual("ind1").count("L1", "a") == 3

    def test_multiple_alleles_per_locus(self):
        sample = Sample()
        sample.observe(alleles([("ind1", "L1", "a"), ("ind1", "L1", "b")]))
        individual = sample.individual("ind1")
        assert individual.count("L1", "a") == 1
        assert individual.count("L1", "b") == 1
        assert individual.locus_total("L1") == 2

    def test_group_and_meta_create_individual(self):
        """Group and meta observations create the individual."""
        sample = Sample()
        sample.observe(
            [GroupObservation("ind1", "G1"), MetaObservation("ind1", "site", "farmA")]
        )

        individual = sample.get_individual("ind1")
        assert individual is not None
        assert individual.group_names() == ["G1"]
        assert individual.meta == {"site": "farmA"}
        assert not individual.genome

    def test_group_membership_idempotent(self):
        sample = Sample()
        sample.observe([GroupObservation("ind1", "G1")] * 2)
        assert len(sample.individual("ind1").groups) == 1
        assert sample.members("G1") == ["ind1"]

    def test_meta_last_write_wins(self):
        sample = Sample()
        sample.observe(
            [
                MetaObservation("ind1", "site", "farmA"),
                MetaObservation("ind1", "site", "farmB"),
            ]
        )
        assert sample.individual("ind1").meta["site"] == "farmB"

    def test_apply_rejects_non_observation(self):
        with pytest.raises(IngestionError, match="Expected an observation record"):
            Sample().apply(("ind1", "L1", "a"))

    def test_get_individual_does_not_create(self):
        sample = Sample()
        assert sample.get_individual("ghost") is None
        assert sample.n_individuals == 0


@pytest.mark.tier0
class TestObserve:
    """Tests for stream ingestion and fail-fast behavior."""

    def test_returns_applied_count(self):
        sample = Sample()
        assert sample.observe(alleles([("a", "L1", "x"), ("b", "L1", "y")])) == 2

    def test_accepts_generator(self):
        sample = Sample()
        gen = (AlleleObservation(f"ind{i}", "L1", str(i % 2)) for i in range(5))
        assert sample.observe(gen) == 5
        assert sample.n_individuals == 5

    def test_producer_exception_halts_without_rollback(self):
        def producer():
            yield AlleleObservation("ind1", "L1", "a")
            raise RuntimeError("bad row")

        sample = Sample()
        with pytest.raises(IngestionError, match="bad row") as excinfo:
            sample.observe(producer())

        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert sample.individual_names() == ["ind1"]

    def test_yielded_exception_halts(self):
        error = ValueError("unparseable")
        items = [
            AlleleObservation("ind1", "L1", "a"),
            error,
            AlleleObservation("ind2", "L1", "b"),
        ]

        sample = Sample()
        with pytest.raises(IngestionError, match="unparseable") as excinfo:
            sample.observe(items)

        assert excinfo.value.__cause__ is error
        assert sample.individual_names() == ["ind1"]

    def test_yielded_ingestion_error_propagates_unchanged(self):
        error = IngestionError("line 3")
        with pytest.raises(IngestionError) as excinfo:
            Sample().observe([error])
        assert excinfo.value is error

    def test_ingestion_error_is_value_error(self):
        with pytest.raises(ValueError):
            Sample().observe([object()])


@pytest.mark.tier0
class TestVersioning:
    """Tests for staleness tracking."""

    def test_new_sample_not_stale(self):
        sample = Sample()
        assert not sample.stale
        assert sample.matrix.counts.shape == (0, 0)

    def test_allele_marks_stale(self):
        sample = Sample()
        sample.observe(alleles([("a", "L1", "x")]))
        assert sample.stale
        sample.flush()
        assert not sample.stale

    def test_repeated_allele_marks_stale(self):
        sample = Sample()
        sample.observe(alleles([("a", "L1", "x")]))
        sample.flush()
        sample.observe(alleles([("a", "L1", "x")]))
        assert sample.stale
        assert sample.matrix.counts.tolist() == [[2]]

    def test_record_marks_stale(self):
        sample = Sample()
        sample.observe(alleles([("ind1", "L1", "a"), ("ind2", "L1", "b")]))
        before = sample.flush().counts.copy()

        sample.record("ind1", "L1", "b")

        assert sample.stale
        after = sample.flush().counts
        assert before.tolist() == [[1, 0], [0, 1]]
        assert after.tolist() == [[1, 1], [0, 1]]

    def test_record_existing_allele_marks_stale(self):
        sample = Sample()
        sample.observe(alleles([("ind1", "L1", "a")]))
        sample.flush()
        version = sample.version
        individual = sample.record("ind1", "L1", "a", count=2)
        assert sample.version > version
        assert individual.count("L1", "a") == 3
        assert sample.matrix.counts.tolist() == [[3]]

    def test_record_zero_count_keeps_matrix_fresh(self):
        sample = Sample()
        sample.observe(alleles([("ind1", "L1", "a")]))
        sample.flush()
        sample.record("ind1", "L1", "a", count=0)
        assert not sample.stale

    def test_record_negative_count_rejected(self):
        sample = Sample()
        with pytest.raises(ValueError, match="non-negative"):
            sample.record("ind1", "L1", "a", count=-1)

    def test_individual_has_no_public_record(self):
        assert not hasattr(Sample().individual("ind1"), "record")

    def test_creation_bumps_version(self):
        sample = Sample()
        v0 = sample.version
        sample.locus("L1")
        v1 = sample.version
        sample.variation("L1", "a")
        v2 = sample.version
        sample.group("G1")
        v3 = sample.version
        assert v0 < v1 < v2 < v3

    def test_existing_entities_do_not_bump_version(self):
        sample = Sample()
        sample.allele("L1", "a")
        sample.group("G1")
        version = sample.version
        sample.allele("L1", "a")
        sample.group("G1")
        sample.locus("L1")
        assert sample.version == version

    def test_meta_on_existing_individual_keeps_matrix_fresh(self):
        sample = Sample()
        sample.observe(alleles([("a", "L1", "x"), ("b", "L1", "y")]))
        sample.observe([GroupObservation("a", "G1")])
        sample.flush()
        sample.observe(
            [MetaObservation("a", "site", "farmA"), GroupObservation("b", "G1")]
        )
        assert not sample.stale

    def test_repr(self, two_locus_sample):
        text = repr(two_locus_sample)
        assert "3 individuals" in text
        assert "2 loci" in text
        assert "4 alleles" in text
