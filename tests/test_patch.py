"""Tests for patchmap.patch — a single habitat patch.

Tests:
  1. Identity and biome ownership
  2. Neighbour links (dedup, dangling ids tolerated)
  3. Species registration (first registration wins)
  4. Species lookup and per-patch populations
"""

import logging

import pytest

from patchmap.patch import Patch
from patchmap.types import INITIAL_SPECIES_POPULATION, Biome, Species


@pytest.fixture
def biome():
    return Biome(name="Tidepool", temperature=18.0,
                 compounds={"oxygen": 0.5, "glucose": 0.02})


@pytest.fixture
def patch(biome):
    return Patch("Tidepool", 1, biome)


# ═══════════════════════════════════════════════════════════════════════
# IDENTITY & BIOME
# ═══════════════════════════════════════════════════════════════════════

class TestIdentity:
    def test_id_and_name(self, patch):
        assert patch.get_id() == 1
        assert patch.get_name() == "Tidepool"
        assert patch.patch_id == 1
        assert patch.name == "Tidepool"

    def test_id_is_read_only(self, patch):
        with pytest.raises(AttributeError):
            patch.patch_id = 7
        with pytest.raises(AttributeError):
            patch.name = "Reef"

    def test_repr_mentions_id(self, patch):
        assert "id=1" in repr(patch)


class TestBiome:
    def test_biome_copied_from_template(self, biome, patch):
        assert patch.get_biome() == biome
        assert patch.get_biome() is not biome

    def test_template_changes_do_not_leak(self, biome, patch):
        biome.compounds["oxygen"] = 0.0
        assert patch.get_biome().compounds["oxygen"] == 0.5

    def test_biome_mutable_in_place(self, patch):
        patch.get_biome().temperature = 30.0
        assert patch.get_biome().temperature == 30.0

    def test_patches_from_same_template_independent(self, biome):
        a = Patch("A", 1, biome)
        b = Patch("B", 2, biome)
        a.get_biome().compounds["oxygen"] = 0.9
        assert b.get_biome().compounds["oxygen"] == 0.5

    def test_snapshot_is_detached(self, patch):
        snap = patch.biome_snapshot()
        snap.temperature = -5.0
        assert patch.get_biome().temperature == 18.0

    def test_any_copyable_biome_accepted(self):
        """The biome is opaque: a plain object without copy() works."""
        class Environment:
            def __init__(self):
                self.compounds = {"oxygen": 0.2}

        template = Environment()
        p = Patch("Vent", 3, template)
        assert p.get_biome() is not template
        template.compounds["oxygen"] = 0.0
        assert p.get_biome().compounds["oxygen"] == 0.2
        assert p.biome_snapshot().compounds == {"oxygen": 0.2}


# ═══════════════════════════════════════════════════════════════════════
# NEIGHBOURS
# ═══════════════════════════════════════════════════════════════════════

class TestNeighbours:
    def test_add_twice_true_then_false(self, patch):
        assert patch.add_neighbour(2) is True
        assert patch.add_neighbour(2) is False
        assert len(patch.get_neighbours()) == 1

    def test_multiple_neighbours(self, patch):
        for i in (2, 3, 4):
            assert patch.add_neighbour(i)
        assert patch.get_neighbours() == frozenset({2, 3, 4})

    def test_dangling_id_accepted(self, patch):
        """No map exists, so id 999 resolves to nothing; still accepted."""
        assert patch.add_neighbour(999) is True
        assert 999 in patch.get_neighbours()

    def test_neighbour_view_is_immutable(self, patch):
        patch.add_neighbour(2)
        view = patch.get_neighbours()
        with pytest.raises(AttributeError):
            view.add(3)

    def test_duplicate_logged_at_debug(self, patch, caplog):
        patch.add_neighbour(2)
        with caplog.at_level(logging.DEBUG, logger="patchmap"):
            patch.add_neighbour(2)
        assert "already linked" in caplog.text


# ═══════════════════════════════════════════════════════════════════════
# SPECIES
# ═══════════════════════════════════════════════════════════════════════

class TestAddSpecies:
    def test_default_population(self, patch):
        algae = Species(name="Algae")
        assert patch.add_species(algae) is True
        assert patch.get_species_population("Algae") == INITIAL_SPECIES_POPULATION

    def test_first_registration_wins(self, patch):
        algae = Species(name="Algae")
        assert patch.add_species(algae, 40) is True
        assert patch.add_species(algae, 75) is False
        assert patch.get_species_population("Algae") == 40
        assert len(patch.get_species()) == 1

    def test_duplicate_by_name_not_by_object(self, patch):
        """A different Species object with the same name is a duplicate."""
        first = Species(name="Algae", genus="Primum")
        second = Species(name="Algae", genus="Secundum")
        assert patch.add_species(first, 10)
        assert patch.add_species(second, 20) is False
        assert patch.search_species_by_name("Algae") is first

    def test_insertion_order_kept(self, patch):
        for name in ("Kelp", "Algae", "Plankton"):
            patch.add_species(Species(name=name))
        assert [e.species.name for e in patch.get_species()] == [
            "Kelp", "Algae", "Plankton"]

    def test_zero_population_allowed(self, patch):
        assert patch.add_species(Species(name="Algae"), 0)
        assert patch.get_species_population("Algae") == 0

    def test_negative_population_rejected(self, patch):
        assert patch.add_species(Species(name="Algae"), -1) is False
        assert len(patch.get_species()) == 0
        assert patch.search_species_by_name("Algae") is None

    def test_fractional_population_rejected(self, patch):
        """1.5 members is not truncated to 1; the entry is refused."""
        assert patch.add_species(Species(name="Algae"), 1.5) is False
        assert len(patch.get_species()) == 0

    def test_whole_float_population_accepted(self, patch):
        assert patch.add_species(Species(name="Algae"), 30.0) is True
        assert patch.get_species_population("Algae") == 30
        assert isinstance(patch.get_species_population("Algae"), int)

    def test_invalid_population_then_valid(self, patch):
        algae = Species(name="Algae")
        assert patch.add_species(algae, -5) is False
        assert patch.add_species(algae, 5) is True
        assert patch.get_species_population("Algae") == 5

    def test_species_view_is_read_only(self, patch):
        patch.add_species(Species(name="Algae"))
        view = patch.get_species()
        assert isinstance(view, tuple)
        with pytest.raises(AttributeError):
            view.append(None)


class TestSearchSpecies:
    def test_found(self, patch):
        algae = Species(name="Algae")
        patch.add_species(algae)
        assert patch.search_species_by_name("Algae") is algae

    def test_missing_returns_none(self, patch):
        assert patch.search_species_by_name("Algae") is None
        assert patch.get_species_population("Algae") is None

    def test_contains(self, patch):
        patch.add_species(Species(name="Algae"))
        assert "Algae" in patch
        assert "Kelp" not in patch
        assert 5 not in patch

    def test_total_population(self, patch):
        patch.add_species(Species(name="Algae"), 100)
        patch.add_species(Species(name="Kelp"), 25)
        assert patch.total_population() == 125


class TestSharedSpecies:
    def test_same_species_independent_populations(self, biome):
        """One Species object shared by two patches with different counts."""
        algae = Species(name="Algae")
        a = Patch("A", 1, biome)
        b = Patch("B", 2, biome)
        a.add_species(algae, 10)
        b.add_species(algae, 500)
        assert a.search_species_by_name("Algae") is b.search_species_by_name("Algae")
        assert a.get_species_population("Algae") == 10
        assert b.get_species_population("Algae") == 500

    def test_population_is_caller_managed(self, patch):
        patch.add_species(Species(name="Algae"), 10)
        entry = patch.get_species()[0]
        entry.population = 3
        assert patch.get_species_population("Algae") == 3
