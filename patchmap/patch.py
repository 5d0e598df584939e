"""Patch: one habitat region of the world.

A patch owns:
  - its id and display name (fixed at construction)
  - a private copy of its Biome
  - an ordered list of SpeciesInPatch entries (shared Species references,
    per-patch populations)
  - a set of neighbour patch ids

Neighbours are stored as ids, not Patch objects. They are resolved
through the owning PatchMap at query time and may point at patches that
were never registered.
"""

from __future__ import annotations

import copy
import numbers
from typing import FrozenSet, List, Optional, Set, Tuple

from patchmap.log import get_logger
from patchmap.types import INITIAL_SPECIES_POPULATION, Biome, Species, SpeciesInPatch

logger = get_logger(__name__)


class Patch:
    """A node of the patch graph."""

    def __init__(self, name: str, patch_id: int, biome_template: Biome):
        self._patch_id = int(patch_id)
        self._name = name
        self._biome = copy.deepcopy(biome_template)
        self._species_in_patch: List[SpeciesInPatch] = []
        self._adjacent_patches: Set[int] = set()

    # ── Identity ─────────────────────────────────────────────────────

    @property
    def patch_id(self) -> int:
        return self._patch_id

    @property
    def name(self) -> str:
        return self._name

    def get_id(self) -> int:
        return self._patch_id

    def get_name(self) -> str:
        return self._name

    # ── Biome ────────────────────────────────────────────────────────

    def get_biome(self) -> Biome:
        """The patch's own biome. Mutations stay local to this patch."""
        return self._biome

    def biome_snapshot(self) -> Biome:
        """Independent copy of the biome, safe to hand out read-only."""
        return copy.deepcopy(self._biome)

    # ── Neighbours ───────────────────────────────────────────────────

    def add_neighbour(self, patch_id: int) -> bool:
        """Add a link to the patch with ``patch_id``.

        The id is not checked against any map.

        Returns:
            True if the link is new, False if it was already present.
        """
        patch_id = int(patch_id)
        if patch_id in self._adjacent_patches:
            logger.debug("Patch %d already linked to %d", self._patch_id, patch_id)
            return False
        self._adjacent_patches.add(patch_id)
        return True

    def get_neighbours(self) -> FrozenSet[int]:
        return frozenset(self._adjacent_patches)

    # ── Species ──────────────────────────────────────────────────────

    def get_species(self) -> Tuple[SpeciesInPatch, ...]:
        """All species entries, in the order they were added."""
        return tuple(self._species_in_patch)

    def add_species(self, species: Species,
                    population: int = INITIAL_SPECIES_POPULATION) -> bool:
        """Register ``species`` in this patch with ``population`` members.

        A species already present (same name) is left untouched,
        including its population.

        Returns:
            True when added. False if the species was already here or
            population is not a whole number >= 0.
        """
        if not _is_valid_population(population):
            logger.debug("Rejected population %r for species '%s' in patch %d",
                         population, species.name, self._patch_id)
            return False

        if self._find_entry(species.name) is not None:
            logger.debug("Species '%s' already in patch %d",
                         species.name, self._patch_id)
            return False

        self._species_in_patch.append(
            SpeciesInPatch(species=species, population=int(population))
        )
        return True

    def search_species_by_name(self, name: str) -> Optional[Species]:
        """Return the Species named ``name`` in this patch, or None."""
        entry = self._find_entry(name)
        return entry.species if entry is not None else None

    def get_species_population(self, name: str) -> Optional[int]:
        """Population of species ``name`` in this patch, or None if absent."""
        entry = self._find_entry(name)
        return entry.population if entry is not None else None

    def total_population(self) -> int:
        return sum(e.population for e in self._species_in_patch)

    def _find_entry(self, name: str) -> Optional[SpeciesInPatch]:
        for entry in self._species_in_patch:
            if entry.species.name == name:
                return entry
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._find_entry(name) is not None

    def __repr__(self) -> str:
        return (f"Patch(id={self._patch_id}, name={self._name!r}, "
                f"biome={biome_label(self._biome)!r}, "
                f"species={len(self._species_in_patch)}, "
                f"neighbours={sorted(self._adjacent_patches)})")


def _is_valid_population(population) -> bool:
    if isinstance(population, bool):
        return False
    if isinstance(population, numbers.Integral):
        return population >= 0
    if isinstance(population, float):
        return population.is_integer() and population >= 0
    return False


def biome_label(biome) -> str:
    return getattr(biome, "name", type(biome).__name__)
