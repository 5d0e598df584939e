"""Collaborator value types for the patch graph.

This module defines the types the graph stores but does not interpret:
  - Biome: environmental parameter bundle, copied by value into a Patch
  - Species: shared entity, identity by name
  - SpeciesInPatch: per-patch (species, population) entry
  - FallbackOrder: scan order for map-wide species lookup

Patches hold plain Python references to Species objects, so one Species
can be shared by any number of patches with independent populations.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


# Population given to a species when a patch registers it without one.
INITIAL_SPECIES_POPULATION = 100


# ═══════════════════════════════════════════════════════════════════════
# ENUMERATIONS
# ═══════════════════════════════════════════════════════════════════════

class FallbackOrder(str, Enum):
    """Order in which PatchMap scans non-current patches for a species."""
    ASCENDING_ID = "ascending_id"   # lowest patch id first
    INSERTION    = "insertion"      # order patches were added to the map


# ═══════════════════════════════════════════════════════════════════════
# BIOME
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class Biome:
    """Environmental conditions of a patch.

    Each Patch keeps its own copy, so editing one patch's biome never
    leaks into the template or into other patches.
    """
    name: str
    temperature: float = 20.0    # °C
    sunlight: float = 1.0        # relative, 0..1
    compounds: Dict[str, float] = field(default_factory=dict)

    def copy(self) -> "Biome":
        return copy.deepcopy(self)


# ═══════════════════════════════════════════════════════════════════════
# SPECIES
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class Species:
    """A species shared between patches.

    Equality and hashing use ``name`` only; the descriptive fields are
    carried along for the owning subsystem.
    """
    name: str
    genus: str = field(default="", compare=False)
    epithet: str = field(default="", compare=False)
    traits: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __hash__(self) -> int:
        return hash(self.name)


@dataclass
class SpeciesInPatch:
    """One species entry of a patch. ``population`` is caller-managed."""
    species: Species
    population: int = 0

    @property
    def name(self) -> str:
        return self.species.name
