"""patchmap: habitat patch graph for a microbe-stage world simulation.

An in-memory graph of patches (habitat regions) that:
  - Hold per-patch populations of shared Species references
  - Link to neighbouring patches by id (back-links, never owning)
  - Live in a PatchMap that owns them and tracks the "current" patch
  - Answer species lookups starting from the current patch

Biome parameters, species traits, growth rules, rendering and
save/load are owned by other subsystems; this package only stores
references to them.
"""

from patchmap.types import (
    INITIAL_SPECIES_POPULATION,
    Biome,
    FallbackOrder,
    Species,
    SpeciesInPatch,
)
from patchmap.patch import Patch
from patchmap.patch_map import PatchMap, build_patch_map, make_tidepool_map

__version__ = "0.1.0"

__all__ = [
    "INITIAL_SPECIES_POPULATION",
    "Biome",
    "FallbackOrder",
    "Patch",
    "PatchMap",
    "Species",
    "SpeciesInPatch",
    "build_patch_map",
    "make_tidepool_map",
]
