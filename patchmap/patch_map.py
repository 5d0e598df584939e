"""PatchMap: the owning collection of patches.

Core class:
  - PatchMap: id → Patch storage, current-patch selection, species lookup

Core functions:
  - build_patch_map: assemble a map from plain dict definitions
  - make_tidepool_map: the canonical two-patch test map

Species lookup starts at the current patch because that is where most
lookups come from. Only when the current patch does not hold the species
are the remaining patches scanned, in a fixed FallbackOrder, so the same
map state always returns the same Species when a name is held by
several patches.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import numpy as np

from patchmap.config import PatchMapConfig, default_config
from patchmap.log import get_logger
from patchmap.patch import Patch, biome_label
from patchmap.types import Biome, FallbackOrder, Species, SpeciesInPatch

logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════
# PATCH MAP
# ═══════════════════════════════════════════════════════════════════════

class PatchMap:
    """A mesh of connected patches.

    The map is the sole owner of its patches. ``current_patch_id`` starts
    at 0, which may not name any patch; that is the "unset" state.
    """

    def __init__(self, fallback_order: FallbackOrder = FallbackOrder.ASCENDING_ID):
        self._patches: Dict[int, Patch] = {}
        self._current_patch_id = 0
        self._fallback_order = FallbackOrder(fallback_order)

    @classmethod
    def from_config(cls, config: PatchMapConfig) -> "PatchMap":
        return cls(fallback_order=config.fallback_order)

    @property
    def fallback_order(self) -> FallbackOrder:
        return self._fallback_order

    # ── Registration ─────────────────────────────────────────────────

    def add_patch(self, patch: Patch) -> bool:
        """Take ownership of ``patch``.

        Returns:
            True on success, False if a patch with the same id exists.

        Raises:
            TypeError: If ``patch`` is not a Patch.
        """
        if not isinstance(patch, Patch):
            raise TypeError(f"expected Patch, got {type(patch).__name__}")

        patch_id = patch.get_id()
        if patch_id in self._patches:
            logger.debug("Patch id %d already registered", patch_id)
            return False
        self._patches[patch_id] = patch
        return True

    # ── Current patch ────────────────────────────────────────────────

    def set_current_patch(self, patch_id: int) -> bool:
        """Select ``patch_id`` as the current patch.

        Returns:
            True if the id is registered, False otherwise (no change).
        """
        if patch_id not in self._patches:
            logger.debug("Cannot select unknown patch %s as current", patch_id)
            return False
        self._current_patch_id = patch_id
        return True

    def get_current_patch_id(self) -> int:
        return self._current_patch_id

    def get_current_patch(self) -> Optional[Patch]:
        return self._patches.get(self._current_patch_id)

    # ── Queries ──────────────────────────────────────────────────────

    def get_patch(self, patch_id: int) -> Optional[Patch]:
        return self._patches.get(patch_id)

    def get_patch_ids(self) -> List[int]:
        return sorted(self._patches)

    def get_neighbours(self, patch_id: int) -> List[Patch]:
        """Resolved neighbours of ``patch_id``, ascending id.

        Neighbour ids with no registered patch are skipped.
        """
        patch = self._patches.get(patch_id)
        if patch is None:
            return []

        resolved = []
        for neighbour_id in sorted(patch.get_neighbours()):
            neighbour = self._patches.get(neighbour_id)
            if neighbour is None:
                logger.debug("Patch %d links to unregistered patch %d",
                             patch_id, neighbour_id)
                continue
            resolved.append(neighbour)
        return resolved

    def find_species_by_name(self, name: str) -> Optional[Species]:
        """Find a species anywhere in the map, current patch first.

        Falls back to the other patches in ``fallback_order``; the current
        patch is not scanned twice.
        """
        current = self.get_current_patch()
        if current is not None:
            found = current.search_species_by_name(name)
            if found is not None:
                return found

        for patch in self._fallback_patches():
            if patch is current:
                continue
            found = patch.search_species_by_name(name)
            if found is not None:
                return found
        return None

    def find_species_everywhere(self, name: str) -> List[Tuple[int, SpeciesInPatch]]:
        """Every (patch_id, entry) holding species ``name``, ascending id."""
        hits = []
        for patch_id in sorted(self._patches):
            for entry in self._patches[patch_id].get_species():
                if entry.species.name == name:
                    hits.append((patch_id, entry))
                    break
        return hits

    def _fallback_patches(self) -> Iterable[Patch]:
        if self._fallback_order is FallbackOrder.INSERTION:
            return list(self._patches.values())
        return [self._patches[i] for i in sorted(self._patches)]

    # ── Array views ──────────────────────────────────────────────────

    def get_population_array(self, name: str) -> np.ndarray:
        """Population of species ``name`` per patch, ascending id. Shape: (N,)."""
        return np.array(
            [self._patches[i].get_species_population(name) or 0
             for i in sorted(self._patches)],
            dtype=np.int64,
        )

    def adjacency_matrix(self) -> Tuple[List[int], np.ndarray]:
        """Resolved links as a 0/1 matrix.

        A[i, j] = 1 when patch ids[i] lists ids[j] as a neighbour. Links
        are stored per patch, so a one-sided link gives an asymmetric
        matrix. Unregistered neighbour ids are dropped.

        Returns:
            (ids, A): ascending patch ids and the (N, N) int8 matrix.
        """
        ids = sorted(self._patches)
        index = {patch_id: i for i, patch_id in enumerate(ids)}
        A = np.zeros((len(ids), len(ids)), dtype=np.int8)
        for patch_id in ids:
            for neighbour_id in self._patches[patch_id].get_neighbours():
                j = index.get(neighbour_id)
                if j is not None:
                    A[index[patch_id], j] = 1
        return ids, A

    # ── Container protocol ───────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._patches)

    def __contains__(self, patch_id: object) -> bool:
        return patch_id in self._patches

    def __iter__(self) -> Iterator[Patch]:
        return iter([self._patches[i] for i in sorted(self._patches)])

    def summary(self) -> str:
        """Human-readable summary of the map."""
        current = self._current_patch_id
        lines = [f"PatchMap: {len(self)} patches, current={current}"
                 + ("" if current in self._patches else " (unset)")]
        for patch in self:
            marker = "*" if patch.get_id() == current else " "
            species = ", ".join(
                f"{e.species.name}={e.population}" for e in patch.get_species()
            )
            lines.append(
                f" {marker}[{patch.get_id()}] {patch.get_name()} "
                f"({biome_label(patch.get_biome())}) "
                f"neighbours={sorted(patch.get_neighbours())} "
                f"species: {species or '-'}"
            )
        return "\n".join(lines)


# ═══════════════════════════════════════════════════════════════════════
# MAP BUILDER
# ═══════════════════════════════════════════════════════════════════════

def build_patch_map(
    patch_defs: Iterable[Mapping[str, Any]],
    biomes: Mapping[str, Biome],
    species: Mapping[str, Species],
    config: Optional[PatchMapConfig] = None,
) -> PatchMap:
    """Build a PatchMap from plain dict definitions.

    Each definition has keys:
      id, name, biome (key into ``biomes``),
      species (mapping name → population, or list of names using the
        configured initial population),
      neighbours (list of ids; links are made in both directions when
        the other patch exists),
      current (optional bool; the last flagged patch wins).

    Args:
        patch_defs: Patch definitions.
        biomes: Biome templates by key. Each patch copies its biome.
        species: Shared Species objects by name.
        config: Optional configuration. Default: default_config().

    Returns:
        Assembled PatchMap.

    Raises:
        KeyError: If a definition names an unknown biome or species.
    """
    config = config or default_config()
    patch_map = PatchMap.from_config(config)

    accepted = []
    for pd in patch_defs:
        patch = Patch(pd["name"], pd["id"], biomes[pd["biome"]])
        if patch.get_id() in patch_map:
            logger.warning("Duplicate patch id %d ('%s') ignored",
                           patch.get_id(), patch.get_name())
            continue

        sp_defs = pd.get("species") or {}
        if not isinstance(sp_defs, Mapping):
            sp_defs = {name: None for name in sp_defs}
        for sp_name, population in sp_defs.items():
            if population is None:
                population = config.patches.initial_population
            patch.add_species(species[sp_name], population)

        patch_map.add_patch(patch)
        accepted.append((patch, pd))

    # Ids are normalised by Patch; resolve links through the stored ids.
    for patch, pd in accepted:
        for neighbour_id in pd.get("neighbours") or []:
            neighbour_id = int(neighbour_id)
            patch.add_neighbour(neighbour_id)
            neighbour = patch_map.get_patch(neighbour_id)
            if neighbour is not None:
                neighbour.add_neighbour(patch.get_id())

    for patch, pd in accepted:
        if pd.get("current"):
            patch_map.set_current_patch(patch.get_id())

    logger.info("Built patch map with %d patches", len(patch_map))
    return patch_map


# ═══════════════════════════════════════════════════════════════════════
# TIDEPOOL TEST MAP
# ═══════════════════════════════════════════════════════════════════════

def get_tidepool_biomes() -> Dict[str, Biome]:
    """Biome templates for the tidepool test map."""
    return {
        "tidepool": Biome(
            name="Tidepool",
            temperature=18.0,
            sunlight=0.9,
            compounds={"oxygen": 0.5, "carbondioxide": 0.1, "glucose": 0.02},
        ),
        "reef": Biome(
            name="Reef",
            temperature=24.0,
            sunlight=0.7,
            compounds={"oxygen": 0.3, "carbondioxide": 0.2, "ammonia": 0.05},
        ),
    }


def make_tidepool_map(config: Optional[PatchMapConfig] = None) -> PatchMap:
    """Create the canonical two-patch test map.

    Patches:
      1: Tidepool — holds Algae (population 100)
      2: Reef     — empty, selected as current

    The two patches are linked both ways.
    """
    species = {"Algae": Species(name="Algae", genus="Primum", epithet="thrivium")}
    patch_defs = [
        {"id": 1, "name": "Tidepool", "biome": "tidepool",
         "species": {"Algae": 100}, "neighbours": [2]},
        {"id": 2, "name": "Reef", "biome": "reef",
         "neighbours": [1], "current": True},
    ]
    return build_patch_map(patch_defs, get_tidepool_biomes(), species, config)
