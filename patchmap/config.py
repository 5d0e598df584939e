"""Configuration system for patchmap.

Hierarchical YAML configuration with deep-merge support:
  base.yaml → override.yaml → programmatic overrides

Sections:
  - patches: defaults applied when patches register species
  - lookup:  map-wide species search behaviour
  - logging: level and format for the ``patchmap`` logger
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from patchmap.types import INITIAL_SPECIES_POPULATION, FallbackOrder


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION DATACLASSES
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class PatchSection:
    """Per-patch defaults."""
    initial_population: int = INITIAL_SPECIES_POPULATION


@dataclass
class LookupSection:
    """Species lookup across the map.

    fallback_order: "ascending_id" | "insertion" — order of the scan over
    non-current patches when the current patch does not hold the species.
    """
    fallback_order: str = FallbackOrder.ASCENDING_ID.value


@dataclass
class LoggingSection:
    """Logging for the ``patchmap`` logger namespace."""
    level: str = "WARNING"
    format: str = "%(asctime)s %(name)s %(levelname)s: %(message)s"


@dataclass
class PatchMapConfig:
    """Complete configuration.

    Load from YAML via `load_config()`. Sections map 1:1 to YAML top-level keys.
    """
    patches: PatchSection = field(default_factory=PatchSection)
    lookup: LookupSection = field(default_factory=LookupSection)
    logging: LoggingSection = field(default_factory=LoggingSection)

    @property
    def fallback_order(self) -> FallbackOrder:
        return FallbackOrder(self.lookup.fallback_order)


# ═══════════════════════════════════════════════════════════════════════
# YAML LOADING & MERGING
# ═══════════════════════════════════════════════════════════════════════

def deep_merge(base: Dict, override: Dict) -> Dict:
    """Fold ``override`` into ``base`` and return ``base``.

    Nested mappings present on both sides are folded key by key; any
    other value in ``override`` replaces what ``base`` had. ``base`` is
    changed in place.
    """
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            deep_merge(current, value)
        else:
            base[key] = value
    return base


def _section_from_dict(section_cls, data: Dict) -> Any:
    """Build ``section_cls`` from the keys of ``data`` it declares."""
    known = {f.name for f in dataclasses.fields(section_cls)}
    return section_cls(**{k: v for k, v in data.items() if k in known})


def _yaml_to_config(data: Dict) -> PatchMapConfig:
    """Convert a merged YAML dict to a PatchMapConfig."""
    sections = {}
    section_map = {
        'patches': PatchSection,
        'lookup': LookupSection,
        'logging': LoggingSection,
    }
    for key, cls in section_map.items():
        if key in data and isinstance(data[key], dict):
            sections[key] = _section_from_dict(cls, data[key])
        else:
            sections[key] = cls()
    return PatchMapConfig(**sections)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_config(config: PatchMapConfig) -> None:
    """Validate configuration constraints. Raises ValueError on failure.

    Checks:
      - Fallback order names a known FallbackOrder
      - Initial population is a non-negative integer
      - Logging level is a standard level name
    """
    valid_orders = {o.value for o in FallbackOrder}
    if config.lookup.fallback_order not in valid_orders:
        raise ValueError(
            f"lookup.fallback_order must be one of {sorted(valid_orders)}, "
            f"got '{config.lookup.fallback_order}'"
        )

    pop = config.patches.initial_population
    if isinstance(pop, bool) or not isinstance(pop, int):
        raise ValueError(
            f"patches.initial_population must be an integer, got {pop!r}"
        )
    if pop < 0:
        raise ValueError(
            f"patches.initial_population must be >= 0, got {pop}"
        )

    level = str(config.logging.level).upper()
    if level not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"logging.level must be one of {sorted(_VALID_LOG_LEVELS)}, "
            f"got '{config.logging.level}'"
        )


def _read_yaml(path: Path) -> Dict:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(
    base_path: Union[str, Path],
    override_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict] = None,
) -> PatchMapConfig:
    """Read the base YAML file and layer optional overrides on top.

    ``override_path`` is applied when the file exists and silently
    skipped otherwise, so a world can ship without one. ``overrides`` is
    a plain dict applied last, e.g. from command-line flags.

    Raises:
        FileNotFoundError: If base_path doesn't exist.
        ValueError: If the merged configuration is invalid.
    """
    base_path = Path(base_path)
    if not base_path.exists():
        raise FileNotFoundError(f"Config file not found: {base_path}")

    layers = [_read_yaml(base_path)]
    if override_path is not None and Path(override_path).exists():
        layers.append(_read_yaml(Path(override_path)))
    if overrides:
        layers.append(overrides)

    merged: Dict = {}
    for layer in layers:
        deep_merge(merged, layer)

    config = _yaml_to_config(merged)
    validate_config(config)
    return config


def default_config() -> PatchMapConfig:
    """Validated configuration built from the section defaults."""
    config = PatchMapConfig()
    validate_config(config)
    return config
