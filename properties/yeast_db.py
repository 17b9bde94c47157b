"""
Yeast strain database loader.

This module handles loading data/yeast_strains.yaml and provides:
- Canonical name → YeastModel mapping
- Alias resolution (CECT10131 → Saccharomyces cerevisiae CECT 10131 → model)
- Case-insensitive, whitespace/hyphen-insensitive matching

Usage:
    db = load_yeast_db()
    model = db.get_model("CECT10131")
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional

from properties.yeast_models import YeastModel

DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent / "data" / "yeast_strains.yaml"

REFERENCE_STRAIN = "Saccharomyces cerevisiae CECT 10131"

_REQUIRED_FIELDS = ("temperature_min", "temperature_opt", "temperature_max", "max_specific_growth_rate")
_PH_FIELDS = ("ph_min", "ph_opt", "ph_max")


def _normalize_name(name: str) -> str:
    """
    Normalize strain name for matching.

    Examples:
        "CEN.PK113-7D" → "cen.pk1137d"
        "Lactobacillus brevis" → "lactobacillusbrevis"
    """
    normalized = name.lower()
    normalized = re.sub(r"[-_\s]+", "", normalized)
    return normalized


class YeastDB:
    """Strain database with alias-aware lookup."""

    def __init__(self):
        self._models: Dict[str, YeastModel] = {}  # canonical → model
        self._alias_map: Dict[str, str] = {}  # normalized_alias → canonical

    def add_strain(self, model: YeastModel, aliases: List[str]) -> None:
        """
        Add a strain to the database.

        Raises:
            ValueError: If the canonical name already exists or an alias collides
        """
        canonical_name = model.name
        if canonical_name in self._models:
            raise ValueError(f"Duplicate canonical name: {canonical_name}")

        for name in [canonical_name] + aliases:
            normalized = _normalize_name(name)
            existing = self._alias_map.get(normalized)
            if existing is not None and existing != canonical_name:
                raise ValueError(
                    f"Alias collision: '{name}' (normalized: '{normalized}') "
                    f"already maps to '{existing}', cannot add to '{canonical_name}'"
                )

        self._models[canonical_name] = model
        for name in [canonical_name] + aliases:
            self._alias_map[_normalize_name(name)] = canonical_name

    def get_model(self, name: str) -> YeastModel:
        """
        Get the strain by canonical name or alias.

        Raises:
            KeyError: If the strain is not in the database
        """
        normalized = _normalize_name(name)
        if normalized not in self._alias_map:
            raise KeyError(
                f"Strain '{name}' (normalized: '{normalized}') not found in database. "
                f"Available strains: {list(self._models.keys())}"
            )
        return self._models[self._alias_map[normalized]]

    def has_strain(self, name: str) -> bool:
        return _normalize_name(name) in self._alias_map

    def list_strains(self) -> List[str]:
        return list(self._models.keys())


def load_yeast_db(yaml_path: Optional[str | Path] = None) -> YeastDB:
    """
    Load the strain database from YAML.

    Args:
        yaml_path: Path to the strain file, defaults to data/yeast_strains.yaml

    Raises:
        FileNotFoundError: If the YAML file doesn't exist
        ValueError: If the YAML structure is invalid or fields are missing
    """
    import yaml

    yaml_path = Path(yaml_path) if yaml_path is not None else DEFAULT_DB_PATH
    if not yaml_path.exists():
        raise FileNotFoundError(f"Yeast strain file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict) or "strains" not in data:
        raise ValueError(f"Invalid YAML structure in {yaml_path}: expected top-level 'strains' key")

    db = YeastDB()
    for canonical_name, entry in data["strains"].items():
        if not isinstance(entry, dict):
            raise ValueError(
                f"Invalid strain data for '{canonical_name}': expected dict, got {type(entry)}"
            )
        for field in _REQUIRED_FIELDS:
            if field not in entry:
                raise ValueError(
                    f"Missing required field '{field}' for strain '{canonical_name}' in {yaml_path}"
                )

        aliases = entry.get("aliases", [])
        if not isinstance(aliases, list):
            raise ValueError(
                f"Invalid 'aliases' for '{canonical_name}': expected list, got {type(aliases)}"
            )

        ph = {k: float(entry[k]) for k in _PH_FIELDS if k in entry}
        model = YeastModel(
            name=str(canonical_name),
            temperature_min=float(entry["temperature_min"]),
            temperature_opt=float(entry["temperature_opt"]),
            temperature_max=float(entry["temperature_max"]),
            max_specific_growth_rate=float(entry["max_specific_growth_rate"]),
            **ph,
        )
        db.add_strain(model, [str(a) for a in aliases])

    return db


def reference_yeast() -> YeastModel:
    """Saccharomyces cerevisiae CECT 10131 from the default database."""
    return load_yeast_db().get_model(REFERENCE_STRAIN)
