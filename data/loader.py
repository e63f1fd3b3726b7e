"""Rule data loader for the Ten-Second City puzzle.

Loads and validates the building catalog, synergy table and bonus
constants from JSON files, converting them into RuleSet instances.
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from core.board import PairKey, make_pair_key
from core.constants import BuildingType
from core.rules import BuildingInfo, RuleSet

logger = logging.getLogger(__name__)


def resource_path(relative_path: str) -> Path:
    """Absolute path to a file bundled in the data package."""
    return Path(__file__).parent / relative_path


class RuleLoadError(ValueError):
    """Raised when rule loading or validation fails."""
    pass


class RuleLoader:
    """Loads and validates rule data from JSON files."""

    def __init__(self, strict: bool = True):
        """Initialize the loader.

        Args:
            strict: If True, require every synergy pair to be listed in both
                    directions with equal values. Set to False to accept
                    one-directional tables.
        """
        self.strict = strict

    def load_from_file(self, file_path: str | Path) -> RuleSet:
        """Load rules from a JSON file.

        Args:
            file_path: Path to the JSON rules file.

        Returns:
            A validated RuleSet.

        Raises:
            RuleLoadError: If the file cannot be read, parsed or validated.
        """
        path = Path(file_path)

        if not path.exists():
            raise RuleLoadError(f"Rules file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise RuleLoadError(f"Invalid JSON in rules file: {e}") from e
        except UnicodeDecodeError as e:
            raise RuleLoadError(f"Rules file is not valid UTF-8: {e}") from e
        except OSError as e:
            raise RuleLoadError(f"Error reading rules file: {e}") from e

        rules = self.load_from_dict(data)
        logger.debug(
            "Loaded %d catalog entries and %d synergy pairs from %s",
            len(rules.catalog), len(rules.synergy), path,
        )
        return rules

    def load_from_dict(self, data: dict[str, Any]) -> RuleSet:
        """Load rules from a dictionary.

        Args:
            data: Dictionary with 'catalog', 'synergy' and optional 'bonuses' keys.

        Returns:
            A validated RuleSet.

        Raises:
            RuleLoadError: If validation fails.
        """
        self._validate_structure(data)

        catalog = self._load_catalog(data["catalog"])
        synergy = self._load_synergy(data["synergy"])
        bonuses = self._load_bonuses(data.get("bonuses", {}))

        return RuleSet(catalog=catalog, synergy=synergy, **bonuses)

    def _validate_structure(self, data: dict[str, Any]) -> None:
        """Validate the basic structure of the rule data."""
        if not isinstance(data, dict):
            raise RuleLoadError("Rule data must be a dictionary")

        if "catalog" not in data:
            raise RuleLoadError("Rule data missing 'catalog' key")

        if "synergy" not in data:
            raise RuleLoadError("Rule data missing 'synergy' key")

        if not isinstance(data["catalog"], list):
            raise RuleLoadError("'catalog' must be a list")

        if not isinstance(data["synergy"], list):
            raise RuleLoadError("'synergy' must be a list")

        if "bonuses" in data and not isinstance(data["bonuses"], dict):
            raise RuleLoadError("'bonuses' must be a dictionary")

    def _parse_type(self, value: Any, context: str) -> BuildingType:
        try:
            return BuildingType(value)
        except ValueError:
            valid = ", ".join(t.value for t in BuildingType)
            raise RuleLoadError(
                f"Unknown building type '{value}' in {context}. Valid types: {valid}"
            ) from None

    def _load_catalog(self, entries: list[Any]) -> dict[BuildingType, BuildingInfo]:
        """Build the catalog, requiring exactly one entry per building type."""
        catalog: dict[BuildingType, BuildingInfo] = {}

        for entry in entries:
            if not isinstance(entry, dict):
                raise RuleLoadError(f"Catalog entry must be a dictionary: {entry!r}")
            for required in ("type", "base_score", "glyph"):
                if required not in entry:
                    raise RuleLoadError(f"Catalog entry missing required field: {required}")

            building_type = self._parse_type(entry["type"], "catalog")
            if building_type in catalog:
                raise RuleLoadError(f"Duplicate catalog entry: {building_type.value}")

            base_score = entry["base_score"]
            if isinstance(base_score, bool) or not isinstance(base_score, int) or base_score <= 0:
                raise RuleLoadError(
                    f"Base score for {building_type.value} must be a positive integer, "
                    f"got {base_score!r}"
                )

            glyph = entry["glyph"]
            if not isinstance(glyph, str) or not glyph:
                raise RuleLoadError(f"Glyph for {building_type.value} must be a non-empty string")

            catalog[building_type] = BuildingInfo(
                building_type=building_type,
                base_score=base_score,
                glyph=glyph,
            )

        missing = [t.value for t in BuildingType if t not in catalog]
        if missing:
            raise RuleLoadError(f"Catalog missing building types: {missing}")

        return catalog

    def _load_synergy(self, entries: list[Any]) -> dict[PairKey, int]:
        """Build the synergy table keyed by canonical unordered pairs."""
        directed: dict[tuple[BuildingType, BuildingType], int] = {}

        for entry in entries:
            if not isinstance(entry, list) or len(entry) != 3:
                raise RuleLoadError(f"Synergy entry must be [type_a, type_b, value]: {entry!r}")

            type_a = self._parse_type(entry[0], "synergy")
            type_b = self._parse_type(entry[1], "synergy")
            value = entry[2]

            if type_a == type_b:
                raise RuleLoadError(
                    f"Synergy pair must name two distinct types: [{type_a.value}, {type_b.value}]"
                )
            if isinstance(value, bool) or not isinstance(value, int):
                raise RuleLoadError(
                    f"Synergy value for [{type_a.value}, {type_b.value}] must be an integer"
                )
            if (type_a, type_b) in directed:
                raise RuleLoadError(f"Duplicate synergy entry: [{type_a.value}, {type_b.value}]")

            directed[(type_a, type_b)] = value

        synergy: dict[PairKey, int] = {}
        for (type_a, type_b), value in directed.items():
            reverse = directed.get((type_b, type_a))
            if reverse is None:
                if self.strict:
                    raise RuleLoadError(
                        f"Synergy pair [{type_a.value}, {type_b.value}] has no reverse entry"
                    )
            elif reverse != value:
                raise RuleLoadError(
                    f"Asymmetric synergy: [{type_a.value}, {type_b.value}] = {value}, "
                    f"reverse = {reverse}"
                )
            synergy[make_pair_key(type_a, type_b)] = value

        return synergy

    def _load_bonuses(self, data: dict[str, Any]) -> dict[str, Any]:
        """Map the optional bonus section onto RuleSet keyword arguments."""
        bonuses: dict[str, Any] = {}

        int_fields = {
            "adjacency": "adjacency_bonus",
            "line": "line_bonus",
            "diversity_threshold": "diversity_threshold",
            "diversity": "diversity_bonus",
        }
        for key, field_name in int_fields.items():
            if key in data:
                value = data[key]
                if isinstance(value, bool) or not isinstance(value, int):
                    raise RuleLoadError(f"Bonus '{key}' must be an integer")
                bonuses[field_name] = value

        if "tiered_type" in data:
            bonuses["tiered_type"] = self._parse_type(data["tiered_type"], "bonuses")

        if "tiers" in data:
            if not isinstance(data["tiers"], list):
                raise RuleLoadError("'tiers' must be a list of [min_count, bonus] pairs")
            tiers = []
            for tier in data["tiers"]:
                if (
                    not isinstance(tier, list)
                    or len(tier) != 2
                    or not all(isinstance(v, int) and not isinstance(v, bool) for v in tier)
                ):
                    raise RuleLoadError(f"Tier must be [min_count, bonus]: {tier!r}")
                tiers.append((tier[0], tier[1]))
            bonuses["tier_bonuses"] = tuple(sorted(tiers, reverse=True))

        return bonuses


def load_rules(file_path: str | Path, strict: bool = True) -> RuleSet:
    """Convenience function to load rules from a file.

    Args:
        file_path: Path to the JSON rules file.
        strict: If True, enforce two-directional synergy entries.

    Returns:
        A validated RuleSet.
    """
    loader = RuleLoader(strict=strict)
    return loader.load_from_file(file_path)


@lru_cache(maxsize=1)
def load_default_rules() -> RuleSet:
    """Load the bundled rules once per process.

    Set CITY_RULES_PATH to load a different rules file instead.

    Raises:
        RuleLoadError: If the rules file is missing or invalid.
    """
    override = os.environ.get("CITY_RULES_PATH")
    path = Path(override) if override else resource_path("default_rules.json")
    return load_rules(path, strict=True)
