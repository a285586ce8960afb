"""
World snapshot validator.

Checks raw location records before synthesis. Synthesis itself tolerates
every problem reported here (it skips what it cannot use), so the validator
exists to surface data issues to whoever maintains the world.
"""

from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from ..engine.terrain_classifier import TERRAIN_TYPES, TerrainClassifier
from ..models import EXIT_DIRECTIONS, Location


class SnapshotValidator:
    """
    Validates location records of a world snapshot.

    Reports malformed records, duplicate ids, exits into locations missing
    from the snapshot or with an unknown direction, unknown biomes and
    terrain tags, and locations that cannot be placed on the grid.
    """

    def __init__(self, require_grid: bool = False):
        self.require_grid = require_grid
        self.known_biomes = set(TerrainClassifier.BIOME_TERRAINS)
        self.known_tags = set(TERRAIN_TYPES)

    def validate_snapshot(self, records: List[Dict[str, Any]]) -> Tuple[bool, List[str]]:
        """
        Validate a list of location records.

        Args:
            records: Raw location dictionaries

        Returns:
            Tuple of (is_valid, error_messages)
        """

        errors = []
        locations = []

        for i, record in enumerate(records):
            try:
                locations.append(Location.model_validate(record))
            except ValidationError as exc:
                for problem in exc.errors():
                    field = ".".join(str(part) for part in problem["loc"])
                    errors.append(f"records[{i}].{field}: {problem['msg']}")

        errors.extend(self._validate_ids(locations))
        errors.extend(self._validate_exits(locations))
        errors.extend(self._validate_terrain(locations))

        return len(errors) == 0, errors

    def parse_locations(self, records: List[Dict[str, Any]]) -> List[Location]:
        """Location models for all well-formed records."""

        locations = []
        for record in records:
            try:
                locations.append(Location.model_validate(record))
            except ValidationError:
                continue
        return locations

    def _validate_ids(self, locations: List[Location]) -> List[str]:
        errors = []
        seen = set()
        for location in locations:
            if location.id in seen:
                errors.append(f"Duplicate location id: {location.id}")
            seen.add(location.id)

        if self.require_grid:
            for location in locations:
                if location.grid_position is None:
                    errors.append(f"Location {location.id} has no grid position")
        return errors

    def _validate_exits(self, locations: List[Location]) -> List[str]:
        errors = []
        known = {location.id for location in locations}
        for location in locations:
            for exit_ in location.exits:
                if exit_.location_id not in known:
                    errors.append(f"Location {location.id} has exit to unknown location {exit_.location_id}")
                if exit_.direction not in EXIT_DIRECTIONS:
                    errors.append(f"Location {location.id} has exit with unknown direction {exit_.direction}")
        return errors

    def _validate_terrain(self, locations: List[Location]) -> List[str]:
        errors = []
        for location in locations:
            if location.biome is not None and location.biome.upper() not in self.known_biomes:
                errors.append(f"Location {location.id} has unknown biome {location.biome}")
            for tag in location.terrain_tags or ():
                if tag.lower() not in self.known_tags:
                    errors.append(f"Location {location.id} has unknown terrain tag {tag}")
        return errors
