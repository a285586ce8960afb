"""
River path generator.

Traces river-flagged cells into polylines that follow the terrain downhill.
"""

import logging
from typing import List, Optional, Tuple

from ...models import RiverPath
from .base import FeatureGenerator, SynthesisContext


logger = logging.getLogger("terrain_synth.rivers")


class RiverGenerator(FeatureGenerator):
    """
    Generates one river polyline per headwater.

    Sources are taken highest first (ties by id). Each trace follows the
    lowest unvisited river neighbour that is not uphill until it runs out of
    eligible cells. If the last cell touches a river cell claimed by an
    earlier trace, that cell is appended once as a merge connector.
    """

    category = "river_paths"

    def generate(self, context: SynthesisContext) -> List[RiverPath]:
        river_ids = {
            location_id for location_id, info in context.terrain_info.items()
            if info.is_river
        }
        if not river_ids:
            return []

        sources = sorted(river_ids, key=lambda i: (-context.elevation_of(i), i))
        visited = set()
        paths = []

        for start_id in sources:
            if start_id in visited:
                continue

            trace, merge_id = self._trace(start_id, river_ids, visited, context)
            path_ids = trace + [merge_id] if merge_id is not None else trace

            # Cells without a position are dropped from both sequences
            placed_ids = [location_id for location_id in path_ids if location_id in context.positions]
            if len(placed_ids) < 2:
                continue
            if merge_id not in context.positions:
                merge_id = None

            paths.append(RiverPath(
                points=[context.positions[location_id] for location_id in placed_ids],
                location_ids=tuple(placed_ids),
                width=context.config.river_width,
                merge_location_id=merge_id
            ))

        logger.debug("Traced %d river paths from %d river cells", len(paths), len(river_ids))
        return paths

    def _trace(
        self,
        start_id: str,
        river_ids: set,
        visited: set,
        context: SynthesisContext
    ) -> Tuple[List[str], Optional[str]]:
        """Steepest-descent walk from ``start_id``; marks cells visited."""

        claimed_before = set(visited)
        trace = []
        current_id = start_id

        while current_id is not None:
            visited.add(current_id)
            trace.append(current_id)
            floor = context.elevation_of(current_id)
            current_id = self._lowest_neighbor(
                current_id, context,
                lambda n: n in river_ids and n not in visited and context.elevation_of(n) <= floor
            )

        merge_id = self._lowest_neighbor(
            trace[-1], context,
            lambda n: n in river_ids and n in claimed_before
        )
        return trace, merge_id

    def _lowest_neighbor(self, location_id: str, context: SynthesisContext, eligible) -> Optional[str]:
        candidates = [n for n in context.graph.neighbors(location_id) if eligible(n)]
        if not candidates:
            return None
        return min(candidates, key=lambda n: (context.elevation_of(n), n))

    def canonical_order(self, features: List[RiverPath]) -> List[RiverPath]:
        """Trace order is already canonical."""
        return features
