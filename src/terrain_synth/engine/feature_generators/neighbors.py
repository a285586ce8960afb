"""
Neighbour context generator.

Summarizes what lies around every tile along its direction-tagged exits:
cardinal neighbour elevations and river flags, and the directions in which
rivers, forests and other features continue a few steps away.
"""

import logging
from collections import deque
from typing import Dict, List, Optional, Sequence, Tuple

from ...models import COMPASS, NeighborContext, NeighborElevations, NeighborRivers
from .base import FeatureGenerator, SynthesisContext


logger = logging.getLogger("terrain_synth.neighbors")

# Grid step of one exit; y grows southwards
DIRECTION_OFFSETS: Dict[str, Tuple[int, int]] = {
    "north": (0, -1),
    "south": (0, 1),
    "east": (1, 0),
    "west": (-1, 0),
    "northeast": (1, -1),
    "northwest": (-1, -1),
    "southeast": (1, 1),
    "southwest": (-1, 1),
}

# Exit directions tried, in order, for each cardinal neighbour
CARDINAL_EXITS: Dict[str, Tuple[str, ...]] = {
    "north": ("north", "northeast", "northwest"),
    "south": ("south", "southeast", "southwest"),
    "east": ("east", "northeast", "southeast"),
    "west": ("west", "northwest", "southwest"),
}

# Feature name -> terrain tags that carry it
PASS_THROUGH_FEATURES: Dict[str, Tuple[str, ...]] = {
    "river": ("river", "stream"),
    "forest": ("forest",),
    "mountain": ("mountain",),
    "hills": ("hills",),
    "lake": ("lake",),
    "swamp": ("swamp",),
}


def compass_direction(dx: int, dy: int) -> Optional[str]:
    """Compass direction of a cumulative grid offset, None at the origin."""

    if dx > 0 and dy < 0:
        return "northeast"
    if dx < 0 and dy < 0:
        return "northwest"
    if dx > 0 and dy > 0:
        return "southeast"
    if dx < 0 and dy > 0:
        return "southwest"
    if dx > 0:
        return "east"
    if dx < 0:
        return "west"
    if dy < 0:
        return "north"
    if dy > 0:
        return "south"
    return None


class NeighborContextGenerator(FeatureGenerator):
    """
    Generates one neighbour context per location.

    Pass-through directions come from a breadth-first walk along outgoing
    exits, at most ``pass_through_depth`` steps deep. Each reached cell is
    placed by summing exit offsets along the first path that reached it.
    Exits without a compass direction add no offset.
    """

    category = "neighbor_contexts"

    def generate(self, context: SynthesisContext) -> List[NeighborContext]:
        contexts = []

        for location_id in sorted(context.terrain_info):
            contexts.append(NeighborContext(
                location_id=location_id,
                elevations=self.neighbor_elevations(location_id, context),
                rivers=self.neighbor_rivers(location_id, context),
                pass_through=self.pass_through(location_id, context)
            ))

        logger.debug(
            "Built %d neighbour contexts, %d with pass-through features",
            len(contexts), sum(1 for c in contexts if c.pass_through)
        )
        return contexts

    def neighbor_id(self, location_id: str, cardinal: str, context: SynthesisContext) -> Optional[str]:
        """Target of the first exit towards ``cardinal``, diagonals included."""

        exits = context.graph.exits_of(location_id)
        for direction in CARDINAL_EXITS[cardinal]:
            for target, exit_direction in exits:
                if exit_direction == direction:
                    return target
        return None

    def neighbor_elevations(self, location_id: str, context: SynthesisContext) -> NeighborElevations:
        values = {}
        for cardinal in CARDINAL_EXITS:
            target = self.neighbor_id(location_id, cardinal, context)
            info = context.terrain_info.get(target) if target is not None else None
            values[cardinal] = info.elevation if info is not None else None
        return NeighborElevations(**values)

    def neighbor_rivers(self, location_id: str, context: SynthesisContext) -> NeighborRivers:
        values = {}
        for cardinal in CARDINAL_EXITS:
            target = self.neighbor_id(location_id, cardinal, context)
            info = context.terrain_info.get(target) if target is not None else None
            values[cardinal] = info is not None and info.is_river
        return NeighborRivers(**values)

    def pass_through(self, location_id: str, context: SynthesisContext) -> Dict[str, Tuple[str, ...]]:
        own = context.terrain_info[location_id]
        found = {}
        for feature, tags in PASS_THROUGH_FEATURES.items():
            if own.has(*tags):
                continue
            directions = self.feature_directions(location_id, tags, context)
            if directions:
                found[feature] = directions
        return found

    def feature_directions(
        self,
        start_id: str,
        tags: Sequence[str],
        context: SynthesisContext
    ) -> Tuple[str, ...]:
        """Compass directions of cells carrying ``tags`` near ``start_id``."""

        max_depth = context.config.pass_through_depth
        visited = {start_id}
        found = set()

        queue = deque(
            (target, DIRECTION_OFFSETS.get(direction, (0, 0)), 1)
            for target, direction in context.graph.exits_of(start_id)
        )

        while queue:
            location_id, (cx, cy), depth = queue.popleft()
            if location_id in visited:
                continue
            visited.add(location_id)

            info = context.terrain_info.get(location_id)
            if info is not None and info.has(*tags):
                direction = compass_direction(cx, cy)
                if direction is not None:
                    found.add(direction)

            if depth < max_depth:
                for target, direction in context.graph.exits_of(location_id):
                    if target not in visited:
                        dx, dy = DIRECTION_OFFSETS.get(direction, (0, 0))
                        queue.append((target, (cx + dx, cy + dy), depth + 1))

        return tuple(direction for direction in COMPASS if direction in found)

    def canonical_order(self, features: List[NeighborContext]) -> List[NeighborContext]:
        return sorted(features, key=lambda neighbor_context: neighbor_context.location_id)
