"""
Region graph for continuous terrain synthesis.

Builds the location adjacency map from exit lists and partitions locations
into connected regions so features can span tile boundaries.
"""

import logging
from collections import deque
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from ..models import Location, Region


logger = logging.getLogger("terrain_synth.regions")

AdjacencyLookup = Callable[[str], Sequence[str]]


class RegionGraph:
    """
    Adjacency between the locations of one snapshot.

    Exits naming an id outside the snapshot are dropped. Edges are made
    symmetric so region membership does not depend on where a flood fill
    starts.
    """

    def __init__(self, locations: Iterable[Location], symmetric: bool = True):
        locations = list(locations)
        known = {location.id for location in locations}

        self.adjacency: Dict[str, List[str]] = {location.id: [] for location in locations}
        # Exits as listed in the snapshot, one-way and with their direction
        self.exits: Dict[str, Tuple[Tuple[str, str], ...]] = {
            location.id: tuple((exit_.location_id, exit_.direction) for exit_ in location.exits)
            for location in locations
        }
        self.dangling_exits = 0

        for location in locations:
            for exit_ in location.exits:
                target = exit_.location_id
                if target not in known:
                    self.dangling_exits += 1
                    continue
                if target == location.id:
                    continue
                self._link(location.id, target)
                if symmetric:
                    self._link(target, location.id)

        if self.dangling_exits:
            logger.debug("Skipped %d exits pointing outside the snapshot", self.dangling_exits)

    def _link(self, source: str, target: str) -> None:
        neighbors = self.adjacency[source]
        if target not in neighbors:
            neighbors.append(target)

    def __contains__(self, location_id: object) -> bool:
        return location_id in self.adjacency

    def __len__(self) -> int:
        return len(self.adjacency)

    def neighbors(self, location_id: str) -> Sequence[str]:
        """Neighbours of a location; empty for unknown ids."""
        return tuple(self.adjacency.get(location_id, ()))

    def exits_of(self, location_id: str) -> Tuple[Tuple[str, str], ...]:
        """``(target, direction)`` pairs of a location's own exits."""
        return self.exits.get(location_id, ())

    def edge_count(self) -> int:
        return sum(len(neighbors) for neighbors in self.adjacency.values())


def find_connected_regions(
    candidates: Iterable[str],
    neighbors: AdjacencyLookup,
    category: str = ""
) -> List[Region]:
    """
    Partition ``candidates`` into maximal connected components.

    Flood fill is breadth-first and only crosses edges between candidates.
    Unvisited candidates are taken in ascending id order, so regions come out
    ordered by their smallest member id.
    """

    members = set(candidates)
    visited = set()
    regions = []

    for start_id in sorted(members):
        if start_id in visited:
            continue

        group = []
        queue = deque([start_id])
        visited.add(start_id)

        while queue:
            location_id = queue.popleft()
            group.append(location_id)

            for neighbor_id in neighbors(location_id):
                if neighbor_id in members and neighbor_id not in visited:
                    visited.add(neighbor_id)
                    queue.append(neighbor_id)

        regions.append(Region(category=category, location_ids=tuple(sorted(group))))

    return regions


def find_regions_where(
    predicate: Callable[[str], bool],
    graph: RegionGraph,
    category: str = ""
) -> List[Region]:
    """Connected regions of all graph locations matching ``predicate``."""

    candidates = [location_id for location_id in graph.adjacency if predicate(location_id)]
    return find_connected_regions(candidates, graph.neighbors, category)

