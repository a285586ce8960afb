"""
Continuous terrain synthesis.

Turns a snapshot of discrete map locations into cross-tile features
(lakes, rivers, forests, mountain ridges) for the map renderer.
"""

import logging
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple, TypeVar

from ..config import SynthesisConfig
from ..models import Location, Point, PointFeature, TerrainInfo, TerrainOverrides, TerrainSynthesisResult
from .feature_generators import (
    ElevationGenerator, ForestGenerator, LakeGenerator, MountainGenerator, NeighborContextGenerator, RiverGenerator
)
from .feature_generators.base import FeatureGenerator, SynthesisContext
from .region_graph import RegionGraph
from .terrain_classifier import GROUND_TAGS, LANDMARK_TAGS, TerrainClassifier


logger = logging.getLogger("terrain_synth.engine")

P = TypeVar("P")
Projection = Callable[[P], Optional[Point]]


def grid_projection(cell_size: float, origin: Point = (0.0, 0.0)) -> Projection:
    """Projection for ``(grid_x, grid_y)`` positions onto a square grid."""

    def project(position: Tuple[int, int]) -> Point:
        return (origin[0] + position[0] * cell_size, origin[1] + position[1] * cell_size)

    return project


def grid_positions(locations: Iterable[Location]) -> Dict[str, Tuple[int, int]]:
    """Grid coordinates of every placed location."""
    return {
        location.id: location.grid_position
        for location in locations
        if location.grid_position is not None
    }


class TerrainSynthesizer:
    """
    Feature-based terrain synthesis over a world snapshot.

    Every run is a pure function of its inputs: randomness is seeded from
    stable hashes of location ids and positions, so identical snapshots give
    identical results.
    """

    def __init__(self, config: Optional[SynthesisConfig] = None, classifier: Optional[TerrainClassifier] = None):
        self.config = config or SynthesisConfig()
        self.classifier = classifier or TerrainClassifier()

        # Initialize feature generators
        self.feature_generators: Dict[str, FeatureGenerator] = {
            "rivers": RiverGenerator(),
            "lakes": LakeGenerator(),
            "forests": ForestGenerator(),
            "mountains": MountainGenerator(),
            "elevation": ElevationGenerator(),
            "neighbors": NeighborContextGenerator(),
        }

        self._cache: "OrderedDict[Hashable, TerrainSynthesisResult]" = OrderedDict()

    def synthesize(
        self,
        locations: Iterable[Location],
        positions: Mapping[str, P],
        project: Projection,
        overrides: Optional[Mapping[str, TerrainOverrides]] = None,
        revision: Optional[Hashable] = None
    ) -> TerrainSynthesisResult:
        """
        Compute continuous terrain for all locations of a snapshot.

        Args:
            locations: Location records of the snapshot
            positions: Caller-side position of each location, any type
            project: Maps a position to screen ``(x, y)``, or None when it
                cannot be placed
            overrides: Admin terrain overrides keyed by location id
            revision: World revision token; results are memoized per token

        Returns:
            TerrainSynthesisResult with every feature category
        """

        if revision is not None and revision in self._cache:
            self._cache.move_to_end(revision)
            return self._cache[revision]

        locations = list(locations)
        overrides = overrides or {}

        terrain_info = {
            location.id: self.classifier.classify(location, overrides.get(location.id))
            for location in locations
        }
        graph = RegionGraph(locations)
        screen_positions = self._project_positions(locations, positions, project)

        context = SynthesisContext(terrain_info, graph, screen_positions, self.config)
        features = self._run_generators(context)

        result = TerrainSynthesisResult(
            terrain_info=terrain_info,
            point_features=self._point_features(terrain_info, screen_positions),
            coord_to_location_id=self._coord_index(locations),
            **features
        )

        logger.debug("Synthesized terrain: %s", result.summary())

        if revision is not None and self.config.cache_size > 0:
            self._cache[revision] = result
            while len(self._cache) > self.config.cache_size:
                self._cache.popitem(last=False)

        return result

    def clear_cache(self) -> None:
        self._cache.clear()

    def _project_positions(
        self,
        locations: List[Location],
        positions: Mapping[str, P],
        project: Projection
    ) -> Dict[str, Point]:
        """Resolve screen positions once; unplaceable locations are left out."""

        resolved = {}
        skipped = 0
        for location in locations:
            if location.id not in positions:
                skipped += 1
                continue
            point = project(positions[location.id])
            if point is None:
                skipped += 1
                continue
            resolved[location.id] = (float(point[0]), float(point[1]))

        if skipped:
            logger.debug("%d locations have no projected position", skipped)
        return resolved

    def _run_generators(self, context: SynthesisContext) -> Dict[str, list]:
        generators = list(self.feature_generators.values())

        if self.config.workers <= 1:
            return {generator.category: generator.generate(context) for generator in generators}

        # Generators share only read-only state; completion order is not
        # guaranteed, so each category is put back into canonical order.
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            futures = {
                generator.category: (generator, executor.submit(generator.generate, context))
                for generator in generators
            }
            return {
                category: generator.canonical_order(future.result())
                for category, (generator, future) in futures.items()
            }

    def _point_features(
        self,
        terrain_info: Mapping[str, TerrainInfo],
        positions: Mapping[str, Point]
    ) -> List[PointFeature]:
        features = []
        for location_id in sorted(positions):
            info = terrain_info[location_id]
            landmarks = tuple(tag for tag in info.tags if tag in LANDMARK_TAGS)
            ground = tuple(tag for tag in info.tags if tag in GROUND_TAGS)
            if landmarks or ground:
                features.append(PointFeature(
                    location_id=location_id,
                    position=positions[location_id],
                    landmarks=landmarks,
                    ground=ground
                ))
        return features

    def _coord_index(self, locations: List[Location]) -> Dict[Tuple[int, int], str]:
        index = {}
        for location in locations:
            if location.grid_position is not None:
                index[location.grid_position] = location.id
        return index
