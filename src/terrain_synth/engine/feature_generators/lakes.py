"""
Lake region generator.

Merges connected lake and water cells into single bodies of water with an
organic, smoothed shoreline.
"""

import logging
from typing import List, Sequence

from ...models import LakeRegion, Point
from ..geometry import centroid, chaikin, convex_hull, jittered_ring
from .base import FeatureGenerator, SynthesisContext, point_key, seeded_rng, stable_hash


logger = logging.getLogger("terrain_synth.lakes")

WATER_TAGS = ("lake", "water")


class LakeGenerator(FeatureGenerator):
    """
    Generates lake boundaries across tile edges.

    Single cells get a wobbly near-circular ring. Larger lakes expand every
    cell into a small point cloud, wrap the clouds in a convex hull and round
    the corners with Chaikin subdivision.
    """

    category = "lake_regions"

    def generate(self, context: SynthesisContext) -> List[LakeRegion]:
        lakes = []

        for region in context.regions_with(*WATER_TAGS, category="lake"):
            positions = context.positions_of(region.location_ids)
            if not positions:
                continue

            cell_positions = list(positions.values())
            lakes.append(LakeRegion(
                boundary=self.compute_boundary(cell_positions, context),
                center=centroid(cell_positions),
                location_ids=region.location_ids
            ))

        logger.debug("Built %d lake regions", len(lakes))
        return lakes

    def compute_boundary(self, positions: Sequence[Point], context: SynthesisContext) -> List[Point]:
        """Shoreline polygon around the given cell centres."""

        config = context.config
        radius = config.lake_radius

        if len(positions) == 1:
            return self._single_cell_ring(positions[0], radius, config)

        hull = convex_hull(self.shoreline_cloud(positions, context))
        return chaikin(hull, config.chaikin_passes)

    def shoreline_cloud(self, positions: Sequence[Point], context: SynthesisContext) -> List[Point]:
        """Jittered, slightly flattened point ring around every member cell."""

        config = context.config
        spread = config.lake_cloud_jitter
        cloud = []
        for position in positions:
            seed = stable_hash(point_key(position))
            cloud.extend(jittered_ring(
                position, config.lake_radius, config.lake_cloud_points,
                wobble=lambda i, s=seed: 1.0 - spread + seeded_rng(s + i).random() * 2.0 * spread,
                squash=config.lake_cloud_squash
            ))
        return cloud

    def _single_cell_ring(self, center: Point, radius: float, config) -> List[Point]:
        seed = stable_hash(point_key(center))
        spread = config.lake_ring_jitter
        return jittered_ring(
            center, radius, config.lake_ring_points,
            wobble=lambda i: 1.0 - spread + seeded_rng(seed + i).random() * 2.0 * spread,
            squash=config.lake_ring_squash
        )
