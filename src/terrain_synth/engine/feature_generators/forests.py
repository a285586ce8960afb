"""
Forest region generator.

Scatters trees across whole forest regions so canopies flow over tile edges
instead of sitting in a grid of per-tile clumps.
"""

import logging
from typing import Dict, List

import numpy as np
from scipy.spatial import cKDTree

from ...models import ForestRegion, Point, TreePlacement
from .base import FeatureGenerator, SynthesisContext, seeded_rng, stable_hash


logger = logging.getLogger("terrain_synth.forests")

# Seed stride between the candidate trees of one cell
TREE_SEED_STRIDE = 31


class ForestGenerator(FeatureGenerator):
    """
    Generates tree placements for connected forest regions.

    Candidates are drawn around every member cell, a little wider than the
    tile, and kept when they fall near any member centre. The accepted set is
    returned in painter's order (depth tier, then y).
    """

    category = "forest_regions"

    def generate(self, context: SynthesisContext) -> List[ForestRegion]:
        forests = []

        for region in context.regions_with("forest"):
            positions = context.positions_of(region.location_ids)
            if not positions:
                continue

            forests.append(ForestRegion(
                trees=self.scatter_trees(positions, context),
                location_ids=region.location_ids
            ))

        logger.debug(
            "Scattered %d trees over %d forest regions",
            sum(len(forest.trees) for forest in forests), len(forests)
        )
        return forests

    def scatter_trees(self, positions: Dict[str, Point], context: SynthesisContext) -> List[TreePlacement]:
        """Pseudo-Poisson scatter over the union of the member cells."""

        config = context.config
        size = config.terrain_size
        spread = size * config.forest_spread_ratio
        reach = size * config.forest_containment_ratio

        centers = cKDTree(np.asarray(list(positions.values()), dtype=float))
        trees = []

        for location_id, (cx, cy) in positions.items():
            seed = stable_hash(location_id)
            extra = config.max_trees_per_cell - config.min_trees_per_cell + 1
            tree_count = config.min_trees_per_cell + int(seeded_rng(seed).integers(extra))

            for i in range(tree_count):
                rng = seeded_rng(seed + i * TREE_SEED_STRIDE)
                tx = cx + (rng.random() - 0.5) * 2.0 * spread
                ty = cy + (rng.random() - 0.5) * 2.0 * spread

                distance, _ = centers.query((tx, ty))
                if distance >= reach:
                    continue

                base_size = size * (config.tree_size_min_ratio + rng.random() * config.tree_size_range_ratio)
                depth = int(rng.integers(config.depth_tiers))
                trees.append(TreePlacement(
                    x=float(tx),
                    y=float(ty),
                    size=float(base_size * (0.7 + depth * 0.15)),
                    seed=seed + i,
                    depth=depth
                ))

        trees.sort(key=lambda tree: (tree.depth, tree.y))
        return trees
