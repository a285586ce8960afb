"""
Mountain ridge generator.

Creates ridgelines and peak positions for connected mountain regions.
"""

import logging
from typing import Dict, List, Tuple

from ...models import MountainRidge, Point
from .base import FeatureGenerator, SynthesisContext, seeded_rng, stable_hash


logger = logging.getLogger("terrain_synth.mountains")


class MountainGenerator(FeatureGenerator):
    """
    Generates mountain ridges.

    Members are ordered west to east (then north to south) to approximate a
    ridgeline, and every member contributes jittered peaks lifted above its
    cell centre.
    """

    category = "mountain_ridges"

    def generate(self, context: SynthesisContext) -> List[MountainRidge]:
        ridges = []

        for region in context.regions_with("mountain"):
            positions = context.positions_of(region.location_ids)
            if not positions:
                continue

            ordered = self._ridge_order(positions)
            peaks = []
            for location_id, position in ordered:
                peaks.extend(self._peaks(location_id, position, context))

            ridges.append(MountainRidge(
                peaks=peaks,
                ridge_path=[position for _, position in ordered],
                ridge_ids=tuple(location_id for location_id, _ in ordered),
                location_ids=region.location_ids
            ))

        logger.debug("Built %d mountain ridges", len(ridges))
        return ridges

    def _ridge_order(self, positions: Dict[str, Point]) -> List[Tuple[str, Point]]:
        return sorted(positions.items(), key=lambda item: (item[1][0], item[1][1], item[0]))

    def _peaks(self, location_id: str, position: Point, context: SynthesisContext) -> List[Point]:
        """Jittered peak points for one ridge member."""

        config = context.config
        size = config.terrain_size
        seed = stable_hash(location_id)
        x, y = position

        peaks = []
        for k in range(config.peaks_per_member):
            rng = seeded_rng(seed + k)
            peaks.append((
                x + (rng.random() - 0.5) * size * config.peak_spread_ratio,
                y - size * config.peak_lift_ratio + (rng.random() - 0.5) * size * config.peak_wobble_ratio
            ))
        return peaks
