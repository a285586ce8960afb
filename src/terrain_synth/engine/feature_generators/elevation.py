"""
Elevation marker generator.

Produces faint contour rings around highland cells and ink-wash discs under
lowland cells.
"""

from typing import List

from ...models import ElevationMarker
from ..geometry import jittered_ring
from .base import FeatureGenerator, SynthesisContext, seeded_rng, stable_hash


RING_SEED_STRIDE = 100


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class ElevationGenerator(FeatureGenerator):
    """Generates per-cell elevation markers."""

    category = "elevation_markers"

    def generate(self, context: SynthesisContext) -> List[ElevationMarker]:
        config = context.config
        size = config.terrain_size
        markers = []

        for location_id in sorted(context.positions):
            info = context.terrain_info.get(location_id)
            if info is None:
                continue
            center = context.positions[location_id]
            elevation = info.elevation

            if elevation > config.highland_threshold:
                intensity = _clamp01(
                    (elevation - config.highland_threshold) / (1.0 - config.highland_threshold)
                )
                ring_count = min(1 + int(intensity * 2), config.max_contour_rings)
                seed = stable_hash(location_id)

                rings = []
                for ring in range(ring_count):
                    ring_seed = seed + ring * RING_SEED_STRIDE
                    rings.append(jittered_ring(
                        center, size * (0.25 + ring * 0.12), 8,
                        wobble=lambda i, s=ring_seed: 1.0 + (seeded_rng(s + i).random() - 0.5) * 0.15,
                        squash=0.8
                    ))

                markers.append(ElevationMarker(
                    location_id=location_id, kind="contour",
                    center=center, intensity=intensity, rings=rings
                ))

            elif elevation < config.lowland_threshold:
                intensity = _clamp01(
                    (config.lowland_threshold - elevation) / (1.0 + config.lowland_threshold)
                )
                markers.append(ElevationMarker(
                    location_id=location_id, kind="wash",
                    center=center, intensity=intensity, radius=size * 0.4
                ))

        return markers

    def canonical_order(self, features: List[ElevationMarker]) -> List[ElevationMarker]:
        return sorted(features, key=lambda marker: marker.location_id)
