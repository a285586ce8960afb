"""
Base feature generator and common utilities.
"""

import hashlib
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ...config import SynthesisConfig
from ...models import Point, Region, TerrainInfo
from ..region_graph import RegionGraph, find_regions_where


SEED_MODULUS = 2**31 - 1


def stable_hash(text: str) -> int:
    """Process-independent hash of a string, usable as an RNG seed."""

    digest = hashlib.md5(text.encode("utf-8")).hexdigest()
    return int(digest[:8], 16) % SEED_MODULUS


def point_key(point: Point) -> str:
    """Canonical text form of a position for hashing."""
    return f"{point[0]:.4f},{point[1]:.4f}"


def seeded_rng(seed: int) -> np.random.Generator:
    """Independent generator for one stochastic decision."""
    return np.random.default_rng(seed % SEED_MODULUS)


class SynthesisContext:
    """
    Read-only view of one world snapshot shared by all feature generators.

    Positions are resolved once by the synthesizer; locations without a
    projected position are simply absent from ``positions``.
    """

    def __init__(
        self,
        terrain_info: Mapping[str, TerrainInfo],
        graph: RegionGraph,
        positions: Mapping[str, Point],
        config: SynthesisConfig
    ):
        self.terrain_info = terrain_info
        self.graph = graph
        self.positions = positions
        self.config = config

    def ids_where(self, *tags: str) -> List[str]:
        """Ids whose terrain carries any of ``tags``, ascending."""
        return sorted(
            location_id for location_id, info in self.terrain_info.items()
            if info.has(*tags)
        )

    def positions_of(self, location_ids: Sequence[str]) -> Dict[str, Point]:
        """Projected positions for the given ids, skipping unprojectable ones."""
        return {
            location_id: self.positions[location_id]
            for location_id in location_ids
            if location_id in self.positions
        }

    def regions_with(self, *tags: str, category: str = "") -> List[Region]:
        """Connected regions of locations carrying any of ``tags``."""

        def matches(location_id: str) -> bool:
            info = self.terrain_info.get(location_id)
            return info is not None and info.has(*tags)

        return find_regions_where(matches, self.graph, category or tags[0])

    def elevation_of(self, location_id: str) -> float:
        info = self.terrain_info.get(location_id)
        return info.elevation if info is not None else 0.0


class FeatureGenerator(ABC):
    """Base class for all feature generators."""

    # Result-list name on TerrainSynthesisResult
    category: str = ""

    @abstractmethod
    def generate(self, context: SynthesisContext) -> list:
        """Build this feature's primitives from the snapshot."""
        pass

    def canonical_order(self, features: list) -> list:
        """Stable order used when generators run concurrently."""
        return sorted(features, key=lambda feature: feature.location_ids[0])
