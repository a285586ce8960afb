"""
Feature generators for continuous terrain.

Each generator turns one category of connected map cells into
renderer-ready geometry.
"""

from .base import FeatureGenerator, SynthesisContext
from .lakes import LakeGenerator
from .rivers import RiverGenerator
from .forests import ForestGenerator
from .mountains import MountainGenerator
from .elevation import ElevationGenerator
from .neighbors import NeighborContextGenerator

__all__ = [
    "FeatureGenerator", "SynthesisContext", "LakeGenerator", "RiverGenerator",
    "ForestGenerator", "MountainGenerator", "ElevationGenerator", "NeighborContextGenerator"
]
