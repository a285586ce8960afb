"""
Continuous terrain synthesis for hand-drawn world maps.

This package provides:
- Terrain classification of map locations
- Connected-region discovery over the location graph
- Lake, river, forest, mountain and elevation geometry for the renderer
"""

from .config import SynthesisConfig
from .engine import TerrainSynthesizer, TerrainClassifier, RegionGraph, grid_positions, grid_projection
from .models import Location, Exit, TerrainOverrides, TerrainSynthesisResult

__version__ = "0.1.0"

__all__ = [
    "SynthesisConfig",
    "TerrainSynthesizer",
    "TerrainClassifier",
    "RegionGraph",
    "grid_positions",
    "grid_projection",
    "Location",
    "Exit",
    "TerrainOverrides",
    "TerrainSynthesisResult",
]
