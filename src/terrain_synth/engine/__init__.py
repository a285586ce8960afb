"""
Continuous terrain synthesis engine.

Builds cross-tile geographic features from a graph of discrete map
locations.
"""

from .region_graph import RegionGraph, find_connected_regions, find_regions_where
from .terrain_classifier import TerrainClassifier, elevation_description
from .terrain_composer import TerrainSynthesizer, grid_positions, grid_projection

__all__ = [
    "TerrainSynthesizer", "TerrainClassifier", "RegionGraph",
    "find_connected_regions", "find_regions_where", "elevation_description",
    "grid_positions", "grid_projection"
]
