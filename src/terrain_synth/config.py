"""
Synthesis configuration.

Every geometric constant used by the feature generators lives here so a
caller can tune the look of the map without touching the algorithms.
Defaults reproduce the hand-drawn map style.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SynthesisConfig(BaseModel):
    """Tunable parameters for continuous terrain synthesis."""

    model_config = ConfigDict(frozen=True)

    terrain_size: float = Field(100.0, gt=0, description="Edge length of one map cell in screen units")

    # Lakes
    lake_radius_ratio: float = Field(0.42, gt=0, le=2.0, description="Nominal lake radius per cell")
    lake_ring_points: int = Field(16, ge=3, le=256, description="Points on a single-cell lake ring")
    lake_ring_jitter: float = Field(0.1, ge=0, lt=1.0, description="Radius jitter for single-cell lakes")
    lake_ring_squash: float = Field(0.85, gt=0, le=1.0, description="Vertical compression of single-cell lakes")
    lake_cloud_points: int = Field(8, ge=3, le=64, description="Points per member in multi-cell lake clouds")
    lake_cloud_jitter: float = Field(0.15, ge=0, lt=1.0, description="Radius jitter for lake clouds")
    lake_cloud_squash: float = Field(0.9, gt=0, le=1.0, description="Vertical compression of lake clouds")
    chaikin_passes: int = Field(2, ge=0, le=6, description="Corner-cutting passes on lake hulls")

    # Rivers
    river_width_ratio: float = Field(0.12, gt=0, le=1.0, description="River stroke width per cell")

    # Forests
    forest_spread_ratio: float = Field(0.45, gt=0, le=2.0, description="Max tree offset from its cell centre")
    forest_containment_ratio: float = Field(0.55, gt=0, le=2.0, description="Max tree distance to a member centre")
    min_trees_per_cell: int = Field(6, ge=0, le=64)
    max_trees_per_cell: int = Field(9, ge=0, le=64)
    tree_size_min_ratio: float = Field(0.08, gt=0, le=1.0)
    tree_size_range_ratio: float = Field(0.06, ge=0, le=1.0)
    depth_tiers: int = Field(3, ge=1, le=8, description="Number of painter's-order depth tiers")

    # Mountains
    peaks_per_member: int = Field(1, ge=1, le=8)
    peak_spread_ratio: float = Field(0.2, ge=0, le=2.0, description="Horizontal peak jitter per cell")
    peak_lift_ratio: float = Field(0.15, ge=0, le=2.0, description="Upward peak offset per cell")
    peak_wobble_ratio: float = Field(0.1, ge=0, le=2.0, description="Vertical peak jitter per cell")

    # Elevation markers
    highland_threshold: float = Field(0.55, gt=-1.0, lt=1.0)
    lowland_threshold: float = Field(-0.1, gt=-1.0, lt=1.0)
    max_contour_rings: int = Field(3, ge=1, le=8)

    # Neighbour context
    pass_through_depth: int = Field(4, ge=1, le=16, description="Exit steps searched for continuing features")

    # Execution
    workers: int = Field(1, ge=1, le=32, description="Threads used to run category generators")
    cache_size: int = Field(8, ge=0, le=1024, description="Synthesis results memoized per world revision")

    @model_validator(mode="after")
    def _check_ranges(self) -> "SynthesisConfig":
        if self.max_trees_per_cell < self.min_trees_per_cell:
            raise ValueError("max_trees_per_cell must be >= min_trees_per_cell")
        if self.lowland_threshold >= self.highland_threshold:
            raise ValueError("lowland_threshold must be below highland_threshold")
        return self

    @property
    def river_width(self) -> float:
        return self.terrain_size * self.river_width_ratio

    @property
    def lake_radius(self) -> float:
        return self.terrain_size * self.lake_radius_ratio
