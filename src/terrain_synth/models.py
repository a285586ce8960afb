"""
Data model for terrain synthesis.

Input records describe one snapshot of the world graph. Output records are
the geometric primitives handed to the map renderer. Member id collections
are kept as sorted tuples so serialized results are byte-identical between
runs and processes.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


Point = Tuple[float, float]

# Compass order; also the order direction tuples are reported in
COMPASS = ("north", "northeast", "east", "southeast", "south", "southwest", "west", "northwest")
EXIT_DIRECTIONS = COMPASS + ("enter", "unknown")


# Input records

class Exit(BaseModel):
    model_config = ConfigDict(frozen=True)

    location_id: str
    direction: str = "unknown"

    @field_validator("direction", mode="before")
    @classmethod
    def _normalize_direction(cls, value):
        if isinstance(value, str):
            return value.lower()
        return value


class Location(BaseModel):
    """One map location as it appears in a world snapshot."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    exits: Tuple[Exit, ...] = ()
    grid_x: Optional[int] = None
    grid_y: Optional[int] = None
    biome: Optional[str] = None
    terrain_tags: Optional[Tuple[str, ...]] = None
    elevation: Optional[float] = Field(None, ge=-1.0, le=1.0)
    moisture: Optional[float] = None
    is_river: Optional[bool] = None
    is_coast: Optional[bool] = None

    @property
    def grid_position(self) -> Optional[Tuple[int, int]]:
        if self.grid_x is None or self.grid_y is None:
            return None
        return (self.grid_x, self.grid_y)


class TerrainOverrides(BaseModel):
    """Admin overrides for a single location; only elevation matters here."""

    model_config = ConfigDict(frozen=True)

    elevation: Optional[float] = Field(None, ge=-1.0, le=1.0)


# Derived / output records

class TerrainInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    tags: Tuple[str, ...]
    elevation: float
    moisture: float = 0.5
    is_river: bool = False
    is_coast: bool = False
    biome: Optional[str] = None

    def has(self, *tags: str) -> bool:
        return any(tag in self.tags for tag in tags)


class Region(BaseModel):
    """A maximal set of mutually reachable locations sharing a category."""

    model_config = ConfigDict(frozen=True)

    category: str
    location_ids: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.location_ids)

    def __contains__(self, location_id: object) -> bool:
        return location_id in self.location_ids


class LakeRegion(BaseModel):
    model_config = ConfigDict(frozen=True)

    boundary: List[Point]
    center: Point
    location_ids: Tuple[str, ...]


class RiverPath(BaseModel):
    model_config = ConfigDict(frozen=True)

    points: List[Point]
    location_ids: Tuple[str, ...]
    width: float
    # Set when the trace ended by joining a cell of an earlier path.
    merge_location_id: Optional[str] = None


class TreePlacement(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    size: float
    seed: int
    depth: int = Field(..., ge=0)


class ForestRegion(BaseModel):
    model_config = ConfigDict(frozen=True)

    trees: List[TreePlacement]
    location_ids: Tuple[str, ...]


class MountainRidge(BaseModel):
    model_config = ConfigDict(frozen=True)

    peaks: List[Point]
    ridge_path: List[Point]
    ridge_ids: Tuple[str, ...]
    location_ids: Tuple[str, ...]

    def peaks_for(self, location_id: str) -> List[Point]:
        """Peaks belonging to one ridge member."""
        if location_id not in self.ridge_ids:
            return []
        per_member = len(self.peaks) // max(len(self.ridge_ids), 1)
        start = self.ridge_ids.index(location_id) * per_member
        return self.peaks[start:start + per_member]


class ElevationMarker(BaseModel):
    """Contour rings for highland cells or an ink-wash disc for lowland cells."""

    model_config = ConfigDict(frozen=True)

    location_id: str
    kind: str  # "contour" or "wash"
    center: Point
    intensity: float
    rings: List[List[Point]] = Field(default_factory=list)
    radius: float = 0.0


class PointFeature(BaseModel):
    """Per-tile terrain that is drawn in place rather than as a continuous shape."""

    model_config = ConfigDict(frozen=True)

    location_id: str
    position: Point
    landmarks: Tuple[str, ...] = ()
    ground: Tuple[str, ...] = ()


class NeighborElevations(BaseModel):
    """Elevation of the cardinal neighbours; None where there is no exit."""

    model_config = ConfigDict(frozen=True)

    north: Optional[float] = None
    south: Optional[float] = None
    east: Optional[float] = None
    west: Optional[float] = None


class NeighborRivers(BaseModel):
    model_config = ConfigDict(frozen=True)

    north: bool = False
    south: bool = False
    east: bool = False
    west: bool = False


class NeighborContext(BaseModel):
    """
    What surrounds one tile, for drawing features continuously across it.

    ``pass_through`` maps a feature name to the compass directions in which
    that feature lies a few steps away. It is empty for features the tile
    already has itself.
    """

    model_config = ConfigDict(frozen=True)

    location_id: str
    elevations: NeighborElevations = Field(default_factory=NeighborElevations)
    rivers: NeighborRivers = Field(default_factory=NeighborRivers)
    pass_through: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)

    def continues(self, feature: str) -> bool:
        """True when ``feature`` lies in at least two directions."""
        return len(self.pass_through.get(feature, ())) >= 2


class TerrainSynthesisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    terrain_info: Dict[str, TerrainInfo]
    river_paths: List[RiverPath] = Field(default_factory=list)
    lake_regions: List[LakeRegion] = Field(default_factory=list)
    forest_regions: List[ForestRegion] = Field(default_factory=list)
    mountain_ridges: List[MountainRidge] = Field(default_factory=list)
    elevation_markers: List[ElevationMarker] = Field(default_factory=list)
    point_features: List[PointFeature] = Field(default_factory=list)
    neighbor_contexts: List[NeighborContext] = Field(default_factory=list)
    coord_to_location_id: Dict[Tuple[int, int], str] = Field(default_factory=dict)

    def summary(self) -> Dict[str, int]:
        return {
            "locations": len(self.terrain_info),
            "rivers": len(self.river_paths),
            "lakes": len(self.lake_regions),
            "forests": len(self.forest_regions),
            "trees": sum(len(region.trees) for region in self.forest_regions),
            "mountain_ridges": len(self.mountain_ridges),
            "elevation_markers": len(self.elevation_markers),
            "point_features": len(self.point_features),
            "pass_through_tiles": sum(
                1 for context in self.neighbor_contexts
                if any(context.continues(feature) for feature in context.pass_through)
            ),
        }
