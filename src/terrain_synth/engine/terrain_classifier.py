"""
Terrain classification for map locations.

Maps a location's biome (preferred) or free-text description onto a set of
terrain tags, then derives an elevation for the tags when the snapshot does
not carry one.
"""

import re
from typing import Dict, Iterable, Optional, Tuple

from ..models import Location, TerrainInfo, TerrainOverrides


TERRAIN_TYPES = (
    "road", "forest", "water", "stream", "river", "lake", "mountain", "grass",
    "building", "cave", "desert", "coast", "hills", "swamp", "church",
    "castle", "port", "ruins",
)

# Tags drawn in place on a single tile rather than as continuous shapes
LANDMARK_TAGS = ("building", "castle", "church", "cave", "ruins", "port", "road")
GROUND_TAGS = ("grass", "desert", "swamp", "hills", "coast", "stream")


class TerrainClassifier:
    """
    Classifies locations into terrain tags and elevation.

    Classification is a pure function of the location record (plus optional
    admin overrides), so identical snapshots always classify identically.
    """

    BIOME_TERRAINS: Dict[str, Tuple[str, ...]] = {
        "TROPICAL_RAIN_FOREST": ("forest", "grass"),
        "TEMPERATE_RAIN_FOREST": ("forest", "grass"),
        "TROPICAL_SEASONAL_FOREST": ("forest",),
        "TEMPERATE_DECIDUOUS_FOREST": ("forest",),
        "GRASSLAND": ("grass",),
        "TROPICAL_GRASSLAND": ("grass",),
        "SHRUBLAND": ("grass",),
        "TAIGA": ("forest", "hills"),
        "TUNDRA": ("grass",),
        "DESERT": ("desert",),
        "SUBTROPICAL_DESERT": ("desert",),
        "TEMPERATE_DESERT": ("desert",),
        "MARSH": ("swamp",),
        "LAKE": ("lake",),
        "OCEAN": ("water",),
        "DEEP_OCEAN": ("water",),
        "MOUNTAIN": ("mountain",),
        "SNOW": ("mountain",),
        "BARE": ("desert",),
        "SCORCHED": ("desert",),
    }
    DEFAULT_BIOME_TERRAIN = ("grass",)

    KEYWORDS: Dict[str, Tuple[str, ...]] = {
        "road": ("road", "path", "trail", "highway", "street", "lane", "way"),
        "forest": ("forest", "tree", "wood", "grove", "copse", "timber", "oak", "pine", "jungle"),
        "stream": ("stream", "creek", "brook"),
        "river": ("river",),
        "water": ("water", "shore", "bank", "spring", "pool", "falls", "waterfall", "fountain"),
        "mountain": ("mountain", "peak", "summit", "cliff", "crag", "alpine"),
        "hills": ("foothill", "hill", "hilltop", "rolling", "knoll", "mound", "ridge"),
        "grass": ("meadow", "field", "plain", "prairie", "grass", "clearing", "pasture", "savanna"),
        "building": (
            "building", "house", "cottage", "cabin", "shack", "hut", "home", "shop", "inn",
            "tavern", "store", "barn", "farm", "mill", "tower", "fort", "outpost", "camp",
        ),
        "cave": ("cave", "cavern", "grotto", "underground", "tunnel", "dungeon", "crypt", "catacomb", "mine"),
        "desert": ("desert", "dune", "sand", "oasis", "barren", "wasteland", "badland"),
        "coast": (
            "coast", "beach", "shore", "bay", "cove", "harbor", "dock", "pier", "wharf",
            "marina", "seashore", "seaside", "oceanfront", "seafront",
        ),
        "swamp": ("swamp", "marsh", "bog", "fen", "mire", "wetland", "bayou", "moor"),
        "church": (
            "church", "chapel", "temple", "shrine", "monastery", "abbey", "cathedral",
            "sanctuary", "holy", "sacred",
        ),
        "castle": ("castle", "fortress", "citadel", "stronghold", "keep", "palace", "manor", "estate"),
        "port": (
            "port", "harbor", "harbour", "dock", "pier", "wharf", "marina", "quay", "jetty",
            "mooring", "anchorage", "shipyard", "drydock",
        ),
        "ruins": (
            "ruin", "ancient", "crumbl", "decay", "abandon", "remnant", "vestige",
            "wreckage", "debris", "dilapidated",
        ),
    }

    LAKE_NAME_WORDS = ("lake", "pond")
    LAKE_PHRASE = re.compile(r"\b(the|a|this|in the|on the|of the|into the|across the) (lake|pond)\b")

    # (tag, elevation, "max" raises the level, "min" lowers it), applied in order
    ELEVATION_RULES = (
        ("mountain", 0.9, "max"),
        ("hills", 0.5, "max"),
        ("castle", 0.4, "max"),
        ("church", 0.3, "max"),
        ("building", 0.25, "max"),
        ("forest", 0.15, "max"),
        ("grass", 0.1, "max"),
        ("road", 0.05, "max"),
        ("desert", 0.1, "max"),
        ("swamp", 0.0, "min"),
        ("coast", 0.0, "min"),
        ("river", -0.2, "min"),
        ("stream", -0.1, "min"),
        ("lake", -0.4, "min"),
        ("port", -0.1, "min"),
    )
    BASE_ELEVATION = 0.2
    DEFAULT_MOISTURE = 0.5

    def classify(self, location: Location, overrides: Optional[TerrainOverrides] = None) -> TerrainInfo:
        """Terrain info for one location."""

        if location.terrain_tags is not None:
            tags = set(tag.lower() for tag in location.terrain_tags)
        elif location.biome is not None:
            tags = self.terrain_from_biome(location.biome)
        else:
            tags = self.terrain_from_text(location.description, location.name)
        tags.update(self._flag_tags(bool(location.is_river), bool(location.is_coast)))

        if location.elevation is not None:
            elevation = location.elevation
        else:
            override = overrides.elevation if overrides is not None else None
            elevation = self.elevation_from_terrain(tags, override)

        is_river = location.is_river if location.is_river is not None else bool(tags & {"river", "stream"})
        is_coast = location.is_coast if location.is_coast is not None else "coast" in tags

        return TerrainInfo(
            tags=tuple(sorted(tags)),
            elevation=elevation,
            moisture=location.moisture if location.moisture is not None else self.DEFAULT_MOISTURE,
            is_river=is_river,
            is_coast=is_coast,
            biome=location.biome
        )

    def terrain_from_biome(self, biome: str, is_river: bool = False, is_coast: bool = False) -> set:
        """Tags for a world-generation biome name; unknown biomes read as grass."""

        tags = set(self.BIOME_TERRAINS.get(biome.upper(), self.DEFAULT_BIOME_TERRAIN))
        tags.update(self._flag_tags(is_river, is_coast))
        return tags

    def terrain_from_text(self, description: str, name: str = "") -> set:
        """Tags found by keyword in a location's description and name."""

        text = f"{description} {name}".lower()
        name_lower = name.lower()
        tags = set()

        for tag, words in self.KEYWORDS.items():
            if _contains_any(text, words):
                tags.add(tag)

        is_lake_by_name = _contains_any(name_lower, self.LAKE_NAME_WORDS)
        if is_lake_by_name or self.LAKE_PHRASE.search(text):
            tags.add("lake")

        return tags

    def elevation_from_terrain(self, tags: Iterable[str], override: Optional[float] = None) -> float:
        """Heuristic elevation: high ground raises it, water and wetland lower it."""

        if override is not None:
            return override

        tags = set(tags)
        elevation = self.BASE_ELEVATION
        for tag, level, mode in self.ELEVATION_RULES:
            if tag in tags:
                elevation = max(elevation, level) if mode == "max" else min(elevation, level)
        return elevation

    @staticmethod
    def _flag_tags(is_river: bool, is_coast: bool) -> set:
        tags = set()
        if is_river:
            tags.add("river")
        if is_coast:
            tags.add("coast")
        return tags


def _contains_any(text: str, words: Iterable[str]) -> bool:
    return any(word in text for word in words)


def elevation_description(elevation: float) -> str:
    """Human-readable label for an elevation in [-1, 1]."""

    if elevation < -0.5:
        return "deep underwater"
    if elevation < -0.2:
        return "underwater"
    if elevation < 0.0:
        return "low-lying"
    if elevation < 0.3:
        return "flat terrain"
    if elevation < 0.5:
        return "rolling hills"
    if elevation < 0.7:
        return "highlands"
    if elevation < 0.9:
        return "mountains"
    return "peak"
