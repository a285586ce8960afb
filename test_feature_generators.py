"""
Tests for geometry helpers and the per-category feature generators.
"""

import math

import pytest

from terrain_synth.config import SynthesisConfig
from terrain_synth.engine import RegionGraph, TerrainClassifier, grid_projection
from terrain_synth.engine.feature_generators import (
    ElevationGenerator, ForestGenerator, LakeGenerator, MountainGenerator, NeighborContextGenerator,
    RiverGenerator, SynthesisContext
)
from terrain_synth.engine.geometry import (
    chaikin, chaikin_smooth, convex_hull, cross
)
from terrain_synth.engine.feature_generators.base import stable_hash
from terrain_synth.models import Exit, Location


def cell(location_id, x, y, exits=(), **fields):
    return Location(
        id=location_id, grid_x=x, grid_y=y,
        exits=[Exit(location_id=target) for target in exits],
        **fields
    )


def build_context(locations, config=None):
    config = config or SynthesisConfig()
    classifier = TerrainClassifier()
    project = grid_projection(config.terrain_size)
    return SynthesisContext(
        terrain_info={location.id: classifier.classify(location) for location in locations},
        graph=RegionGraph(locations),
        positions={
            location.id: project(location.grid_position)
            for location in locations if location.grid_position is not None
        },
        config=config
    )


def directed_cell(location_id, x, y, exits=(), **fields):
    """Like ``cell`` but with ``(target, direction)`` exits."""
    return Location(
        id=location_id, grid_x=x, grid_y=y,
        exits=[Exit(location_id=target, direction=direction) for target, direction in exits],
        **fields
    )


def is_convex_ccw(polygon):
    n = len(polygon)
    return all(cross(polygon[i], polygon[(i + 1) % n], polygon[(i + 2) % n]) > 0 for i in range(n))


def is_simple_polygon(polygon):
    """True when no two non-adjacent edges of the closed polygon cross."""

    n = len(polygon)
    if n < 4:
        return True

    def segments_cross(p1, p2, q1, q2):
        return (cross(q1, q2, p1) * cross(q1, q2, p2) < 0) and (cross(p1, p2, q1) * cross(p1, p2, q2) < 0)

    for i in range(n):
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue
            if segments_cross(polygon[i], polygon[(i + 1) % n], polygon[j], polygon[(j + 1) % n]):
                return False
    return True


# ==================== Geometry ====================

def test_convex_hull_drops_interior_and_collinear_points():
    points = [(0, 0), (4, 0), (4, 4), (0, 4), (2, 2), (2, 0), (1, 3)]
    hull = convex_hull(points)

    assert set(hull) == {(0, 0), (4, 0), (4, 4), (0, 4)}
    assert hull[0] == (0, 0)
    assert is_convex_ccw(hull)


def test_convex_hull_pivot_tie_breaks_on_x():
    hull = convex_hull([(3, 0), (1, 0), (2, 5)])
    assert hull[0] == (1, 0)


def test_convex_hull_short_input_unmodified():
    assert convex_hull([]) == []
    assert convex_hull([(1, 2)]) == [(1, 2)]
    assert convex_hull([(1, 2), (3, 4)]) == [(1, 2), (3, 4)]


def test_chaikin_doubling():
    square = [(0.0, 0.0), (4.0, 0.0), (4.0, 4.0), (0.0, 4.0)]

    once = chaikin_smooth(square)
    assert len(once) == 8
    assert once[0] == (1.0, 0.0)
    assert once[1] == (3.0, 0.0)
    # Closing edge is cut as well
    assert once[-1] == (0.0, 1.0)

    assert len(chaikin(square, 2)) == 16
    assert len(chaikin(square, 0)) == 4


def test_chaikin_short_input_unmodified():
    assert chaikin_smooth([(0, 0), (1, 1)]) == [(0, 0), (1, 1)]


def test_simple_polygon_check():
    assert is_simple_polygon([(0, 0), (4, 0), (4, 4), (0, 4)])
    assert not is_simple_polygon([(0, 0), (4, 4), (4, 0), (0, 4)])


# ==================== Lakes ====================

def test_single_cell_lake_ring():
    config = SynthesisConfig()
    context = build_context([cell("pond", 2, 3, biome="LAKE")], config)

    lakes = LakeGenerator().generate(context)

    assert len(lakes) == 1
    lake = lakes[0]
    assert lake.location_ids == ("pond",)
    assert lake.center == (200.0, 300.0)
    assert len(lake.boundary) == 16

    radius = config.lake_radius
    for i, (px, py) in enumerate(lake.boundary):
        dx = px - 200.0
        dy = (py - 300.0) / 0.85
        r = math.hypot(dx, dy)
        assert 0.9 * radius - 1e-9 <= r <= 1.1 * radius + 1e-9
        angle = math.atan2(dy, dx) % (2 * math.pi)
        assert angle == pytest.approx((i / 16) * 2 * math.pi, abs=1e-9)


def test_multi_cell_lake_boundary():
    locations = [
        cell("a", 0, 0, ["b", "c"], biome="LAKE"),
        cell("b", 1, 0, biome="LAKE"),
        cell("c", 0, 1, biome="OCEAN"),
    ]
    context = build_context(locations)

    lakes = LakeGenerator().generate(context)

    assert len(lakes) == 1
    lake = lakes[0]
    assert lake.location_ids == ("a", "b", "c")
    assert lake.center == pytest.approx((100.0 / 3, 100.0 / 3))
    assert len(lake.boundary) % 4 == 0
    assert is_simple_polygon(lake.boundary)
    assert is_convex_ccw(lake.boundary)

    n = len(lake.boundary)
    for center in context.positions.values():
        assert all(cross(lake.boundary[i], lake.boundary[(i + 1) % n], center) > 0 for i in range(n))


def test_multi_cell_lake_cloud_jitter_and_squash():
    config = SynthesisConfig()
    locations = [
        cell("a", 0, 0, ["b"], biome="LAKE"),
        cell("b", 1, 0, biome="LAKE"),
    ]
    context = build_context(locations, config)
    centers = [context.positions["a"], context.positions["b"]]

    cloud = LakeGenerator().shoreline_cloud(centers, context)

    assert len(cloud) == 8 * len(centers)

    radius = config.lake_radius
    for member, (cx, cy) in enumerate(centers):
        for i, (px, py) in enumerate(cloud[member * 8:(member + 1) * 8]):
            dx = px - cx
            dy = (py - cy) / 0.9
            r = math.hypot(dx, dy)
            assert 0.85 * radius - 1e-9 <= r <= 1.15 * radius + 1e-9
            angle = math.atan2(dy, dx) % (2 * math.pi)
            assert angle == pytest.approx((i / 8) * 2 * math.pi, abs=1e-9)


def test_lake_without_positions_is_omitted():
    context = build_context([Location(id="lost", biome="LAKE")])
    assert LakeGenerator().generate(context) == []


# ==================== Rivers ====================

def river_chain():
    return [
        cell("a", 0, 0, ["b"], is_river=True, elevation=0.9),
        cell("b", 1, 0, ["c"], is_river=True, elevation=0.6),
        cell("c", 2, 0, ["d"], is_river=True, elevation=0.6),
        cell("d", 3, 0, ["e"], is_river=True, elevation=0.3),
        cell("e", 4, 0, is_river=True, elevation=0.1),
    ]


def assert_monotonic(path, context):
    elevations = [context.elevation_of(location_id) for location_id in path.location_ids]
    checked = elevations[:-1] if path.merge_location_id is not None else elevations
    assert all(a >= b for a, b in zip(checked, checked[1:]))


def test_river_chain_traces_single_path():
    context = build_context(river_chain())

    paths = RiverGenerator().generate(context)

    assert len(paths) == 1
    path = paths[0]
    assert path.location_ids == ("a", "b", "c", "d", "e")
    assert path.points == [(0.0, 0.0), (100.0, 0.0), (200.0, 0.0), (300.0, 0.0), (400.0, 0.0)]
    assert path.width == pytest.approx(12.0)
    assert path.merge_location_id is None
    assert_monotonic(path, context)


def test_river_tie_break_and_merge_connector():
    locations = [
        cell("a", 1, 0, ["b", "c"], is_river=True, elevation=0.9),
        cell("b", 2, 0, is_river=True, elevation=0.5),
        cell("c", 0, 0, is_river=True, elevation=0.5),
    ]
    context = build_context(locations)

    paths = RiverGenerator().generate(context)

    assert [path.location_ids for path in paths] == [("a", "b"), ("c", "a")]
    assert paths[1].merge_location_id == "a"
    for path in paths:
        assert_monotonic(path, context)


def test_tributary_joins_main_river():
    locations = [
        cell("a", 0, 0, ["b"], is_river=True, elevation=0.9),
        cell("b", 1, 0, ["c", "t"], is_river=True, elevation=0.5),
        cell("c", 2, 0, is_river=True, elevation=0.1),
        cell("t", 1, 1, is_river=True, elevation=0.7),
    ]
    context = build_context(locations)

    paths = RiverGenerator().generate(context)

    assert [path.location_ids for path in paths] == [("a", "b", "c"), ("t", "b")]
    assert paths[1].merge_location_id == "b"


def test_river_never_flows_uphill_mid_path():
    locations = [
        cell("s", 0, 0, ["low"], is_river=True, elevation=0.9),
        cell("low", 1, 0, ["mid"], is_river=True, elevation=0.2),
        cell("mid", 2, 0, is_river=True, elevation=0.5),
    ]
    context = build_context(locations)

    paths = RiverGenerator().generate(context)

    assert [path.location_ids for path in paths] == [("s", "low"), ("mid", "low")]
    for path in paths:
        assert_monotonic(path, context)


def test_equal_height_sources_traced_in_id_order():
    locations = [
        cell("y", 0, 0, ["m"], is_river=True, elevation=0.9),
        cell("x", 2, 0, ["m"], is_river=True, elevation=0.9),
        cell("m", 1, 0, is_river=True, elevation=0.5),
    ]
    context = build_context(locations)

    paths = RiverGenerator().generate(context)

    assert [path.location_ids for path in paths] == [("x", "m"), ("y", "m")]
    assert paths[0].merge_location_id is None
    assert paths[1].merge_location_id == "m"


def test_river_points_stay_aligned_with_ids():
    """A traced cell without a position is left out of both sequences."""

    locations = [
        cell("a", 0, 0, ["b"], is_river=True, elevation=0.9),
        Location(id="b", exits=[Exit(location_id="c")], is_river=True, elevation=0.5),
        cell("c", 2, 0, is_river=True, elevation=0.1),
    ]
    context = build_context(locations)

    paths = RiverGenerator().generate(context)

    assert len(paths) == 1
    path = paths[0]
    assert path.location_ids == ("a", "c")
    assert path.points == [(0.0, 0.0), (200.0, 0.0)]
    assert len(path.points) == len(path.location_ids)


def test_unplaced_merge_cell_is_not_reported():
    locations = [
        cell("a", 0, 0, ["m"], is_river=True, elevation=0.9),
        Location(id="m", exits=[Exit(location_id="b")], is_river=True, elevation=0.5),
        cell("b", 2, 0, is_river=True, elevation=0.1),
        cell("t", 1, 1, ["m"], is_river=True, elevation=0.7),
    ]
    context = build_context(locations)

    paths = RiverGenerator().generate(context)

    # "t" can only join "m", which has no position, so nothing is left to draw
    assert [path.location_ids for path in paths] == [("a", "b")]
    for path in paths:
        assert len(path.points) == len(path.location_ids)
        assert path.merge_location_id is None or path.merge_location_id in context.positions


def test_isolated_river_cell_yields_no_path():
    context = build_context([cell("lonely", 0, 0, is_river=True, elevation=0.4)])
    assert RiverGenerator().generate(context) == []


# ==================== Forests ====================

def test_forest_containment_and_paint_order():
    config = SynthesisConfig()
    locations = [
        cell("f1", 0, 0, ["f2"], biome="TEMPERATE_DECIDUOUS_FOREST"),
        cell("f2", 1, 0, ["f3"], biome="TEMPERATE_DECIDUOUS_FOREST"),
        cell("f3", 1, 1, biome="TAIGA"),
    ]
    context = build_context(locations, config)

    forests = ForestGenerator().generate(context)

    assert len(forests) == 1
    forest = forests[0]
    assert forest.location_ids == ("f1", "f2", "f3")
    assert 0 < len(forest.trees) <= 9 * 3

    reach = config.terrain_size * config.forest_containment_ratio
    centers = list(context.positions.values())
    for tree in forest.trees:
        nearest = min(math.hypot(tree.x - cx, tree.y - cy) for cx, cy in centers)
        assert nearest < reach + 1e-9
        assert tree.depth in (0, 1, 2)
        assert tree.size > 0

    order = [(tree.depth, tree.y) for tree in forest.trees]
    assert order == sorted(order)


def test_forest_scatter_is_reproducible():
    locations = [cell("f1", 0, 0, biome="TAIGA")]

    first = ForestGenerator().generate(build_context(locations))
    second = ForestGenerator().generate(build_context(locations))

    assert first == second


@pytest.mark.parametrize("location_id", ["f1", "grove", "pines-7", "old-wood"])
def test_forest_candidates_per_cell(location_id):
    """With containment wide open every candidate is kept: 6 to 9 per cell."""

    config = SynthesisConfig(forest_containment_ratio=2.0)
    context = build_context([cell(location_id, 0, 0, biome="TAIGA")], config)

    trees = ForestGenerator().generate(context)[0].trees

    base_seed = stable_hash(location_id)
    assert 6 <= len(trees) <= 9
    assert sorted(tree.seed for tree in trees) == list(range(base_seed, base_seed + len(trees)))


def test_tree_size_scales_with_depth_tier():
    config = SynthesisConfig(forest_containment_ratio=2.0)
    locations = [
        cell("f1", 0, 0, ["f2"], biome="TAIGA"),
        cell("f2", 1, 0, ["f3"], biome="TAIGA"),
        cell("f3", 2, 0, biome="TAIGA"),
    ]
    context = build_context(locations, config)

    trees = ForestGenerator().generate(context)[0].trees

    size = config.terrain_size
    for tree in trees:
        base_size = tree.size / (0.7 + 0.15 * tree.depth)
        assert 0.08 * size - 1e-9 <= base_size <= 0.14 * size + 1e-9


# ==================== Mountains ====================

def test_mountain_ridge_order_and_peaks():
    config = SynthesisConfig(peaks_per_member=2)
    locations = [
        cell("m1", 3, 0, ["m2"], biome="MOUNTAIN"),
        cell("m2", 2, 0, ["m3"], biome="MOUNTAIN"),
        cell("m3", 1, 0, ["m4"], biome="MOUNTAIN"),
        cell("m4", 1, 1, biome="SNOW"),
    ]
    context = build_context(locations, config)

    ridges = MountainGenerator().generate(context)

    assert len(ridges) == 1
    ridge = ridges[0]
    assert ridge.ridge_ids == ("m3", "m4", "m2", "m1")
    assert ridge.ridge_path == [(100.0, 0.0), (100.0, 100.0), (200.0, 0.0), (300.0, 0.0)]
    assert len(ridge.peaks) == 8

    size = config.terrain_size
    for location_id, (x, y) in zip(ridge.ridge_ids, ridge.ridge_path):
        peaks = ridge.peaks_for(location_id)
        assert len(peaks) == 2
        for px, py in peaks:
            assert abs(px - x) <= 0.1 * size
            assert abs(py - (y - 0.15 * size)) <= 0.05 * size


# ==================== Elevation markers ====================

def test_elevation_markers():
    locations = [
        cell("peak", 0, 0, elevation=1.0),
        cell("upland", 1, 0, elevation=0.6),
        cell("flat", 2, 0, elevation=0.0),
        cell("deep", 3, 0, elevation=-1.0),
    ]
    context = build_context(locations)

    markers = {marker.location_id: marker for marker in ElevationGenerator().generate(context)}

    assert set(markers) == {"peak", "upland", "deep"}
    assert markers["peak"].kind == "contour"
    assert len(markers["peak"].rings) == 3
    assert markers["peak"].intensity == pytest.approx(1.0)
    assert len(markers["upland"].rings) == 1
    assert all(len(ring) == 8 for ring in markers["peak"].rings)

    assert markers["deep"].kind == "wash"
    assert markers["deep"].intensity == pytest.approx(1.0)
    assert markers["deep"].radius == pytest.approx(40.0)


# ==================== Neighbour context ====================

def crossroads():
    """A meadow with forest to the west and east and a peak to the north-east."""
    return [
        directed_cell("mid", 1, 1, [("w1", "west"), ("e1", "east"), ("ne", "northeast")], biome="GRASSLAND"),
        directed_cell("w1", 0, 1, biome="TEMPERATE_DECIDUOUS_FOREST", elevation=0.2),
        directed_cell("e1", 2, 1, biome="TEMPERATE_DECIDUOUS_FOREST", is_river=True, elevation=0.3),
        directed_cell("ne", 2, 0, biome="MOUNTAIN", elevation=0.9),
    ]


def contexts_by_id(locations, config=None):
    contexts = NeighborContextGenerator().generate(build_context(locations, config))
    return {neighbor_context.location_id: neighbor_context for neighbor_context in contexts}


def test_neighbor_context_per_location():
    contexts = contexts_by_id(crossroads())

    assert list(contexts) == ["e1", "mid", "ne", "w1"]


def test_pass_through_directions():
    mid = contexts_by_id(crossroads())["mid"]

    assert mid.pass_through["forest"] == ("east", "west")
    assert mid.continues("forest")

    assert mid.pass_through["mountain"] == ("northeast",)
    assert not mid.continues("mountain")

    assert mid.pass_through["river"] == ("east",)
    assert "lake" not in mid.pass_through


def test_tile_with_feature_has_no_pass_through_for_it():
    w1 = contexts_by_id(crossroads())["w1"]

    # w1 has no exits of its own
    assert w1.pass_through == {}

    locations = crossroads()
    locations[1] = directed_cell("w1", 0, 1, [("mid", "east")], biome="TEMPERATE_DECIDUOUS_FOREST")
    w1 = contexts_by_id(locations)["w1"]

    assert "forest" not in w1.pass_through
    assert w1.pass_through["river"] == ("east",)


def test_neighbor_elevations_fold_diagonals_into_cardinals():
    mid = contexts_by_id(crossroads())["mid"]

    # No north exit, so the north-east neighbour stands in for north;
    # east has its own exit and keeps it.
    assert mid.elevations.north == pytest.approx(0.9)
    assert mid.elevations.east == pytest.approx(0.3)
    assert mid.elevations.west == pytest.approx(0.2)
    assert mid.elevations.south is None

    assert mid.rivers.east
    assert not mid.rivers.north
    assert not mid.rivers.west
    assert not mid.rivers.south


def test_pass_through_direction_accumulates_along_path():
    locations = [
        directed_cell("start", 0, 1, [("step", "east")], biome="GRASSLAND"),
        directed_cell("step", 1, 1, [("marsh", "north")], biome="GRASSLAND"),
        directed_cell("marsh", 1, 0, biome="MARSH"),
    ]

    start = contexts_by_id(locations)["start"]

    assert start.pass_through["swamp"] == ("northeast",)


def test_pass_through_search_depth():
    ids = ["c0", "c1", "c2", "c3", "c4", "c5"]
    locations = [
        directed_cell(location_id, i, 0, [(ids[i + 1], "east")] if i + 1 < len(ids) else [],
                      biome="GRASSLAND" if i < 5 else "LAKE")
        for i, location_id in enumerate(ids)
    ]

    assert "lake" not in contexts_by_id(locations)["c0"].pass_through
    assert contexts_by_id(locations)["c1"].pass_through["lake"] == ("east",)

    deeper = contexts_by_id(locations, SynthesisConfig(pass_through_depth=5))
    assert deeper["c0"].pass_through["lake"] == ("east",)


def test_exits_without_compass_direction_add_no_offset():
    locations = [
        directed_cell("hall", 0, 0, [("cellar", "enter")], biome="GRASSLAND"),
        directed_cell("cellar", 0, 0, [("grove", "west")], biome="GRASSLAND"),
        directed_cell("grove", -1, 0, biome="TEMPERATE_DECIDUOUS_FOREST"),
    ]

    hall = contexts_by_id(locations)["hall"]

    assert hall.pass_through["forest"] == ("west",)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
