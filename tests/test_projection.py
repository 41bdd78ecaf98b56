import pytest
from shapely.geometry import LineString, MultiPolygon, Point, Polygon

from africamap.layout import compute_layout
from africamap.projection import build_projector


def test_center_projects_to_translate():
    for width in (320, 640, 1024):
        layout = compute_layout(width)
        x, y = build_projector(layout).project(*layout.center)
        assert x == pytest.approx(layout.translate[0])
        assert y == pytest.approx(layout.translate[1])


def test_north_is_up_and_east_is_right():
    projector = build_projector(compute_layout(640))
    cx, cy = projector.project(10, 2)
    ex, ey = projector.project(20, 2)
    nx, ny = projector.project(10, 12)
    assert ex > cx
    assert ny < cy


def test_scale_follows_width():
    small = build_projector(compute_layout(320))
    large = build_projector(compute_layout(640))
    sx, _ = small.project(20, 2)
    lx, _ = large.project(20, 2)
    assert lx - 320 == pytest.approx(2 * (sx - 160))


def test_project_many_matches_project():
    projector = build_projector(compute_layout(640))
    points = [(0, 0), (10, 2), (30, -10)]
    many = projector.project_many(points)
    for (lon, lat), (x, y) in zip(points, many):
        px, py = projector.project(lon, lat)
        assert x == pytest.approx(px)
        assert y == pytest.approx(py)
    assert projector.project_many([]) == []


def test_path_for_polygon_is_closed():
    projector = build_projector(compute_layout(640))
    d = projector.path_for(Polygon([(18, 4), (22, 4), (22, 8), (18, 8)]))
    assert d.startswith("M")
    assert d.endswith("Z")
    assert d.count("L") == 3


def test_path_for_multipart_and_lines():
    projector = build_projector(compute_layout(640))
    multi = MultiPolygon(
        [
            Polygon([(0, 0), (1, 0), (1, 1)]),
            Polygon([(5, 5), (6, 5), (6, 6)]),
        ]
    )
    assert projector.path_for(multi).count("M") == 2
    line = projector.path_for(LineString([(0, 0), (1, 1)]))
    assert line.startswith("M") and "Z" not in line


def test_path_for_skips_empty_and_points():
    projector = build_projector(compute_layout(640))
    assert projector.path_for(None) == ""
    assert projector.path_for(Polygon()) == ""
    assert projector.path_for(Point(1, 1)) == ""


@pytest.mark.parametrize(
    "loc, expected",
    [
        # Reference positions from d3's Robinson at scale 825, centre [10, 2], 640x512.
        ((17.5, -12.0), (426.4, 484.2)),
        ((18.5, 14.0), (440.1, 60.4)),
        ((-7.5, -6.0), (68.3, 386.4)),
    ],
)
def test_label_anchors_match_d3_scale_convention(loc, expected):
    projector = build_projector(compute_layout(640))
    x, y = projector.project(*loc)
    assert x == pytest.approx(expected[0], abs=0.5)
    assert y == pytest.approx(expected[1], abs=0.5)


def test_equator_offset_is_scale_times_radians():
    projector = build_projector(compute_layout(640))
    x0, _ = projector.project(0, 0)
    x1, _ = projector.project(1, 0)
    assert x1 - x0 == pytest.approx(825 * 3.141592653589793 / 180, rel=1e-4)
