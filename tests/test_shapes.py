from autotile.grid import shapes
from autotile.grid.state import Coordinate, Grid, PaintedCell


def _grid(width=6, height=5, painted=None):
    grid = Grid(width=width, height=height, tile_size=(16, 16))
    for (x, y), material_id in (painted or {}).items():
        grid.cells[Coordinate(x, y)] = PaintedCell(x, y, material_id)
    return grid


def test_rectangle_covers_inclusive_box():
    cells = shapes.rectangle(_grid(), (1, 1), (3, 2))
    assert cells == {(x, y) for x in range(1, 4) for y in range(1, 3)}


def test_rectangle_is_symmetric_for_every_corner_pair():
    grid = _grid(4, 3)
    coords = [(x, y) for y in range(grid.height) for x in range(grid.width)]
    for a in coords:
        for b in coords:
            assert shapes.rectangle(grid, a, b) == shapes.rectangle(grid, b, a)


def test_rectangle_clips_to_grid():
    cells = shapes.rectangle(_grid(4, 4), (-3, 2), (10, 10))
    assert cells == {(x, y) for x in range(4) for y in range(2, 4)}


def test_single_cell_rectangle():
    assert shapes.rectangle(_grid(), (2, 2), (2, 2)) == {Coordinate(2, 2)}


def test_circle_rounds_radius_half_up():
    grid = _grid(9, 9)
    plus = {(4, 4), (3, 4), (5, 4), (4, 3), (4, 5)}
    assert shapes.circle(grid, (4, 4), 1.4) == plus
    assert shapes.circle(grid, (4, 4), 0.5) == plus
    assert shapes.circle(grid, (4, 4), 0.4) == {(4, 4)}
    radius_two = shapes.circle(grid, (4, 4), 1.5)
    assert (6, 4) in radius_two
    assert (5, 5) in radius_two
    assert (6, 5) not in radius_two


def test_circle_clips_at_corner():
    cells = shapes.circle(_grid(5, 5), (0, 0), 1)
    assert cells == {(0, 0), (1, 0), (0, 1)}


def test_circle_radius_from_drag_distance():
    assert shapes.distance((0, 0), (3, 4)) == 5.0


def test_flood_fill_empty_region_stops_at_paint():
    grid = _grid(4, 3, {(1, 0): "stone", (1, 1): "stone", (1, 2): "stone"})
    assert shapes.flood_fill(grid, (0, 1)) == {(0, 0), (0, 1), (0, 2)}


def test_flood_fill_is_orthogonal_only():
    grid = _grid(3, 3, {(0, 0): "grass", (1, 1): "grass", (2, 2): "grass"})
    assert shapes.flood_fill(grid, (1, 1)) == {(1, 1)}


def test_flood_fill_fixed_point_after_filling():
    grid = _grid(5, 4, {(2, 0): "water", (2, 1): "water", (2, 2): "water", (0, 3): "sand"})
    region = shapes.flood_fill(grid, (0, 0))
    for coord in region:
        grid.cells[coord] = PaintedCell(coord.x, coord.y, "grass")
    assert shapes.flood_fill(grid, (0, 0)) == region


def test_flood_fill_outside_grid_is_empty():
    assert shapes.flood_fill(_grid(), (10, 10)) == set()
