"""Turn tool gestures into sets of grid coordinates.

Every function clips to the grid bounds and returns a set, so callers never
see duplicates or out-of-range cells.
"""

import math
from collections import deque
from typing import Set, Tuple

from autotile.grid.state import Coordinate, Grid

ORTHOGONAL_STEPS = ((0, -1), (1, 0), (0, 1), (-1, 0))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rectangle(grid: Grid, a: Tuple[int, int], b: Tuple[int, int]) -> Set[Coordinate]:
    """All cells inside the axis-aligned box spanned by corners a and b."""
    x_min, x_max = max(0, min(a[0], b[0])), min(grid.width - 1, max(a[0], b[0]))
    y_min, y_max = max(0, min(a[1], b[1])), min(grid.height - 1, max(a[1], b[1]))
    return {
        Coordinate(x, y)
        for y in range(y_min, y_max + 1)
        for x in range(x_min, x_max + 1)
    }


def circle(grid: Grid, center: Tuple[int, int], radius: float) -> Set[Coordinate]:
    """Cells whose distance to center is within the radius rounded to a whole cell."""
    r = round_half_up(radius)
    if r < 0:
        return set()
    cx, cy = center
    cells = set()
    for y in range(max(0, cy - r), min(grid.height - 1, cy + r) + 1):
        for x in range(max(0, cx - r), min(grid.width - 1, cx + r) + 1):
            if math.hypot(x - cx, y - cy) <= r:
                cells.add(Coordinate(x, y))
    return cells


def distance(a: Tuple[int, int], b: Tuple[int, int]) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def flood_fill(grid: Grid, start: Tuple[int, int]) -> Set[Coordinate]:
    """4-connected region sharing the start cell's material (empty is a valid target)."""
    if not grid.in_bounds(start):
        return set()
    start = Coordinate(*start)
    target = grid.material_at(start)
    visited = {start}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        for dx, dy in ORTHOGONAL_STEPS:
            neighbor = Coordinate(x + dx, y + dy)
            if neighbor in visited or not grid.in_bounds(neighbor):
                continue
            if grid.material_at(neighbor) != target:
                continue
            visited.add(neighbor)
            queue.append(neighbor)
    return visited
