"""Adjacency-based border selection.

For a cell of material M every rule with ``material_a == M`` is tested
against the 8 neighbour materials; the best match by priority wins and
ties go to the rule listed first.
"""

from typing import Dict, Iterable, Optional, Sequence

from autotile.core.tileset import BorderRule
from autotile.grid.state import Coordinate, Grid, PaintedCell

CARDINALS = ("n", "e", "s", "w")
DIAGONALS = ("ne", "se", "sw", "nw")

# Neighbours that must all hold the partner material for an inward corner.
# inward-sw reads the nw diagonal and inward-nw the sw diagonal; kept as
# authored by the tile tables.
INWARD_CORNER_NEIGHBORS: Dict[str, tuple] = {
    "inward-ne": ("n", "e", "ne"),
    "inward-se": ("s", "e", "se"),
    "inward-sw": ("n", "w", "nw"),
    "inward-nw": ("s", "w", "sw"),
}

PRIORITY_CARDINAL = 4
PRIORITY_INWARD = 3
PRIORITY_DIAGONAL = 2
PRIORITY_OTHER = 1


def direction_priority(directions: str) -> int:
    if directions in CARDINALS:
        return PRIORITY_CARDINAL
    if directions.startswith("inward-"):
        return PRIORITY_INWARD
    if directions in DIAGONALS:
        return PRIORITY_DIAGONAL
    return PRIORITY_OTHER


def surroundings(grid: Grid, coord: Coordinate) -> Dict[str, Optional[str]]:
    """Material of each of the 8 neighbours; None for empty or off-grid."""
    return {
        direction: grid.material_at(coord.neighbor(direction))
        for direction in ("n", "ne", "e", "se", "s", "sw", "w", "nw")
    }


def matches_pattern(around: Dict[str, Optional[str]], partner: str, directions: str) -> bool:
    orthogonal_count = sum(1 for d in CARDINALS if around[d] == partner)

    if directions in CARDINALS:
        return orthogonal_count == 1 and around[directions] == partner

    if directions in DIAGONALS:
        return orthogonal_count <= 1 and around[directions] == partner

    required = INWARD_CORNER_NEIGHBORS.get(directions)
    if required is not None:
        return orthogonal_count >= 2 and all(around[d] == partner for d in required)

    return False


def select_border(
    cell: PaintedCell, around: Dict[str, Optional[str]], rules: Sequence[BorderRule]
) -> Optional[str]:
    best: Optional[BorderRule] = None
    best_priority = -1
    for rule in rules:
        if rule.material_a != cell.material_id:
            continue
        if not matches_pattern(around, rule.material_b, rule.directions):
            continue
        priority = direction_priority(rule.directions)
        if priority > best_priority:
            best = rule
            best_priority = priority
    return best.id if best else None


class BorderResolver:
    """Assigns ``border_rule_id`` on every painted cell from the current neighbourhood."""

    def __init__(self, rules: Sequence[BorderRule]):
        self.rules = list(rules)

    def resolve_cell(self, grid: Grid, coord: Coordinate) -> Optional[str]:
        cell = grid.cells.get(coord)
        if cell is None:
            return None
        return select_border(cell, surroundings(grid, coord), self.rules)

    def resolve_all(self, grid: Grid) -> Grid:
        """Recompute every cell's border from scratch. Updates grid in place."""
        resolved = {
            coord: cell.with_border(self.resolve_cell(grid, coord))
            for coord, cell in grid.cells.items()
        }
        grid.cells = resolved
        return grid

    def resolve_around(self, grid: Grid, changed: Iterable[Coordinate]) -> Grid:
        """Recompute only the changed coordinates and their 8 neighbours."""
        dirty = set()
        for coord in changed:
            dirty.update(Coordinate(*coord).neighborhood())
        updates = {}
        for coord in dirty:
            cell = grid.cells.get(coord)
            if cell is not None:
                updates[coord] = cell.with_border(self.resolve_cell(grid, coord))
        grid.cells.update(updates)
        return grid
