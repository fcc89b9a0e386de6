from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, NamedTuple, Optional, Tuple

from autotile.core import config

# Neighbour offsets in the order the border matcher reads them.
NEIGHBOR_OFFSETS: Dict[str, Tuple[int, int]] = {
    "n": (0, -1),
    "ne": (1, -1),
    "e": (1, 0),
    "se": (1, 1),
    "s": (0, 1),
    "sw": (-1, 1),
    "w": (-1, 0),
    "nw": (-1, -1),
}


class Coordinate(NamedTuple):
    x: int
    y: int

    def key(self) -> str:
        return f"{self.x},{self.y}"

    @classmethod
    def from_key(cls, key: str) -> "Coordinate":
        x_str, y_str = key.split(",")
        return cls(int(x_str), int(y_str))

    def neighbor(self, direction: str) -> "Coordinate":
        dx, dy = NEIGHBOR_OFFSETS[direction]
        return Coordinate(self.x + dx, self.y + dy)

    def neighborhood(self) -> Iterator["Coordinate"]:
        """The coordinate itself followed by its 8 neighbours (unclipped)."""
        yield self
        for dx, dy in NEIGHBOR_OFFSETS.values():
            yield Coordinate(self.x + dx, self.y + dy)


def row_major(coord: Coordinate) -> Tuple[int, int]:
    return (coord.y, coord.x)


@dataclass(frozen=True)
class PaintedCell:
    """A painted grid cell. Instances are immutable so snapshots can share them."""
    x: int
    y: int
    material_id: str
    border_rule_id: Optional[str] = None
    noise_rule_id: Optional[str] = None

    @property
    def coord(self) -> Coordinate:
        return Coordinate(self.x, self.y)

    def with_border(self, border_rule_id: Optional[str]) -> "PaintedCell":
        if border_rule_id == self.border_rule_id:
            return self
        return replace(self, border_rule_id=border_rule_id)


@dataclass
class Grid:
    """Sparse painted-cell map. A missing coordinate is empty background."""
    width: int = config.DEFAULT_GRID_WIDTH
    height: int = config.DEFAULT_GRID_HEIGHT
    tile_size: Tuple[int, int] = (config.DEFAULT_TILE_SIZE, config.DEFAULT_TILE_SIZE)
    cells: Dict[Coordinate, PaintedCell] = field(default_factory=dict)

    def in_bounds(self, coord: Tuple[int, int]) -> bool:
        x, y = coord
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, coord: Tuple[int, int]) -> Optional[PaintedCell]:
        return self.cells.get(Coordinate(*coord))

    def material_at(self, coord: Tuple[int, int]) -> Optional[str]:
        """Material id at coord, or None for empty background."""
        cell = self.cells.get(Coordinate(*coord))
        return cell.material_id if cell else None

    def sorted_cells(self) -> Iterable[PaintedCell]:
        for coord in sorted(self.cells, key=row_major):
            yield self.cells[coord]

    def clone(self) -> "Grid":
        # Cells are frozen, so a shallow copy of the mapping is a full copy.
        return Grid(self.width, self.height, tuple(self.tile_size), dict(self.cells))

    def __len__(self) -> int:
        return len(self.cells)
