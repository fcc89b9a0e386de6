from typing import Iterable, List, Mapping, Optional, Tuple

from autotile.core import config
from autotile.core.tileset import TileSet
from autotile.grid.borders import BorderResolver
from autotile.grid.noise import NoiseSampler
from autotile.grid.state import Coordinate, Grid, PaintedCell


class UnknownMaterialError(ValueError):
    """Raised when painting with a material id the tileset does not define."""

    def __init__(self, material_id: str) -> None:
        self.material_id = material_id
        super().__init__(f"Unknown material '{material_id}'.")


class TileGridStore:
    """Owns the live grid. Every mutation finishes with a border pass.

    Coordinates outside the grid are ignored by paint and erase operations;
    that is part of the contract, not an error.
    """

    def __init__(
        self,
        tileset: TileSet,
        grid: Optional[Grid] = None,
        sampler: Optional[NoiseSampler] = None,
        incremental: bool = config.INCREMENTAL_BORDERS,
    ):
        self.tileset = tileset
        self.grid = grid if grid is not None else Grid(tile_size=tuple(tileset.tile_size))
        self.sampler = sampler or NoiseSampler()
        self.incremental = incremental
        self._resolve(None)

    def _resolver(self) -> BorderResolver:
        return BorderResolver(self.tileset.borders)

    def _resolve(self, changed: Optional[List[Coordinate]]) -> Grid:
        if self.incremental and changed is not None:
            if changed:
                self._resolver().resolve_around(self.grid, changed)
            return self.grid
        return self._resolver().resolve_all(self.grid)

    def _write(self, coord: Coordinate, material, skip_identical: bool = False) -> bool:
        existing = self.grid.cells.get(coord)
        if skip_identical and existing is not None and existing.material_id == material.id:
            return False
        noise_id = self.sampler.sample(material, self.tileset.noise_for(material.id))
        self.grid.cells[coord] = PaintedCell(coord.x, coord.y, material.id, None, noise_id)
        return True

    def _require_material(self, material_id: str):
        material = self.tileset.get_material(material_id)
        if material is None:
            raise UnknownMaterialError(material_id)
        return material

    # Mutations ------------------------------------------------------------
    def paint(self, coord: Tuple[int, int], material_id: str) -> Grid:
        return self.paint_many([coord], material_id)

    def paint_many(
        self, coords: Iterable[Tuple[int, int]], material_id: str, skip_identical: bool = False
    ) -> Grid:
        """Paint every in-bounds coordinate with one border pass at the end.

        Each written cell is overwritten and gets a fresh noise roll. With
        skip_identical, cells already holding the material are left as they are.
        """
        material = self._require_material(material_id)
        changed = []
        for coord in coords:
            coord = Coordinate(*coord)
            if not self.grid.in_bounds(coord):
                continue
            if self._write(coord, material, skip_identical):
                changed.append(coord)
        return self._resolve(changed)

    def erase(self, coord: Tuple[int, int]) -> Grid:
        return self.erase_many([coord])

    def erase_many(self, coords: Iterable[Tuple[int, int]]) -> Grid:
        changed = []
        for coord in coords:
            coord = Coordinate(*coord)
            if self.grid.cells.pop(coord, None) is not None:
                changed.append(coord)
        return self._resolve(changed)

    def clear(self) -> Grid:
        self.grid.cells = {}
        return self.grid

    def resize(self, width: int, height: int) -> Grid:
        if width < 1 or height < 1:
            raise ValueError(f"Grid dimensions must be positive (got {width}x{height}).")
        self.grid.width = width
        self.grid.height = height
        self.grid.cells = {
            coord: cell for coord, cell in self.grid.cells.items() if self.grid.in_bounds(coord)
        }
        return self._resolve(None)

    def restore(self, width: int, height: int, cells: Mapping[Coordinate, PaintedCell]) -> Grid:
        """Replace the grid contents verbatim (noise rolls included)."""
        self.grid.width = width
        self.grid.height = height
        self.grid.cells = dict(cells)
        return self._resolve(None)

    def replace_grid(self, grid: Grid) -> Grid:
        self.grid = grid
        return self._resolve(None)

    def refresh_borders(self) -> Grid:
        """Full border pass, e.g. after the tileset's border table was edited."""
        return self._resolve(None)
