from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional

from autotile.core import config
from autotile.grid.state import Coordinate, Grid, PaintedCell


@dataclass(frozen=True)
class GridSnapshot:
    """Immutable copy of the grid contents at a commit boundary."""
    ordinal: int
    width: int
    height: int
    cells: Mapping[Coordinate, PaintedCell]

    @classmethod
    def capture(cls, grid: Grid, ordinal: int) -> "GridSnapshot":
        # PaintedCell is frozen, so copying the mapping detaches it from the live grid.
        return cls(ordinal, grid.width, grid.height, MappingProxyType(dict(grid.cells)))

    def same_contents(self, grid: Grid) -> bool:
        return (
            self.width == grid.width
            and self.height == grid.height
            and dict(self.cells) == grid.cells
        )


class HistoryManager:
    """Linear snapshot history over a TileGridStore.

    ``snapshots[index]`` is always the state the store currently shows.
    Committing after an undo discards the redoable future.
    """

    def __init__(self, store, max_snapshots: Optional[int] = config.HISTORY_MAX_SNAPSHOTS):
        self.store = store
        self.max_snapshots = max_snapshots
        self._next_ordinal = 0
        self.snapshots: List[GridSnapshot] = []
        self.index = 0
        self.reset()

    def _capture(self) -> GridSnapshot:
        snapshot = GridSnapshot.capture(self.store.grid, self._next_ordinal)
        self._next_ordinal += 1
        return snapshot

    def reset(self) -> None:
        """Drop all history and start over from the store's current grid."""
        self.snapshots = [self._capture()]
        self.index = 0

    @property
    def current(self) -> GridSnapshot:
        return self.snapshots[self.index]

    @property
    def can_undo(self) -> bool:
        return self.index > 0

    @property
    def can_redo(self) -> bool:
        return self.index < len(self.snapshots) - 1

    def __len__(self) -> int:
        return len(self.snapshots)

    def commit(self) -> GridSnapshot:
        """Record the store's current grid as a new history entry."""
        del self.snapshots[self.index + 1:]
        snapshot = self._capture()
        self.snapshots.append(snapshot)
        if self.max_snapshots and len(self.snapshots) > self.max_snapshots:
            del self.snapshots[0]
        self.index = len(self.snapshots) - 1
        return snapshot

    def _restore(self, snapshot: GridSnapshot) -> None:
        self.store.restore(snapshot.width, snapshot.height, snapshot.cells)

    def undo(self) -> bool:
        if not self.can_undo:
            print("Nothing to undo.")
            return False
        self.index -= 1
        self._restore(self.snapshots[self.index])
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            print("Nothing to redo.")
            return False
        self.index += 1
        self._restore(self.snapshots[self.index])
        return True
