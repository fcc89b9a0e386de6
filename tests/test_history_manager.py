import random
import unittest
from unittest.mock import patch

from autotile.core.tileset import Material, NoiseRule, SpriteRect, TileSet
from autotile.editor.history_manager import HistoryManager
from autotile.grid.noise import NoiseSampler
from autotile.grid.state import Coordinate, Grid, PaintedCell
from autotile.grid.store import TileGridStore


def build_store(seed=0):
    tileset = TileSet("meadow", "Meadow", tile_size=(16, 16))
    tileset.materials = [
        Material("grass", "Grass", SpriteRect(0, 0, 16, 16), noise_probability=100),
        Material("water", "Water", SpriteRect(16, 0, 16, 16)),
    ]
    tileset.noise = [NoiseRule(f"n{i}", "grass", SpriteRect(32 + i * 16, 0, 16, 16)) for i in range(6)]
    return TileGridStore(tileset, grid=Grid(3, 3, (16, 16)), sampler=NoiseSampler(random.Random(seed)))


class TestHistoryManager(unittest.TestCase):
    def setUp(self):
        self.store = build_store()
        self.history = HistoryManager(self.store)

    def test_starts_with_one_empty_snapshot(self):
        self.assertEqual(len(self.history), 1)
        self.assertEqual(self.history.index, 0)
        self.assertEqual(dict(self.history.current.cells), {})
        self.assertFalse(self.history.can_undo)
        self.assertFalse(self.history.can_redo)

    def test_undo_and_redo_restore_grid_with_original_noise(self):
        self.store.paint((0, 0), "grass")
        rolled = self.store.grid.get((0, 0)).noise_rule_id
        self.history.commit()

        self.assertTrue(self.history.undo())
        self.assertEqual(len(self.store.grid), 0)

        # A fresh roll would come from the sampler; redo must not ask it.
        with patch.object(self.store.sampler, "sample", side_effect=AssertionError("re-rolled")):
            self.assertTrue(self.history.redo())
        cell = self.store.grid.get((0, 0))
        self.assertEqual(cell.material_id, "grass")
        self.assertEqual(cell.noise_rule_id, rolled)

    def test_undo_redo_round_trip_after_many_commits(self):
        for x, y in [(0, 0), (1, 0), (2, 1), (1, 2)]:
            self.store.paint((x, y), "grass" if x % 2 == 0 else "water")
            self.history.commit()
        before = self.store.grid.clone()
        self.history.undo()
        self.history.undo()
        self.history.redo()
        self.history.redo()
        self.assertEqual(self.store.grid, before)

    def test_ends_are_no_ops(self):
        self.assertFalse(self.history.undo())
        self.store.paint((0, 0), "water")
        self.history.commit()
        self.assertFalse(self.history.redo())
        self.assertEqual(self.history.index, 1)

    def test_commit_after_undo_discards_redo_future(self):
        self.store.paint((0, 0), "water")
        self.history.commit()
        self.store.paint((1, 0), "water")
        self.history.commit()
        self.history.undo()
        self.store.paint((2, 2), "water")
        self.history.commit()

        self.assertEqual(len(self.history), 3)
        self.assertFalse(self.history.can_redo)
        self.assertEqual(set(self.history.current.cells), {Coordinate(0, 0), Coordinate(2, 2)})

    def test_snapshots_do_not_follow_live_grid(self):
        self.store.paint((0, 0), "water")
        snapshot = self.history.commit()
        self.store.paint((0, 0), "grass")
        self.store.erase((0, 0))
        self.store.grid.cells[Coordinate(1, 1)] = PaintedCell(1, 1, "water")

        self.assertEqual(list(snapshot.cells), [Coordinate(0, 0)])
        self.assertEqual(snapshot.cells[Coordinate(0, 0)].material_id, "water")
        with self.assertRaises(TypeError):
            snapshot.cells[Coordinate(2, 2)] = PaintedCell(2, 2, "water")

    def test_ordinals_increase(self):
        first = self.history.commit()
        second = self.history.commit()
        self.assertLess(self.history.snapshots[0].ordinal, first.ordinal)
        self.assertLess(first.ordinal, second.ordinal)

    def test_undo_restores_dimensions_across_resize(self):
        self.store.paint((2, 2), "water")
        self.history.commit()
        self.store.resize(2, 2)
        self.history.commit()
        self.assertEqual(len(self.store.grid), 0)

        self.history.undo()
        self.assertEqual((self.store.grid.width, self.store.grid.height), (3, 3))
        self.assertEqual(self.store.grid.material_at((2, 2)), "water")

    def test_oldest_snapshots_are_evicted(self):
        history = HistoryManager(self.store, max_snapshots=3)
        for x in range(3):
            self.store.paint((x, 0), "water")
            history.commit()
        self.assertEqual(len(history), 3)
        self.assertEqual(history.index, 2)
        history.undo()
        history.undo()
        self.assertFalse(history.can_undo)
        self.assertEqual(set(self.store.grid.cells), {Coordinate(0, 0)})

    def test_reset_starts_from_current_grid(self):
        self.store.paint((0, 0), "water")
        self.history.commit()
        self.history.reset()
        self.assertEqual(len(self.history), 1)
        self.assertEqual(set(self.history.current.cells), {Coordinate(0, 0)})


if __name__ == "__main__":
    unittest.main()
