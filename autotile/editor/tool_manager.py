# tool_manager.py

"""Manages the painting tools (Brush, Rectangle, Circle, Fill) for the tile painter.

Tools receive grid coordinates, or None when the pointer is outside the
canvas. Each press/drag/release gesture ends in at most one history commit.
"""

from typing import Any, Iterable, Optional, Tuple, Union

from autotile.core import config
from autotile.editor.editor_state import EditorState
from autotile.editor.history_manager import HistoryManager
from autotile.grid import persistence, shapes
from autotile.grid.persistence import MapLoadError
from autotile.grid.state import Coordinate, Grid
from autotile.grid.store import TileGridStore

Cell = Optional[Tuple[int, int]]


def clamp(value: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, value))


# --- Base Tool ---
class BaseTool:
    def __init__(self, name):
        self.name = name

    def press(self, manager: "ToolManager", cell: Cell) -> None:
        raise NotImplementedError

    def drag(self, manager: "ToolManager", cell: Cell) -> None:
        pass

    def release(self, manager: "ToolManager", cell: Cell) -> None:
        pass

    def cancel(self, manager: "ToolManager") -> None:
        manager.state.clear_gesture()

    def activate(self, manager: "ToolManager") -> None:
        print(f"{self.name} tool activated.")

    def deactivate(self, manager: "ToolManager") -> None:
        self.cancel(manager)
        print(f"{self.name} tool deactivated.")


# --- Brush Tool ---
class BrushTool(BaseTool):
    """Paints (or erases) cell by cell while dragging; commits on release."""

    def __init__(self):
        super().__init__("Brush")

    def press(self, manager, cell):
        if cell is None:
            return
        manager.state.gesture_active = True
        manager.apply([cell])

    def drag(self, manager, cell):
        if not manager.state.gesture_active or cell is None:
            return
        manager.apply([cell])

    def release(self, manager, cell):
        # The stroke is already on the grid, so leaving the canvas still commits it.
        if not manager.state.gesture_active:
            return
        manager.state.clear_gesture()
        manager.commit()

    def cancel(self, manager):
        if manager.state.gesture_active:
            manager.rollback()
        super().cancel(manager)


# --- Shape Tools ---
class ShapeTool(BaseTool):
    """Shows a preview while dragging and applies it once on release."""

    def rasterize(self, grid: Grid, anchor: Coordinate, cell: Tuple[int, int]):
        raise NotImplementedError

    def press(self, manager, cell):
        if cell is None:
            return
        state = manager.state
        state.gesture_active = True
        state.gesture_anchor = Coordinate(*cell)
        state.preview = self.rasterize(manager.store.grid, state.gesture_anchor, cell)

    def drag(self, manager, cell):
        state = manager.state
        if not state.gesture_active or cell is None:
            return
        state.preview = self.rasterize(manager.store.grid, state.gesture_anchor, cell)

    def release(self, manager, cell):
        state = manager.state
        if not state.gesture_active:
            return
        if cell is None:
            # Released outside the canvas: drop the preview, nothing is committed.
            state.clear_gesture()
            state.status_message = f"{self.name} cancelled."
            return
        coords = self.rasterize(manager.store.grid, state.gesture_anchor, cell)
        state.clear_gesture()
        manager.apply(coords, skip_identical=True)
        manager.commit()


class RectangleTool(ShapeTool):
    def __init__(self):
        super().__init__("Rectangle")

    def rasterize(self, grid, anchor, cell):
        return shapes.rectangle(grid, anchor, cell)


class CircleTool(ShapeTool):
    def __init__(self):
        super().__init__("Circle")

    def rasterize(self, grid, anchor, cell):
        return shapes.circle(grid, anchor, shapes.distance(anchor, cell))


# --- Fill Tool ---
class FillTool(BaseTool):
    """Flood-fills the clicked region and commits immediately."""

    def __init__(self):
        super().__init__("Fill")

    def press(self, manager, cell):
        if cell is None:
            return
        region = shapes.flood_fill(manager.store.grid, cell)
        if not region:
            return
        manager.apply(region, skip_identical=True)
        manager.commit()


# --- Tool Manager ---
class ToolManager:
    def __init__(
        self,
        store: TileGridStore,
        history: Optional[HistoryManager] = None,
        state: Optional[EditorState] = None,
    ):
        self.store = store
        self.history = history or HistoryManager(store)
        self.state = state or EditorState()
        self.tools = {
            "brush": BrushTool(),
            "rectangle": RectangleTool(),
            "circle": CircleTool(),
            "fill": FillTool(),
        }
        materials = store.tileset.materials
        if self.state.selected_material is None and materials:
            self.state.selected_material = materials[0].id
        self.active_tool = self.tools[self.state.active_tool]
        self.active_tool.activate(self)

    @property
    def tileset(self):
        return self.store.tileset

    def set_active_tool(self, tool_name: str) -> None:
        if tool_name not in self.tools:
            raise KeyError(f"Unknown tool '{tool_name}'")
        if tool_name == self.state.active_tool:
            return
        self.active_tool.deactivate(self)
        self.state.active_tool = tool_name
        self.active_tool = self.tools[tool_name]
        self.active_tool.activate(self)

    def select_material(self, material_id: str) -> None:
        if self.tileset.get_material(material_id) is None:
            raise KeyError(f"Unknown material '{material_id}'")
        self.state.set_material(material_id)

    def toggle_eraser(self) -> bool:
        return self.state.toggle_eraser()

    # Gesture dispatch -----------------------------------------------------
    def press(self, cell: Cell) -> None:
        self.active_tool.press(self, cell)

    def drag(self, cell: Cell) -> None:
        self.active_tool.drag(self, cell)

    def release(self, cell: Cell) -> None:
        self.active_tool.release(self, cell)

    def cancel(self) -> None:
        self.active_tool.cancel(self)

    # Grid updates ---------------------------------------------------------
    def apply(self, coords: Iterable[Tuple[int, int]], skip_identical: bool = False) -> Grid:
        """Paint or erase coords. Shape and fill gestures leave same-material cells untouched."""
        if self.state.erasing:
            return self.store.erase_many(coords)
        if self.state.selected_material is None:
            self.state.status_message = "Select a material first."
            return self.store.grid
        return self.store.paint_many(coords, self.state.selected_material, skip_identical)

    def commit(self) -> bool:
        """Commit the live grid unless the gesture left it unchanged."""
        if self.history.current.same_contents(self.store.grid):
            return False
        self.history.commit()
        return True

    def rollback(self) -> None:
        current = self.history.current
        self.store.restore(current.width, current.height, current.cells)

    def undo(self) -> bool:
        self.cancel()
        return self.history.undo()

    def redo(self) -> bool:
        self.cancel()
        return self.history.redo()

    def clear(self) -> None:
        self.cancel()
        self.store.clear()
        self.history.commit()
        self.state.status_message = "Cleared canvas."

    def resize(self, width: int, height: int) -> Tuple[int, int]:
        self.cancel()
        width = clamp(width, config.MIN_GRID_DIMENSION, config.MAX_GRID_DIMENSION)
        height = clamp(height, config.MIN_GRID_DIMENSION, config.MAX_GRID_DIMENSION)
        self.store.resize(width, height)
        self.commit()
        return width, height

    # Documents ------------------------------------------------------------
    def save_document(self) -> dict:
        return persistence.serialize(self.store.grid, self.tileset.id)

    def load_document(self, document: Any) -> Union[Grid, MapLoadError]:
        self.cancel()
        result = persistence.deserialize(document, self.tileset.id)
        if isinstance(result, MapLoadError):
            self.state.status_message = str(result)
            return result
        self.store.replace_grid(result)
        self.history.reset()
        self.state.status_message = f"Loaded map ({len(result)} tiles)."
        return result
