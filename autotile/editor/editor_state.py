from dataclasses import dataclass, field
from typing import Optional, Set

from autotile.grid.state import Coordinate


@dataclass
class EditorState:
    """Container for paint-session state that changes during interaction."""

    # Core painting state
    selected_material: Optional[str] = None
    erasing: bool = False
    active_tool: str = "brush"

    # Gesture state
    gesture_active: bool = False
    gesture_anchor: Optional[Coordinate] = None
    preview: Set[Coordinate] = field(default_factory=set)

    status_message: str = ""

    def set_material(self, material_id: Optional[str]) -> None:
        self.selected_material = material_id
        self.erasing = False

    def toggle_eraser(self) -> bool:
        self.erasing = not self.erasing
        return self.erasing

    def clear_gesture(self) -> None:
        self.gesture_active = False
        self.gesture_anchor = None
        self.preview = set()
