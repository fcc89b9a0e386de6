"""Map document (de)serialization.

Document shape::

    {"configId": str,
     "gridConfig": {"width": int, "height": int,
                    "tileSize": {"width": int, "height": int}},
     "tiles": [{"key": "x,y", "tile": {"x", "y", "materialId",
                                       "borderTileId"?, "noiseIds"?}}],
     "timestamp": ISO-8601 str}
"""

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from autotile.core import config
from autotile.core.document_validation import DocumentValidationError, validate_map_payload
from autotile.grid.state import Coordinate, Grid, PaintedCell


class MapLoadError(ValueError):
    """Base class for map documents that cannot be loaded."""


class MapValidationError(MapLoadError):
    """The document is malformed or misses required fields."""


class ConfigMismatchError(MapLoadError):
    """The document was painted with a different tileset configuration."""

    def __init__(self, expected: str, found: str) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"Map was created with configuration '{found}', but '{expected}' is active."
        )


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def serialize(grid: Grid, config_id: str, *, timestamp: Optional[str] = None) -> Dict[str, Any]:
    tiles = []
    for cell in grid.sorted_cells():
        tile: Dict[str, Any] = {"x": cell.x, "y": cell.y, "materialId": cell.material_id}
        if cell.border_rule_id is not None:
            tile["borderTileId"] = cell.border_rule_id
        if cell.noise_rule_id is not None:
            tile["noiseIds"] = [cell.noise_rule_id]
        tiles.append({"key": cell.coord.key(), "tile": tile})
    return {
        "configId": config_id,
        "gridConfig": {
            "width": grid.width,
            "height": grid.height,
            "tileSize": {"width": grid.tile_size[0], "height": grid.tile_size[1]},
        },
        "tiles": tiles,
        "timestamp": timestamp or _iso_now(),
    }


def load_document(document: Any, expected_config_id: str, *, source: str = "map.json") -> Grid:
    """Build a Grid from a document, raising MapValidationError / ConfigMismatchError."""
    try:
        payload = validate_map_payload(document, source=source)
    except DocumentValidationError as exc:
        raise MapValidationError(str(exc)) from exc

    if payload["configId"] != expected_config_id:
        raise ConfigMismatchError(expected_config_id, payload["configId"])

    grid_config = payload["gridConfig"]
    tile_size = grid_config["tileSize"]
    grid = Grid(
        width=grid_config["width"],
        height=grid_config["height"],
        tile_size=(tile_size["width"], tile_size["height"]),
    )
    for entry in payload["tiles"]:
        tile = entry["tile"]
        # Older documents may list several overlays; only the first is kept.
        noise_ids = tile.get("noiseIds") or []
        coord = Coordinate(tile["x"], tile["y"])
        grid.cells[coord] = PaintedCell(
            x=coord.x,
            y=coord.y,
            material_id=tile["materialId"],
            border_rule_id=tile.get("borderTileId"),
            noise_rule_id=noise_ids[0] if noise_ids else None,
        )
    return grid


def deserialize(document: Any, expected_config_id: str) -> Union[Grid, MapLoadError]:
    """Like load_document, but hands errors back as values instead of raising."""
    try:
        return load_document(document, expected_config_id)
    except MapLoadError as exc:
        return exc


def save_map(grid: Grid, config_id: str, path: Optional[str] = None) -> str:
    target_path = path or os.path.join(config.MAP_DIR, f"{config_id}_map.json")
    os.makedirs(os.path.dirname(os.path.abspath(target_path)), exist_ok=True)
    with open(target_path, "w", encoding="utf-8") as f:
        json.dump(serialize(grid, config_id), f, indent=2)
    return target_path


def load_map(path: str, expected_config_id: str) -> Union[Grid, MapLoadError]:
    """Read and load a map file. Unreadable files come back as MapLoadError."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as exc:
        return MapValidationError(f"{path} is not valid JSON: {exc}")
    except OSError as exc:
        return MapLoadError(f"Could not read {path}: {exc}")
    try:
        return load_document(document, expected_config_id, source=path)
    except MapLoadError as exc:
        return exc
