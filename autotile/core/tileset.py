import json
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import pygame

from autotile.core import config
from autotile.core.document_validation import (
    BORDER_DIRECTIONS,
    load_validated_tileset,
    validate_tileset_payload,
)


@dataclass(frozen=True)
class SpriteRect:
    """Source rectangle of a sprite inside the tileset image."""
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "SpriteRect":
        return cls(
            x=int(data.get("x", 0)),
            y=int(data.get("y", 0)),
            width=int(data.get("width", config.DEFAULT_TILE_SIZE)),
            height=int(data.get("height", config.DEFAULT_TILE_SIZE)),
        )

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    def as_rect(self) -> pygame.Rect:
        return pygame.Rect(self.x, self.y, self.width, self.height)


@dataclass
class Material:
    """A paintable base material and its noise overlay chance (0-100)."""
    id: str
    name: str
    tile: SpriteRect
    color: str = "#3b82f6"
    noise_probability: float = 0

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "Material":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", "") or data.get("id", ""),
            tile=SpriteRect.from_dict(data.get("tile") or {}),
            color=data.get("color", "#3b82f6"),
            noise_probability=data.get("noiseProbability", 0) or 0,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "tile": {**self.tile.to_dict(), "type": "base"},
            "color": self.color,
            "noiseProbability": self.noise_probability,
        }


@dataclass
class BorderRule:
    """Sprite drawn on material_a cells whose neighbours of material_b form `directions`."""
    id: str
    directions: str
    material_a: str
    material_b: str
    sprite: SpriteRect

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "BorderRule":
        return cls(
            id=data.get("id", ""),
            directions=data.get("directions", ""),
            material_a=data.get("materialA", ""),
            material_b=data.get("materialB", ""),
            sprite=SpriteRect.from_dict(data),
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            **self.sprite.to_dict(),
            "type": "border",
            "directions": self.directions,
            "materialA": self.material_a,
            "materialB": self.material_b,
        }


@dataclass
class NoiseRule:
    """Decorative overlay that may be rolled onto cells of base_material."""
    id: str
    base_material: str
    sprite: SpriteRect

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "NoiseRule":
        return cls(
            id=data.get("id", ""),
            base_material=data.get("baseMaterial", ""),
            sprite=SpriteRect.from_dict(data),
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            **self.sprite.to_dict(),
            "type": "noise",
            "baseMaterial": self.base_material,
        }


class TileSet:
    """Material, border and noise tables for one tileset image plus persistence helpers."""

    def __init__(
        self,
        tileset_id: str,
        name: str,
        image_path: str = "",
        tile_size: Optional[Tuple[int, int]] = None,
    ):
        self.id = tileset_id
        self.name = name
        self.image_path = image_path
        self.tile_size = tile_size or (config.DEFAULT_TILE_SIZE, config.DEFAULT_TILE_SIZE)
        self.materials: List[Material] = []
        self.borders: List[BorderRule] = []
        self.noise: List[NoiseRule] = []

    # Lookups --------------------------------------------------------------
    def get_material(self, material_id: Optional[str]) -> Optional[Material]:
        for material in self.materials:
            if material.id == material_id:
                return material
        return None

    def get_border(self, border_id: Optional[str]) -> Optional[BorderRule]:
        for border in self.borders:
            if border.id == border_id:
                return border
        return None

    def get_noise(self, noise_id: Optional[str]) -> Optional[NoiseRule]:
        for noise in self.noise:
            if noise.id == noise_id:
                return noise
        return None

    def borders_for(self, material_id: str) -> List[BorderRule]:
        return [border for border in self.borders if border.material_a == material_id]

    def noise_for(self, material_id: str) -> List[NoiseRule]:
        return [noise for noise in self.noise if noise.base_material == material_id]

    # Editing --------------------------------------------------------------
    def _unique_id(self, base_id: str) -> str:
        taken = {m.id for m in self.materials} | {b.id for b in self.borders} | {n.id for n in self.noise}
        if base_id not in taken:
            return base_id
        suffix = 2
        while f"{base_id}_{suffix}" in taken:
            suffix += 1
        return f"{base_id}_{suffix}"

    def add_material(self, name: str, tile: SpriteRect, color: str = "#3b82f6") -> Material:
        name = name.strip()
        if not name:
            raise ValueError("Material name must be non-empty.")
        base_id = "material_" + "_".join(name.lower().split())
        material = Material(id=self._unique_id(base_id), name=name, tile=tile, color=color)
        self.materials.append(material)
        return material

    def remove_material(self, material_id: str) -> bool:
        """Remove a material. Cells and rules that still reference it become dangling."""
        before = len(self.materials)
        self.materials = [m for m in self.materials if m.id != material_id]
        return len(self.materials) != before

    def set_noise_probability(self, material_id: str, probability: float) -> None:
        material = self.get_material(material_id)
        if material is None:
            raise KeyError(material_id)
        material.noise_probability = max(0, min(config.MAX_NOISE_PROBABILITY, probability))

    def add_border_set(
        self, material_a: str, material_b: str, sprites: Dict[str, SpriteRect]
    ) -> List[BorderRule]:
        """Register one border sprite per direction for the (material_a, material_b) pair."""
        if not sprites:
            raise ValueError("At least one border direction must be assigned.")
        unknown = [d for d in sprites if d not in BORDER_DIRECTIONS]
        if unknown:
            raise ValueError(f"Unknown border directions: {', '.join(sorted(unknown))}")
        added = []
        for direction in BORDER_DIRECTIONS:
            sprite = sprites.get(direction)
            if sprite is None:
                continue
            border = BorderRule(
                id=self._unique_id(f"border_{material_a}_{material_b}_{direction}"),
                directions=direction,
                material_a=material_a,
                material_b=material_b,
                sprite=sprite,
            )
            self.borders.append(border)
            added.append(border)
        return added

    def add_noise_tiles(self, base_material: str, sprites: Iterable[SpriteRect]) -> List[NoiseRule]:
        added = []
        for index, sprite in enumerate(sprites):
            noise = NoiseRule(
                id=self._unique_id(f"noise_{base_material}_{index}"),
                base_material=base_material,
                sprite=sprite,
            )
            self.noise.append(noise)
            added.append(noise)
        return added

    def remove_noise(self, noise_id: str) -> bool:
        before = len(self.noise)
        self.noise = [n for n in self.noise if n.id != noise_id]
        return len(self.noise) != before

    # Persistence ----------------------------------------------------------
    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "imageUrl": self.image_path,
            "tileSize": {"width": self.tile_size[0], "height": self.tile_size[1]},
            "materials": [m.to_dict() for m in self.materials],
            "borders": [b.to_dict() for b in self.borders],
            "noise": [n.to_dict() for n in self.noise],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "TileSet":
        tile_size = data.get("tileSize") or {}
        tileset = cls(
            tileset_id=data.get("id", "tileset"),
            name=data.get("name", "Tileset"),
            image_path=data.get("imageUrl", ""),
            tile_size=(
                tile_size.get("width", config.DEFAULT_TILE_SIZE),
                tile_size.get("height", config.DEFAULT_TILE_SIZE),
            ),
        )
        for material_data in data.get("materials", []):
            tileset.materials.append(Material.from_dict(material_data))
        for border_data in data.get("borders", []):
            tileset.borders.append(BorderRule.from_dict(border_data))
        for noise_data in data.get("noise", []):
            tileset.noise.append(NoiseRule.from_dict(noise_data))
        return tileset

    @classmethod
    def load(cls, path: str) -> "TileSet":
        tileset = cls.from_dict(load_validated_tileset(path))
        # Relative sheet paths are resolved against the tileset file
        if tileset.image_path and not os.path.isabs(tileset.image_path):
            tileset.image_path = os.path.join(os.path.dirname(os.path.abspath(path)), tileset.image_path)
        return tileset

    def save(self, path: Optional[str] = None) -> str:
        payload = self.to_dict()
        validate_tileset_payload(payload, source=self.id)
        target_path = path or os.path.join(config.TILESET_DIR, f"{self.id}.json")
        os.makedirs(os.path.dirname(os.path.abspath(target_path)), exist_ok=True)
        with open(target_path, "w") as f:
            json.dump(payload, f, indent=2)
        return target_path
