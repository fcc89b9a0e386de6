from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any, Dict, Sequence, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from autotile.core import config

TILE_KEY_RE = re.compile(r"^\d+,\d+$")

BORDER_DIRECTIONS = (
    "n",
    "e",
    "s",
    "w",
    "ne",
    "se",
    "sw",
    "nw",
    "inward-ne",
    "inward-se",
    "inward-sw",
    "inward-nw",
)


class DocumentValidationError(ValueError):
    """Raised when a tileset or map JSON payload fails schema validation."""

    def __init__(self, source: str, errors: Sequence[Dict[str, Any]]) -> None:
        self.source = source
        self.errors = [self._normalize_error(error) for error in errors]
        super().__init__(self._build_message())

    @staticmethod
    def _normalize_error(error: Dict[str, Any]) -> Dict[str, Any]:
        loc = error.get("loc", ())
        if not isinstance(loc, tuple):
            if isinstance(loc, list):
                loc = tuple(loc)
            else:
                loc = (loc,)
        msg = str(error.get("msg", "Unknown validation error."))
        return {"loc": loc, "msg": msg}

    @staticmethod
    def _format_loc(loc: Tuple[Any, ...]) -> str:
        if not loc:
            return "<root>"
        parts = []
        for item in loc:
            if isinstance(item, int):
                parts.append(f"[{item}]")
            else:
                text = str(item)
                if not parts:
                    parts.append(text)
                else:
                    parts.append(f".{text}")
        return "".join(parts)

    def _build_message(self) -> str:
        lines = [f"{self.source} validation failed ({len(self.errors)} error(s))."]
        for error in self.errors:
            lines.append(f"- {self._format_loc(error['loc'])}: {error['msg']}")
        return "\n".join(lines)

    @classmethod
    def from_pydantic(cls, source: str, exc: ValidationError) -> "DocumentValidationError":
        return cls(source=source, errors=exc.errors())


class _SchemaModel(BaseModel):
    model_config = ConfigDict(extra="allow")


def _strip_non_empty(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("value must be a non-empty string.")
    return stripped


class _TileSizeModel(_SchemaModel):
    width: StrictInt = Field(ge=1)
    height: StrictInt = Field(ge=1)


class _SpriteRectModel(_SchemaModel):
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(ge=1)
    height: int = Field(ge=1)


class _MaterialModel(_SchemaModel):
    id: str = Field(min_length=1)
    name: str = ""
    tile: _SpriteRectModel
    color: str = "#3b82f6"
    noiseProbability: float = Field(default=0, ge=0, le=config.MAX_NOISE_PROBABILITY)

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        return _strip_non_empty(value)


class _BorderRuleModel(_SpriteRectModel):
    id: str = Field(min_length=1)
    directions: str
    materialA: str = Field(min_length=1)
    materialB: str = Field(min_length=1)

    @field_validator("id", "materialA", "materialB")
    @classmethod
    def _strip_required_str(cls, value: str) -> str:
        return _strip_non_empty(value)

    @field_validator("directions")
    @classmethod
    def _validate_directions(cls, value: str) -> str:
        stripped = value.strip().lower()
        if stripped not in BORDER_DIRECTIONS:
            raise ValueError(
                f"Unknown border direction '{value}'. Expected one of: {', '.join(BORDER_DIRECTIONS)}."
            )
        return stripped


class _NoiseRuleModel(_SpriteRectModel):
    id: str = Field(min_length=1)
    baseMaterial: str = Field(min_length=1)

    @field_validator("id", "baseMaterial")
    @classmethod
    def _strip_required_str(cls, value: str) -> str:
        return _strip_non_empty(value)


class _TilesetPayloadModel(_SchemaModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    imageUrl: str = ""
    tileSize: _TileSizeModel
    materials: list[_MaterialModel]
    borders: list[_BorderRuleModel] = Field(default_factory=list)
    noise: list[_NoiseRuleModel] = Field(default_factory=list)

    @field_validator("id", "name")
    @classmethod
    def _strip_required_str(cls, value: str) -> str:
        return _strip_non_empty(value)

    @model_validator(mode="after")
    def _validate_unique_ids(self) -> "_TilesetPayloadModel":
        for label, entries in (
            ("materials", self.materials),
            ("borders", self.borders),
            ("noise", self.noise),
        ):
            seen = set()
            for index, entry in enumerate(entries):
                if entry.id in seen:
                    raise ValueError(f"{label}[{index}] reuses id '{entry.id}'.")
                seen.add(entry.id)
        return self


class _GridConfigModel(_SchemaModel):
    width: StrictInt = Field(ge=1, le=config.MAX_DOCUMENT_DIMENSION)
    height: StrictInt = Field(ge=1, le=config.MAX_DOCUMENT_DIMENSION)
    tileSize: _TileSizeModel


class _PaintedTileModel(_SchemaModel):
    x: StrictInt = Field(ge=0)
    y: StrictInt = Field(ge=0)
    materialId: str = Field(min_length=1)
    borderTileId: str | None = None
    noiseIds: list[str] | None = None

    @field_validator("materialId")
    @classmethod
    def _strip_material(cls, value: str) -> str:
        return _strip_non_empty(value)

    @field_validator("noiseIds")
    @classmethod
    def _validate_noise_ids(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return value
        normalized: list[str] = []
        for index, noise_id in enumerate(value):
            stripped = noise_id.strip()
            if not stripped:
                raise ValueError(f"noiseIds[{index}] must be a non-empty string.")
            normalized.append(stripped)
        return normalized


class _TileEntryModel(_SchemaModel):
    key: str
    tile: _PaintedTileModel

    @field_validator("key")
    @classmethod
    def _validate_key(cls, value: str) -> str:
        if not TILE_KEY_RE.match(value):
            raise ValueError(f"Invalid tile key '{value}'. Expected coordinate format 'x,y'.")
        return value

    @model_validator(mode="after")
    def _key_matches_tile(self) -> "_TileEntryModel":
        if self.key != f"{self.tile.x},{self.tile.y}":
            raise ValueError(
                f"Tile key '{self.key}' does not match tile position ({self.tile.x}, {self.tile.y})."
            )
        return self


class _MapPayloadModel(_SchemaModel):
    configId: str = Field(min_length=1)
    gridConfig: _GridConfigModel
    tiles: list[_TileEntryModel]
    timestamp: str

    @field_validator("configId")
    @classmethod
    def _strip_config_id(cls, value: str) -> str:
        return _strip_non_empty(value)

    @field_validator("timestamp")
    @classmethod
    def _validate_timestamp(cls, value: str) -> str:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid timestamp '{value}'. Expected an ISO-8601 string.") from None
        return value

    @field_validator("tiles")
    @classmethod
    def _validate_tiles_in_bounds(
        cls, tiles: list[_TileEntryModel], info: ValidationInfo
    ) -> list[_TileEntryModel]:
        grid_config: _GridConfigModel | None = info.data.get("gridConfig")
        seen = set()
        for index, entry in enumerate(tiles):
            if entry.key in seen:
                raise ValueError(f"tiles[{index}] duplicates key '{entry.key}'.")
            seen.add(entry.key)
            if grid_config is None:
                continue
            if entry.tile.x >= grid_config.width or entry.tile.y >= grid_config.height:
                raise ValueError(
                    f"tiles[{index}] at '{entry.key}' is outside grid bounds "
                    f"{grid_config.width}x{grid_config.height}."
                )
        return tiles


def _read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _validate_model(model: Any, payload: Any, *, source: str) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise DocumentValidationError.from_pydantic(source, exc) from exc


def validate_tileset_payload(payload: Any, *, source: str = "tileset.json") -> dict[str, Any]:
    validated = _validate_model(_TilesetPayloadModel, payload, source=source)
    return validated.model_dump(exclude_none=True)


def load_validated_tileset(path: str) -> dict[str, Any]:
    payload = _read_json(path)
    return validate_tileset_payload(payload, source=path)


def validate_map_payload(payload: Any, *, source: str = "map.json") -> dict[str, Any]:
    validated = _validate_model(_MapPayloadModel, payload, source=source)
    return validated.model_dump(exclude_none=True)
