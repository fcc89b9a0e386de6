from typing import Optional

import pygame

from autotile.core import config
from autotile.core.tileset import SpriteRect, TileSet
from autotile.grid.state import Grid


def load_sheet(tileset: TileSet) -> pygame.Surface:
    """Load the tileset image; fall back to a flat placeholder when it can't be read."""
    try:
        return pygame.image.load(tileset.image_path)
    except (pygame.error, FileNotFoundError) as e:
        print(f"Failed to load tileset image {tileset.image_path!r}: {e}")
        width, height = tileset.tile_size
        surf = pygame.Surface((width, height), pygame.SRCALPHA)
        surf.fill(config.PLACEHOLDER_SHEET_COLOR)
        return surf


def _blit_sprite(
    target: pygame.Surface, sheet: pygame.Surface, sprite: SpriteRect, dest: pygame.Rect
) -> None:
    area = sprite.as_rect().clip(sheet.get_rect())
    if area.width == 0 or area.height == 0:
        return
    image = sheet.subsurface(area)
    if image.get_size() != dest.size:
        image = pygame.transform.scale(image, dest.size)
    target.blit(image, dest.topleft)


def render_grid(
    grid: Grid,
    tileset: TileSet,
    sheet: pygame.Surface,
    draw_grid: Optional[bool] = None,
) -> pygame.Surface:
    """Composite the painted grid into a new surface.

    A resolvable border sprite replaces the material sprite; the noise overlay
    is drawn on top. References missing from the tileset draw nothing.
    """
    if draw_grid is None:
        draw_grid = config.DRAW_GRID_LINES
    tile_w, tile_h = grid.tile_size
    surface = pygame.Surface((grid.width * tile_w, grid.height * tile_h), pygame.SRCALPHA)
    surface.fill(config.CANVAS_BG_COLOR)

    if draw_grid:
        for x in range(0, surface.get_width() + 1, tile_w):
            pygame.draw.line(surface, config.GRID_LINE_COLOR, (x, 0), (x, surface.get_height()))
        for y in range(0, surface.get_height() + 1, tile_h):
            pygame.draw.line(surface, config.GRID_LINE_COLOR, (0, y), (surface.get_width(), y))

    for cell in grid.sorted_cells():
        material = tileset.get_material(cell.material_id)
        if material is None:
            continue
        dest = pygame.Rect(cell.x * tile_w, cell.y * tile_h, tile_w, tile_h)
        sprite = material.tile
        border = tileset.get_border(cell.border_rule_id)
        if border is not None:
            sprite = border.sprite
        _blit_sprite(surface, sheet, sprite, dest)

        noise = tileset.get_noise(cell.noise_rule_id)
        if noise is not None:
            _blit_sprite(surface, sheet, noise.sprite, dest)
    return surface


def export_png(surface: pygame.Surface, path: str) -> str:
    if not path.lower().endswith(".png"):
        path += ".png"
    pygame.image.save(surface, path)
    return path
