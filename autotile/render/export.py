"""Render a saved map to a PNG using its tileset."""

import argparse
import json
import os
import sys
from typing import List, Optional

import pygame

from autotile.core.document_validation import DocumentValidationError
from autotile.core.tileset import TileSet
from autotile.grid.persistence import MapLoadError, load_map
from autotile.grid.store import TileGridStore
from autotile.render.renderer import export_png, load_sheet, render_grid


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export a painted tile map as a PNG image.")
    parser.add_argument("tileset", help="Path to the tileset configuration JSON.")
    parser.add_argument("map", help="Path to the saved map JSON.")
    parser.add_argument("output", help="Destination PNG path.")
    parser.add_argument("--no-grid", action="store_true", help="Do not draw grid lines.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

    try:
        tileset = TileSet.load(args.tileset)
    except (OSError, json.JSONDecodeError, DocumentValidationError) as e:
        print(f"Error loading tileset: {e}")
        return 1

    result = load_map(args.map, tileset.id)
    if isinstance(result, MapLoadError):
        print(f"Error loading map: {result}")
        return 1

    # Re-run border resolution against the current tileset tables.
    store = TileGridStore(tileset, grid=result)

    pygame.init()
    try:
        surface = render_grid(store.grid, tileset, load_sheet(tileset), draw_grid=not args.no_grid)
        path = export_png(surface, args.output)
    finally:
        pygame.quit()
    print(f"Exported {len(store.grid)} tiles to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
