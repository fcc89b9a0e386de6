# config.py
import os

# Grid Configuration
DEFAULT_GRID_WIDTH = 20
DEFAULT_GRID_HEIGHT = 15
# Editor clamps user-entered grid sizes to this range
MIN_GRID_DIMENSION = 5
MAX_GRID_DIMENSION = 100
# Hard ceiling accepted when validating saved maps
MAX_DOCUMENT_DIMENSION = 512
DEFAULT_TILE_SIZE = 32

# Noise overlays roll r in [0, NOISE_ROLL_SCALE) against the material probability
NOISE_ROLL_SCALE = 100
MAX_NOISE_PROBABILITY = 100

# History
HISTORY_MAX_SNAPSHOTS = 200

# Border resolution: recompute only mutated cells plus their neighbours
INCREMENTAL_BORDERS = False

# Rendering
CANVAS_BG_COLOR = (243, 244, 246)
GRID_LINE_COLOR = (229, 231, 235)
PLACEHOLDER_SHEET_COLOR = (170, 170, 170, 255)
DRAW_GRID_LINES = True

# Directory Paths (relative to project root)
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = os.path.join(PROJECT_ROOT, "data")
MAP_DIR = os.path.join(DATA_DIR, "maps")
TILESET_DIR = os.path.join(DATA_DIR, "tilesets")
