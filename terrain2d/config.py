from __future__ import annotations

# Window
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 720
FPS_CAP = 0  # 0 = uncapped

# App
APP_VERSION = "0.3.0"

# Terrain / chunks
DEFAULT_SEED = 12345
DEFAULT_CHUNK_SIZE = (64, 64)  # cells per chunk
DEFAULT_CELL_SIZE = (8, 8)  # world units per cell
DEFAULT_NOISE = "simplex"  # "simplex" | "fast"
DEFAULT_NOISE_SCALE = 0.007
DEFAULT_OCTAVES = 1
DEFAULT_THRESHOLD = 0.2  # field value above which terrain is solid
DEFAULT_INTERPOLATE = False  # edge anchors at midpoints unless enabled

# Streaming
DEFAULT_LOAD_DISTANCE = 1  # 1 => 3x3 neighborhood
DEFAULT_PREFETCH_MARGIN = 0  # extra ring generated off-thread (0 = off)

# Viewer
DEFAULT_VIEWER_SPEED = 600.0  # world units / sec
CAMERA_SMOOTH_K = 6.0
VIEW_HALF_HEIGHT = 900.0  # world units visible above/below the camera
TERRAIN_COLOR = (0.0, 1.0, 1.0)
BACKGROUND_COLOR = (0.08, 0.09, 0.12)

# Headless runs
DEFAULT_TICKS = 120
DEFAULT_TICK_DT = 1.0 / 60.0
