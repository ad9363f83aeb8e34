import math

TICKS_PER_SEC = 60

# Size of chunks used to stream terrain, in world units (x and z).
CHUNK_SIZE = 200.0
# Height samples per chunk edge; 51 samples = 50 quads per edge.
CHUNK_RESOLUTION = 51
# Chebyshev radius (in chunks) of the resident window around the observer.
CHUNKS_VISIBLE = 5

# Look-ahead: project the heading this many chunks ahead and favour chunks
# within LOOK_AHEAD_CONE_RADIUS of that point.
LOOK_AHEAD_DISTANCE = 3
LOOK_AHEAD_CONE_RADIUS = 2.0

# Per-frame budgets. Removals must stay strictly below loads.
CHUNKS_PER_FRAME = 2
REMOVALS_PER_FRAME = 1
# Optional wall clock cap on chunk builds per step (None to count only).
FRAME_TIME_BUDGET_MS = None

# Fraction of the current chunk crossed before chunks beyond it get a bonus.
LOAD_THRESHOLD = 0.7

# Load priority weights. Only the ordering matters: any cone chunk beats any
# other chunk, travel direction beats distance.
CONE_PRIORITY_BONUS = 100.0
CONE_PRIORITY_FALLOFF = 10.0
DIRECTION_PRIORITY_BONUS = 10.0
DISTANCE_PRIORITY_PENALTY = 1.0

# Terrain generation
NOISE_SEED = None  # None picks a seed from the clock at startup
HEIGHT_SCALE = 250.0
NOISE_SCALE = 0.004
OCTAVE_WEIGHTS = (1.0, 0.3, 0.15)
OCTAVE_OFFSET = 517.0

# Lakes
LAKE_NOISE_SCALE = 0.0013
LAKE_THRESHOLD = 0.55
LAKE_SIZE_FACTOR = 4.0
WATER_LEVEL = 80.0
LAKE_MARGIN = 15.0
LAKE_DEPTH = 25.0
LAKE_FLOOR_DEPTH = 40.0

# Vegetation
TREE_DENSITY = 0.003  # trees per square unit
TREE_SLOPE_OFFSET = 1.0
TREE_MAX_SLOPE = 2.0
TREE_SCALE_MIN = 0.8
TREE_SCALE_RANGE = 0.4

# Flight
START_POSITION = (0.0, 100.0, 0.0)
MAX_SPEED = 2.4
ACCELERATION = 0.01
DECELERATION = 0.001
ROTATION_SPEED = 0.02
MIN_CLEARANCE = 20.0
MAX_PITCH = math.pi / 2

# Rendering
FIELD_OF_VIEW = 75.0
FAR_PLANE = 2000.0
SKY_COLOR = (0.53, 0.81, 0.92)
FOG_START = 1.0
FOG_END = 1000.0
GRASS_COLOR = [60, 143, 60]
ROCK_COLOR = [120, 112, 100]
SAND_COLOR = [194, 178, 128]
WATER_COLOR = [40, 90, 128]
WATER_ALPHA = 0.8
TRUNK_COLOR = [77, 41, 38]
CANOPY_COLOR = [29, 77, 29]

# Enable ANSI colors in logs.
LOG_COLOR = True
# Minimum level printed: DEBUG, INFO, WARN, ERROR.
LOG_LEVEL = 'INFO'

# Log main-loop timings and frame boundaries.
LOG_MAIN_LOOP = False

# Log queue/resident state of the streaming scheduler.
LOG_STREAMING = True
LOG_STREAMING_EVERY_N_FRAMES = 60
