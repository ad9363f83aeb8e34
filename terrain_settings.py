'''
terrain_settings.py -- validated, per-terrain snapshot of the streaming and generation constants in config
'''

import numbers
import time

import config
import logutil
from mapgen import LAKE_SEED_OFFSET

# numpy RandomState seeds are 32 bit; the lake generator adds LAKE_SEED_OFFSET
MAX_SEED = 2**32 - 1 - LAKE_SEED_OFFSET


class ConfigError(ValueError):
    """Raised at startup when the terrain configuration cannot run."""


# (attribute, config name, fallback when config does not define it)
FIELDS = (
    ('chunk_size', 'CHUNK_SIZE', 200.0),
    ('chunk_resolution', 'CHUNK_RESOLUTION', 51),
    ('chunks_visible', 'CHUNKS_VISIBLE', 5),
    ('look_ahead_distance', 'LOOK_AHEAD_DISTANCE', 3),
    ('look_ahead_cone_radius', 'LOOK_AHEAD_CONE_RADIUS', 2.0),
    ('chunks_per_frame', 'CHUNKS_PER_FRAME', 2),
    ('removals_per_frame', 'REMOVALS_PER_FRAME', 1),
    ('frame_time_budget_ms', 'FRAME_TIME_BUDGET_MS', None),
    ('load_threshold', 'LOAD_THRESHOLD', 0.7),
    ('cone_bonus', 'CONE_PRIORITY_BONUS', 100.0),
    ('cone_falloff', 'CONE_PRIORITY_FALLOFF', 10.0),
    ('direction_bonus', 'DIRECTION_PRIORITY_BONUS', 10.0),
    ('distance_penalty', 'DISTANCE_PRIORITY_PENALTY', 1.0),
    ('seed', 'NOISE_SEED', None),
    ('height_scale', 'HEIGHT_SCALE', 250.0),
    ('noise_scale', 'NOISE_SCALE', 0.004),
    ('octave_weights', 'OCTAVE_WEIGHTS', (1.0, 0.3, 0.15)),
    ('octave_offset', 'OCTAVE_OFFSET', 517.0),
    ('lake_noise_scale', 'LAKE_NOISE_SCALE', 0.0013),
    ('lake_threshold', 'LAKE_THRESHOLD', 0.55),
    ('lake_size_factor', 'LAKE_SIZE_FACTOR', 4.0),
    ('water_level', 'WATER_LEVEL', 80.0),
    ('lake_margin', 'LAKE_MARGIN', 15.0),
    ('lake_depth', 'LAKE_DEPTH', 25.0),
    ('lake_floor_depth', 'LAKE_FLOOR_DEPTH', 40.0),
    ('tree_density', 'TREE_DENSITY', 0.003),
    ('tree_slope_offset', 'TREE_SLOPE_OFFSET', 1.0),
    ('tree_max_slope', 'TREE_MAX_SLOPE', 2.0),
    ('tree_scale_min', 'TREE_SCALE_MIN', 0.8),
    ('tree_scale_range', 'TREE_SCALE_RANGE', 0.4),
)
FIELD_NAMES = tuple(name for name, _, _ in FIELDS)


class TerrainSettings(object):
    '''
    Values are read from config when the settings object is built and
    never change afterwards. Keyword arguments override individual fields,
    e.g. TerrainSettings(seed=3, chunks_visible=2).
    '''
    def __init__(self, **overrides):
        unknown = set(overrides) - set(FIELD_NAMES)
        if unknown:
            raise ConfigError(f"unknown terrain settings: {sorted(unknown)}")
        for name, config_name, default in FIELDS:
            if name in overrides:
                value = overrides[name]
            else:
                value = getattr(config, config_name, default)
            setattr(self, name, value)
        self.octave_weights = tuple(float(w) for w in self.octave_weights)
        if self.seed is None:
            self.seed = int(time.time())

    @property
    def resident_limit(self):
        return (2 * self.chunks_visible + 1) ** 2

    def as_dict(self):
        return {name: getattr(self, name) for name in FIELD_NAMES}

    def replace(self, **overrides):
        values = self.as_dict()
        values.update(overrides)
        return TerrainSettings(**values)

    def problems(self):
        '''Return a list of human readable configuration problems.'''
        out = []
        if not isinstance(self.seed, numbers.Integral) or not 0 <= self.seed <= MAX_SEED:
            out.append(f"seed must be an integer in [0, {MAX_SEED}] (got {self.seed!r})")
        if self.chunk_size <= 0:
            out.append(f"chunk_size must be positive (got {self.chunk_size})")
        if self.chunk_resolution < 2:
            out.append(f"chunk_resolution must be at least 2 (got {self.chunk_resolution})")
        if self.chunks_visible < 0:
            out.append(f"chunks_visible must not be negative (got {self.chunks_visible})")
        if self.chunks_per_frame <= 0:
            out.append(f"chunks_per_frame must be positive (got {self.chunks_per_frame})")
        if self.removals_per_frame <= 0:
            out.append(f"removals_per_frame must be positive (got {self.removals_per_frame})")
        elif self.removals_per_frame >= self.chunks_per_frame:
            out.append(
                f"removals_per_frame ({self.removals_per_frame}) must be below "
                f"chunks_per_frame ({self.chunks_per_frame})"
            )
        if self.look_ahead_distance < 0:
            out.append(f"look_ahead_distance must not be negative (got {self.look_ahead_distance})")
        if self.chunks_visible < self.look_ahead_distance:
            out.append(
                f"chunks_visible ({self.chunks_visible}) is smaller than "
                f"look_ahead_distance ({self.look_ahead_distance})"
            )
        if self.look_ahead_cone_radius < 0:
            out.append(f"look_ahead_cone_radius must not be negative (got {self.look_ahead_cone_radius})")
        if not 0.0 <= self.load_threshold <= 1.0:
            out.append(f"load_threshold must lie in [0, 1] (got {self.load_threshold})")
        if self.cone_bonus <= 0:
            out.append(f"cone_bonus must be positive (got {self.cone_bonus})")
        if self.cone_bonus <= self.direction_bonus:
            out.append(
                f"cone_bonus ({self.cone_bonus}) must exceed direction_bonus ({self.direction_bonus})"
            )
        if self.cone_falloff < 0 or self.distance_penalty < 0:
            out.append("cone_falloff and distance_penalty must not be negative")
        if self.frame_time_budget_ms is not None and self.frame_time_budget_ms <= 0:
            out.append(f"frame_time_budget_ms must be positive or None (got {self.frame_time_budget_ms})")
        if not self.octave_weights:
            out.append("octave_weights must not be empty")
        if self.noise_scale <= 0 or self.lake_noise_scale <= 0:
            out.append("noise_scale and lake_noise_scale must be positive")
        if self.height_scale <= 0:
            out.append(f"height_scale must be positive (got {self.height_scale})")
        if self.lake_size_factor <= 0:
            out.append(f"lake_size_factor must be positive (got {self.lake_size_factor})")
        if self.lake_margin < 0 or self.lake_depth < 0 or self.lake_floor_depth < 0:
            out.append("lake_margin, lake_depth and lake_floor_depth must not be negative")
        if self.tree_density < 0:
            out.append(f"tree_density must not be negative (got {self.tree_density})")
        if self.tree_slope_offset <= 0 or self.tree_max_slope <= 0:
            out.append("tree_slope_offset and tree_max_slope must be positive")
        if self.tree_scale_min <= 0 or self.tree_scale_range < 0:
            out.append("tree_scale_min must be positive and tree_scale_range not negative")
        return out

    def validate(self):
        problems = self.problems()
        if problems:
            for p in problems:
                logutil.log("CONFIG", p, level="ERROR")
            raise ConfigError("; ".join(problems))
        return self
