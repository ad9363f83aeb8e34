'''
decorator.py -- deterministic secondary content for a chunk: lake basins and vegetation
'''

import math
import numpy

import logutil
from chunks import interpolate_heights
from util import chunk_center, chunk_seed

VEGETATION_SALT = 0x7EE5


class WaterBody(object):
    """Square water plane at a fixed level, centred on the chunk that spawned it."""
    __slots__ = ("coord", "center", "level", "size")

    def __init__(self, coord, center, level, size):
        self.coord = coord
        self.center = center
        self.level = level
        self.size = size

    def __repr__(self):
        return f"WaterBody({self.coord}, level={self.level}, size={self.size})"


class VegetationInstance(object):
    __slots__ = ("position", "yaw", "scale")

    def __init__(self, position, yaw, scale):
        self.position = position
        self.yaw = yaw
        self.scale = scale

    def __repr__(self):
        return f"VegetationInstance({self.position}, yaw={self.yaw:.2f}, scale={self.scale:.2f})"


def smoothstep(t):
    t = numpy.clip(t, 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


class Decorator(object):
    '''
    Derives water bodies and vegetation from a chunk's height samples.
    Every random draw comes from a generator seeded by (world seed, chunk
    coordinate), so regenerating a chunk reproduces the same decorations.
    '''

    def __init__(self, settings, field):
        self.settings = settings
        self.field = field

    def decorate(self, coord, origin, heights):
        """ Returns (water, vegetation). `heights` is lowered in place where
        a lake basin is carved.

        """
        water = self.carve_lake(coord, origin, heights)
        vegetation = self.place_vegetation(coord, origin, heights, water)
        return water, vegetation

    def carve_lake(self, coord, origin, heights):
        s = self.settings
        suitability = self.field.chunk_center_suitability(coord, s.chunk_size)
        if suitability <= s.lake_threshold:
            return None
        size = s.chunk_size
        center = chunk_center(coord, size)
        water = WaterBody(coord, center, s.water_level, size * s.lake_size_factor)

        n = heights.shape[0]
        xs = numpy.linspace(origin[0], origin[0] + size, n) - center[0]
        zs = numpy.linspace(origin[1], origin[1] + size, n) - center[1]
        dist = numpy.hypot(xs[:, None], zs[None, :])
        # Radius of half a chunk: edge samples are never touched.
        falloff = smoothstep(1.0 - dist / (size * 0.5))

        rim = s.water_level + s.lake_margin
        if s.lake_margin > 0:
            band = numpy.clip((rim - heights) / s.lake_margin, 0.0, 1.0)
        else:
            band = (heights < rim).astype(float)
        target = s.water_level - s.lake_depth * falloff
        lowered = heights + (target - heights) * falloff * band
        floor = s.water_level - s.lake_floor_depth
        carved = numpy.where(lowered < heights, numpy.maximum(lowered, floor), heights)
        heights[...] = carved
        logutil.log("DECOR", f"lake at chunk {coord} suitability={suitability:.2f}", level="DEBUG")
        return water

    def candidate_count(self):
        s = self.settings
        return int(math.floor(s.chunk_size * s.chunk_size * s.tree_density))

    def place_vegetation(self, coord, origin, heights, water=None):
        s = self.settings
        count = self.candidate_count()
        if count <= 0:
            return []
        rng = numpy.random.RandomState(chunk_seed(s.seed, coord[0], coord[1], VEGETATION_SALT))
        # draw everything up front so acceptance never shifts later draws
        px = origin[0] + rng.random_sample(count) * s.chunk_size
        pz = origin[1] + rng.random_sample(count) * s.chunk_size
        yaw = rng.random_sample(count) * 2.0 * math.pi
        scale = s.tree_scale_min + rng.random_sample(count) * s.tree_scale_range

        d = s.tree_slope_offset
        h0 = numpy.asarray(self.field.elevation(px, pz), dtype=float)
        hx = numpy.asarray(self.field.elevation(px + d, pz), dtype=float)
        hz = numpy.asarray(self.field.elevation(px, pz + d), dtype=float)
        accept = (numpy.abs(hx - h0) / d < s.tree_max_slope) & (numpy.abs(hz - h0) / d < s.tree_max_slope)
        accept = numpy.broadcast_to(accept, px.shape).copy()

        py = numpy.asarray(interpolate_heights(heights, origin, s.chunk_size, px, pz), dtype=float)
        if water is not None:
            accept &= py >= water.level

        return [
            VegetationInstance((float(px[k]), float(py[k]), float(pz[k])), float(yaw[k]), float(scale[k]))
            for k in numpy.flatnonzero(accept)
        ]
