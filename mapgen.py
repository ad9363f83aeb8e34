#std/external libs
import time
import numpy

#local libs
import noise
import logutil
from chunks import Chunk
from util import chunk_center, chunk_origin

LAKE_SEED_OFFSET = 7919
LAKE_STEP_OFFSET = 3300.0


class FieldNoise2D(object):
    """Simplex noise sampled in world units at a fixed frequency."""
    def __init__(self, simplex, frequency, step_offset=0.0, scale=1.0, offset=0.0):
        self.noise = simplex
        self.frequency = frequency
        self.step_offset = step_offset
        self.scale = scale
        self.offset = offset

    def __call__(self, x, z):
        x = (numpy.asarray(x, dtype=numpy.float64) + self.step_offset) * self.frequency
        z = (numpy.asarray(z, dtype=numpy.float64) + self.step_offset) * self.frequency
        return self.noise.noise2(x, z) * self.scale + self.offset


class ElevationField(object):
    '''
    Stateless height field: a weighted sum of simplex octaves at doubling
    frequencies, mapped from [-1, 1] to [0, height_scale]. The result
    depends only on (x, z) and the seed, so every chunk that samples a
    world position sees the same height.
    '''

    def __init__(self, seed, height_scale=250.0, base_frequency=0.004,
            octave_weights=(1.0, 0.3, 0.15), octave_offset=517.0,
            lake_frequency=0.0013):
        self.seed = seed
        self.height_scale = float(height_scale)
        self.octave_weights = tuple(octave_weights)
        simplex = noise.SimplexNoise(seed=seed)
        self.octaves = [
            FieldNoise2D(simplex, base_frequency * 2**k, step_offset=k * octave_offset, scale=weight)
            for k, weight in enumerate(self.octave_weights)
        ]
        # Separate generator and frequency so lakes don't follow terrain roughness.
        self.lake_noise = FieldNoise2D(noise.SimplexNoise(seed=seed + LAKE_SEED_OFFSET),
            lake_frequency, step_offset=LAKE_STEP_OFFSET)

    @classmethod
    def from_settings(cls, settings):
        return cls(
            settings.seed,
            height_scale=settings.height_scale,
            base_frequency=settings.noise_scale,
            octave_weights=settings.octave_weights,
            octave_offset=settings.octave_offset,
            lake_frequency=settings.lake_noise_scale,
        )

    def elevation(self, x, z):
        """ Height at world (x, z). Scalars in, float out; arrays in, array out.

        """
        total = 0.0
        for octave in self.octaves:
            total = total + octave(x, z)
        h = (total + 1.0) * 0.5 * self.height_scale
        if numpy.ndim(h) == 0:
            return float(h)
        return h

    def lake_suitability(self, x, z):
        n = self.lake_noise(x, z)
        if numpy.ndim(n) == 0:
            return float(n)
        return n

    def chunk_center_suitability(self, coord, chunk_size):
        return self.lake_suitability(*chunk_center(coord, chunk_size))

    def clearance_floor(self, x, z, clearance):
        """Lowest altitude an observer at (x, z) may fly at."""
        return self.elevation(x, z) + clearance


def chunk_axes(coord, chunk_size, resolution):
    """World x and z sample positions of a chunk; the last sample of one
    chunk is bit-identical to the first sample of its +1 neighbour."""
    cx, cz = coord
    xs = numpy.linspace(cx * chunk_size, (cx + 1) * chunk_size, resolution)
    zs = numpy.linspace(cz * chunk_size, (cz + 1) * chunk_size, resolution)
    return xs, zs


def sample_heights(field, coord, chunk_size, resolution):
    xs, zs = chunk_axes(coord, chunk_size, resolution)
    X, Z = numpy.meshgrid(xs, zs, indexing='ij')
    return numpy.asarray(field.elevation(X, Z), dtype=numpy.float64)


def generate_chunk(coord, settings, field, decorator):
    """ Build a fully decorated chunk at grid coordinate `coord`.

    """
    t0 = time.perf_counter()
    size = settings.chunk_size
    origin = chunk_origin(coord, size)
    heights = sample_heights(field, coord, size, settings.chunk_resolution)
    water, vegetation = decorator.decorate(coord, origin, heights)
    chunk = Chunk(coord, origin, size, heights, water=water, vegetation=vegetation)
    logutil.log(
        "MAPGEN",
        f"chunk {coord} built in {(time.perf_counter() - t0) * 1000.0:.1f}ms "
        f"lake={water is not None} trees={len(chunk.vegetation)}",
        level="DEBUG",
    )
    return chunk
