'''
chunks.py -- terrain chunk record and the spatial index of resident chunks
'''

import numpy


class ChunkStoreError(RuntimeError):
    """The scheduler's view of resident chunks has been corrupted."""


class DuplicateChunkError(ChunkStoreError):
    pass


class MissingChunkError(ChunkStoreError, KeyError):
    pass


def interpolate_heights(heights, origin, size, x, z):
    """ Bilinear interpolation of a chunk height grid at world (x, z).
    Accepts scalars or arrays; points outside the footprint are clamped
    to the edge.

    """
    x0, z0 = origin
    cells = heights.shape[0] - 1
    u = numpy.clip((numpy.asarray(x, dtype=float) - x0) / size * cells, 0.0, cells)
    v = numpy.clip((numpy.asarray(z, dtype=float) - z0) / size * cells, 0.0, cells)
    i = numpy.minimum(numpy.floor(u).astype(int), cells - 1)
    j = numpy.minimum(numpy.floor(v).astype(int), cells - 1)
    fu = u - i
    fv = v - j
    top = heights[i, j] * (1 - fu) + heights[i + 1, j] * fu
    bottom = heights[i, j + 1] * (1 - fu) + heights[i + 1, j + 1] * fu
    result = top * (1 - fv) + bottom * fv
    if numpy.ndim(result) == 0:
        return float(result)
    return result


class Chunk(object):
    '''
    A square tile of terrain. `heights` is a (resolution, resolution) array
    indexed [ix, iz] spanning the closed footprint [x0, x0+size] on each
    axis, so neighbouring chunks share their edge samples. `water` is None
    when the chunk spawned no lake; `vegetation` is always a list.
    '''
    __slots__ = ("coord", "origin", "size", "heights", "water", "vegetation")

    def __init__(self, coord, origin, size, heights, water=None, vegetation=None):
        self.coord = coord
        self.origin = origin
        self.size = size
        self.heights = heights
        self.water = water
        self.vegetation = list(vegetation) if vegetation is not None else []

    def __repr__(self):
        return f"Chunk({self.coord}, water={self.water is not None}, vegetation={len(self.vegetation)})"

    @property
    def resolution(self):
        return self.heights.shape[0]

    @property
    def center(self):
        return (self.origin[0] + self.size * 0.5, self.origin[1] + self.size * 0.5)

    def contains(self, x, z):
        x0, z0 = self.origin
        return x0 <= x < x0 + self.size and z0 <= z < z0 + self.size

    def height_at(self, x, z):
        return interpolate_heights(self.heights, self.origin, self.size, x, z)


class ChunkStore(object):
    '''
    Resident chunks keyed by integer grid coordinate (cx, cz). Only the
    streaming scheduler mutates the store.
    '''
    def __init__(self):
        self._chunks = {}

    def __len__(self):
        return len(self._chunks)

    def __contains__(self, coord):
        return coord in self._chunks

    def get(self, coord):
        return self._chunks.get(coord)

    def insert(self, coord, chunk):
        if coord in self._chunks:
            raise DuplicateChunkError(f"chunk {coord} is already resident")
        self._chunks[coord] = chunk

    def remove(self, coord):
        try:
            return self._chunks.pop(coord)
        except KeyError:
            raise MissingChunkError(f"chunk {coord} is not resident") from None

    def keys(self):
        return iter(list(self._chunks))

    def values(self):
        return iter(list(self._chunks.values()))
