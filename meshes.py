'''
meshes.py -- triangle meshes for chunks, water bodies and trees

Every builder returns (positions, normals, colors, indices): float32 arrays
of shape (n, 3) with colors in 0..255, and a flat uint32 index array.
'''

import math
import numpy

import config

_tree_mesh_cache = {}


def _normalize_rows(v):
    length = numpy.linalg.norm(v, axis=-1, keepdims=True)
    return v / numpy.maximum(length, 1e-9)


def grid_indices(n):
    """Two triangles per cell of an n x n vertex grid laid out row-major."""
    i, j = numpy.meshgrid(numpy.arange(n - 1), numpy.arange(n - 1), indexing='ij')
    v = (i * n + j).ravel()
    tris = numpy.stack([v, v + 1, v + n + 1, v, v + n + 1, v + n], axis=-1)
    return tris.ravel().astype(numpy.uint32)


def terrain_mesh(chunk, water_level=None):
    if water_level is None:
        water_level = getattr(config, 'WATER_LEVEL', 80.0)
    n = chunk.resolution
    x0, z0 = chunk.origin
    xs = numpy.linspace(x0, x0 + chunk.size, n)
    zs = numpy.linspace(z0, z0 + chunk.size, n)
    X, Z = numpy.meshgrid(xs, zs, indexing='ij')
    H = chunk.heights
    positions = numpy.stack([X, H, Z], axis=-1).reshape(-1, 3)

    step = chunk.size / (n - 1)
    dhdx, dhdz = numpy.gradient(H, step)
    normals = _normalize_rows(numpy.stack([-dhdx, numpy.ones_like(H), -dhdz], axis=-1)).reshape(-1, 3)

    slope = numpy.hypot(dhdx, dhdz).ravel()
    heights = H.ravel()
    colors = numpy.empty((n * n, 3), dtype=numpy.float32)
    colors[:] = config.GRASS_COLOR
    colors[slope > 1.0] = config.ROCK_COLOR
    colors[heights < water_level + 2.0] = config.SAND_COLOR
    return (positions.astype(numpy.float32), normals.astype(numpy.float32),
            colors, grid_indices(n))


def water_mesh(water):
    cx, cz = water.center
    half = water.size * 0.5
    y = water.level
    positions = numpy.array([
        (cx - half, y, cz - half),
        (cx - half, y, cz + half),
        (cx + half, y, cz + half),
        (cx + half, y, cz - half),
    ], dtype=numpy.float32)
    normals = numpy.tile(numpy.array([0.0, 1.0, 0.0], dtype=numpy.float32), (4, 1))
    colors = numpy.tile(numpy.array(config.WATER_COLOR, dtype=numpy.float32), (4, 1))
    indices = numpy.array([0, 1, 2, 0, 2, 3], dtype=numpy.uint32)
    return positions, normals, colors, indices


def _ring(k, radius, y):
    a = numpy.arange(k) * 2.0 * math.pi / k
    return numpy.stack([numpy.cos(a) * radius, numpy.full(k, y), numpy.sin(a) * radius], axis=-1)


def tree_template():
    """Trunk (tapered hexagonal prism) and canopy (octagonal cone) at unit scale."""
    if 'tree' in _tree_mesh_cache:
        return _tree_mesh_cache['tree']
    positions, normals, colors, indices = [], [], [], []

    k = 6
    bottom = _ring(k, 0.8, 0.0)
    top = _ring(k, 0.5, 4.0)
    for s in range(k):
        t = (s + 1) % k
        mid = (bottom[s] + bottom[t]) * 0.5
        n = mid / numpy.linalg.norm(mid)
        base = len(positions)
        positions.extend([bottom[s], bottom[t], top[t], top[s]])
        normals.extend([n] * 4)
        colors.extend([config.TRUNK_COLOR] * 4)
        indices.extend([base, base + 2, base + 1, base, base + 3, base + 2])

    k = 8
    ring = _ring(k, 2.0, 4.0)
    apex = numpy.array([0.0, 10.0, 0.0])
    for s in range(k):
        t = (s + 1) % k
        a, b = ring[s], ring[t]
        n = numpy.cross(b - a, apex - a)
        mid = (a + b) * 0.5
        if n[0] * mid[0] + n[2] * mid[2] < 0:
            n = -n
        n = n / numpy.linalg.norm(n)
        base = len(positions)
        positions.extend([a, b, apex])
        normals.extend([n] * 3)
        colors.extend([config.CANOPY_COLOR] * 3)
        indices.extend([base, base + 1, base + 2])

    template = (
        numpy.array(positions, dtype=numpy.float32),
        numpy.array(normals, dtype=numpy.float32),
        numpy.array(colors, dtype=numpy.float32),
        numpy.array(indices, dtype=numpy.uint32),
    )
    _tree_mesh_cache['tree'] = template
    return template


def tree_mesh(instance):
    positions, normals, colors, indices = tree_template()
    c = math.cos(instance.yaw)
    s = math.sin(instance.yaw)
    rot = numpy.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]], dtype=numpy.float32)
    placed = (positions * instance.scale) @ rot.T + numpy.array(instance.position, dtype=numpy.float32)
    return placed.astype(numpy.float32), (normals @ rot.T).astype(numpy.float32), colors, indices
