import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from chunks import Chunk, ChunkStore, DuplicateChunkError, MissingChunkError, interpolate_heights
from util import chebyshev, chunk_center, chunk_origin, chunk_progress, chunk_seed, chunkize, horizontal_heading


def _chunk(coord, size=100.0, n=5):
    origin = (coord[0] * size, coord[1] * size)
    return Chunk(coord, origin, size, np.zeros((n, n)))


def test_insert_get_remove():
    store = ChunkStore()
    a = _chunk((0, 0))
    b = _chunk((-1, 2))
    store.insert((0, 0), a)
    store.insert((-1, 2), b)
    assert len(store) == 2
    assert (0, 0) in store
    assert store.get((-1, 2)) is b
    assert store.get((5, 5)) is None
    assert sorted(store.keys()) == [(-1, 2), (0, 0)]
    assert store.remove((0, 0)) is a
    assert (0, 0) not in store
    assert list(store.values()) == [b]


def test_duplicate_insert_raises():
    store = ChunkStore()
    store.insert((1, 1), _chunk((1, 1)))
    with pytest.raises(DuplicateChunkError):
        store.insert((1, 1), _chunk((1, 1)))
    assert len(store) == 1


def test_remove_absent_raises():
    store = ChunkStore()
    with pytest.raises(MissingChunkError):
        store.remove((3, 4))
    with pytest.raises(KeyError):
        store.remove((3, 4))


def test_keys_snapshot_allows_mutation():
    store = ChunkStore()
    for cx in range(3):
        store.insert((cx, 0), _chunk((cx, 0)))
    for coord in store.keys():
        store.remove(coord)
    assert len(store) == 0


def test_chunk_defaults():
    chunk = _chunk((2, -3))
    assert chunk.water is None
    assert chunk.vegetation == []
    assert chunk.resolution == 5
    assert chunk.center == (250.0, -250.0)
    assert chunk.contains(200.0, -300.0)
    assert not chunk.contains(300.0, -250.0)


def test_height_interpolation():
    n = 5
    size = 100.0
    xs = np.linspace(0.0, size, n)
    zs = np.linspace(0.0, size, n)
    X, Z = np.meshgrid(xs, zs, indexing='ij')
    heights = 2.0 * X + 0.5 * Z
    chunk = Chunk((0, 0), (0.0, 0.0), size, heights)
    assert chunk.height_at(25.0, 50.0) == pytest.approx(75.0)
    assert chunk.height_at(10.0, 30.0) == pytest.approx(35.0)
    assert chunk.height_at(100.0, 100.0) == pytest.approx(250.0)
    # outside the footprint clamps to the edge
    assert chunk.height_at(-50.0, 0.0) == pytest.approx(0.0)
    values = interpolate_heights(heights, (0.0, 0.0), size, np.array([10.0, 60.0]), np.array([30.0, 80.0]))
    assert np.allclose(values, [35.0, 160.0])
    assert isinstance(chunk.height_at(1.0, 1.0), float)


def test_chunk_helpers():
    assert chunkize((0.0, 50.0, 0.0), 200.0) == (0, 0)
    assert chunkize((-0.5, 0.0, 199.9), 200.0) == (-1, 0)
    assert chunkize((400.0, 0.0, -400.0), 200.0) == (2, -2)
    fx, fz = chunk_progress((150.0, 0.0, -50.0), 200.0)
    assert fx == pytest.approx(0.75)
    assert fz == pytest.approx(0.75)
    assert chebyshev((0, 0), (3, -5)) == 5
    assert chunk_origin((2, -3), 200.0) == (400.0, -600.0)
    assert chunk_center((2, -3), 200.0) == (500.0, -500.0)
    assert horizontal_heading((0.0, 1.0, 0.0)) == (0.0, 0.0)
    hx, hz = horizontal_heading((3.0, 7.0, 4.0))
    assert (hx, hz) == pytest.approx((0.6, 0.8))


def test_chunk_seed_stable_and_distinct():
    assert chunk_seed(1, 2, 3) == chunk_seed(1, 2, 3)
    seeds = {chunk_seed(1, cx, cz) for cx in range(-5, 5) for cz in range(-5, 5)}
    assert len(seeds) == 100
    assert chunk_seed(1, 2, 3) != chunk_seed(2, 2, 3)
    assert chunk_seed(1, 2, 3) != chunk_seed(1, 2, 3, salt=9)
    assert 0 <= chunk_seed(10**12, -7, 9) < 2**32
