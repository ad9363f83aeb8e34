import os
import sys

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import mapgen
import noise
from decorator import Decorator
from terrain_settings import TerrainSettings

DUMP_MAPS = os.environ.get("TERRAIN_DUMP", "").strip() in ("1", "true", "yes", "on")
DUMP_DIR = os.environ.get("TERRAIN_DUMP_DIR", os.path.join(ROOT, "tests", "terrain_dumps"))


def _settings(seed, **overrides):
    values = dict(seed=seed, chunk_size=200.0, chunk_resolution=17, tree_density=0.0005)
    values.update(overrides)
    return TerrainSettings(**values).validate()


def _build(settings, coord):
    field = mapgen.ElevationField.from_settings(settings)
    return mapgen.generate_chunk(coord, settings, field, Decorator(settings, field))


def _edge_stats(edge_a, edge_b):
    diff = np.abs(edge_a.astype(np.float64) - edge_b.astype(np.float64))
    return {
        "max": float(diff.max(initial=0.0)),
        "mean": float(diff.mean()),
        "p95": float(np.percentile(diff, 95)),
    }


def _format_height_map(h_map, title=None):
    lines = []
    if title:
        lines.append(title)
    for z in range(h_map.shape[1]):
        row = []
        for x in range(h_map.shape[0]):
            val = int(round(float(h_map[x, z])))
            row.append("--" if val < 0 else f"{min(255, val):02X}")
        lines.append(" ".join(row))
    return "\n".join(lines)


def _dump_seam_map(height_a, height_b, name):
    if not DUMP_MAPS:
        return
    os.makedirs(DUMP_DIR, exist_ok=True)
    n = height_a.shape[0]
    h_map = np.zeros((2 * n - 1, n))
    h_map[:n] = height_a
    h_map[n - 1:] = height_b
    path = os.path.join(DUMP_DIR, f"{name}.txt")
    with open(path, "w", encoding="ascii") as f:
        f.write(_format_height_map(h_map, title=name))
        f.write("\n")


def test_elevation_determinism():
    a = mapgen.ElevationField(4242)
    b = mapgen.ElevationField(4242)
    rng = np.random.RandomState(7)
    xs = rng.uniform(-1e4, 1e4, size=200)
    zs = rng.uniform(-1e4, 1e4, size=200)
    first = a.elevation(xs, zs)
    assert np.array_equal(first, a.elevation(xs, zs))
    assert np.array_equal(first, b.elevation(xs, zs))
    for x, z, h in zip(xs[:20], zs[:20], first[:20]):
        assert abs(a.elevation(float(x), float(z)) - h) < 1e-9
    other = mapgen.ElevationField(4243)
    assert not np.array_equal(first, other.elevation(xs, zs))


def test_elevation_is_normalized_and_scaled():
    field = mapgen.ElevationField(11, height_scale=250.0)
    rng = np.random.RandomState(3)
    h = field.elevation(rng.uniform(-5e4, 5e4, 5000), rng.uniform(-5e4, 5e4, 5000))
    assert np.all(np.isfinite(h))
    # octave weights sum to 1.45, so heights stay within that excursion of mid-range
    assert h.min() > -0.25 * 250.0
    assert h.max() < 1.25 * 250.0
    assert 0.3 * 250.0 < h.mean() < 0.7 * 250.0
    doubled = mapgen.ElevationField(11, height_scale=500.0)
    assert np.allclose(doubled.elevation(100.0, 200.0), 2.0 * field.elevation(100.0, 200.0))


def test_heightfield_seams():
    rng = np.random.RandomState(1337)
    offsets = list(rng.randint(-20, 21, size=(6, 2)))
    seeds = list(rng.randint(1, 1_000_000, size=6))
    for (cx, cz), seed in zip(offsets, seeds):
        # every chunk spawns a lake so carving is exercised at the seams too
        for threshold in (2.0, -2.0):
            settings = _settings(int(seed), lake_threshold=threshold)
            a = _build(settings, (int(cx), int(cz)))
            b = _build(settings, (int(cx) + 1, int(cz)))
            c = _build(settings, (int(cx), int(cz) + 1))
            _dump_seam_map(a.heights, b.heights, f"seam_{seed}_{cx}_{cz}_{threshold}")
            assert np.array_equal(a.heights[-1, :], b.heights[0, :]), _edge_stats(a.heights[-1, :], b.heights[0, :])
            assert np.array_equal(a.heights[:, -1], c.heights[:, 0]), _edge_stats(a.heights[:, -1], c.heights[:, 0])


def test_chunk_regeneration_identical():
    settings = _settings(99, lake_threshold=-2.0, tree_density=0.002)
    a = _build(settings, (3, -4))
    b = _build(settings, (3, -4))
    assert np.array_equal(a.heights, b.heights)
    assert (a.water is None) == (b.water is None)
    assert a.water.center == b.water.center
    assert [v.position for v in a.vegetation] == [v.position for v in b.vegetation]
    assert [v.yaw for v in a.vegetation] == [v.yaw for v in b.vegetation]
    assert [v.scale for v in a.vegetation] == [v.scale for v in b.vegetation]


def test_lake_scenario_follows_threshold():
    settings = _settings(5)
    field = mapgen.ElevationField.from_settings(settings)
    found_above = found_below = False
    for cx in range(-15, 15):
        for cz in range(-15, 15):
            s = field.chunk_center_suitability((cx, cz), settings.chunk_size)
            if found_above and found_below:
                break
            if s > settings.lake_threshold and not found_above:
                assert _build(settings, (cx, cz)).water is not None
                found_above = True
            elif s < settings.lake_threshold and not found_below:
                assert _build(settings, (cx, cz)).water is None
                found_below = True
    assert found_above
    assert found_below
    assert _build(settings.replace(lake_threshold=-2.0), (0, 0)).water is not None
    assert _build(settings.replace(lake_threshold=2.0), (0, 0)).water is None


def test_lake_noise_independent_of_elevation_settings():
    a = mapgen.ElevationField(21, height_scale=100.0, octave_weights=(1.0,))
    b = mapgen.ElevationField(21, height_scale=400.0, octave_weights=(1.0, 0.5, 0.25, 0.125))
    xs = np.linspace(-3000.0, 3000.0, 50)
    assert np.array_equal(a.lake_suitability(xs, xs), b.lake_suitability(xs, xs))
    assert not np.allclose(a.lake_suitability(xs, xs), np.asarray(a.octaves[0](xs, xs)))


def test_clearance_floor():
    field = mapgen.ElevationField(8)
    assert field.clearance_floor(10.0, 20.0, 20.0) == field.elevation(10.0, 20.0) + 20.0


def test_simplex_noise_bounded_and_continuous_far_from_origin():
    n = noise.SimplexNoise(seed=12)
    rng = np.random.RandomState(0)
    pts = rng.uniform(-1e5, 1e5, size=(4000, 2))
    values = n.noise(pts)
    assert np.all(np.abs(values) <= 1.1)
    assert values.std() > 0.1
    nudged = n.noise(pts + 1e-5)
    assert np.max(np.abs(values - nudged)) < 1e-3
    assert np.array_equal(values, noise.SimplexNoise(seed=12).noise(pts))


def test_simplex_noise_seed_zero_differs_from_other_seeds():
    pts = np.random.RandomState(1).uniform(0, 50, size=(100, 2))
    assert not np.array_equal(noise.SimplexNoise(seed=0).noise(pts), noise.SimplexNoise(seed=1).noise(pts))
