import math
import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from flight import FlightModel


class _FlatField:
    def __init__(self, height=0.0):
        self.height = height

    def elevation(self, x, z):
        return self.height

    def clearance_floor(self, x, z, clearance):
        return self.height + clearance


def _model(**kwargs):
    kwargs.setdefault('position', (0.0, 500.0, 0.0))
    return FlightModel(_FlatField(), max_speed=2.4, acceleration=0.01, deceleration=0.001,
                       rotation_speed=0.02, min_clearance=20.0, max_pitch=math.pi / 2, **kwargs)


def test_throttle_caps_at_max_speed():
    model = _model()
    for _ in range(1000):
        model.update({'throttle': True})
    assert model.speed == pytest.approx(2.4)


def test_coasting_decelerates_to_rest():
    model = _model()
    for _ in range(100):
        model.update({'throttle': True})
    speed = model.speed
    model.update({})
    assert model.speed == pytest.approx(speed - 0.001)
    for _ in range(2000):
        model.update({})
    assert model.speed == 0.0


def test_moves_along_heading():
    model = _model()
    model.update({'throttle': True})
    x, y, z = model.position
    assert x == pytest.approx(0.0)
    assert y == pytest.approx(500.0)
    assert z == pytest.approx(-0.01)


def test_altitude_clamped_above_terrain():
    model = _model(position=(0.0, 5.0, 0.0))
    position = model.update({})
    assert position[1] == 20.0
    model.pitch = -1.0
    model.speed = 2.4
    for _ in range(50):
        model.update({'throttle': True})
        assert model.position[1] >= 20.0


def test_pitch_clamped():
    model = _model()
    for _ in range(500):
        model.update({'pitch_up': True})
    assert model.pitch == pytest.approx(math.pi / 2)
    for _ in range(1000):
        model.update({'pitch_down': True})
    assert model.pitch == pytest.approx(-math.pi / 2)


def test_pitch_rate_reduced_near_ground():
    high = _model()
    low = _model(position=(0.0, 25.0, 0.0))
    high.update({'pitch_down': True})
    low.update({'pitch_down': True})
    assert abs(low.pitch) < abs(high.pitch)


def test_heading_is_unit_length():
    model = _model()
    for yaw, pitch in [(0.0, 0.0), (1.0, 0.3), (-2.5, -1.2), (3.0, math.pi / 2)]:
        model.yaw = yaw
        model.pitch = pitch
        assert math.hypot(*model.heading()) == pytest.approx(1.0)
    model.yaw = model.pitch = 0.0
    assert model.heading() == pytest.approx((0.0, 0.0, -1.0))


def test_yaw_controls_turn():
    model = _model()
    model.update({'yaw_left': True})
    assert model.yaw == pytest.approx(0.02)
    model.update({'yaw_right': True})
    model.update({'yaw_right': True})
    assert model.yaw == pytest.approx(-0.02)
