import math

import config


class FlightModel(object):
    '''
    Simple flight kinematics for the observer. Space accelerates, a/d yaw,
    w/s pitch the nose down/up. Pitch rate is limited near the ground and
    altitude never drops below the terrain plus `min_clearance`.
    '''

    def __init__(self, field, position=None, max_speed=None, acceleration=None,
            deceleration=None, rotation_speed=None, min_clearance=None, max_pitch=None):
        self.field = field
        if position is None:
            position = getattr(config, 'START_POSITION', (0.0, 100.0, 0.0))
        self.position = [float(v) for v in position]
        self.max_speed = max_speed if max_speed is not None else config.MAX_SPEED
        self.acceleration = acceleration if acceleration is not None else config.ACCELERATION
        self.deceleration = deceleration if deceleration is not None else config.DECELERATION
        self.rotation_speed = rotation_speed if rotation_speed is not None else config.ROTATION_SPEED
        self.min_clearance = min_clearance if min_clearance is not None else config.MIN_CLEARANCE
        self.max_pitch = max_pitch if max_pitch is not None else config.MAX_PITCH
        self.speed = 0.0
        self.yaw = 0.0
        self.pitch = 0.0

    def heading(self):
        """ Unit forward vector. Zero yaw and pitch looks down -z; positive
        yaw turns left, positive pitch looks up.

        """
        m = math.cos(self.pitch)
        return (-math.sin(self.yaw) * m, math.sin(self.pitch), -math.cos(self.yaw) * m)

    def update(self, controls):
        """ Advance one tick. `controls` maps 'throttle', 'yaw_left',
        'yaw_right', 'pitch_down', 'pitch_up' to booleans.

        """
        if controls.get('throttle'):
            self.speed = min(self.speed + self.acceleration, self.max_speed)
        else:
            self.speed = max(self.speed - self.deceleration, 0.0)

        direction = self.heading()
        x, y, z = self.position
        above = y - self.field.elevation(x, z)
        near_ground = above < self.min_clearance * 2
        pitch_rate = self.rotation_speed
        if near_ground:
            pitch_rate = max(0.0, min(self.rotation_speed,
                self.rotation_speed * (above / (self.min_clearance * 2))))

        if controls.get('yaw_left'):
            self.yaw += self.rotation_speed
        if controls.get('yaw_right'):
            self.yaw -= self.rotation_speed
        if controls.get('pitch_down'):
            self.pitch -= pitch_rate
        if controls.get('pitch_up'):
            self.pitch += pitch_rate
        self.pitch = max(min(self.pitch, self.max_pitch), -self.max_pitch)

        x += direction[0] * self.speed
        y += direction[1] * self.speed
        z += direction[2] * self.speed
        y = max(y, self.field.clearance_floor(x, z, self.min_clearance))
        self.position = [x, y, z]
        return tuple(self.position)
