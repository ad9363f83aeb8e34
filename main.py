import sys
import time

# pyglet imports
import pyglet
from pyglet.window import key
import pyglet.gl as gl
import pyglet.shapes as shapes
from pyglet.math import Mat4, Vec3

# standard lib imports
from collections import deque

# local module imports
import config
import logutil
import renderer
from flight import FlightModel
from streaming import StreamingScheduler, TerrainContext
from terrain_settings import ConfigError, TerrainSettings
from config import TICKS_PER_SEC

CONTROL_KEYS = {
    'throttle': key.SPACE,
    'yaw_left': key.A,
    'yaw_right': key.D,
    'pitch_down': key.W,
    'pitch_up': key.S,
}


class Window(pyglet.window.Window):

    def __init__(self, settings, *args, **kwargs):
        super(Window, self).__init__(*args, **kwargs)

        self.terrain_renderer = renderer.TerrainRenderer()
        self.terrain = TerrainContext.create(settings, visuals=self.terrain_renderer)
        self.scheduler = StreamingScheduler(settings)
        self.flight = FlightModel(self.terrain.field)
        self.frame_id = 0

        t0 = time.perf_counter()
        self.scheduler.prime(self.terrain, self.flight.position, self.flight.heading())
        logutil.log("MAIN", f"initial terrain ready in {(time.perf_counter() - t0) * 1000.0:.0f}ms "
                    f"seed={settings.seed}")

        self.label = pyglet.text.Label('', font_name='Arial', font_size=14,
            x=10, y=self.height - 10, anchor_x='left', anchor_y='top',
            color=(0, 0, 0, 255))
        self._label_bg = shapes.Rectangle(0, 0, 1, 1, color=(255, 255, 255))
        self._label_bg.opacity = 120  # semi-transparent
        self._frame_times = deque(maxlen=120)
        self._last_frame_time = time.perf_counter()
        self.last_update_ms = 0.0

        self.keys = key.KeyStateHandler()
        self.push_handlers(self.keys)

        # This call schedules the `update()` method to be called
        # TICKS_PER_SEC. This is the main game event loop.
        pyglet.clock.schedule_interval(self.update, 1.0 / TICKS_PER_SEC)

    def controls(self):
        return {name: bool(self.keys[symbol]) for name, symbol in CONTROL_KEYS.items()}

    def update(self, dt):
        """ This method is scheduled to be called repeatedly by the pyglet
        clock.

        Parameters
        ----------
        dt : float
            The change in time since the last call.

        """
        update_start = time.perf_counter()
        self.flight.update(self.controls())
        t0 = time.perf_counter()
        report = self.scheduler.step(self.terrain, self.flight.position, self.flight.heading())
        stream_ms = (time.perf_counter() - t0) * 1000.0
        self.last_update_ms = (time.perf_counter() - update_start) * 1000.0
        logutil.log(
            "MAINLOOP",
            f"update stream_ms={stream_ms:.2f} loaded={len(report.loaded)} removed={len(report.removed)} "
            f"total_ms={self.last_update_ms:.2f}",
        )

    def on_resize(self, width, height):
        self.label.y = height - 10
        return super(Window, self).on_resize(width, height)

    def get_view_projection(self):
        width, height = self.get_size()
        aspect = width / float(height)
        projection = Mat4.perspective_projection(aspect, 0.1, config.FAR_PLANE, config.FIELD_OF_VIEW)
        dx, dy, dz = self.flight.heading()
        forward = Vec3(dx, dy, dz).normalize()
        up = Vec3(0.0, 1.0, 0.0)
        # IMPORTANT: view is defined in camera-relative space (camera at origin)
        view = Mat4.look_at(Vec3(0.0, 0.0, 0.0), forward, up)
        return projection, view, tuple(self.flight.position)

    def set_2d(self):
        """ Configure OpenGL to draw in 2d.

        """
        width, height = self.get_size()
        gl.glDisable(gl.GL_DEPTH_TEST)
        gl.glViewport(0, 0, width, height)

    def set_3d(self):
        """ Configure OpenGL to draw in 3d.

        """
        width, height = self.get_size()
        gl.glEnable(gl.GL_DEPTH_TEST)
        gl.glViewport(0, 0, width, height)

    def on_draw(self):
        """ Called by pyglet to draw the canvas.

        """
        frame_start = time.perf_counter()
        self._frame_times.append(frame_start - self._last_frame_time)
        self._last_frame_time = frame_start
        self.frame_id += 1
        logutil.set_frame(self.frame_id)
        self.clear()
        self.set_3d()
        projection, view, eye = self.get_view_projection()
        self.terrain_renderer.draw(projection, view, eye)
        self.set_2d()
        self.draw_label()
        logutil.log("FRAME", f"end ms={(time.perf_counter() - frame_start) * 1000.0:.2f}")

    def _current_fps(self):
        if not self._frame_times:
            return 0.0
        avg = sum(self._frame_times) / len(self._frame_times)
        return 1.0 / avg if avg > 0 else 0.0

    def draw_label(self):
        """ Draw the label in the top left of the screen.

        """
        x, y, z = self.flight.position
        view = self.terrain.view
        chunk = view.current if view is not None else None
        self.label.text = (
            f"{self._current_fps():.0f} fps  ({x:.0f}, {y:.0f}, {z:.0f})  chunk {chunk}  "
            f"speed {self.flight.speed:.2f}  resident {len(self.terrain.store)}  "
            f"queued {len(self.terrain.load_queue)}/{len(self.terrain.removal_queue)}"
        )
        self._label_bg.position = (0, self.height - self.label.content_height - 20)
        self._label_bg.width = self.label.content_width + 20
        self._label_bg.height = self.label.content_height + 20
        self._label_bg.draw()
        self.label.draw()


def setup():
    """ Basic OpenGL configuration.

    """
    # Set the color of "clear", i.e. the sky, in rgba.
    r, g, b = config.SKY_COLOR
    gl.glClearColor(r, g, b, 1)
    gl.glEnable(gl.GL_BLEND)
    gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)


def main():
    overrides = {}
    if len(sys.argv) > 1:
        try:
            overrides['seed'] = int(sys.argv[1])
        except ValueError:
            logutil.log("MAIN", f"ignoring non-integer seed {sys.argv[1]!r}", level="WARN")
    settings = TerrainSettings(**overrides)
    try:
        settings.validate()
    except ConfigError as exc:
        logutil.log("MAIN", f"invalid configuration: {exc}", level="ERROR")
        sys.exit(1)
    window = Window(settings, width=1024, height=768, caption='Terrain flight', resizable=True, vsync=True)
    setup()
    pyglet.app.run()


if __name__ == '__main__':
    main()
