import pyglet
import pyglet.gl as gl

import config
import meshes
import shaders
from visuals import TerrainVisuals


class TerrainRenderer(TerrainVisuals):
    '''
    pyglet implementation of the terrain visuals interface. Every
    registered object owns one indexed vertex list; opaque geometry and
    water live in separate batches so water can be blended last.
    '''

    def __init__(self, program=None):
        self.program = program if program is not None else shaders.create_terrain_shader()
        self.batch = pyglet.graphics.Batch()
        self.water_batch = pyglet.graphics.Batch()
        self._vertex_lists = {}

    def __len__(self):
        return len(self._vertex_lists)

    def _upload(self, owner, mesh, batch):
        positions, normals, colors, indices = mesh
        self._vertex_lists[id(owner)] = self.program.vertex_list_indexed(
            len(positions),
            gl.GL_TRIANGLES,
            indices.tolist(),
            batch=batch,
            position=('f', positions.ravel()),
            normal=('f', normals.ravel()),
            color=('f', colors.ravel()),
        )

    def _release(self, owner):
        vertex_list = self._vertex_lists.pop(id(owner), None)
        if vertex_list is not None:
            vertex_list.delete()

    def add_chunk_visual(self, chunk):
        self._upload(chunk, meshes.terrain_mesh(chunk), self.batch)

    def remove_chunk_visual(self, chunk):
        self._release(chunk)

    def add_water_visual(self, water):
        self._upload(water, meshes.water_mesh(water), self.water_batch)

    def remove_water_visual(self, water):
        self._release(water)

    def add_vegetation_visual(self, instance):
        self._upload(instance, meshes.tree_mesh(instance), self.batch)

    def remove_vegetation_visual(self, instance):
        self._release(instance)

    def draw(self, projection, view, camera_pos):
        program = self.program
        program.bind()
        program['u_projection'] = projection
        program['u_view'] = view
        program['u_camera_pos'] = tuple(camera_pos)
        program['u_light_dir'] = (1.0, 1.0, 1.0)
        program['u_fog_color'] = tuple(config.SKY_COLOR)
        program['u_fog_start'] = config.FOG_START
        program['u_fog_end'] = config.FOG_END
        program['u_alpha'] = 1.0
        self.batch.draw()

        # Water pass: blend over the terrain without hiding what is below it.
        program.bind()
        program['u_alpha'] = getattr(config, 'WATER_ALPHA', 0.8)
        gl.glEnable(gl.GL_BLEND)
        gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)
        gl.glDepthMask(gl.GL_FALSE)
        self.water_batch.draw()
        gl.glDepthMask(gl.GL_TRUE)
        program.unbind()
