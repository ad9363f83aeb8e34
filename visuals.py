class TerrainVisuals(object):
    '''
    Registration interface between the streaming core and whatever draws
    the terrain. Calls are fire-and-forget: the core ignores return values
    and only ever hands over fully decorated chunks. The base class draws
    nothing, which is what a headless terrain needs.
    '''

    def add_chunk_visual(self, chunk):
        pass

    def remove_chunk_visual(self, chunk):
        pass

    def add_water_visual(self, water):
        pass

    def remove_water_visual(self, water):
        pass

    def add_vegetation_visual(self, instance):
        pass

    def remove_vegetation_visual(self, instance):
        pass
