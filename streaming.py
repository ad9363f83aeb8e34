'''
streaming.py -- per-frame chunk streaming around a moving observer

Each step reconciles the resident chunk set against the window of chunks
around the observer and then spends a fixed budget on the difference:

   ++++++
  -OOOOO+
  -OOOOO+        O resident and still wanted
  -OOOOO+        - resident, queued for removal
  -OOOOO+        + wanted, queued for load (ahead of travel first)
  ------

Loads are drained in priority order, removals in FIFO order, and the load
budget is always larger than the removal budget: a late eviction costs
memory, a late load costs visible popping.
'''

# standard library imports
import heapq
import itertools
import math
import time
from collections import deque, namedtuple

# local imports
import config
import logutil
import mapgen
from chunks import ChunkStore
from decorator import Decorator
from terrain_settings import TerrainSettings
from util import chunkize, chunk_progress, chebyshev, horizontal_heading
from visuals import TerrainVisuals

# current: chunk under the observer; progress: fraction of it crossed per
# axis; heading: unit ground-plane heading; predicted: look-ahead chunk;
# crossing: per-axis sign of travel once progress passes the load threshold
ObserverView = namedtuple('ObserverView', 'current progress heading predicted crossing')

StepReport = namedtuple('StepReport',
    'loaded removed cancelled_loads cancelled_removals pending_loads pending_removals')


class LoadQueue(object):
    '''
    Max-priority queue of chunk coordinates. Equal priorities pop in the
    order they were pushed. Entries are cancelled lazily.
    '''
    def __init__(self):
        self._heap = []
        self._entries = {}
        self._counter = itertools.count()

    def __len__(self):
        return len(self._entries)

    def __contains__(self, coord):
        return coord in self._entries

    def coords(self):
        return list(self._entries)

    def priority_of(self, coord):
        entry = self._entries.get(coord)
        return None if entry is None else -entry[0]

    def push(self, coord, priority):
        if coord in self._entries:
            raise ValueError(f"chunk {coord} is already queued for load")
        self._add(coord, priority, next(self._counter))

    def update(self, coord, priority):
        """Re-score a queued coordinate, keeping its place among equal priorities."""
        entry = self._entries[coord]
        if -entry[0] == priority:
            return
        entry[3] = False
        self._add(coord, priority, entry[1])

    def _add(self, coord, priority, seq):
        entry = [-priority, seq, coord, True]
        self._entries[coord] = entry
        heapq.heappush(self._heap, entry)
        if len(self._heap) > 2 * len(self._entries) + 64:
            self._heap = [e for e in self._heap if e[3]]
            heapq.heapify(self._heap)

    def discard(self, coord):
        entry = self._entries.pop(coord, None)
        if entry is None:
            return False
        entry[3] = False
        return True

    def pop(self):
        while self._heap:
            neg_priority, _, coord, live = heapq.heappop(self._heap)
            if live:
                del self._entries[coord]
                return coord, -neg_priority
        raise IndexError('pop from an empty load queue')

    def ordered(self):
        """(coord, priority) pairs in the order they would be popped."""
        live = sorted(self._entries.values(), key=lambda e: (e[0], e[1]))
        return [(e[2], -e[0]) for e in live]


class RemovalQueue(object):
    '''FIFO of chunk coordinates awaiting eviction, with lazy cancellation.'''
    def __init__(self):
        self._queue = deque()
        self._pending = {}
        self._counter = itertools.count()

    def __len__(self):
        return len(self._pending)

    def __contains__(self, coord):
        return coord in self._pending

    def coords(self):
        return list(self._pending)

    def push(self, coord):
        if coord in self._pending:
            raise ValueError(f"chunk {coord} is already queued for removal")
        token = next(self._counter)
        self._pending[coord] = token
        self._queue.append((coord, token))

    def discard(self, coord):
        return self._pending.pop(coord, None) is not None

    def pop(self):
        while self._queue:
            coord, token = self._queue.popleft()
            if self._pending.get(coord) == token:
                del self._pending[coord]
                return coord
        raise IndexError('pop from an empty removal queue')


class TerrainContext(object):
    '''
    All mutable state of one streamed terrain. Contexts are independent of
    each other, so several terrains can run in one process.
    '''
    def __init__(self, settings, field, decorator, visuals=None):
        self.settings = settings
        self.field = field
        self.decorator = decorator
        self.visuals = visuals if visuals is not None else TerrainVisuals()
        self.store = ChunkStore()
        self.load_queue = LoadQueue()
        self.removal_queue = RemovalQueue()
        self.frame_id = 0
        self.view = None

    @classmethod
    def create(cls, settings=None, visuals=None):
        """Validate the settings and build a terrain with no resident chunks."""
        if settings is None:
            settings = TerrainSettings()
        settings.validate()
        field = mapgen.ElevationField.from_settings(settings)
        return cls(settings, field, Decorator(settings, field), visuals)


class StreamingScheduler(object):
    '''
    Stateless per-frame policy; everything it changes lives in the
    TerrainContext passed to each call.
    '''
    def __init__(self, settings):
        self.settings = settings

    def observe(self, position, heading):
        s = self.settings
        current = chunkize(position, s.chunk_size)
        progress = chunk_progress(position, s.chunk_size)
        hx, hz = horizontal_heading(heading)
        predicted = (
            current[0] + int(math.floor(hx * s.look_ahead_distance + 0.5)),
            current[1] + int(math.floor(hz * s.look_ahead_distance + 0.5)),
        )
        crossing = []
        for h, f in ((hx, progress[0]), (hz, progress[1])):
            if abs(h) < 1e-9:
                crossing.append(0)
                continue
            travelled = f if h > 0 else 1.0 - f
            crossing.append((1 if h > 0 else -1) if travelled > s.load_threshold else 0)
        return ObserverView(current, progress, (hx, hz), predicted, tuple(crossing))

    def wanted(self, view):
        """Coordinates within chunks_visible of the current chunk, row-major."""
        r = self.settings.chunks_visible
        cx, cz = view.current
        return [(cx + dx, cz + dz) for dx in range(-r, r + 1) for dz in range(-r, r + 1)]

    def priority(self, coord, view):
        s = self.settings
        px, pz = view.predicted
        cone_dist = math.hypot(coord[0] - px, coord[1] - pz)
        if cone_dist <= s.look_ahead_cone_radius:
            return s.cone_bonus + (s.look_ahead_cone_radius - cone_dist) * s.cone_falloff
        dx = coord[0] - view.current[0]
        dz = coord[1] - view.current[1]
        score = -s.distance_penalty * math.hypot(dx, dz)
        for d, sign in ((dx, view.crossing[0]), (dz, view.crossing[1])):
            if sign and d * sign > 0:
                score += s.direction_bonus
                break
        return score

    def reconcile(self, context, view):
        """ Diff the want-set against the store and queues. Returns the
        number of cancelled (loads, removals).

        """
        store = context.store
        loads = context.load_queue
        removals = context.removal_queue
        wanted = self.wanted(view)
        wanted_set = set(wanted)

        cancelled_loads = 0
        for coord in loads.coords():
            if coord not in wanted_set:
                loads.discard(coord)
                cancelled_loads += 1
        cancelled_removals = 0
        for coord in removals.coords():
            if coord in wanted_set:
                removals.discard(coord)
                cancelled_removals += 1

        prev = context.view
        rescore = prev is None or (prev.current, prev.predicted, prev.crossing) != (
            view.current, view.predicted, view.crossing)
        for coord in wanted:
            if coord in store:
                continue
            if coord in loads:
                if rescore:
                    loads.update(coord, self.priority(coord, view))
                continue
            loads.push(coord, self.priority(coord, view))

        r = self.settings.chunks_visible
        stale = [coord for coord in store.keys()
                 if chebyshev(coord, view.current) > r and coord not in removals]
        stale.sort(key=lambda c: -chebyshev(c, view.current))
        for coord in stale:
            removals.push(coord)
        return cancelled_loads, cancelled_removals

    def materialize(self, context, coord):
        chunk = mapgen.generate_chunk(coord, self.settings, context.field, context.decorator)
        context.store.insert(coord, chunk)
        visuals = context.visuals
        visuals.add_chunk_visual(chunk)
        if chunk.water is not None:
            visuals.add_water_visual(chunk.water)
        for instance in chunk.vegetation:
            visuals.add_vegetation_visual(instance)
        return chunk

    def retire(self, context, coord):
        chunk = context.store.remove(coord)
        visuals = context.visuals
        for instance in chunk.vegetation:
            visuals.remove_vegetation_visual(instance)
        if chunk.water is not None:
            visuals.remove_water_visual(chunk.water)
        visuals.remove_chunk_visual(chunk)
        chunk.vegetation = []
        return chunk

    def drain(self, context):
        s = self.settings
        loaded = []
        start = time.perf_counter()
        budget_ms = s.frame_time_budget_ms
        while context.load_queue and len(loaded) < s.chunks_per_frame:
            if loaded and budget_ms is not None and (time.perf_counter() - start) * 1000.0 >= budget_ms:
                break
            coord, _ = context.load_queue.pop()
            self.materialize(context, coord)
            loaded.append(coord)
        removed = []
        while context.removal_queue and len(removed) < s.removals_per_frame:
            coord = context.removal_queue.pop()
            self.retire(context, coord)
            removed.append(coord)
        return loaded, removed

    def step(self, context, position, heading):
        """ Run one frame of streaming for an observer at `position` looking
        along `heading` (both 3-tuples).

        """
        context.frame_id += 1
        view = self.observe(position, heading)
        cancelled_loads, cancelled_removals = self.reconcile(context, view)
        context.view = view
        loaded, removed = self.drain(context)
        report = StepReport(loaded, removed, cancelled_loads, cancelled_removals,
                            len(context.load_queue), len(context.removal_queue))
        self._maybe_log_queue_state(context, report)
        return report

    def prime(self, context, position, heading, max_steps=None):
        """ Step a stationary observer until both queues are empty. Returns
        the number of steps taken.

        """
        steps = 0
        while True:
            report = self.step(context, position, heading)
            steps += 1
            if not report.pending_loads and not report.pending_removals:
                break
            if max_steps is not None and steps >= max_steps:
                break
        logutil.log("STREAM", f"primed {len(context.store)} chunks in {steps} steps")
        return steps

    def _maybe_log_queue_state(self, context, report):
        if not getattr(config, 'LOG_STREAMING', False):
            return
        every = max(1, getattr(config, 'LOG_STREAMING_EVERY_N_FRAMES', 60))
        if context.frame_id % every != 0:
            return
        view = context.view
        logutil.log(
            "STREAM",
            f"chunk={view.current} predicted={view.predicted} resident={len(context.store)} "
            f"load_q={report.pending_loads} removal_q={report.pending_removals} "
            f"cancelled={report.cancelled_loads}/{report.cancelled_removals}",
        )
