import math

MASK64 = (1 << 64) - 1


def chunkize(position, chunk_size):
    """ Returns a tuple representing the chunk containing `position`.

    Parameters
    ----------
    position : tuple of len 3 (x, y, z) or len 2 (x, z)
    chunk_size : float

    Returns
    -------
    chunk : tuple of ints (cx, cz)

    """
    x, z = position[0], position[-1]
    return (int(math.floor(x / chunk_size)), int(math.floor(z / chunk_size)))


def chunk_progress(position, chunk_size):
    """ Fractional progress (0 <= f < 1) through the current chunk on the
    x and z axes.

    """
    x, z = position[0], position[-1]
    fx = x / chunk_size - math.floor(x / chunk_size)
    fz = z / chunk_size - math.floor(z / chunk_size)
    return (fx, fz)


def chunk_origin(coord, chunk_size):
    return (coord[0] * chunk_size, coord[1] * chunk_size)


def chunk_center(coord, chunk_size):
    return ((coord[0] + 0.5) * chunk_size, (coord[1] + 0.5) * chunk_size)


def chebyshev(a, b):
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def horizontal_heading(heading):
    """ Project a 3D direction onto the ground plane and normalize it.
    Returns (0.0, 0.0) for a vertical or zero heading.

    """
    hx, hz = heading[0], heading[-1]
    length = math.hypot(hx, hz)
    if length < 1e-9:
        return (0.0, 0.0)
    return (hx / length, hz / length)


def chunk_seed(seed, cx, cz, salt=0):
    """ Splitmix64-style hash of a chunk coordinate to a 32 bit seed, stable
    across runs and platforms for a given world seed.

    """
    h = (int(cx) * 0x632BE59BD9B4E019) ^ (int(cz) * 0x9E3779B97F4A7C15) ^ (int(salt) * 0x94D049BB133111EB) ^ int(seed)
    h &= MASK64
    h = (h ^ (h >> 30)) * 0xbf58476d1ce4e5b9 & MASK64
    h = (h ^ (h >> 27)) * 0x94d049bb133111eb & MASK64
    h = h ^ (h >> 31)
    return h & 0xFFFFFFFF
