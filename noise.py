#
# N-dimensional simplex noise over numpy arrays.
#
# Based on example code by Stefan Gustavson (stegu@itn.liu.se).
# Optimisations by Peter Eastman (peastman@drizzle.stanford.edu).
# Better rank ordering method by Stefan Gustavson in 2012.
#
# This code was placed in the public domain by its original author,
# Stefan Gustavson. You may use it as you see fit, but
# attribution is appreciated.
#
#
import numpy
import itertools


# returns floor of floating point array by coercing to integer
def fastfloor(x):
    return numpy.array(numpy.floor(x), dtype=numpy.int64)


def _gradients(N):
    # edge midpoints of the N-cube: every vector with entries in {-1,0,1}
    # and at most one zero
    grad = ((0, -1, 1),) * N
    grad = numpy.array(list(itertools.product(*grad))[1:])
    return grad[numpy.abs(grad).sum(-1) >= N - 1]


class SimplexNoise:
    '''
    Seeded simplex noise. Each instance owns its permutation table, so
    two instances with the same seed return identical values and no global
    random state is touched.
    '''
    def __init__(self, seed=0):
        self.seed = seed
        p = numpy.random.RandomState(seed).permutation(256)
        # To remove the need for index wrapping, double the permutation table length
        self.perm = numpy.concatenate([p, p])
        self._grad = {}

    def gradients(self, N):
        grad = self._grad.get(N)
        if grad is None:
            grad = self._grad[N] = _gradients(N)
        return grad

    def noise(self, Z):
        '''
        Evaluate noise at the points in Z, an array of shape (n, dims).
        Returns an array of n values nominally in [-1, 1].
        '''
        Z = numpy.asarray(Z, dtype=numpy.float64)
        N = Z.shape[-1] #number of dimensions
        N1 = N + 1 # number of simplex corners
        Fn = 1.0 * (N1**0.5 - 1) / N
        Gn = 1.0 * (N1 - N1**0.5) / N / N1

        # skew the input to find the lattice cell containing each point
        s = Z.sum(-1) * Fn
        i = fastfloor(Z + s[:, numpy.newaxis])
        t = i.sum(-1) * Gn # Factor for unskewing
        z0 = Z - (i - t[:, numpy.newaxis])

        # Use magnitude ordering to determine the simplex that z0 lies in
        rank = numpy.zeros(Z.shape, dtype=numpy.int64)
        for l, k in itertools.combinations(range(N), 2):
            rank[:, k] += z0[:, k] >= z0[:, l]
            rank[:, l] += z0[:, k] < z0[:, l]

        # ind holds the lattice offsets of the N+1 corners
        b = numpy.arange(N1)[:, numpy.newaxis, numpy.newaxis]
        ind = rank >= N - b
        # zk holds the position of the point relative to each corner
        zk = z0 - ind + 1.0 * b * Gn

        # wrap lattice coordinates only for hashing; positions stay exact
        corner = (i + ind) & 255
        grad = self.gradients(N)
        gik = 0
        for x in range(N - 1, -1, -1):
            gik = self.perm[corner[:, :, x] + gik]
        gik = gik % grad.shape[0]

        # Calculate the contribution from each corner
        tk = 0.5 - (zk * zk).sum(-1)
        tp = tk >= 0
        tk = tp * tk * tk
        nk = tk * tk * (grad[gik] * zk).sum(-1)

        # Sum up and scale the result to cover the range [-1,1]
        return nk.sum(0) * (2**6)

    def noise2(self, x, z):
        '''Noise at broadcastable x, z arrays; returns an array of their shape.'''
        x, z = numpy.broadcast_arrays(numpy.asarray(x, dtype=numpy.float64),
                                      numpy.asarray(z, dtype=numpy.float64))
        Z = numpy.stack([x.ravel(), z.ravel()], axis=-1)
        return self.noise(Z).reshape(x.shape)
