# terragen/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides 2D and 3D OpenSimplex-style gradient noise. The per-sample
kernels are pure functions JIT-compiled with Numba; NoiseField wraps them
together with the seeded permutation table they read from.

Data Contract:
---------------
- Inputs:
    - perm, grad_index_3d: Read-only int64 lookup tables (see permutation.py).
    - x, y (, z): Coordinates, either scalars or NumPy arrays for the grid
      samplers.
    - feature sizes: Positive divisors applied to the coordinates. Validating
      them is the caller's job.
- Outputs:
    - Noise values, nominally in the range [-1, 1].
- Side Effects: None.
- Invariants: Output is a pure function of the table and the coordinates, so
  one NoiseField can be shared read-only between any number of callers.
================================================================================
"""

import numpy as np
from numba import njit

from . import config as DEFAULTS
from .permutation import PermutationTable

# --- Lattice Constants ---
STRETCH_CONSTANT_2D = -0.211324865405187  # (1 / sqrt(2 + 1) - 1) / 2
SQUISH_CONSTANT_2D = 0.366025403784439    # (sqrt(2 + 1) - 1) / 2
NORM_CONSTANT_2D = 41.0

STRETCH_CONSTANT_3D = -1.0 / 6.0          # (1 / sqrt(3 + 1) - 1) / 3
SQUISH_CONSTANT_3D = 1.0 / 3.0            # (sqrt(3 + 1) - 1) / 3
NORM_CONSTANT_3D = 103.0

# Gradients for 2D. They approximate the directions to the vertices of an
# octagon from the center.
GRADIENTS_2D = np.array([
     5.0,  2.0,    2.0,  5.0,
    -5.0,  2.0,   -2.0,  5.0,
     5.0, -2.0,    2.0, -5.0,
    -5.0, -2.0,   -2.0, -5.0,
])

# Gradients for 3D. They approximate the directions to the vertices of a
# rhombicuboctahedron from the center. Rows are indexed through
# PermutationTable.grad_index_3d, so the row count must stay at 16.
GRADIENTS_3D = np.array([
    -11.0,  4.0,  4.0,    -4.0, 11.0,  4.0,    -4.0,  4.0, 11.0,
     11.0,  4.0,  4.0,     4.0, 11.0,  4.0,     4.0,  4.0, 11.0,
    -11.0, -4.0,  4.0,    -4.0,-11.0,  4.0,    -4.0, -4.0, 11.0,
     11.0, -4.0,  4.0,     4.0,-11.0,  4.0,     4.0, -4.0, 11.0,
    -11.0,  4.0, -4.0,    -4.0, 11.0, -4.0,    -4.0,  4.0,-11.0,
     11.0,  4.0, -4.0,
])

DEFAULT_FEATURE_SIZE = DEFAULTS.DEFAULT_FEATURE_SIZE


@njit
def _fast_floor(val):
    "Floor to int without going through a float result."
    i = int(val)
    return i - 1 if val < i else i


@njit
def _extrapolate2(perm, xsv, ysv, dx, dy):
    """Dot product of the hashed lattice gradient with the offset vector."""
    index = perm[(perm[xsv & 0xFF] + ysv) & 0xFF] & 0x0E
    # Use explicit indexing for Numba compatibility
    return GRADIENTS_2D[index] * dx + GRADIENTS_2D[index + 1] * dy


@njit
def _extrapolate3(perm, grad_index_3d, xsv, ysv, zsv, dx, dy, dz):
    index = grad_index_3d[(perm[(perm[xsv & 0xFF] + ysv) & 0xFF] + zsv) & 0xFF]
    return (GRADIENTS_3D[index] * dx
            + GRADIENTS_3D[index + 1] * dy
            + GRADIENTS_3D[index + 2] * dz)


@njit
def _vertex2(perm, xsb, ysb, dx0, dy0, i, j):
    """
    Contribution of the lattice vertex at offset (i, j) from the cell origin.
    dx0, dy0 are the sample's offsets from the (unskewed) cell origin.
    """
    squish = (i + j) * SQUISH_CONSTANT_2D
    dx = dx0 - i - squish
    dy = dy0 - j - squish
    attn = 2.0 - dx * dx - dy * dy
    if attn <= 0.0:
        return 0.0
    attn *= attn
    return attn * attn * _extrapolate2(perm, xsb + i, ysb + j, dx, dy)


@njit
def _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, i, j, k):
    squish = (i + j + k) * SQUISH_CONSTANT_3D
    dx = dx0 - i - squish
    dy = dy0 - j - squish
    dz = dz0 - k - squish
    attn = 2.0 - dx * dx - dy * dy - dz * dz
    if attn <= 0.0:
        return 0.0
    attn *= attn
    return attn * attn * _extrapolate3(perm, grad_index_3d, xsb + i, ysb + j, zsb + k, dx, dy, dz)


@njit
def _extra_vertex_2d(xins, yins):
    """
    Picks the one lattice vertex outside the current triangle that can still
    reach the sample. Returns its offset from the cell origin.
    """
    in_sum = xins + yins
    if in_sum <= 1.0:
        # Inside the triangle at (0,0)
        zins = 1.0 - in_sum
        if zins > xins or zins > yins:
            # (0,0) is one of the closest two triangular vertices
            if xins > yins:
                return 1, -1
            return -1, 1
        # (1,0) and (0,1) are the closest two vertices
        return 1, 1

    # Inside the triangle at (1,1)
    zins = 2.0 - in_sum
    if zins < xins or zins < yins:
        # (1,1) is one of the closest two triangular vertices
        if xins > yins:
            return 2, 0
        return 0, 2
    return 0, 0


@njit
def noise2(perm, x, y):
    """
    2D OpenSimplex noise at already-normalized coordinates.
    Evaluates the four lattice vertices that can contribute to the sample:
    (1,0) and (0,1), the near corner (0,0) or (1,1), and one extra vertex.
    """
    # Place input coordinates onto the grid.
    stretch_offset = (x + y) * STRETCH_CONSTANT_2D
    xs = x + stretch_offset
    ys = y + stretch_offset

    # Floor to get grid coordinates of the rhombus super-cell origin.
    xsb = _fast_floor(xs)
    ysb = _fast_floor(ys)

    # Skew out to get the actual coordinates of the rhombus origin.
    squish_offset = (xsb + ysb) * SQUISH_CONSTANT_2D
    dx0 = x - (xsb + squish_offset)
    dy0 = y - (ysb + squish_offset)

    # Grid coordinates relative to the rhombus origin.
    xins = xs - xsb
    yins = ys - ysb

    value = _vertex2(perm, xsb, ysb, dx0, dy0, 1, 0)
    value += _vertex2(perm, xsb, ysb, dx0, dy0, 0, 1)

    if xins + yins <= 1.0:
        value += _vertex2(perm, xsb, ysb, dx0, dy0, 0, 0)
    else:
        value += _vertex2(perm, xsb, ysb, dx0, dy0, 1, 1)

    ext_i, ext_j = _extra_vertex_2d(xins, yins)
    value += _vertex2(perm, xsb, ysb, dx0, dy0, ext_i, ext_j)

    return value / NORM_CONSTANT_2D


# --- 3D extra-vertex decision tables ---
# Points of the unit cube are encoded as 3-bit masks: 0x01 = x, 0x02 = y,
# 0x04 = z. Each helper returns the offsets of the two extra lattice points
# as (i0, j0, k0, i1, j1, k1).

@njit
def _extra_vertices_near_tetrahedron(xins, yins, zins):
    # Determine which two of (1,0,0), (0,1,0), (0,0,1) are closest.
    a_point, a_score = 0x01, xins
    b_point, b_score = 0x02, yins
    if a_score >= b_score and zins > b_score:
        b_point, b_score = 0x04, zins
    elif a_score < b_score and zins > a_score:
        a_point, a_score = 0x04, zins

    wins = 1.0 - (xins + yins + zins)
    if wins > a_score or wins > b_score:
        # (0,0,0) is one of the closest two tetrahedral vertices; the other
        # is the closer of a and b.
        c = b_point if b_score > a_score else a_point
        if c == 0x01:
            return 1, -1, 0, 1, 0, -1
        if c == 0x02:
            return -1, 1, 0, 0, 1, -1
        return -1, 0, 1, 0, -1, 1

    c = a_point | b_point
    i, j, k = c & 0x01, (c >> 1) & 0x01, (c >> 2) & 0x01
    return i, j, k, 2 * i - 1, 2 * j - 1, 2 * k - 1


@njit
def _extra_vertices_far_tetrahedron(xins, yins, zins):
    # Determine which two of (1,1,0), (1,0,1), (0,1,1) are closest.
    a_point, a_score = 0x06, xins
    b_point, b_score = 0x05, yins
    if a_score <= b_score and zins < b_score:
        b_point, b_score = 0x03, zins
    elif a_score > b_score and zins < a_score:
        a_point, a_score = 0x03, zins

    wins = 3.0 - (xins + yins + zins)
    if wins < a_score or wins < b_score:
        # (1,1,1) is one of the closest two tetrahedral vertices.
        c = b_point if b_score < a_score else a_point
        if c == 0x03:
            return 2, 1, 0, 1, 2, 0
        if c == 0x05:
            return 2, 0, 1, 1, 0, 2
        return 0, 2, 1, 0, 1, 2

    c = a_point & b_point
    i, j, k = c & 0x01, (c >> 1) & 0x01, (c >> 2) & 0x01
    return i, j, k, 2 * i, 2 * j, 2 * k


@njit
def _opposite_of_missing_axis(c):
    """(1,1,1) pushed back along the first axis not set in c."""
    if (c & 0x01) == 0:
        return -1, 1, 1
    if (c & 0x02) == 0:
        return 1, -1, 1
    return 1, 1, -1


@njit
def _doubled_axis(c):
    """Two steps along the first axis set in c."""
    if (c & 0x01) != 0:
        return 2, 0, 0
    if (c & 0x02) != 0:
        return 0, 2, 0
    return 0, 0, 2


@njit
def _extra_vertices_octahedron(xins, yins, zins):
    # Decide between (0,0,1) and (1,1,0) as closest.
    p1 = xins + yins
    if p1 > 1.0:
        a_score, a_point, a_is_further_side = p1 - 1.0, 0x03, True
    else:
        a_score, a_point, a_is_further_side = 1.0 - p1, 0x04, False

    # Decide between (0,1,0) and (1,0,1) as closest.
    p2 = xins + zins
    if p2 > 1.0:
        b_score, b_point, b_is_further_side = p2 - 1.0, 0x05, True
    else:
        b_score, b_point, b_is_further_side = 1.0 - p2, 0x02, False

    # The closest of (1,0,0) and (0,1,1) replaces the further of the two
    # decided above, if closer.
    p3 = yins + zins
    if p3 > 1.0:
        score, point, is_further_side = p3 - 1.0, 0x06, True
    else:
        score, point, is_further_side = 1.0 - p3, 0x01, False
    if a_score <= b_score and a_score < score:
        a_point, a_is_further_side = point, is_further_side
    elif a_score > b_score and b_score < score:
        b_point, b_is_further_side = point, is_further_side

    if a_is_further_side == b_is_further_side:
        if a_is_further_side:
            # Both closest points on the (1,1,1) side.
            i, j, k = _doubled_axis(a_point & b_point)
            return 1, 1, 1, i, j, k
        # Both closest points on the (0,0,0) side.
        i, j, k = _opposite_of_missing_axis(a_point | b_point)
        return 0, 0, 0, i, j, k

    # One point on each side.
    if a_is_further_side:
        far_point, near_point = a_point, b_point
    else:
        far_point, near_point = b_point, a_point
    i0, j0, k0 = _opposite_of_missing_axis(far_point)
    i1, j1, k1 = _doubled_axis(near_point)
    return i0, j0, k0, i1, j1, k1


@njit
def noise3(perm, grad_index_3d, x, y, z):
    """3D OpenSimplex noise at already-normalized coordinates."""
    # Place input coordinates on the simplectic honeycomb.
    stretch_offset = (x + y + z) * STRETCH_CONSTANT_3D
    xs = x + stretch_offset
    ys = y + stretch_offset
    zs = z + stretch_offset

    # Floor to get the rhombohedron (stretched cube) super-cell origin.
    xsb = _fast_floor(xs)
    ysb = _fast_floor(ys)
    zsb = _fast_floor(zs)

    squish_offset = (xsb + ysb + zsb) * SQUISH_CONSTANT_3D
    dx0 = x - (xsb + squish_offset)
    dy0 = y - (ysb + squish_offset)
    dz0 = z - (zsb + squish_offset)

    xins = xs - xsb
    yins = ys - ysb
    zins = zs - zsb
    in_sum = xins + yins + zins

    if in_sum <= 1.0:
        # Inside the tetrahedron at (0,0,0)
        value = _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 0, 0, 0)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 1, 0, 0)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 0, 1, 0)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 0, 0, 1)
        ext = _extra_vertices_near_tetrahedron(xins, yins, zins)
    elif in_sum >= 2.0:
        # Inside the tetrahedron at (1,1,1)
        value = _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 1, 1, 0)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 1, 0, 1)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 0, 1, 1)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 1, 1, 1)
        ext = _extra_vertices_far_tetrahedron(xins, yins, zins)
    else:
        # Inside the octahedron in between
        value = _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 1, 0, 0)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 0, 1, 0)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 0, 0, 1)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 1, 1, 0)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 1, 0, 1)
        value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, 0, 1, 1)
        ext = _extra_vertices_octahedron(xins, yins, zins)

    value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, ext[0], ext[1], ext[2])
    value += _vertex3(perm, grad_index_3d, xsb, ysb, zsb, dx0, dy0, dz0, ext[3], ext[4], ext[5])

    return value / NORM_CONSTANT_3D


@njit
def noise2_grid(perm, x, y):
    """
    Evaluates noise2 over 2D coordinate arrays (already normalized).
    Uses explicit loops, which Numba compiles to efficient machine code.
    """
    rows, cols = x.shape
    out = np.zeros((rows, cols))
    for i in range(rows):
        for j in range(cols):
            out[i, j] = noise2(perm, x[i, j], y[i, j])
    return out


@njit
def noise3_grid(perm, grad_index_3d, x, y, z):
    """One constant-z slice of noise3 over 2D coordinate arrays."""
    rows, cols = x.shape
    out = np.zeros((rows, cols))
    for i in range(rows):
        for j in range(cols):
            out[i, j] = noise3(perm, grad_index_3d, x[i, j], y[i, j], z)
    return out


class NoiseField:
    """
    Seeded 2D/3D noise evaluator.

    The permutation table is built once on construction and never modified,
    so every method below is safe to call concurrently.
    """

    def __init__(self, seed: int = 1, table: PermutationTable = None):
        """
        Args:
            seed (int): Unsigned 64-bit seed for the permutation table.
            table (PermutationTable, optional): A pre-computed table. If given,
                the seed is only kept for reference.
        """
        self.seed = seed
        self.table = table if table is not None else PermutationTable.from_seed(seed)
        self._perm = self.table.perm
        self._grad_index_3d = self.table.grad_index_3d

    def noise2d(self, x: float, y: float,
                feature_size_x: float = DEFAULT_FEATURE_SIZE,
                feature_size_y: float = DEFAULT_FEATURE_SIZE) -> float:
        return float(noise2(self._perm, x / feature_size_x, y / feature_size_y))

    def noise3d(self, x: float, y: float, z: float,
                feature_size_x: float = DEFAULT_FEATURE_SIZE,
                feature_size_y: float = DEFAULT_FEATURE_SIZE,
                feature_size_z: float = DEFAULT_FEATURE_SIZE) -> float:
        return float(noise3(
            self._perm, self._grad_index_3d,
            x / feature_size_x, y / feature_size_y, z / feature_size_z
        ))

    def sample_2d(self, x_coords: np.ndarray, y_coords: np.ndarray,
                  feature_size_x: float = DEFAULT_FEATURE_SIZE,
                  feature_size_y: float = DEFAULT_FEATURE_SIZE) -> np.ndarray:
        """
        Samples noise2d over a grid. x_coords and y_coords are 2D arrays of the
        same shape (e.g. from np.meshgrid); the output has that shape too.
        """
        x, y = _as_grid(x_coords, y_coords)
        return noise2_grid(self._perm, x / feature_size_x, y / feature_size_y)

    def sample_3d(self, x_coords: np.ndarray, y_coords: np.ndarray, z: float,
                  feature_size_x: float = DEFAULT_FEATURE_SIZE,
                  feature_size_y: float = DEFAULT_FEATURE_SIZE,
                  feature_size_z: float = DEFAULT_FEATURE_SIZE) -> np.ndarray:
        """Samples one slice of noise3d at depth z."""
        x, y = _as_grid(x_coords, y_coords)
        return noise3_grid(
            self._perm, self._grad_index_3d,
            x / feature_size_x, y / feature_size_y, float(z) / feature_size_z
        )


def _as_grid(x_coords, y_coords):
    x = np.asarray(x_coords, dtype=np.float64)
    y = np.asarray(y_coords, dtype=np.float64)
    if x.ndim != 2 or x.shape != y.shape:
        raise ValueError(
            f"Coordinate grids must be 2D and of equal shape, got {x.shape} and {y.shape}."
        )
    return x, y
