# terragen/permutation.py

"""
================================================================================
PERMUTATION TABLE
================================================================================
Builds the seeded lookup tables that hash integer lattice coordinates to
gradient vectors.

Data Contract:
---------------
- Inputs:
    - seed (int), or any generator exposing next(upper_bound).
- Outputs:
    - perm: int64 array of length 256, a permutation of 0..255.
    - grad_index_3d: int64 array of length 256, row offsets into the 3D
      gradient table.
- Side Effects: None. Both arrays are read-only once built.
- Invariants: The same seed always yields bit-identical tables.
================================================================================
"""

import numpy as np

from .random_source import SeededGenerator

TABLE_SIZE = 256
# Number of vectors in the 3D gradient table (see noise.GRADIENTS_3D).
GRADIENT_COUNT_3D = 16


def shuffle_permutation(generator) -> np.ndarray:
    """
    Fisher-Yates shuffle of the identity table, drawing from high index to low.
    The draw order is part of the reproducibility contract.
    """
    perm = np.arange(TABLE_SIZE, dtype=np.int64)
    for i in range(TABLE_SIZE - 1, 0, -1):
        j = generator.next(i + 1)
        perm[i], perm[j] = perm[j], perm[i]
    return perm


class PermutationTable:
    """Immutable pair of lookup tables used by the noise kernels."""

    def __init__(self, perm):
        perm = np.array(perm, dtype=np.int64)
        if perm.shape != (TABLE_SIZE,) or not np.array_equal(np.sort(perm), np.arange(TABLE_SIZE)):
            raise ValueError("perm must be a permutation of 0..255.")

        self.perm = perm
        self.grad_index_3d = (perm % GRADIENT_COUNT_3D) * 3
        self.perm.flags.writeable = False
        self.grad_index_3d.flags.writeable = False

    @classmethod
    def from_seed(cls, seed: int) -> "PermutationTable":
        return cls(shuffle_permutation(SeededGenerator(seed)))

    def __reduce__(self):
        # Rebuild through __init__ so unpickled copies stay read-only.
        return (PermutationTable, (self.perm.tolist(),))

    def __eq__(self, other):
        if not isinstance(other, PermutationTable):
            return NotImplemented
        return np.array_equal(self.perm, other.perm)

    def __repr__(self):
        return f"PermutationTable(perm[:8]={self.perm[:8].tolist()}...)"


def build_permutation_table(seed: int) -> PermutationTable:
    return PermutationTable.from_seed(seed)
