"""Network data structures for simulated weighted block-model graphs."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class SimulatedNetwork:
    """Immutable container for a planted-partition weighted network.

    Uses frozen=True but omits slots=True since numpy arrays don't
    interact well with __slots__.
    """

    weights: np.ndarray  # (n, n) symmetric correlation-scale matrix, zero diagonal
    labels: np.ndarray  # int array of length n, node -> planted block
    block_means: np.ndarray  # (K, K) symmetric means on the transformed scale
    block_variances: np.ndarray  # (K, K) symmetric variances on the transformed scale
    n: int
    K: int
