"""Block-pair sufficient statistics of the transformed weight matrix.

A pure reduction from (partition, W_f) to per block pair edge counts,
weight sums and weight sums of squares. Recomputed from scratch once per
sweep, after the label sweep and before the parameter update.
"""

import numpy as np

from dpwsbm.sampler.types import BlockStatistics


def label_counts(partition: np.ndarray, K_max: int) -> np.ndarray:
    """Occupancy n_k of every label 0..K_max-1."""
    return np.bincount(partition, minlength=K_max).astype(np.int64)


def compute_block_statistics(
    partition: np.ndarray, W_f: np.ndarray, K_max: int
) -> BlockStatistics:
    """Compute BlockStatistics for the current partition.

    Block totals come from Z^T W_f Z with Z the (n, K_max) one-hot label
    matrix. Off-diagonal blocks (k < kk) keep the full rectangular total;
    within-block totals (k == kk) count every unordered pair twice and are
    halved. W_f has a zero diagonal, so self-pairs contribute nothing.

    Args:
        partition: Int array of length n with labels in 0..K_max-1.
        W_f: (n, n) transformed weight matrix, symmetric, zero diagonal.
        K_max: Truncation level.

    Returns:
        BlockStatistics with upper-triangular (K_max, K_max) arrays.
    """
    n = partition.shape[0]
    Z = np.zeros((n, K_max), dtype=np.float64)
    Z[np.arange(n), partition] = 1.0

    sums = Z.T @ W_f @ Z
    sums_sq = Z.T @ np.square(W_f) @ Z

    n_k = label_counts(partition, K_max)
    counts = np.outer(n_k, n_k)
    np.fill_diagonal(counts, n_k * (n_k - 1) // 2)

    diag = np.diag_indices(K_max)
    sums[diag] /= 2.0
    sums_sq[diag] /= 2.0

    counts = np.triu(counts)
    sums = np.triu(sums)
    sums_sq = np.triu(sums_sq)

    centered_ss = np.zeros((K_max, K_max), dtype=np.float64)
    occupied = counts > 0
    centered_ss[occupied] = (
        sums_sq[occupied] - np.square(sums[occupied]) / counts[occupied]
    )

    return BlockStatistics(
        counts=counts,
        sums=sums,
        sums_sq=sums_sq,
        centered_ss=centered_ss,
    )
