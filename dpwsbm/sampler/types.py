"""Sampler state and trace containers.

Every phase of a sweep consumes immutable snapshots and returns new ones;
the Gibbs driver holds the single current ChainState and replaces it
wholesale after each phase.
"""

from dataclasses import dataclass

import numpy as np


def symmetrize_upper(upper: np.ndarray) -> np.ndarray:
    """Mirror an upper-triangular (K, K) array into a full symmetric one."""
    return np.triu(upper) + np.triu(upper, k=1).T


@dataclass(frozen=True)
class BlockStatistics:
    """Per block pair sufficient statistics of the transformed weights.

    All arrays are (K_max, K_max) and upper-triangular: entry (k, kk) with
    k <= kk describes node pairs with labels {k, kk}; the strict lower
    triangle is zero.
    """

    counts: np.ndarray  # int64, number of node pairs
    sums: np.ndarray  # float64, sum of weights
    sums_sq: np.ndarray  # float64, sum of squared weights
    centered_ss: np.ndarray  # float64, sums_sq - sums**2 / counts (0 if empty)

    @property
    def K_max(self) -> int:
        return self.counts.shape[0]


@dataclass(frozen=True)
class BlockParameters:
    """Block means and variances, stored on the upper triangle only."""

    mean: np.ndarray  # (K_max, K_max) float64
    variance: np.ndarray  # (K_max, K_max) float64, > 0 on the upper triangle

    def full_mean(self) -> np.ndarray:
        return symmetrize_upper(self.mean)

    def full_variance(self) -> np.ndarray:
        return symmetrize_upper(self.variance)


@dataclass(frozen=True)
class StickBreakingState:
    """Truncated stick-breaking proportions and the implied mixture weights."""

    log_beta: np.ndarray  # (K_max,), log_beta[-1] == 0
    log_alpha: np.ndarray  # (K_max,), logsumexp(log_alpha) == 0

    @property
    def alpha(self) -> np.ndarray:
        return np.exp(self.log_alpha)


@dataclass(frozen=True)
class ChainState:
    """The current state of one chain between phases of a sweep."""

    partition: np.ndarray  # int64 (n,)
    counts: np.ndarray  # int64 (K_max,), occupancy per label
    statistics: BlockStatistics
    parameters: BlockParameters


@dataclass(frozen=True)
class ChainResult:
    """Everything a finished chain hands back to the caller."""

    partition: np.ndarray  # final labels, (n,)
    partition_trace: np.ndarray  # (iterations, n), one row per sweep
    mean: np.ndarray  # final block means, upper-triangular (K_max, K_max)
    variance: np.ndarray  # final block variances, upper-triangular
    mean_trace: np.ndarray  # (iterations - burn_in, K_max, K_max)
    variance_trace: np.ndarray  # (iterations - burn_in, K_max, K_max)
    burn_in: int
    seed: int | None = None
    initial_log_likelihood: float | None = None  # only with record_trace
    log_posterior_trace: np.ndarray | None = None  # (iterations,), with record_trace

    @property
    def iterations(self) -> int:
        return self.partition_trace.shape[0]

    @property
    def K_max(self) -> int:
        return self.mean.shape[0]

    def active_communities(self) -> np.ndarray:
        """Number of non-empty labels after each sweep."""
        trace = self.partition_trace
        occupied = np.zeros((trace.shape[0], self.K_max), dtype=bool)
        rows = np.repeat(np.arange(trace.shape[0]), trace.shape[1])
        occupied[rows, trace.ravel()] = True
        return occupied.sum(axis=1)
