"""Planted-partition weighted network generator.

Draws a symmetric correlation-scale weight matrix whose Fisher-transformed
entries are Normal with a mean and variance set by the block pair of the
two endpoints. Used to benchmark recovery of the planted groups.
"""

import logging

import numpy as np

from dpwsbm.config.experiment import SimulationConfig
from dpwsbm.network.transform import fisher_transform, inverse_fisher_transform
from dpwsbm.network.types import SimulatedNetwork

log = logging.getLogger(__name__)


def planted_block_sizes(n: int, K: int) -> np.ndarray:
    """floor(n / K) nodes per block, with the remainder in the last block."""
    sizes = np.full(K, n // K, dtype=np.int64)
    sizes[-1] = n - sizes[:-1].sum()
    return sizes


def build_block_means(
    mu_within: tuple[float, ...], mu_between: float
) -> np.ndarray:
    """Build the K x K block mean matrix on the transformed scale.

    Diagonal entries come from mu_within, every off-diagonal entry is
    mu_between; both are given as correlations.
    """
    K = len(mu_within)
    omega = np.full((K, K), mu_between, dtype=np.float64)
    np.fill_diagonal(omega, mu_within)
    return fisher_transform(omega)


def block_parameter_matrices(
    config: SimulationConfig,
) -> tuple[np.ndarray, np.ndarray]:
    """K x K block means (transformed scale) and variances for a config.

    Full block_means / block_variances matrices take precedence over the
    mu_within / mu_between / variance shorthand.
    """
    if config.block_means:
        means = fisher_transform(np.array(config.block_means, dtype=np.float64))
    else:
        means = build_block_means(config.mu_within, config.mu_between)

    if config.block_variances:
        variances = np.array(config.block_variances, dtype=np.float64)
    else:
        variances = np.full((config.K, config.K), config.variance, dtype=np.float64)
    return means, variances


def sample_weights(
    labels: np.ndarray,
    block_means: np.ndarray,
    block_variances: np.ndarray | float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Sample a symmetric correlation matrix given node labels.

    Each unordered pair (i, j), i < j, gets an independent
    Normal(block_means[z_i, z_j], block_variances[z_i, z_j]) draw on the
    transformed scale, mirrored to (j, i) and mapped back through the
    inverse transform.

    Args:
        labels: Int array of length n with block labels.
        block_means: Symmetric (K, K) means on the transformed scale.
        block_variances: Symmetric (K, K) variances on the transformed
            scale, or one variance shared by every block pair.
        rng: numpy random Generator for reproducibility.

    Returns:
        (n, n) symmetric matrix with zero diagonal.
    """
    n = labels.shape[0]
    iu, ju = np.triu_indices(n, k=1)
    variances = np.broadcast_to(
        np.asarray(block_variances, dtype=np.float64), block_means.shape
    )
    means = block_means[labels[iu], labels[ju]]
    sds = np.sqrt(variances[labels[iu], labels[ju]])

    W_f = np.zeros((n, n), dtype=np.float64)
    W_f[iu, ju] = rng.normal(means, sds)
    W_f[ju, iu] = W_f[iu, ju]

    W = inverse_fisher_transform(W_f)
    # tanh saturates at +/-1 for large draws; keep the open interval
    np.clip(W, -1.0 + 1e-12, 1.0 - 1e-12, out=W)
    np.fill_diagonal(W, 0.0)
    return W


def simulate_wsbm(
    config: SimulationConfig, rng: np.random.Generator
) -> SimulatedNetwork:
    """Generate a weighted network with a planted block partition.

    Nodes are laid out block by block (labels 0, 0, ..., 1, 1, ...).

    Args:
        config: Simulation parameters.
        rng: numpy random Generator for reproducibility.

    Returns:
        SimulatedNetwork with the weight matrix and planted labels.
    """
    n, K = config.n, config.K
    if config.block_sizes:
        sizes = np.asarray(config.block_sizes, dtype=np.int64)
    else:
        sizes = planted_block_sizes(n, K)

    labels = np.repeat(np.arange(K), sizes)
    block_means, block_variances = block_parameter_matrices(config)
    weights = sample_weights(labels, block_means, block_variances, rng)

    log.info(
        "Simulated WSBM network (n=%d, K=%d, sizes=%s, variances in [%.3g, %.3g])",
        n,
        K,
        sizes.tolist(),
        block_variances.min(),
        block_variances.max(),
    )
    return SimulatedNetwork(
        weights=weights,
        labels=labels,
        block_means=block_means,
        block_variances=block_variances,
        n=n,
        K=K,
    )
