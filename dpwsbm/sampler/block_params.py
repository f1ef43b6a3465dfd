"""Conjugate Normal-Inverse-Gamma update of block means and variances.

For a block pair with N > 0 observed node pairs:

    Var ~ 1 / Gamma(shape=(N + nu0) / 2,
                    scale=2 / (SS0 + S + n0 N / (n0 + N) (Sum / N - mu0)^2))
    mu  ~ Normal((Sum + n0 mu0) / (N + n0), Var / (N + n0))

A block pair with no observations keeps Var = SS0 without a draw and
samples its mean from the prior. Given the statistics the block pairs are
independent, so each phase is drawn in one vectorized call over the upper
triangle: every variance first, then every mean.
"""

import logging

import numpy as np

from dpwsbm.config.experiment import PriorConfig
from dpwsbm.sampler.errors import NumericDegeneracyError
from dpwsbm.sampler.types import BlockParameters, BlockStatistics

log = logging.getLogger(__name__)


def posterior_scale(stats: BlockStatistics, prior: PriorConfig) -> np.ndarray:
    """Denominator term SS0 + S + shrinkage of the data mean towards mu0.

    Only meaningful where counts > 0; other entries hold SS0.
    """
    N = stats.counts.astype(np.float64)
    scale = np.full(N.shape, prior.ss0, dtype=np.float64)
    occupied = N > 0
    Nk = N[occupied]
    data_mean = stats.sums[occupied] / Nk
    scale[occupied] += (
        stats.centered_ss[occupied]
        + (prior.n0 * Nk / (prior.n0 + Nk)) * np.square(data_mean - prior.mu0)
    )
    return scale


def sample_block_parameters(
    stats: BlockStatistics,
    prior: PriorConfig,
    rng: np.random.Generator,
    sweep: int | None = None,
) -> BlockParameters:
    """Draw every block variance and then every block mean.

    Args:
        stats: Sufficient statistics for the current partition.
        prior: Normal-Inverse-Gamma hyperparameters.
        rng: numpy random Generator for reproducibility.
        sweep: Sweep index, reported if a draw degenerates.

    Returns:
        BlockParameters with upper-triangular mean and variance.

    Raises:
        NumericDegeneracyError: If a variance is non-finite or non-positive,
            or a mean is non-finite.
    """
    K = stats.K_max
    iu, ju = np.triu_indices(K)
    N = stats.counts[iu, ju].astype(np.float64)
    occupied = N > 0

    var_upper = np.full(iu.shape[0], prior.ss0, dtype=np.float64)
    if occupied.any():
        shape = (N[occupied] + prior.nu0) / 2.0
        scale = 2.0 / posterior_scale(stats, prior)[iu, ju][occupied]
        with np.errstate(divide="ignore"):
            var_upper[occupied] = 1.0 / rng.gamma(shape, scale)

    bad = ~np.isfinite(var_upper) | (var_upper <= 0)
    if bad.any():
        first = int(np.flatnonzero(bad)[0])
        raise NumericDegeneracyError(
            f"Block variance degenerated to {var_upper[first]!r}",
            sweep=sweep,
            block=(int(iu[first]), int(ju[first])),
        )

    post_mean = (stats.sums[iu, ju] + prior.n0 * prior.mu0) / (N + prior.n0)
    post_sd = np.sqrt(var_upper / (N + prior.n0))
    mean_upper = rng.normal(post_mean, post_sd)

    bad = ~np.isfinite(mean_upper)
    if bad.any():
        first = int(np.flatnonzero(bad)[0])
        raise NumericDegeneracyError(
            "Block mean is not finite",
            sweep=sweep,
            block=(int(iu[first]), int(ju[first])),
        )

    mean = np.zeros((K, K), dtype=np.float64)
    variance = np.zeros((K, K), dtype=np.float64)
    mean[iu, ju] = mean_upper
    variance[iu, ju] = var_upper

    log.debug(
        "Sweep %s: drew parameters for %d occupied of %d block pairs",
        sweep,
        int(occupied.sum()),
        iu.shape[0],
    )
    return BlockParameters(mean=mean, variance=variance)


def block_log_posterior(
    stats: BlockStatistics, params: BlockParameters, prior: PriorConfig
) -> float:
    """Joint log-posterior of all block pairs, up to additive constants.

    Sums, per block pair, the Gaussian log-likelihood of its weights, the
    Normal(mu0, Var / n0) log-prior of the mean and the
    Inverse-Gamma(nu0 / 2, SS0 / 2) log-prior of the variance.
    """
    iu, ju = np.triu_indices(stats.K_max)
    N = stats.counts[iu, ju].astype(np.float64)
    s1 = stats.sums[iu, ju]
    s2 = stats.sums_sq[iu, ju]
    mu = params.mean[iu, ju]
    var = params.variance[iu, ju]
    log_var = np.log(var)

    loglik = -0.5 * N * log_var - (s2 - 2.0 * mu * s1 + N * mu**2) / (2.0 * var)
    mean_prior = -0.5 * np.log(var / prior.n0) - prior.n0 * (mu - prior.mu0) ** 2 / (
        2.0 * var
    )
    var_prior = -(prior.nu0 / 2.0 + 1.0) * log_var - prior.ss0 / (2.0 * var)
    return float(np.sum(loglik + mean_prior + var_prior))
