"""Truncated stick-breaking update of the Dirichlet-process mixture weights."""

import numpy as np

from dpwsbm.sampler.types import StickBreakingState


def sample_stick_breaking(
    counts: np.ndarray, eta0: float, rng: np.random.Generator
) -> StickBreakingState:
    """Draw stick proportions given label occupancy.

    beta_k ~ Beta(1 + n_k, eta0 + sum_{j > k} n_j) for k < K_max - 1 and
    beta_{K_max - 1} = 1, so the last label absorbs the remaining stick and
    the weights alpha_k = beta_k prod_{l < k} (1 - beta_l) sum to one.

    Args:
        counts: Occupancy n_k of each label, length K_max.
        eta0: Concentration of the Dirichlet process.
        rng: numpy random Generator for reproducibility.

    Returns:
        StickBreakingState with log proportions and log weights.
    """
    K = counts.shape[0]
    log_beta = np.zeros(K, dtype=np.float64)
    log_one_minus = np.zeros(K, dtype=np.float64)

    if K > 1:
        head = counts[:-1].astype(np.float64)
        rest = (counts.sum() - np.cumsum(counts))[:-1].astype(np.float64)
        beta = rng.beta(1.0 + head, eta0 + rest)
        with np.errstate(divide="ignore"):
            log_beta[:-1] = np.log(beta)
            log_one_minus[:-1] = np.log1p(-beta)

    # log alpha_k = log beta_k + sum_{l < k} log(1 - beta_l)
    log_alpha = log_beta + np.concatenate(([0.0], np.cumsum(log_one_minus[:-1])))
    return StickBreakingState(log_beta=log_beta, log_alpha=log_alpha)
