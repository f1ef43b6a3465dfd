"""Sequential-scan Gibbs update of the node labels.

For node i and candidate label k the log-score is

    log alpha_k + sum_{i' != i} log Normal(W_f[i, i'] | mu(k, z_i'), Var(k, z_i'))

The sum over the other nodes is grouped by their label l, so it only needs
the count, sum and sum of squares of row i restricted to each label:

    sum_l [ -c_l / 2 log(2 pi Var(k, l))
            - (s2_l - 2 mu(k, l) s1_l + c_l mu(k, l)^2) / (2 Var(k, l)) ]

which equals the per-edge sum exactly. The c_l are the incrementally
maintained occupancy counts with node i itself removed.
"""

import logging

import numpy as np
from scipy.special import logsumexp

from dpwsbm.sampler.errors import NumericDegeneracyError
from dpwsbm.sampler.types import BlockParameters

log = logging.getLogger(__name__)

LOG_2PI = np.log(2.0 * np.pi)


def label_log_scores(
    node: int,
    partition: np.ndarray,
    counts: np.ndarray,
    W_f: np.ndarray,
    full_mean: np.ndarray,
    full_variance: np.ndarray,
    log_alpha: np.ndarray,
) -> np.ndarray:
    """Unnormalized log posterior of every label for one node.

    Args:
        node: Index of the node being relabelled.
        partition: Current labels (node's own entry is ignored).
        counts: Occupancy counts including the node itself.
        W_f: Transformed weight matrix.
        full_mean: Symmetric (K_max, K_max) block means.
        full_variance: Symmetric (K_max, K_max) block variances.
        log_alpha: Log mixture weights, length K_max.

    Returns:
        Array of K_max log-scores.
    """
    K = counts.shape[0]
    row = W_f[node]

    c = counts.astype(np.float64)
    c[partition[node]] -= 1.0
    s1 = np.bincount(partition, weights=row, minlength=K)
    s2 = np.bincount(partition, weights=row * row, minlength=K)
    # the node's own entry sits in its label's bin; W_f[i, i] is 0 but be exact
    s1[partition[node]] -= row[node]
    s2[partition[node]] -= row[node] * row[node]

    with np.errstate(divide="ignore", invalid="ignore"):
        loglik = -0.5 * c * (LOG_2PI + np.log(full_variance)) - (
            s2 - 2.0 * full_mean * s1 + c * np.square(full_mean)
        ) / (2.0 * full_variance)
        # empty labels contribute no edges, even if their block is degenerate
        loglik = np.where(c > 0, loglik, 0.0)
    return log_alpha + loglik.sum(axis=1)


def normalize_log_scores(log_scores: np.ndarray) -> np.ndarray:
    """Turn log-scores into a probability vector via log-sum-exp."""
    with np.errstate(invalid="ignore"):
        return np.exp(log_scores - logsumexp(log_scores))


def sample_labels(
    partition: np.ndarray,
    counts: np.ndarray,
    W_f: np.ndarray,
    params: BlockParameters,
    log_alpha: np.ndarray,
    rng: np.random.Generator,
    sweep: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Run one sequential sweep over nodes 0..n-1.

    Each node's new label is drawn from its categorical posterior and the
    occupancy counts are updated before the next node is visited, so later
    nodes see the labels already drawn in this sweep.

    Args:
        partition: Labels at the start of the sweep (not modified).
        counts: Occupancy counts matching partition (not modified).
        W_f: Transformed weight matrix.
        params: Block parameters for this sweep.
        log_alpha: Log mixture weights for this sweep.
        rng: numpy random Generator for reproducibility.
        sweep: Sweep index, reported if a normalization degenerates.

    Returns:
        (new_partition, new_counts).

    Raises:
        NumericDegeneracyError: If a node's label probabilities are not a
            finite probability vector.
    """
    z = partition.copy()
    n_k = counts.copy()
    K = n_k.shape[0]
    full_mean = params.full_mean()
    full_variance = params.full_variance()
    n_moves = 0

    for i in range(z.shape[0]):
        scores = label_log_scores(
            i, z, n_k, W_f, full_mean, full_variance, log_alpha
        )
        probs = normalize_log_scores(scores)
        if not np.all(np.isfinite(probs)):
            raise NumericDegeneracyError(
                "Label probabilities are not finite", sweep=sweep, node=i
            )

        new = int(rng.choice(K, p=probs))
        old = int(z[i])
        if new != old:
            n_k[old] -= 1
            n_k[new] += 1
            z[i] = new
            n_moves += 1

    log.debug("Sweep %s: %d of %d labels changed", sweep, n_moves, z.shape[0])
    return z, n_k
