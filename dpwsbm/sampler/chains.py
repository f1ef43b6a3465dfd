"""Independent multi-chain runs.

The unit of parallelism is a whole chain: chains share the input matrix
and nothing else, each drawing from its own seeded Generator.
"""

import logging

import numpy as np
from joblib import Parallel, delayed

from dpwsbm.config.experiment import ExperimentConfig
from dpwsbm.network.validation import check_weight_matrix
from dpwsbm.reproducibility.seed import chain_seeds
from dpwsbm.sampler.gibbs import run_gibbs
from dpwsbm.sampler.types import ChainResult

log = logging.getLogger(__name__)


def run_chains(
    weights: np.ndarray,
    config: ExperimentConfig,
    n_jobs: int = 1,
) -> list[ChainResult]:
    """Run config.n_chains independent chains on the same weight matrix.

    Args:
        weights: Weight matrix (validated once up front).
        config: Run configuration; chain c uses chain_seeds(config.seed)[c].
        n_jobs: joblib worker count; 1 runs the chains in-process, -1 uses
            every core.

    Returns:
        One ChainResult per chain, in chain order.
    """
    W = check_weight_matrix(weights)
    seeds = chain_seeds(config.seed, config.n_chains)
    log.info(
        "Running %d chain(s) with n_jobs=%d, seeds=%s",
        config.n_chains,
        n_jobs,
        seeds,
    )

    if n_jobs == 1:
        return [run_gibbs(W, config.sampler, config.prior, seed=s) for s in seeds]

    return Parallel(n_jobs=n_jobs)(
        delayed(run_gibbs)(W, config.sampler, config.prior, seed=s) for s in seeds
    )
