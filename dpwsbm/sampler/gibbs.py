"""Gibbs driver for the truncated Dirichlet-process weighted SBM.

Each sweep runs, in order:
1. Stick-breaking weights from the current occupancy counts
2. Sequential label sweep under the current block parameters
3. Block statistics recomputed from the new partition
4. Block means and variances redrawn from their conjugate posterior

The driver owns the only mutable reference, the current ChainState, and
replaces it after every phase. Partitions are recorded every sweep, block
parameters from the burn-in sweep onwards, and the joint log-posterior of
the block parameters every sweep when record_trace is set.
"""

import logging
from dataclasses import replace

import numpy as np

from dpwsbm.config.experiment import PriorConfig, SamplerConfig
from dpwsbm.network.transform import fisher_transform
from dpwsbm.network.validation import check_weight_matrix
from dpwsbm.reproducibility.seed import make_rng
from dpwsbm.sampler.block_params import block_log_posterior, sample_block_parameters
from dpwsbm.sampler.labels import sample_labels
from dpwsbm.sampler.statistics import compute_block_statistics, label_counts
from dpwsbm.sampler.stick_breaking import sample_stick_breaking
from dpwsbm.sampler.types import ChainResult, ChainState

log = logging.getLogger(__name__)

PROGRESS_STEP_PERCENT = 10


def initialize_chain(
    W_f: np.ndarray,
    K_max: int,
    prior: PriorConfig,
    rng: np.random.Generator,
) -> ChainState:
    """Draw a random starting partition and a first set of block parameters.

    The number of initially used labels K_start is uniform on 1..K_max and
    labels are uniform on 0..K_start-1, leaving K_max - K_start labels empty.
    """
    n = W_f.shape[0]
    K_start = int(rng.integers(1, K_max + 1))
    partition = rng.integers(0, K_start, size=n).astype(np.int64)
    counts = label_counts(partition, K_max)
    stats = compute_block_statistics(partition, W_f, K_max)
    params = sample_block_parameters(stats, prior, rng, sweep=None)

    log.debug(
        "Initial partition: K_start=%d, occupancy=%s", K_start, counts.tolist()
    )
    return ChainState(
        partition=partition,
        counts=counts,
        statistics=stats,
        parameters=params,
    )


def gibbs_sweep(
    state: ChainState,
    W_f: np.ndarray,
    eta0: float,
    prior: PriorConfig,
    rng: np.random.Generator,
    sweep: int,
) -> ChainState:
    """Run one full sweep and return the new chain state."""
    stick = sample_stick_breaking(state.counts, eta0, rng)

    partition, counts = sample_labels(
        state.partition,
        state.counts,
        W_f,
        state.parameters,
        stick.log_alpha,
        rng,
        sweep=sweep,
    )
    state = replace(state, partition=partition, counts=counts)

    stats = compute_block_statistics(partition, W_f, state.counts.shape[0])
    state = replace(state, statistics=stats)

    params = sample_block_parameters(stats, prior, rng, sweep=sweep)
    return replace(state, parameters=params)


def run_gibbs(
    weights: np.ndarray,
    config: SamplerConfig,
    prior: PriorConfig | None = None,
    seed: int | np.random.Generator | None = None,
) -> ChainResult:
    """Fit the DP-WSBM to a weight matrix with one Gibbs chain.

    Args:
        weights: (n, n) symmetric, zero-diagonal matrix with off-diagonal
            entries strictly inside (-1, 1).
        config: Chain parameters (truncation, concentration, sweeps).
        prior: Block-parameter hyperparameters; defaults to PriorConfig().
        seed: Integer seed, an existing Generator, or None for fresh entropy.

    Returns:
        ChainResult with final state and traces.

    Raises:
        InvalidInputError: If the weight matrix violates preconditions.
        NumericDegeneracyError: If a draw degenerates mid-chain.
    """
    prior = prior if prior is not None else PriorConfig()
    W = check_weight_matrix(weights)
    rng = make_rng(seed)

    n = W.shape[0]
    K_max = config.K_max
    iterations = config.iterations
    burn_in = config.burn_in

    log.info(
        "Starting chain: n=%d, K_max=%d, eta0=%g, iterations=%d, burn_in=%d",
        n,
        K_max,
        config.eta0,
        iterations,
        burn_in,
    )
    W_f = fisher_transform(W)
    state = initialize_chain(W_f, K_max, prior, rng)

    initial_log_likelihood = None
    log_posterior_trace = None
    if config.record_trace:
        initial_log_likelihood = block_log_posterior(
            state.statistics, state.parameters, prior
        )
        log_posterior_trace = np.zeros(iterations, dtype=np.float64)

    partition_trace = np.zeros((iterations, n), dtype=np.int64)
    mean_trace = np.zeros((iterations - burn_in, K_max, K_max), dtype=np.float64)
    variance_trace = np.zeros_like(mean_trace)

    next_report = 0
    for it in range(iterations):
        state = gibbs_sweep(state, W_f, config.eta0, prior, rng, sweep=it)

        partition_trace[it] = state.partition
        if it >= burn_in:
            mean_trace[it - burn_in] = state.parameters.mean
            variance_trace[it - burn_in] = state.parameters.variance
        if log_posterior_trace is not None:
            log_posterior_trace[it] = block_log_posterior(
                state.statistics, state.parameters, prior
            )

        percent = it * 100 // iterations
        if percent >= next_report:
            log.info(
                "%d%% of sweeps done (%d active communities)",
                percent,
                int((state.counts > 0).sum()),
            )
            next_report = (percent // PROGRESS_STEP_PERCENT + 1) * PROGRESS_STEP_PERCENT

    log.info(
        "Chain done after %d sweeps: occupancy=%s",
        iterations,
        state.counts.tolist(),
    )

    return ChainResult(
        partition=state.partition,
        partition_trace=partition_trace,
        mean=state.parameters.mean,
        variance=state.parameters.variance,
        mean_trace=mean_trace,
        variance_trace=variance_trace,
        burn_in=burn_in,
        seed=int(seed) if isinstance(seed, (int, np.integer)) else None,
        initial_log_likelihood=initial_log_likelihood,
        log_posterior_trace=log_posterior_trace,
    )


def auto_wsbm(
    weights: np.ndarray,
    K_max: int,
    eta0: float,
    iterations: int = 1000,
    record_trace: bool = False,
    *,
    prior: PriorConfig | None = None,
    seed: int | np.random.Generator | None = None,
) -> ChainResult:
    """Single-call entry point: fit with explicit chain parameters.

    Invalid K_max, eta0 or iterations raise ValueError before the weight
    matrix is even inspected.
    """
    config = SamplerConfig(
        K_max=K_max,
        eta0=eta0,
        iterations=iterations,
        record_trace=record_trace,
    )
    return run_gibbs(weights, config, prior=prior, seed=seed)
