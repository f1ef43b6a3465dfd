"""Gibbs sampler for the truncated Dirichlet-process weighted SBM."""

from dpwsbm.sampler.block_params import (
    block_log_posterior,
    posterior_scale,
    sample_block_parameters,
)
from dpwsbm.sampler.chains import run_chains
from dpwsbm.sampler.errors import NumericDegeneracyError
from dpwsbm.sampler.gibbs import auto_wsbm, gibbs_sweep, initialize_chain, run_gibbs
from dpwsbm.sampler.labels import (
    label_log_scores,
    normalize_log_scores,
    sample_labels,
)
from dpwsbm.sampler.statistics import compute_block_statistics, label_counts
from dpwsbm.sampler.stick_breaking import sample_stick_breaking
from dpwsbm.sampler.types import (
    BlockParameters,
    BlockStatistics,
    ChainResult,
    ChainState,
    StickBreakingState,
    symmetrize_upper,
)

__all__ = [
    "BlockParameters",
    "BlockStatistics",
    "ChainResult",
    "ChainState",
    "NumericDegeneracyError",
    "StickBreakingState",
    "auto_wsbm",
    "block_log_posterior",
    "compute_block_statistics",
    "gibbs_sweep",
    "initialize_chain",
    "label_counts",
    "label_log_scores",
    "normalize_log_scores",
    "posterior_scale",
    "run_chains",
    "run_gibbs",
    "sample_block_parameters",
    "sample_labels",
    "sample_stick_breaking",
    "symmetrize_upper",
]
