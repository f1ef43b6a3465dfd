"""Weighted network handling: Fisher transform, validation and simulation."""

from dpwsbm.network.simulate import (
    block_parameter_matrices,
    build_block_means,
    planted_block_sizes,
    sample_weights,
    simulate_wsbm,
)
from dpwsbm.network.transform import fisher_transform, inverse_fisher_transform
from dpwsbm.network.types import SimulatedNetwork
from dpwsbm.network.validation import (
    InvalidInputError,
    check_weight_matrix,
    validate_weight_matrix,
)

__all__ = [
    "InvalidInputError",
    "SimulatedNetwork",
    "block_parameter_matrices",
    "build_block_means",
    "check_weight_matrix",
    "fisher_transform",
    "inverse_fisher_transform",
    "planted_block_sizes",
    "sample_weights",
    "simulate_wsbm",
    "validate_weight_matrix",
]
