"""Run configuration system with frozen, hashable, serializable dataclasses."""

from dpwsbm.config.experiment import (
    ExperimentConfig,
    PriorConfig,
    SamplerConfig,
    SimulationConfig,
)
from dpwsbm.config.defaults import ANCHOR_CONFIG
from dpwsbm.config.hashing import config_hash, model_config_hash, full_config_hash
from dpwsbm.config.serialization import (
    config_from_dict,
    config_from_json,
    config_to_dict,
    config_to_json,
)

__all__ = [
    "ExperimentConfig",
    "PriorConfig",
    "SamplerConfig",
    "SimulationConfig",
    "ANCHOR_CONFIG",
    "config_hash",
    "model_config_hash",
    "full_config_hash",
    "config_to_json",
    "config_from_json",
    "config_to_dict",
    "config_from_dict",
]
