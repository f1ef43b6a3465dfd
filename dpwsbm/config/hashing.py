"""Content hashes identifying a run configuration.

Every saved chain carries two hashes. The full hash covers the whole
configuration. The model hash covers only the prior and sampler settings,
which fix the posterior being sampled, so chains that share it are draws
from the same target and can be pooled whatever their seeds.
"""

import hashlib
import json
from dataclasses import asdict
from typing import Any, Iterable

from dpwsbm.config.experiment import ExperimentConfig

HASH_LENGTH = 16

# Top-level fields that change how a run is executed or labelled but not
# which posterior it samples.
RUN_ONLY_FIELDS = ("seed", "n_chains", "description", "tags", "simulation")


def config_hash(config: Any, exclude: Iterable[str] = ()) -> str:
    """SHA-256 prefix of a config dataclass, optionally minus top-level fields."""
    skip = set(exclude)
    payload = {k: v for k, v in asdict(config).items() if k not in skip}
    blob = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(blob.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def model_config_hash(config: ExperimentConfig) -> str:
    return config_hash(config, exclude=RUN_ONLY_FIELDS)


def full_config_hash(config: ExperimentConfig) -> str:
    return config_hash(config)
