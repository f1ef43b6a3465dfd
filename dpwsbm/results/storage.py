"""Chain result storage: one NPZ archive of traces plus JSON metadata.

The sampler keeps no state between runs; this is how a caller persists a
finished chain. Arrays go into chain.npz, the configuration and provenance
into metadata.json next to it.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np

from dpwsbm.config.experiment import ExperimentConfig
from dpwsbm.config.hashing import full_config_hash, model_config_hash
from dpwsbm.config.serialization import config_from_dict, config_to_dict
from dpwsbm.reproducibility.git_hash import get_git_hash
from dpwsbm.sampler.types import ChainResult

log = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"
REQUIRED_METADATA_FIELDS = {
    "schema_version",
    "run_id",
    "timestamp",
    "config",
    "config_hash",
    "model_hash",
    "code_hash",
    "burn_in",
}


def validate_metadata(metadata: dict[str, Any]) -> list[str]:
    """Check a metadata dict for required fields and basic types.

    Returns a list of error strings. An empty list means the metadata is valid.
    """
    errors: list[str] = []

    missing = REQUIRED_METADATA_FIELDS - set(metadata.keys())
    if missing:
        errors.append(f"Missing required metadata fields: {sorted(missing)}")

    if "config" in metadata and not isinstance(metadata["config"], dict):
        errors.append("config must be a dict")

    if "burn_in" in metadata and not isinstance(metadata["burn_in"], int):
        errors.append("burn_in must be an int")

    if "timestamp" in metadata:
        try:
            datetime.fromisoformat(metadata["timestamp"])
        except (TypeError, ValueError):
            errors.append("timestamp must be in ISO 8601 format")

    return errors


def save_chain_result(
    result: ChainResult,
    config: ExperimentConfig,
    out_dir: Path | str,
    run_id: str,
) -> Path:
    """Write a chain to out_dir/run_id/{chain.npz, metadata.json}.

    Args:
        result: Finished chain.
        config: Configuration the chain was run with.
        out_dir: Root results directory.
        run_id: Directory name for this chain.

    Returns:
        Path to the chain's directory.
    """
    chain_dir = Path(out_dir) / run_id
    chain_dir.mkdir(parents=True, exist_ok=True)

    arrays: dict[str, np.ndarray] = {
        "partition": result.partition,
        "partition_trace": result.partition_trace,
        "mean": result.mean,
        "variance": result.variance,
        "mean_trace": result.mean_trace,
        "variance_trace": result.variance_trace,
    }
    if result.log_posterior_trace is not None:
        arrays["log_posterior_trace"] = result.log_posterior_trace
    np.savez_compressed(chain_dir / "chain.npz", **arrays)

    metadata = {
        "schema_version": SCHEMA_VERSION,
        "run_id": run_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "config": config_to_dict(config),
        "config_hash": full_config_hash(config),
        "model_hash": model_config_hash(config),
        "code_hash": get_git_hash(),
        "burn_in": result.burn_in,
        "seed": result.seed,
        "initial_log_likelihood": result.initial_log_likelihood,
    }
    errors = validate_metadata(metadata)
    if errors:
        raise ValueError(f"Refusing to write invalid metadata: {errors}")
    with open(chain_dir / "metadata.json", "w") as f:
        json.dump(metadata, f, indent=2)

    log.info(
        "Chain saved to %s (%d sweeps)", chain_dir, result.partition_trace.shape[0]
    )
    return chain_dir


def load_chain_result(
    chain_dir: Path | str,
) -> tuple[ChainResult, ExperimentConfig] | None:
    """Load a chain saved by save_chain_result.

    Args:
        chain_dir: Directory holding chain.npz and metadata.json.

    Returns:
        (ChainResult, ExperimentConfig), or None if either file is missing.

    Raises:
        ValueError: If metadata.json fails validation.
    """
    chain_dir = Path(chain_dir)
    npz_path = chain_dir / "chain.npz"
    meta_path = chain_dir / "metadata.json"
    if not npz_path.exists() or not meta_path.exists():
        return None

    with open(meta_path) as f:
        metadata = json.load(f)
    errors = validate_metadata(metadata)
    if errors:
        raise ValueError(f"Invalid chain metadata in {meta_path}: {errors}")

    with np.load(npz_path) as data:
        result = ChainResult(
            partition=data["partition"],
            partition_trace=data["partition_trace"],
            mean=data["mean"],
            variance=data["variance"],
            mean_trace=data["mean_trace"],
            variance_trace=data["variance_trace"],
            burn_in=metadata["burn_in"],
            seed=metadata.get("seed"),
            initial_log_likelihood=metadata.get("initial_log_likelihood"),
            log_posterior_trace=(
                data["log_posterior_trace"]
                if "log_posterior_trace" in data.files
                else None
            ),
        )

    log.info("Chain loaded from %s", chain_dir)
    return result, config_from_dict(metadata["config"])
