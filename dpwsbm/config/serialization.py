"""Run configs to and from JSON.

Config files are plain JSON objects mirroring ExperimentConfig. Reading is
strict: unknown keys and wrongly typed values are rejected, and JSON arrays
become the tuples the frozen dataclasses expect (tags, simulation means,
block matrices).
"""

import json
from dataclasses import asdict
from typing import Any

from dacite import Config as DaciteConfig, DaciteError, from_dict

from dpwsbm.config.experiment import ExperimentConfig

_DACITE_CONFIG = DaciteConfig(cast=[tuple], check_types=True, strict=True)


def config_to_dict(config: ExperimentConfig) -> dict[str, Any]:
    return asdict(config)


def config_from_dict(data: dict[str, Any]) -> ExperimentConfig:
    """Build an ExperimentConfig from parsed JSON.

    Raises:
        ValueError: If the data does not match the config schema or fails
            the configs' own validation.
    """
    try:
        return from_dict(data_class=ExperimentConfig, data=data, config=_DACITE_CONFIG)
    except DaciteError as exc:
        raise ValueError(f"Invalid run config: {exc}") from exc


def config_to_json(config: ExperimentConfig) -> str:
    """Sorted keys, 2-space indent, so config files diff cleanly."""
    return json.dumps(config_to_dict(config), indent=2, sort_keys=True)


def config_from_json(json_str: str) -> ExperimentConfig:
    return config_from_dict(json.loads(json_str))
