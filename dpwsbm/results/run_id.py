"""Run ID generation with scannable parameter slug format."""

from datetime import datetime, timezone

from dpwsbm.config.experiment import ExperimentConfig


def generate_run_id(config: ExperimentConfig, n: int) -> str:
    """Generate a scannable run ID from config parameters.

    Format: n{n}_K{K_max}_e{eta0}_it{iterations}_s{seed}_{YYYYMMDD}_{HHMMSS}
    Example: n100_K10_e1_it1000_s42_20261018_143012
    """
    ts = datetime.now(timezone.utc)
    return (
        f"n{n}"
        f"_K{config.sampler.K_max}"
        f"_e{config.sampler.eta0:g}"
        f"_it{config.sampler.iterations}"
        f"_s{config.seed}"
        f"_{ts.strftime('%Y%m%d_%H%M%S')}"
    )
