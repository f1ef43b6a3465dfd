#!/usr/bin/env python3
"""Entry point for fitting the DP-WSBM to a weight matrix.

Chains the run stages into a single command:
load or simulate weights -> Gibbs chain(s) -> save traces.

Usage:
    python run_sampler.py --config config.json --weights corr.npy
    python run_sampler.py --config config.json            # uses config.simulation
    python run_sampler.py --config config.json --dry-run
    python run_sampler.py --config config.json --chains 4 --jobs 4 --verbose
"""

import argparse
import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Generator

import numpy as np

from dpwsbm.config import config_from_json, full_config_hash, model_config_hash
from dpwsbm.config.experiment import ExperimentConfig

log = logging.getLogger(__name__)


@contextmanager
def stage_timer(name: str) -> Generator[None, None, None]:
    """Context manager that prints stage banners with elapsed time."""
    print(f"\n=== {name} ===")
    log.info("Starting: %s", name)
    t0 = time.monotonic()
    yield
    elapsed = time.monotonic() - t0
    print(f"... done in {elapsed:.1f}s")
    log.info("Completed: %s in %.1fs", name, elapsed)


def load_weights(config: ExperimentConfig, weights_path: Path | None) -> np.ndarray:
    """Read a .npy weight matrix, or simulate one from config.simulation."""
    from dpwsbm.network import simulate_wsbm
    from dpwsbm.reproducibility import make_rng

    if weights_path is not None:
        W = np.load(weights_path)
        log.info("Weights loaded from %s, shape %s", weights_path, W.shape)
        return W

    if config.simulation is None:
        raise ValueError(
            "No --weights given and the config has no simulation block"
        )
    network = simulate_wsbm(config.simulation, make_rng(config.seed))
    return network.weights


def run_pipeline(
    config: ExperimentConfig,
    weights_path: Path | None,
    results_dir: str = "results",
    n_jobs: int = 1,
) -> list[Path]:
    """Execute the full run.

    Args:
        config: Run configuration.
        weights_path: .npy weight matrix, or None to simulate.
        results_dir: Base directory for results output.
        n_jobs: joblib workers for multi-chain runs.

    Returns:
        Paths of the saved chain directories.
    """
    # Lazy imports to keep --dry-run fast
    from dpwsbm.reproducibility import get_git_hash
    from dpwsbm.results import generate_run_id, save_chain_result
    from dpwsbm.sampler import run_chains

    pipeline_start = time.monotonic()
    log.info("Seed: %d", config.seed)
    log.info("Git hash: %s", get_git_hash())

    with stage_timer("Load Weights"):
        W = load_weights(config, weights_path)

    with stage_timer("Gibbs Sampling"):
        results = run_chains(W, config, n_jobs=n_jobs)

    with stage_timer("Save Chains"):
        base_id = generate_run_id(config, W.shape[0])
        paths = []
        for c, result in enumerate(results):
            run_id = base_id if len(results) == 1 else f"{base_id}_c{c}"
            paths.append(save_chain_result(result, config, results_dir, run_id))

    total_elapsed = time.monotonic() - pipeline_start
    print(f"\n{'=' * 60}")
    print(f"Run complete in {total_elapsed:.1f}s")
    for path, result in zip(paths, results):
        active = result.active_communities()[result.burn_in:]
        print(f"  Chain:  {path}")
        print(
            f"          final occupancy={np.bincount(result.partition, minlength=result.K_max).tolist()}, "
            f"mean active communities after burn-in={active.mean():.2f}"
        )
    print(f"{'=' * 60}")

    return paths


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Fit a Dirichlet-process weighted SBM by Gibbs sampling"
    )
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to run config JSON file",
    )
    parser.add_argument(
        "--weights",
        type=str,
        default=None,
        help="Path to an (n, n) .npy weight matrix; omit to simulate",
    )
    parser.add_argument(
        "--chains",
        type=int,
        default=None,
        help="Override the number of independent chains",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Parallel workers for multi-chain runs (-1 = all cores)",
    )
    parser.add_argument(
        "--results-dir",
        type=str,
        default="results",
        help="Directory for saved chains",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the run plan without sampling",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable DEBUG-level logging",
    )
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)
    weights_path = Path(args.weights) if args.weights else None
    if weights_path is not None and not weights_path.exists():
        print(f"Error: weight file not found: {weights_path}", file=sys.stderr)
        sys.exit(1)
    if args.chains is not None and args.chains < 1:
        print(f"Error: --chains must be >= 1, got {args.chains}", file=sys.stderr)
        sys.exit(1)

    try:
        config = config_from_json(config_path.read_text())
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    if args.chains is not None:
        config = replace(config, n_chains=args.chains)

    sampler = config.sampler
    print(f"Config hash:   {full_config_hash(config)}")
    print(f"Model hash:    {model_config_hash(config)}")
    print()
    print(f"Prior:    SS0={config.prior.ss0}, nu0={config.prior.nu0}, "
          f"mu0={config.prior.mu0}, n0={config.prior.n0}")
    print(f"Sampler:  K_max={sampler.K_max}, eta0={sampler.eta0}, "
          f"iterations={sampler.iterations}, burn_in={sampler.burn_in}, "
          f"record_trace={sampler.record_trace}")
    print(f"Chains:   {config.n_chains} (jobs={args.jobs})")
    print(f"Seed:     {config.seed}")

    if args.dry_run:
        source = weights_path if weights_path is not None else "simulation block"
        print("\nRun plan:")
        print(f"  1. Weights: {source}")
        print(f"  2. Gibbs sampling: {config.n_chains} chain(s) x "
              f"{sampler.iterations} sweeps")
        print(f"  3. Save chain.npz + metadata.json under {args.results_dir}/")
        print("\n[dry-run] Config loaded successfully. Exiting.")
        return

    try:
        run_pipeline(config, weights_path, args.results_dir, n_jobs=args.jobs)
    except Exception:
        log.exception("Run failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
