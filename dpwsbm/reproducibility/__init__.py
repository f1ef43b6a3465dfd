"""Reproducibility infrastructure: seed management and code provenance tracking."""

from dpwsbm.reproducibility.seed import chain_seeds, make_rng, verify_seed_determinism
from dpwsbm.reproducibility.git_hash import get_git_hash

__all__ = [
    "chain_seeds",
    "make_rng",
    "verify_seed_determinism",
    "get_git_hash",
]
