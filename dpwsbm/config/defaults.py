"""Anchor configuration: the default run parameters in one place."""

from dpwsbm.config.experiment import ExperimentConfig

# Hyperparameters SS0=0.1, nu0=10, mu0=0, n0=1; K_max=10, eta0=1,
# 1000 sweeps with the first half discarded as burn-in, seed=42.
ANCHOR_CONFIG = ExperimentConfig()
