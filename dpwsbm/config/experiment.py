"""Sampler configuration dataclasses, frozen and slotted."""

from dataclasses import dataclass, field
from numbers import Integral


@dataclass(frozen=True, slots=True)
class PriorConfig:
    """Normal-Inverse-Gamma hyperparameters shared by every block pair."""

    ss0: float = 0.1  # prior scale of the block variance
    nu0: float = 10.0  # prior degrees of freedom of the block variance
    mu0: float = 0.0  # prior mean of the block mean
    n0: float = 1.0  # prior pseudo-count of the block mean

    def __post_init__(self) -> None:
        for name in ("ss0", "nu0", "n0"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be > 0, got {value}")


@dataclass(frozen=True, slots=True)
class SamplerConfig:
    """Gibbs chain parameters."""

    K_max: int = 10  # stick-breaking truncation
    eta0: float = 1.0  # DP concentration
    iterations: int = 1000
    burn_in_fraction: float = 0.5
    record_trace: bool = False  # log-likelihood / log-posterior diagnostics

    def __post_init__(self) -> None:
        for name in ("K_max", "iterations"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Integral):
                raise ValueError(
                    f"{name} must be an integer, got {type(value).__name__}"
                )
        if self.K_max < 1:
            raise ValueError(f"K_max must be >= 1, got {self.K_max}")
        if not self.eta0 > 0:
            raise ValueError(f"eta0 must be > 0, got {self.eta0}")
        if self.iterations < 1:
            raise ValueError(
                f"iterations must be >= 1, got {self.iterations}"
            )
        if not 0.0 <= self.burn_in_fraction < 1.0:
            raise ValueError(
                f"burn_in_fraction must be in [0, 1), "
                f"got {self.burn_in_fraction}"
            )

    @property
    def burn_in(self) -> int:
        """Index of the first sweep whose block parameters are recorded."""
        return int(self.burn_in_fraction * self.iterations)


@dataclass(frozen=True, slots=True)
class SimulationConfig:
    """Planted-partition weighted network parameters.

    Means are on the correlation scale and Fisher-transformed before
    sampling; the variance is on the transformed scale.
    """

    n: int = 100
    K: int = 4
    mu_within: tuple[float, ...] = (0.8, 0.6, 0.4, 0.2)
    mu_between: float = 0.0
    variance: float = 0.1
    block_sizes: tuple[int, ...] = ()  # empty = floor(n/K), remainder last
    # full K x K overrides; when set they replace mu_within/mu_between and variance
    block_means: tuple[tuple[float, ...], ...] = ()
    block_variances: tuple[tuple[float, ...], ...] = ()


@dataclass(frozen=True, slots=True)
class ExperimentConfig:
    """Top-level run configuration composing all sub-configs.

    Cross-parameter validation runs in __post_init__ to reject invalid
    configurations before any sampling starts.
    """

    prior: PriorConfig = field(default_factory=PriorConfig)
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    simulation: SimulationConfig | None = None
    seed: int = 42
    n_chains: int = 1
    description: str = ""
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.n_chains < 1:
            raise ValueError(f"n_chains must be >= 1, got {self.n_chains}")
        sim = self.simulation
        if sim is None:
            return
        if sim.K < 1 or sim.n < sim.K:
            raise ValueError(
                f"simulation needs 1 <= K <= n, got n={sim.n}, K={sim.K}"
            )
        if sim.block_sizes and (
            len(sim.block_sizes) != sim.K or sum(sim.block_sizes) != sim.n
        ):
            raise ValueError(
                f"block_sizes {sim.block_sizes} must have K={sim.K} "
                f"entries summing to n={sim.n}"
            )

        if sim.block_means:
            _check_block_matrix("block_means", sim.block_means, sim.K)
            means = tuple(m for row in sim.block_means for m in row)
        else:
            if len(sim.mu_within) != sim.K:
                raise ValueError(
                    f"mu_within has {len(sim.mu_within)} entries, "
                    f"expected K={sim.K}"
                )
            means = (*sim.mu_within, sim.mu_between)
        if any(abs(m) >= 1.0 for m in means):
            raise ValueError(
                "simulation means are correlations and must lie in (-1, 1)"
            )

        if sim.block_variances:
            _check_block_matrix("block_variances", sim.block_variances, sim.K)
            variances = tuple(v for row in sim.block_variances for v in row)
        else:
            variances = (sim.variance,)
        if not all(v > 0 for v in variances):
            raise ValueError(
                f"simulation variances must be > 0, got {variances}"
            )


def _check_block_matrix(
    name: str, matrix: tuple[tuple[float, ...], ...], K: int
) -> None:
    """Require a symmetric K x K nested tuple."""
    if len(matrix) != K or any(len(row) != K for row in matrix):
        raise ValueError(f"{name} must be a {K} x {K} matrix")
    for k in range(K):
        for kk in range(k + 1, K):
            if matrix[k][kk] != matrix[kk][k]:
                raise ValueError(
                    f"{name} must be symmetric: entry ({k}, {kk}) is "
                    f"{matrix[k][kk]} but ({kk}, {k}) is {matrix[kk][k]}"
                )
