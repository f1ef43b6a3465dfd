"""Tests for the Gibbs driver: invariants, determinism, traces and recovery."""

from dataclasses import replace
from unittest.mock import patch

import numpy as np
import pytest

from dpwsbm.config.experiment import (
    ExperimentConfig,
    PriorConfig,
    SamplerConfig,
    SimulationConfig,
)
from dpwsbm.network import InvalidInputError, fisher_transform, simulate_wsbm
from dpwsbm.sampler import block_params, stick_breaking
from dpwsbm.sampler.chains import run_chains
from dpwsbm.sampler.errors import NumericDegeneracyError
from dpwsbm.sampler.gibbs import auto_wsbm, gibbs_sweep, initialize_chain, run_gibbs
from dpwsbm.sampler.statistics import compute_block_statistics, label_counts


def _small_network(n: int = 24, K: int = 3, seed: int = 0) -> np.ndarray:
    cfg = SimulationConfig(
        n=n, K=K, mu_within=(0.7, 0.5, 0.3)[:K], mu_between=0.0, variance=0.05
    )
    return simulate_wsbm(cfg, np.random.default_rng(seed)).weights


def _majority_vote(trace: np.ndarray, K_max: int) -> np.ndarray:
    """Most frequent label of every node over the rows of trace."""
    n = trace.shape[1]
    votes = np.zeros((n, K_max), dtype=np.int64)
    for row in trace:
        votes[np.arange(n), row] += 1
    return votes.argmax(axis=1)


def _pairwise_agreement(a: np.ndarray, b: np.ndarray) -> float:
    """Fraction of node pairs on which two partitions agree (Rand index)."""
    iu = np.triu_indices(a.size, k=1)
    same_a = (a[:, None] == a[None, :])[iu]
    same_b = (b[:, None] == b[None, :])[iu]
    return float((same_a == same_b).mean())


class TestInitialization:
    def test_initial_partition_consistent_with_counts(self) -> None:
        W_f = fisher_transform(_small_network())
        for seed in range(20):
            state = initialize_chain(W_f, 6, PriorConfig(), np.random.default_rng(seed))
            assert state.partition.max() < 6
            assert state.counts.sum() == W_f.shape[0]
            assert np.array_equal(state.counts, label_counts(state.partition, 6))

    def test_initial_parameters_positive_variance(self) -> None:
        W_f = fisher_transform(_small_network())
        state = initialize_chain(W_f, 5, PriorConfig(), np.random.default_rng(1))
        iu = np.triu_indices(5)
        assert np.all(state.parameters.variance[iu] > 0)


class TestSweepInvariants:
    def test_counts_and_mixture_weights_every_sweep(self) -> None:
        """Counts sum to n and stick weights sum to 1 at every sweep."""
        W = _small_network()
        n = W.shape[0]
        seen = []
        real = stick_breaking.sample_stick_breaking

        def spy(counts, eta0, rng):
            state = real(counts, eta0, rng)
            seen.append((int(counts.sum()), float(state.alpha.sum())))
            return state

        with patch("dpwsbm.sampler.gibbs.sample_stick_breaking", side_effect=spy):
            run_gibbs(W, SamplerConfig(K_max=5, iterations=20), seed=3)

        assert len(seen) == 20
        for total, alpha_sum in seen:
            assert total == n
            assert alpha_sum == pytest.approx(1.0, abs=1e-12)

    def test_sweep_does_not_mutate_previous_state(self) -> None:
        W_f = fisher_transform(_small_network())
        rng = np.random.default_rng(4)
        state = initialize_chain(W_f, 4, PriorConfig(), rng)
        partition, counts = state.partition.copy(), state.counts.copy()
        mean = state.parameters.mean.copy()
        new = gibbs_sweep(state, W_f, 1.0, PriorConfig(), rng, sweep=0)
        assert new is not state
        assert np.array_equal(state.partition, partition)
        assert np.array_equal(state.counts, counts)
        assert np.array_equal(state.parameters.mean, mean)

    def test_statistics_match_new_partition(self) -> None:
        W_f = fisher_transform(_small_network())
        rng = np.random.default_rng(5)
        state = initialize_chain(W_f, 4, PriorConfig(), rng)
        new = gibbs_sweep(state, W_f, 1.0, PriorConfig(), rng, sweep=0)
        expected = compute_block_statistics(new.partition, W_f, 4)
        assert np.array_equal(new.statistics.counts, expected.counts)
        np.testing.assert_allclose(new.statistics.sums, expected.sums)


class TestTraces:
    def test_trace_shapes(self) -> None:
        W = _small_network()
        result = run_gibbs(W, SamplerConfig(K_max=4, iterations=10), seed=0)
        assert result.partition_trace.shape == (10, W.shape[0])
        assert result.burn_in == 5
        assert result.mean_trace.shape == (5, 4, 4)
        assert result.variance_trace.shape == (5, 4, 4)
        assert np.array_equal(result.partition, result.partition_trace[-1])
        assert np.array_equal(result.mean, result.mean_trace[-1])
        assert np.array_equal(result.variance, result.variance_trace[-1])
        assert result.log_posterior_trace is None
        assert result.initial_log_likelihood is None
        assert result.seed == 0

    def test_record_trace_diagnostics(self) -> None:
        result = auto_wsbm(_small_network(), K_max=4, eta0=1.0, iterations=8,
                           record_trace=True, seed=1)
        assert result.log_posterior_trace.shape == (8,)
        assert np.all(np.isfinite(result.log_posterior_trace))
        assert np.isfinite(result.initial_log_likelihood)

    def test_zero_burn_in_records_every_sweep(self) -> None:
        cfg = SamplerConfig(K_max=3, iterations=6, burn_in_fraction=0.0)
        result = run_gibbs(_small_network(), cfg, seed=2)
        assert result.mean_trace.shape[0] == 6

    def test_variances_positive_on_upper_triangle(self) -> None:
        result = run_gibbs(_small_network(), SamplerConfig(K_max=5, iterations=10), seed=3)
        iu = np.triu_indices(5)
        assert np.all(result.variance_trace[:, iu[0], iu[1]] > 0)

    def test_progress_logged(self, caplog) -> None:
        with caplog.at_level("INFO", logger="dpwsbm.sampler.gibbs"):
            run_gibbs(_small_network(), SamplerConfig(K_max=3, iterations=20), seed=0)
        progress = [r for r in caplog.records if "of sweeps done" in r.getMessage()]
        assert len(progress) == 10

    @pytest.mark.parametrize(
        "iterations, expected",
        [
            (5, ["0%", "20%", "40%", "60%", "80%"]),
            (15, ["0%", "13%", "20%", "33%", "40%", "53%", "60%", "73%", "80%", "93%"]),
        ],
    )
    def test_progress_reports_actual_percentage(self, caplog, iterations, expected) -> None:
        with caplog.at_level("INFO", logger="dpwsbm.sampler.gibbs"):
            run_gibbs(
                _small_network(), SamplerConfig(K_max=3, iterations=iterations), seed=0
            )
        percents = [
            r.getMessage().split()[0]
            for r in caplog.records
            if "of sweeps done" in r.getMessage()
        ]
        assert percents == expected


class TestDeterminism:
    def test_same_seed_same_chain(self) -> None:
        W = _small_network()
        cfg = SamplerConfig(K_max=5, iterations=15, record_trace=True)
        a = run_gibbs(W, cfg, seed=7)
        b = run_gibbs(W, cfg, seed=7)
        assert np.array_equal(a.partition_trace, b.partition_trace)
        assert np.array_equal(a.mean_trace, b.mean_trace)
        assert np.array_equal(a.variance_trace, b.variance_trace)
        assert np.array_equal(a.log_posterior_trace, b.log_posterior_trace)

    def test_different_seed_different_chain(self) -> None:
        W = _small_network()
        cfg = SamplerConfig(K_max=5, iterations=5)
        a = run_gibbs(W, cfg, seed=7)
        b = run_gibbs(W, cfg, seed=8)
        assert not np.array_equal(a.mean_trace, b.mean_trace)

    def test_generator_seed_accepted(self) -> None:
        W = _small_network()
        cfg = SamplerConfig(K_max=3, iterations=5)
        a = run_gibbs(W, cfg, seed=np.random.default_rng(11))
        b = run_gibbs(W, cfg, seed=11)
        assert np.array_equal(a.partition_trace, b.partition_trace)
        assert a.seed is None


class TestDegenerateCases:
    def test_single_label_truncation(self) -> None:
        W = _small_network()
        n = W.shape[0]
        result = run_gibbs(W, SamplerConfig(K_max=1, iterations=10), seed=0)
        assert np.all(result.partition_trace == 0)

        W_f = fisher_transform(W)
        stats = compute_block_statistics(result.partition, W_f, 1)
        iu = np.triu_indices(n, k=1)
        assert stats.counts[0, 0] == n * (n - 1) // 2
        assert stats.sums[0, 0] == pytest.approx(W_f[iu].sum())

    def test_all_zero_weights(self) -> None:
        """No signal: no community is opened and used block means sit near 0."""
        n, K_max = 30, 5
        W = np.zeros((n, n))
        result = run_gibbs(W, SamplerConfig(K_max=K_max, iterations=100), seed=4)

        active = result.active_communities()
        assert np.all(np.diff(active) <= 0)

        stats = compute_block_statistics(result.partition, W, K_max)
        used = stats.counts >= 20
        assert used.any()
        assert np.all(np.abs(result.mean[used]) < 0.05)


class TestFailures:
    def test_invalid_matrix_rejected_before_sampling(self) -> None:
        W = _small_network()
        W[0, 1] = 1.0
        with patch("dpwsbm.sampler.gibbs.initialize_chain") as init:
            with pytest.raises(InvalidInputError):
                run_gibbs(W, SamplerConfig(K_max=3, iterations=5), seed=0)
        init.assert_not_called()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"K_max": 0, "eta0": 1.0},
            {"K_max": 3, "eta0": 0.0},
            {"K_max": 3, "eta0": 1.0, "iterations": 0},
            {"K_max": 2.0, "eta0": 1.0},
            {"K_max": 3, "eta0": 1.0, "iterations": 10.5},
        ],
    )
    def test_invalid_chain_parameters(self, kwargs) -> None:
        with pytest.raises(ValueError):
            auto_wsbm(_small_network(), **kwargs)

    def test_degeneracy_propagates_with_sweep(self) -> None:
        real = block_params.sample_block_parameters

        def flaky(stats, prior, rng, sweep=None):
            if sweep == 2:
                raise NumericDegeneracyError(
                    "Block variance degenerated", sweep=sweep, block=(0, 1)
                )
            return real(stats, prior, rng, sweep=sweep)

        with patch("dpwsbm.sampler.gibbs.sample_block_parameters", side_effect=flaky):
            with pytest.raises(NumericDegeneracyError) as excinfo:
                run_gibbs(_small_network(), SamplerConfig(K_max=3, iterations=10), seed=0)
        assert excinfo.value.sweep == 2
        assert excinfo.value.block == (0, 1)


class TestRecovery:
    def test_four_planted_blocks_recovered(self) -> None:
        """Four blocks of 25 nodes are recovered by majority vote.

        Several seeded chains are run and the one with the highest mean
        post-burn-in log-posterior is kept, since a single chain can stay
        with two planted blocks merged under one label.
        """
        sim = SimulationConfig(
            n=100, K=4, mu_within=(0.8, 0.6, 0.4, 0.2), mu_between=0.0, variance=0.02
        )
        network = simulate_wsbm(sim, np.random.default_rng(2024))
        config = ExperimentConfig(
            sampler=SamplerConfig(K_max=10, iterations=300, record_trace=True),
            seed=11,
            n_chains=5,
        )
        chains = run_chains(network.weights, config)

        best = max(chains, key=lambda r: r.log_posterior_trace[r.burn_in:].mean())
        estimate = _majority_vote(best.partition_trace[best.burn_in:], best.K_max)
        agreement = _pairwise_agreement(estimate, network.labels)
        assert agreement >= 0.9, f"pairwise agreement {agreement:.3f}"

    def test_recovered_block_means_on_correlation_scale(self) -> None:
        """The largest-mean used block matches the strongest planted block."""
        sim = SimulationConfig(
            n=40, K=2, mu_within=(0.8, 0.3), mu_between=0.0, variance=0.02
        )
        network = simulate_wsbm(sim, np.random.default_rng(5))
        config = replace(
            ExperimentConfig(seed=3, n_chains=4),
            sampler=SamplerConfig(K_max=6, iterations=200, record_trace=True),
        )
        chains = run_chains(network.weights, config)
        best = max(chains, key=lambda r: r.log_posterior_trace[r.burn_in:].mean())

        W_f = fisher_transform(network.weights)
        stats = compute_block_statistics(best.partition, W_f, best.K_max)
        diag_used = np.flatnonzero(np.diag(stats.counts) > 0)
        top = np.tanh(best.mean_trace[:, diag_used, diag_used].mean(axis=0)).max()
        assert top == pytest.approx(0.8, abs=0.05)
