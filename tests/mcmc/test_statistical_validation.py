"""
MCMC Statistical Validation Tests
=================================

Long runs against targets with known moments: the tuned proposals must hit
the target acceptance rate and the chains must recover the target mean and
standard deviation.
"""

import numpy as np
import pytest

from blockmcmc.config.parameter_space import ParameterSpace
from blockmcmc.io.chain_reader import load_chain, summarize_chain
from blockmcmc.mcmc.config import MCMCConfig, MultivariateConfig
from blockmcmc.mcmc.core import run_mcmc


def _standard_normal(values):
    return -0.5 * float(np.sum(values ** 2))


@pytest.fixture
def wide_space():
    """Two free parameters with bounds far outside the posterior mass."""
    return ParameterSpace.from_arrays(
        names=["x", "y"],
        values=[0.0, 0.0],
        lower_bounds=[-50.0, -50.0],
        upper_bounds=[50.0, 50.0],
        steps=[1.0, 1.0],
    )


@pytest.mark.mcmc
@pytest.mark.slow
class TestUnivariateSampler:
    """Statistical properties of the univariate sampler."""

    def test_acceptance_rate_near_target(self, wide_space, temp_dir):
        """Test that post-adaptation acceptance is close to popt."""
        config = MCMCConfig(
            iterations=20000,
            popt=0.234,
            opt_freq=500,
            thin=1,
            adaptive_period=5000,
            save_block=1000,
            seed=2024,
        )
        result = run_mcmc(wide_space, _standard_normal, config, temp_dir / "run")
        for rate in result.acceptance_rates.values():
            assert abs(rate - 0.234) < 0.1

    def test_recovers_standard_normal(self, wide_space, temp_dir):
        """Test posterior mean and standard deviation."""
        config = MCMCConfig(
            iterations=20000,
            popt=0.44,
            opt_freq=200,
            thin=1,
            adaptive_period=4000,
            save_block=1000,
            burnin=4000,
            seed=7,
        )
        result = run_mcmc(wide_space, _standard_normal, config, temp_dir / "run")
        summary = summarize_chain(load_chain(result.chain_file, burnin=config.burnin))
        assert summary["n_samples"] == 20000
        for stats in summary["parameters"].values():
            assert stats["mean"] == pytest.approx(0.0, abs=0.15)
            assert stats["std"] == pytest.approx(1.0, abs=0.15)

    def test_scaled_target_moments(self, temp_dir):
        """Test a non-standard normal with a badly chosen initial step."""
        space = ParameterSpace.from_arrays(
            names=["mu"],
            values=[0.0],
            lower_bounds=[-100.0],
            upper_bounds=[100.0],
            steps=[0.01],
        )

        def posterior(values):
            return -0.5 * ((values[0] - 10.0) / 3.0) ** 2

        config = MCMCConfig(
            iterations=20000,
            popt=0.44,
            opt_freq=100,
            thin=2,
            adaptive_period=5000,
            save_block=500,
            burnin=5000,
            seed=11,
        )
        result = run_mcmc(space, posterior, config, temp_dir / "run")
        assert result.steps["mu"] > 1.0
        chain = load_chain(result.chain_file, burnin=config.burnin)
        assert chain["mu"].mean() == pytest.approx(10.0, abs=0.6)
        assert chain["mu"].std() == pytest.approx(3.0, abs=0.45)


@pytest.mark.mcmc
@pytest.mark.slow
class TestMultivariateSampler:
    """Statistical properties of the block multivariate sampler."""

    def test_learns_correlated_target(self, temp_dir):
        """Test covariance learning on a strongly correlated Gaussian."""
        target_cov = np.array([[1.0, 0.9], [0.9, 1.0]])
        precision = np.linalg.inv(target_cov)

        def posterior(values):
            return -0.5 * float(values @ precision @ values)

        space = ParameterSpace.from_arrays(
            names=["x", "y"],
            values=[0.0, 0.0],
            lower_bounds=[-20.0, -20.0],
            upper_bounds=[20.0, 20.0],
        )
        config = MCMCConfig(
            iterations=20000,
            popt=0.234,
            opt_freq=100,
            thin=1,
            adaptive_period=10000,
            save_block=2000,
            burnin=10000,
            seed=3,
        )
        mv = MultivariateConfig(covariance=np.eye(2) * 0.1, weighting=0.5, scale=1.0)
        result = run_mcmc(space, posterior, config, temp_dir / "run", multivariate=mv)

        learned = result.covariance[1]
        correlation = learned[0, 1] / np.sqrt(learned[0, 0] * learned[1, 1])
        assert correlation > 0.6

        chain = load_chain(result.chain_file, burnin=config.burnin)
        empirical = np.cov(chain[["x", "y"]].to_numpy(), rowvar=False)
        np.testing.assert_allclose(empirical, target_cov, atol=0.25)
        assert abs(result.acceptance_rates[1] - 0.234) < 0.15
