"""
Pytest Configuration and Fixtures for blockmcmc
===============================================

Shared fixtures, configuration, and test utilities for the entire test suite.
"""

import tempfile
from pathlib import Path

import numpy as np
import pytest

from blockmcmc.config.parameter_space import ParameterSpace
from blockmcmc.mcmc.config import MCMCConfig
from blockmcmc.utils.logging import configure_logging

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for workflows")
    config.addinivalue_line("markers", "mcmc: MCMC statistical tests")
    config.addinivalue_line("markers", "slow: Slow tests (> 5 seconds)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = Path(str(item.fspath))
        if "unit" in path.parts:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path.parts:
            item.add_marker(pytest.mark.integration)
        elif "mcmc" in path.parts:
            item.add_marker(pytest.mark.mcmc)
            item.add_marker(pytest.mark.slow)


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True, scope="function")
def reset_logging_level():
    """Restore the package log level between tests.

    CLI tests change the level through --verbose, --quiet or the config file.
    """
    yield
    configure_logging("INFO")


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(12345)


# ============================================================================
# Parameter Space Fixtures
# ============================================================================


@pytest.fixture
def simple_space():
    """Three parameters, the middle one fixed, all in block 1."""
    return ParameterSpace.from_arrays(
        names=["a", "b", "c"],
        values=[0.0, 1.0, 2.0],
        lower_bounds=[-5.0, -5.0, -5.0],
        upper_bounds=[5.0, 5.0, 5.0],
        steps=[0.5, 0.5, 0.5],
        fixed=[False, True, False],
    )


@pytest.fixture
def blocked_space():
    """Four parameters in two blocks, one fixed parameter in block 2."""
    return ParameterSpace.from_arrays(
        names=["mu", "dp", "tp", "sigma"],
        values=[0.0, 0.0, 0.0, 0.5],
        lower_bounds=[-10.0, -10.0, -10.0, 0.0],
        upper_bounds=[10.0, 10.0, 10.0, 1.0],
        steps=[1.0, 1.0, 1.0, 0.1],
        fixed=[False, False, False, True],
        blocks=[1, 1, 2, 2],
    )


@pytest.fixture
def quick_mcmc_config():
    """Small run: 100 adaptive + 200 sampling iterations."""
    return MCMCConfig(
        iterations=200,
        popt=0.44,
        opt_freq=20,
        thin=1,
        adaptive_period=100,
        save_block=50,
        seed=42,
    )


@pytest.fixture
def standard_normal_posterior():
    """Independent standard normal log-density (up to a constant)."""

    def posterior(values):
        return -0.5 * float(np.sum(np.asarray(values) ** 2))

    return posterior


@pytest.fixture
def run_config_dict():
    """Complete run configuration dictionary with inline parameters."""
    return {
        "metadata": {"config_version": "1.0"},
        "parameters": [
            {"name": "a", "value": 0.0, "lower_bound": -5.0, "upper_bound": 5.0, "step": 0.5},
            {"name": "b", "value": 1.0, "lower_bound": -5.0, "upper_bound": 5.0, "step": 0.5,
             "fixed": True},
            {"name": "c", "value": 2.0, "lower_bound": -5.0, "upper_bound": 5.0, "step": 0.5,
             "block": 2},
        ],
        "mcmc": {
            "iterations": 200,
            "popt": 0.44,
            "opt_freq": 20,
            "thin": 2,
            "adaptive_period": 100,
            "save_block": 25,
            "seed": 7,
        },
        "output": {"filename": "results/run"},
        "logging": {"level": "WARNING"},
    }
