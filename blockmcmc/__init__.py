"""blockmcmc: Adaptive Metropolis-within-Gibbs MCMC
================================================

A sampler for user-supplied log-posterior functions over bounded,
partially-fixed parameter vectors.

Key Features:
- Univariate Gaussian proposals, one free parameter at a time
- Block multivariate Gaussian proposals with learned covariance
- Step/scale tuning towards a target acceptance rate during an adaptive period
- Incremental CSV chain output in fixed-size blocks

Quick Start:
    >>> from blockmcmc import ConfigManager, create_posterior, run_mcmc
    >>>
    >>> config = ConfigManager("run.yaml")
    >>> space = config.get_parameter_space()
    >>> posterior = create_posterior(my_loglikelihood, space, data=observations)
    >>>
    >>> result = run_mcmc(space, posterior, config.get_mcmc_config(), "results/run")
    >>> print(result.steps, result.acceptance_rates)
"""

__version__ = "0.1.0"

from blockmcmc.config import ConfigManager, ParameterRecord, ParameterSpace
from blockmcmc.exceptions import ChainWriteError, MCMCConfigurationError, MCMCError
from blockmcmc.io import ChainWriter, load_chain, summarize_chain
from blockmcmc.mcmc import (
    MCMCConfig,
    MCMCResult,
    MultivariateConfig,
    create_posterior,
    run_mcmc,
)
from blockmcmc.utils.logging import configure_logging, get_logger

__all__ = [
    "__version__",
    # Sampling
    "run_mcmc",
    "MCMCResult",
    "MCMCConfig",
    "MultivariateConfig",
    "create_posterior",
    # Configuration
    "ConfigManager",
    "ParameterSpace",
    "ParameterRecord",
    # Chain I/O
    "ChainWriter",
    "load_chain",
    "summarize_chain",
    # Errors
    "MCMCError",
    "MCMCConfigurationError",
    "ChainWriteError",
    # Logging
    "configure_logging",
    "get_logger",
]
