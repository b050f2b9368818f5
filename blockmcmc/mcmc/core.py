"""Adaptive Metropolis-within-Gibbs sampler.

``run_mcmc`` drives the sampling loop for ``iterations + adaptive_period``
iterations. Each iteration:

1. the proposal strategy picks the next unit (a free parameter, or a block of
   free parameters) round-robin and draws a candidate;
2. the acceptance controller rejects out-of-bounds candidates outright,
   otherwise evaluates the posterior and applies the Metropolis rule;
3. every ``thin``-th iteration the current state is recorded;
4. during the adaptive period the state is handed to the adapter, which
   retunes the proposal every ``opt_freq`` iterations;
5. the chain writer flushes whenever ``save_block`` samples are buffered.

The phase of the run is a pure function of the iteration counter:
``ADAPTING`` while ``iteration <= adaptive_period``, then ``SAMPLING``.
The tuned proposal state is returned in ``MCMCResult`` so that later runs
can start from it.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np

from blockmcmc.config.parameter_space import ParameterSpace
from blockmcmc.io.chain_writer import ChainWriter
from blockmcmc.mcmc.acceptance import AcceptanceController
from blockmcmc.mcmc.adaptation import Adapter
from blockmcmc.mcmc.config import MCMCConfig, MultivariateConfig
from blockmcmc.mcmc.proposals import create_proposal
from blockmcmc.utils.logging import get_logger, log_operation

logger = get_logger(__name__)

CHAIN_FILE_SUFFIX = "_chain.csv"


class SamplerPhase(Enum):
    """Phase of a sampling run."""

    ADAPTING = "adapting"
    SAMPLING = "sampling"
    DONE = "done"


def phase_for_iteration(iteration: int, adaptive_period: int, total_iterations: int) -> SamplerPhase:
    """Phase of the 1-based ``iteration``."""
    if iteration > total_iterations:
        return SamplerPhase.DONE
    if iteration <= adaptive_period:
        return SamplerPhase.ADAPTING
    return SamplerPhase.SAMPLING


def chain_file_path(filename: str | Path) -> Path:
    """Chain file for the output stem ``filename`` (no extension)."""
    return Path(f"{filename}{CHAIN_FILE_SUFFIX}")


@dataclass
class MCMCResult:
    """Outcome of ``run_mcmc``.

    Exactly one of ``steps`` (univariate proposals) or ``covariance``,
    ``scale`` and ``proposal_covariance`` (multivariate proposals) is populated.

    Attributes
    ----------
    chain_file : Path
        Location of the chain CSV file.
    steps : dict or None
        Final step size per free parameter.
    covariance : dict or None
        Final proposal covariance per block.
    scale : dict or None
        Final scale multiplier per block.
    proposal_covariance : np.ndarray or None
        Final block-diagonal covariance over the free parameters, ready to
        be passed as ``MultivariateConfig.covariance`` to a follow-up run.
    acceptance_rates : dict
        Acceptance rate per unit over the sampling phase (or over the last
        adaptation window when the sampling phase is empty).
    n_iterations : int
        Total number of iterations run.
    n_recorded : int
        Number of rows written to the chain file.
    computation_time : float
        Wall time of the run in seconds.
    """

    chain_file: Path
    strategy: str
    steps: dict[str, float] | None = None
    covariance: dict[Hashable, np.ndarray] | None = None
    scale: dict[Hashable, float] | None = None
    proposal_covariance: np.ndarray | None = None
    acceptance_rates: dict[Hashable, float] = field(default_factory=dict)
    n_iterations: int = 0
    n_recorded: int = 0
    computation_time: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "chain_file": str(self.chain_file),
            "strategy": self.strategy,
            "steps": self.steps,
            "covariance": (
                {str(b): c.tolist() for b, c in self.covariance.items()}
                if self.covariance is not None
                else None
            ),
            "scale": (
                {str(b): s for b, s in self.scale.items()} if self.scale is not None else None
            ),
            "proposal_covariance": (
                self.proposal_covariance.tolist()
                if self.proposal_covariance is not None
                else None
            ),
            "acceptance_rates": {str(u): r for u, r in self.acceptance_rates.items()},
            "n_iterations": self.n_iterations,
            "n_recorded": self.n_recorded,
            "computation_time": self.computation_time,
        }


def run_mcmc(
    parameter_space: ParameterSpace,
    posterior: Callable[[np.ndarray], float],
    mcmc_config: MCMCConfig,
    filename: str | Path,
    multivariate: MultivariateConfig | None = None,
    rng: np.random.Generator | None = None,
) -> MCMCResult:
    """Run the adaptive Metropolis-within-Gibbs sampler.

    Parameters
    ----------
    parameter_space : ParameterSpace
        Bounds, initial values, steps, fixed flags and blocks.
    posterior : callable
        ``posterior(values) -> float`` log-posterior. Non-finite values mark
        invalid states and are rejected.
    mcmc_config : MCMCConfig
        Iteration counts, target acceptance rate, adaptation frequency,
        thinning and flush granularity.
    filename : str or Path
        Output stem; the chain is written to ``<filename>_chain.csv``.
    multivariate : MultivariateConfig, optional
        Switches to block multivariate proposals.
    rng : np.random.Generator, optional
        Random generator; defaults to ``np.random.default_rng(mcmc_config.seed)``.

    Returns
    -------
    MCMCResult
        Chain file location and final tuning state.

    Raises
    ------
    MCMCConfigurationError
        If the proposal settings do not fit the parameter space.
    ChainWriteError
        If the chain file cannot be created or appended.
    """
    start_time = time.perf_counter()
    strategy = create_proposal(parameter_space, multivariate)
    adapter = Adapter(
        popt=mcmc_config.popt,
        opt_freq=mcmc_config.opt_freq,
        adaptive_period=mcmc_config.adaptive_period,
        n_free=parameter_space.n_free,
        record_history=strategy.needs_history,
        covariance_phase_start=multivariate.covariance_phase_start if multivariate else 0.2,
        scale_phase_start=multivariate.scale_phase_start if multivariate else 0.8,
        tuning_tolerance=multivariate.tuning_tolerance if multivariate else 0.1,
    )
    if rng is None:
        rng = np.random.default_rng(mcmc_config.seed)
    controller = AcceptanceController(posterior, parameter_space, rng)

    chain_file = chain_file_path(filename)
    total_iterations = mcmc_config.total_iterations
    free_indices = parameter_space.free_indices

    current = parameter_space.initial_values()
    current_lp = controller.evaluate(current)
    if np.isnan(current_lp):
        logger.warning("Posterior at the initial values is NaN; treating it as -inf")
        current_lp = -np.inf
    elif not np.isfinite(current_lp):
        logger.warning(f"Posterior at the initial values is not finite: {current_lp}")

    logger.info(
        f"Starting {strategy.kind} sampler: {parameter_space.n_free} free parameters, "
        f"{len(strategy.units)} units, {mcmc_config.adaptive_period} adaptive + "
        f"{mcmc_config.iterations} sampling iterations"
    )

    writer = ChainWriter(chain_file, parameter_space.names, mcmc_config.save_block)
    phase = phase_for_iteration(1, mcmc_config.adaptive_period, total_iterations)

    with log_operation(f"MCMC run -> {chain_file}", logger=logger), writer:
        for iteration in range(1, total_iterations + 1):
            next_phase = phase_for_iteration(
                iteration, mcmc_config.adaptive_period, total_iterations
            )
            if next_phase is not phase:
                logger.info(
                    f"Adaptive period finished after {adapter.n_checkpoints} checkpoints; "
                    f"sampling with final tuning: {strategy.tuning_state()}"
                )
                strategy.counters.reset()
                phase = next_phase

            unit, candidate = strategy.propose(current, rng)
            outcome = controller.decide(current, current_lp, candidate, unit, strategy.counters)
            current, current_lp = outcome.values, outcome.log_posterior

            if iteration % mcmc_config.thin == 0:
                writer.record(iteration, current, current_lp)

            if phase is SamplerPhase.ADAPTING:
                adapter.step(current[free_indices], strategy)

            if iteration % mcmc_config.save_block == 0:
                logger.debug(f"Current iteration: {iteration}")

    phase = SamplerPhase.DONE
    tuning = strategy.tuning_state()
    result = MCMCResult(
        chain_file=chain_file,
        strategy=strategy.kind,
        steps=tuning.get("steps"),
        covariance=tuning.get("covariance"),
        scale=tuning.get("scale"),
        proposal_covariance=tuning.get("proposal_covariance"),
        acceptance_rates=strategy.counters.acceptance_rates(),
        n_iterations=total_iterations,
        n_recorded=writer.n_written,
        computation_time=time.perf_counter() - start_time,
    )
    logger.info(
        f"MCMC {phase.value}: {result.n_recorded} samples written to {chain_file}, "
        f"acceptance rates {result.acceptance_rates}"
    )
    return result
