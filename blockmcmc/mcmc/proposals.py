"""Proposal strategies for Metropolis-within-Gibbs sampling.

Two interchangeable strategies share the ``ProposalStrategy`` interface:

- ``UnivariateProposal``: one free parameter per iteration, Gaussian
  random-walk offset with a per-parameter step (standard deviation, in
  parameter units).
- ``MultivariateProposal``: one block of free parameters per iteration,
  joint draw from ``N(0, scale[block] * covariance[block])``.

Both are symmetric, as required by the acceptance rule. Candidates are not
clamped to the bounds; out-of-range candidates are rejected by the
``AcceptanceController``. Units are visited round-robin through
``CyclicUnits``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable, Sequence
from typing import TYPE_CHECKING, Any

import numpy as np

from blockmcmc.config.parameter_space import ParameterSpace
from blockmcmc.exceptions import MCMCConfigurationError
from blockmcmc.mcmc.acceptance import Counters
from blockmcmc.mcmc.adaptation import learn_covariance
from blockmcmc.mcmc.config import MultivariateConfig
from blockmcmc.utils.logging import get_logger

if TYPE_CHECKING:
    from blockmcmc.mcmc.adaptation import Adapter

logger = get_logger(__name__)


class CyclicUnits:
    """Restartable round-robin iterator over proposal units."""

    def __init__(self, units: Sequence[Hashable]):
        if not units:
            raise ValueError("CyclicUnits needs at least one unit")
        self.units = list(units)
        self.position = 0

    def __iter__(self):
        return self

    def __next__(self) -> Hashable:
        unit = self.units[self.position]
        self.position = (self.position + 1) % len(self.units)
        return unit

    def reset(self) -> None:
        self.position = 0


class ProposalStrategy(ABC):
    """Common interface of the proposal strategies.

    Attributes
    ----------
    parameter_space : ParameterSpace
        Space being sampled.
    units : list
        Proposal units, visited round-robin.
    counters : Counters
        Proposed/accepted counts per unit since the last checkpoint.
    """

    kind: str = "abstract"
    needs_history: bool = False

    def __init__(self, parameter_space: ParameterSpace, units: Sequence[Hashable]):
        self.parameter_space = parameter_space
        self.units = list(units)
        self.cycle = CyclicUnits(self.units)
        self.counters = Counters(self.units)

    def propose(
        self, current: np.ndarray, rng: np.random.Generator
    ) -> tuple[Hashable, np.ndarray]:
        """Select the next unit and draw a candidate for it.

        Increments the unit's ``proposed`` counter.

        Returns
        -------
        tuple
            ``(unit, candidate)``; ``candidate`` is a new array that differs
            from ``current`` only in the coordinates of ``unit``.
        """
        unit = next(self.cycle)
        self.counters.propose(unit)
        candidate = np.array(current, dtype=float, copy=True)
        self._perturb(candidate, unit, rng)
        return unit, candidate

    @abstractmethod
    def _perturb(self, candidate: np.ndarray, unit: Hashable, rng: np.random.Generator) -> None:
        """Perturb the coordinates of ``unit`` in place."""

    @abstractmethod
    def adapt(self, adapter: Adapter, acceptance_rates: dict[Hashable, float]) -> None:
        """Retune the strategy state at an adaptation checkpoint."""

    @abstractmethod
    def tuning_state(self) -> dict[str, Any]:
        """Final tuning artifacts, returned to the caller at the end of a run."""


class UnivariateProposal(ProposalStrategy):
    """Gaussian random walk on one free parameter at a time.

    Parameters
    ----------
    parameter_space : ParameterSpace
        Space being sampled; initial steps come from its records.
    """

    kind = "univariate"

    def __init__(self, parameter_space: ParameterSpace):
        super().__init__(parameter_space, parameter_space.free_names)
        self.steps = {
            name: float(parameter_space.steps[parameter_space.index_of(name)])
            for name in self.units
        }
        self._index = {name: parameter_space.index_of(name) for name in self.units}

    def _perturb(self, candidate, unit, rng):
        candidate[self._index[unit]] += rng.normal(0.0, self.steps[unit])

    def adapt(self, adapter, acceptance_rates):
        for name, pcur in acceptance_rates.items():
            self.steps[name] = adapter.tune(self.steps[name], pcur)

        logger.debug(f"Pcur: {_format_rates(acceptance_rates)}")
        logger.debug(f"Step sizes: {_format_rates(self.steps)}")

    def tuning_state(self):
        return {"steps": dict(self.steps)}


class MultivariateProposal(ProposalStrategy):
    """Joint Gaussian proposals over blocks of free parameters.

    Parameters
    ----------
    parameter_space : ParameterSpace
        Space being sampled; blocks come from its records.
    config : MultivariateConfig
        Initial covariance (over all parameters or over the free parameters
        only), blending weight and initial scale.

    Raises
    ------
    MCMCConfigurationError
        If the covariance dimension matches neither the number of parameters
        nor the number of free parameters.
    """

    kind = "multivariate"
    needs_history = True

    def __init__(self, parameter_space: ParameterSpace, config: MultivariateConfig):
        super().__init__(parameter_space, parameter_space.blocks)
        self.weighting = config.weighting

        cov = config.covariance
        free = parameter_space.free_indices
        if cov.shape[0] == len(parameter_space):
            free_cov = cov[np.ix_(free, free)]
        elif cov.shape[0] == parameter_space.n_free:
            free_cov = cov
        else:
            raise MCMCConfigurationError(
                f"Covariance dimension {cov.shape[0]} matches neither the number of "
                f"parameters ({len(parameter_space)}) nor of free parameters "
                f"({parameter_space.n_free})",
                option="covariance",
            )

        self.covariance = {}
        self.scale = {}
        for block in self.units:
            positions = parameter_space.block_positions(block)
            self.covariance[block] = np.array(free_cov[np.ix_(positions, positions)])
            self.scale[block] = float(config.scale)

    def _perturb(self, candidate, unit, rng):
        indices = self.parameter_space.block_indices(unit)
        jump = rng.multivariate_normal(
            np.zeros(indices.size), self.scale[unit] * self.covariance[unit]
        )
        candidate[indices] += jump

    def adapt(self, adapter, acceptance_rates):
        if adapter.in_covariance_phase():
            for block in self.units:
                samples = adapter.recorded(self.parameter_space.block_positions(block))
                self.covariance[block] = learn_covariance(
                    self.covariance[block], samples, self.weighting, block
                )

        if adapter.in_scale_phase():
            for block, pcur in acceptance_rates.items():
                if adapter.needs_scale_tuning(pcur):
                    self.scale[block] = adapter.tune(self.scale[block], pcur)

        logger.debug(f"Pcur: {_format_rates(acceptance_rates)}")
        logger.debug(f"Scale: {_format_rates(self.scale)}")

    def full_covariance(self) -> np.ndarray:
        """Block-diagonal covariance over the free parameters.

        The result can be passed back as ``MultivariateConfig.covariance`` to
        start a new run from the tuned proposal.
        """
        n_free = self.parameter_space.n_free
        full = np.zeros((n_free, n_free))
        for block in self.units:
            positions = self.parameter_space.block_positions(block)
            full[np.ix_(positions, positions)] = self.covariance[block]
        return full

    def tuning_state(self):
        return {
            "covariance": {b: c.copy() for b, c in self.covariance.items()},
            "scale": dict(self.scale),
            "proposal_covariance": self.full_covariance(),
        }


def create_proposal(
    parameter_space: ParameterSpace,
    multivariate: MultivariateConfig | None = None,
) -> ProposalStrategy:
    """Build the proposal strategy for a run."""
    if multivariate is None:
        return UnivariateProposal(parameter_space)
    return MultivariateProposal(parameter_space, multivariate)


def _format_rates(values: dict[Hashable, float]) -> str:
    return "\t".join(f"{k}={v:.4g}" for k, v in values.items())
