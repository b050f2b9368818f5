"""Metropolis acceptance and per-unit acceptance counters.

The acceptance rule assumes a symmetric proposal: no Hastings correction
is applied. Candidates outside the parameter bounds and candidates whose
posterior is not finite are rejected; neither raises.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass

import numpy as np

from blockmcmc.config.parameter_space import ParameterSpace

PosteriorFunction = Callable[[np.ndarray], float]


class Counters:
    """Proposed/accepted tallies for each proposal unit."""

    def __init__(self, units: Iterable[Hashable]):
        self.units = list(units)
        self.proposed = {u: 0 for u in self.units}
        self.accepted = {u: 0 for u in self.units}

    def propose(self, unit: Hashable) -> None:
        self.proposed[unit] += 1

    def accept(self, unit: Hashable) -> None:
        self.accepted[unit] += 1

    def reset(self) -> None:
        for u in self.units:
            self.proposed[u] = 0
            self.accepted[u] = 0

    def acceptance_rates(self) -> dict[Hashable, float]:
        """Acceptance rate of every unit with at least one proposal."""
        return {
            u: self.accepted[u] / self.proposed[u] for u in self.units if self.proposed[u] > 0
        }


@dataclass
class AcceptanceOutcome:
    """Result of one accept/reject decision."""

    values: np.ndarray
    log_posterior: float
    accepted: bool
    evaluated: bool


class AcceptanceController:
    """Apply the Metropolis criterion to candidates.

    Parameters
    ----------
    posterior : callable
        Log-posterior oracle, ``posterior(values) -> float``.
    parameter_space : ParameterSpace
        Provides the inclusive bounds of the free parameters.
    rng : np.random.Generator
        Source of the uniform draws.
    """

    def __init__(
        self,
        posterior: PosteriorFunction,
        parameter_space: ParameterSpace,
        rng: np.random.Generator,
    ):
        self.posterior = posterior
        self.parameter_space = parameter_space
        self.rng = rng

    def evaluate(self, values: np.ndarray) -> float:
        """Evaluate the oracle and coerce its result to float."""
        return float(self.posterior(values))

    def decide(
        self,
        current_values: np.ndarray,
        current_log_posterior: float,
        candidate: np.ndarray,
        unit: Hashable,
        counters: Counters,
    ) -> AcceptanceOutcome:
        """Accept or reject ``candidate`` against the current state.

        Returns
        -------
        AcceptanceOutcome
            The new current state (the candidate on acceptance, otherwise the
            unchanged current state).
        """
        rejected = AcceptanceOutcome(current_values, current_log_posterior, False, False)

        if not self.parameter_space.in_bounds(candidate):
            return rejected

        new_log_posterior = self.evaluate(candidate)
        rejected.evaluated = True
        if not np.isfinite(new_log_posterior):
            return rejected

        log_ratio = min(new_log_posterior - current_log_posterior, 0.0)
        if not np.isfinite(log_ratio):
            return rejected

        if np.log(self.rng.random()) < log_ratio:
            counters.accept(unit)
            return AcceptanceOutcome(candidate, new_log_posterior, True, True)
        return rejected
