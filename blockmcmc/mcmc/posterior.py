"""Composition of the log-posterior oracle from a likelihood and a prior.

The sampler only needs ``posterior(values) -> float``. Models usually
provide a log-likelihood that needs the observed data and, optionally, a
log-prior that needs the parameter names and bounds; ``create_posterior``
binds them together.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np

from blockmcmc.config.parameter_space import ParameterSpace

LikelihoodFunction = Callable[..., float]
PriorFunction = Callable[[np.ndarray, list, ParameterSpace], float]


def create_posterior(
    likelihood: LikelihoodFunction,
    parameter_space: ParameterSpace,
    data: Any = None,
    prior: PriorFunction | None = None,
) -> Callable[[np.ndarray], float]:
    """Build the log-posterior oracle used by ``run_mcmc``.

    Parameters
    ----------
    likelihood : callable
        ``likelihood(values, data)`` when ``data`` is given, otherwise
        ``likelihood(values)``; returns a log-likelihood.
    parameter_space : ParameterSpace
        Passed to the prior together with the parameter names.
    data : any, optional
        Observed data forwarded to the likelihood.
    prior : callable, optional
        ``prior(values, names, parameter_space)``; returns a log-prior.

    Returns
    -------
    callable
        ``posterior(values) -> float``. If the prior is not finite the
        likelihood is not evaluated and the prior value is returned.

    Examples
    --------
    >>> def loglik(values, data):
    ...     return -0.5 * np.sum((data - values[0]) ** 2)
    >>> posterior = create_posterior(loglik, space, data=observations)
    >>> posterior(space.initial_values())
    """
    names = list(parameter_space.names)

    def posterior(values: np.ndarray) -> float:
        log_prior = 0.0
        if prior is not None:
            log_prior = float(prior(values, names, parameter_space))
            if not np.isfinite(log_prior):
                return log_prior
        if data is None:
            log_likelihood = float(likelihood(values))
        else:
            log_likelihood = float(likelihood(values, data))
        return log_likelihood + log_prior

    return posterior
