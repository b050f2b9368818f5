"""Proposal adaptation during the adaptive period.

The ``Adapter`` decides *when* to adapt (every ``opt_freq``-th adaptive
iteration, in which phase of the adaptive period) and provides the tuning
rules; each proposal strategy decides *what* its own state looks like
after a checkpoint (see ``ProposalStrategy.adapt``).

Tuning rule
-----------
Step sizes and block scales are rescaled with

    value * Phi^-1(popt / 2) / Phi^-1(pcur / 2)

where Phi^-1 is the standard normal quantile function. Both quantiles are
negative, so the factor is positive; it is above one when the observed
acceptance rate ``pcur`` exceeds the target ``popt`` and below one otherwise.
``pcur`` is clamped to [0.01, 0.99] so that a checkpoint without any
acceptance (or without any rejection) still gives a finite factor.
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import TYPE_CHECKING

import numpy as np
from scipy.stats import norm

from blockmcmc.utils.logging import get_logger

if TYPE_CHECKING:
    from blockmcmc.mcmc.proposals import ProposalStrategy

logger = get_logger(__name__)

PCUR_FLOOR = 0.01
PCUR_CEILING = 0.99
PSD_TOLERANCE = 1e-10


def scale_tuning(value: float, popt: float, pcur: float) -> float:
    """Rescale a step size or scale multiplier toward the target acceptance rate.

    Parameters
    ----------
    value : float
        Current (positive) step size or scale.
    popt : float
        Target acceptance rate in (0, 1).
    pcur : float
        Observed acceptance rate since the last checkpoint.

    Returns
    -------
    float
        The retuned value, strictly positive.
    """
    pcur = min(max(pcur, PCUR_FLOOR), PCUR_CEILING)
    return float(value * norm.ppf(popt / 2.0) / norm.ppf(pcur / 2.0))


def is_positive_semidefinite(matrix: np.ndarray, tol: float = PSD_TOLERANCE) -> bool:
    """Check that a symmetric matrix is finite, PSD and not identically zero."""
    if not np.all(np.isfinite(matrix)):
        return False
    eigenvalues = np.linalg.eigvalsh(matrix)
    largest = float(np.max(np.abs(eigenvalues)))
    if largest == 0.0:
        return False
    return bool(eigenvalues.min() >= -tol * max(1.0, largest))


def empirical_covariance(samples: np.ndarray) -> np.ndarray:
    """Sample covariance of the rows of ``samples`` as a 2-D matrix."""
    samples = np.asarray(samples, dtype=float)
    return np.atleast_2d(np.cov(samples, rowvar=False))


def learn_covariance(
    old: np.ndarray,
    samples: np.ndarray,
    weighting: float,
    block: Hashable = None,
) -> np.ndarray:
    """Blend the empirical covariance of ``samples`` into ``old``.

    ``cov = w * cov_new + (1 - w) * cov_old``. If the blended matrix is not
    positive semi-definite the previous covariance is kept.
    """
    if samples.shape[0] < 2:
        return old

    blended = weighting * empirical_covariance(samples) + (1.0 - weighting) * old
    blended = 0.5 * (blended + blended.T)

    if not is_positive_semidefinite(blended):
        logger.warning(
            f"Blended covariance for block {block} is not positive semi-definite; "
            "keeping previous covariance"
        )
        return old
    return blended


class Adapter:
    """Schedule and rules for tuning proposals during the adaptive period.

    Parameters
    ----------
    popt : float
        Target acceptance rate.
    opt_freq : int
        Checkpoint spacing in adaptive iterations.
    adaptive_period : int
        Number of adaptive iterations.
    n_free : int
        Number of free parameters (width of the adaptation history).
    record_history : bool
        Keep every adaptive state for covariance learning.
    covariance_phase_start, scale_phase_start : float
        Phase boundaries as fractions of the adaptive period.
    tuning_tolerance : float
        Relative deviation from ``popt`` tolerated before a scale is retuned.
    """

    def __init__(
        self,
        popt: float,
        opt_freq: int,
        adaptive_period: int,
        n_free: int,
        record_history: bool = False,
        covariance_phase_start: float = 0.2,
        scale_phase_start: float = 0.8,
        tuning_tolerance: float = 0.1,
    ):
        self.popt = popt
        self.opt_freq = opt_freq
        self.adaptive_period = adaptive_period
        self.covariance_phase_start = covariance_phase_start
        self.scale_phase_start = scale_phase_start
        self.tuning_tolerance = tuning_tolerance
        self.chain_index = 0
        self.n_checkpoints = 0
        self.history = np.empty((adaptive_period, n_free)) if record_history else None

    def step(self, free_values: np.ndarray, strategy: ProposalStrategy) -> bool:
        """Register one adaptive iteration and adapt at checkpoints.

        Returns
        -------
        bool
            True if this iteration was an adaptation checkpoint.
        """
        if self.history is not None:
            self.history[self.chain_index] = free_values
        self.chain_index += 1

        if self.chain_index % self.opt_freq != 0:
            return False

        rates = strategy.counters.acceptance_rates()
        strategy.adapt(self, rates)
        strategy.counters.reset()
        self.n_checkpoints += 1
        return True

    def tune(self, value: float, pcur: float) -> float:
        return scale_tuning(value, self.popt, pcur)

    def needs_scale_tuning(self, pcur: float) -> bool:
        return abs(pcur - self.popt) > self.tuning_tolerance * self.popt

    def in_covariance_phase(self) -> bool:
        return (
            self.covariance_phase_start * self.adaptive_period
            < self.chain_index
            < self.scale_phase_start * self.adaptive_period
        )

    def in_scale_phase(self) -> bool:
        return self.chain_index > self.scale_phase_start * self.adaptive_period

    def recorded(self, positions: np.ndarray) -> np.ndarray:
        """Adaptive states recorded so far, restricted to ``positions``."""
        if self.history is None:
            raise RuntimeError("Adapter was created without an adaptation history")
        return self.history[: self.chain_index][:, positions]
