"""MCMC configuration dataclasses and validation.

This module provides ``MCMCConfig`` (settings shared by both proposal
strategies) and ``MultivariateConfig`` (extra settings that switch the
sampler to block multivariate proposals).

Example config::

    mcmc:
      iterations: 20000
      popt: 0.44
      opt_freq: 50
      thin: 1
      adaptive_period: 5000
      save_block: 500
      seed: 42
    multivariate:
      covariance: [[0.1, 0.0], [0.0, 0.1]]
      weighting: 0.5
      scale: 0.5
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from numbers import Integral, Real
from typing import Any

import numpy as np

from blockmcmc.config.types import REQUIRED_MCMC_KEYS, REQUIRED_MULTIVARIATE_KEYS
from blockmcmc.mcmc.adaptation import is_positive_semidefinite
from blockmcmc.exceptions import MCMCConfigurationError
from blockmcmc.utils.logging import get_logger

logger = get_logger(__name__)


def _require(config_dict: dict[str, Any], keys: tuple[str, ...], section: str) -> None:
    if not isinstance(config_dict, dict):
        raise MCMCConfigurationError(
            f"'{section}' settings must be a mapping, got {type(config_dict).__name__}",
            option=section,
        )
    missing = [k for k in keys if config_dict.get(k) is None]
    if missing:
        raise MCMCConfigurationError(
            f"Missing required {section} settings: {', '.join(missing)}",
            option=missing[0],
        )


def _as_int(value: Any, name: str) -> int:
    """Accept integers and integral floats (YAML ``1e4``)."""
    if isinstance(value, bool):
        raise MCMCConfigurationError(f"{name} must be an integer, got {value!r}", option=name)
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Real) and float(value).is_integer():
        return int(value)
    raise MCMCConfigurationError(f"{name} must be an integer, got {value!r}", option=name)


def _as_float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MCMCConfigurationError(f"{name} must be a number, got {value!r}", option=name)
    return float(value)


@dataclass
class MCMCConfig:
    """Settings of an adaptive Metropolis-within-Gibbs run.

    Attributes
    ----------
    iterations : int
        Length of the sampling phase (after the adaptive period).
    popt : float
        Target acceptance rate, in (0, 1).
    opt_freq : int
        Adaptation checkpoint spacing, in adaptive iterations.
    thin : int
        Record every ``thin``-th iteration.
    adaptive_period : int
        Number of initial iterations during which proposals are tuned.
    save_block : int
        Number of recorded samples buffered before each flush.
    burnin : int
        Samples with ``sampno <= burnin`` are dropped when the chain is read
        back. Does not affect sampling.
    seed : int or None
        Seed of the random generator; None draws fresh entropy.
    """

    iterations: int
    popt: float
    opt_freq: int
    thin: int
    adaptive_period: int
    save_block: int
    burnin: int = 0
    seed: int | None = None

    def __post_init__(self):
        self.validate()

    @property
    def total_iterations(self) -> int:
        return self.iterations + self.adaptive_period

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> MCMCConfig:
        """Create MCMCConfig from the ``mcmc`` configuration section.

        Raises
        ------
        MCMCConfigurationError
            If required fields are missing or invalid.
        """
        _require(config_dict, REQUIRED_MCMC_KEYS, "mcmc")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            logger.warning(f"Ignoring unknown mcmc settings: {unknown}")

        seed = config_dict.get("seed")
        return cls(
            iterations=_as_int(config_dict["iterations"], "iterations"),
            popt=_as_float(config_dict["popt"], "popt"),
            opt_freq=_as_int(config_dict["opt_freq"], "opt_freq"),
            thin=_as_int(config_dict["thin"], "thin"),
            adaptive_period=_as_int(config_dict["adaptive_period"], "adaptive_period"),
            save_block=_as_int(config_dict["save_block"], "save_block"),
            burnin=_as_int(config_dict.get("burnin", 0), "burnin"),
            seed=None if seed is None else _as_int(seed, "seed"),
        )

    def validate(self) -> None:
        """Check value ranges.

        Raises
        ------
        MCMCConfigurationError
            On the first invalid value found.
        """
        if not 0.0 < self.popt < 1.0:
            raise MCMCConfigurationError(f"popt must lie in (0, 1), got {self.popt}", option="popt")
        for name in ("opt_freq", "thin", "save_block"):
            value = getattr(self, name)
            if value < 1:
                raise MCMCConfigurationError(f"{name} must be >= 1, got {value}", option=name)
        for name in ("iterations", "adaptive_period", "burnin"):
            value = getattr(self, name)
            if value < 0:
                raise MCMCConfigurationError(f"{name} must be >= 0, got {value}", option=name)
        if self.total_iterations < 1:
            raise MCMCConfigurationError(
                "iterations + adaptive_period must be at least 1", option="iterations"
            )

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class MultivariateConfig:
    """Settings for block multivariate Gaussian proposals.

    Attributes
    ----------
    covariance : np.ndarray
        Initial proposal covariance, either over all parameters or over the
        free parameters only (in parameter-table order).
    weighting : float
        Blending weight ``w`` of the empirical covariance, in [0, 1].
    scale : float
        Initial scale multiplier, shared by every block.
    covariance_phase_start : float
        Fraction of the adaptive period after which covariance learning starts.
    scale_phase_start : float
        Fraction of the adaptive period after which covariance learning stops
        and scale tuning starts.
    tuning_tolerance : float
        Relative deviation from ``popt`` tolerated before a block's scale is
        retuned.
    """

    covariance: np.ndarray
    weighting: float
    scale: float
    covariance_phase_start: float = 0.2
    scale_phase_start: float = 0.8
    tuning_tolerance: float = 0.1

    def __post_init__(self):
        try:
            self.covariance = np.array(self.covariance, dtype=float)
        except (TypeError, ValueError) as e:
            raise MCMCConfigurationError(
                f"Covariance must be a numeric matrix: {e}", option="covariance"
            ) from e
        self.validate()

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> MultivariateConfig:
        """Create MultivariateConfig from the ``multivariate`` configuration section."""
        _require(config_dict, REQUIRED_MULTIVARIATE_KEYS, "multivariate")
        return cls(
            covariance=config_dict["covariance"],
            weighting=_as_float(config_dict["weighting"], "weighting"),
            scale=_as_float(config_dict["scale"], "scale"),
            covariance_phase_start=_as_float(
                config_dict.get("covariance_phase_start", 0.2), "covariance_phase_start"
            ),
            scale_phase_start=_as_float(
                config_dict.get("scale_phase_start", 0.8), "scale_phase_start"
            ),
            tuning_tolerance=_as_float(
                config_dict.get("tuning_tolerance", 0.1), "tuning_tolerance"
            ),
        )

    def validate(self) -> None:
        """Check the covariance shape and the scalar settings."""
        cov = self.covariance
        if cov.ndim != 2 or cov.shape[0] != cov.shape[1]:
            raise MCMCConfigurationError(
                f"Covariance must be a square matrix, got shape {cov.shape}",
                option="covariance",
            )
        if not np.all(np.isfinite(cov)):
            raise MCMCConfigurationError("Covariance contains non-finite values", option="covariance")
        if not np.allclose(cov, cov.T):
            raise MCMCConfigurationError("Covariance must be symmetric", option="covariance")
        if not is_positive_semidefinite(cov):
            raise MCMCConfigurationError(
                "Covariance must be positive semi-definite and not identically zero",
                option="covariance",
                error_context={"min_eigenvalue": float(np.linalg.eigvalsh(cov).min())},
            )
        if not 0.0 <= self.weighting <= 1.0:
            raise MCMCConfigurationError(
                f"weighting must lie in [0, 1], got {self.weighting}", option="weighting"
            )
        if not self.scale > 0.0:
            raise MCMCConfigurationError(f"scale must be positive, got {self.scale}", option="scale")
        if not 0.0 <= self.covariance_phase_start <= self.scale_phase_start <= 1.0:
            raise MCMCConfigurationError(
                "Phase boundaries must satisfy 0 <= covariance_phase_start "
                "<= scale_phase_start <= 1",
                option="scale_phase_start",
            )
        if self.tuning_tolerance < 0.0:
            raise MCMCConfigurationError(
                f"tuning_tolerance must be >= 0, got {self.tuning_tolerance}",
                option="tuning_tolerance",
            )
