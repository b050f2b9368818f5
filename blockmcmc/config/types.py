"""Type Definitions for the blockmcmc Configuration System
=======================================================

TypedDict definitions for configuration structures and the column
conventions of parameter tables.
"""

from typing import Any, TypedDict


class ParameterRowDict(TypedDict, total=False):
    """One row of a parameter table.

    Attributes
    ----------
    name : str
        Parameter name (column in the chain file)
    value : float
        Initial value
    lower_bound, upper_bound : float
        Inclusive bounds of the parameter
    step : float
        Univariate proposal standard deviation (parameter units)
    fixed : bool
        Fixed parameters are never proposed
    block : int or str
        Block identifier for multivariate updates
    """

    name: str
    value: float
    lower_bound: float
    upper_bound: float
    step: float
    fixed: bool
    block: Any


class MCMCSettingsDict(TypedDict, total=False):
    """``mcmc`` section of the configuration."""

    iterations: int
    popt: float
    opt_freq: int
    thin: int
    burnin: int
    adaptive_period: int
    save_block: int
    seed: int


class MultivariateSettingsDict(TypedDict, total=False):
    """``multivariate`` section of the configuration."""

    covariance: list[list[float]]
    weighting: float
    scale: float
    covariance_phase_start: float
    scale_phase_start: float
    tuning_tolerance: float


class OutputSettingsDict(TypedDict, total=False):
    """``output`` section of the configuration."""

    filename: str


class RunConfigDict(TypedDict, total=False):
    """Complete run configuration."""

    metadata: dict[str, Any]
    parameters: list[ParameterRowDict]
    parameter_table: str
    mcmc: MCMCSettingsDict
    multivariate: MultivariateSettingsDict
    output: OutputSettingsDict
    logging: dict[str, Any]


# Required keys of the ``mcmc`` section
REQUIRED_MCMC_KEYS = (
    "iterations",
    "popt",
    "opt_freq",
    "thin",
    "adaptive_period",
    "save_block",
)

# Required keys of the ``multivariate`` section
REQUIRED_MULTIVARIATE_KEYS = ("covariance", "weighting", "scale")

# Canonical parameter-table columns
PARAMETER_COLUMNS = (
    "name",
    "value",
    "lower_bound",
    "upper_bound",
    "step",
    "fixed",
    "block",
)

# Plural column names used by legacy parameter tables
PARAMETER_COLUMN_ALIASES = {
    "names": "name",
    "values": "value",
    "lower_bounds": "lower_bound",
    "upper_bounds": "upper_bound",
    "steps": "step",
    "blocks": "block",
}

DEFAULT_BLOCK = 1
