"""Custom exceptions for the blockmcmc sampler.

This module defines the exception hierarchy for faults that terminate a
sampling run. Expected statistical outcomes (a candidate outside the
parameter bounds, a non-finite posterior) are never raised: they are
counted as rejected proposals.

Exception Hierarchy:
    MCMCError (base)
    ├── MCMCConfigurationError (invalid settings, detected before sampling)
    └── ChainWriteError (chain file could not be created or appended)

Examples
--------
>>> try:
...     result = run_mcmc(space, posterior, mcmc_config, "results/run")
... except MCMCConfigurationError as e:
...     logger.error(f"Invalid sampler settings: {e}")
... except ChainWriteError as e:
...     logger.error(f"Chain could not be saved: {e.path}")
"""

from __future__ import annotations

from pathlib import Path


class MCMCError(Exception):
    """Base exception for all sampler errors.

    Attributes
    ----------
    error_context : dict
        Additional context about the error (option names, shapes, paths).
    """

    def __init__(self, message: str, error_context: dict | None = None):
        super().__init__(message)
        self.error_context = error_context or {}

    def __str__(self) -> str:
        """Return formatted error message with context."""
        base_msg = super().__str__()
        if self.error_context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.error_context.items())
            return f"{base_msg} (context: {context_str})"
        return base_msg


class MCMCConfigurationError(MCMCError):
    """Raised when sampler settings are missing or inconsistent.

    Common Causes
    -------------
    - Missing required MCMC option (iterations, popt, opt_freq, ...)
    - Parameter arrays of different lengths
    - Initial value outside its bounds
    - Covariance matrix that is not square or has the wrong dimension

    Attributes
    ----------
    option : str or None
        Name of the offending configuration option, when known.
    """

    def __init__(
        self,
        message: str,
        option: str | None = None,
        error_context: dict | None = None,
    ):
        context = error_context or {}
        if option is not None:
            context["option"] = option
        super().__init__(message, context)
        self.option = option


class ChainWriteError(MCMCError):
    """Raised when the chain file cannot be created or appended.

    A flush is all-or-nothing: when this is raised no partial row has been
    written by the failing flush.

    Attributes
    ----------
    path : Path
        Chain file that could not be written.
    """

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        error_context: dict | None = None,
    ):
        context = error_context or {}
        if path is not None:
            context["path"] = str(path)
        super().__init__(message, context)
        self.path = Path(path) if path is not None else None
