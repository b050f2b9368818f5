"""Command Dispatcher for the blockmcmc CLI
========================================

Loads the configuration, resolves the log-posterior reference, runs the
sampler and optionally summarises the chain.
"""

import importlib
import json
from collections.abc import Callable
from typing import Any

from blockmcmc.cli.args_parser import validate_args
from blockmcmc.config.manager import ConfigManager
from blockmcmc.exceptions import MCMCConfigurationError
from blockmcmc.io.chain_reader import load_chain, summarize_chain
from blockmcmc.mcmc.core import run_mcmc
from blockmcmc.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def load_callable(reference: str) -> Callable[..., float]:
    """Import ``module:function`` and return the function.

    Raises
    ------
    MCMCConfigurationError
        If the module cannot be imported or does not define a callable
        with that name.
    """
    module_name, sep, attr_name = reference.partition(":")
    if not sep or not module_name or not attr_name:
        raise MCMCConfigurationError(
            f"Invalid callable reference '{reference}', expected 'module:function'",
            option="posterior",
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise MCMCConfigurationError(
            f"Cannot import module '{module_name}': {e}", option="posterior"
        ) from e

    func = module
    for part in attr_name.split("."):
        func = getattr(func, part, None)
        if func is None:
            raise MCMCConfigurationError(
                f"'{module_name}' has no attribute '{attr_name}'", option="posterior"
            )
    if not callable(func):
        raise MCMCConfigurationError(
            f"'{reference}' is not callable", option="posterior"
        )
    return func


def dispatch_command(args) -> dict[str, Any]:
    """Dispatch command based on parsed CLI arguments.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command-line arguments

    Returns
    -------
    dict
        Command execution result with success status and details
    """
    logger.info("Dispatching blockmcmc sampling command")

    if not validate_args(args):
        return {"success": False, "error": "Invalid command-line arguments"}

    try:
        config = ConfigManager(args.config)
        _apply_cli_overrides(config, args)
        _configure_logging(config, args)

        space = config.get_parameter_space()
        mcmc_config = config.get_mcmc_config()
        multivariate = config.get_multivariate_config()
        posterior = load_callable(args.posterior)

        stem = config.get_output_stem()
        if args.output_dir is not None:
            stem = args.output_dir / stem.name

        result = run_mcmc(space, posterior, mcmc_config, stem, multivariate=multivariate)

        summary = None
        if args.summary:
            chain = load_chain(result.chain_file, burnin=mcmc_config.burnin)
            summary = summarize_chain(chain, space.names)
            logger.info(f"Posterior summary:\n{json.dumps(summary, indent=2)}")

        return {
            "success": True,
            "result": result,
            "summary": summary,
            "chain_file": str(result.chain_file),
        }

    except Exception as e:
        logger.error(f"Command execution failed: {e}")
        logger.debug("Full traceback:", exc_info=True)
        return {"success": False, "error": str(e)}


def _apply_cli_overrides(config: ConfigManager, args) -> None:
    """Apply command-line overrides to the loaded configuration."""
    if args.parameters is not None:
        config.config.pop("parameters", None)
        config.update_config("parameter_table", str(args.parameters.resolve()))
        logger.info(f"Using parameter table from command line: {args.parameters}")

    overrides = {
        "mcmc.seed": args.seed,
        "mcmc.iterations": args.iterations,
        "mcmc.adaptive_period": args.adaptive_period,
    }
    for key, value in overrides.items():
        if value is not None:
            config.update_config(key, value)
            logger.debug(f"Override {key} = {value}")


def _configure_logging(config: ConfigManager, args) -> None:
    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "ERROR"
    else:
        level = config.get_logging_level()
    configure_logging(level)
