"""Argument Parser for the blockmcmc CLI
=====================================

Argument parsing for running a sampler from a configuration file.
"""

import argparse
from pathlib import Path

from blockmcmc import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser for the blockmcmc CLI.

    Returns:
        Configured ArgumentParser
    """
    epilog_text = f"""
Examples:
  %(prog)s --config run.yaml --posterior model:log_posterior
  %(prog)s --config run.yaml --posterior model:log_posterior --seed 7
  %(prog)s --config run.yaml --posterior model:log_posterior --parameters partab.csv
  %(prog)s --config run.yaml --posterior model:log_posterior --output-dir ./results
  %(prog)s --config run.yaml --posterior model:log_posterior --summary --verbose

Posterior:
  The --posterior reference names a function ``f(values) -> float`` that
  returns the log-posterior for a full parameter vector (fixed parameters
  included, in parameter-table order). Non-finite values reject the state.

Output:
  The chain is written to <output.filename>_chain.csv with the header
  sampno,<parameter names>,lnlike

blockmcmc v{__version__}
        """

    parser = argparse.ArgumentParser(
        prog="blockmcmc",
        description="Adaptive Metropolis-within-Gibbs MCMC sampler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog_text,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"blockmcmc v{__version__}",
    )

    # Configuration and I/O
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("./blockmcmc_config.yaml"),
        help="Path to configuration file (YAML or JSON) (default: %(default)s)",
    )

    parser.add_argument(
        "--posterior",
        type=str,
        required=True,
        help="Log-posterior function as 'package.module:function'",
    )

    parser.add_argument(
        "--parameters",
        type=Path,
        default=None,
        help="Parameter table CSV (overrides the parameters in the config)",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for the chain file (overrides the directory of output.filename)",
    )

    # Sampler overrides
    mcmc_group = parser.add_argument_group("MCMC Options")
    mcmc_group.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (overrides mcmc.seed)",
    )

    mcmc_group.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Number of post-adaptation iterations (overrides mcmc.iterations)",
    )

    mcmc_group.add_argument(
        "--adaptive-period",
        type=int,
        default=None,
        help="Number of adaptive iterations (overrides mcmc.adaptive_period)",
    )

    # Output options
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Log a posterior summary of the chain after sampling",
    )

    # Logging
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output",
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )

    return parser


def validate_args(args) -> bool:
    """Validate parsed command-line arguments.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command-line arguments

    Returns
    -------
    bool
        True if arguments are valid, False otherwise
    """
    if args.verbose and args.quiet:
        print("Error: Cannot specify both --verbose and --quiet")
        return False

    if ":" not in args.posterior:
        print("Error: --posterior must have the form 'module:function'")
        return False

    if args.iterations is not None and args.iterations < 0:
        print("Error: Iterations must be non-negative")
        return False

    if args.adaptive_period is not None and args.adaptive_period < 0:
        print("Error: Adaptive period must be non-negative")
        return False

    if not args.config.exists():
        print(f"Error: Configuration file not found: {args.config}")
        return False

    if args.parameters is not None and not args.parameters.exists():
        print(f"Error: Parameter table not found: {args.parameters}")
        return False

    return True
