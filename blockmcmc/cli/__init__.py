"""
Command Line Interface for blockmcmc
====================================

Runs a sampler from a YAML/JSON configuration and a log-posterior given as
an importable ``module:function`` reference.

Usage:
    blockmcmc --config run.yaml --posterior mymodel:log_posterior
    blockmcmc --config run.yaml --posterior mymodel:log_posterior --summary
"""

from blockmcmc.cli.args_parser import create_parser, validate_args
from blockmcmc.cli.commands import dispatch_command
from blockmcmc.cli.main import main

__all__ = [
    "main",
    "create_parser",
    "dispatch_command",
    "validate_args",
]
