"""Configuration system for the blockmcmc package."""

from blockmcmc.config.parameter_space import ParameterRecord, ParameterSpace
from blockmcmc.config.manager import ConfigManager, load_run_config

__all__ = [
    # Configuration management
    "ConfigManager",
    "load_run_config",
    # Parameter space
    "ParameterRecord",
    "ParameterSpace",
]
