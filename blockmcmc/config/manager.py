"""Configuration Management for blockmcmc
=======================================

YAML/JSON run configuration loading. A configuration holds the parameter
table (inline or as a CSV path), the ``mcmc`` settings, the optional
``multivariate`` settings, the output stem and the logging level.

Configuration errors are fatal: an unreadable file or an invalid section
raises ``MCMCConfigurationError`` before any sampling starts.
"""

import json
import os
from pathlib import Path
from typing import Any

import yaml

from blockmcmc.config.parameter_space import ParameterSpace
from blockmcmc.exceptions import MCMCConfigurationError
from blockmcmc.mcmc.config import MCMCConfig, MultivariateConfig
from blockmcmc.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_OUTPUT_STEM = "./blockmcmc_results/run"


class ConfigManager:
    """Configuration manager for sampling runs.

    Usage:
        config_manager = ConfigManager('run.yaml')
        mcmc_config = config_manager.get_mcmc_config()
        space = config_manager.get_parameter_space()
    """

    def __init__(
        self,
        config_file: str | Path | None = "blockmcmc_config.yaml",
        config_override: dict[str, Any] | None = None,
    ):
        """Initialize configuration manager.

        Parameters
        ----------
        config_file : str or Path
            Path to YAML/JSON configuration file
        config_override : dict, optional
            Configuration data used instead of loading from file
        """
        self.config_file = config_file
        self.config: dict[str, Any] = {}

        if config_override is not None:
            self.config = dict(config_override)
            logger.info("Configuration loaded from override data")
        else:
            self.load_config()

    @property
    def base_dir(self) -> Path:
        """Directory that relative paths in the configuration refer to."""
        if self.config_file is None or not Path(self.config_file).exists():
            return Path.cwd()
        return Path(self.config_file).resolve().parent

    def load_config(self) -> None:
        """Load and parse the YAML/JSON configuration file.

        Raises
        ------
        MCMCConfigurationError
            If the file is missing or cannot be parsed.
        """
        if self.config_file is None:
            raise MCMCConfigurationError("Configuration file path cannot be None")

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise MCMCConfigurationError(
                f"Configuration file not found: {self.config_file}",
                error_context={"path": str(config_path)},
            )

        file_extension = config_path.suffix.lower()
        try:
            with open(config_path, buffering=8192, encoding="utf-8") as f:
                if file_extension == ".json":
                    loaded = json.load(f)
                else:
                    loaded = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError, OSError) as e:
            raise MCMCConfigurationError(
                f"Cannot parse configuration file: {e}",
                error_context={"path": str(config_path)},
            ) from e

        if not isinstance(loaded, dict):
            raise MCMCConfigurationError(
                f"Configuration must be a mapping, got {type(loaded).__name__}",
                error_context={"path": str(config_path)},
            )
        self.config = loaded
        logger.info(f"Configuration loaded from: {self.config_file}")

        if "metadata" in self.config:
            version = self.config["metadata"].get("config_version", "Unknown")
            logger.info(f"Configuration version: {version}")

        if os.environ.get("BLOCKMCMC_VALIDATE_CONFIG", "true").lower() == "true":
            self._validate_config()

    def get_config(self) -> dict[str, Any]:
        """Get the current configuration dictionary."""
        return self.config

    def update_config(self, key: str, value: Any) -> None:
        """Update a configuration value using dot notation.

        Parameters
        ----------
        key : str
            Configuration key (supports dot notation like 'mcmc.seed')
        value : Any
            New value to set
        """
        keys = key.split(".")
        config_ref = self.config

        for k in keys[:-1]:
            if k not in config_ref or config_ref[k] is None:
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value

    def get_mcmc_config(self) -> MCMCConfig:
        """Validated ``mcmc`` section."""
        if "mcmc" not in self.config:
            raise MCMCConfigurationError("Missing required section: mcmc", option="mcmc")
        return MCMCConfig.from_dict(self.config["mcmc"])

    def get_multivariate_config(self) -> MultivariateConfig | None:
        """Validated ``multivariate`` section, or None for univariate proposals."""
        section = self.config.get("multivariate")
        if section is None:
            return None
        return MultivariateConfig.from_dict(section)

    def get_parameter_space(self) -> ParameterSpace:
        """Parameter space from inline ``parameters`` or a ``parameter_table`` CSV."""
        rows = self.config.get("parameters")
        table = self.config.get("parameter_table")
        if rows is not None and table is not None:
            raise MCMCConfigurationError(
                "Specify either 'parameters' or 'parameter_table', not both",
                option="parameters",
            )
        if rows is not None:
            if not isinstance(rows, list):
                raise MCMCConfigurationError(
                    "'parameters' must be a list of parameter rows", option="parameters"
                )
            return ParameterSpace.from_rows(rows)
        if table is not None:
            table_path = Path(table)
            if not table_path.is_absolute():
                table_path = self.base_dir / table_path
            return ParameterSpace.from_csv(table_path)
        raise MCMCConfigurationError(
            "Missing parameter definitions: provide 'parameters' or 'parameter_table'",
            option="parameters",
        )

    def get_output_stem(self) -> Path:
        """Output stem; the chain is written to ``<stem>_chain.csv``.

        A relative ``output.filename`` is resolved against ``base_dir``, like
        ``parameter_table``. The default stem stays relative to the working
        directory.
        """
        output = self.config.get("output") or {}
        filename = output.get("filename")
        if filename is None:
            return Path(DEFAULT_OUTPUT_STEM)
        stem = Path(filename)
        if not stem.is_absolute():
            stem = self.base_dir / stem
        return stem

    def get_logging_level(self) -> str:
        logging_section = self.config.get("logging") or {}
        return str(logging_section.get("level", "INFO"))

    def _validate_config(self) -> None:
        """Lightweight structural validation.

        Can be disabled by setting BLOCKMCMC_VALIDATE_CONFIG=false.
        """
        known_sections = {
            "metadata",
            "parameters",
            "parameter_table",
            "mcmc",
            "multivariate",
            "output",
            "logging",
        }
        unknown = sorted(set(self.config) - known_sections)
        if unknown:
            logger.warning(f"Unknown configuration sections: {unknown}")
        if "mcmc" not in self.config:
            logger.warning("Missing required section: mcmc")

        logger.debug("Configuration validation completed")


def load_run_config(config_path: str | Path) -> dict[str, Any]:
    """Load a run configuration from file.

    Parameters
    ----------
    config_path : str or Path
        Path to configuration file

    Returns
    -------
    dict
        Configuration dictionary
    """
    return ConfigManager(config_path).config
