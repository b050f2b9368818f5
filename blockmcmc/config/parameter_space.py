"""Parameter Space Definition for the Sampler
==========================================

Defines ``ParameterRecord`` (one row of the parameter table) and
``ParameterSpace`` (the ordered, immutable collection the sampler explores).
The parameter space owns the index bookkeeping that the sampler needs:
which parameters are free, which block each free parameter belongs to, and
where that block sits inside the vector of free coordinates.

Parameter tables can be built from arrays, from row dictionaries (inline YAML
configuration) or from CSV files. CSV tables may use either the canonical
singular column names or the plural names of legacy tables::

    names,values,lower_bounds,upper_bounds,steps,fixed,block
    mu,8,0,20,0.5,0,1
    dp,0.5,0,1,0.05,0,1
    sigma,0.01,0,1,0.01,1,2
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from blockmcmc.config.types import (
    DEFAULT_BLOCK,
    PARAMETER_COLUMN_ALIASES,
    PARAMETER_COLUMNS,
)
from blockmcmc.exceptions import MCMCConfigurationError
from blockmcmc.utils.logging import get_logger

logger = get_logger(__name__)

_TRUE_STRINGS = {"1", "true", "t", "yes", "y"}
_FALSE_STRINGS = {"0", "false", "f", "no", "n", ""}


def _as_bool(value: Any, name: str) -> bool:
    """Interpret a ``fixed`` flag given as bool, number or string."""
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, float, np.integer, np.floating)):
        if isinstance(value, (float, np.floating)) and math.isnan(value):
            return False
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise MCMCConfigurationError(
        f"Cannot interpret fixed flag {value!r} for parameter '{name}'",
        option="fixed",
    )


def _normalize_block(value: Any) -> Any:
    """Map missing block labels to the default block and whole floats to int."""
    if value is None:
        return DEFAULT_BLOCK
    if isinstance(value, (float, np.floating)):
        if math.isnan(value):
            return DEFAULT_BLOCK
        if float(value).is_integer():
            return int(value)
        return float(value)
    if isinstance(value, np.integer):
        return int(value)
    return value


@dataclass(frozen=True)
class ParameterRecord:
    """Description of a single model parameter.

    Attributes
    ----------
    name : str
        Parameter name
    value : float
        Initial value, within ``[lower_bound, upper_bound]``
    lower_bound, upper_bound : float
        Inclusive bounds
    step : float
        Standard deviation of univariate proposals, in parameter units
    fixed : bool
        Fixed parameters keep their initial value for the whole run
    block : hashable
        Block identifier used by multivariate proposals
    """

    name: str
    value: float
    lower_bound: float
    upper_bound: float
    step: float = 0.1
    fixed: bool = False
    block: Any = DEFAULT_BLOCK

    def __post_init__(self):
        """Validate bounds, initial value and step."""
        if not self.name:
            raise MCMCConfigurationError("Parameter name cannot be empty", option="name")

        for attr in ("value", "lower_bound", "upper_bound", "step"):
            try:
                object.__setattr__(self, attr, float(getattr(self, attr)))
            except (TypeError, ValueError) as e:
                raise MCMCConfigurationError(
                    f"Parameter '{self.name}' has non-numeric {attr}: {getattr(self, attr)!r}",
                    option=attr,
                ) from e

        object.__setattr__(self, "fixed", _as_bool(self.fixed, self.name))
        object.__setattr__(self, "block", _normalize_block(self.block))

        if math.isnan(self.lower_bound) or math.isnan(self.upper_bound):
            raise MCMCConfigurationError(
                f"Parameter '{self.name}' has NaN bounds", option="lower_bound"
            )
        if self.lower_bound > self.upper_bound:
            raise MCMCConfigurationError(
                f"Invalid bounds for '{self.name}': "
                f"lower_bound ({self.lower_bound}) > upper_bound ({self.upper_bound})",
                option="lower_bound",
            )
        if not self.contains(self.value):
            raise MCMCConfigurationError(
                f"Initial value of '{self.name}' ({self.value}) lies outside "
                f"[{self.lower_bound}, {self.upper_bound}]",
                option="value",
            )
        if not self.fixed and not (self.step > 0.0 and math.isfinite(self.step)):
            raise MCMCConfigurationError(
                f"Free parameter '{self.name}' needs a positive finite step, got {self.step}",
                option="step",
            )

    def contains(self, x: float) -> bool:
        """Return True if ``x`` lies within the inclusive bounds."""
        return self.lower_bound <= x <= self.upper_bound


class ParameterSpace:
    """Ordered, immutable collection of parameter records.

    The order of records defines the layout of every parameter vector and
    the column order of the chain file.

    Examples
    --------
    >>> space = ParameterSpace.from_arrays(
    ...     names=["a", "b", "c"],
    ...     values=[0.0, 1.0, 2.0],
    ...     lower_bounds=[-5, -5, -5],
    ...     upper_bounds=[5, 5, 5],
    ...     steps=[0.1, 0.1, 0.1],
    ...     fixed=[False, True, False],
    ... )
    >>> space.free_names
    ['a', 'c']
    """

    def __init__(self, records: Sequence[ParameterRecord]):
        records = tuple(records)
        if not records:
            raise MCMCConfigurationError("Parameter space must contain at least one parameter")

        names = [r.name for r in records]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise MCMCConfigurationError(
                f"Duplicate parameter names: {duplicates}", option="name"
            )

        self.records = records
        self.names = names
        self.lower_bounds = np.array([r.lower_bound for r in records], dtype=float)
        self.upper_bounds = np.array([r.upper_bound for r in records], dtype=float)
        self.steps = np.array([r.step for r in records], dtype=float)
        self.fixed = np.array([r.fixed for r in records], dtype=bool)
        self.free_indices = np.flatnonzero(~self.fixed)

        if self.free_indices.size == 0:
            raise MCMCConfigurationError("All parameters are fixed; nothing to sample")

        self.free_names = [names[i] for i in self.free_indices]

        # Blocks in order of first appearance among free parameters
        self.blocks: list[Any] = []
        members: dict[Any, list[int]] = {}
        for i in self.free_indices:
            block = records[i].block
            if block not in members:
                self.blocks.append(block)
                members[block] = []
            members[block].append(int(i))
        self._block_indices = {b: np.array(idx, dtype=int) for b, idx in members.items()}

        free_position = {int(g): p for p, g in enumerate(self.free_indices)}
        self._block_positions = {
            b: np.array([free_position[g] for g in idx], dtype=int)
            for b, idx in members.items()
        }

        logger.debug(
            f"Parameter space: {len(self.names)} parameters, "
            f"{self.n_free} free, blocks={self.blocks}"
        )

    def __len__(self) -> int:
        return len(self.records)

    def __repr__(self) -> str:
        return (
            f"ParameterSpace(n_params={len(self)}, n_free={self.n_free}, "
            f"blocks={self.blocks})"
        )

    @property
    def n_free(self) -> int:
        return int(self.free_indices.size)

    def initial_values(self) -> np.ndarray:
        """Return a fresh copy of the initial parameter vector."""
        return np.array([r.value for r in self.records], dtype=float)

    def index_of(self, name: str) -> int:
        """Return the position of parameter ``name`` in the vector."""
        try:
            return self.names.index(name)
        except ValueError as e:
            raise KeyError(f"Unknown parameter: {name}") from e

    def block_indices(self, block: Any) -> np.ndarray:
        """Vector indices of the free parameters belonging to ``block``."""
        return self._block_indices[block]

    def block_positions(self, block: Any) -> np.ndarray:
        """Positions of ``block``'s free parameters within the free coordinates."""
        return self._block_positions[block]

    def in_bounds(self, values: np.ndarray) -> bool:
        """Check every free coordinate against its inclusive bounds."""
        free = np.asarray(values, dtype=float)[self.free_indices]
        lower = self.lower_bounds[self.free_indices]
        upper = self.upper_bounds[self.free_indices]
        return bool(np.all((free >= lower) & (free <= upper)))

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_arrays(
        cls,
        names: Sequence[str],
        values: Sequence[float],
        lower_bounds: Sequence[float],
        upper_bounds: Sequence[float],
        steps: Sequence[float] | None = None,
        fixed: Sequence[Any] | None = None,
        blocks: Sequence[Any] | None = None,
    ) -> ParameterSpace:
        """Build a parameter space from index-aligned arrays.

        Raises
        ------
        MCMCConfigurationError
            If the arrays do not all have the same length.
        """
        n = len(names)
        columns = {
            "values": values,
            "lower_bounds": lower_bounds,
            "upper_bounds": upper_bounds,
            "steps": steps if steps is not None else [0.1] * n,
            "fixed": fixed if fixed is not None else [False] * n,
            "blocks": blocks if blocks is not None else [DEFAULT_BLOCK] * n,
        }
        mismatched = {k: len(v) for k, v in columns.items() if len(v) != n}
        if mismatched:
            raise MCMCConfigurationError(
                f"Parameter arrays must all have length {n} (number of names)",
                error_context=mismatched,
            )

        records = [
            ParameterRecord(
                name=names[i],
                value=columns["values"][i],
                lower_bound=columns["lower_bounds"][i],
                upper_bound=columns["upper_bounds"][i],
                step=columns["steps"][i],
                fixed=columns["fixed"][i],
                block=columns["blocks"][i],
            )
            for i in range(n)
        ]
        return cls(records)

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> ParameterSpace:
        """Build a parameter space from row mappings (inline configuration)."""
        records = []
        for i, row in enumerate(rows):
            normalized = {PARAMETER_COLUMN_ALIASES.get(k, k): v for k, v in row.items()}
            missing = [
                k for k in ("name", "value", "lower_bound", "upper_bound") if k not in normalized
            ]
            if missing:
                raise MCMCConfigurationError(
                    f"Parameter row {i} is missing columns: {missing}",
                    option="parameters",
                )
            kwargs = {k: normalized[k] for k in PARAMETER_COLUMNS if k in normalized}
            records.append(ParameterRecord(**kwargs))
        return cls(records)

    @classmethod
    def from_dataframe(cls, table: pd.DataFrame) -> ParameterSpace:
        """Build a parameter space from a pandas parameter table."""
        table = table.rename(columns=PARAMETER_COLUMN_ALIASES)
        return cls.from_rows(table.to_dict(orient="records"))

    @classmethod
    def from_csv(cls, path: str | Path) -> ParameterSpace:
        """Read a parameter table from CSV.

        Raises
        ------
        MCMCConfigurationError
            If the file cannot be read.
        """
        path = Path(path)
        try:
            table = pd.read_csv(path)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise MCMCConfigurationError(
                f"Cannot read parameter table: {e}",
                option="parameter_table",
                error_context={"path": str(path)},
            ) from e
        logger.info(f"Parameter table loaded from: {path}")
        return cls.from_dataframe(table)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the parameter table with canonical column names."""
        return pd.DataFrame(
            [
                {
                    "name": r.name,
                    "value": r.value,
                    "lower_bound": r.lower_bound,
                    "upper_bound": r.upper_bound,
                    "step": r.step,
                    "fixed": r.fixed,
                    "block": r.block,
                }
                for r in self.records
            ],
            columns=list(PARAMETER_COLUMNS),
        )
