"""Reading and summarising chain files written by ``ChainWriter``."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from blockmcmc.io.chain_writer import LNLIKE_COLUMN, SAMPNO_COLUMN
from blockmcmc.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

SUMMARY_QUANTILES = (0.025, 0.5, 0.975)


@log_performance(threshold=1.0)
def load_chain(path: str | Path, burnin: int = 0, thin: int = 1) -> pd.DataFrame:
    """Load a chain file.

    Parameters
    ----------
    path : str or Path
        Chain CSV file.
    burnin : int
        Rows with ``sampno <= burnin`` are dropped.
    thin : int
        Keep every ``thin``-th remaining row.

    Returns
    -------
    pd.DataFrame
        One row per recorded sample, columns ``sampno, <names>, lnlike``.
    """
    if thin < 1:
        raise ValueError(f"thin must be >= 1, got {thin}")

    chain = pd.read_csv(path)
    missing = {SAMPNO_COLUMN, LNLIKE_COLUMN} - set(chain.columns)
    if missing:
        raise ValueError(f"{path} is not a chain file: missing columns {sorted(missing)}")

    chain = chain[chain[SAMPNO_COLUMN] > burnin]
    chain = chain.iloc[::thin].reset_index(drop=True)
    logger.debug(f"Loaded {len(chain)} samples from {path}")
    return chain


def parameter_columns(chain: pd.DataFrame) -> list[str]:
    """Parameter columns of a chain, in file order."""
    return [c for c in chain.columns if c not in (SAMPNO_COLUMN, LNLIKE_COLUMN)]


def summarize_chain(
    chain: pd.DataFrame,
    parameter_names: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Posterior summary of a loaded chain.

    Returns
    -------
    dict
        ``{"n_samples", "parameters": {name: {mean, std, q2.5, q50, q97.5}},
        "max_lnlike": {"sampno", "lnlike", "values"}}``
    """
    names = list(parameter_names) if parameter_names is not None else parameter_columns(chain)
    summary: dict[str, Any] = {"n_samples": int(len(chain)), "parameters": {}}
    if chain.empty:
        return summary

    for name in names:
        column = chain[name]
        stats = {"mean": float(column.mean()), "std": float(column.std())}
        for q in SUMMARY_QUANTILES:
            stats[f"q{q * 100:g}"] = float(column.quantile(q))
        summary["parameters"][name] = stats

    best = chain.loc[chain[LNLIKE_COLUMN].idxmax()]
    summary["max_lnlike"] = {
        "sampno": int(best[SAMPNO_COLUMN]),
        "lnlike": float(best[LNLIKE_COLUMN]),
        "values": {name: float(best[name]) for name in names},
    }
    return summary
