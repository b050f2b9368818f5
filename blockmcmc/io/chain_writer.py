"""Incremental CSV persistence of an MCMC chain.

The chain file starts with a header row::

    sampno,<parameter names>,lnlike

and grows by whole blocks of ``save_block`` rows. Each flush serialises the
block in memory and appends it with a single write followed by ``fsync``. A
failed append is truncated away, so the file only ever holds complete blocks.
"""

from __future__ import annotations

import csv
import io
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from blockmcmc.exceptions import ChainWriteError
from blockmcmc.utils.logging import get_logger

logger = get_logger(__name__)

SAMPNO_COLUMN = "sampno"
LNLIKE_COLUMN = "lnlike"


def chain_columns(parameter_names: Sequence[str]) -> list[str]:
    """Header of a chain file for the given parameter names."""
    return [SAMPNO_COLUMN, *parameter_names, LNLIKE_COLUMN]


def _format_value(value: float) -> str:
    # repr gives the shortest string that round-trips the float
    return repr(float(value))


@dataclass(frozen=True)
class ChainSample:
    """One recorded state of the chain."""

    sampno: int
    values: tuple[float, ...]
    log_posterior: float

    def to_row(self) -> list[str]:
        return [
            str(self.sampno),
            *(_format_value(v) for v in self.values),
            _format_value(self.log_posterior),
        ]


class ChainWriter:
    """Buffered, append-only writer for the chain file.

    Parameters
    ----------
    path : str or Path
        Chain file location. Parent directories are created.
    parameter_names : sequence of str
        Parameter names in parameter-space order.
    save_block : int
        Buffer capacity; the buffer is flushed when it reaches this size.

    Examples
    --------
    >>> with ChainWriter("run_chain.csv", ["a", "b"], save_block=100) as writer:
    ...     writer.record(1, np.array([0.1, 0.2]), -1.5)
    """

    def __init__(self, path: str | Path, parameter_names: Sequence[str], save_block: int):
        if save_block < 1:
            raise ValueError(f"save_block must be >= 1, got {save_block}")
        self.path = Path(path)
        self.parameter_names = list(parameter_names)
        self.save_block = save_block
        self.buffer: list[ChainSample] = []
        self.n_written = 0
        self.last_sampno: int | None = None
        self._created = False

    def __enter__(self) -> ChainWriter:
        self.create()
        return self

    def __exit__(self, exc_type, exc, tb):
        # Flush leftovers only on normal termination
        if exc_type is None:
            self.flush()
        return False

    @property
    def columns(self) -> list[str]:
        return chain_columns(self.parameter_names)

    def create(self) -> None:
        """Create (or truncate) the chain file and write the header row."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", newline="", encoding="utf-8") as f:
                csv.writer(f).writerow(self.columns)
        except OSError as e:
            raise ChainWriteError(f"Cannot create chain file: {e}", path=self.path) from e

        self.buffer.clear()
        self.n_written = 0
        self.last_sampno = None
        self._created = True
        logger.debug(f"Chain file created: {self.path}")

    def record(self, sampno: int, values: np.ndarray, log_posterior: float) -> None:
        """Buffer one sample and flush if the buffer is full."""
        if self.last_sampno is not None and sampno <= self.last_sampno:
            raise ValueError(
                f"sampno must increase: got {sampno} after {self.last_sampno}"
            )
        if len(values) != len(self.parameter_names):
            raise ValueError(
                f"Expected {len(self.parameter_names)} values, got {len(values)}"
            )
        self.buffer.append(
            ChainSample(int(sampno), tuple(float(v) for v in values), float(log_posterior))
        )
        self.last_sampno = int(sampno)
        if len(self.buffer) >= self.save_block:
            self.flush()

    def flush(self) -> int:
        """Append all buffered samples to the file.

        A flush is all-or-nothing: if the append fails, the file is truncated
        back to its previous length so that no partial block remains.

        Returns
        -------
        int
            Number of rows written.

        Raises
        ------
        ChainWriteError
            If the file cannot be appended. The buffer is kept so no sample
            is lost from memory, and the flush can be retried.
        """
        if not self._created:
            raise ChainWriteError("Chain file has not been created", path=self.path)
        if not self.buffer:
            return 0

        text = io.StringIO()
        writer = csv.writer(text)
        writer.writerows(sample.to_row() for sample in self.buffer)
        payload = text.getvalue()

        size_before = None
        try:
            size_before = self.path.stat().st_size
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            if size_before is not None:
                self._rollback(size_before)
            raise ChainWriteError(
                f"Cannot append to chain file: {e}",
                path=self.path,
                error_context={"pending_rows": len(self.buffer)},
            ) from e

        n_rows = len(self.buffer)
        self.n_written += n_rows
        logger.debug(
            f"Flushed {n_rows} samples (up to sampno {self.buffer[-1].sampno}) to {self.path}"
        )
        self.buffer.clear()
        return n_rows

    def _rollback(self, size: int) -> None:
        """Cut the file back to ``size`` bytes after a failed append."""
        try:
            if self.path.is_file() and self.path.stat().st_size > size:
                os.truncate(self.path, size)
                logger.warning(f"Partial block removed from {self.path}")
        except OSError as e:
            logger.error(f"Cannot roll back partial block in {self.path}: {e}")
