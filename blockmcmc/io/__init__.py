"""Chain file input/output."""

from blockmcmc.io.chain_reader import load_chain, parameter_columns, summarize_chain
from blockmcmc.io.chain_writer import ChainSample, ChainWriter, chain_columns

__all__ = [
    "ChainWriter",
    "ChainSample",
    "chain_columns",
    "load_chain",
    "parameter_columns",
    "summarize_chain",
]
