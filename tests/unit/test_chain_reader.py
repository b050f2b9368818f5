"""Unit tests for loading and summarising chain files."""

import numpy as np
import pandas as pd
import pytest

from blockmcmc.io.chain_reader import load_chain, parameter_columns, summarize_chain
from blockmcmc.io.chain_writer import ChainWriter


@pytest.fixture
def chain_file(temp_dir):
    """Chain file with 10 samples of two parameters."""
    path = temp_dir / "run_chain.csv"
    with ChainWriter(path, ["a", "b"], save_block=4) as writer:
        for i in range(1, 11):
            writer.record(i * 2, np.array([float(i), 10.0 - i]), -float((i - 7) ** 2))
    return path


class TestLoadChain:
    """Tests for reading chain files back."""

    def test_load_all(self, chain_file):
        """Test reading every row."""
        chain = load_chain(chain_file)
        assert list(chain.columns) == ["sampno", "a", "b", "lnlike"]
        assert len(chain) == 10
        assert chain["sampno"].tolist() == list(range(2, 21, 2))

    def test_burnin_by_sampno(self, chain_file):
        """Test that burn-in drops rows with sampno <= burnin."""
        chain = load_chain(chain_file, burnin=10)
        assert chain["sampno"].tolist() == [12, 14, 16, 18, 20]

    def test_thinning(self, chain_file):
        """Test keeping every n-th row after burn-in."""
        chain = load_chain(chain_file, burnin=4, thin=3)
        assert chain["sampno"].tolist() == [6, 12, 18]

    def test_invalid_thin(self, chain_file):
        """Test that thin must be positive."""
        with pytest.raises(ValueError):
            load_chain(chain_file, thin=0)

    def test_not_a_chain_file(self, temp_dir):
        """Test that files without sampno/lnlike columns are rejected."""
        path = temp_dir / "other.csv"
        pd.DataFrame({"x": [1, 2]}).to_csv(path, index=False)
        with pytest.raises(ValueError, match="not a chain file"):
            load_chain(path)

    def test_header_only_chain(self, temp_dir):
        """Test reading a chain with no samples."""
        path = temp_dir / "empty_chain.csv"
        with ChainWriter(path, ["a"], save_block=5):
            pass
        assert len(load_chain(path)) == 0


class TestSummarizeChain:
    """Tests for posterior summaries."""

    def test_parameter_columns(self, chain_file):
        """Test that sampno and lnlike are excluded."""
        assert parameter_columns(load_chain(chain_file)) == ["a", "b"]

    def test_summary_statistics(self, chain_file):
        """Test means, quantiles and the maximum-posterior sample."""
        summary = summarize_chain(load_chain(chain_file))
        assert summary["n_samples"] == 10
        assert summary["parameters"]["a"]["mean"] == pytest.approx(5.5)
        assert summary["parameters"]["b"]["mean"] == pytest.approx(4.5)
        assert summary["parameters"]["a"]["q50"] == pytest.approx(5.5)
        assert set(summary["parameters"]["a"]) == {"mean", "std", "q2.5", "q50", "q97.5"}
        assert summary["max_lnlike"]["sampno"] == 14
        assert summary["max_lnlike"]["lnlike"] == 0.0
        assert summary["max_lnlike"]["values"] == {"a": 7.0, "b": 3.0}

    def test_summary_of_selected_parameters(self, chain_file):
        """Test restricting the summary to some parameters."""
        summary = summarize_chain(load_chain(chain_file), ["b"])
        assert list(summary["parameters"]) == ["b"]

    def test_empty_chain_summary(self, temp_dir):
        """Test summarising a chain without samples."""
        chain = pd.DataFrame(columns=["sampno", "a", "lnlike"])
        assert summarize_chain(chain) == {"n_samples": 0, "parameters": {}}
