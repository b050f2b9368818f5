"""Unit tests for the buffered chain writer."""

import numpy as np
import pytest

from blockmcmc.exceptions import ChainWriteError
from blockmcmc.io.chain_writer import ChainSample, ChainWriter, chain_columns


def _lines(path):
    return path.read_text().splitlines()


class TestChainColumns:
    """Tests for the chain file header."""

    def test_header_layout(self):
        """Test sampno first and lnlike last."""
        assert chain_columns(["a", "b"]) == ["sampno", "a", "b", "lnlike"]

    def test_sample_row_round_trips_floats(self):
        """Test that written floats parse back exactly."""
        value = 0.1 + 0.2
        row = ChainSample(3, (value, -1e-300), -12.75).to_row()
        assert row[0] == "3"
        assert float(row[1]) == value
        assert float(row[2]) == -1e-300
        assert row[3] == "-12.75"

    def test_non_finite_values_written(self):
        """Test that -inf log-posteriors are representable."""
        row = ChainSample(1, (1.0,), float("-inf")).to_row()
        assert row[-1] == "-inf"


class TestChainWriter:
    """Tests for file creation, buffering and flushing."""

    def test_create_writes_header_only(self, temp_dir):
        """Test that a new chain file holds just the header."""
        path = temp_dir / "run_chain.csv"
        writer = ChainWriter(path, ["a", "b"], save_block=3)
        writer.create()
        assert _lines(path) == ["sampno,a,b,lnlike"]

    def test_create_makes_parent_directories(self, temp_dir):
        """Test that missing output directories are created."""
        path = temp_dir / "nested" / "deeper" / "run_chain.csv"
        ChainWriter(path, ["a"], save_block=1).create()
        assert path.exists()

    def test_create_truncates_existing_file(self, temp_dir):
        """Test that an old chain is replaced."""
        path = temp_dir / "run_chain.csv"
        path.write_text("old content\n1,2,3\n")
        ChainWriter(path, ["a"], save_block=1).create()
        assert _lines(path) == ["sampno,a,lnlike"]

    def test_flush_at_save_block(self, temp_dir):
        """Test that exactly save_block rows are flushed together."""
        path = temp_dir / "run_chain.csv"
        writer = ChainWriter(path, ["a"], save_block=3)
        writer.create()
        writer.record(1, np.array([0.5]), -1.0)
        writer.record(2, np.array([0.6]), -1.1)
        assert len(_lines(path)) == 1
        writer.record(3, np.array([0.7]), -1.2)
        assert len(_lines(path)) == 4
        assert writer.n_written == 3
        assert writer.buffer == []

    def test_context_manager_flushes_remainder(self, temp_dir):
        """Test that leftover rows are written on normal exit."""
        path = temp_dir / "run_chain.csv"
        with ChainWriter(path, ["a", "b"], save_block=4) as writer:
            for i in range(1, 7):
                writer.record(i, np.array([i, -i]), float(-i))
        lines = _lines(path)
        assert len(lines) == 7
        assert lines[1] == "1,1.0,-1.0,-1.0"
        assert lines[-1] == "6,6.0,-6.0,-6.0"
        assert writer.n_written == 6

    def test_context_manager_skips_flush_on_error(self, temp_dir):
        """Test that buffered rows are not written when the run fails."""
        path = temp_dir / "run_chain.csv"
        with pytest.raises(RuntimeError):
            with ChainWriter(path, ["a"], save_block=10) as writer:
                writer.record(1, np.array([0.0]), 0.0)
                raise RuntimeError("oracle failure")
        assert _lines(path) == ["sampno,a,lnlike"]

    def test_sampno_must_increase(self, temp_dir):
        """Test that sample numbers are strictly increasing."""
        writer = ChainWriter(temp_dir / "c.csv", ["a"], save_block=10)
        writer.create()
        writer.record(2, np.array([0.0]), 0.0)
        with pytest.raises(ValueError, match="increase"):
            writer.record(2, np.array([0.0]), 0.0)

    def test_value_count_checked(self, temp_dir):
        """Test that every row has one value per parameter."""
        writer = ChainWriter(temp_dir / "c.csv", ["a", "b"], save_block=10)
        writer.create()
        with pytest.raises(ValueError, match="Expected 2 values"):
            writer.record(1, np.array([0.0]), 0.0)

    def test_flush_before_create(self, temp_dir):
        """Test that flushing without a file is an error."""
        writer = ChainWriter(temp_dir / "c.csv", ["a"], save_block=10)
        with pytest.raises(ChainWriteError):
            writer.flush()

    def test_empty_flush_is_noop(self, temp_dir):
        """Test that flushing an empty buffer writes nothing."""
        path = temp_dir / "c.csv"
        writer = ChainWriter(path, ["a"], save_block=10)
        writer.create()
        assert writer.flush() == 0
        assert _lines(path) == ["sampno,a,lnlike"]

    def test_create_failure_raises_chain_write_error(self, temp_dir):
        """Test that an unwritable location raises ChainWriteError."""
        blocker = temp_dir / "not_a_dir"
        blocker.write_text("")
        writer = ChainWriter(blocker / "run_chain.csv", ["a"], save_block=1)
        with pytest.raises(ChainWriteError) as exc_info:
            writer.create()
        assert exc_info.value.path == blocker / "run_chain.csv"

    def test_flush_failure_keeps_buffer(self, temp_dir):
        """Test that a failed append leaves the file and buffer intact."""
        path = temp_dir / "run_chain.csv"
        writer = ChainWriter(path, ["a"], save_block=10)
        writer.create()
        writer.record(1, np.array([0.0]), 0.0)
        path.unlink()
        path.mkdir()
        with pytest.raises(ChainWriteError):
            writer.flush()
        assert len(writer.buffer) == 1
        assert writer.n_written == 0

    def test_failed_fsync_rolls_back_and_retry_writes_once(self, temp_dir, monkeypatch):
        """Test that a failed flush leaves no rows behind and can be retried."""
        path = temp_dir / "run_chain.csv"
        writer = ChainWriter(path, ["a"], save_block=10)
        writer.create()
        for i in range(1, 4):
            writer.record(i, np.array([float(i)]), -float(i))

        def failing_fsync(fd):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr("blockmcmc.io.chain_writer.os.fsync", failing_fsync)
        with pytest.raises(ChainWriteError):
            writer.flush()
        assert _lines(path) == ["sampno,a,lnlike"]
        assert len(writer.buffer) == 3

        monkeypatch.undo()
        assert writer.flush() == 3
        sampnos = [int(line.split(",")[0]) for line in _lines(path)[1:]]
        assert sampnos == [1, 2, 3]
        assert writer.n_written == 3

    def test_invalid_save_block(self, temp_dir):
        """Test that save_block must be positive."""
        with pytest.raises(ValueError):
            ChainWriter(temp_dir / "c.csv", ["a"], save_block=0)
