"""Integration tests for complete sampling runs."""
