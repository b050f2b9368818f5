"""Statistical validation tests for the samplers."""
