"""
blockmcmc Test Suite
====================

Test Categories:
- Unit Tests: parameter space, proposals, acceptance, adaptation, chain I/O,
  configuration, logging and CLI
- Integration Tests: complete sampling runs written to disk
- Statistical Tests: acceptance-rate targeting and posterior moments

Requirements:
- pytest >= 6.2.0
- NumPy, SciPy, pandas, PyYAML
"""
