"""
Setup Configuration for blockmcmc
=================================

setup.py with dependency groups, installation options and entry point
configuration.

Key Features:
- Core scientific stack (numpy, scipy, pandas, pyyaml)
- Development tooling extras (pip install blockmcmc[dev])
- CLI entry point registration
"""

import sys
from pathlib import Path
from setuptools import setup, find_packages

# Get the directory containing setup.py
HERE = Path(__file__).parent.resolve()

# Read the long description from README
def read_readme():
    """Read README file for long description."""
    readme_path = HERE / "README.md"
    if readme_path.exists():
        return readme_path.read_text(encoding="utf-8")
    return "Adaptive Metropolis-within-Gibbs MCMC sampler with block multivariate proposals"

# Read version from blockmcmc/__init__.py
def read_version():
    """Read version from package __init__.py."""
    init_path = HERE / "blockmcmc" / "__init__.py"
    if init_path.exists():
        with open(init_path, 'r') as f:
            for line in f:
                if line.startswith('__version__'):
                    # Extract version string
                    version = line.split('=')[1].strip().strip('"\'')
                    return version
    return "0.1.0"  # Fallback version

# Define dependency groups
INSTALL_REQUIRES = [
    # Core dependencies (always required)
    "numpy>=1.21.0",
    "scipy>=1.7.0",
    "pyyaml>=5.4.0",
    "pandas>=1.3.0",
]

EXTRAS_REQUIRE = {
    # Development dependencies
    "dev": [
        "pytest>=6.2.0",
        "pytest-cov>=2.12.0",
        "black>=21.0.0",
        "ruff>=0.0.290",
        "mypy>=0.910",
    ],

    # Test dependencies only
    "test": [
        "pytest>=6.2.0",
        "pytest-cov>=2.12.0",
    ],
}

# Combine extras for convenience
EXTRAS_REQUIRE["all"] = sorted(set(sum(EXTRAS_REQUIRE.values(), [])))

# Entry points for console scripts
ENTRY_POINTS = {
    "console_scripts": [
        "blockmcmc=blockmcmc.cli.main:main",
    ]
}

# Package metadata
PACKAGE_DATA = {
    "blockmcmc": [
        "config/templates/*.yaml",
    ]
}

# Classifiers for PyPI
CLASSIFIERS = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Topic :: Scientific/Engineering :: Mathematics",
    "License :: OSI Approved :: MIT License",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Operating System :: OS Independent",
]

# Keywords for PyPI search
KEYWORDS = [
    "mcmc", "metropolis", "gibbs", "adaptive mcmc", "bayesian",
    "parameter estimation", "scientific computing"
]


def check_python_version():
    """Check if Python version is supported."""
    if sys.version_info < (3, 10):
        print("Python 3.10 or higher is required")
        print(f"   Current version: {sys.version}")
        sys.exit(1)


if __name__ == "__main__":
    # Check Python version before installation
    check_python_version()

    # Run setup
    setup(
        # Basic package information
        name="blockmcmc",
        version=read_version(),
        description="Adaptive Metropolis-within-Gibbs MCMC sampler with block multivariate proposals",
        long_description=read_readme(),
        long_description_content_type="text/markdown",

        # Author and contact information
        author="blockmcmc Development Team",
        author_email="blockmcmc-dev@example.com",

        # Package discovery and inclusion
        packages=find_packages(exclude=["tests*", "docs*", "examples*"]),
        package_data=PACKAGE_DATA,
        include_package_data=True,

        # Dependencies
        install_requires=INSTALL_REQUIRES,
        extras_require=EXTRAS_REQUIRE,
        python_requires=">=3.10",

        # Entry points
        entry_points=ENTRY_POINTS,

        # Metadata for PyPI
        classifiers=CLASSIFIERS,
        keywords=KEYWORDS,
        license="MIT",

        # Build configuration
        zip_safe=False,  # Required for proper package data access
        platforms=["any"],
    )
