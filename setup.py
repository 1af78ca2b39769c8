"""Setup configuration for suite-runner."""

from setuptools import setup, find_packages

setup(
    name="suite-runner",
    version="0.1.0",
    description="Hierarchical test suites with ordered, fault-isolated event reporting",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pyyaml>=6.0",
        "click>=8.1.0",
        "loguru>=0.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "suite-runner=suite_runner.cli:main",
        ],
    },
)
