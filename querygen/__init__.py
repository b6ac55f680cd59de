"""Synthetic devops query workload generator for time-series benchmarks."""

__version__ = "0.1.0"
