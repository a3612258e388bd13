"""Snapshot readers, configuration parsing, decomposition and output helpers for halo finding."""

__version__ = "0.1.0"