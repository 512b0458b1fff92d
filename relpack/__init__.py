"""Deterministic release packager."""

__version__ = "0.1.0"
