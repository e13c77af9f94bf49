"""Vibecurb — find hardcoded secrets and unsafe network code."""

__version__ = "0.1.0"
