"""Compliance rule engine: decision-tree evaluation, conflict detection and layout."""

__version__ = "0.1.0"
