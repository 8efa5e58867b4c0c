"""Data pipeline and view models for the AFL team and player dashboard."""

__version__ = "0.1.0"
