"""Versioned project documentation built from GitHub repositories."""

__version__ = "0.1.0"
