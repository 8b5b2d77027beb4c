"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class LayoutError(ConfigurationError):
    """Raised when a fixed-width record layout disagrees with its published width."""
