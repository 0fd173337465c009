from __future__ import annotations


class FmForgeError(Exception):
    """Base error for the fmforge library."""


class InvalidConfigError(FmForgeError):
    """Raised when a config, label or preset cannot be parsed or validated."""
