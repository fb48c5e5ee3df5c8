"""Errors raised while resolving a Lua interpreter."""

from __future__ import annotations


class ResolutionError(RuntimeError):
    """Base class of every fatal resolution failure."""


class ConfigurationError(ResolutionError, ValueError):
    """Bad input: malformed range, out of range version component, unusable override."""


class NoInterpreterFoundError(ResolutionError):
    """The whole search path was walked and no candidate satisfied the constraints."""


class PreloadUnavailableError(ResolutionError):
    """The host requires the threading library to be preloaded, but none could be loaded."""


__all__ = [
    "ConfigurationError",
    "NoInterpreterFoundError",
    "PreloadUnavailableError",
    "ResolutionError",
]
