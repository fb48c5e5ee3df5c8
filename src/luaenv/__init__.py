from __future__ import annotations

from .lua_discovery import Resolution, resolve_interpreter

__version__ = "0.1.0"

__all__ = [
    "Resolution",
    "__version__",
    "resolve_interpreter",
]
