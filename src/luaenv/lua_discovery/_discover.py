"""Abstract base class for Lua interpreter discovery mechanisms."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._builtin import Resolution


class Discover(ABC):
    """Discover the requested Lua interpreter and how it has to be launched."""

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._has_run = False
        self._resolution: Resolution | None = None
        self._env = env if env is not None else os.environ

    @abstractmethod
    def run(self) -> Resolution:
        """Resolve an interpreter.

        :returns: the winning interpreter together with its preload decision
        :raises ResolutionError: when no acceptable interpreter exists or the request is malformed

        """
        raise NotImplementedError

    @property
    def resolution(self) -> Resolution:
        """:returns: the resolution as returned by :meth:`run`, computed once per instance"""
        if self._has_run is False:
            self._resolution = self.run()
            self._has_run = True
        return self._resolution


__all__ = [
    "Discover",
]
