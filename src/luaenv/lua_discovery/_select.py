"""Pick the one probed candidate that best satisfies the requested ranges."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._candidates import Family
from ._errors import NoInterpreterFoundError
from ._range import VersionRange, parse_api_range, parse_jit_range, parse_release_range
from ._version import ZERO, Version

if TYPE_CHECKING:
    from collections.abc import Iterable

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    path: str
    family: Family
    api: Version = ZERO
    release: Version = ZERO

    def __str__(self) -> str:
        return f"{self.family.value}({self.path}, api={self.api.api_str}, release={self.release})"


class SelectionPolicy:
    def __init__(
        self,
        api_range: VersionRange | None = None,
        release_range: VersionRange | None = None,
        jit_range: VersionRange | None = None,
    ) -> None:
        self.api_range = parse_api_range(None) if api_range is None else api_range
        self.release_range = parse_release_range(None) if release_range is None else release_range
        self.jit_range = parse_jit_range(None) if jit_range is None else jit_range

    def accepts_api(self, api: Version) -> bool:
        return api.api != 0 and self.api_range.contains_api(api)

    def accepts(self, candidate: Candidate) -> bool:
        if not self.accepts_api(candidate.api):
            return False
        if not self.release_range.excluded and self.release_range.contains(candidate.release):
            return True
        return (
            candidate.family is Family.JIT
            and not self.jit_range.excluded
            and self.jit_range.contains(candidate.release)
        )

    @staticmethod
    def prefers(best: Candidate, candidate: Candidate) -> bool:
        """Higher API first, then a strictly higher release; on a tie the earlier candidate stays."""
        return candidate.api.api >= best.api.api and candidate.release.encoded > best.release.encoded

    def select(self, candidates: Iterable[Candidate]) -> Candidate:
        best: Candidate | None = None
        for candidate in candidates:
            if not self.accepts(candidate):
                LOGGER.info("rejected %s", candidate)
                continue
            if best is None or self.prefers(best, candidate):
                LOGGER.info("accepted %s", candidate)
                best = candidate
            else:
                LOGGER.debug("kept %s over %s", best, candidate)
        if best is None:
            msg = (
                f"found no Lua interpreter with API within {self.api_range} and release within "
                f"{self.release_range} (LuaJIT release within {self.jit_range})"
            )
            raise NoInterpreterFoundError(msg)
        return best

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(api={self.api_range}, release={self.release_range}, "
            f"jit={self.jit_range})"
        )


__all__ = [
    "Candidate",
    "SelectionPolicy",
]
