"""Walk the search path and propose the executables that look like a Lua interpreter."""

from __future__ import annotations

import logging
import os
import re
from contextlib import suppress
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from ._compat import fs_path_id, is_executable

if TYPE_CHECKING:
    from collections.abc import Generator, Iterable, Mapping

LOGGER = logging.getLogger(__name__)

PRE_RELEASE = re.compile(r"[._-](?:alpha|beta|dev)[0-9._-]*$")
VERSION_SUFFIX = re.compile(r"[0-9._-]+$")


class Family(Enum):
    REFERENCE = "lua"
    JIT = "luajit"


class NamePattern(NamedTuple):
    text: str
    prefix: bool
    family: Family

    def matches(self, name: str) -> bool:
        return name.startswith(self.text) if self.prefix else name == self.text


REFERENCE_PATTERNS = (
    NamePattern("lua", prefix=False, family=Family.REFERENCE),
    NamePattern("lua5", prefix=True, family=Family.REFERENCE),
    NamePattern("lua-5", prefix=True, family=Family.REFERENCE),
)
JIT_PATTERNS = (NamePattern("luajit", prefix=True, family=Family.JIT),)


def normalize_name(name: str) -> str:
    """Strip a pre-release tag and then every trailing version-like suffix, e.g. ``lua5.4-beta`` -> ``lua``."""
    name = PRE_RELEASE.sub("", name)
    return VERSION_SUFFIX.sub("", name)


def family_of(name: str) -> Family | None:
    normalized = normalize_name(name)
    for family in Family:
        if family.value == normalized:
            return family
    return None


def get_paths(env: Mapping[str, str]) -> Generator[Path, None, None]:
    path = env.get("PATH", None)
    if path is None:
        try:
            path = os.confstr("CS_PATH")
        except (AttributeError, ValueError):
            path = os.defpath
    if path:
        for p in map(Path, path.split(os.pathsep)):
            if str(p) == os.curdir:
                p = Path.cwd()
            with suppress(OSError):
                if p.is_dir() and os.access(p, os.R_OK | os.X_OK):
                    yield p.absolute()


class LazyPathDump:
    def __init__(self, pos: int, path: Path, env: Mapping[str, str]) -> None:
        self.pos = pos
        self.path = path
        self.env = env

    def __repr__(self) -> str:
        content = f"discover PATH[{self.pos}]={self.path}"
        if self.env.get("LUAENV_DEBUG"):
            content += " with =>"
            with suppress(OSError):
                for file_path in sorted(self.path.iterdir()):
                    if family_of(file_path.name) is not None:
                        content += f" {file_path.name}"
        return content


class CandidateEnumerator:
    """Proposes ``(path, family)`` pairs directory by directory, in search path order."""

    def __init__(self, *, include_reference: bool = True, include_jit: bool = True) -> None:
        self.patterns: tuple[NamePattern, ...] = ()
        if include_reference:
            self.patterns += REFERENCE_PATTERNS
        if include_jit:
            self.patterns += JIT_PATTERNS

    def find(self, directory: Path) -> Generator[tuple[Path, Family], None, None]:
        """All matching executables of one directory: pattern by pattern, names sorted within a pattern."""
        try:
            names = sorted(entry.name for entry in os.scandir(directory))
        except OSError as exception:
            LOGGER.debug("cannot list %s: %r", directory, exception)
            return
        for pattern in self.patterns:
            for name in names:
                if not pattern.matches(name):
                    continue
                family = family_of(name)
                if family is not pattern.family:
                    LOGGER.debug("ignore %s, not a %s interpreter name", name, pattern.family.value)
                    continue
                exe = directory / name
                if is_executable(exe):
                    yield exe, family

    def iter_candidates(
        self,
        paths: Iterable[Path],
        env: Mapping[str, str] | None = None,
    ) -> Generator[tuple[Path, Family], None, None]:
        env = os.environ if env is None else env
        if not self.patterns:
            return
        seen: set[str] = set()
        for pos, path in enumerate(paths):
            LOGGER.debug(LazyPathDump(pos, path, env))
            for exe, family in self.find(path):
                exe_id = fs_path_id(str(exe))
                if exe_id in seen:
                    continue
                seen.add(exe_id)
                yield exe, family


__all__ = [
    "CandidateEnumerator",
    "Family",
    "LazyPathDump",
    "NamePattern",
    "family_of",
    "get_paths",
    "normalize_name",
]
